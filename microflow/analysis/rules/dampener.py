"""Legitimacy dampener.

An entity trading with many distinct counterparties looks more like a
real business than a shell in a laundering ring. If any entity in the
batch has more than 6 unique connections, the accumulated score is
scaled down by 0.7. Runs once, after every additive rule.
"""

from typing import Optional

from microflow.analysis.graph import EntityGraph
from microflow.analysis.scorer import round_half_up
from microflow.models import LegitimacyDampener


def apply_dampener(
    graph: EntityGraph,
    total: int,
    max_connections: int = 6,
    factor: float = 0.7,
) -> tuple[int, Optional[LegitimacyDampener]]:
    """Return the (possibly scaled) total and the dampener tag if it applied."""
    for entity, degree in graph.connection_degree.items():
        if degree > max_connections:
            tag = LegitimacyDampener(entity=entity, connections=degree, factor=factor)
            return round_half_up(total * factor), tag

    return total, None

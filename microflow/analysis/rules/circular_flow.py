"""Circular flow (layering) rule.

Looks for money that leaves an entity and comes back to it through at
least two intermediaries: A -> B -> C -> A. Only small and medium
transfers form edges, since layering schemes keep each hop below the
amounts that attract attention.

The search is an iterative depth-first walk with an explicit stack.
Paths never revisit an entity, so every candidate is a simple cycle, and
nodes are only expanded while the path is shorter than `max_depth`,
which caps cycles at 6 hops. The first confirmed cycle ends the whole
search: a batch contributes at most one circular_flow finding. This is a
triage heuristic, not an enumeration of every cycle in the batch.

Simple-path search grows combinatorially on dense acyclic graphs, so the
walk also stops after `max_expansions` stack pops across all start
nodes. An exhausted budget reports no cycle.
"""

import logging
from typing import Optional

from microflow.analysis.graph import EntityGraph
from microflow.models import CircularFlow, RuleResult

log = logging.getLogger("microflow.rules.circular_flow")


def find_cycle(
    adjacency: dict[str, list[str]],
    max_depth: int = 6,
    min_path_length: int = 3,
    max_expansions: int = 20_000,
) -> Optional[list[str]]:
    """Return the first cycle found as start..start, or None.

    None is also returned once `max_expansions` paths have been popped
    without confirming a cycle.
    """
    expansions = 0
    for start in adjacency:
        stack: list[tuple[str, list[str]]] = [(start, [start])]
        while stack and expansions < max_expansions:
            node, path = stack.pop()
            expansions += 1
            for nxt in adjacency.get(node, []):
                if nxt == start:
                    if len(path) >= min_path_length:
                        return path + [start]
                    continue
                if nxt not in path and len(path) < max_depth:
                    stack.append((nxt, path + [nxt]))
        if expansions >= max_expansions:
            log.warning(
                "Cycle search stopped after %d expansions without a match", expansions
            )
            break
    return None


def check_circular_flow(
    graph: EntityGraph,
    max_depth: int = 6,
    min_path_length: int = 3,
    max_expansions: int = 20_000,
    points: int = 60,
) -> RuleResult:
    """Detect a bounded-depth directed cycle through small/medium transfers."""
    cycle = find_cycle(graph.flow_adjacency, max_depth, min_path_length, max_expansions)

    if cycle is None:
        return RuleResult(score_delta=0, patterns=[])

    log.debug("Circular flow found: %s", " -> ".join(cycle))
    return RuleResult(score_delta=points, patterns=[CircularFlow(path=cycle)])

"""Network isolation rule.

Flags batches whose volume is confined to a closed group of entities.
The group is the batch's own entity set, so for any well-formed batch
every transfer counts as internal and the rule reduces to "at least 3
entities". It is kept as a coarse trigger on the ratio and group size.
"""

from microflow.analysis.graph import EntityGraph
from microflow.models import NetworkIsolation, RuleResult, TransactionRecord


def check_isolation(
    graph: EntityGraph,
    records: list[TransactionRecord],
    ratio_threshold: float = 0.8,
    min_entities: int = 3,
    points: int = 30,
) -> RuleResult:
    """Check whether more than `ratio_threshold` of transfers stay inside the group."""
    group = set(graph.entities)

    if len(group) < min_entities or not records:
        return RuleResult(score_delta=0, patterns=[])

    internal = sum(
        1 for r in records
        if r.sender_entity in group and r.receiver_entity in group
    )
    ratio = internal / len(records)

    if ratio > ratio_threshold:
        return RuleResult(
            score_delta=points,
            patterns=[NetworkIsolation(internal_ratio=ratio, entity_count=len(group))],
        )

    return RuleResult(score_delta=0, patterns=[])

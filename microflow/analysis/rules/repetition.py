"""Repetition pattern rule.

Flags pairs of entities that move the same amount bucket back and forth
abnormally often. More than 10 same-bucket transfers along one ordered
pair in a single batch looks like a scripted payment loop rather than
organic trade.
"""

from microflow.analysis.graph import EntityGraph
from microflow.models import Repetition, RuleResult


def check_repetition(
    graph: EntityGraph,
    threshold: int = 10,
    points: int = 25,
) -> RuleResult:
    """Flag ordered pairs whose count in any single bucket exceeds `threshold`.

    Buckets are checked in the order they first appeared for the pair and
    a pair stops contributing after its first qualifying bucket.
    """
    score_delta = 0
    patterns: list[Repetition] = []

    for (sender, receiver), buckets in graph.bucket_counts.items():
        for bucket, count in buckets.items():
            if count > threshold:
                score_delta += points
                patterns.append(
                    Repetition(sender=sender, receiver=receiver, bucket=bucket, count=count)
                )
                break

    return RuleResult(score_delta=score_delta, patterns=patterns)

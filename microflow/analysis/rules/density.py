"""Micro-transaction density rule.

Flags entity pairs exchanging small transfers far more often than the
rest of the batch. Launderers who "smurf" a sum into many small payments
tend to push them through the same channel in a short burst, while the
typical pair in a batch sees one or two small transfers.

The baseline is the mean number of small transfers per pair, over pairs
that have at least one. A pair fires when any 24-hour window starting at
one of its own transfers holds 3x that baseline or more.
"""

import logging
from bisect import bisect_left, bisect_right
from datetime import timedelta

from microflow.analysis.graph import EntityGraph
from microflow.models import DensitySpike, RuleResult

log = logging.getLogger("microflow.rules.density")


def check_density(
    graph: EntityGraph,
    window_hours: float = 24,
    multiplier: float = 3.0,
    points: int = 40,
) -> RuleResult:
    """Detect small-transfer bursts between the same ordered pair.

    Each pair contributes at most once: windows are evaluated in
    timestamp order and the first qualifying window wins. Every firing
    pair adds `points` to the score.
    """
    pair_counts = [len(ts) for ts in graph.small_timestamps.values()]
    avg_small = sum(pair_counts) / len(pair_counts) if pair_counts else 0.0

    if avg_small <= 0:
        return RuleResult(score_delta=0, patterns=[])

    window = timedelta(hours=window_hours)
    required = avg_small * multiplier
    score_delta = 0
    patterns: list[DensitySpike] = []

    for (sender, receiver), timestamps in graph.small_timestamps.items():
        ordered = sorted(timestamps)
        for start in ordered:
            # Window is inclusive on both ends
            in_window = bisect_right(ordered, start + window) - bisect_left(ordered, start)
            if in_window >= required:
                log.debug(
                    "Density spike %s->%s: %d small transfers in %sh (avg %.2f)",
                    sender, receiver, in_window, window_hours, avg_small,
                )
                score_delta += points
                patterns.append(
                    DensitySpike(sender=sender, receiver=receiver, window_count=in_window)
                )
                break

    return RuleResult(score_delta=score_delta, patterns=patterns)

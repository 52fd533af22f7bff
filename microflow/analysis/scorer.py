"""Score aggregation and classification.

Classification is DETERMINISTIC and shared by both scoring paths:
  - score >= 75 -> Critical
  - score >= 50 -> High
  - score >= 25 -> Moderate
  - otherwise   -> Low

Cluster analysis sums analyzer points; submission scoring combines four
externally supplied sub-scores with fixed weights. Both clamp to
[0, 100] before classifying.
"""

import math

from microflow.models import RuleResult, SubmissionScore, SubScores

CLASSIFICATION_THRESHOLDS = (
    (75, "Critical"),
    (50, "High"),
    (25, "Moderate"),
)

SUB_SCORE_WEIGHTS = {
    "transaction_score": 0.35,
    "company_score": 0.25,
    "network_score": 0.30,
    "confidence_score": 0.10,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def clamp_score(points: float) -> int:
    """Clamp raw points into the 0-100 score range."""
    return max(0, min(100, int(points)))


def classify(score: int) -> str:
    """Map a clamped score to its classification tier."""
    for threshold, tier in CLASSIFICATION_THRESHOLDS:
        if score >= threshold:
            return tier
    return "Low"


def aggregate_results(
    rule_results: list[RuleResult],
) -> tuple[int, list]:
    """Combine analyzer results into a running total and ordered findings.

    Args:
        rule_results: RuleResult from each pattern analyzer, in run order.

    Returns:
        Tuple of (total_points, all_patterns). The total is NOT clamped
        here: the dampener still has to scale it.
    """
    total_points = 0
    all_patterns: list = []

    for result in rule_results:
        total_points += result.score_delta
        all_patterns.extend(result.patterns)

    return total_points, all_patterns


def score_submission(scores: SubScores) -> SubmissionScore:
    """Weighted risk score for externally assessed sub-scores."""
    weighted = sum(
        weight * getattr(scores, name) for name, weight in SUB_SCORE_WEIGHTS.items()
    )
    risk_score = clamp_score(round_half_up(weighted))

    return SubmissionScore(
        transaction_score=scores.transaction_score,
        company_score=scores.company_score,
        network_score=scores.network_score,
        confidence_score=scores.confidence_score,
        risk_score=risk_score,
        classification=classify(risk_score),
        summary=scores.summary,
    )

"""Weighted risk scoring for externally assessed submissions."""

from fastapi import APIRouter

from microflow.analysis.scorer import score_submission
from microflow.models import SubmissionScore, SubScores

router = APIRouter(prefix="/api")


@router.post("/submissions/score", response_model=SubmissionScore)
async def score(scores: SubScores) -> SubmissionScore:
    """Combine four 0-100 sub-scores into a classified risk score.

    Weights: transaction 0.35, company 0.25, network 0.30, confidence 0.10.
    Out-of-range sub-scores are rejected with 422.
    """
    return score_submission(scores)

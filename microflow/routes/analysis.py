"""Cluster analysis endpoints: run an analysis and browse past results."""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from microflow.analysis.engine import ClusterAnalyzer
from microflow.analysis.errors import BatchValidationError
from microflow.models import AnalysisRecord, AnalysisRequest, AnalysisResponse
from microflow.storage.memory import MemoryStore

log = logging.getLogger("microflow.routes.analysis")

router = APIRouter(prefix="/api")


def _get_engine(request: Request) -> ClusterAnalyzer:
    """Retrieve the cluster analyzer from application state."""
    return request.app.state.engine


def _get_store(request: Request) -> MemoryStore:
    """Retrieve the analysis store from application state."""
    return request.app.state.store


@router.post("/analysis", response_model=AnalysisResponse)
def analyze_cluster(
    batch: AnalysisRequest,
    request: Request,
) -> AnalysisResponse:
    """Score a batch of transactions as one cluster.

    The batch needs at least 2 records with a non-blank sender and
    receiver. The result is stored for later lookup; a storage failure
    is logged and the computed result is returned without an id.

    Declared sync so FastAPI runs the CPU-bound analysis in its
    threadpool instead of on the event loop.
    """
    engine = _get_engine(request)
    try:
        result = engine.analyze(batch.records)
    except BatchValidationError as exc:
        log.warning("Rejected batch: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    analysis_id: Optional[str] = str(uuid.uuid4())
    try:
        _get_store(request).add(
            AnalysisRecord(
                analysis_id=analysis_id,
                created_at=datetime.now(timezone.utc),
                records=batch.records,
                result=result,
            )
        )
    except Exception:
        log.exception("Failed to store analysis %s", analysis_id)
        analysis_id = None

    return AnalysisResponse.from_result(result, analysis_id)


@router.get("/analysis", response_model=List[AnalysisResponse])
async def list_analyses(
    request: Request,
    from_date: Optional[datetime] = Query(default=None),
    to_date: Optional[datetime] = Query(default=None),
) -> List[AnalysisResponse]:
    """List stored analyses, oldest first.

    Filters:
      - from_date: analyses created at or after this instant
      - to_date: analyses created at or before this instant
    """
    records = _get_store(request).get_all(since=from_date, until=to_date)
    return [AnalysisResponse.from_result(r.result, r.analysis_id) for r in records]


@router.get("/analysis/{analysis_id}", response_model=AnalysisResponse)
async def get_analysis(analysis_id: str, request: Request) -> AnalysisResponse:
    """Fetch a single stored analysis."""
    record = _get_store(request).get(analysis_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return AnalysisResponse.from_result(record.result, record.analysis_id)

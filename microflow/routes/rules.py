"""Analyzer tunables: read the live configuration or replace it.

The body of a PUT is a complete `AnalyzerConfig`. Pydantic rejects it
with a 422 before anything is swapped when a field is unknown or out of
bounds (batch limit below the minimum batch, non-positive cycle depth or
search budget, minimum cycle length above the depth cap). The minimum
batch size itself is fixed and cannot be set here.
"""

import logging

from fastapi import APIRouter, Request

from microflow.models import AnalyzerConfig

log = logging.getLogger("microflow.routes.rules")

router = APIRouter(prefix="/api")


@router.get("/rules", response_model=AnalyzerConfig)
async def get_rules(request: Request) -> AnalyzerConfig:
    """Return the analyzer configuration currently in use."""
    return request.app.state.config


@router.put("/rules", response_model=AnalyzerConfig)
async def update_rules(
    new_config: AnalyzerConfig,
    request: Request,
) -> AnalyzerConfig:
    """Swap in a validated analyzer configuration.

    The next analysis uses the new thresholds. Stored analyses keep the
    scores they were computed with.
    """
    current: AnalyzerConfig = request.app.state.config
    changed = {
        name: value
        for name, value in new_config.model_dump().items()
        if getattr(current, name) != value
    }
    if changed:
        log.info("Analyzer config updated: %s", changed)

    request.app.state.config = new_config
    request.app.state.engine.config = new_config
    return new_config

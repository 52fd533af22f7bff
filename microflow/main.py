"""Micro-Transaction Cluster Analysis API.

Scores batches of transactions for money-laundering-like structure:
micro-transaction density spikes, repetition, circular flows, and
network isolation, dampened for broadly connected entities. Also
combines externally assessed sub-scores into the same risk tiers.

Run with:
    python3 -m uvicorn microflow.main:app --host 0.0.0.0 --port 8000
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict

from fastapi import FastAPI

from microflow.analysis.engine import ClusterAnalyzer
from microflow.models import AnalyzerConfig
from microflow.routes import analysis, rules, submissions
from microflow.storage.memory import MemoryStore

log = logging.getLogger("microflow.main")

# Resolve the data/ directory relative to this file so the server works
# regardless of which directory uvicorn is launched from.
DATA_DIR = Path(os.environ.get("MICROFLOW_DATA_DIR", Path(__file__).parent.parent / "data"))

app = FastAPI(
    title="Micro-Transaction Cluster Analysis API",
    description=(
        "Structural anomaly scoring for transaction batches. "
        "Detects density spikes, repetition, circular flows, and "
        "network isolation, and classifies the cluster's risk."
    ),
    version="1.0.0",
)


def load_config(data_dir: Path = DATA_DIR) -> AnalyzerConfig:
    """Load tunable analyzer thresholds, or fall back to defaults."""
    config_path = data_dir / "rules_config.json"
    if config_path.exists():
        with open(config_path, "r") as f:
            config = AnalyzerConfig(**json.load(f))
        log.info("Loaded analyzer config from %s", config_path)
        return config
    log.info("No analyzer config at %s, using defaults", config_path)
    return AnalyzerConfig()


@app.on_event("startup")
async def startup() -> None:
    """Load configuration and initialize the analyzer and store."""
    config = load_config()

    store = MemoryStore()
    engine = ClusterAnalyzer(config=config)

    # Attach to app state for dependency injection in routes
    app.state.engine = engine
    app.state.store = store
    app.state.config = config


# Mount all API routers
app.include_router(analysis.router)
app.include_router(submissions.router)
app.include_router(rules.router)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy"}

"""In-memory storage for completed analyses.

Analyses are indexed by id for direct lookup and kept in insertion
order for history listings. All data lives in memory and is lost on
restart. The analyzer never reads from here: the store only records
what the route layer hands it after a result has been computed.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from microflow.models import AnalysisRecord


class MemoryStore:
    """In-memory store for analysis records."""

    def __init__(self) -> None:
        # dicts preserve insertion order, so this is also the history
        self._analyses: Dict[str, AnalysisRecord] = {}

    def add(self, record: AnalysisRecord) -> None:
        """Store an analysis under its id."""
        self._analyses[record.analysis_id] = record

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        """Return one analysis, or None if the id is unknown."""
        return self._analyses.get(analysis_id)

    def get_all(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[AnalysisRecord]:
        """Return all analyses, oldest first, optionally filtered by creation time.

        Naive bounds are read as UTC, matching how record timestamps are
        ingested.
        """
        if since is not None and since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        if until is not None and until.tzinfo is None:
            until = until.replace(tzinfo=timezone.utc)
        results: List[AnalysisRecord] = []
        for record in self._analyses.values():
            if since is not None and record.created_at < since:
                continue
            if until is not None and record.created_at > until:
                continue
            results.append(record)
        return results

"""Errors raised at the ingestion boundary."""


class BatchValidationError(ValueError):
    """The batch cannot be analyzed (too few usable records, or too many)."""

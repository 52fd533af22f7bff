"""Pydantic models for the cluster analysis API."""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AmountRange = Literal["small", "medium", "large", "very_large"]
TransactionPurpose = Literal["invoice", "salary", "contract", "unknown"]
Classification = Literal["Critical", "High", "Moderate", "Low"]

ARROW = "→"


class TransactionRecord(BaseModel):
    """A single transfer between two entities. Immutable once ingested."""
    model_config = ConfigDict(frozen=True)

    sender_entity: str
    receiver_entity: str
    amount_range: AmountRange
    timestamp: datetime
    transaction_purpose: TransactionPurpose

    @field_validator("sender_entity", "receiver_entity")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive and aware instants must stay comparable inside one batch
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class AnalysisRequest(BaseModel):
    """A batch of transactions to analyze as one cluster."""
    records: list[TransactionRecord]


# --- Pattern tags -----------------------------------------------------------


class DensitySpike(BaseModel):
    kind: Literal["density_spike"] = "density_spike"
    sender: str
    receiver: str
    window_count: int

    def render(self) -> str:
        return f"density_spike:{self.sender}{ARROW}{self.receiver}"

    def describe(self) -> Optional[str]:
        return (
            "Micro-transaction density spike detected on path "
            f"{self.sender}{ARROW}{self.receiver}"
        )


class Repetition(BaseModel):
    kind: Literal["repetition"] = "repetition"
    sender: str
    receiver: str
    bucket: AmountRange
    count: int

    def render(self) -> str:
        return (
            f"repetition:{self.sender}{ARROW}{self.receiver}:"
            f"{self.bucket}x{self.count}"
        )

    def describe(self) -> Optional[str]:
        return (
            f"Repetition pattern: {self.sender}{ARROW}{self.receiver} "
            f"{self.bucket}x{self.count}"
        )


class CircularFlow(BaseModel):
    kind: Literal["circular_flow"] = "circular_flow"
    path: list[str]  # start ... start

    def render(self) -> str:
        return "circular_flow:" + ARROW.join(self.path)

    def describe(self) -> Optional[str]:
        return "Circular flow detected: " + ARROW.join(self.path)


class NetworkIsolation(BaseModel):
    kind: Literal["network_isolation"] = "network_isolation"
    internal_ratio: float
    entity_count: int

    def render(self) -> str:
        return "network_isolation"

    def describe(self) -> Optional[str]:
        return (
            "Network isolation: entities transact primarily within a "
            "closed group"
        )


class LegitimacyDampener(BaseModel):
    kind: Literal["legitimacy_dampener_applied"] = "legitimacy_dampener_applied"
    entity: str
    connections: int
    factor: float

    def render(self) -> str:
        return "legitimacy_dampener_applied"

    def describe(self) -> Optional[str]:
        # Score adjustment, not a finding
        return None


PatternTag = Annotated[
    Union[DensitySpike, Repetition, CircularFlow, NetworkIsolation, LegitimacyDampener],
    Field(discriminator="kind"),
]


class RuleResult(BaseModel):
    """Output of an individual pattern analyzer."""
    score_delta: int  # Points to add to the cluster's running total
    patterns: list[PatternTag]


class AnalysisResult(BaseModel):
    """Outcome of analyzing one batch."""
    cluster_risk_score: int  # 0-100
    classification: Classification
    entities_involved: list[str]
    detected_patterns: list[PatternTag]


class AnalysisResponse(BaseModel):
    """Wire shape of an analysis, with pattern tags rendered to strings."""
    id: Optional[str] = None
    cluster_risk_score: int
    classification: Classification
    entities_involved: list[str]
    detected_patterns: list[str]
    pattern_descriptions: list[str]

    @classmethod
    def from_result(
        cls, result: AnalysisResult, analysis_id: Optional[str] = None
    ) -> "AnalysisResponse":
        descriptions = [tag.describe() for tag in result.detected_patterns]
        return cls(
            id=analysis_id,
            cluster_risk_score=result.cluster_risk_score,
            classification=result.classification,
            entities_involved=result.entities_involved,
            detected_patterns=[tag.render() for tag in result.detected_patterns],
            pattern_descriptions=[d for d in descriptions if d is not None],
        )


class AnalysisRecord(BaseModel):
    """A completed analysis kept by the store."""
    analysis_id: str
    created_at: datetime
    records: list[TransactionRecord]
    result: AnalysisResult


# --- Weighted sub-score path -------------------------------------------------


class SubScores(BaseModel):
    """Externally supplied sub-scores for a single submission."""
    transaction_score: float = Field(ge=0, le=100)
    company_score: float = Field(ge=0, le=100)
    network_score: float = Field(ge=0, le=100)
    confidence_score: float = Field(ge=0, le=100)
    summary: Optional[str] = None


class SubmissionScore(BaseModel):
    """Weighted risk score for a submission."""
    transaction_score: float
    company_score: float
    network_score: float
    confidence_score: float
    risk_score: int  # 0-100
    classification: Classification
    summary: Optional[str] = None


# --- Configuration ------------------------------------------------------------


# Smallest batch that can form a cluster. Not part of AnalyzerConfig.
MIN_BATCH_SIZE = 2


class AnalyzerConfig(BaseModel):
    """Tunable thresholds and point awards for all pattern analyzers.

    Unknown keys are rejected, so a misspelled field in a PUT body is a 422.
    """
    model_config = ConfigDict(extra="forbid")

    density_window_hours: float = 24
    density_multiplier: float = 3.0
    density_points: int = 40
    repetition_threshold: int = 10
    repetition_points: int = 25
    cycle_max_depth: int = Field(default=6, ge=1)
    cycle_min_path_length: int = Field(default=3, ge=1)
    cycle_max_expansions: int = Field(default=20_000, ge=1)
    cycle_buckets: list[AmountRange] = ["small", "medium"]
    circular_flow_points: int = 60
    isolation_ratio_threshold: float = 0.8
    isolation_min_entities: int = 3
    isolation_points: int = 30
    dampener_max_connections: int = 6
    dampener_factor: float = 0.7
    max_batch_size: int = Field(default=5000, ge=MIN_BATCH_SIZE)

    @model_validator(mode="after")
    def _cycle_bounds(self) -> "AnalyzerConfig":
        # Paths never grow past max_depth nodes, so a longer minimum never fires
        if self.cycle_min_path_length > self.cycle_max_depth:
            raise ValueError(
                f"cycle_min_path_length ({self.cycle_min_path_length}) cannot exceed "
                f"cycle_max_depth ({self.cycle_max_depth})"
            )
        return self

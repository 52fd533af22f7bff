"""Core cluster analysis orchestrator.

Builds the entity graph once per batch, then runs the additive pattern
rules over it:
  1. Density spike (+40 per pair)
  2. Repetition (+25 per pair)
  3. Circular flow (+60, once per batch)
  4. Network isolation (+30)

The legitimacy dampener runs after all of them, and the total is clamped
and classified. The engine keeps no state between calls besides its
config: the same batch always yields the same result.
"""

import logging

from microflow.analysis.errors import BatchValidationError
from microflow.analysis.graph import build_entity_graph
from microflow.analysis.rules.circular_flow import check_circular_flow
from microflow.analysis.rules.dampener import apply_dampener
from microflow.analysis.rules.density import check_density
from microflow.analysis.rules.isolation import check_isolation
from microflow.analysis.rules.repetition import check_repetition
from microflow.analysis.scorer import aggregate_results, clamp_score, classify
from microflow.models import MIN_BATCH_SIZE, AnalysisResult, AnalyzerConfig, TransactionRecord

log = logging.getLogger("microflow.engine")


class ClusterAnalyzer:
    """Scores a batch of transactions for laundering-like structure."""

    def __init__(self, config: AnalyzerConfig) -> None:
        self.config = config

    def prepare_batch(self, records: list[TransactionRecord]) -> list[TransactionRecord]:
        """Drop records with a blank sender or receiver and enforce batch size.

        Raises:
            BatchValidationError: fewer than MIN_BATCH_SIZE usable
                records remain, or the batch exceeds `max_batch_size`.
        """
        usable = [r for r in records if r.sender_entity and r.receiver_entity]
        dropped = len(records) - len(usable)
        if dropped:
            log.warning("Dropped %d record(s) with a blank sender or receiver", dropped)

        if len(usable) < MIN_BATCH_SIZE:
            raise BatchValidationError(
                f"At least {MIN_BATCH_SIZE} valid transaction records "
                f"are required, got {len(usable)}"
            )
        if len(usable) > self.config.max_batch_size:
            raise BatchValidationError(
                f"Batch of {len(usable)} records exceeds the limit of "
                f"{self.config.max_batch_size}"
            )
        return usable

    def analyze(self, records: list[TransactionRecord]) -> AnalysisResult:
        """Validate a batch and run every pattern rule over it."""
        records = self.prepare_batch(records)
        config = self.config

        graph = build_entity_graph(records, cycle_buckets=config.cycle_buckets)

        rule_results = [
            check_density(
                graph,
                window_hours=config.density_window_hours,
                multiplier=config.density_multiplier,
                points=config.density_points,
            ),
            check_repetition(
                graph,
                threshold=config.repetition_threshold,
                points=config.repetition_points,
            ),
            check_circular_flow(
                graph,
                max_depth=config.cycle_max_depth,
                min_path_length=config.cycle_min_path_length,
                max_expansions=config.cycle_max_expansions,
                points=config.circular_flow_points,
            ),
            check_isolation(
                graph,
                records,
                ratio_threshold=config.isolation_ratio_threshold,
                min_entities=config.isolation_min_entities,
                points=config.isolation_points,
            ),
        ]

        total, patterns = aggregate_results(rule_results)

        # Join point: dampening needs every additive rule's points
        total, dampener_tag = apply_dampener(
            graph,
            total,
            max_connections=config.dampener_max_connections,
            factor=config.dampener_factor,
        )
        if dampener_tag is not None:
            patterns.append(dampener_tag)

        score = clamp_score(total)
        classification = classify(score)

        log.info(
            "Analyzed %d records across %d entities: score=%d (%s), %d pattern(s)",
            len(records), len(graph.entities), score, classification, len(patterns),
        )

        return AnalysisResult(
            cluster_risk_score=score,
            classification=classification,
            entities_involved=graph.entities,
            detected_patterns=patterns,
        )

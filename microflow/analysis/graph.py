"""Entity graph construction.

Turns a batch of transaction records into the read-only views every
pattern analyzer works from. Entities are identified solely by name and
kept in first-appearance order (sender before receiver for each record),
so everything downstream iterates deterministically.

Views:
  - small_timestamps: (sender, receiver) -> timestamps of small transfers
  - bucket_counts: (sender, receiver) -> amount bucket -> count
  - flow_adjacency: sender -> ordered unique receivers, restricted to the
    cycle buckets (small/medium by default)
  - connection_degree: entity -> number of unique counterparties,
    ignoring direction and bucket
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from microflow.models import TransactionRecord

Pair = Tuple[str, str]

DEFAULT_CYCLE_BUCKETS = ("small", "medium")


@dataclass(frozen=True)
class EntityGraph:
    entities: List[str]
    record_count: int
    small_timestamps: Dict[Pair, List[datetime]]
    bucket_counts: Dict[Pair, Dict[str, int]]
    flow_adjacency: Dict[str, List[str]]
    connection_degree: Dict[str, int]


def build_entity_graph(
    records: List[TransactionRecord],
    cycle_buckets: Iterable[str] = DEFAULT_CYCLE_BUCKETS,
) -> EntityGraph:
    """Build all adjacency views for a batch in a single pass."""
    cycle_buckets = set(cycle_buckets)

    # dict keys double as ordered sets
    entities: Dict[str, None] = {}
    small_timestamps: Dict[Pair, List[datetime]] = {}
    bucket_counts: Dict[Pair, Dict[str, int]] = {}
    flow_adjacency: Dict[str, Dict[str, None]] = {}
    neighbours: Dict[str, set] = {}

    for record in records:
        sender = record.sender_entity
        receiver = record.receiver_entity
        pair = (sender, receiver)

        entities.setdefault(sender, None)
        entities.setdefault(receiver, None)

        if record.amount_range == "small":
            small_timestamps.setdefault(pair, []).append(record.timestamp)

        counts = bucket_counts.setdefault(pair, {})
        counts[record.amount_range] = counts.get(record.amount_range, 0) + 1

        if record.amount_range in cycle_buckets:
            flow_adjacency.setdefault(sender, {}).setdefault(receiver, None)

        neighbours.setdefault(sender, set()).add(receiver)
        neighbours.setdefault(receiver, set()).add(sender)

    return EntityGraph(
        entities=list(entities),
        record_count=len(records),
        small_timestamps=small_timestamps,
        bucket_counts=bucket_counts,
        flow_adjacency={src: list(targets) for src, targets in flow_adjacency.items()},
        connection_degree={entity: len(peers) for entity, peers in neighbours.items()},
    )

"""Shared fixtures for the test suite."""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from microflow.main import app
from microflow.models import AnalyzerConfig, TransactionRecord
from microflow.storage.memory import MemoryStore
from microflow.analysis.engine import ClusterAnalyzer


BASE_TIME = datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return AnalyzerConfig()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(config):
    return ClusterAnalyzer(config=config)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def make_record(
    sender="Vercetti Estate Holdings",
    receiver="Cherry Poppers Inc",
    amount="small",
    timestamp=None,
    minutes=0,
    purpose="invoice",
) -> TransactionRecord:
    """Build a record; `minutes` offsets from BASE_TIME when no timestamp is given."""
    if timestamp is None:
        ts = BASE_TIME + timedelta(minutes=minutes)
    else:
        ts = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    return TransactionRecord(
        sender_entity=sender,
        receiver_entity=receiver,
        amount_range=amount,
        timestamp=ts,
        transaction_purpose=purpose,
    )


def make_chain(*entities, amount="small", start_minutes=0) -> list[TransactionRecord]:
    """One transfer along each consecutive pair: make_chain("A", "B", "C") is A->B, B->C."""
    return [
        make_record(sender=a, receiver=b, amount=amount, minutes=start_minutes + i * 10)
        for i, (a, b) in enumerate(zip(entities, entities[1:]))
    ]


def make_repeated(sender, receiver, count, amount="small", spacing_minutes=30):
    """`count` transfers along one pair, `spacing_minutes` apart."""
    return [
        make_record(sender=sender, receiver=receiver, amount=amount, minutes=i * spacing_minutes)
        for i in range(count)
    ]


def to_payload(records: list[TransactionRecord]) -> dict:
    """Serialize records into an /api/analysis request body."""
    return {"records": [r.model_dump(mode="json") for r in records]}

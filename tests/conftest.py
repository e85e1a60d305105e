"""Shared fixtures: scripted LM, correction stores, temporary database, API client."""

from datetime import datetime, timedelta
from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient

from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.agents.classification.model import Correction
from taxxy.agents.classification.write_off import WriteOffAdvisor
from taxxy.database.correction_store import InMemoryCorrectionStore, SQLCorrectionStore
from taxxy.database.db_manager import TaxxyDBManager
from taxxy.llms.completion import CompletionClient

NOW = datetime(2026, 3, 1, 12, 0, 0)
OWNER = "user-a"
OTHER_OWNER = "user-b"


class FakeLM:
    """
    Stand-in for a dspy LM.

    Each call consumes the next scripted item; the last item repeats.
    Exception instances are raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self.responses: List[Any] = list(responses) or [""]
        self.calls: List[dict] = []

    def __call__(self, messages=None, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return [item]

    @property
    def last_prompt(self) -> Optional[str]:
        if not self.calls:
            return None
        return self.calls[-1]["messages"][-1]["content"]


def make_correction(
    description: str,
    owner: str = OWNER,
    original_purpose: str = "personal",
    corrected_purpose: str = "business",
    days_ago: float = 0,
    corrected_reason: str = "",
    original_reason: str = "",
) -> Correction:
    return Correction(
        owner=owner,
        transaction_description=description,
        original_purpose=original_purpose,
        corrected_purpose=corrected_purpose,
        original_reason=original_reason,
        corrected_reason=corrected_reason,
        timestamp=NOW - timedelta(days=days_ago),
    )


def make_client(lm: FakeLM) -> CompletionClient:
    return CompletionClient(lm=lm, max_retries=0, retry_delay=0)


@pytest.fixture
def store():
    return InMemoryCorrectionStore()


@pytest.fixture
def db(tmp_path):
    return TaxxyDBManager(tmp_path / "taxxy.db")


@pytest.fixture
def sql_store(db):
    return SQLCorrectionStore(db.Session)


@pytest.fixture
def fake_lm():
    return FakeLM(
        '{"tag": "software-subscription", "category": "software", "confidence": 0.8, '
        '"purpose": "business", "writeOff": {"isWriteOff": true, "reason": "Business software"}}'
    )


@pytest.fixture
def classifier(store, fake_lm):
    return TransactionClassifier(store, client=make_client(fake_lm), enable_tracing=False)


@pytest.fixture
def api_client(db, sql_store, fake_lm):
    """TestClient with the database and LM swapped for test doubles."""
    from api import dependencies
    from api.main import app

    client = make_client(fake_lm)
    app.dependency_overrides[dependencies.get_db_manager] = lambda: db
    app.dependency_overrides[dependencies.get_correction_store] = lambda: sql_store
    app.dependency_overrides[dependencies.get_completion_client] = lambda: client
    app.dependency_overrides[dependencies.get_classifier] = lambda: TransactionClassifier(
        sql_store, client=client, enable_tracing=False
    )
    app.dependency_overrides[dependencies.get_write_off_advisor] = lambda: WriteOffAdvisor(
        sql_store, client=client
    )

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-User-Id": OWNER}

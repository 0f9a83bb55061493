from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import pytest

from spendlog.services import ExpenseService
from spendlog.storage import JSONStore
from spendlog_api import create_app

FIXED_NOW = datetime(2024, 2, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path: Path) -> JSONStore:
    store = JSONStore(tmp_path / "data" / "expenses.json")
    store.ensure_initialized()
    return store


@pytest.fixture
def service(store: JSONStore) -> ExpenseService:
    return ExpenseService(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def lunch_payload() -> Dict[str, Any]:
    return {
        "amount": 42.50,
        "category": "Food",
        "description": "Test Lunch",
        "date": "2024-01-15T00:00:00Z",
    }


@pytest.fixture
def app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("SPENDLOG_DATA_DIR", raising=False)
    app = create_app(tmp_path / "api-data")
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()

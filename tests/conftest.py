"""Shared fixtures: a throwaway sqlite database per test with DAOs and services wired."""
from __future__ import annotations

import pytest

from meusaldo.database.db_manager import DatabaseManager
from meusaldo.main import build_services
from meusaldo.models.transaction import Transaction


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def services(db):
    return build_services(db)


@pytest.fixture
def make_tx():
    """Factory for Transaction objects with sensible defaults."""

    def _make(**overrides) -> Transaction:
        fields = {
            "description": "Internet",
            "amount": 100.0,
            "date": "2024-01-15",
            "type": "DEBIT",
            "account_id": "acc-1",
            "category_id": "cat-1",
        }
        fields.update(overrides)
        return Transaction(**fields)

    return _make

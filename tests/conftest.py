"""
Shared fixtures.

Everything runs against the in-memory store with the cheapest bcrypt
cost and no simulated delays.
"""

import time
from datetime import datetime
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.config import AppSettings, AuthSettings
from fintrack.identity import IdentityStore
from fintrack.ledger import LedgerStore
from fintrack.models import (
    Account,
    Category,
    Transaction,
    TransactionType,
    default_categories,
)
from fintrack.services.storage import InMemoryKeyValueStore
from fintrack.validation import TransactionValidator


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def auth_settings():
    return AuthSettings(
        login_delay_seconds=0,
        signup_delay_seconds=0,
        logout_delay_seconds=0,
        bcrypt_rounds=4,
    )


@pytest.fixture
def app_settings():
    return AppSettings()


@pytest.fixture
def identity(kv_store, audit_logger, auth_settings):
    return IdentityStore(kv_store, audit_logger, auth_settings)


@pytest.fixture
def ledger(kv_store, audit_logger, app_settings):
    return LedgerStore(kv_store, audit_logger, TransactionValidator(app_settings))


@pytest.fixture
def ana():
    return Account(id="acc-ana", email="a@x.com", name="Ana")


@pytest.fixture
def bruno():
    return Account(id="acc-bruno", email="b@x.com", name="Bruno")


@pytest.fixture
def categories():
    return {c.id: c for c in default_categories()}


@pytest.fixture
def make_transaction(categories):
    """Build a persisted-shape Transaction without going through a store."""
    counter = iter(range(1, 10_000))

    def _make(
        amount,
        category_id="cat1",
        when=None,
        description=None,
        category=None,
    ):
        category = category or categories[category_id]
        return Transaction(
            id=f"tx{next(counter)}",
            type=category.type,
            amount=Decimal(str(amount)),
            date=when or datetime.now(),
            category=category,
            description=description,
        )

    return _make


@pytest.fixture
def custom_category():
    def _make(cat_id, name, transaction_type=TransactionType.EXPENSE):
        return Category(id=cat_id, name=name, type=transaction_type)

    return _make


@pytest.fixture
def sao_paulo_time(monkeypatch):
    """Run the test with the process local time zone set to UTC-3."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/Sao_Paulo")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()

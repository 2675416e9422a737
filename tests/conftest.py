"""
Shared fixtures.

Tests run against the in-memory store with cheap password hashing and
no Gemini key, so nothing touches the disk or the network unless a test
asks for it.
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.audit import AuditLogger
from bookkeeping.auth import AccountStore
from bookkeeping.config import get_settings
from bookkeeping.models import ExpenseCategory, PaymentMethod, new_transaction
from bookkeeping.services.storage import MemoryKeyValueStore


TEST_HASH_ITERATIONS = 1_000
TEST_SESSION_ID = "browser-1"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings per test, independent of the developer's .env."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("PASSWORD_HASH_ITERATIONS", str(TEST_HASH_ITERATIONS))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def audit_logger(store):
    return AuditLogger(store)


@pytest.fixture
def account_store(store, audit_logger):
    return AccountStore(
        store, audit_logger,
        hash_iterations=TEST_HASH_ITERATIONS,
        session_id=TEST_SESSION_ID,
    )


@pytest.fixture
def sample_transactions():
    """A small March/April 2024 ledger."""
    return [
        new_transaction(
            "income", "Subscriber dues", Decimal("2000000"), date(2024, 3, 2),
            PaymentMethod.TRANSFER,
        ),
        new_transaction(
            "expense", "Office rent", Decimal("750000"), date(2024, 3, 5),
            PaymentMethod.CASH, ExpenseCategory.RENT,
        ),
        new_transaction(
            "expense", "Upstream bandwidth", Decimal("500000"), date(2024, 3, 15),
            PaymentMethod.TRANSFER, ExpenseCategory.ISP_DUES,
        ),
        new_transaction(
            "expense", "Technician salary", Decimal("250000"), date(2024, 3, 28),
            PaymentMethod.CASH, ExpenseCategory.SALARY,
        ),
        new_transaction(
            "income", "Voucher sales", Decimal("300000"), date(2024, 4, 1),
            PaymentMethod.CASH,
        ),
    ]

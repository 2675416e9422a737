"""
Tests for the key-value stores and the JSON list codec.
"""

import json
from decimal import Decimal

import pytest

from bookkeeping.audit import AUDIT_LOG_KEY, AuditEventListAdapter, AuditLogger
from bookkeeping.models import (
    Account,
    AccountListAdapter,
    AuditEventBuilder,
    AuditEventType,
    Customer,
    CustomerListAdapter,
    SubscriptionCategory,
    TransactionListAdapter,
    UserRole,
)
from bookkeeping.services.storage import (
    CORRUPT_SUFFIX,
    GoogleSheetsKeyValueStore,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    StorageError,
    load_json_list,
    save_json_list,
    user_key,
)
from bookkeeping.services.storage.local import CORRUPT_FILE_SUFFIX


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the key/value store."""

    def __init__(self):
        self.rows = [["key", "value"]]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = value

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.sheet = FakeWorksheet()

    def get_store_sheet(self):
        return self.sheet


class BrokenStore(MemoryKeyValueStore):
    def set(self, key, value):
        raise StorageError("disk full")


class TestUserKey:
    def test_namespacing(self):
        assert user_key("transactions", "amin") == "transactions_amin"
        assert user_key("customers", "budi") == "customers_budi"


class TestMemoryStore:
    """Tests for the dict-backed store."""

    def test_get_set_remove(self):
        store = MemoryKeyValueStore()
        assert store.get("users") is None

        store.set("users", "[]")
        assert store.get("users") == "[]"
        assert "users" in store

        store.remove("users")
        assert store.get("users") is None
        assert "users" not in store

    def test_remove_absent_key_is_not_an_error(self):
        MemoryKeyValueStore().remove("nothing")

    def test_initial_values_are_copied(self):
        initial = {"a": "1"}
        store = MemoryKeyValueStore(initial)
        store.set("b", "2")
        assert initial == {"a": "1"}
        assert sorted(store.keys()) == ["a", "b"]


class TestJsonFileStore:
    """Tests for the JSON file store."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "data" / "books.json"
        JsonFileKeyValueStore(path).set("users", "[1]")

        reopened = JsonFileKeyValueStore(path)
        assert reopened.get("users") == "[1]"
        assert json.loads(path.read_text(encoding="utf-8")) == {"users": "[1]"}

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "absent.json")
        assert store.get("users") is None
        assert store.keys() == []

    def test_corrupt_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "books.json"
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileKeyValueStore(path)
        assert store.keys() == []

        store.set("users", "[]")
        assert store.get("users") == "[]"

    def test_corrupt_file_survives_next_write(self, tmp_path):
        """A truncated file is moved aside before anything is written."""
        path = tmp_path / "books.json"
        original = '{"transactions_amin": "[]", "customers_amin": "[{\\"id\\"'
        path.write_text(original, encoding="utf-8")

        store = JsonFileKeyValueStore(path)
        store.set("users", "[]")

        backups = [p for p in tmp_path.iterdir() if p.name.startswith("books.json" + CORRUPT_FILE_SUFFIX)]
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == original
        assert json.loads(path.read_text(encoding="utf-8")) == {"users": "[]"}

    def test_non_object_file_is_moved_aside(self, tmp_path):
        path = tmp_path / "books.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonFileKeyValueStore(path).get("users") is None
        assert not path.exists()
        assert len(list(tmp_path.glob("books.json.corrupt-*"))) == 1

    def test_no_temp_file_left_behind(self, tmp_path):
        path = tmp_path / "books.json"
        store = JsonFileKeyValueStore(path)
        store.set("a", "1")
        store.remove("a")

        assert [p.name for p in tmp_path.iterdir()] == ["books.json"]
        assert store.get("a") is None


class TestGoogleSheetsStore:
    """Tests for the Google Sheets store against a fake worksheet."""

    def test_set_appends_then_updates(self):
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client)

        store.set("users", "[]")
        store.set("users", "[1]")

        assert client.sheet.rows == [["key", "value"], ["users", "[1]"]]
        assert store.get("users") == "[1]"

    def test_remove_and_keys(self):
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client)
        store.set("a", "1")
        store.set("b", "2")

        store.remove("a")
        store.remove("missing")

        assert store.keys() == ["b"]
        assert store.get("a") is None


class TestJsonListCodec:
    """Tests for load_json_list / save_json_list."""

    def test_absent_key_is_empty(self):
        assert load_json_list(MemoryKeyValueStore(), "users", AccountListAdapter) == []

    def test_round_trip_preserves_order_and_values(self, sample_transactions):
        store = MemoryKeyValueStore()
        key = user_key("transactions", "amin")

        save_json_list(store, key, TransactionListAdapter, sample_transactions)
        loaded = load_json_list(store, key, TransactionListAdapter)

        assert loaded == sample_transactions

    def test_round_trip_customers_and_accounts(self):
        store = MemoryKeyValueStore()
        customers = [
            Customer(name="Budi", phone="0812", amount=Decimal("150000.50")),
            Customer(
                name="Sari",
                phone="0813",
                address="Kp. Korod",
                subscription_category=SubscriptionCategory.STATIC,
                amount=Decimal("300000"),
            ),
        ]
        accounts = [
            Account(username="amin", password_hash="h1", role=UserRole.ADMIN),
            Account(username="kasir", password_hash="h2"),
        ]

        save_json_list(store, "customers_amin", CustomerListAdapter, customers)
        save_json_list(store, "users", AccountListAdapter, accounts)

        assert load_json_list(store, "customers_amin", CustomerListAdapter) == customers
        assert load_json_list(store, "users", AccountListAdapter) == accounts

    def test_invalid_json_falls_back_to_empty(self):
        store = MemoryKeyValueStore({"transactions_amin": "[{broken"})

        assert load_json_list(store, "transactions_amin", TransactionListAdapter) == []
        assert store.get("transactions_amin" + CORRUPT_SUFFIX) == "[{broken"

    def test_schema_mismatch_falls_back_to_empty_and_is_audited(self):
        raw = json.dumps([{"id": "1", "description": "x", "amount": -5, "type": "income", "date": "2024-03-01"}])
        store = MemoryKeyValueStore({"transactions_amin": raw})
        audit = AuditLogger(store)

        assert load_json_list(store, "transactions_amin", TransactionListAdapter, audit) == []

        events = load_json_list(store, AUDIT_LOG_KEY, AuditEventListAdapter)
        assert [e.event_type for e in events] == [AuditEventType.STORAGE_DECODE_FAILED]
        assert events[0].entity_id == "transactions_amin"
        assert store.get("transactions_amin.corrupt") == raw


class TestAuditLogger:
    """Tests for audit persistence."""

    def test_events_are_capped(self):
        store = MemoryKeyValueStore()
        audit = AuditLogger(store, max_events=3)
        for i in range(5):
            audit.log_external_service_error("gemini", f"error {i}")

        events = audit.recent_events()
        assert len(events) == 3
        assert events[0].error_message == "error 4"
        assert events[-1].error_message == "error 2"

    def test_local_only_logger(self):
        audit = AuditLogger()
        assert audit.log(AuditEventBuilder.logout("amin")) is True
        assert audit.recent_events() == []

    def test_storage_failure_is_not_raised(self):
        audit = AuditLogger(BrokenStore())
        assert audit.log(AuditEventBuilder.logout("amin")) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

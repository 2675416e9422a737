"""
Record Collections

A collection is the in-memory list of one account's records of one kind,
written through to "{collection}_{username}" on every change.

DESIGN DECISION: Mutators never edit the list in place. Each one builds
the new list, swaps it in, then persists it, so the in-memory state and
the stored value always describe the same list. Each mutator starts from
a fresh read, so the same account open in two browsers never loses the
other's changes.
"""

from typing import ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter

from bookkeeping.audit import AuditLogger
from bookkeeping.models import AuditEventBuilder, new_record_id
from bookkeeping.services.storage import (
    KeyValueStore,
    load_json_list,
    save_json_list,
    user_key,
)


RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordCollection(Generic[RecordT]):
    """Base class for per-account record lists."""

    collection_name: ClassVar[str]
    entity_type: ClassVar[str]
    adapter: ClassVar[TypeAdapter]

    def __init__(
        self,
        store: KeyValueStore,
        username: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._username = username
        self._audit = audit_logger or AuditLogger()
        self._records: list[RecordT] = []

    @property
    def key(self) -> str:
        return user_key(self.collection_name, self._username)

    @property
    def username(self) -> str:
        return self._username

    @property
    def records(self) -> list[RecordT]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def load(self) -> list[RecordT]:
        """Replace the in-memory list with what is stored."""
        self._records = load_json_list(self._store, self.key, self.adapter, self._audit)
        return self.records

    def get(self, record_id: str) -> Optional[RecordT]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add(self, record: RecordT) -> RecordT:
        """Append a record under a fresh id and persist. Returns the stored record."""
        self.load()
        stored = record.model_copy(update={"id": new_record_id()})
        self._replace([*self._records, stored])
        self._audit.log(AuditEventBuilder.record_added(
            self.entity_type, stored.id, actor=self._username,
            details=self._audit_details(stored),
        ))
        return stored

    def update(self, record: RecordT) -> bool:
        """
        Replace the record with the same id and persist.

        Returns False (and changes nothing) if the id is unknown.
        """
        self.load()
        if self.get(record.id) is None:
            return False
        self._replace([record if r.id == record.id else r for r in self._records])
        self._audit.log(AuditEventBuilder.record_updated(
            self.entity_type, record.id, actor=self._username,
            details=self._audit_details(record),
        ))
        return True

    def delete(self, record_id: str) -> bool:
        """
        Remove the record with this id and persist.

        An unknown id leaves the list unchanged but is still written through.
        Returns whether a record was removed.
        """
        self.load()
        remaining = [r for r in self._records if r.id != record_id]
        removed = len(remaining) != len(self._records)
        self._replace(remaining)
        if removed:
            self._audit.log(AuditEventBuilder.record_deleted(
                self.entity_type, record_id, actor=self._username
            ))
        return removed

    def _replace(self, records: list[RecordT]) -> None:
        self._records = records
        save_json_list(self._store, self.key, self.adapter, records)

    def _audit_details(self, record: RecordT) -> dict:
        return {}

"""Per-account record collections with write-through persistence."""

from bookkeeping.records.base import RecordCollection
from bookkeeping.records.customers import CustomerCollection
from bookkeeping.records.transactions import TransactionCollection

__all__ = [
    "CustomerCollection",
    "RecordCollection",
    "TransactionCollection",
]

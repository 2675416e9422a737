"""Transaction collection."""

from bookkeeping.models import Transaction, TransactionListAdapter
from bookkeeping.records.base import RecordCollection


class TransactionCollection(RecordCollection[Transaction]):
    """An account's income and expense transactions, stored in entry order."""

    collection_name = "transactions"
    entity_type = "transaction"
    adapter = TransactionListAdapter

    def _audit_details(self, record) -> dict:
        details = {
            "type": record.type,
            "amount": str(record.amount),
            "date": record.transaction_date.isoformat(),
        }
        if not record.is_income:
            details["category"] = record.category.value
        return details

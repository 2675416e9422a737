"""Customer collection."""

from bookkeeping.models import Customer, CustomerListAdapter
from bookkeeping.records.base import RecordCollection


class CustomerCollection(RecordCollection[Customer]):
    """An account's subscribers."""

    collection_name = "customers"
    entity_type = "customer"
    adapter = CustomerListAdapter

    def _audit_details(self, record: Customer) -> dict:
        return {
            "subscription_category": record.subscription_category.value,
            "amount": str(record.amount),
        }

"""
JSON list codec for stored collections.

Every collection (accounts, transactions, customers, audit log) is stored
as one JSON array under one key. Reading it back is where old or damaged
data shows up, so decoding never raises: a value that is not valid JSON,
or does not match the schema, is moved aside to "{key}.corrupt" and the
caller gets an empty list.
"""

from typing import TYPE_CHECKING, Any, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from bookkeeping.models.audit import AuditEventBuilder
from bookkeeping.services.storage.interface import KeyValueStore

if TYPE_CHECKING:
    from bookkeeping.audit.logger import AuditLogger


logger = structlog.get_logger(__name__)

CORRUPT_SUFFIX = ".corrupt"


def load_json_list(
    store: KeyValueStore,
    key: str,
    adapter: TypeAdapter,
    audit_logger: Optional["AuditLogger"] = None,
) -> list:
    """
    Decode the list stored under key.

    Returns [] when the key is absent or its value cannot be decoded.
    """
    raw = store.get(key)
    if raw is None or not raw.strip():
        return []

    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        error_message = _summarize(e)

    logger.warning(
        "storage_decode_failed",
        key=key,
        error=error_message,
        backup_key=key + CORRUPT_SUFFIX,
    )
    store.set(key + CORRUPT_SUFFIX, raw)
    if audit_logger is not None:
        audit_logger.log(AuditEventBuilder.storage_decode_failed(key, error_message))
    return []


def save_json_list(
    store: KeyValueStore,
    key: str,
    adapter: TypeAdapter,
    records: list[Any],
) -> None:
    """Encode records and replace the value stored under key."""
    payload = adapter.dump_json(records, by_alias=True)
    store.set(key, payload.decode("utf-8"))


def _summarize(error: ValidationError) -> str:
    # Invalid JSON surfaces as a single json_invalid error
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    prefix = f"{location}: " if location else ""
    return f"{prefix}{first.get('msg', str(error))} ({error.error_count()} error(s))"

"""
Stored Record Codec

Validates values read from the key-value store against pydantic
schemas before anything else in the application sees them.

Recovery rules:
- A key that is absent is simply empty.
- A value of the wrong shape (not a list where a list is expected)
  is treated as empty.
- Inside a list, individual records that fail validation are skipped
  and the rest are kept.

Every recovery is reported to the audit log.
"""

from typing import Any, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from fintrack.audit import AuditLogger
from fintrack.services.storage.interface import (
    KeyValueStoreInterface,
    MalformedStoredDataError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_record_list(
    key: str,
    raw: Any,
    model: type[ModelT],
) -> tuple[list[ModelT], int]:
    """
    Decode a stored list of records.

    Returns:
        (valid records in stored order, number of records dropped)

    Raises:
        MalformedStoredDataError: If the value is not a list at all
    """
    if raw is None:
        return [], 0

    if not isinstance(raw, list):
        raise MalformedStoredDataError(
            key, f"expected a list, found {type(raw).__name__}"
        )

    records: list[ModelT] = []
    dropped = 0
    for item in raw:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            # Skip malformed rows
            dropped += 1

    return records, dropped


def load_record_list(
    store: KeyValueStoreInterface,
    key: str,
    model: type[ModelT],
    audit_logger: Optional[AuditLogger] = None,
) -> list[ModelT]:
    """Read and decode a list of records, recovering to [] on bad data."""
    try:
        records, dropped = decode_record_list(key, store.get(key), model)
    except MalformedStoredDataError as e:
        if audit_logger:
            audit_logger.log_stored_data_recovered(key=key, reason=e.reason)
        return []

    if dropped and audit_logger:
        audit_logger.log_stored_data_recovered(
            key=key,
            reason=f"{dropped} invalid {model.__name__} record(s) skipped",
            dropped_records=dropped,
        )

    return records


def load_record(
    store: KeyValueStoreInterface,
    key: str,
    model: type[ModelT],
    audit_logger: Optional[AuditLogger] = None,
) -> Optional[ModelT]:
    """Read and decode a single record, recovering to None on bad data."""
    raw = store.get(key)
    if raw is None:
        return None

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        if audit_logger:
            audit_logger.log_stored_data_recovered(
                key=key,
                reason=f"invalid {model.__name__}: {e.error_count()} error(s)",
            )
        return None


def save_record_list(
    store: KeyValueStoreInterface,
    key: str,
    records: Sequence[BaseModel],
) -> None:
    store.set(key, [
        record.model_dump(mode="json", exclude_none=True)
        for record in records
    ])


def save_record(
    store: KeyValueStoreInterface,
    key: str,
    record: BaseModel,
) -> None:
    store.set(key, record.model_dump(mode="json", exclude_none=True))

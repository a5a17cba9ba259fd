"""Per-account transactions and categories."""

from fintrack.ledger.store import (
    LedgerStore,
    LedgerValidationError,
    categories_key,
    transactions_key,
)

__all__ = [
    "LedgerStore",
    "LedgerValidationError",
    "categories_key",
    "transactions_key",
]

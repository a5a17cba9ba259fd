"""
Ledger Store

Per-account transactions and categories, persisted under

- `transactions_<accountId>`  newest first
- `categories_<accountId>`    in creation order

The store holds the working view of exactly one account at a time.
`load()` is the only way to switch it; without a loaded account every
read is empty (categories fall back to the defaults) and every write
is a no-op.

DESIGN DECISION: Every write is validated here, not only on the form.
A draft with a non-positive amount, a missing or foreign category, or
a category of the wrong type never reaches storage.
"""

import uuid
from typing import Optional

from fintrack.audit import AuditLogger
from fintrack.models.account import Account
from fintrack.models.ledger import (
    Category,
    CategoryDraft,
    Transaction,
    TransactionDraft,
    TransactionType,
    TransactionUpdate,
    default_categories,
)
from fintrack.models.validation import ValidationIssue, ValidationResult
from fintrack.services.storage import (
    KeyValueStoreInterface,
    MalformedStoredDataError,
    StorageError,
    decode_record_list,
    load_record_list,
    save_record_list,
)
from fintrack.validation import TransactionValidator


class LedgerValidationError(Exception):
    """A draft failed validation. Carries the full result for display."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.errors)
        super().__init__(messages or "Validation failed")


def transactions_key(account_id: str) -> str:
    return f"transactions_{account_id}"


def categories_key(account_id: str) -> str:
    return f"categories_{account_id}"


class LedgerStore:
    """
    Transactions and categories of the logged-in account.
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        self._store = store
        self._audit = audit_logger
        self._validator = validator or TransactionValidator()
        self._account: Optional[Account] = None
        self._transactions: list[Transaction] = []
        self._categories: list[Category] = default_categories()

    @property
    def account(self) -> Optional[Account]:
        return self._account

    # -- session transitions --------------------------------------------------

    def load(self, account: Optional[Account]) -> None:
        """
        Switch the working view to `account`, or clear it with None.

        The previous account's data is dropped from memory entirely.
        """
        self._account = account

        if account is None:
            self._transactions = []
            self._categories = default_categories()
            return

        self._transactions = load_record_list(
            self._store, transactions_key(account.id), Transaction, self._audit
        )
        self._categories = self._load_categories(account.id)

        if self._audit:
            self._audit.log_ledger_loaded(
                account_id=account.id,
                transaction_count=len(self._transactions),
                category_count=len(self._categories),
            )

    def _load_categories(self, account_id: str) -> list[Category]:
        """
        Read the account's categories, seeding the defaults when the key
        is absent or nothing usable is stored under it.
        """
        key = categories_key(account_id)
        raw = self._store.get(key)

        try:
            categories, dropped = decode_record_list(key, raw, Category)
        except MalformedStoredDataError as e:
            if self._audit:
                self._audit.log_stored_data_recovered(key=key, reason=e.reason)
            categories, dropped = [], 0

        if dropped and self._audit:
            self._audit.log_stored_data_recovered(
                key=key,
                reason=f"{dropped} invalid Category record(s) skipped",
                dropped_records=dropped,
            )

        # An explicitly empty list is the user's data; keep it
        if categories or raw == []:
            return categories

        categories = default_categories()
        try:
            save_record_list(self._store, key, categories)
        except StorageError as e:
            # Seeded again on the next load
            if self._audit:
                self._audit.log_error(
                    error_type="category_seed_failed",
                    error_message=str(e),
                    details={"key": key},
                )
            return categories
        if self._audit:
            self._audit.log_categories_seeded(account_id, len(categories))
        return categories

    def _commit_transactions(self, transactions: list[Transaction]) -> None:
        """Write the new list, then adopt it. A failed write changes nothing."""
        save_record_list(self._store, transactions_key(self._account.id), transactions)
        self._transactions = transactions

    def _commit_categories(self, categories: list[Category]) -> None:
        save_record_list(self._store, categories_key(self._account.id), categories)
        self._categories = categories

    def _validate(self, draft: TransactionDraft) -> None:
        result = self._validator.validate(draft, self._categories)
        if result.has_errors:
            if self._audit:
                self._audit.log_validation_failed(
                    account_id=self._account.id,
                    entity_type="transaction",
                    issues=[issue.model_dump() for issue in result.errors],
                )
            raise LedgerValidationError(result)

    # -- reads ----------------------------------------------------------------

    def list_transactions(self) -> list[Transaction]:
        """Most recently added first."""
        return list(self._transactions)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def list_categories(self) -> list[Category]:
        return list(self._categories)

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def categories_for(self, transaction_type: TransactionType) -> list[Category]:
        """Categories usable for a transaction of the given type."""
        return [c for c in self._categories if c.type == transaction_type]

    # -- writes ---------------------------------------------------------------

    def add_transaction(self, draft: TransactionDraft) -> Optional[Transaction]:
        """
        Record a new transaction at the head of the list.

        Returns None when no account is loaded.

        Raises:
            LedgerValidationError: If the draft has validation errors
            StorageError: If the ledger could not be written
        """
        if self._account is None:
            return None

        self._validate(draft)

        transaction = Transaction(
            id=uuid.uuid4().hex,
            type=draft.type,
            amount=draft.amount,
            date=draft.date,
            category=self.get_category(draft.category.id),
            description=draft.description,
        )
        self._commit_transactions([transaction] + self._transactions)

        if self._audit:
            self._audit.log_transaction_added(
                account_id=self._account.id,
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=transaction.amount,
            )

        return transaction

    def update_transaction(
        self,
        transaction_id: str,
        update: TransactionUpdate,
    ) -> Optional[Transaction]:
        """
        Merge the explicitly set fields of `update` into a transaction.

        The merged record is validated as a whole, so changing only the
        type still checks it against the current category. Returns None
        for an unknown id or when no account is loaded.

        Raises:
            LedgerValidationError: If the merged record is invalid
            StorageError: If the ledger could not be written
        """
        if self._account is None:
            return None

        current = self.get_transaction(transaction_id)
        if current is None:
            return None

        changed = sorted(update.model_fields_set)
        merged = {
            "type": current.type,
            "amount": current.amount,
            "date": current.date,
            "category": current.category,
            "description": current.description,
        }
        for field in changed:
            value = getattr(update, field)
            # type, amount and date cannot be cleared, only replaced
            if value is None and field in ("type", "amount", "date"):
                continue
            merged[field] = value

        draft = TransactionDraft(**merged)
        self._validate(draft)

        updated = Transaction(
            id=current.id,
            type=draft.type,
            amount=draft.amount,
            date=draft.date,
            category=self.get_category(draft.category.id),
            description=draft.description,
        )
        self._commit_transactions([
            updated if t.id == transaction_id else t for t in self._transactions
        ])

        if self._audit:
            self._audit.log_transaction_updated(
                account_id=self._account.id,
                transaction_id=transaction_id,
                changed_fields=changed,
            )

        return updated

    def delete_transaction(self, transaction_id: str) -> bool:
        """Remove a transaction. Returns False if nothing was removed."""
        if self._account is None:
            return False

        remaining = [t for t in self._transactions if t.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return False

        self._commit_transactions(remaining)

        if self._audit:
            self._audit.log_transaction_deleted(self._account.id, transaction_id)

        return True

    def add_category(self, draft: CategoryDraft) -> Optional[Category]:
        """
        Append a user-defined category.

        Raises:
            LedgerValidationError: If a category of the same type already
                has this name (case-insensitive)
            StorageError: If the ledger could not be written
        """
        if self._account is None:
            return None

        name_key = draft.name.casefold()
        if any(
            c.type == draft.type and c.name.casefold() == name_key
            for c in self._categories
        ):
            result = ValidationResult(
                schema_valid=True,
                semantic_valid=False,
                is_valid=False,
                issues=[ValidationIssue(
                    field="name",
                    issue_type="duplicate",
                    message=f"Já existe uma categoria chamada '{draft.name}'.",
                    severity="error",
                )],
            )
            if self._audit:
                self._audit.log_validation_failed(
                    account_id=self._account.id,
                    entity_type="category",
                    issues=[issue.model_dump() for issue in result.issues],
                )
            raise LedgerValidationError(result)

        category = Category(id=uuid.uuid4().hex, **draft.model_dump())
        self._commit_categories(self._categories + [category])

        if self._audit:
            self._audit.log_category_added(
                account_id=self._account.id,
                category_id=category.id,
                name=category.name,
                category_type=category.type.value,
            )

        return category

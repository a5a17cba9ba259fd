"""
Tests for the ledger store.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from fintrack.ledger import (
    LedgerStore,
    LedgerValidationError,
    categories_key,
    transactions_key,
)
from fintrack.models import (
    AuditEventType,
    Category,
    CategoryDraft,
    CategoryIcon,
    TransactionDraft,
    TransactionType,
    TransactionUpdate,
)
from fintrack.services.storage import InMemoryKeyValueStore, StorageWriteError


def expense(categories, amount="50", category_id="cat1", **kwargs):
    return TransactionDraft(
        type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        category=categories[category_id],
        **kwargs,
    )


def income(categories, amount="1000", category_id="cat8", **kwargs):
    return TransactionDraft(
        type=TransactionType.INCOME,
        amount=Decimal(amount),
        category=categories[category_id],
        **kwargs,
    )


class TestWithoutSession:
    """Tests for the ledger before any account is loaded."""

    def test_reads_are_empty(self, ledger):
        """Test that an unloaded ledger shows no data and default categories."""
        assert ledger.list_transactions() == []
        assert len(ledger.list_categories()) == 10

    def test_writes_are_noops(self, ledger, kv_store, categories):
        """Test that mutators do nothing without a session."""
        assert ledger.add_transaction(expense(categories)) is None
        assert ledger.update_transaction("x", TransactionUpdate(amount=Decimal("1"))) is None
        assert ledger.delete_transaction("x") is False
        assert ledger.add_category(CategoryDraft(name="Pets", type=TransactionType.EXPENSE)) is None
        assert kv_store.keys() == []


class TestLoad:
    """Tests for switching accounts."""

    def test_first_load_seeds_categories(self, ledger, kv_store, ana, audit_logger):
        """Test that a new account gets the ten defaults persisted."""
        ledger.load(ana)

        stored = kv_store.get(categories_key(ana.id))
        assert [c["id"] for c in stored] == [f"cat{i}" for i in range(1, 11)]
        event_types = [e.event_type for e in audit_logger.recent_events(5)]
        assert AuditEventType.CATEGORIES_SEEDED in event_types

    def test_switching_accounts_swaps_data(self, ledger, ana, bruno, categories):
        """Test that no data crosses sessions."""
        ledger.load(ana)
        ledger.add_transaction(expense(categories))

        ledger.load(bruno)
        assert ledger.list_transactions() == []

        ledger.load(ana)
        assert len(ledger.list_transactions()) == 1

    def test_load_none_resets(self, ledger, ana, categories):
        """Test that logging out clears the view back to defaults."""
        ledger.load(ana)
        ledger.add_transaction(expense(categories))
        ledger.add_category(CategoryDraft(name="Pets", type=TransactionType.EXPENSE))

        ledger.load(None)

        assert ledger.list_transactions() == []
        assert [c.id for c in ledger.list_categories()] == [f"cat{i}" for i in range(1, 11)]

    def test_corrupt_transactions_load_as_empty(self, ledger, kv_store, ana, audit_logger):
        """Test that a non-list transactions value recovers to empty."""
        kv_store.set(transactions_key(ana.id), {"oops": True})

        ledger.load(ana)

        assert ledger.list_transactions() == []
        event_types = [e.event_type for e in audit_logger.recent_events(5)]
        assert AuditEventType.STORED_DATA_RECOVERED in event_types

    def test_corrupt_categories_reseeded(self, ledger, kv_store, ana):
        """Test that an unusable categories value falls back to the defaults."""
        kv_store.set(categories_key(ana.id), "corrupt")

        ledger.load(ana)

        assert len(ledger.list_categories()) == 10
        assert len(kv_store.get(categories_key(ana.id))) == 10

    def test_bad_transaction_rows_are_skipped(self, ledger, kv_store, ana):
        """Test that one broken record does not hide the others."""
        kv_store.set(transactions_key(ana.id), [
            {
                "id": "1",
                "type": "expense",
                "amount": 10,
                "date": "2025-05-01T10:00:00.000Z",
                "category": {"id": "cat1", "name": "Alimentação", "icon": "category", "type": "expense"},
            },
            {"id": "2", "type": "expense"},
        ])

        ledger.load(ana)

        assert [t.id for t in ledger.list_transactions()] == ["1"]


class TestTransactions:
    """Tests for transaction CRUD."""

    def test_add_prepends_and_persists(self, ledger, kv_store, ana, categories):
        """Test that the newest transaction comes first."""
        ledger.load(ana)
        first = ledger.add_transaction(expense(categories, "10"))
        second = ledger.add_transaction(income(categories, "20"))

        assert [t.id for t in ledger.list_transactions()] == [second.id, first.id]
        stored = kv_store.get(transactions_key(ana.id))
        assert [t["id"] for t in stored] == [second.id, first.id]
        assert stored[0]["amount"] == "20"

    def test_add_embeds_the_accounts_category(self, ledger, ana, categories):
        """Test that the stored snapshot is the account's own category record."""
        ledger.load(ana)
        stale = categories["cat1"].model_copy(update={"name": "Old name"})

        transaction = ledger.add_transaction(TransactionDraft(
            type=TransactionType.EXPENSE,
            amount=Decimal("5"),
            category=stale,
        ))

        assert transaction.category.name == "Alimentação"

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_add_rejects_non_positive_amount(self, ledger, ana, categories, amount):
        """Test that zero and negative amounts never reach storage."""
        ledger.load(ana)

        with pytest.raises(LedgerValidationError) as exc:
            ledger.add_transaction(expense(categories, amount))

        assert exc.value.result.errors[0].field == "amount"
        assert ledger.list_transactions() == []

    def test_add_rejects_type_mismatch(self, ledger, ana, categories, audit_logger):
        """Test that an income category cannot hold an expense."""
        ledger.load(ana)

        with pytest.raises(LedgerValidationError) as exc:
            ledger.add_transaction(expense(categories, category_id="cat8"))

        assert exc.value.result.errors[0].issue_type == "type_mismatch"
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.VALIDATION_FAILED

    def test_add_rejects_foreign_category(self, ledger, ana, custom_category):
        """Test that a category from outside the account is rejected."""
        ledger.load(ana)
        foreign = custom_category("elsewhere", "Pets")

        with pytest.raises(LedgerValidationError) as exc:
            ledger.add_transaction(TransactionDraft(
                type=TransactionType.EXPENSE,
                amount=Decimal("5"),
                category=foreign,
            ))

        assert exc.value.result.errors[0].issue_type == "unknown_category"

    def test_add_rejects_missing_category(self, ledger, ana):
        """Test that a draft without a category is rejected."""
        ledger.load(ana)

        with pytest.raises(LedgerValidationError) as exc:
            ledger.add_transaction(TransactionDraft(
                type=TransactionType.EXPENSE,
                amount=Decimal("5"),
            ))

        assert str(exc.value) == "Por favor, selecione uma categoria."

    def test_update_merges_only_set_fields(self, ledger, ana, categories):
        """Test a partial update."""
        ledger.load(ana)
        original = ledger.add_transaction(expense(categories, "50", description="Mercado"))

        updated = ledger.update_transaction(original.id, TransactionUpdate(amount=Decimal("75")))

        assert updated.amount == Decimal("75")
        assert updated.description == "Mercado"
        assert updated.category.id == "cat1"
        assert ledger.get_transaction(original.id) == updated

    def test_update_can_clear_description(self, ledger, ana, categories):
        """Test that an explicit None description removes it."""
        ledger.load(ana)
        original = ledger.add_transaction(expense(categories, description="Mercado"))

        updated = ledger.update_transaction(original.id, TransactionUpdate(description=None))

        assert updated.description is None

    def test_update_revalidates_merged_record(self, ledger, ana, categories):
        """Test that flipping only the type is checked against the category."""
        ledger.load(ana)
        original = ledger.add_transaction(expense(categories))

        with pytest.raises(LedgerValidationError):
            ledger.update_transaction(
                original.id, TransactionUpdate(type=TransactionType.INCOME)
            )

        assert ledger.get_transaction(original.id).type == TransactionType.EXPENSE

    def test_update_unknown_id_is_noop(self, ledger, ana, categories):
        """Test that updating a missing id changes nothing."""
        ledger.load(ana)
        ledger.add_transaction(expense(categories))
        before = ledger.list_transactions()

        assert ledger.update_transaction("missing", TransactionUpdate(amount=Decimal("1"))) is None
        assert ledger.list_transactions() == before

    def test_update_keeps_position(self, ledger, ana, categories):
        """Test that editing does not move a transaction to the top."""
        ledger.load(ana)
        older = ledger.add_transaction(expense(categories, "1"))
        newer = ledger.add_transaction(expense(categories, "2"))

        ledger.update_transaction(older.id, TransactionUpdate(amount=Decimal("3")))

        assert [t.id for t in ledger.list_transactions()] == [newer.id, older.id]

    def test_delete(self, ledger, kv_store, ana, categories):
        """Test that delete removes the id and persists."""
        ledger.load(ana)
        keep = ledger.add_transaction(expense(categories, "1"))
        drop = ledger.add_transaction(expense(categories, "2"))

        assert ledger.delete_transaction(drop.id) is True

        assert [t.id for t in ledger.list_transactions()] == [keep.id]
        assert [t["id"] for t in kv_store.get(transactions_key(ana.id))] == [keep.id]

    def test_delete_unknown_id(self, ledger, ana, categories):
        """Test that deleting a missing id leaves the list alone."""
        ledger.load(ana)
        ledger.add_transaction(expense(categories))

        assert ledger.delete_transaction("missing") is False
        assert len(ledger.list_transactions()) == 1

    def test_reload_restores_dates_and_amounts(self, ledger, kv_store, ana, categories, audit_logger):
        """Test that a second store over the same data sees the same ledger."""
        ledger.load(ana)
        when = datetime(2025, 5, 3, 14, 30)
        added = ledger.add_transaction(expense(categories, "12.34", date=when))

        other = LedgerStore(kv_store, audit_logger)
        other.load(ana)

        reloaded = other.get_transaction(added.id)
        assert reloaded.date == when
        assert reloaded.amount == Decimal("12.34")


class TestCategories:
    """Tests for category management."""

    def test_add_category_appends(self, ledger, kv_store, ana):
        """Test that new categories go to the end and are persisted."""
        ledger.load(ana)

        category = ledger.add_category(
            CategoryDraft(name="Pets", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE)
        )

        assert ledger.list_categories()[-1] == category
        assert kv_store.get(categories_key(ana.id))[-1]["name"] == "Pets"

    def test_new_category_usable_for_transactions(self, ledger, ana):
        """Test adding a transaction in a user-defined category."""
        ledger.load(ana)
        pets = ledger.add_category(CategoryDraft(name="Pets", type=TransactionType.EXPENSE))

        transaction = ledger.add_transaction(TransactionDraft(
            type=TransactionType.EXPENSE,
            amount=Decimal("30"),
            category=pets,
        ))

        assert transaction.category.id == pets.id

    def test_duplicate_name_same_type_rejected(self, ledger, ana):
        """Test that a second 'lazer' expense category is refused."""
        ledger.load(ana)

        with pytest.raises(LedgerValidationError):
            ledger.add_category(CategoryDraft(name="lazer", type=TransactionType.EXPENSE))

        assert len(ledger.list_categories()) == 10

    def test_same_name_other_type_allowed(self, ledger, ana):
        """Test that names only need to be unique per type."""
        ledger.load(ana)
        category = ledger.add_category(CategoryDraft(name="Lazer", type=TransactionType.INCOME))
        assert category.type == TransactionType.INCOME

    def test_categories_for_type(self, ledger, ana):
        """Test the category picker filter."""
        ledger.load(ana)
        names = [c.name for c in ledger.categories_for(TransactionType.INCOME)]
        assert names == ["Salário", "Investimentos", "Outras Receitas"]

    def test_get_category(self, ledger, ana):
        """Test lookup by id."""
        ledger.load(ana)
        assert ledger.get_category("cat5").name == "Saúde"
        assert ledger.get_category("missing") is None

    def test_categories_are_per_account(self, ledger, ana, bruno):
        """Test that a category added by one account is invisible to another."""
        ledger.load(ana)
        ledger.add_category(CategoryDraft(name="Pets", type=TransactionType.EXPENSE))

        ledger.load(bruno)

        assert "Pets" not in [c.name for c in ledger.list_categories()]


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise StorageWriteError(f"Failed to write {key}")
        super().set(key, value)


class TestFailedWrites:
    """Tests that a failed write leaves the working view as it was."""

    @pytest.fixture
    def flaky_store(self):
        return FlakyStore()

    @pytest.fixture
    def flaky_ledger(self, flaky_store, audit_logger, ana):
        ledger = LedgerStore(flaky_store, audit_logger)
        ledger.load(ana)
        return ledger

    def test_add_transaction(self, flaky_ledger, flaky_store, ana, categories):
        """Test that an unsaved transaction does not appear."""
        flaky_store.fail_writes = True

        with pytest.raises(StorageWriteError):
            flaky_ledger.add_transaction(expense(categories))

        assert flaky_ledger.list_transactions() == []
        flaky_ledger.load(ana)
        assert flaky_ledger.list_transactions() == []

    def test_update_and_delete(self, flaky_ledger, flaky_store, categories):
        """Test that an unsaved edit or removal is not applied."""
        added = flaky_ledger.add_transaction(expense(categories, amount="50"))
        flaky_store.fail_writes = True

        with pytest.raises(StorageWriteError):
            flaky_ledger.update_transaction(added.id, TransactionUpdate(amount=Decimal("75")))
        with pytest.raises(StorageWriteError):
            flaky_ledger.delete_transaction(added.id)

        assert [t.amount for t in flaky_ledger.list_transactions()] == [Decimal("50")]

    def test_add_category(self, flaky_ledger, flaky_store):
        """Test that an unsaved category does not appear."""
        flaky_store.fail_writes = True

        with pytest.raises(StorageWriteError):
            flaky_ledger.add_category(CategoryDraft(name="Pets", type=TransactionType.EXPENSE))

        assert len(flaky_ledger.list_categories()) == 10

    def test_failed_seed_still_shows_defaults(self, flaky_store, audit_logger, ana):
        """Test that logging in works when the default categories cannot be saved."""
        flaky_store.fail_writes = True
        ledger = LedgerStore(flaky_store, audit_logger)

        ledger.load(ana)

        assert len(ledger.list_categories()) == 10
        assert categories_key(ana.id) not in flaky_store
        assert AuditEventType.SYSTEM_ERROR in [e.event_type for e in audit_logger.recent_events(5)]

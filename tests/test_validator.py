"""
Tests for the two-stage transaction validator.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from fintrack.config import AppSettings
from fintrack.models import TransactionDraft, TransactionType, default_categories
from fintrack.validation import TransactionValidator


@pytest.fixture
def validator():
    return TransactionValidator(AppSettings(
        max_transaction_amount=10000,
        future_date_tolerance_days=30,
    ))


@pytest.fixture
def owned():
    return default_categories()


def draft(category_index=0, amount="50", **kwargs):
    categories = default_categories()
    category = categories[category_index] if category_index is not None else None
    return TransactionDraft(
        type=kwargs.pop("type", TransactionType.EXPENSE),
        amount=Decimal(amount),
        category=category,
        **kwargs,
    )


class TestSchemaStage:
    """Tests for stage 1."""

    def test_valid_draft(self, validator, owned):
        """Test that a well-formed expense passes both stages."""
        result = validator.validate(draft(), owned)
        assert result.is_valid is True
        assert result.issues == []

    def test_zero_amount(self, validator, owned):
        """Test that a zero amount is an error."""
        result = validator.validate(draft(amount="0"), owned)
        assert result.schema_valid is False
        assert result.errors[0].message == "Por favor, informe um valor válido."

    def test_missing_category(self, validator, owned):
        """Test that a missing category is an error."""
        result = validator.validate(draft(category_index=None), owned)
        assert result.schema_valid is False
        assert result.errors[0].field == "category"

    def test_semantic_stage_skipped_on_schema_failure(self, validator, owned):
        """Test that stage 2 does not run when stage 1 fails."""
        result = validator.validate(
            draft(amount="0", type=TransactionType.INCOME), owned
        )
        assert result.semantic_valid is False
        assert [i.field for i in result.issues] == ["amount"]


class TestSemanticStage:
    """Tests for stage 2."""

    def test_type_mismatch(self, validator, owned):
        """Test an expense filed under an income category."""
        result = validator.validate(draft(category_index=7), owned)
        assert result.is_valid is False
        assert result.errors[0].issue_type == "type_mismatch"

    def test_unknown_category(self, validator, owned):
        """Test a category the account does not have."""
        result = validator.validate(draft(), owned[1:])
        assert result.errors[0].issue_type == "unknown_category"

    def test_large_amount_is_only_a_warning(self, validator, owned):
        """Test that unusually high amounts warn without blocking."""
        result = validator.validate(draft(amount="20000"), owned)
        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_far_future_date_is_only_a_warning(self, validator, owned):
        """Test that dates beyond the tolerance warn without blocking."""
        result = validator.validate(
            draft(date=datetime.now() + timedelta(days=90)), owned
        )
        assert result.is_valid is True
        assert result.issues[0].issue_type == "future_date"

    def test_near_future_date_is_fine(self, validator, owned):
        """Test that scheduling a few days ahead is allowed."""
        result = validator.validate(
            draft(date=datetime.now() + timedelta(days=3)), owned
        )
        assert result.issues == []


class TestSummary:
    """Tests for the form summary text."""

    def test_all_good(self, validator, owned):
        """Test the summary of a clean result."""
        result = validator.validate(draft(), owned)
        assert validator.get_user_friendly_summary(result) == "✅ Tudo certo!"

    def test_lists_errors(self, validator, owned):
        """Test that errors appear in the summary."""
        result = validator.validate(draft(category_index=None), owned)
        summary = validator.get_user_friendly_summary(result)
        assert "Por favor, selecione uma categoria." in summary

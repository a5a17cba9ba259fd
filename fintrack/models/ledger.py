"""
Ledger Data Models

Schemas for everything an account records: categories and transactions.

They are designed to:
1. Enforce type safety at the storage boundary
2. Round-trip through JSON (dates as ISO strings, amounts as decimals)
3. Accept records written by the original mobile app

DESIGN DECISION: A transaction embeds a snapshot of its category rather
than a bare id. Aggregations group by category name without a join,
and stored records stay readable on their own.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Polarity of a transaction (and of the category it belongs to)."""
    INCOME = "income"
    EXPENSE = "expense"


class CategoryIcon(str, Enum):
    """Icon tags understood by the front end."""
    CATEGORY = "category"
    WALLET = "wallet"
    PIGGY_BANK = "piggy-bank"


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryDraft(BaseModel):
    """A category as supplied by the user, before it has an id."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=60,
        description="Display name"
    )
    icon: CategoryIcon = Field(
        default=CategoryIcon.CATEGORY,
        description="Icon tag"
    )
    type: TransactionType = Field(
        ...,
        description="Whether this category classifies income or expenses"
    )


class Category(CategoryDraft):
    """A category owned by one account."""

    id: str = Field(
        ...,
        min_length=1,
        description="Unique within the owning account"
    )


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="cat1", name="Alimentação", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat2", name="Transporte", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat3", name="Moradia", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat4", name="Educação", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat5", name="Saúde", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat6", name="Lazer", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat7", name="Outras Despesas", icon=CategoryIcon.CATEGORY, type=TransactionType.EXPENSE),
    Category(id="cat8", name="Salário", icon=CategoryIcon.WALLET, type=TransactionType.INCOME),
    Category(id="cat9", name="Investimentos", icon=CategoryIcon.PIGGY_BANK, type=TransactionType.INCOME),
    Category(id="cat10", name="Outras Receitas", icon=CategoryIcon.WALLET, type=TransactionType.INCOME),
)


def default_categories() -> list[Category]:
    """Fresh copies of the default category set."""
    return [category.model_copy() for category in DEFAULT_CATEGORIES]


# =============================================================================
# TRANSACTIONS
# =============================================================================

def _coerce_datetime(value: Any) -> Any:
    """Plain dates (from a date picker) become midnight timestamps."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


Timestamp = Annotated[datetime, BeforeValidator(_coerce_datetime)]
Description = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


class TransactionDraft(BaseModel):
    """
    A transaction as entered on the form, before it has an id.

    Amount and category are deliberately loose here: the validator
    reports a non-positive amount or a missing category as issues
    instead of failing at construction time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    amount: Decimal = Field(
        ...,
        description="Amount in BRL"
    )
    date: Timestamp = Field(
        default_factory=datetime.now,
        description="When the money moved"
    )
    category: Optional[Category] = None
    description: Description = Field(
        default=None,
        max_length=500,
    )


class TransactionUpdate(BaseModel):
    """
    Partial update for an existing transaction.

    Only fields that were explicitly set are merged.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = None
    date: Optional[Timestamp] = None
    category: Optional[Category] = None
    description: Description = Field(default=None, max_length=500)


class Transaction(BaseModel):
    """
    A single dated monetary movement.

    This is the persisted shape: amount must be positive and the
    category snapshot must be present.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique within the owning account"
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in BRL"
    )
    date: Timestamp
    category: Category
    description: Description = Field(
        default=None,
        max_length=500,
    )

    @property
    def local_datetime(self) -> datetime:
        """
        The timestamp as wall-clock time on this device.

        Aware timestamps (UTC strings written by the mobile app) are
        converted to the local zone; naive ones are already local.
        """
        if self.date.tzinfo is None:
            return self.date
        return self.date.astimezone().replace(tzinfo=None)

    @property
    def calendar_date(self) -> date:
        """The local calendar day this transaction falls on."""
        return self.local_datetime.date()

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

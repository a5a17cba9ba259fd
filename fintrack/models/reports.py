"""
Report Models

Derived figures shown on the dashboard and planning pages.
Nothing here is persisted; every report is recomputed from the
ledger on each render.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class Period(str, Enum):
    """Calendar windows the dashboard can be filtered by."""
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"


class DailyTotals(BaseModel):
    """Income and expense for one calendar day of a month."""

    day: int = Field(ge=1, le=31)
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


class CategoryShare(BaseModel):
    """One row of the spending distribution."""

    name: str
    amount: Decimal
    percentage: Decimal = Field(
        ...,
        description="Share of total expenses, 0-100"
    )


class DashboardSummary(BaseModel):
    """Everything the dashboard page renders."""

    period: Period
    reference_date: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    expenses_by_category: dict[str, Decimal] = Field(default_factory=dict)
    daily_series: list[DailyTotals] = Field(
        default_factory=list,
        description="Only populated for the monthly period"
    )
    tips: list[str] = Field(default_factory=list)

    @property
    def has_expenses(self) -> bool:
        return bool(self.expenses_by_category)


class PlanningSummary(BaseModel):
    """Everything the planning page renders (always the current month)."""

    reference_date: date
    income: Decimal
    expense: Decimal
    savings_rate: Decimal
    savings_goal: int = Field(ge=0, le=100)
    breakdown: list[CategoryShare] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)

    @property
    def meets_goal(self) -> bool:
        return self.savings_rate >= self.savings_goal

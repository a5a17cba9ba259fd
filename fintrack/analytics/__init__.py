"""Aggregations, page reports and display formatting."""

from fintrack.analytics.aggregations import (
    balance,
    category_breakdown,
    daily_series,
    filter_by_period,
    generate_tips,
    group_by_calendar_date,
    group_sum_by_category,
    percentage_of_total,
    period_bounds,
    savings_rate,
    search_transactions,
    sum_by_type,
)
from fintrack.analytics.formatting import (
    format_currency,
    format_day_heading,
    format_long_date,
    format_percent,
)
from fintrack.analytics.reports import build_dashboard, build_planning, goal_message

__all__ = [
    # Aggregations
    "balance",
    "category_breakdown",
    "daily_series",
    "filter_by_period",
    "generate_tips",
    "group_by_calendar_date",
    "group_sum_by_category",
    "percentage_of_total",
    "period_bounds",
    "savings_rate",
    "search_transactions",
    "sum_by_type",
    # Reports
    "build_dashboard",
    "build_planning",
    "goal_message",
    # Formatting
    "format_currency",
    "format_day_heading",
    "format_long_date",
    "format_percent",
]

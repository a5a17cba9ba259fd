"""
Report Builders

Compose the aggregation functions into the figures of one page.
Each builder takes the full transaction list of the logged-in account
and returns a report model; nothing here touches storage.
"""

from datetime import date
from typing import Optional, Sequence

from fintrack.analytics.aggregations import (
    category_breakdown,
    daily_series,
    filter_by_period,
    generate_tips,
    group_sum_by_category,
    savings_rate,
    sum_by_type,
)
from fintrack.models.ledger import Transaction, TransactionType
from fintrack.models.reports import DashboardSummary, Period, PlanningSummary

SAVING_TIPS = (
    "Reserve de 10% a 20% da sua renda mensal para um fundo de emergências.",
    "Use a regra 50/30/20: 50% para necessidades, 30% para desejos e 20% para poupança.",
    "Revise assinaturas e serviços mensais para identificar economias potenciais.",
    "Considere investir parte das suas economias para proteger-se da inflação.",
)

GOAL_MET_MESSAGE = "Parabéns! Você está economizando uma boa parte da sua renda."
GOAL_MISSED_MESSAGE = "Tente economizar pelo menos {goal}% da sua renda mensal."


def build_dashboard(
    transactions: Sequence[Transaction],
    period: Period = Period.THIS_MONTH,
    today: Optional[date] = None,
    week_starts_on: int = 6,
) -> DashboardSummary:
    """
    Dashboard figures for the current week or month.

    Totals, the category split and the daily series cover the period
    only. Tips look at every transaction but are fed the period totals.
    """
    today = today or date.today()
    in_period = filter_by_period(transactions, period, today, week_starts_on)

    income = sum_by_type(in_period, TransactionType.INCOME)
    expense = sum_by_type(in_period, TransactionType.EXPENSE)

    return DashboardSummary(
        period=period,
        reference_date=today,
        income=income,
        expense=expense,
        balance=income - expense,
        expenses_by_category=group_sum_by_category(in_period),
        daily_series=daily_series(in_period, today) if period == Period.THIS_MONTH else [],
        tips=generate_tips(transactions, income, expense, today),
    )


def build_planning(
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
    savings_goal: int = 20,
) -> PlanningSummary:
    """Savings figures for the current month against a savings goal."""
    today = today or date.today()
    this_month = filter_by_period(transactions, Period.THIS_MONTH, today)

    income = sum_by_type(this_month, TransactionType.INCOME)
    expense = sum_by_type(this_month, TransactionType.EXPENSE)

    return PlanningSummary(
        reference_date=today,
        income=income,
        expense=expense,
        savings_rate=savings_rate(income, expense),
        savings_goal=savings_goal,
        breakdown=category_breakdown(this_month),
        tips=list(SAVING_TIPS),
    )


def goal_message(summary: PlanningSummary) -> str:
    """The line under the savings rate on the planning page."""
    if summary.meets_goal:
        return GOAL_MET_MESSAGE
    return GOAL_MISSED_MESSAGE.format(goal=summary.savings_goal)

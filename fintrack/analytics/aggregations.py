"""
Aggregation Engine

DESIGN DECISION: Every figure shown to the user is computed here by
pure functions over a list of transactions. Nothing is cached or
stored; the same input always yields the same output.

All arithmetic is Decimal. Percentages are returned unrounded and only
rounded (half-up, whole numbers) where they are put into words.
"""

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from fintrack.models.ledger import Transaction, TransactionType
from fintrack.models.reports import CategoryShare, DailyTotals, Period

ZERO = Decimal("0")
HUNDRED = Decimal("100")

STARTER_TIPS = (
    "Comece registrando suas receitas e despesas para obter insights personalizados.",
    "Criar um orçamento é o primeiro passo para uma vida financeira saudável.",
    "Tente economizar pelo menos 20% da sua renda mensal.",
)

GENERAL_TIPS = (
    "Reserve uma parte da sua renda para emergências, idealmente o equivalente a 3-6 meses de despesas.",
    "Considere investir parte das suas economias para proteger-se da inflação.",
    "Revise suas despesas recorrentes mensalmente para identificar oportunidades de economia.",
)


def whole_percent(value: Decimal) -> Decimal:
    """Round a percentage half-up to a whole number."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


# =============================================================================
# TOTALS
# =============================================================================

def sum_by_type(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Decimal:
    """Total amount of the transactions of one type."""
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        ZERO,
    )


def balance(transactions: Sequence[Transaction]) -> Decimal:
    """Income minus expenses."""
    return (
        sum_by_type(transactions, TransactionType.INCOME)
        - sum_by_type(transactions, TransactionType.EXPENSE)
    )


def percentage_of_total(amount: Decimal, total: Decimal) -> Decimal:
    """`amount` as a percentage of `total`; 0 when there is no total."""
    if total == 0:
        return ZERO
    return amount / total * HUNDRED


def savings_rate(income: Decimal, expense: Decimal) -> Decimal:
    """Share of income left after expenses; 0 without income. May be negative."""
    if income <= 0:
        return ZERO
    return (income - expense) / income * HUNDRED


# =============================================================================
# FILTERING AND GROUPING
# =============================================================================

def period_bounds(
    period: Period,
    today: Optional[date] = None,
    week_starts_on: int = 6,
) -> tuple[date, date]:
    """
    First and last calendar day (inclusive) of the period containing today.

    `week_starts_on` uses Python's weekday numbering (0=Monday ... 6=Sunday).
    """
    today = today or date.today()

    if period == Period.THIS_WEEK:
        start = today - timedelta(days=(today.weekday() - week_starts_on) % 7)
        return start, start + timedelta(days=6)

    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def filter_by_period(
    transactions: Iterable[Transaction],
    period: Period,
    today: Optional[date] = None,
    week_starts_on: int = 6,
) -> list[Transaction]:
    """Transactions dated within the current week or month, order kept."""
    start, end = period_bounds(period, today, week_starts_on)
    return [t for t in transactions if start <= t.calendar_date <= end]


def group_sum_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Expense totals keyed by category name.

    Income is ignored. Keys appear in order of first occurrence.
    """
    groups: dict[str, Decimal] = {}

    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        name = transaction.category.name
        groups[name] = groups.get(name, ZERO) + transaction.amount

    return groups


def category_breakdown(transactions: Sequence[Transaction]) -> list[CategoryShare]:
    """Expense categories, largest first, each with its share of all expenses."""
    groups = group_sum_by_category(transactions)
    total = sum(groups.values(), ZERO)

    ranked = sorted(groups.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryShare(
            name=name,
            amount=amount,
            percentage=percentage_of_total(amount, total),
        )
        for name, amount in ranked
    ]


def group_by_calendar_date(
    transactions: Iterable[Transaction],
) -> dict[date, list[Transaction]]:
    """
    Transactions bucketed by day, most recent day first.

    Within a day the input order is kept.
    """
    groups: dict[date, list[Transaction]] = {}

    for transaction in sorted(transactions, key=lambda t: t.calendar_date, reverse=True):
        groups.setdefault(transaction.calendar_date, []).append(transaction)

    return groups


def daily_series(
    transactions: Iterable[Transaction],
    month: Optional[date] = None,
) -> list[DailyTotals]:
    """
    Income and expense per day for every day of `month`'s month.

    Days without transactions are present with zero totals.
    """
    month = month or date.today()
    days = calendar.monthrange(month.year, month.month)[1]
    series = [DailyTotals(day=day) for day in range(1, days + 1)]

    for transaction in transactions:
        day = transaction.calendar_date
        if (day.year, day.month) != (month.year, month.month):
            continue
        totals = series[day.day - 1]
        if transaction.is_income:
            totals.income += transaction.amount
        else:
            totals.expense += transaction.amount

    return series


def search_transactions(
    transactions: Iterable[Transaction],
    term: Optional[str] = None,
    transaction_type: Optional[TransactionType] = None,
    category_id: Optional[str] = None,
) -> list[Transaction]:
    """
    Filters of the transactions page. None (or a blank term) matches all.

    The term is matched case-insensitively against the description and
    the category name.
    """
    needle = (term or "").strip().casefold()
    results = []

    for transaction in transactions:
        if transaction_type is not None and transaction.type != transaction_type:
            continue
        if category_id is not None and transaction.category.id != category_id:
            continue
        if needle:
            haystacks = [transaction.category.name, transaction.description or ""]
            if not any(needle in text.casefold() for text in haystacks):
                continue
        results.append(transaction)

    return results


# =============================================================================
# TIPS
# =============================================================================

def generate_tips(
    transactions: Sequence[Transaction],
    total_income: Decimal,
    total_expense: Decimal,
    today: Optional[date] = None,
) -> list[str]:
    """
    Advice lines for the dashboard.

    Rules, in order:
    1. No transactions at all: the three starter tips, nothing else.
    2. With income, one line on how much of it is being spent.
    3. The biggest expense category of the current month, as a share
       of `total_expense`.
    4. Fewer than three lines so far: append the three general tips.
    """
    if not transactions:
        return list(STARTER_TIPS)

    tips = []

    if total_income > 0:
        spending = total_expense / total_income * HUNDRED
        ratio = whole_percent(spending)
        if spending > 90:
            tips.append(
                f"Você está gastando {ratio}% da sua renda. Considere reduzir "
                "despesas para melhorar sua saúde financeira."
            )
        elif spending > 70:
            tips.append(
                f"Você está gastando {ratio}% da sua renda. Está dentro do "
                "razoável, mas tente economizar mais."
            )
        else:
            tips.append(
                f"Parabéns! Você está gastando apenas {ratio}% da sua renda, "
                "o que é excelente para sua saúde financeira."
            )

    this_month = filter_by_period(transactions, Period.THIS_MONTH, today)
    by_category = group_sum_by_category(this_month)

    # First category wins a tie
    highest_name, highest_amount = "", ZERO
    for name, amount in by_category.items():
        if amount > highest_amount:
            highest_name, highest_amount = name, amount

    if highest_name and total_expense > 0:
        share = whole_percent(highest_amount / total_expense * HUNDRED)
        tips.append(
            f"Sua maior despesa é com {highest_name}, representando "
            f"{share}% do total gasto."
        )

    if len(tips) < 3:
        tips.extend(GENERAL_TIPS)

    return tips

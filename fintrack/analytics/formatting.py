"""
Display formatting for Brazilian Portuguese (pt-BR, BRL).
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

MONTH_NAMES = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


def format_currency(amount: Decimal) -> str:
    """
    Format an amount as Brazilian reais.

    >>> format_currency(Decimal("1234.5"))
    'R$ 1.234,50'
    """
    value = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    # Format with US separators, then swap them
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def format_percent(value: Decimal) -> str:
    """Whole-number percentage, rounded half-up."""
    return f"{Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP)}%"


def format_long_date(day: date) -> str:
    """'05 de maio, 2025'"""
    return f"{day.day:02d} de {MONTH_NAMES[day.month - 1]}, {day.year}"


def format_day_heading(day: date, today: Optional[date] = None) -> str:
    """Heading of a day group on the transactions page."""
    today = today or date.today()
    if day == today:
        return "Hoje"
    if day == today - timedelta(days=1):
        return "Ontem"
    return format_long_date(day)

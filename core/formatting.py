from datetime import date

from core.periods import Period

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_currency(amount: float, currency: str = "USD") -> str:
    """``$1,234.50`` style for known symbols, ``1,234.50 KZT`` otherwise."""
    sign = "-" if amount < 0 else ""
    value = f"{abs(amount):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{sign}{symbol}{value}"
    return f"{sign}{value} {currency}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_date(d: date) -> str:
    return f"{MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def period_label(period: Period) -> str:
    return f"{month_name(period.month)} {period.year}"

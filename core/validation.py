import math
from datetime import date, datetime
from typing import Any, Mapping, Optional

from core.domain import TRANSACTION_TYPES
from core.functional import Either, Left, Right

MAX_DESCRIPTION_LENGTH = 100


def parse_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def validate_amount(value: Any) -> Optional[str]:
    amount = parse_amount(value)
    if amount is None or amount <= 0:
        return "Amount must be a positive number"
    return None


def validate_description(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return "Description is required"
    if len(value) > MAX_DESCRIPTION_LENGTH:
        return f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
    return None


def validate_date(value: Any, today: date) -> Optional[str]:
    if value is None or value == "":
        return "Date is required"
    d = parse_date(value)
    if d is None:
        return "Date must be in YYYY-MM-DD format"
    if d > today:
        return "Date cannot be in the future"
    return None


def normalize_month(value: Any) -> Optional[str]:
    try:
        month = int(value)
    except (TypeError, ValueError):
        return None
    return f"{month:02d}" if 1 <= month <= 12 else None


def validate_transaction(data: Mapping[str, Any], today: date) -> Either[dict, dict]:
    """Check raw transaction fields and return them cleaned.

    All failing fields are reported at once, keyed by field name.
    """
    errors = {}

    for name, msg in (
        ("amount", validate_amount(data.get("amount"))),
        ("description", validate_description(data.get("description"))),
        ("date", validate_date(data.get("date"), today)),
    ):
        if msg:
            errors[name] = msg

    if data.get("type") not in TRANSACTION_TYPES:
        errors["type"] = "Type must be income or expense"
    category = data.get("category")
    if not isinstance(category, str) or not category.strip():
        errors["category"] = "Category is required"

    if errors:
        return Left(errors)

    return Right({
        "amount": parse_amount(data["amount"]),
        "date": parse_date(data["date"]),
        "description": data["description"].strip(),
        "type": data["type"],
        "category": category.strip(),
    })


def validate_budget(data: Mapping[str, Any]) -> Either[dict, dict]:
    errors = {}

    category = data.get("category")
    if not isinstance(category, str) or not category.strip():
        errors["category"] = "Category is required"

    amount = parse_amount(data.get("amount"))
    if amount is None or amount <= 0:
        errors["amount"] = "Amount must be positive"

    month = normalize_month(data.get("month"))
    if month is None:
        errors["month"] = "Month must be between 01 and 12"

    year = data.get("year")
    try:
        year = int(year) if not isinstance(year, bool) else None
    except (TypeError, ValueError):
        year = None
    if year is None:
        errors["year"] = "Year is required"

    if errors:
        return Left(errors)

    return Right({
        "category": category.strip(),
        "amount": amount,
        "month": month,
        "year": year,
    })

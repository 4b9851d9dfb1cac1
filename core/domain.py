from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

TransactionType = Literal["income", "expense"]

EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Personal Care",
    "Other",
)

INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Investment",
    "Business",
    "Gift",
    "Other",
)


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float           # always positive, direction comes from type
    date: date
    description: str
    type: TransactionType
    category: str
    created_at: datetime
    updated_at: datetime


# A spending limit for one category in one month
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    amount: float
    month: str   # "01".."12"
    year: int
    created_at: datetime
    updated_at: datetime


def suggested_categories(kind: str) -> tuple[str, ...]:
    return INCOME_CATEGORIES if kind == INCOME else EXPENSE_CATEGORIES

"""Builders for transactions used across the test suite."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from itertools import count
from typing import Optional

from paycheck_planner.models import EXPENSE, INCOME, Transaction

_ids = count(1)


def make_income(
    amount='1000',
    category: str = 'Salary',
    received: bool = True,
    when: Optional[datetime] = None,
    id: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id or f"inc-{next(_ids)}",
        type=INCOME,
        amount=Decimal(str(amount)),
        category=category,
        date=when or datetime(2024, 1, 15),
        received_amount=received,
    )


def make_expense(
    amount='200',
    category: str = 'Rent',
    budget_category: str = 'needs',
    funded: bool = True,
    when: Optional[datetime] = None,
    linked_income_id: Optional[str] = None,
    id: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id or f"exp-{next(_ids)}",
        type=EXPENSE,
        amount=Decimal(str(amount)),
        category=category,
        date=when or datetime(2024, 1, 20),
        funded=funded,
        budget_category=budget_category,
        linked_income_id=linked_income_id,
    )

"""Transaction model, category catalogs and validation.

Records coming from the store are parsed here. Anything that breaks the
data-model invariants is rejected with :class:`InvalidTransaction` instead
of being silently counted as zero.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

INCOME = 'income'
EXPENSE = 'expense'
TRANSACTION_TYPES = (INCOME, EXPENSE)

NEEDS = 'needs'
WANTS = 'wants'
SAVINGS = 'savings'
BUDGET_CATEGORIES = (NEEDS, WANTS, SAVINGS)

SALARY_CATEGORY = 'Salary'
SAVINGS_CATEGORY = 'Savings'

INCOME_CATEGORIES = ('Salary', 'Freelance', 'Investments', 'Other Income')
EXPENSE_CATEGORIES = (
    'Rent',
    'Utilities',
    'Groceries',
    'Transportation',
    'Entertainment',
    'Shopping',
    'Healthcare',
    'Savings',
    'Other',
)
CATALOGS = {
    INCOME: INCOME_CATEGORIES,
    EXPENSE: EXPENSE_CATEGORIES,
}

# Store documents use camelCase; snake_case is accepted as well
_RECORD_ALIASES = {
    'receivedAmount': 'received_amount',
    'budgetCategory': 'budget_category',
    'linkedIncomeId': 'linked_income_id',
}


class PlannerError(Exception):
    """Base class for recoverable planner errors."""


class InvalidTransaction(PlannerError, ValueError):
    """A record that breaks the type, category or flag invariants."""

    def __init__(self, problems: Iterable[str], transaction_id: Optional[str] = None):
        self.problems = list(problems)
        self.transaction_id = transaction_id
        prefix = f"Transaction {transaction_id}: " if transaction_id else ""
        super().__init__(prefix + "; ".join(self.problems))


class TargetZero(PlannerError, ZeroDivisionError):
    """A budget target of zero makes the percentage undefined."""

    def __init__(self, bucket: str = ''):
        self.bucket = bucket
        label = f"'{bucket}' " if bucket else ""
        super().__init__(f"Budget target {label}is zero")


class TransactionNotFound(PlannerError, KeyError):
    """Raised by the store for an unknown transaction id."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(transaction_id)

    def __str__(self) -> str:
        return f"Transaction not found: {self.transaction_id}"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str  # 'income' or 'expense'
    amount: Decimal  # never negative
    category: str
    date: datetime
    funded: Optional[bool] = None  # expense only
    received_amount: Optional[bool] = None  # income only
    budget_category: Optional[str] = None  # expense only
    linked_income_id: Optional[str] = None  # expense only

    def __post_init__(self) -> None:
        validate_transaction(self)

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE


def _transaction_problems(txn: Transaction) -> List[str]:
    problems: List[str] = []

    if txn.type not in TRANSACTION_TYPES:
        problems.append(f"unknown type '{txn.type}'")
        return problems

    if not isinstance(txn.amount, Decimal):
        problems.append(f"amount must be a Decimal, got {type(txn.amount).__name__}")
    elif not txn.amount.is_finite():
        problems.append("amount must be a finite number")
    elif txn.amount < 0:
        problems.append(f"amount must not be negative, got {txn.amount}")

    if txn.category not in CATALOGS[txn.type]:
        problems.append(f"category '{txn.category}' is not a valid {txn.type} category")

    if not isinstance(txn.date, datetime):
        problems.append("date must be a datetime")
    elif txn.date.tzinfo is not None:
        problems.append("date must be naive (UTC)")

    if txn.type == INCOME:
        if not isinstance(txn.received_amount, bool):
            problems.append("income requires a received flag")
        if txn.funded is not None:
            problems.append("income cannot carry a funded flag")
        if txn.budget_category is not None:
            problems.append("income cannot carry a budget category")
        if txn.linked_income_id is not None:
            problems.append("income cannot link to another income")
    else:
        if not isinstance(txn.funded, bool):
            problems.append("expense requires a funded flag")
        if txn.budget_category not in BUDGET_CATEGORIES:
            problems.append(
                f"expense requires a budget category in {BUDGET_CATEGORIES}, got {txn.budget_category!r}"
            )
        if txn.received_amount is not None:
            problems.append("expense cannot carry a received flag")

    return problems


def validate_transaction(txn: Transaction) -> None:
    """Raise :class:`InvalidTransaction` if ``txn`` breaks a record invariant."""
    problems = _transaction_problems(txn)
    if problems:
        raise InvalidTransaction(problems, transaction_id=txn.id)


def validate_snapshot(transactions: Iterable[Transaction]) -> None:
    """Check invariants that span the whole collection.

    Ids must be unique and every ``linked_income_id`` must point at an
    income present in the same snapshot.
    """
    seen: Dict[str, Transaction] = {}
    problems: List[str] = []
    items = list(transactions)
    for txn in items:
        if txn.id in seen:
            problems.append(f"duplicate id '{txn.id}'")
        seen[txn.id] = txn

    for txn in items:
        if txn.linked_income_id is None:
            continue
        target = seen.get(txn.linked_income_id)
        if target is None:
            problems.append(f"expense '{txn.id}' links to missing income '{txn.linked_income_id}'")
        elif target.type != INCOME:
            problems.append(f"expense '{txn.id}' links to '{txn.linked_income_id}', which is not an income")

    if problems:
        raise InvalidTransaction(problems)


def parse_amount(value: Any) -> Decimal:
    """Convert user or store input into a Decimal amount."""
    if isinstance(value, bool) or value is None:
        raise InvalidTransaction([f"amount is required, got {value!r}"])
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip().replace('$', '').replace(',', '')
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidTransaction([f"amount '{value}' is not a number"]) from None


def parse_date(value: Any) -> datetime:
    """Accept datetimes, dates, pandas Timestamps and ISO strings."""
    # NaT subclasses datetime, so it must be caught before the isinstance checks
    if value is None or value is pd.NaT:
        raise InvalidTransaction([f"date is required, got {value!r}"])
    if hasattr(value, 'to_pydatetime'):
        value = value.to_pydatetime()
    if isinstance(value, str) and value.strip():
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidTransaction([f"date '{value}' is not ISO formatted"]) from None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidTransaction([f"date is required, got {value!r}"])


def _parse_flag(value: Any, name: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    # SQLite hands booleans back as 0/1
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise InvalidTransaction([f"{name} must be true or false, got {value!r}"])


def transaction_from_record(record: Mapping[str, Any]) -> Transaction:
    """Build a Transaction from a store document.

    Args:
        record: Mapping with ``id``, ``type``, ``amount``, ``category``, ``date``
            and the type-specific ``funded`` / ``receivedAmount`` /
            ``budgetCategory`` / ``linkedIncomeId`` keys.

    Returns:
        A validated Transaction.

    Raises:
        InvalidTransaction: If a field is missing or breaks an invariant.
            Missing flags are never defaulted to false.

    Example:
        >>> txn = transaction_from_record({
        ...     'id': 'a1', 'type': 'income', 'amount': '1000', 'category': 'Salary',
        ...     'date': '2024-01-15', 'receivedAmount': True,
        ... })
        >>> txn.amount
        Decimal('1000')
    """
    data = {_RECORD_ALIASES.get(key, key): value for key, value in record.items()}
    record_id = data.get('id')
    try:
        linked = data.get('linked_income_id') or None
        return Transaction(
            id=str(record_id) if record_id is not None else '',
            type=data.get('type'),
            amount=parse_amount(data.get('amount')),
            category=data.get('category'),
            date=parse_date(data.get('date')),
            funded=_parse_flag(data.get('funded'), 'funded'),
            received_amount=_parse_flag(data.get('received_amount'), 'receivedAmount'),
            budget_category=data.get('budget_category') or None,
            linked_income_id=str(linked) if linked is not None else None,
        )
    except InvalidTransaction as exc:
        if exc.transaction_id is None and record_id is not None:
            raise InvalidTransaction(exc.problems, transaction_id=str(record_id)) from None
        raise


def transaction_to_record(txn: Transaction) -> Dict[str, Any]:
    """Convert a transaction to the camelCase document shape used by the store."""
    record: Dict[str, Any] = {
        'id': txn.id,
        'type': txn.type,
        'amount': str(txn.amount),
        'category': txn.category,
        'date': txn.date.isoformat(),
    }
    if txn.type == INCOME:
        record['receivedAmount'] = txn.received_amount
    else:
        record['funded'] = txn.funded
        record['budgetCategory'] = txn.budget_category
        record['linkedIncomeId'] = txn.linked_income_id
    return record


def with_flag(txn: Transaction, *, funded: Optional[bool] = None, received: Optional[bool] = None) -> Transaction:
    """Return a copy of ``txn`` with its funded or received flag changed.

    The flag must match the transaction type; the type itself never changes.
    """
    if funded is not None:
        if txn.type != EXPENSE:
            raise InvalidTransaction(["only expenses can be funded"], transaction_id=txn.id)
        return dataclasses.replace(txn, funded=funded)
    if received is not None:
        if txn.type != INCOME:
            raise InvalidTransaction(["only incomes can be received"], transaction_id=txn.id)
        return dataclasses.replace(txn, received_amount=received)
    return txn

"""Budget aggregation over a transaction snapshot.

Every function here is a pure transform of the snapshot it receives: the
dashboard calls :func:`summarize` again whenever the store pushes a new
snapshot. Money stays in ``Decimal`` so the 50/30/20 split adds up exactly;
only the chart/table helpers at the bottom convert to floats for pandas.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .config import DEFAULT_RULE, BudgetRule
from .models import (
    EXPENSE,
    INCOME,
    NEEDS,
    SALARY_CATEGORY,
    SAVINGS,
    SAVINGS_CATEGORY,
    WANTS,
    TargetZero,
    Transaction,
)

ZERO = Decimal('0')

BUCKET_LABELS = {
    NEEDS: 'Needs',
    WANTS: 'Wants',
    SAVINGS: 'Savings',
}


@dataclass(frozen=True)
class BudgetSummary:
    """Derived values for one snapshot."""

    balance: Decimal
    total_income: Decimal
    salary_income: Decimal
    total_expenses: Decimal
    actual_savings: Decimal
    actual_needs: Decimal
    actual_wants: Decimal
    needs_target: Decimal
    wants_target: Decimal
    savings_target: Decimal
    incomes: Tuple[Transaction, ...]  # ascending by date


@dataclass(frozen=True)
class BudgetProgress:
    bucket: str
    label: str
    target: Decimal
    actual: Decimal
    percent: float
    target_is_zero: bool = False


@dataclass(frozen=True)
class PaycheckView:
    """An income with the expenses earmarked against it."""

    income: Transaction
    expenses: Tuple[Transaction, ...]
    allocated: Decimal
    remaining: Decimal


def _received_incomes(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.type == INCOME and t.received_amount is True]


def _funded_expenses(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.type == EXPENSE and t.funded is True]


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def sorted_incomes(transactions: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    """All incomes, received or not, oldest first. Ties keep input order."""
    incomes = [t for t in transactions if t.type == INCOME]
    # sorted() is stable, so equal dates stay in snapshot order
    return tuple(sorted(incomes, key=lambda t: t.date))


def summarize(transactions: Sequence[Transaction], rule: BudgetRule = DEFAULT_RULE) -> BudgetSummary:
    """Compute balance, totals, 50/30/20 targets and actuals for a snapshot.

    Only received incomes and funded expenses count towards the totals.
    Needs and wants targets are a share of all received income, while the
    savings target is a share of received salary only.

    Args:
        transactions: Snapshot of all transactions, in any order.
        rule: Budget split. Defaults to 50/30/20.

    Returns:
        BudgetSummary for the snapshot.

    Example:
        >>> summary = summarize(snapshot)
        >>> summary.balance == summary.total_income - summary.total_expenses
        True
    """
    transactions = tuple(transactions)
    received = _received_incomes(transactions)
    funded = _funded_expenses(transactions)

    total_income = _total(received)
    salary_income = _total(t for t in received if t.category == SALARY_CATEGORY)
    total_expenses = _total(funded)

    return BudgetSummary(
        balance=total_income - total_expenses,
        total_income=total_income,
        salary_income=salary_income,
        total_expenses=total_expenses,
        actual_savings=_total(t for t in funded if t.category == SAVINGS_CATEGORY),
        actual_needs=_total(t for t in funded if t.budget_category == NEEDS),
        actual_wants=_total(t for t in funded if t.budget_category == WANTS),
        needs_target=total_income * rule.needs,
        wants_target=total_income * rule.wants,
        savings_target=salary_income * rule.savings,
        incomes=sorted_incomes(transactions),
    )


def percent_of_target(actual: Decimal, target: Decimal, bucket: str = '') -> float:
    """Return ``actual / target * 100`` clamped to [0, 100].

    Raises:
        TargetZero: If ``target`` is zero.
    """
    if target == 0:
        raise TargetZero(bucket)
    ratio = float(actual / target * 100)
    return max(0.0, min(ratio, 100.0))


def budget_progress(summary: BudgetSummary) -> List[BudgetProgress]:
    """Progress bar values for the needs, wants and savings buckets.

    With a zero target (typically no income recorded yet) the bar is empty
    when nothing was spent and full otherwise.
    """
    pairs = [
        (NEEDS, summary.needs_target, summary.actual_needs),
        (WANTS, summary.wants_target, summary.actual_wants),
        (SAVINGS, summary.savings_target, summary.actual_savings),
    ]
    progress: List[BudgetProgress] = []
    for bucket, target, actual in pairs:
        target_is_zero = False
        try:
            percent = percent_of_target(actual, target, bucket)
        except TargetZero:
            target_is_zero = True
            percent = 100.0 if actual > 0 else 0.0
        progress.append(BudgetProgress(
            bucket=bucket,
            label=BUCKET_LABELS[bucket],
            target=target,
            actual=actual,
            percent=percent,
            target_is_zero=target_is_zero,
        ))
    return progress


def linked_expenses(transactions: Iterable[Transaction], income_id: str) -> List[Transaction]:
    """Expenses earmarked against ``income_id``, in snapshot order."""
    return [t for t in transactions if t.type == EXPENSE and t.linked_income_id == income_id]


def paycheck_views(
    transactions: Sequence[Transaction],
    summary: Optional[BudgetSummary] = None,
) -> List[PaycheckView]:
    """Build the paycheck list: each income, oldest first, with its expenses.

    ``allocated`` counts every linked expense whether or not it is funded,
    ``remaining`` may go negative when a paycheck is over-allocated.
    """
    incomes = summary.incomes if summary is not None else sorted_incomes(transactions)
    views: List[PaycheckView] = []
    for income in incomes:
        expenses = tuple(linked_expenses(transactions, income.id))
        allocated = _total(expenses)
        views.append(PaycheckView(
            income=income,
            expenses=expenses,
            allocated=allocated,
            remaining=income.amount - allocated,
        ))
    return views


def expense_breakdown(transactions: Iterable[Transaction]) -> pd.Series:
    """Funded expense totals by category, largest first."""
    funded = _funded_expenses(transactions)
    if not funded:
        return pd.Series(dtype=float, name='Amount')
    df = pd.DataFrame({
        'Category': [t.category for t in funded],
        'Amount': [float(t.amount) for t in funded],
    })
    return df.groupby('Category')['Amount'].sum().sort_values(ascending=False)


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Tabular view of a snapshot for display."""
    columns = ['Date', 'Type', 'Category', 'Amount', 'Budget', 'Status', 'Linked Income']
    rows = []
    for t in transactions:
        if t.type == INCOME:
            status = 'Received' if t.received_amount else 'Expected'
        else:
            status = 'Funded' if t.funded else 'Planned'
        rows.append({
            'Date': t.date,
            'Type': t.type.title(),
            'Category': t.category,
            'Amount': float(t.amount),
            'Budget': BUCKET_LABELS.get(t.budget_category, ''),
            'Status': status,
            'Linked Income': t.linked_income_id or '',
        })
    if not rows:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(rows, columns=columns)
    df['Date'] = pd.to_datetime(df['Date'])
    return df

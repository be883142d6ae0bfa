"""Tests for the budget aggregator."""

from __future__ import annotations

import itertools
from datetime import datetime
from decimal import Decimal

import pytest

from factories import make_expense, make_income
from paycheck_planner.aggregator import (
    budget_progress,
    expense_breakdown,
    linked_expenses,
    paycheck_views,
    percent_of_target,
    summarize,
    transactions_to_frame,
)
from paycheck_planner.config import BudgetRule
from paycheck_planner.models import TargetZero


def mixed_snapshot():
    salary = make_income('2500.10', 'Salary', when=datetime(2024, 3, 1), id='salary')
    side = make_income('430.55', 'Freelance', when=datetime(2024, 3, 5), id='side')
    pending = make_income('999', 'Salary', received=False, when=datetime(2024, 3, 15), id='pending')
    return [
        salary,
        side,
        pending,
        make_expense('1200', 'Rent', 'needs', linked_income_id='salary'),
        make_expense('89.99', 'Groceries', 'needs', linked_income_id='salary'),
        make_expense('45.5', 'Entertainment', 'wants', linked_income_id='side'),
        make_expense('300', 'Savings', 'savings', linked_income_id='salary'),
        make_expense('60', 'Shopping', 'wants', funded=False, linked_income_id='pending'),
    ]


def test_single_salary_and_rent_scenario():
    snapshot = [
        make_income('1000', 'Salary', received=True),
        make_expense('200', 'Rent', 'needs', funded=True),
    ]
    summary = summarize(snapshot)

    assert summary.total_income == Decimal('1000')
    assert summary.total_expenses == Decimal('200')
    assert summary.balance == Decimal('800')
    assert summary.needs_target == Decimal('500')
    assert summary.actual_needs == Decimal('200')
    assert summary.savings_target == Decimal('200')
    assert summary.actual_savings == Decimal('0')


def test_balance_is_income_minus_expenses():
    summary = summarize(mixed_snapshot())
    assert summary.balance == summary.total_income - summary.total_expenses
    assert summary.total_income == Decimal('2930.65')
    assert summary.total_expenses == Decimal('1635.49')


def test_needs_and_wants_targets_are_eighty_percent_of_income():
    for snapshot in ([], mixed_snapshot(), [make_income('0.1'), make_income('0.2', 'Investments')]):
        summary = summarize(snapshot)
        assert summary.needs_target + summary.wants_target == summary.total_income * Decimal('0.8')


def test_unfunded_expense_is_excluded_everywhere():
    base = [make_income('1000')]
    for category, bucket in [('Rent', 'needs'), ('Shopping', 'wants'), ('Savings', 'savings')]:
        unfunded = make_expense('150', category, bucket, funded=False)
        summary = summarize(base + [unfunded])
        assert summary.total_expenses == 0
        assert summary.actual_needs == 0
        assert summary.actual_wants == 0
        assert summary.actual_savings == 0


def test_unreceived_salary_is_excluded():
    summary = summarize([make_income('1000', 'Salary', received=False)])
    assert summary.total_income == 0
    assert summary.salary_income == 0
    assert summary.savings_target == 0


def test_gated_out_transactions_match_omission():
    snapshot = mixed_snapshot()
    gated = [t for t in snapshot if (t.is_income and t.received_amount) or (t.is_expense and t.funded)]
    with_gated_out = summarize(snapshot)
    without = summarize(gated)

    for field in ('balance', 'total_income', 'salary_income', 'total_expenses', 'actual_savings',
                  'actual_needs', 'actual_wants', 'needs_target', 'wants_target', 'savings_target'):
        assert getattr(with_gated_out, field) == getattr(without, field), field


def test_savings_target_ignores_non_salary_income():
    snapshot = [make_income('2000', 'Salary')]
    before = summarize(snapshot).savings_target
    after = summarize(snapshot + [make_income('5000', 'Investments'), make_income('700', 'Freelance')])
    assert before == after.savings_target == Decimal('400')
    assert after.needs_target == Decimal('3850')


def test_actual_savings_uses_savings_category_not_bucket():
    snapshot = [
        make_income('1000'),
        make_expense('100', 'Savings', 'savings'),
        make_expense('50', 'Other', 'savings'),
    ]
    summary = summarize(snapshot)
    assert summary.actual_savings == Decimal('100')


def test_incomes_sorted_ascending_for_every_permutation():
    jan = make_income('1', when=datetime(2024, 1, 1), id='jan')
    feb = make_income('2', when=datetime(2024, 2, 1), id='feb')
    mar = make_income('3', when=datetime(2024, 3, 1), id='mar', received=False)
    rent = make_expense('5')
    for perm in itertools.permutations([jan, feb, mar, rent]):
        ids = [t.id for t in summarize(list(perm)).incomes]
        assert ids == ['jan', 'feb', 'mar']


def test_incomes_with_equal_dates_keep_input_order():
    when = datetime(2024, 5, 1)
    first = make_income('1', when=when, id='first')
    second = make_income('2', when=when, id='second')
    older = make_income('3', when=datetime(2024, 4, 1), id='older')

    assert [t.id for t in summarize([first, second, older]).incomes] == ['older', 'first', 'second']
    assert [t.id for t in summarize([second, older, first]).incomes] == ['older', 'second', 'first']


def test_custom_rule_changes_targets():
    rule = BudgetRule(needs=Decimal('0.6'), wants=Decimal('0.25'), savings=Decimal('0.15'))
    summary = summarize([make_income('1000')], rule)
    assert summary.needs_target == Decimal('600')
    assert summary.wants_target == Decimal('250')
    assert summary.savings_target == Decimal('150')


def test_summarize_does_not_mutate_snapshot():
    snapshot = mixed_snapshot()
    copy = list(snapshot)
    summarize(snapshot)
    assert snapshot == copy


def test_percent_of_target_clamps():
    assert percent_of_target(Decimal('50'), Decimal('200')) == 25.0
    assert percent_of_target(Decimal('500'), Decimal('200')) == 100.0
    assert percent_of_target(Decimal('0'), Decimal('200')) == 0.0


def test_percent_of_target_raises_on_zero_target():
    with pytest.raises(TargetZero) as excinfo:
        percent_of_target(Decimal('10'), Decimal('0'), 'needs')
    assert excinfo.value.bucket == 'needs'


def test_budget_progress_zero_target_policy():
    snapshot = [make_expense('40', 'Shopping', 'wants')]
    progress = {p.bucket: p for p in budget_progress(summarize(snapshot))}

    assert all(p.target_is_zero for p in progress.values())
    assert progress['wants'].percent == 100.0
    assert progress['needs'].percent == 0.0
    assert progress['savings'].percent == 0.0


def test_budget_progress_regular_values():
    snapshot = [
        make_income('1000'),
        make_expense('250', 'Rent', 'needs'),
        make_expense('600', 'Shopping', 'wants'),
        make_expense('50', 'Savings', 'savings'),
    ]
    progress = {p.bucket: p for p in budget_progress(summarize(snapshot))}

    assert progress['needs'].percent == 50.0
    assert progress['wants'].percent == 100.0
    assert progress['savings'].percent == 25.0
    assert not any(p.target_is_zero for p in progress.values())
    assert [p.label for p in progress.values()] == ['Needs', 'Wants', 'Savings']


def test_linked_expenses_filter_by_income_id():
    snapshot = mixed_snapshot()
    linked = linked_expenses(snapshot, 'salary')
    assert [t.category for t in linked] == ['Rent', 'Groceries', 'Savings']
    assert linked_expenses(snapshot, 'missing') == []


def test_paycheck_views_allocation():
    views = paycheck_views(mixed_snapshot())
    by_id = {v.income.id: v for v in views}

    assert [v.income.id for v in views] == ['salary', 'side', 'pending']
    assert by_id['salary'].allocated == Decimal('1589.99')
    assert by_id['salary'].remaining == Decimal('910.11')
    # unfunded expenses still count as allocated
    assert by_id['pending'].allocated == Decimal('60')
    assert by_id['pending'].remaining == Decimal('939')


def test_paycheck_view_can_be_over_allocated():
    income = make_income('100', id='small')
    views = paycheck_views([income, make_expense('150', linked_income_id='small')])
    assert views[0].remaining == Decimal('-50')


def test_expense_breakdown_counts_funded_only():
    breakdown = expense_breakdown(mixed_snapshot())
    assert list(breakdown.index) == ['Rent', 'Savings', 'Groceries', 'Entertainment']
    assert 'Shopping' not in breakdown.index
    assert breakdown['Rent'] == pytest.approx(1200.0)


def test_expense_breakdown_empty():
    assert expense_breakdown([make_income()]).empty


def test_transactions_to_frame():
    df = transactions_to_frame(mixed_snapshot())
    assert list(df.columns) == ['Date', 'Type', 'Category', 'Amount', 'Budget', 'Status', 'Linked Income']
    assert len(df) == 8
    assert set(df['Status']) == {'Received', 'Expected', 'Funded', 'Planned'}
    assert transactions_to_frame([]).empty

"""Streamlit app for the paycheck planner.

Shows the balance cards, the 50/30/20 panel, forms to add income and
expenses, the paycheck list with linked expenses and an expense chart.
All numbers come from :func:`paycheck_planner.aggregator.summarize` run on
the latest snapshot pushed by :class:`paycheck_planner.feed.TransactionFeed`.

To run the dashboard from the command line::

    streamlit run paycheck_planner/dashboard.py
"""

from __future__ import annotations

import os
import sys
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import streamlit as st

# Support both ``streamlit run paycheck_planner/dashboard.py`` (no package)
# and imports from the installed package.
if __package__:
    from . import visualization as viz
    from .aggregator import (
        BudgetSummary,
        PaycheckView,
        budget_progress,
        expense_breakdown,
        paycheck_views,
        summarize,
        transactions_to_frame,
    )
    from .config import BudgetRule, load_budget_rule
    from .feed import Snapshot, TransactionFeed
    from .formatting import escape_dollar_for_markdown, format_currency, format_percent
    from .logging_setup import setup_logging
    from .models import (
        BUDGET_CATEGORIES,
        EXPENSE,
        EXPENSE_CATEGORIES,
        INCOME,
        INCOME_CATEGORIES,
        PlannerError,
        Transaction,
    )
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from paycheck_planner import visualization as viz  # type: ignore
    from paycheck_planner.aggregator import (  # type: ignore
        BudgetSummary,
        PaycheckView,
        budget_progress,
        expense_breakdown,
        paycheck_views,
        summarize,
        transactions_to_frame,
    )
    from paycheck_planner.config import BudgetRule, load_budget_rule  # type: ignore
    from paycheck_planner.feed import Snapshot, TransactionFeed  # type: ignore
    from paycheck_planner.formatting import escape_dollar_for_markdown, format_currency, format_percent  # type: ignore
    from paycheck_planner.logging_setup import setup_logging  # type: ignore
    from paycheck_planner.models import (  # type: ignore
        BUDGET_CATEGORIES,
        EXPENSE,
        EXPENSE_CATEGORIES,
        INCOME,
        INCOME_CATEGORIES,
        PlannerError,
        Transaction,
    )

FEED_KEY = 'transaction_feed'
SNAPSHOT_KEY = 'transaction_snapshot'
UNSUBSCRIBE_KEY = 'transaction_unsubscribe'
SHOW_RULE_KEY = 'show_budget_rule'

BUCKET_HINTS = {
    'needs': "Housing, utilities, groceries, etc.",
    'wants': "Entertainment, dining out, shopping, etc.",
    'savings': "Savings, investments, debt repayment",
}
TARGET_BASIS = {
    'needs': "all income",
    'wants': "all income",
    'savings': "salary only",
}


def _rerun() -> None:
    """Trigger a Streamlit rerun across versions."""
    rerun = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun:
        rerun()


def build_income_payload(amount: Any, category: str, when: date, received: bool) -> Dict[str, Any]:
    return {
        'type': INCOME,
        'amount': amount,
        'category': category,
        'date': when,
        'receivedAmount': received,
    }


def build_expense_payload(
    amount: Any,
    category: str,
    when: date,
    budget_category: str,
    funded: bool,
    linked_income_id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        'type': EXPENSE,
        'amount': amount,
        'category': category,
        'date': when,
        'budgetCategory': budget_category,
        'funded': funded,
        'linkedIncomeId': linked_income_id or None,
    }


def income_label(income: Transaction) -> str:
    """Human readable label for an income, used in the paycheck selector."""
    return f"{income.category} · {format_currency(income.amount)} · {income.date:%b %d, %Y}"


def ensure_feed(state: Any, db_path=None) -> TransactionFeed:
    """Create the session's feed once and keep its snapshot in ``state``.

    ``state`` is ``st.session_state`` in the app; any mapping works.
    """
    if FEED_KEY not in state:
        feed = TransactionFeed(db_path)

        def _on_snapshot(snapshot: Snapshot) -> None:
            state[SNAPSHOT_KEY] = snapshot

        state[UNSUBSCRIBE_KEY] = feed.subscribe(_on_snapshot)
        state[FEED_KEY] = feed
    return state[FEED_KEY]


def run_action(action: Callable[..., Any], *args: Any, success: Optional[str] = None) -> bool:
    """Run a store write, reporting planner errors instead of crashing the page."""
    try:
        action(*args)
    except PlannerError as exc:
        st.error(str(exc))
        return False
    if success:
        st.toast(success)
    return True


def render_overview_cards(summary: BudgetSummary) -> None:
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("👛 Balance", format_currency(summary.balance))
    with col2:
        st.metric("⬆️ Income", format_currency(summary.total_income), help="Received income only")
    with col3:
        st.metric("⬇️ Expenses", format_currency(summary.total_expenses), help="Funded expenses only")
    with col4:
        st.metric("🐷 Actual Savings", format_currency(summary.actual_savings))


def render_budget_rule(summary: BudgetSummary, rule: BudgetRule) -> None:
    """Render the needs / wants / savings panels with progress bars."""
    shares = rule.as_dict()
    progress = budget_progress(summary)
    columns = st.columns(len(progress))
    for column, item in zip(columns, progress):
        with column:
            share = format_percent(float(shares[item.bucket] * 100))
            st.markdown(f"#### {item.label} ({share})")
            st.markdown(
                f"Target ({TARGET_BASIS[item.bucket]}): **{escape_dollar_for_markdown(item.target)}**  \n"
                f"Actual: **{escape_dollar_for_markdown(item.actual)}**"
            )
            st.progress(item.percent / 100.0, text=format_percent(item.percent))
            if item.target_is_zero:
                st.caption("No income recorded yet for this target.")
            st.caption(BUCKET_HINTS[item.bucket])
    st.plotly_chart(viz.create_budget_rule_chart(progress), use_container_width=True)


def render_income_form(feed: TransactionFeed) -> None:
    with st.form('add_income', clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=50.0, format="%.2f")
        category = st.selectbox("Category", INCOME_CATEGORIES)
        when = st.date_input("Date", value=date.today())
        received = st.checkbox("Received", value=True)
        submitted = st.form_submit_button("Add Income")
    if submitted:
        payload = build_income_payload(str(amount), category, when, received)
        if run_action(feed.create, payload, success="Income added"):
            _rerun()


def render_expense_form(feed: TransactionFeed, incomes: List[Transaction]) -> None:
    options: List[Optional[str]] = [None] + [income.id for income in incomes]
    labels = {income.id: income_label(income) for income in incomes}
    with st.form('add_expense', clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f")
        category = st.selectbox("Category", EXPENSE_CATEGORIES)
        budget_category = st.selectbox(
            "Budget category", BUDGET_CATEGORIES, format_func=lambda b: b.title()
        )
        when = st.date_input("Date", value=date.today())
        linked = st.selectbox(
            "Paycheck", options, format_func=lambda i: "Not linked" if i is None else labels[i]
        )
        funded = st.checkbox("Funded", value=False)
        submitted = st.form_submit_button("Add Expense")
    if submitted:
        payload = build_expense_payload(str(amount), category, when, budget_category, funded, linked)
        if run_action(feed.create, payload, success="Expense added"):
            _rerun()


def _render_paycheck(feed: TransactionFeed, view: PaycheckView) -> None:
    income = view.income
    status = "received" if income.received_amount else "expected"
    with st.container(border=True):
        head, action = st.columns([3, 1])
        with head:
            st.markdown(
                f"**{income.category}** · {escape_dollar_for_markdown(income.amount)} · "
                f"{income.date:%b %d, %Y} ({status})"
            )
            st.caption(
                f"Allocated {format_currency(view.allocated)} · Remaining {format_currency(view.remaining)}"
            )
        with action:
            label = "Mark expected" if income.received_amount else "Mark received"
            if st.button(label, key=f"recv_{income.id}"):
                if run_action(feed.set_received, income.id, not income.received_amount):
                    _rerun()
            if st.button("🗑️", key=f"del_{income.id}", help="Delete this income"):
                if run_action(feed.delete, income.id, success="Income deleted"):
                    _rerun()

        if not view.expenses:
            st.caption("No expenses linked to this paycheck.")
        for expense in view.expenses:
            left, right = st.columns([3, 1])
            with left:
                mark = "✅" if expense.funded else "⏳"
                st.markdown(
                    f"{mark} {expense.category} · {escape_dollar_for_markdown(expense.amount)} "
                    f"· {expense.budget_category}"
                )
            with right:
                label = "Unfund" if expense.funded else "Fund"
                if st.button(label, key=f"fund_{expense.id}"):
                    if run_action(feed.set_funded, expense.id, not expense.funded):
                        _rerun()


def render_paychecks(feed: TransactionFeed, snapshot: Snapshot, summary: BudgetSummary) -> None:
    st.subheader("💵 Paychecks")
    views = paycheck_views(snapshot, summary)
    if not views:
        st.info("No income recorded yet. Add a paycheck to start planning.")
        return
    for view in views:
        _render_paycheck(feed, view)


def render_expense_chart(snapshot: Snapshot) -> None:
    st.subheader("🧾 Expenses")
    st.plotly_chart(viz.create_expense_pie_chart(expense_breakdown(snapshot)), use_container_width=True)


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Financial Planner", page_icon="👛", layout="wide")
    setup_logging()

    feed = ensure_feed(st.session_state)
    # Pick up writes made from other sessions since the last run
    feed.publish()
    snapshot: Snapshot = st.session_state.get(SNAPSHOT_KEY, ())
    rule = load_budget_rule()
    summary = summarize(snapshot, rule)

    title, toggle = st.columns([4, 1])
    with title:
        st.title("👛 Financial Planner")
    with toggle:
        showing = st.session_state.get(SHOW_RULE_KEY, False)
        if st.button(f"🧮 {'Hide' if showing else 'Show'} 50/30/20"):
            st.session_state[SHOW_RULE_KEY] = not showing
            _rerun()

    if st.session_state.get(SHOW_RULE_KEY, False):
        render_budget_rule(summary, rule)

    render_overview_cards(summary)

    income_tab, expense_tab = st.tabs(["➕ Add Income", "➕ Add Expense"])
    with income_tab:
        render_income_form(feed)
    with expense_tab:
        render_expense_form(feed, list(summary.incomes))

    left, right = st.columns([2, 1])
    with left:
        render_paychecks(feed, snapshot, summary)
    with right:
        render_expense_chart(snapshot)

    with st.expander("All transactions"):
        st.dataframe(transactions_to_frame(snapshot), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()

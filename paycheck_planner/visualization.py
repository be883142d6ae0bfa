"""Plotly visualisation helpers for the paycheck planner.

Each function accepts a value produced by :mod:`paycheck_planner.aggregator`
and returns a ``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.  Empty input yields an empty figure titled
"No data to display" rather than an error.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregator import BudgetProgress


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_expense_pie_chart(series: pd.Series, title: str | None = None) -> go.Figure:
    """Generate a pie chart of funded expenses by category.

    Parameters
    ----------
    series : pandas.Series
        Series indexed by category with summed amounts, as returned by
        :func:`paycheck_planner.aggregator.expense_breakdown`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    if series.empty:
        return _empty_figure()
    df = series.reset_index()
    df.columns = ["Category", "Amount"]
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        hole=0.4,
        color_discrete_sequence=px.colors.qualitative.Set3,
    )
    fig.update_traces(textposition='inside', textinfo='percent+label')
    fig.update_layout(title=title or "Expenses by category")
    return fig


def create_budget_rule_chart(progress: Sequence[BudgetProgress], title: str | None = None) -> go.Figure:
    """Render target vs actual for each 50/30/20 bucket as grouped bars.

    Parameters
    ----------
    progress : sequence of BudgetProgress
        Output of :func:`paycheck_planner.aggregator.budget_progress`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bar chart with one "Target" and one "Actual" bar per bucket.
    """
    if not progress:
        return _empty_figure()
    rows = []
    for item in progress:
        rows.append({"Bucket": item.label, "Metric": "Target", "Amount": float(item.target)})
        rows.append({"Bucket": item.label, "Metric": "Actual", "Amount": float(item.actual)})
    df = pd.DataFrame(rows)
    fig = px.bar(df, x="Bucket", y="Amount", color="Metric", barmode="group")
    fig.update_layout(
        title=title or "50/30/20 targets vs actual",
        xaxis_title="Bucket",
        yaxis_title="Amount ($)",
    )
    return fig

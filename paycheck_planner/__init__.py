"""Top-level package for the paycheck planner.

The primary modules are:

* ``models`` – the transaction record, category catalogs and validation
* ``aggregator`` – balance, totals and 50/30/20 targets for a snapshot
* ``db`` / ``feed`` – the SQLite store and its live snapshot subscription
* ``visualization`` – Plotly figures for the dashboard
* ``dashboard`` – the Streamlit app that ties everything together

To run the dashboard from the command line:

```bash
streamlit run paycheck_planner/dashboard.py
```

or use ``run_dashboard.py`` at the repository root.
"""

from .aggregator import BudgetSummary, budget_progress, paycheck_views, summarize  # noqa: F401
from .models import InvalidTransaction, PlannerError, TargetZero, Transaction  # noqa: F401

__all__ = [
    "BudgetSummary",
    "InvalidTransaction",
    "PlannerError",
    "TargetZero",
    "Transaction",
    "budget_progress",
    "paycheck_views",
    "summarize",
]

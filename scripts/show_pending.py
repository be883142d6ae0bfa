#!/usr/bin/env python3
"""Show expected income and planned (unfunded) expenses."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from paycheck_planner import db
from paycheck_planner.aggregator import transactions_to_frame
from paycheck_planner.formatting import format_currency


def main(limit: int = 20) -> None:
    db.init_db()
    df = transactions_to_frame(db.fetch_transactions())
    pending = df[df['Status'].isin(['Expected', 'Planned'])]
    if pending.empty:
        print("Everything is received and funded. 🎉")
        return

    print(f"Total pending: {len(pending)}")
    totals = pending.groupby('Status')['Amount'].sum()
    for status, amount in totals.items():
        print(f"  {status}: {format_currency(amount)}")

    print("\nBy category:")
    print(pending.groupby(['Type', 'Category'])['Amount'].sum().to_string())

    print("\nSample rows:")
    columns = ['Date', 'Type', 'Category', 'Amount', 'Status']
    print(pending[columns].head(limit).to_string(index=False))


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show expected income and unfunded expenses.')
    parser.add_argument('--limit', type=int, default=20, help='How many rows to show')
    args = parser.parse_args()
    main(limit=args.limit)

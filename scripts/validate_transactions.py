#!/usr/bin/env python3
"""Validate every stored transaction against the record invariants."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from paycheck_planner import config, db
from paycheck_planner.models import InvalidTransaction, Transaction, transaction_from_record, validate_snapshot


def main() -> int:
    if not config.DB_PATH.exists():
        print(f"Database not found: {config.DB_PATH}")
        return 1

    with db.connect() as conn:
        rows = conn.execute("SELECT * FROM transactions ORDER BY date").fetchall()

    issues: List[Tuple[str, str]] = []
    valid: List[Transaction] = []
    for row in rows:
        try:
            valid.append(transaction_from_record(dict(row)))
        except InvalidTransaction as exc:
            issues.append((row['id'], "; ".join(exc.problems)))

    try:
        validate_snapshot(valid)
    except InvalidTransaction as exc:
        issues.extend(("(snapshot)", problem) for problem in exc.problems)

    if issues:
        print("Transaction validation failed:")
        for transaction_id, message in issues:
            print(f"  - {transaction_id}: {message}")
        return 1

    print(f"All {len(rows)} transactions validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

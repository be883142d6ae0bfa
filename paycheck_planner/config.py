"""Configuration management for the paycheck planner.

This module centralizes all configuration values including paths,
logging defaults, the budget rule rates and environment variable overrides.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Base project root - assumes this file is in paycheck_planner/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("PLANNER_DATA_DIR", _PROJECT_ROOT / "data"))
LOG_DIR = Path(os.getenv("PLANNER_LOG_DIR", DATA_DIR / "logs"))
LOG_LEVEL = os.getenv("PLANNER_LOG_LEVEL", "INFO").upper()

# Database
DB_PATH = Path(
    os.getenv("PLANNER_DB_PATH", DATA_DIR / "planner.db")
).resolve()

# Optional overrides for the 50/30/20 split
BUDGET_RULE_PATH = Path(os.getenv("PLANNER_BUDGET_RULE_PATH", DATA_DIR / "budget_rule.json"))


@dataclass(frozen=True)
class BudgetRule:
    """Share of income assigned to each budget bucket.

    ``needs`` and ``wants`` apply to all received income, ``savings``
    applies to received salary only.
    """

    needs: Decimal = Decimal("0.5")
    wants: Decimal = Decimal("0.3")
    savings: Decimal = Decimal("0.2")

    def as_dict(self) -> Dict[str, Decimal]:
        return {"needs": self.needs, "wants": self.wants, "savings": self.savings}


DEFAULT_RULE = BudgetRule()


def _parse_rate(data: Dict[str, Any], key: str, default: Decimal) -> Decimal:
    raw = data.get(key)
    if raw is None:
        return default
    # str() first so 0.3 stays 0.3 instead of its binary float expansion
    try:
        rate = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Budget rule rate '{key}' is not a number, got {raw!r}") from None
    if not rate.is_finite():
        raise ValueError(f"Budget rule rate '{key}' must be finite, got {raw!r}")
    if rate < 0 or rate > 1:
        raise ValueError(f"Budget rule rate '{key}' must be between 0 and 1, got {raw}")
    return rate


def load_budget_rule(path: Optional[Union[str, Path]] = None) -> BudgetRule:
    """Load the budget rule rates from JSON, falling back to 50/30/20.

    Args:
        path: Optional path to the JSON file. Defaults to ``BUDGET_RULE_PATH``.

    Returns:
        BudgetRule with the configured rates.

    Raises:
        ValueError: If a rate is not a number, is outside [0, 1] or the rates add up to more than 1.

    Example:
        >>> load_budget_rule(Path('/nonexistent.json'))
        BudgetRule(needs=Decimal('0.5'), wants=Decimal('0.3'), savings=Decimal('0.2'))
    """
    target = Path(path) if path else BUDGET_RULE_PATH
    if not target.exists():
        return DEFAULT_RULE
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError):
        return DEFAULT_RULE
    if not isinstance(data, dict):
        return DEFAULT_RULE

    rule = BudgetRule(
        needs=_parse_rate(data, "needs", DEFAULT_RULE.needs),
        wants=_parse_rate(data, "wants", DEFAULT_RULE.wants),
        savings=_parse_rate(data, "savings", DEFAULT_RULE.savings),
    )
    if rule.needs + rule.wants + rule.savings > 1:
        raise ValueError("Budget rule rates must not add up to more than 100%")
    return rule


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, LOG_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)

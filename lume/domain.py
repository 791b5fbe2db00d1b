from dataclasses import dataclass, field
from typing import Optional, Tuple

DEFAULT_CURRENCY_SYMBOL = "$"


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float            # always > 0, expenses only
    date: str                # ISO-8601, e.g. "2025-09-01T10:00:00+00:00"
    note: Optional[str] = None
    category: Optional[str] = None   # short label or emoji


@dataclass(frozen=True)
class BudgetConfig:
    monthly_limit: float = 0.0
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    onboarding_complete: bool = False


# Sole unit of persistence; transactions are kept newest first
@dataclass(frozen=True)
class AppState:
    transactions: Tuple[Transaction, ...] = ()
    config: BudgetConfig = field(default_factory=BudgetConfig)


@dataclass(frozen=True)
class DerivedMetrics:
    total_spent_month: float
    remaining_monthly: float
    spent_today: float
    daily_target: float
    remaining_today: float
    is_over_budget: bool
    avg_daily: float
    days_in_month: int
    days_remaining: int
    budget_available: float


def default_state() -> AppState:
    return AppState(transactions=(), config=BudgetConfig())

import calendar
from datetime import datetime
from functools import lru_cache
from typing import Tuple

from lume.domain import BudgetConfig, DerivedMetrics, Transaction
from lume.ledger import filter_by_day, filter_by_month, month_key, total_amount


@lru_cache(maxsize=None)
def _month_length(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_in_month(now: datetime) -> int:
    return _month_length(now.year, now.month)


def days_remaining(now: datetime) -> int:
    """Days left in the month, today included. Never less than 1."""
    return max(1, days_in_month(now) - now.day + 1)


def compute_metrics(
    transactions: Tuple[Transaction, ...], config: BudgetConfig, now: datetime
) -> DerivedMetrics:
    """Derive today's allowance from the monthly limit and this month's spend.

    Today's spend is added back to the remaining pool before it is divided
    across the remaining days, so past under- or overspend is spread evenly
    over today and the rest of the month without any stored carry-over.
    """
    month_days = days_in_month(now)
    remaining_days = days_remaining(now)

    month_tx = filter_by_month(transactions, month_key(now), now.tzinfo)
    total_spent = total_amount(month_tx)
    remaining_monthly = config.monthly_limit - total_spent
    spent_today = total_amount(filter_by_day(month_tx, now.day, now.tzinfo))

    budget_available = remaining_monthly + spent_today
    daily_target = budget_available / remaining_days
    remaining_today = daily_target - spent_today

    return DerivedMetrics(
        total_spent_month=total_spent,
        remaining_monthly=remaining_monthly,
        spent_today=spent_today,
        daily_target=daily_target,
        remaining_today=remaining_today,
        is_over_budget=remaining_today < 0,
        avg_daily=config.monthly_limit / month_days,
        days_in_month=month_days,
        days_remaining=remaining_days,
        budget_available=budget_available,
    )

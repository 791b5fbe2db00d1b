from collections import defaultdict
from datetime import datetime
from typing import Iterable, Iterator, List, Tuple

from lume.calculator import days_in_month
from lume.domain import Transaction
from lume.ledger import filter_by_month, month_key, transaction_time

SPIKE_FACTOR = 1.5


def month_transactions(trans: Tuple[Transaction, ...], now: datetime) -> Tuple[Transaction, ...]:
    return filter_by_month(trans, month_key(now), now.tzinfo)


def daily_spending(trans: Tuple[Transaction, ...], now: datetime) -> List[Tuple[int, float]]:
    """Spend per day of ``now``'s month, one entry for every day."""
    totals: dict[int, float] = defaultdict(float)
    for t in month_transactions(trans, now):
        day = transaction_time(t, now.tzinfo).map(lambda dt: dt.day).get_or_else(None)
        if day is not None:
            totals[day] += t.amount
    return [(day, totals[day]) for day in range(1, days_in_month(now) + 1)]


def spike_days(
    series: Iterable[Tuple[int, float]], avg_daily: float, factor: float = SPIKE_FACTOR
) -> Iterator[int]:
    threshold = avg_daily * factor
    for day, amount in series:
        if amount > threshold:
            yield day


def month_progress(total_spent: float, monthly_limit: float) -> float:
    if monthly_limit <= 0:
        return 1.0 if total_spent > 0 else 0.0
    return total_spent / monthly_limit


def recent_transactions(
    trans: Tuple[Transaction, ...], now: datetime, limit: int = 5
) -> Tuple[Transaction, ...]:
    # the ledger is already newest first
    return month_transactions(trans, now)[: max(0, limit)]


def format_currency(amount: float, symbol: str) -> str:
    return f"{symbol}{abs(amount):,.0f}"


def transaction_rows(trans: Tuple[Transaction, ...], now: datetime) -> List[dict]:
    """Table rows with dates in the zone the metrics use."""
    return [
        {
            "date": transaction_time(t, now.tzinfo).get_or_else(None),
            "amount": t.amount,
            "category": t.category,
            "note": t.note,
        }
        for t in trans
    ]

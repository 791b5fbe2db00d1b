from datetime import datetime, tzinfo
from functools import reduce
from typing import Callable, Optional, Tuple
from uuid import uuid4

from lume.domain import Transaction
from lume.functional import Either, Maybe, Nothing, Some, parse_timestamp, validate_amount


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def new_transaction(
    amount,
    note: Optional[str] = None,
    category: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Either[dict, Transaction]:
    stamp = now or datetime.now()
    # record the offset in force at this instant; naive values are local time
    if stamp.tzinfo is None:
        stamp = stamp.astimezone()
    return validate_amount(amount).map(
        lambda value: Transaction(
            id=str(uuid4()),
            amount=value,
            date=stamp.isoformat(),
            note=_clean_text(note),
            category=_clean_text(category),
        )
    )


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    # newest first
    return (t,) + trans


def month_key(dt: datetime) -> str:
    return f"{dt.year:04d}-{dt.month:02d}"


def localize(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express ``dt`` in the zone ``tz``.

    With ``tz=None`` the result is naive local time: aware values are
    converted to the system zone, naive values are assumed local already.
    A naive value paired with an explicit zone is assumed to be in that zone.
    """
    if tz is None:
        return dt.astimezone().replace(tzinfo=None) if dt.tzinfo else dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def transaction_time(t: Transaction, tz: Optional[tzinfo] = None) -> Maybe[datetime]:
    dt = parse_timestamp(t.date).get_or_else(None)
    if dt is None:
        return Nothing()
    try:
        return Some(localize(dt, tz))
    except (OverflowError, OSError):
        # e.g. year 1 or 9999 shifted past the representable range
        return Nothing()


def by_month(key: str, tz: Optional[tzinfo] = None) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return transaction_time(t, tz).map(month_key).get_or_else(None) == key

    return _filter


def by_day(day: int, tz: Optional[tzinfo] = None) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return transaction_time(t, tz).map(lambda dt: dt.day).get_or_else(None) == day

    return _filter


def filter_by_month(
    trans: Tuple[Transaction, ...], key: str, tz: Optional[tzinfo] = None
) -> Tuple[Transaction, ...]:
    return tuple(filter(by_month(key, tz), trans))


def filter_by_day(
    trans: Tuple[Transaction, ...], day: int, tz: Optional[tzinfo] = None
) -> Tuple[Transaction, ...]:
    return tuple(filter(by_day(day, tz), trans))


def total_amount(trans: Tuple[Transaction, ...]) -> float:
    return reduce(lambda acc, t: acc + t.amount, trans, 0.0)

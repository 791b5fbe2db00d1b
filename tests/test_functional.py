import math
from decimal import Decimal
from datetime import datetime, timezone

from lume.functional import (
    Left,
    Nothing,
    Right,
    Some,
    parse_timestamp,
    to_number,
    validate_amount,
    validate_limit,
    validate_symbol,
)


def test_maybe_map():
    assert Some(5).map(lambda x: x * 2) == Some(10)
    assert Nothing().map(lambda x: x * 2) == Nothing()
    assert Nothing().get_or_else(3) == 3


def test_either_map_and_bind():
    assert Right(2).map(lambda x: x + 1) == Right(3)
    assert Left("boom").map(lambda x: x + 1).get_error() == "boom"
    assert Right(0).bind(lambda x: Left("zero") if x == 0 else Right(x)).get_error() == "zero"
    assert Left("boom").get_or_else(7) == 7


def test_to_number():
    assert to_number(3) == Right(3.0)
    assert to_number(" 4.5 ") == Right(4.5)
    assert to_number(Decimal("2.50")) == Right(2.5)
    assert to_number("1e2") == Right(100.0)
    assert to_number("twelve").get_error()["error"] == "not_a_number"
    assert to_number(False).get_error()["error"] == "not_a_number"
    assert to_number([1]).get_error()["error"] == "not_a_number"
    assert to_number(math.nan).get_error()["error"] == "not_finite"
    assert to_number("inf").get_error()["error"] == "not_finite"


def test_validate_amount():
    assert validate_amount(0.01) == Right(0.01)
    assert validate_amount(0).get_error()["error"] == "non_positive_amount"
    assert validate_amount(-5).get_error()["amount"] == -5


def test_validate_limit():
    assert validate_limit(0) == Right(0.0)
    assert validate_limit("900") == Right(900.0)
    assert validate_limit(-1).get_error()["error"] == "negative_limit"
    assert not validate_limit("lots").is_right()


def test_parse_timestamp():
    assert parse_timestamp("2025-09-01T10:00:00") == Some(datetime(2025, 9, 1, 10, 0))
    assert parse_timestamp("2025-09-01T10:00:00.123Z") == Some(
        datetime(2025, 9, 1, 10, 0, 0, 123000, tzinfo=timezone.utc)
    )
    assert parse_timestamp("yesterday") == Nothing()
    assert parse_timestamp("") == Nothing()
    assert parse_timestamp(None) == Nothing()
    assert parse_timestamp(1700000000) == Nothing()


def test_validate_symbol():
    assert validate_symbol(" € ") == Right("€")
    assert validate_symbol("  ").get_error()["error"] == "empty_symbol"
    assert not validate_symbol(None).is_right()
    assert not validate_symbol(5).is_right()

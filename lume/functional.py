import math
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from numbers import Real
from typing import Any, Callable, Generic, TypeVar

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def to_number(value: Any) -> Either[dict, float]:
    """Coerce user input (number or numeric text) into a finite float."""
    if isinstance(value, bool) or value is None:
        return Left({
            "error": "not_a_number",
            "message": f"Expected a number, got {value!r}",
        })
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return Left({
                "error": "not_a_number",
                "message": f"Cannot parse {value!r} as a number",
            })
    elif not isinstance(value, (Real, Decimal)):
        return Left({
            "error": "not_a_number",
            "message": f"Expected a number, got {type(value).__name__}",
        })

    number = float(value)
    if not math.isfinite(number):
        return Left({
            "error": "not_finite",
            "message": f"Expected a finite number, got {number}",
        })
    return Right(number)


def validate_amount(value: Any) -> Either[dict, float]:
    def _positive(number: float) -> Either[dict, float]:
        if number <= 0:
            return Left({
                "error": "non_positive_amount",
                "message": f"Expense amount must be greater than zero, got {number}",
                "amount": number,
            })
        return Right(number)

    return to_number(value).bind(_positive)


def validate_limit(value: Any) -> Either[dict, float]:
    def _non_negative(number: float) -> Either[dict, float]:
        if number < 0:
            return Left({
                "error": "negative_limit",
                "message": f"Monthly limit cannot be negative, got {number}",
                "limit": number,
            })
        return Right(number)

    return to_number(value).bind(_non_negative)


def parse_timestamp(value: Any) -> Maybe[datetime]:
    if not isinstance(value, str) or not value.strip():
        return Nothing()
    text = value.strip()
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return Some(datetime.fromisoformat(text))
    except ValueError:
        return Nothing()


def validate_symbol(value: Any) -> Either[dict, str]:
    if not isinstance(value, str) or not value.strip():
        return Left({
            "error": "empty_symbol",
            "message": f"Currency symbol must be non-empty text, got {value!r}",
        })
    return Right(value.strip())

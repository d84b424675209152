import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Tuple, TypeVar

from wallet.domain import Category, Number

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

    def is_none(self) -> bool:
        return not self.is_some()


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
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

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


def parse_number(value: Any) -> Maybe[Number]:
    """Read a user-supplied value as a finite number.

    Accepts ints, floats, bools and numeric strings (surrounding whitespace
    allowed). Anything else, including NaN and infinities, is ``Nothing()``.
    """
    if isinstance(value, bool):
        return Some(int(value))
    if isinstance(value, (int, float)):
        return Some(value) if math.isfinite(value) else Nothing()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return Nothing()
        try:
            return Some(int(text))
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return Nothing()
        return Some(number) if math.isfinite(number) else Nothing()
    return Nothing()


def to_number(value: Any) -> Number:
    """Coerce input to a number; invalid input becomes 0."""
    return parse_number(value).get_or_else(0)


def safe_category(cats: Tuple[Category, ...], cat_id: Any) -> Maybe[Category]:
    if not cat_id:
        return Nothing()
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


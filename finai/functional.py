import math
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Callable

from finai.domain import Category, RISK_TIERS
from finai.errors import FinanceError, InvalidAmount, InvalidRiskTier, UnknownCategory

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    @abstractmethod
    def is_none(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Some({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

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
    def is_left(self) -> bool:
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

    def is_left(self) -> bool:
        return False

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

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

    def is_left(self) -> bool:
        return True

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def unwrap(result: Either[FinanceError, T]) -> T:
    """Return the Right value or raise the FinanceError carried by a Left."""
    if result.is_left():
        raise result.get_error()
    return result.get_or_else(None)


def safe_category(cats: tuple[Category, ...], name: str) -> Maybe[Category]:
    for cat in cats:
        if cat.name == name:
            return Some(cat)
    return Nothing()


def validate_amount(amount: float, allow_zero: bool = False) -> Either[FinanceError, float]:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return Left(InvalidAmount(f"Amount must be a number, got {amount!r}", amount=amount))
    if not math.isfinite(amount):
        return Left(InvalidAmount(f"Amount must be finite, got {amount}", amount=amount))
    if amount < 0 or (amount == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        return Left(InvalidAmount(f"Amount must be {bound}, got {amount}", amount=amount))
    return Right(float(amount))


def validate_risk_tier(tier: str) -> Either[FinanceError, str]:
    if tier not in RISK_TIERS:
        return Left(InvalidRiskTier(
            f"Risk tier must be one of {', '.join(RISK_TIERS)}, got {tier!r}",
            risk=tier,
        ))
    return Right(tier)


def require_category(cats: tuple[Category, ...], name: str) -> Either[FinanceError, Category]:
    found = safe_category(cats, name)
    if found.is_none():
        return Left(UnknownCategory(
            f"Category {name!r} does not exist",
            category=name,
        ))
    return Right(found.get_or_else(None))


def validate_category_amount(
    cats: tuple[Category, ...], name: str, amount: float
) -> Either[FinanceError, tuple[Category, float]]:
    """Check an (category, amount) pair for an expense or quick add."""
    return validate_amount(amount).bind(
        lambda valid: require_category(cats, name).map(lambda cat: (cat, valid))
    )

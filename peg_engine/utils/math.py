"""Numeric helpers: price statistics and fixed-point ledger units."""

from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation
from fractions import Fraction
from typing import Sequence, Union

import numpy as np

from peg_engine.errors import InvalidAmountError

Number = Union[int, float, Decimal, str]


def calculate_returns(prices: Sequence[float], log_returns: bool = False) -> np.ndarray:
    """
    Calculate returns from a price series.

    Args:
        prices: Price sequence (oldest first)
        log_returns: If True, calculate log returns; otherwise simple returns

    Returns:
        Return array (length = len(prices) - 1)
    """
    prices = np.asarray(prices, dtype=float)
    if len(prices) < 2:
        return np.empty(0)
    if log_returns:
        return np.diff(np.log(prices))
    return np.diff(prices) / prices[:-1]


def calculate_volatility(returns: np.ndarray, ddof: int = 0) -> float:
    """
    Standard deviation of a return series.

    Args:
        returns: Return array
        ddof: Delta degrees of freedom (0 = population std)

    Returns:
        Volatility, 0.0 when there are not enough observations
    """
    returns = np.asarray(returns, dtype=float)
    if len(returns) <= ddof or len(returns) == 0:
        return 0.0
    return float(np.std(returns, ddof=ddof))


def exact_ratio(value: Number) -> Fraction:
    """
    Exact rational form of a configured ratio.

    Floats go through their shortest repr so that 0.1 means 1/10 rather
    than the nearest binary fraction; boundary checks at exactly the
    minimum ratio then compare equal.
    """
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def to_minor_units(amount: Number, decimals: int) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Args:
        amount: Non-negative amount (int, float, Decimal or numeric string)
        decimals: Number of decimal places held by the ledger

    Returns:
        Amount in minor units, rounded half-even

    Raises:
        InvalidAmountError: If the amount is negative, non-finite or not numeric
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Amount must be numeric, got {amount!r}")
    try:
        value = Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"Amount must be numeric, got {amount!r}") from exc

    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise InvalidAmountError(f"Amount must be non-negative, got {amount!r}")

    scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
    return int(scaled)


def from_minor_units(units: int, decimals: int) -> float:
    """Convert integer minor units back to a major-unit float."""
    return float(Fraction(units, 10 ** decimals))


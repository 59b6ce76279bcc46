"""Utility modules."""

from peg_engine.utils.time import (
    Clock,
    ManualClock,
    as_timedelta,
    utc_now,
)
from peg_engine.utils.math import (
    calculate_returns,
    calculate_volatility,
    exact_ratio,
    from_minor_units,
    to_minor_units,
)
from peg_engine.utils.logging import setup_logger

__all__ = [
    "Clock",
    "ManualClock",
    "as_timedelta",
    "utc_now",
    "calculate_returns",
    "calculate_volatility",
    "exact_ratio",
    "from_minor_units",
    "to_minor_units",
    "setup_logger",
]

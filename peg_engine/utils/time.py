"""Time utilities for the peg engine."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_timedelta(value: Union[timedelta, int, float]) -> timedelta:
    """Accept a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


class ManualClock:
    """
    Clock that only moves when told to.
    
    Used by the simulation harness and tests so that every rebalance
    decision is reproducible from its inputs.
    """
    
    def __init__(self, start: datetime):
        self._now = start
    
    def __call__(self) -> datetime:
        return self._now
    
    def advance(self, delta: Union[timedelta, int, float]) -> datetime:
        """Move the clock forward and return the new time."""
        step = as_timedelta(delta)
        if step < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._now += step
        return self._now
    
    def set(self, moment: datetime) -> None:
        """Jump to an absolute time."""
        self._now = moment

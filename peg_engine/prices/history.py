"""Price samples and the bounded store that buffers them."""

import math
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from peg_engine.errors import InvalidPriceError


@dataclass(frozen=True)
class PricePoint:
    """A single observation from the price feed."""

    price: float
    timestamp: datetime
    volume: float = 0.0
    confidence: float = 1.0  # 0-1, as reported by the oracle

    def __post_init__(self):
        if not isinstance(self.timestamp, datetime):
            raise InvalidPriceError(f"timestamp must be a datetime, got {self.timestamp!r}")
        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            raise InvalidPriceError(f"timestamp must be timezone-aware, got {self.timestamp!r}")
        for name in ("price", "volume", "confidence"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidPriceError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidPriceError(f"{name} must be finite, got {value!r}")
        if self.price <= 0:
            raise InvalidPriceError(f"price must be positive, got {self.price}")
        if self.volume < 0:
            raise InvalidPriceError(f"volume must be non-negative, got {self.volume}")
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidPriceError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "price": self.price,
            "timestamp": self.timestamp,
            "volume": self.volume,
            "confidence": self.confidence,
        }


class PriceHistory:
    """
    Append-only, bounded buffer of price samples.

    Samples are kept in arrival order; the oldest are dropped once
    ``max_points`` is reached. Has its own lock so that feed threads can
    append without contending with ledger operations.
    """

    def __init__(self, max_points: int = 1000):
        if max_points <= 0:
            raise ValueError("max_points must be positive")
        self._points: deque = deque(maxlen=max_points)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._points)

    @property
    def max_points(self) -> int:
        return self._points.maxlen

    def add(self, point: PricePoint) -> None:
        """Append a sample."""
        if not isinstance(point, PricePoint):
            raise InvalidPriceError(f"Expected PricePoint, got {type(point).__name__}")
        with self._lock:
            self._points.append(point)

    def latest(self) -> Optional[PricePoint]:
        """Most recently added sample, if any."""
        with self._lock:
            return self._points[-1] if self._points else None

    def snapshot(self) -> List[PricePoint]:
        """Copy of all buffered samples, oldest first."""
        with self._lock:
            return list(self._points)

    def recent(self, limit: int = 100) -> List[PricePoint]:
        """Last ``limit`` samples, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            points = list(self._points)
        return points[-limit:]

    def window(self, now: datetime, window: timedelta) -> List[PricePoint]:
        """Samples with ``now - window <= timestamp <= now``, in arrival order."""
        cutoff = now - window
        with self._lock:
            return [p for p in self._points if cutoff <= p.timestamp <= now]

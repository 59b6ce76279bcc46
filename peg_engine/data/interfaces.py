"""Interfaces to the engine's external collaborators."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from peg_engine.policy.rebalance import RebalanceEvent
from peg_engine.prices.history import PricePoint

logger = logging.getLogger(__name__)


class PriceFeed(ABC):
    """Source of price samples (exchange aggregator, oracle, replay file)."""

    @abstractmethod
    def latest(self) -> Optional[PricePoint]:
        """
        Get the newest available sample.

        Returns:
            PricePoint, or None when the feed has nothing new
        """
        pass


class AdjustmentSink(ABC):
    """Consumer of executed supply adjustments (e.g. the on-chain bridge)."""

    @abstractmethod
    def publish(self, event: RebalanceEvent) -> None:
        """
        Receive an executed adjustment.

        Implementations must be idempotent with respect to
        ``event.sequence``: the same event may be delivered more than once.

        Args:
            event: Executed rebalance event (``event.sequence`` is set)
        """
        pass


class StaticPriceFeed(PriceFeed):
    """Replays a fixed list of samples, one per call."""

    def __init__(self, points: List[PricePoint]):
        """Initialize feed."""
        self._points = list(points)
        self._cursor = 0

    def latest(self) -> Optional[PricePoint]:
        if self._cursor >= len(self._points):
            return None
        point = self._points[self._cursor]
        self._cursor += 1
        return point


class InMemoryAdjustmentSink(AdjustmentSink):
    """Keeps published events keyed by sequence; duplicates are ignored."""

    def __init__(self):
        """Initialize sink."""
        self.events: Dict[int, RebalanceEvent] = {}
        self.duplicates = 0

    def publish(self, event: RebalanceEvent) -> None:
        if event.sequence is None:
            raise ValueError("Only executed adjustments can be published")
        if event.sequence in self.events:
            self.duplicates += 1
            logger.debug("Ignoring duplicate adjustment #%d", event.sequence)
            return
        self.events[event.sequence] = event

    def ordered(self) -> List[RebalanceEvent]:
        """Events in sequence order."""
        return [self.events[seq] for seq in sorted(self.events)]

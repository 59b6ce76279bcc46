"""Reserve ledger: the backing pool and its minimum-ratio rule."""

import logging

from peg_engine.utils.math import Number, exact_ratio, from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


def reserve_ratio(reserve_units: int, supply_units: int) -> float:
    """Current reserve / supply; 0.0 when there is no supply."""
    if supply_units <= 0:
        return 0.0
    return reserve_units / supply_units


def meets_reserve_ratio(reserve_units: int, supply_units: int, min_ratio: Number) -> bool:
    """
    Exact check of ``reserve / supply >= min_ratio``.
    
    With zero supply the ratio is undefined and treated as satisfied.
    """
    if supply_units <= 0:
        return True
    return reserve_units >= exact_ratio(min_ratio) * supply_units


class ReserveLedger:
    """
    Reserve pool backing the circulating supply, in integer minor units.
    
    Not thread-safe on its own; the engine serializes access.
    """
    
    def __init__(self, initial_reserve: Number = 0, decimals: int = 6):
        """
        Initialize reserve ledger.
        
        Args:
            initial_reserve: Starting reserve in major units
            decimals: Decimal places kept by the ledger
        """
        self.decimals = decimals
        self._units = to_minor_units(initial_reserve, decimals)
    
    @property
    def units(self) -> int:
        """Reserve in minor units."""
        return self._units
    
    @property
    def reserve_pool(self) -> float:
        """Reserve in major units."""
        return from_minor_units(self._units, self.decimals)
    
    def add_reserves(self, amount: Number) -> None:
        """Add a non-negative amount to the pool."""
        self._units += to_minor_units(amount, self.decimals)
    
    def remove_reserves(self, amount: Number, supply_units: int, min_ratio: Number) -> bool:
        """
        Withdraw from the pool if the reserve ratio still holds afterwards.
        
        Args:
            amount: Amount to withdraw (major units)
            supply_units: Current total supply in minor units
            min_ratio: Minimum reserve / supply ratio
        
        Returns:
            True if withdrawn; False (no change) if the pool is too small or
            the remaining reserve would fall below the ratio
        """
        units = to_minor_units(amount, self.decimals)
        if units > self._units:
            logger.warning(
                "Reserve removal of %s rejected: pool holds %s",
                from_minor_units(units, self.decimals),
                self.reserve_pool,
            )
            return False
        
        remaining = self._units - units
        if not meets_reserve_ratio(remaining, supply_units, min_ratio):
            logger.warning(
                "Reserve removal of %s rejected: ratio would drop to %.6f (min %s)",
                from_minor_units(units, self.decimals),
                reserve_ratio(remaining, supply_units),
                min_ratio,
            )
            return False
        
        self._units = remaining
        return True

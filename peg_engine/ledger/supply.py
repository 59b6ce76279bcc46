"""Supply ledger: circulating token supply with mint/burn primitives."""

import logging

from peg_engine.utils.math import Number, from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


class SupplyLedger:
    """
    Total token supply held as integer minor units.
    
    Not thread-safe on its own; the engine serializes access.
    """
    
    def __init__(self, initial_supply: Number = 0, decimals: int = 6):
        """
        Initialize supply ledger.
        
        Args:
            initial_supply: Starting supply in major units
            decimals: Decimal places kept by the ledger
        """
        self.decimals = decimals
        self._units = to_minor_units(initial_supply, decimals)
    
    @property
    def units(self) -> int:
        """Supply in minor units."""
        return self._units
    
    @property
    def total_supply(self) -> float:
        """Supply in major units."""
        return from_minor_units(self._units, self.decimals)
    
    def mint(self, amount: Number) -> None:
        """Increase supply by a non-negative amount."""
        self.mint_units(to_minor_units(amount, self.decimals))
    
    def burn(self, amount: Number) -> bool:
        """
        Decrease supply.
        
        Returns:
            True if burned; False (no change) if amount exceeds supply
        """
        return self.burn_units(to_minor_units(amount, self.decimals))
    
    def mint_units(self, units: int) -> None:
        if units < 0:
            raise ValueError(f"Cannot mint negative units: {units}")
        self._units += units
    
    def burn_units(self, units: int) -> bool:
        if units < 0:
            raise ValueError(f"Cannot burn negative units: {units}")
        if units > self._units:
            logger.warning(
                "Burn of %s rejected: exceeds supply %s",
                from_minor_units(units, self.decimals),
                self.total_supply,
            )
            return False
        self._units -= units
        return True

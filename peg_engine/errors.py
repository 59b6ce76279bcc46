"""Exception types raised by the peg engine.

Expected business outcomes (insufficient reserves, excessive burns,
rebalances requested too early) are reported through return values.
Only structurally invalid input raises.
"""


class PegEngineError(Exception):
    """Base class for engine errors."""


class InvalidInputError(PegEngineError, ValueError):
    """Input rejected at the point of entry."""


class InvalidPriceError(InvalidInputError):
    """Price sample with a non-positive price or out-of-range confidence."""


class InvalidAmountError(InvalidInputError):
    """Negative or non-finite ledger amount."""


class ConfigValidationError(InvalidInputError):
    """Configuration update with an invalid or unknown field."""


class LedgerInvariantError(PegEngineError):
    """A ledger operation that must succeed by construction did not."""

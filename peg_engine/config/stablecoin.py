"""Monetary-policy parameters and the store that guards their updates."""

import logging
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from peg_engine.errors import ConfigValidationError

logger = logging.getLogger(__name__)


class StablecoinConfig(BaseModel):
    """
    Parameters of the peg controller.

    Instances are immutable; an update produces a new validated snapshot.
    """

    target_price: float = Field(default=1.0, gt=0, allow_inf_nan=False, description="Peg price")
    tolerance_band: float = Field(default=0.02, ge=0, lt=1, allow_inf_nan=False, description="Deviation tolerated before acting")
    reserve_ratio: float = Field(default=0.2, ge=0, le=1, allow_inf_nan=False, description="Minimum reserve / supply")
    max_supply_change: float = Field(default=0.05, ge=0, le=1, allow_inf_nan=False, description="Max fraction of supply per adjustment")
    rebalance_interval: timedelta = Field(default=timedelta(minutes=5), description="Minimum time between executed adjustments")
    damping_factor: float = Field(default=0.5, gt=0, lt=1, allow_inf_nan=False, description="Share of the deviation corrected per step")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("rebalance_interval")
    @classmethod
    def _non_negative_interval(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("rebalance_interval must be non-negative")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (interval in seconds)."""
        data = self.model_dump()
        data["rebalance_interval"] = self.rebalance_interval.total_seconds()
        return data


DEFAULT_STABLECOIN_CONFIG = StablecoinConfig()


class ConfigStore:
    """
    Holds the active :class:`StablecoinConfig`.

    Updates are all-or-nothing: every field is validated against its domain
    and a single bad field rejects the whole update.
    """

    def __init__(self, config: Optional[StablecoinConfig] = None):
        self._config = config or DEFAULT_STABLECOIN_CONFIG

    def get_config(self) -> StablecoinConfig:
        """Return the current (immutable) configuration."""
        return self._config

    def update_config(
        self,
        changes: Optional[Mapping[str, Any]] = None,
        **fields: Any
    ) -> StablecoinConfig:
        """
        Merge a partial update into the configuration.

        Args:
            changes: Mapping of field name -> new value
            **fields: Same, as keyword arguments

        Returns:
            The new configuration

        Raises:
            ConfigValidationError: If any field is unknown or out of domain
        """
        merged_changes = dict(changes or {})
        merged_changes.update(fields)
        if not merged_changes:
            return self._config

        candidate = self._config.model_dump()
        candidate.update(merged_changes)
        try:
            new_config = StablecoinConfig.model_validate(candidate)
        except ValidationError as exc:
            raise ConfigValidationError(f"Invalid configuration update: {exc}") from exc

        self._config = new_config
        logger.info("Configuration updated: %s", sorted(merged_changes))
        return new_config

"""Configuration: runtime settings and the monetary-policy parameters."""

from peg_engine.config.settings import Settings, settings
from peg_engine.config.stablecoin import (
    DEFAULT_STABLECOIN_CONFIG,
    ConfigStore,
    StablecoinConfig,
)

__all__ = [
    "Settings",
    "settings",
    "DEFAULT_STABLECOIN_CONFIG",
    "ConfigStore",
    "StablecoinConfig",
]

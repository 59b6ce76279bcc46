"""Runtime settings loaded from the environment using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine-wide settings (environment variables or ``.env``)."""
    
    # General
    log_level: str = Field(default="INFO", description="Logging level")
    
    # Ledger
    ledger_decimals: int = Field(default=6, ge=0, le=18, description="Decimal places held by supply/reserve ledgers")
    
    # Windows
    adjustment_window_seconds: float = Field(default=300.0, gt=0, description="Lookback for the rebalance average price")
    stats_window_hours: float = Field(default=24.0, gt=0, description="Window for stability metrics")
    
    # Buffers
    max_price_history: int = Field(default=1000, gt=0, description="Price samples kept in memory")
    max_supply_history: int = Field(default=50, gt=0, description="Executed adjustments kept in memory")
    
    # Stability score weights
    deviation_weight: float = Field(default=10.0, gt=0, description="Score penalty weight for peg deviation")
    volatility_weight: float = Field(default=10.0, gt=0, description="Score penalty weight for return volatility")
    
    # Simulation
    random_seed: int = Field(default=42, description="Random seed for reproducibility")
    
    class Config:
        env_prefix = "PEG_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()

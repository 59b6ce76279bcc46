"""Shared fixtures for peg engine tests."""

from datetime import datetime, timezone

import pytest

from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.stablecoin.engine import StablecoinEngine
from peg_engine.utils.time import ManualClock


T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def make_engine(clock):
    """Factory for engines sharing the test clock."""

    def _make(initial_supply=10_000, initial_reserve=2_000, **config_fields) -> StablecoinEngine:
        config = StablecoinConfig(**config_fields)
        return StablecoinEngine(config, initial_supply, initial_reserve, clock=clock)

    return _make


@pytest.fixture
def engine(make_engine) -> StablecoinEngine:
    return make_engine()


@pytest.fixture
def start() -> datetime:
    return T0

"""Tests for the supply-adjustment calculator."""

import math

import numpy as np
import pytest

from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.ledger.reserve import meets_reserve_ratio
from peg_engine.policy.adjustment import (
    AdjustmentAction,
    Contract,
    Expand,
    Hold,
    calculate_supply_adjustment,
    min_contraction_units,
)
from peg_engine.utils.math import exact_ratio, to_minor_units

DECIMALS = 6


def _calc(start, price, supply=10_000, reserve=2_000, **config_fields):
    return calculate_supply_adjustment(
        average_price=price,
        config=StablecoinConfig(**config_fields),
        supply_units=to_minor_units(supply, DECIMALS),
        reserve_units=to_minor_units(reserve, DECIMALS),
        decimals=DECIMALS,
        timestamp=start,
    )


class TestDirection:
    def test_price_above_band_expands(self, start) -> None:
        adjustment = _calc(start, 1.05, tolerance_band=0.01)

        assert isinstance(adjustment, Expand)
        assert adjustment.action == AdjustmentAction.EXPAND
        assert adjustment.amount == 250.0
        assert adjustment.new_supply == 10_250.0
        assert "above target" in adjustment.reason

    def test_price_below_band_contracts(self, start) -> None:
        adjustment = _calc(start, 0.95, tolerance_band=0.01)

        assert isinstance(adjustment, Contract)
        assert adjustment.action == AdjustmentAction.CONTRACT
        assert adjustment.amount == 250.0
        assert adjustment.new_supply == 9_750.0

    def test_price_inside_band_holds(self, start) -> None:
        adjustment = _calc(start, 1.02, tolerance_band=0.05)

        assert isinstance(adjustment, Hold)
        assert adjustment.action == AdjustmentAction.NONE
        assert adjustment.amount == 0.0
        assert adjustment.new_supply == 10_000.0

    def test_exact_band_edge_holds(self, start) -> None:
        assert isinstance(_calc(start, 1.02, tolerance_band=0.02), Hold)
        assert isinstance(_calc(start, 0.98, tolerance_band=0.02), Hold)

    def test_zero_tolerance_acts_on_any_deviation(self, start) -> None:
        assert isinstance(_calc(start, 1.001, tolerance_band=0.0), Expand)
        assert isinstance(_calc(start, 1.0, tolerance_band=0.0), Hold)

    def test_deviation_is_signed(self, start) -> None:
        assert _calc(start, 1.05).deviation == pytest.approx(0.05)
        assert _calc(start, 0.95).deviation == pytest.approx(-0.05)

    def test_hold_serializes_with_zero_amount(self, start) -> None:
        data = _calc(start, 1.0).to_dict()
        assert data["action"] == "none"
        assert data["amount"] == 0.0


class TestBounds:
    def test_amount_capped_by_max_supply_change(self, start) -> None:
        adjustment = _calc(start, 2.0, tolerance_band=0.01, max_supply_change=0.05)
        assert adjustment.amount == 500.0

    def test_damping_scales_response(self, start) -> None:
        adjustment = _calc(start, 1.04, tolerance_band=0.01, damping_factor=0.25, max_supply_change=1.0)
        assert adjustment.amount == pytest.approx(100.0)

    def test_zero_max_change_holds(self, start) -> None:
        adjustment = _calc(start, 1.5, max_supply_change=0.0)
        assert isinstance(adjustment, Hold)
        assert adjustment.reason == "Adjustment rounds to zero"

    def test_zero_supply_holds(self, start) -> None:
        assert isinstance(_calc(start, 1.5, supply=0, reserve=0), Hold)

    def test_contraction_raised_to_restore_reserve_ratio(self, start) -> None:
        # 1900 / 10000 = 0.19 < 0.2: need supply <= 9500
        adjustment = _calc(start, 0.99, reserve=1_900, tolerance_band=0.005)

        assert isinstance(adjustment, Contract)
        assert adjustment.amount == 500.0
        assert adjustment.new_supply == 9_500.0
        assert "limited by reserve ratio" in adjustment.reason

    def test_unreachable_reserve_ratio_holds(self, start) -> None:
        # needs a 1000 burn but a single step may only burn 500
        adjustment = _calc(start, 0.95, reserve=1_800, tolerance_band=0.01)

        assert isinstance(adjustment, Hold)
        assert "unattainable" in adjustment.reason

    def test_min_contraction_units(self) -> None:
        assert min_contraction_units(10_000, 2_000, 0.2) == 0
        assert min_contraction_units(10_000, 1_900, 0.2) == 500
        assert min_contraction_units(10_000, 0, 0.0) == 0
        assert min_contraction_units(0, 0, 0.5) == 0

    def test_random_states_respect_invariants(self, start) -> None:
        rng = np.random.default_rng(11)

        for _ in range(500):
            supply_units = int(rng.integers(0, 10**12))
            reserve_units = int(rng.integers(0, 10**12))
            price = float(rng.uniform(0.5, 1.5))
            config = StablecoinConfig(
                tolerance_band=float(rng.uniform(0, 0.1)),
                reserve_ratio=float(rng.uniform(0, 1)),
                max_supply_change=float(rng.uniform(0, 1)),
            )

            adjustment = calculate_supply_adjustment(
                price, config, supply_units, reserve_units, DECIMALS, start
            )

            cap = math.floor(supply_units * exact_ratio(config.max_supply_change))
            assert 0 <= adjustment.amount_units <= cap

            deviation = (price - config.target_price) / config.target_price
            if abs(deviation) <= config.tolerance_band * (1 - 1e-9):
                assert isinstance(adjustment, Hold)

            if isinstance(adjustment, Expand):
                assert price > config.target_price
            if isinstance(adjustment, Contract):
                assert price < config.target_price
                remaining = supply_units - adjustment.amount_units
                assert meets_reserve_ratio(reserve_units, remaining, config.reserve_ratio)


class TestPurity:
    def test_engine_calculation_does_not_mutate(self, make_engine) -> None:
        engine = make_engine(tolerance_band=0.01)
        engine.record_price(1.05)
        before = engine.get_state()

        first = engine.calculate_supply_adjustment()
        second = engine.calculate_supply_adjustment()

        assert first == second
        assert engine.get_state() == before

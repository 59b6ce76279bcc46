"""Tests for supply and reserve ledgers."""

import threading
from decimal import Decimal

import pytest

from peg_engine.errors import InvalidAmountError
from peg_engine.ledger.reserve import ReserveLedger, meets_reserve_ratio, reserve_ratio
from peg_engine.ledger.supply import SupplyLedger
from peg_engine.utils.math import from_minor_units, to_minor_units


class TestMinorUnits:
    def test_float_amounts_are_exact(self) -> None:
        assert to_minor_units(0.1, 6) == 100_000
        assert to_minor_units(1.05, 2) == 105
        assert from_minor_units(105, 2) == 1.05

    def test_accepts_decimal_and_str(self) -> None:
        assert to_minor_units(Decimal("12.5"), 3) == 12_500
        assert to_minor_units("7", 0) == 7

    def test_rounds_half_even(self) -> None:
        assert to_minor_units("0.125", 2) == 12
        assert to_minor_units("0.135", 2) == 14

    @pytest.mark.parametrize("amount", [-1, -0.000001, float("nan"), float("inf"), "abc", None, True])
    def test_rejects_invalid_amounts(self, amount) -> None:
        with pytest.raises(InvalidAmountError):
            to_minor_units(amount, 6)

    def test_no_drift_over_repeated_cycles(self) -> None:
        ledger = SupplyLedger(0, decimals=6)
        for _ in range(1000):
            ledger.mint(0.1)
        for _ in range(1000):
            assert ledger.burn(0.1)
        assert ledger.units == 0


class TestSupplyLedger:
    def test_mint(self) -> None:
        ledger = SupplyLedger(100)
        ledger.mint(50)
        assert ledger.total_supply == 150.0

    def test_mint_rejects_negative(self) -> None:
        ledger = SupplyLedger(100)
        with pytest.raises(InvalidAmountError):
            ledger.mint(-1)
        assert ledger.total_supply == 100.0

    def test_burn_within_supply(self) -> None:
        ledger = SupplyLedger(100)
        assert ledger.burn(40) is True
        assert ledger.total_supply == 60.0

    def test_burn_entire_supply(self) -> None:
        ledger = SupplyLedger(100)
        assert ledger.burn(100) is True
        assert ledger.total_supply == 0.0

    def test_excessive_burn_fails_without_mutation(self) -> None:
        ledger = SupplyLedger(100)
        assert ledger.burn(100.000001) is False
        assert ledger.total_supply == 100.0

    def test_unit_primitives_reject_negative(self) -> None:
        ledger = SupplyLedger(1)
        with pytest.raises(ValueError):
            ledger.mint_units(-1)
        with pytest.raises(ValueError):
            ledger.burn_units(-1)


class TestReserveLedger:
    def test_add_reserves(self) -> None:
        ledger = ReserveLedger(10)
        ledger.add_reserves(5)
        assert ledger.reserve_pool == 15.0

    def test_add_rejects_negative(self) -> None:
        with pytest.raises(InvalidAmountError):
            ReserveLedger(10).add_reserves(-5)

    def test_removal_at_exact_minimum_fails(self) -> None:
        ledger = ReserveLedger(3_000)
        supply_units = to_minor_units(10_000, 6)

        assert ledger.remove_reserves(100, supply_units, 0.3) is False
        assert ledger.reserve_pool == 3_000.0

    def test_removal_down_to_minimum_succeeds(self) -> None:
        ledger = ReserveLedger(3_100)
        supply_units = to_minor_units(10_000, 6)

        assert ledger.remove_reserves(100, supply_units, 0.3) is True
        assert ledger.reserve_pool == 3_000.0

    def test_zero_removal_at_minimum_succeeds(self) -> None:
        ledger = ReserveLedger(1_000)
        assert ledger.remove_reserves(0, to_minor_units(10_000, 6), 0.1) is True

    def test_cannot_remove_more_than_pool(self) -> None:
        ledger = ReserveLedger(100)
        assert ledger.remove_reserves(101, 0, 0.0) is False
        assert ledger.reserve_pool == 100.0

    def test_zero_supply_allows_full_removal(self) -> None:
        ledger = ReserveLedger(100)
        assert ledger.remove_reserves(100, 0, 0.5) is True
        assert ledger.reserve_pool == 0.0

    def test_ratio_helpers(self) -> None:
        assert reserve_ratio(2_000, 10_000) == 0.2
        assert reserve_ratio(5, 0) == 0.0
        assert meets_reserve_ratio(1_000, 10_000, 0.1)
        assert not meets_reserve_ratio(999, 10_000, 0.1)
        assert meets_reserve_ratio(0, 0, 1.0)


class TestEngineLedgers:
    def test_initial_reserve_ratio(self, engine) -> None:
        assert engine.get_supply_info()["reserve_ratio"] == 0.2
        assert engine.reserve_ratio == 0.2

    def test_remove_reserves_at_minimum(self, make_engine) -> None:
        engine = make_engine(initial_supply=10_000, initial_reserve=3_000, reserve_ratio=0.3)

        assert engine.remove_reserves(100) is False
        assert engine.reserve_pool == 3_000.0

    def test_remove_reserves_above_minimum(self, make_engine) -> None:
        engine = make_engine(initial_supply=10_000, initial_reserve=3_000, reserve_ratio=0.2)

        assert engine.remove_reserves(1_000) is True
        assert engine.reserve_pool == 2_000.0
        assert engine.remove_reserves(0.000001) is False

    def test_burn_and_mint(self, engine) -> None:
        assert engine.burn(20_000) is False
        assert engine.total_supply == 10_000.0

        assert engine.burn(1_000) is True
        assert engine.total_supply == 9_000.0

        engine.mint(500)
        assert engine.total_supply == 9_500.0

    def test_manual_mint_does_not_touch_timer(self, engine) -> None:
        engine.mint(1)
        assert engine.get_state().last_rebalance_at is None

    def test_concurrent_removals_never_break_ratio(self, make_engine) -> None:
        engine = make_engine(initial_supply=10_000, initial_reserve=3_000, reserve_ratio=0.2)
        barrier = threading.Barrier(40)
        results = []
        results_lock = threading.Lock()

        def withdraw():
            barrier.wait()
            ok = engine.remove_reserves(100)
            with results_lock:
                results.append(ok)

        threads = [threading.Thread(target=withdraw) for _ in range(40)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 10
        assert engine.reserve_pool == 2_000.0
        assert engine.reserve_ratio >= 0.2

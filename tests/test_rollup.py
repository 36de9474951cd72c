#!/usr/bin/env python3
"""
=============================================================================
UNIT TESTS -- ROLL-UP MODEL
=============================================================================
Tests for deal_valuation/rollup.py covering:
    - Acquisition summaries and capital deployed
    - Combined operating model with staggered close years
    - Synergies and margin expansion
    - Per-acquisition debt schedules
    - Exit returns and the value creation bridge

Run:
    pytest tests/test_rollup.py -v
"""

import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from deal_valuation.rollup import (
    DEFAULT_BASE_MARGIN,
    DEFAULT_ROLLUP_INPUTS,
    RollupCompany,
    RollupExitAssumptions,
    RollupInputs,
    RollupSynergies,
    calculate_rollup,
)

PLATFORM = RollupCompany("p", "Platform", revenue=5_000_000.0,
                         ebitda=1_000_000.0, entry_multiple=4.0)
BOLT_ON = RollupCompany("b1", "Bolt-on", revenue=2_000_000.0,
                        ebitda=400_000.0, entry_multiple=3.0, close_year=3)


@pytest.fixture
def platform_only():
    return RollupInputs(platform=PLATFORM)


@pytest.fixture
def with_bolt_on():
    return RollupInputs(platform=PLATFORM, bolt_ons=(BOLT_ON,))


# =========================================================================
# ACQUISITIONS
# =========================================================================
class TestAcquisitions:
    """Test per-company summaries and totals."""

    def test_platform_summary(self, platform_only):
        out = calculate_rollup(platform_only)
        (acq,) = out.acquisitions
        assert acq.ev == pytest.approx(4_000_000.0)
        assert acq.equity == pytest.approx(1_000_000.0)
        assert acq.debt == pytest.approx(3_000_000.0)

    def test_totals(self, with_bolt_on):
        out = calculate_rollup(with_bolt_on)
        assert out.total_capital_deployed == pytest.approx(5_200_000.0)
        assert out.total_equity_invested == pytest.approx(1_300_000.0)
        assert out.total_debt == pytest.approx(3_900_000.0)
        assert out.weighted_entry_multiple == pytest.approx(5_200_000.0 / 1_400_000.0)

    def test_placeholder_bolt_on_ignored(self, platform_only):
        empty = RollupCompany("b9", "Empty slot", close_year=2)
        out = calculate_rollup(RollupInputs(platform=PLATFORM, bolt_ons=(empty,)))
        assert len(out.acquisitions) == 1
        assert out.projection[1].synergies == 0.0
        assert out == calculate_rollup(platform_only)


# =========================================================================
# OPERATING MODEL
# =========================================================================
class TestOperatingModel:
    """Test combined revenue, margin and synergies."""

    def test_horizon(self, platform_only):
        assert len(calculate_rollup(platform_only).projection) == 7
        longer = RollupInputs(platform=PLATFORM, exit=RollupExitAssumptions(exit_year=9))
        assert len(calculate_rollup(longer).projection) == 9

    def test_platform_growth(self, platform_only):
        rows = calculate_rollup(platform_only).projection
        expected = 5_000_000.0 * 1.05 ** np.arange(7)
        np.testing.assert_allclose([r.combined_revenue for r in rows], expected)

    def test_margin_expansion_from_year_three(self, platform_only):
        rows = calculate_rollup(platform_only).projection
        assert rows[1].combined_ebitda / rows[1].combined_revenue == pytest.approx(0.20)
        assert rows[2].combined_ebitda / rows[2].combined_revenue == pytest.approx(0.22)

    def test_bolt_on_joins_in_close_year(self, with_bolt_on):
        rows = calculate_rollup(with_bolt_on).projection
        assert [r.companies_count for r in rows[:4]] == [1, 1, 2, 2]
        platform_y3 = 5_000_000.0 * 1.05 ** 2
        assert rows[2].combined_revenue == pytest.approx(platform_y3 + 2_000_000.0)

    def test_synergies(self, with_bolt_on):
        rows = calculate_rollup(with_bolt_on).projection
        assert rows[0].synergies == 0.0
        assert rows[1].synergies == 0.0
        y3 = rows[2]
        assert y3.synergies == pytest.approx(300_000.0 + y3.combined_revenue * 0.10)

    def test_adjusted_ebitda_deducts_owner_salary(self, with_bolt_on):
        for r in calculate_rollup(with_bolt_on).projection:
            assert r.adjusted_ebitda == pytest.approx(
                r.combined_ebitda + r.synergies - 200_000.0)

    def test_default_margin_without_ebitda(self):
        co = RollupCompany("p", "Revenue only", revenue=1_000_000.0)
        rows = calculate_rollup(RollupInputs(platform=co)).projection
        assert rows[0].combined_ebitda == pytest.approx(1_000_000.0 * DEFAULT_BASE_MARGIN)


# =========================================================================
# DEBT & CASH FLOW
# =========================================================================
class TestDebtAndCashFlow:
    """Test debt schedules and free cash flow."""

    def test_remaining_debt_declines_and_repaid(self, platform_only):
        inputs = RollupInputs(platform=PLATFORM, exit=RollupExitAssumptions(exit_year=11))
        rows = calculate_rollup(inputs).projection
        debt = [r.remaining_debt for r in rows]
        assert np.all(np.diff(debt) <= 1e-6)
        assert debt[9] == 0.0
        assert rows[10].debt_service == 0.0

    def test_bolt_on_debt_added_in_close_year(self, platform_only, with_bolt_on):
        alone = calculate_rollup(platform_only).projection
        both = calculate_rollup(with_bolt_on).projection
        assert both[1].debt_service == pytest.approx(alone[1].debt_service)
        assert both[2].debt_service > alone[2].debt_service
        assert both[2].remaining_debt > alone[2].remaining_debt

    def test_cumulative_fcf(self, with_bolt_on):
        rows = calculate_rollup(with_bolt_on).projection
        np.testing.assert_allclose([r.cumulative_fcf for r in rows],
                                   np.cumsum([r.free_cash_flow for r in rows]))

    def test_no_tax_benefit_on_losses(self):
        small = RollupCompany("p", "Small", revenue=500_000.0, ebitda=50_000.0)
        rows = calculate_rollup(RollupInputs(platform=small)).projection
        assert rows[0].free_cash_flow < 0
        assert rows[0].free_cash_flow == pytest.approx(
            rows[0].adjusted_ebitda - rows[0].debt_service)


# =========================================================================
# EXIT & VALUE BRIDGE
# =========================================================================
class TestExitAndBridge:
    """Test exit returns and value creation attribution."""

    def test_exit_on_adjusted_ebitda(self, with_bolt_on):
        out = calculate_rollup(with_bolt_on)
        exit_row = out.projection[6]
        assert out.exit_ev == pytest.approx(exit_row.adjusted_ebitda * 8.0)
        assert out.remaining_debt_at_exit == exit_row.remaining_debt
        assert out.total_return == pytest.approx(
            out.exit_ev - exit_row.remaining_debt + exit_row.cumulative_fcf)
        assert out.moic == pytest.approx(out.total_return / out.total_equity_invested)

    def test_irr_defined_for_healthy_rollup(self, with_bolt_on):
        out = calculate_rollup(with_bolt_on)
        assert out.irr is not None
        assert out.irr > 0

    def test_bridge_non_negative(self, with_bolt_on):
        bridge = calculate_rollup(with_bolt_on).value_bridge
        assert bridge.entry_value == pytest.approx(5_200_000.0)
        assert bridge.organic_growth_value >= 0
        assert bridge.synergy_value >= 0
        assert bridge.multiple_expansion_value >= 0

    def test_synergy_value_capitalised(self, with_bolt_on):
        out = calculate_rollup(with_bolt_on)
        assert out.value_bridge.synergy_value == pytest.approx(
            out.projection[6].synergies * 8.0)

    def test_richer_synergies_raise_moic(self, with_bolt_on):
        base = calculate_rollup(with_bolt_on).moic
        richer = RollupInputs(platform=PLATFORM, bolt_ons=(BOLT_ON,),
                              synergies=RollupSynergies(sg_a_savings_per_bolton=500_000.0))
        assert calculate_rollup(richer).moic > base

    def test_default_inputs_do_not_raise(self):
        out = calculate_rollup(DEFAULT_ROLLUP_INPUTS)
        assert out.acquisitions == ()
        assert out.moic == 0.0
        assert out.irr is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

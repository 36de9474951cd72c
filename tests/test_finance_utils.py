#!/usr/bin/env python3
"""
=============================================================================
UNIT TESTS -- FINANCIAL MODELING UTILITIES
=============================================================================
Tests for deal_valuation/common/finance_utils.py covering:
    - Annuity payment (PMT)
    - Remaining loan balance
    - Compound growth and NPV
    - IRR and MOIC

Run:
    pytest tests/test_finance_utils.py -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from deal_valuation.common.finance_utils import (
    annuity_payment,
    remaining_balance,
    compound_growth,
    npv,
    compute_irr,
    compute_moic,
)
from deal_valuation.config import SolverConfig


# =========================================================================
# ANNUITY PAYMENT
# =========================================================================
class TestAnnuityPayment:
    """Test level payment of an amortizing loan."""

    def test_textbook_payment(self):
        """$1,000 at 5% over 10 periods pays ~$129.50 per period."""
        assert annuity_payment(0.05, 10, 1000.0) == pytest.approx(129.5046, abs=1e-3)

    def test_zero_rate_is_straight_line(self):
        assert annuity_payment(0.0, 10, 1000.0) == pytest.approx(100.0)

    def test_nothing_borrowed(self):
        assert annuity_payment(0.05, 10, 0.0) == 0.0

    def test_zero_periods(self):
        assert annuity_payment(0.05, 0, 1000.0) == 0.0

    def test_payment_exceeds_interest_only(self):
        """Each payment covers the interest and retires some principal."""
        pmt = annuity_payment(0.01, 60, 50_000.0)
        assert pmt > 50_000.0 * 0.01

    def test_huge_rate_does_not_raise(self):
        pmt = annuity_payment(50.0, 10_000, 1000.0)
        assert math.isfinite(pmt)

    def test_term_too_short_to_compound(self):
        """(1 + r)^n rounds to 1 -> repaid straight-line instead of dividing by 0."""
        assert annuity_payment(0.0075, 1.2e-17, 1000.0) == pytest.approx(1000.0 / 1.2e-17)


# =========================================================================
# REMAINING BALANCE
# =========================================================================
class TestRemainingBalance:
    """Test outstanding principal after level payments."""

    def test_no_payments_made(self):
        assert remaining_balance(0.01, 12, 1000.0, 0) == pytest.approx(1000.0)

    def test_after_one_payment(self):
        """B_1 = PV(1 + r) - PMT."""
        pmt = annuity_payment(0.01, 12, 1000.0)
        assert remaining_balance(0.01, 12, 1000.0, 1) == pytest.approx(1010.0 - pmt)

    def test_zero_at_and_after_term(self):
        assert remaining_balance(0.01, 12, 1000.0, 12) == 0.0
        assert remaining_balance(0.01, 12, 1000.0, 20) == 0.0

    def test_zero_rate_halfway(self):
        assert remaining_balance(0.0, 10, 1000.0, 5) == pytest.approx(500.0)

    def test_balance_declines(self):
        balances = [remaining_balance(0.0075, 120, 1e6, m) for m in range(0, 121, 12)]
        assert all(b1 >= b2 for b1, b2 in zip(balances, balances[1:]))
        assert balances[-1] == 0.0


# =========================================================================
# GROWTH & DISCOUNTING
# =========================================================================
class TestGrowthAndNPV:
    """Test compounding and present value."""

    def test_compound_growth(self):
        assert compound_growth(100.0, 0.10, 2) == pytest.approx(121.0)

    def test_zero_periods_growth(self):
        assert compound_growth(100.0, 0.10, 0) == pytest.approx(100.0)

    def test_npv_at_irr_is_zero(self):
        assert npv(0.10, [-100.0, 110.0]) == pytest.approx(0.0, abs=1e-10)

    def test_npv_zero_rate_is_sum(self):
        assert npv(0.0, [-100.0, 30.0, 30.0, 50.0]) == pytest.approx(10.0)


# =========================================================================
# IRR & MOIC
# =========================================================================
class TestIRRandMOIC:
    """Test IRR solver and MOIC computation."""

    def test_irr_simple(self):
        """Invest 100, receive 110 in one year -> IRR = 10%."""
        assert compute_irr([-100.0, 110.0]) == pytest.approx(0.10, abs=1e-6)

    def test_irr_two_periods(self):
        """Invest 100, receive 121 in two years -> IRR = 10%."""
        assert compute_irr([-100.0, 0.0, 121.0]) == pytest.approx(0.10, abs=1e-6)

    def test_irr_root_zeroes_npv(self):
        cf = np.array([-500_000.0, 60_000.0, 70_000.0, 80_000.0, 90_000.0, 1_400_000.0])
        irr = compute_irr(cf)
        assert irr is not None
        assert npv(irr, cf) == pytest.approx(0.0, abs=1.0)

    def test_irr_high_return(self):
        """Invest 100, receive 500 next year -> IRR = 400%."""
        assert compute_irr([-100.0, 500.0]) == pytest.approx(4.0, abs=1e-6)

    def test_irr_above_bracket_kept(self):
        """Newton roots beyond the bisection bracket are returned."""
        assert compute_irr([-1.0, 100.0]) == pytest.approx(99.0, rel=1e-6)

    def test_irr_all_negative_is_none(self):
        assert compute_irr([-100.0, -10.0, -10.0]) is None

    def test_irr_too_few_flows(self):
        assert compute_irr([-100.0]) is None

    def test_irr_non_finite_flows(self):
        assert compute_irr([-100.0, float("nan"), 150.0]) is None

    def test_irr_with_custom_solver(self):
        solver = SolverConfig(guess=0.05, lower=-0.5, upper=2.0, tol=1e-8, max_iter=200)
        assert compute_irr([-100.0, 110.0], solver) == pytest.approx(0.10, abs=1e-7)

    def test_moic(self):
        assert compute_moic(300.0, 100.0) == pytest.approx(3.0)

    def test_moic_nothing_invested(self):
        assert compute_moic(300.0, 0.0) == 0.0
        assert compute_moic(300.0, -50.0) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

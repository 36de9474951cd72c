#!/usr/bin/env python3
"""
=============================================================================
FINANCIAL MODELING UTILITIES
=============================================================================
Core financial calculations shared by the valuation and roll-up engines:
    - Annuity payment (Excel PMT)
    - Remaining balance of an amortizing loan
    - Compound growth
    - Net present value over an annual cash-flow stream
    - IRR / MOIC computations

All functions are pure (no side effects) and never raise on degenerate
inputs; undefined results are reported through sentinel values.
"""

import math
from typing import Optional, Sequence

import numpy as np
from scipy.optimize import bisect, newton

from deal_valuation.config import CONFIG, SolverConfig
from deal_valuation.utils import get_logger

log = get_logger(__name__)


# =============================================================================
# LOAN MECHANICS
# =============================================================================
def _is_flat(rate):
    """True when a per-period rate compounds to nothing (or is meaningless)."""
    return rate == 0 or 1.0 + rate == 1.0 or rate <= -1.0


def _growth_factor(rate, periods):
    """(1 + rate)^periods, saturating to inf instead of overflowing."""
    base = 1.0 + rate
    if base < 0 and not float(periods).is_integer():
        return math.nan
    try:
        return base ** periods
    except OverflowError:
        return math.inf


def annuity_payment(rate, nper, pv):
    """
    Fixed periodic payment of an amortizing loan (same as Excel PMT).

    Parameters
    ----------
    rate : float
        Interest rate per period (decimal).
    nper : float
        Number of periods.
    pv : float
        Principal borrowed.

    Returns
    -------
    float
        Payment per period (positive number). 0 when pv or nper is 0.

    Notes
    -----
    PMT = PV * r * (1 + r)^n / ((1 + r)^n - 1)

    With r = 0 the loan is repaid straight-line: PMT = PV / n.  Rates too
    small to compound in floating point, or at or below -100%, are treated
    the same way.
    """
    if pv == 0 or nper == 0:
        return 0.0
    if _is_flat(rate):
        return pv / nper
    factor = _growth_factor(rate, nper)
    if math.isinf(factor):
        return pv * rate
    # Too few periods to compound at this rate
    if factor == 1.0:
        return pv / nper
    return pv * rate * factor / (factor - 1.0)


def remaining_balance(rate, nper, pv, periods_elapsed):
    """
    Outstanding principal after `periods_elapsed` level payments.

    Parameters
    ----------
    rate : float
        Interest rate per period (decimal).
    nper : float
        Total number of periods in the loan.
    pv : float
        Original principal.
    periods_elapsed : float
        Payments already made.

    Returns
    -------
    float
        Remaining balance; 0 once the loan term has elapsed.

    Notes
    -----
    B_m = PV * (1 + r)^m - PMT * ((1 + r)^m - 1) / r
    """
    if periods_elapsed >= nper:
        return 0.0
    if _is_flat(rate):
        return pv * (1.0 - periods_elapsed / nper)
    payment = annuity_payment(rate, nper, pv)
    factor = _growth_factor(rate, periods_elapsed)
    if math.isinf(factor):
        return pv
    return pv * factor - payment * (factor - 1.0) / rate


def compound_growth(pv, rate, periods):
    """FV = PV * (1 + rate)^periods."""
    return pv * _growth_factor(rate, periods)


# =============================================================================
# DISCOUNTING
# =============================================================================
def npv(rate, cashflows):
    """
    Net present value of annual cash flows starting at t=0.

    Parameters
    ----------
    rate : float
        Discount rate per period (decimal).
    cashflows : array-like
        Cash flows, index 0 = today (undiscounted).

    Returns
    -------
    float
        sum_{t=0}^{N} CF_t / (1 + rate)^t
    """
    cf = np.asarray(cashflows, dtype=float)
    periods = np.arange(len(cf), dtype=float)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(cf / (1.0 + rate) ** periods))


def npv_derivative(rate, cashflows):
    """d(NPV)/d(rate) = -sum t * CF_t / (1 + rate)^(t+1)."""
    cf = np.asarray(cashflows, dtype=float)
    periods = np.arange(len(cf), dtype=float)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(-periods * cf / (1.0 + rate) ** (periods + 1.0)))


# =============================================================================
# IRR & MOIC
# =============================================================================
def compute_irr(cashflows: Sequence[float],
                solver: Optional[SolverConfig] = None) -> Optional[float]:
    """
    Internal Rate of Return via Newton-Raphson with a bisection fallback.

    Parameters
    ----------
    cashflows : array-like
        Cash flows starting at t=0 (initial investment as negative).
    solver : SolverConfig, optional
        Seed, bracket, tolerance and iteration cap. Defaults to CONFIG.solver.

    Returns
    -------
    float or None
        IRR (decimal), or None if no root was found.

    Notes
    -----
    IRR is the discount rate that makes NPV = 0:
        sum_{t=0}^{N} CF_t / (1 + IRR)^t = 0

    Newton-Raphson (scipy.optimize.newton) is seeded at `solver.guess`.  If it
    fails to converge, or lands on a rate <= -100%, the root is bracketed on
    [solver.lower, solver.upper] and refined with scipy.optimize.bisect.  No
    sign change inside the bracket means no IRR.

    The bracket only bounds the fallback search: a Newton root above
    `solver.upper` is returned as is (flows [-1, 100] give an IRR of 99).
    """
    solver = solver or CONFIG.solver
    cf = np.asarray(cashflows, dtype=float)
    if cf.size < 2 or not np.all(np.isfinite(cf)):
        return None

    try:
        root = newton(
            npv, solver.guess, fprime=npv_derivative, args=(cf,),
            tol=solver.tol, maxiter=solver.max_iter,
        )
        root = float(root)
        if math.isfinite(root) and root > -1.0 and math.isfinite(npv(root, cf)):
            return root
        log.debug("Newton IRR landed outside the domain (%s)", root)
    except (RuntimeError, OverflowError, ZeroDivisionError) as exc:
        log.debug("Newton IRR failed: %s", exc)

    f_lo = npv(solver.lower, cf)
    f_hi = npv(solver.upper, cf)
    if not (math.isfinite(f_lo) and math.isfinite(f_hi)) or f_lo * f_hi > 0:
        log.debug("IRR not bracketed on [%s, %s]", solver.lower, solver.upper)
        return None

    try:
        return float(bisect(npv, solver.lower, solver.upper, args=(cf,),
                            xtol=solver.tol, maxiter=solver.max_iter))
    except (RuntimeError, ValueError) as exc:
        log.debug("Bisection IRR failed: %s", exc)
        return None


def compute_moic(total_distributions, total_invested):
    """
    Multiple on Invested Capital.

    Parameters
    ----------
    total_distributions : float
        Total value returned to investors.
    total_invested : float
        Total cash invested.

    Returns
    -------
    float
        MOIC, or 0.0 when nothing was invested (total_invested <= 0).
    """
    if total_invested <= 0:
        return 0.0
    return total_distributions / total_invested

"""
amortization.py -- Fixed-Payment Loan Scheduler
=================================================
Implements:
  • Monthly / annual level payment for an amortizing tranche
  • Outstanding balance after whole years of monthly payments
  • Year-by-year amortization schedule (interest vs principal split)

Payments are computed on a monthly annuity (rate/12 over term×12 months)
and reported per month and per year.
"""

import math
from dataclasses import dataclass
from typing import List

from deal_valuation.common import finance_utils as fu

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class AmortizationResult:
    """Level payment on a loan."""
    monthly_payment: float
    annual_payment:  float


@dataclass(frozen=True)
class AmortizationYear:
    """One year of a loan's amortization schedule."""
    year:              int
    beginning_balance: float
    payment:           float
    interest:          float
    principal:         float
    ending_balance:    float


def amortize(principal: float, annual_rate: float,
             term_years: float) -> AmortizationResult:
    """
    Level monthly and annual payment on a fixed-rate amortizing loan.

    Parameters
    ----------
    principal   : Amount borrowed.
    annual_rate : Nominal annual interest rate as decimal.
    term_years  : Loan term in years.

    Returns
    -------
    AmortizationResult with both payments set to 0 when there is nothing
    to repay (principal or term of 0).

    Notes
    -----
    r = annual_rate / 12,  n = term_years × 12
    PMT = P × r × (1+r)^n / ((1+r)^n − 1)    (P / n when r = 0)
    """
    monthly = fu.annuity_payment(annual_rate / MONTHS_PER_YEAR,
                                 term_years * MONTHS_PER_YEAR,
                                 principal)
    return AmortizationResult(monthly_payment=monthly,
                              annual_payment=monthly * MONTHS_PER_YEAR)


def remaining_balance(principal: float, annual_rate: float,
                      term_years: float, years_elapsed: float) -> float:
    """Balance outstanding after `years_elapsed` years of monthly payments."""
    return fu.remaining_balance(annual_rate / MONTHS_PER_YEAR,
                                term_years * MONTHS_PER_YEAR,
                                principal,
                                years_elapsed * MONTHS_PER_YEAR)


def amortization_schedule(principal: float, annual_rate: float,
                          term_years: float) -> List[AmortizationYear]:
    """
    Year-by-year schedule over the loan term.

    Interest for a year is the payment less the principal retired, so the
    rows reconcile exactly: beginning − principal = ending.  A fractional
    term ends with a short year carrying only the remaining monthly payments.
    A loan with no finite term has no schedule.
    """
    if not math.isfinite(term_years):
        return []
    monthly = amortize(principal, annual_rate, term_years).monthly_payment
    rows = []
    for year in range(1, math.ceil(term_years) + 1):
        begin = remaining_balance(principal, annual_rate, term_years, year - 1)
        end = remaining_balance(principal, annual_rate, term_years, year)
        months = min(MONTHS_PER_YEAR, (term_years - (year - 1)) * MONTHS_PER_YEAR)
        paid = monthly * months
        retired = begin - end
        rows.append(AmortizationYear(
            year=year,
            beginning_balance=begin,
            payment=paid,
            interest=paid - retired,
            principal=retired,
            ending_balance=end,
        ))
    return rows

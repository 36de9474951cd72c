"""
projection.py
-------------
Year-by-year operating and cash-flow projection for an acquired business.

For each year k = 1..N, N = max(exit_year, min_projection_years):

    Revenue          rev[1] = target revenue
                     rev[k] = rev[k-1] * (1 + g)   (+ bolt-on revenue in year 2)
    EBITDA           rev[k] * margin               (margin held constant)
    Adjusted EBITDA  EBITDA + SG&A + procurement + rev[k] * cross-sell
                     (+ owner add-backs - replacement salary in year 1)
    Debt service     bank payment while k <= bank term
                     + seller payment while k <= seller term
    Pre-tax CF       Adj. EBITDA - debt service - capex (- bolt-on cost in year 2)
    FCF              pre-tax CF * (1 - t) if positive, else pre-tax CF
    Equity value     EBITDA * exit multiple - remaining debt + cumulative FCF
"""

from typing import Optional, Tuple

import numpy as np

from deal_valuation.amortization import remaining_balance
from deal_valuation.config import CONFIG
from deal_valuation.models import (
    DealStructure, DebtService, ValuationInputs, YearProjection,
)
from deal_valuation.utils import coverage_ratio, safe_ratio

BOLT_ON_YEAR = 2


def resolve_exit_year(inputs: ValuationInputs) -> int:
    """Exit year as a whole year, never earlier than year 1."""
    try:
        return max(1, int(inputs.exit_year))
    except (TypeError, ValueError, OverflowError):
        return 1


def projection_horizon(inputs: ValuationInputs,
                       min_years: Optional[int] = None) -> int:
    """Number of projected years: the exit year or the display minimum."""
    if min_years is None:
        min_years = CONFIG.min_projection_years
    return max(resolve_exit_year(inputs), min_years)


def outstanding_debt(inputs: ValuationInputs, deal: DealStructure,
                     years_elapsed: int) -> float:
    """Combined bank + seller balance after `years_elapsed` years."""
    bank = remaining_balance(deal.bank_debt, inputs.bank_interest_rate,
                             inputs.bank_term_years, years_elapsed)
    seller = remaining_balance(deal.seller_note, inputs.seller_note_rate,
                               inputs.seller_note_term, years_elapsed)
    return bank + seller


def build_projection(inputs: ValuationInputs, deal: DealStructure,
                     debt: DebtService,
                     min_years: Optional[int] = None) -> Tuple[YearProjection, ...]:
    """
    Build the projection table.

    Parameters
    ----------
    inputs    : Acquisition assumptions.
    deal      : Sources of funds (tranche sizes, equity check).
    debt      : Level payments on each tranche.
    min_years : Minimum horizon; defaults to CONFIG.min_projection_years.

    Returns
    -------
    tuple of YearProjection, ordered by year starting at 1 with no gaps.
    """
    n_years = projection_horizon(inputs, min_years)
    years = np.arange(1, n_years + 1)
    margin = inputs.effective_ebitda_margin

    # --- Revenue & EBITDA ---
    revenue = np.zeros(n_years)
    revenue[0] = inputs.target_revenue
    for i in range(1, n_years):
        revenue[i] = revenue[i - 1] * (1.0 + inputs.revenue_growth_rate)
        if years[i] == BOLT_ON_YEAR:
            revenue[i] += inputs.year_2_bolt_on_revenue

    ebitda = revenue * margin

    # --- Synergies & normalisation ---
    synergies = (inputs.synergy_sg_a_savings + inputs.synergy_procurement
                 + revenue * inputs.synergy_cross_sell_pct)
    adjusted_ebitda = ebitda + synergies
    adjusted_ebitda[0] += (inputs.existing_owner_excess_comp
                           + inputs.one_time_adjustments
                           - inputs.owner_salary)

    # --- Debt service ---
    bank_service = np.where(years <= inputs.bank_term_years,
                            debt.bank_annual_payment, 0.0)
    seller_service = np.where(years <= inputs.seller_note_term,
                              debt.seller_annual_payment, 0.0)
    debt_service = bank_service + seller_service

    # --- Cash flow ---
    capex = np.full(n_years, float(inputs.capex_annual))
    bolt_on_cost = np.where(years == BOLT_ON_YEAR,
                            inputs.year_2_bolt_on_cost, 0.0)
    pre_tax_cf = adjusted_ebitda - debt_service - capex - bolt_on_cost
    # No tax benefit on losses
    free_cash_flow = np.where(pre_tax_cf > 0,
                              pre_tax_cf * (1.0 - inputs.tax_rate),
                              pre_tax_cf)
    taxes = pre_tax_cf - free_cash_flow
    cumulative_fcf = np.cumsum(free_cash_flow)

    # --- Balance sheet & same-year exit value ---
    remaining_debt = np.array([outstanding_debt(inputs, deal, int(y))
                               for y in years])
    implied_ev = ebitda * inputs.exit_multiple
    equity_value = implied_ev - remaining_debt + cumulative_fcf

    rows = []
    for i in range(n_years):
        rows.append(YearProjection(
            year=int(years[i]),
            revenue=float(revenue[i]),
            ebitda=float(ebitda[i]),
            synergies=float(synergies[i]),
            adjusted_ebitda=float(adjusted_ebitda[i]),
            debt_service=float(debt_service[i]),
            capex=float(capex[i]),
            pre_tax_cf=float(pre_tax_cf[i]),
            taxes=float(taxes[i]),
            free_cash_flow=float(free_cash_flow[i]),
            cumulative_fcf=float(cumulative_fcf[i]),
            remaining_debt=float(remaining_debt[i]),
            implied_ev=float(implied_ev[i]),
            equity_value=float(equity_value[i]),
            moic=safe_ratio(float(equity_value[i]), deal.equity_check),
            dscr=coverage_ratio(float(adjusted_ebitda[i]),
                                float(debt_service[i])),
        ))
    return tuple(rows)

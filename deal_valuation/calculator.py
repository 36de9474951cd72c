"""
calculator.py
-------------
Valuation calculator: one set of acquisition assumptions in, one complete
deal model out.

    1. Deal structure     EV = entry multiple x EBITDA, split by financing mix
    2. Debt service       level payment on the bank loan and the seller note
    3. Projection         year-by-year operating model and cash flows
    4. Cash-flow summary  year-one slice with debt service coverage
    5. Exit analysis      exit value, MOIC, IRR

The calculation never raises on out-of-range assumptions (negative revenue,
a financing mix that does not sum to 100%); degenerate inputs produce
degenerate but fully populated outputs so callers can recompute on every
edit without guarding.
"""

from typing import Optional

from deal_valuation.amortization import amortize
from deal_valuation.config import CONFIG, EngineConfig
from deal_valuation.exit_analysis import analyze_exit
from deal_valuation.models import (
    CashFlowSummary, DealStructure, DebtService, ValuationInputs,
    ValuationOutputs,
)
from deal_valuation.projection import build_projection
from deal_valuation.utils import coverage_ratio


def structure_deal(inputs: ValuationInputs) -> DealStructure:
    """Purchase price and the financing tranches that fund it."""
    enterprise_value = inputs.target_ebitda * inputs.entry_multiple
    return DealStructure(
        enterprise_value=enterprise_value,
        equity_check=enterprise_value * inputs.equity_pct,
        bank_debt=enterprise_value * inputs.bank_debt_pct,
        seller_note=enterprise_value * inputs.seller_note_pct,
    )


def schedule_debt_service(inputs: ValuationInputs,
                          deal: DealStructure) -> DebtService:
    """Level monthly and annual payments on each tranche."""
    bank = amortize(deal.bank_debt, inputs.bank_interest_rate,
                    inputs.bank_term_years)
    seller = amortize(deal.seller_note, inputs.seller_note_rate,
                      inputs.seller_note_term)
    return DebtService(
        bank_annual_payment=bank.annual_payment,
        bank_monthly_payment=bank.monthly_payment,
        seller_annual_payment=seller.annual_payment,
        seller_monthly_payment=seller.monthly_payment,
        total_annual_debt_service=bank.annual_payment + seller.annual_payment,
    )


def calculate_valuation(inputs: ValuationInputs,
                        config: Optional[EngineConfig] = None) -> ValuationOutputs:
    """
    Run the full deal model.

    Parameters
    ----------
    inputs : ValuationInputs
        Acquisition assumptions.  Never mutated.
    config : EngineConfig, optional
        Projection horizon and IRR solver settings. Defaults to CONFIG.

    Returns
    -------
    ValuationOutputs
        Deal, debt, year-one cash flow, projection and exit blocks.
    """
    config = config or CONFIG

    deal = structure_deal(inputs)
    debt = schedule_debt_service(inputs, deal)
    projection = build_projection(inputs, deal, debt,
                                  min_years=config.min_projection_years)

    year_one = projection[0]
    cash_flow = CashFlowSummary(
        adjusted_ebitda=year_one.adjusted_ebitda,
        pre_tax_cash_flow=year_one.pre_tax_cf,
        after_tax_cash_flow=year_one.free_cash_flow,
        dscr=coverage_ratio(year_one.adjusted_ebitda,
                            debt.total_annual_debt_service),
    )

    exit_ = analyze_exit(inputs, deal, projection, solver=config.solver)

    return ValuationOutputs(
        deal=deal,
        debt=debt,
        cash_flow=cash_flow,
        projection=projection,
        exit=exit_,
    )

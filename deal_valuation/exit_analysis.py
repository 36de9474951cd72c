"""
exit_analysis.py
----------------
Exit valuation and returns for the buyer's equity.

At exit year Y:
    Exit EV          = EBITDA_Y * exit multiple
    Equity to buyer  = Exit EV - debt outstanding at Y
    Total return     = Equity to buyer + cumulative FCF through Y
    MOIC             = Total return / equity check
    IRR              = r such that
                       -E_0 + sum_{t<Y} FCF_t/(1+r)^t + (FCF_Y + Equity_Y)/(1+r)^Y = 0
"""

from typing import List, Optional, Sequence

from deal_valuation.common.finance_utils import compute_irr, compute_moic
from deal_valuation.config import CONFIG, SolverConfig
from deal_valuation.models import (
    DealStructure, ExitAnalysis, ValuationInputs, YearProjection,
)
from deal_valuation.projection import resolve_exit_year
from deal_valuation.utils import get_logger

log = get_logger(__name__)


def equity_cash_flows(equity_check: float,
                      projection: Sequence[YearProjection],
                      exit_year: int,
                      exit_proceeds: float) -> List[float]:
    """
    Buyer's equity cash flows, t = 0..exit_year.

    The equity check goes out at t=0, each year's free cash flow comes back,
    and the exit-year flow also carries the equity proceeds from the sale.
    """
    flows = [-equity_check]
    for row in projection[:exit_year]:
        flow = row.free_cash_flow
        if row.year == exit_year:
            flow += exit_proceeds
        flows.append(flow)
    return flows


def analyze_exit(inputs: ValuationInputs, deal: DealStructure,
                 projection: Sequence[YearProjection],
                 solver: Optional[SolverConfig] = None) -> ExitAnalysis:
    """
    Returns to the buyer for an exit at `inputs.exit_year`.

    Parameters
    ----------
    inputs     : Acquisition assumptions (exit year and multiple).
    deal       : Sources of funds; the equity check is the investment.
    projection : Projection table covering at least the exit year.
    solver     : IRR solver settings; defaults to CONFIG.solver.

    Returns
    -------
    ExitAnalysis.  MOIC is 0.0 and IRR is None when the equity check is not
    positive; IRR is also None when the solver finds no root.
    """
    exit_year = resolve_exit_year(inputs)
    row = projection[exit_year - 1]

    exit_ev = row.ebitda * inputs.exit_multiple
    equity_to_buyer = exit_ev - row.remaining_debt
    total_return = equity_to_buyer + row.cumulative_fcf

    irr = None
    if deal.equity_check > 0:
        flows = equity_cash_flows(deal.equity_check, projection, exit_year,
                                  equity_to_buyer)
        irr = compute_irr(flows, solver or CONFIG.solver)
        if irr is None:
            log.debug("No IRR for exit in year %d (flows=%s)", exit_year, flows)

    return ExitAnalysis(
        exit_revenue=row.revenue,
        exit_ebitda=row.ebitda,
        exit_ev=exit_ev,
        remaining_debt_at_exit=row.remaining_debt,
        equity_to_buyer=equity_to_buyer,
        cumulative_fcf=row.cumulative_fcf,
        total_return=total_return,
        moic=compute_moic(total_return, deal.equity_check),
        irr=irr,
    )

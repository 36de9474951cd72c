#!/usr/bin/env python3
"""
=============================================================================
ROLL-UP MODEL -- PLATFORM + BOLT-ON ACQUISITIONS
=============================================================================
Models the combined entity built by acquiring a platform company and layering
bolt-ons on top of it in later years.  The model implements:

    1. Acquisition summaries (EV, equity and debt per company)
    2. Combined operating model (each company compounds from its close year)
    3. Synergy engine (per-bolt-on SG&A / procurement, cross-sell uplift)
    4. Per-acquisition debt schedules (bank loan + seller note)
    5. Exit valuation, MOIC and IRR with bolt-on equity injections
    6. Value creation bridge (organic growth, synergies, multiple arbitrage)

Value creation levers:
    (a) Organic growth        -- revenue growth at the blended margin
    (b) Synergies             -- cost savings and cross-sell, capitalised at exit
    (c) Multiple arbitrage    -- buying small at low multiples, selling the
                                 platform at a higher one
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from deal_valuation.amortization import amortize, remaining_balance
from deal_valuation.common.finance_utils import (
    compound_growth, compute_irr, compute_moic,
)
from deal_valuation.config import CONFIG, EngineConfig
from deal_valuation.utils import get_logger, safe_ratio

log = get_logger(__name__)

DEFAULT_BASE_MARGIN = 0.15      # used when the companies report no EBITDA
MARGIN_EXPANSION_YEAR = 3


# =============================================================================
# INPUTS
# =============================================================================
@dataclass(frozen=True)
class RollupCompany:
    """A platform or bolt-on target. close_year 1 = platform year."""
    id:             str
    name:           str
    revenue:        float = 0.0
    ebitda:         float = 0.0
    entry_multiple: float = 4.0
    close_year:     int   = 1

    @property
    def enterprise_value(self) -> float:
        return self.ebitda * self.entry_multiple

    @property
    def is_active_target(self) -> bool:
        """Companies with no revenue and no EBITDA are placeholders."""
        return self.revenue > 0 or self.ebitda > 0


@dataclass(frozen=True)
class RollupSynergies:
    sg_a_savings_per_bolton:          float = 200_000.0
    procurement_savings_per_bolton:   float = 100_000.0
    cross_sell_uplift_pct:            float = 0.10
    recurring_revenue_conversion_pct: float = 0.10
    margin_expansion_pct:             float = 0.02


@dataclass(frozen=True)
class RollupExitAssumptions:
    exit_year:     int   = 7
    exit_multiple: float = 8.0


@dataclass(frozen=True)
class RollupFinancing:
    """Financing mix and operating assumptions applied to every acquisition."""
    equity_pct:          float = 0.25
    bank_debt_pct:       float = 0.60
    seller_note_pct:     float = 0.15
    bank_interest_rate:  float = 0.085
    bank_term_years:     float = 10
    seller_note_rate:    float = 0.06
    seller_note_term:    float = 5
    revenue_growth_rate: float = 0.05
    owner_salary:        float = 200_000.0
    tax_rate:            float = 0.25


@dataclass(frozen=True)
class RollupInputs:
    platform:  RollupCompany
    bolt_ons:  Tuple[RollupCompany, ...] = ()
    synergies: RollupSynergies = field(default_factory=RollupSynergies)
    exit:      RollupExitAssumptions = field(default_factory=RollupExitAssumptions)
    financing: RollupFinancing = field(default_factory=RollupFinancing)


DEFAULT_ROLLUP_INPUTS = RollupInputs(
    platform=RollupCompany(id="platform", name="Platform Company"),
)


# =============================================================================
# OUTPUTS
# =============================================================================
@dataclass(frozen=True)
class RollupAcquisitionSummary:
    company:  str
    revenue:  float
    ebitda:   float
    ev:       float
    equity:   float
    debt:     float
    multiple: float


@dataclass(frozen=True)
class RollupProjectionYear:
    year:             int
    combined_revenue: float
    combined_ebitda:  float
    synergies:        float
    adjusted_ebitda:  float
    debt_service:     float
    free_cash_flow:   float
    cumulative_fcf:   float
    remaining_debt:   float
    companies_count:  int


@dataclass(frozen=True)
class ValueBridge:
    entry_value:              float
    organic_growth_value:     float
    synergy_value:            float
    multiple_expansion_value: float
    exit_value:               float


@dataclass(frozen=True)
class RollupOutputs:
    acquisitions:            Tuple[RollupAcquisitionSummary, ...]
    total_capital_deployed:  float
    total_equity_invested:   float
    total_debt:              float
    weighted_entry_multiple: float
    projection:              Tuple[RollupProjectionYear, ...]
    value_bridge:            ValueBridge
    exit_ev:                 float
    remaining_debt_at_exit:  float
    cumulative_fcf:          float
    total_return:            float
    moic:                    float
    irr:                     Optional[float]


# =============================================================================
# ENGINE
# =============================================================================
def _summarize(company: RollupCompany,
               fin: RollupFinancing) -> RollupAcquisitionSummary:
    ev = company.enterprise_value
    return RollupAcquisitionSummary(
        company=company.name,
        revenue=company.revenue,
        ebitda=company.ebitda,
        ev=ev,
        equity=ev * fin.equity_pct,
        debt=ev * (fin.bank_debt_pct + fin.seller_note_pct),
        multiple=company.entry_multiple,
    )


def _debt_position(companies: List[RollupCompany], fin: RollupFinancing,
                   year: int) -> Tuple[float, float]:
    """Debt service paid and balance outstanding in `year`, all acquisitions."""
    service = 0.0
    outstanding = 0.0
    for c in companies:
        ev = c.enterprise_value
        bank = ev * fin.bank_debt_pct
        seller = ev * fin.seller_note_pct
        years_held = year - c.close_year + 1

        bank_bal = remaining_balance(bank, fin.bank_interest_rate,
                                     fin.bank_term_years, years_held)
        seller_bal = remaining_balance(seller, fin.seller_note_rate,
                                       fin.seller_note_term, years_held)
        outstanding += bank_bal + seller_bal

        if years_held <= fin.bank_term_years:
            service += amortize(bank, fin.bank_interest_rate,
                                fin.bank_term_years).annual_payment
        if years_held <= fin.seller_note_term:
            service += amortize(seller, fin.seller_note_rate,
                                fin.seller_note_term).annual_payment
    return service, outstanding


def calculate_rollup(inputs: RollupInputs,
                     config: Optional[EngineConfig] = None) -> RollupOutputs:
    """
    Run the roll-up model.

    Parameters
    ----------
    inputs : RollupInputs
        Platform, bolt-ons, synergy, financing and exit assumptions.
    config : EngineConfig, optional
        Projection horizon and IRR solver settings. Defaults to CONFIG.

    Returns
    -------
    RollupOutputs
        Like the single-target engine, degenerate inputs yield a complete
        result rather than an exception (MOIC 0.0, IRR None).
    """
    config = config or CONFIG
    fin = inputs.financing
    syn = inputs.synergies

    companies = [c for c in (inputs.platform, *inputs.bolt_ons)
                 if c.is_active_target]
    bolt_ons = [c for c in inputs.bolt_ons if c.is_active_target]

    # --- Acquisition summaries ---
    acquisitions = tuple(_summarize(c, fin) for c in companies)
    total_capital_deployed = sum(a.ev for a in acquisitions)
    total_equity_invested = sum(a.equity for a in acquisitions)
    total_debt = sum(a.debt for a in acquisitions)

    total_ebitda = sum(a.ebitda for a in acquisitions)
    total_revenue = sum(a.revenue for a in acquisitions)
    weighted_entry_multiple = safe_ratio(total_capital_deployed, total_ebitda)
    base_margin = (total_ebitda / total_revenue
                   if total_ebitda > 0 and total_revenue > 0
                   else DEFAULT_BASE_MARGIN)

    # --- Year-by-year projection ---
    exit_year = max(1, int(inputs.exit.exit_year))
    n_years = max(exit_year, config.min_projection_years)
    projection = []
    cumulative_fcf = 0.0

    for year in range(1, n_years + 1):
        active = [c for c in companies if c.close_year <= year]
        active_bolt_ons = [c for c in bolt_ons if c.close_year <= year]
        n_bolt_ons = len(active_bolt_ons)

        combined_revenue = sum(
            compound_growth(c.revenue, fin.revenue_growth_rate, year - c.close_year)
            for c in active
        )
        margin = base_margin + (syn.margin_expansion_pct
                                if year >= MARGIN_EXPANSION_YEAR else 0.0)
        combined_ebitda = combined_revenue * margin

        synergies = n_bolt_ons * (syn.sg_a_savings_per_bolton
                                  + syn.procurement_savings_per_bolton)
        if n_bolt_ons > 0:
            synergies += combined_revenue * syn.cross_sell_uplift_pct

        adjusted_ebitda = combined_ebitda + synergies - fin.owner_salary
        debt_service, remaining_debt = _debt_position(active, fin, year)

        pre_tax_cf = adjusted_ebitda - debt_service
        # No tax benefit on losses
        free_cash_flow = (pre_tax_cf * (1.0 - fin.tax_rate)
                          if pre_tax_cf > 0 else pre_tax_cf)
        cumulative_fcf += free_cash_flow

        projection.append(RollupProjectionYear(
            year=year,
            combined_revenue=combined_revenue,
            combined_ebitda=combined_ebitda,
            synergies=synergies,
            adjusted_ebitda=adjusted_ebitda,
            debt_service=debt_service,
            free_cash_flow=free_cash_flow,
            cumulative_fcf=cumulative_fcf,
            remaining_debt=remaining_debt,
            companies_count=len(active),
        ))

    # --- Exit ---
    at_exit = projection[exit_year - 1]
    exit_ev = at_exit.adjusted_ebitda * inputs.exit.exit_multiple
    equity_at_exit = exit_ev - at_exit.remaining_debt
    total_return = equity_at_exit + at_exit.cumulative_fcf
    moic = compute_moic(total_return, total_equity_invested)

    # Platform equity at close; bolt-on equity is injected in its close year
    flows = np.zeros(exit_year + 1)
    if inputs.platform.is_active_target:
        flows[0] = -inputs.platform.enterprise_value * fin.equity_pct
    for row in projection[:exit_year]:
        flows[row.year] += row.free_cash_flow
    for b in bolt_ons:
        if 1 <= b.close_year <= exit_year:
            flows[b.close_year] -= b.enterprise_value * fin.equity_pct
    flows[exit_year] += equity_at_exit

    irr = compute_irr(flows, config.solver) if total_equity_invested > 0 else None
    if irr is None:
        log.debug("No IRR for roll-up exit in year %d", exit_year)

    # --- Value creation bridge ---
    organic_growth_value = ((at_exit.combined_revenue - total_revenue)
                            * base_margin * weighted_entry_multiple)
    synergy_value = at_exit.synergies * inputs.exit.exit_multiple
    multiple_expansion_value = (exit_ev - total_capital_deployed
                                - organic_growth_value - synergy_value)
    value_bridge = ValueBridge(
        entry_value=total_capital_deployed,
        organic_growth_value=max(0.0, organic_growth_value),
        synergy_value=max(0.0, synergy_value),
        multiple_expansion_value=max(0.0, multiple_expansion_value),
        exit_value=exit_ev,
    )

    return RollupOutputs(
        acquisitions=acquisitions,
        total_capital_deployed=total_capital_deployed,
        total_equity_invested=total_equity_invested,
        total_debt=total_debt,
        weighted_entry_multiple=weighted_entry_multiple,
        projection=tuple(projection),
        value_bridge=value_bridge,
        exit_ev=exit_ev,
        remaining_debt_at_exit=at_exit.remaining_debt,
        cumulative_fcf=at_exit.cumulative_fcf,
        total_return=total_return,
        moic=moic,
        irr=irr,
    )

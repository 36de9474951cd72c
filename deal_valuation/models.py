"""
Valuation Input / Output Records
================================
Immutable records exchanged with the valuation engine.  Inputs are the
acquisition assumptions entered on the valuation screen; outputs are created
fresh on every call and carry no identity beyond it.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import pandas as pd


# ==============================================================================
# Inputs
# ==============================================================================
@dataclass(frozen=True)
class ValuationInputs:
    """
    Acquisition assumptions for a single target.

    Currency amounts are in the deal currency; rates and percentages are
    decimals (0.25 = 25%); terms are in years.
    """
    # ── Target company ───────────────────────────────────────────────────────
    target_revenue:       float = 0.0
    target_ebitda:        float = 0.0
    target_ebitda_margin: float = 0.0     # used only when revenue is 0
    revenue_growth_rate:  float = 0.05

    # ── Valuation ────────────────────────────────────────────────────────────
    entry_multiple: float = 4.0

    # ── Capital structure ────────────────────────────────────────────────────
    equity_pct:         float = 0.25
    bank_debt_pct:      float = 0.65
    seller_note_pct:    float = 0.10
    bank_interest_rate: float = 0.09
    bank_term_years:    float = 10
    seller_note_rate:   float = 0.06
    seller_note_term:   float = 5

    # ── Operating assumptions ────────────────────────────────────────────────
    owner_salary:               float = 200_000.0
    existing_owner_excess_comp: float = 0.0
    one_time_adjustments:       float = 0.0
    capex_annual:               float = 0.0
    tax_rate:                   float = 0.25

    # ── Growth / synergy ─────────────────────────────────────────────────────
    year_2_bolt_on_revenue: float = 0.0
    year_2_bolt_on_cost:    float = 0.0
    synergy_sg_a_savings:   float = 0.0
    synergy_procurement:    float = 0.0
    synergy_cross_sell_pct: float = 0.0

    # ── Exit ─────────────────────────────────────────────────────────────────
    exit_year:     int   = 5
    exit_multiple: float = 6.0

    # ── Derived ──────────────────────────────────────────────────────────────
    @property
    def effective_ebitda_margin(self) -> float:
        """EBITDA / revenue when revenue is known, else the supplied margin."""
        if self.target_revenue > 0:
            return self.target_ebitda / self.target_revenue
        return self.target_ebitda_margin

    def capital_structure_total(self) -> float:
        """Sum of the three financing percentages."""
        return self.equity_pct + self.bank_debt_pct + self.seller_note_pct

    def capital_structure_warning(self, tol: float = 1e-6) -> Optional[str]:
        """
        Presentation-layer check that the financing mix covers the price.

        The engine never calls this; it values whatever mix it is given.
        """
        total = self.capital_structure_total()
        if abs(total - 1.0) <= tol:
            return None
        return (f"Capital structure sums to {total:.1%}, not 100%: "
                f"equity {self.equity_pct:.1%}, bank {self.bank_debt_pct:.1%}, "
                f"seller note {self.seller_note_pct:.1%}")

    # ── Conversion ───────────────────────────────────────────────────────────
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValuationInputs":
        """Build inputs from a mapping; missing keys take defaults."""
        unknown = set(data) - field_names()
        if unknown:
            raise ValueError(f"Unknown valuation input(s): {sorted(unknown)}")
        return cls(**data)

    def with_overrides(self, **overrides) -> "ValuationInputs":
        """Return a copy with the given fields replaced."""
        unknown = set(overrides) - field_names()
        if unknown:
            raise ValueError(f"Unknown valuation input(s): {sorted(unknown)}")
        return replace(self, **overrides)


def field_names() -> frozenset:
    """Names of every ValuationInputs field."""
    return frozenset(f.name for f in fields(ValuationInputs))


DEFAULT_INPUTS = ValuationInputs()


# ==============================================================================
# Outputs
# ==============================================================================
@dataclass(frozen=True)
class DealStructure:
    """Sources of funds at close."""
    enterprise_value: float
    equity_check:     float
    bank_debt:        float
    seller_note:      float


@dataclass(frozen=True)
class DebtService:
    """Level payments on each tranche."""
    bank_annual_payment:       float
    bank_monthly_payment:      float
    seller_annual_payment:     float
    seller_monthly_payment:    float
    total_annual_debt_service: float


@dataclass(frozen=True)
class CashFlowSummary:
    """Year-one cash generation after debt service."""
    adjusted_ebitda:     float
    pre_tax_cash_flow:   float
    after_tax_cash_flow: float
    dscr:                float      # inf when there is no debt service


@dataclass(frozen=True)
class YearProjection:
    """One row of the projection table."""
    year:            int
    revenue:         float
    ebitda:          float
    synergies:       float
    adjusted_ebitda: float
    debt_service:    float
    capex:           float
    pre_tax_cf:      float
    taxes:           float
    free_cash_flow:  float
    cumulative_fcf:  float
    remaining_debt:  float
    implied_ev:      float      # ebitda x exit multiple
    equity_value:    float      # value of a same-year exit, incl. cash retained
    moic:            float
    dscr:            float


@dataclass(frozen=True)
class ExitAnalysis:
    """Returns to the buyer at the chosen exit year."""
    exit_revenue:           float
    exit_ebitda:            float
    exit_ev:                float
    remaining_debt_at_exit: float
    equity_to_buyer:        float
    cumulative_fcf:         float
    total_return:           float
    moic:                   float
    irr:                    Optional[float]


@dataclass(frozen=True)
class ValuationOutputs:
    """Container for a complete valuation run."""
    deal:       DealStructure
    debt:       DebtService
    cash_flow:  CashFlowSummary
    projection: Tuple[YearProjection, ...]
    exit:       ExitAnalysis

    def year(self, year: int) -> YearProjection:
        """Projection row for a 1-based year."""
        return self.projection[year - 1]

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["projection"] = list(out["projection"])
        return out

    def projection_frame(self) -> pd.DataFrame:
        """Projection table as a DataFrame indexed by year."""
        frame = pd.DataFrame([asdict(row) for row in self.projection])
        return frame.set_index("year")

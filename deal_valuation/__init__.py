"""
Deal Valuation Engine
=====================
Acquisition valuation and deal-structuring models for small-business
buyouts: price a target, finance it with equity, bank debt and a seller
note, project its cash flows and measure returns at exit.

Modules:
    amortization    - Level-payment loan schedules (monthly annuity)
    projection      - Year-by-year operating and cash-flow projection
    exit_analysis   - Exit value, MOIC and IRR
    calculator      - One-call valuation of a set of assumptions
    sensitivity     - Two-way sensitivity tables over any two inputs
    rollup          - Platform + bolt-on roll-up model
    listing_mapper  - Maps sourced listings to model inputs
    visualization   - Dark-theme charts for a valuation run
"""

from deal_valuation.calculator import calculate_valuation
from deal_valuation.models import (
    DEFAULT_INPUTS, ValuationInputs, ValuationOutputs,
)
from deal_valuation.rollup import (
    DEFAULT_ROLLUP_INPUTS, RollupInputs, RollupOutputs, calculate_rollup,
)
from deal_valuation.sensitivity import (
    METRICS, SensitivityTable, generate_sensitivity_table,
)

__version__ = "1.0.0"

__all__ = [
    "calculate_valuation", "generate_sensitivity_table", "calculate_rollup",
    "ValuationInputs", "ValuationOutputs", "DEFAULT_INPUTS",
    "RollupInputs", "RollupOutputs", "DEFAULT_ROLLUP_INPUTS",
    "SensitivityTable", "METRICS",
]

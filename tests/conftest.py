"""
conftest.py
-----------
Shared fixtures: a representative small-business acquisition and a few
variations of it used across the engine tests.
"""

import os
import sys

import pytest

# Make the package importable when running pytest from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from deal_valuation.models import ValuationInputs


@pytest.fixture
def base_inputs():
    """$2.5M revenue, $500K EBITDA (20% margin) bought at 4x with default financing."""
    return ValuationInputs(
        target_revenue=2_500_000.0,
        target_ebitda=500_000.0,
        target_ebitda_margin=0.20,
    )


@pytest.fixture
def flat_inputs(base_inputs):
    """No growth, no synergies, no bolt-on."""
    return base_inputs.with_overrides(revenue_growth_rate=0.0)


@pytest.fixture
def all_equity_inputs(base_inputs):
    """Deal funded entirely with equity (no debt service)."""
    return base_inputs.with_overrides(
        equity_pct=1.0, bank_debt_pct=0.0, seller_note_pct=0.0,
    )


@pytest.fixture
def synergy_inputs(base_inputs):
    """Synergies, owner add-backs, capex and a year-2 bolt-on."""
    return base_inputs.with_overrides(
        existing_owner_excess_comp=150_000.0,
        one_time_adjustments=25_000.0,
        capex_annual=40_000.0,
        year_2_bolt_on_revenue=600_000.0,
        year_2_bolt_on_cost=250_000.0,
        synergy_sg_a_savings=50_000.0,
        synergy_procurement=20_000.0,
        synergy_cross_sell_pct=0.02,
    )

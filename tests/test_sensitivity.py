#!/usr/bin/env python3
"""
=============================================================================
UNIT TESTS -- SENSITIVITY TABLES
=============================================================================
Tests for deal_valuation/sensitivity.py covering:
    - Grid shape and axis labels
    - Cell values equal direct valuation calls
    - Base inputs never mutated
    - Metric registry and DataFrame export

Run:
    pytest tests/test_sensitivity.py -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from deal_valuation.calculator import calculate_valuation
from deal_valuation.sensitivity import (
    METRICS,
    SensitivityTable,
    generate_sensitivity_table,
    metric_irr,
    metric_moic,
)

ENTRY = [3.0, 3.5, 4.0]
EXIT = [4.0, 5.0, 6.0, 7.0]


# =========================================================================
# GRID
# =========================================================================
class TestSensitivityGrid:
    """Test two-way table generation."""

    @pytest.fixture
    def table(self, base_inputs):
        return generate_sensitivity_table(base_inputs, "entry_multiple", ENTRY,
                                          "exit_multiple", EXIT, metric_moic)

    def test_shape(self, table):
        assert table.shape == (3, 4)
        assert len(table.data) == 3
        assert all(len(row) == 4 for row in table.data)

    def test_labels(self, table):
        assert table.rows == ["3", "3.5", "4"]
        assert table.cols == ["4", "5", "6", "7"]

    def test_cells_match_direct_calls(self, base_inputs, table):
        for i, vx in enumerate(ENTRY):
            for j, vy in enumerate(EXIT):
                direct = calculate_valuation(base_inputs.with_overrides(
                    entry_multiple=vx, exit_multiple=vy))
                assert table.data[i][j] == direct.exit.moic

    def test_moic_rises_with_exit_multiple(self, table):
        for row in table.data:
            assert all(a <= b for a, b in zip(row, row[1:]))

    def test_base_inputs_untouched(self, base_inputs):
        before = base_inputs.to_dict()
        generate_sensitivity_table(base_inputs, "bank_interest_rate", [0.07, 0.11],
                                   "bank_term_years", [5, 10], METRICS["dscr"])
        assert base_inputs.to_dict() == before

    def test_repeated_values_recompute_identically(self, base_inputs):
        t = generate_sensitivity_table(base_inputs, "revenue_growth_rate", [0.03, 0.03],
                                       "exit_year", [5, 7], metric_irr)
        assert t.data[0] == t.data[1]

    def test_empty_axis(self, base_inputs):
        t = generate_sensitivity_table(base_inputs, "entry_multiple", [],
                                       "exit_multiple", EXIT, metric_moic)
        assert t.shape == (0, 4)
        assert t.data == []

    def test_unknown_field(self, base_inputs):
        with pytest.raises(ValueError, match="not_a_field"):
            generate_sensitivity_table(base_inputs, "not_a_field", [1],
                                       "exit_multiple", [5.0], metric_moic)

    def test_same_field_on_both_axes(self, base_inputs):
        """The column override wins when both axes vary the same input."""
        t = generate_sensitivity_table(base_inputs, "exit_multiple", [4.0, 8.0],
                                       "exit_multiple", [6.0], metric_moic)
        assert t.data[0][0] == t.data[1][0]


# =========================================================================
# METRICS & EXPORT
# =========================================================================
class TestMetricsAndExport:
    """Test metric registry and DataFrame conversion."""

    def test_registry(self, base_inputs):
        out = calculate_valuation(base_inputs)
        assert METRICS["irr"](out) == out.exit.irr
        assert METRICS["moic"](out) == out.exit.moic
        assert METRICS["equity_to_buyer"](out) == out.exit.equity_to_buyer
        assert METRICS["total_return"](out) == out.exit.total_return
        assert METRICS["dscr"](out) == out.cash_flow.dscr

    def test_irr_grid_with_missing_cells(self, base_inputs):
        t = generate_sensitivity_table(base_inputs, "equity_pct", [0.0, 0.25],
                                       "exit_multiple", [6.0], metric_irr)
        assert t.data[0][0] is None
        assert t.data[1][0] is not None
        frame = t.to_frame()
        assert math.isnan(frame.loc["0", "6"])
        assert frame.loc["0.25", "6"] == pytest.approx(t.data[1][0])

    def test_to_frame_layout(self):
        t = SensitivityTable(rows=["a", "b"], cols=["x"], data=[[1.0], [2.0]])
        frame = t.to_frame()
        assert list(frame.index) == ["a", "b"]
        assert list(frame.columns) == ["x"]
        np.testing.assert_allclose(frame["x"].to_numpy(), [1.0, 2.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

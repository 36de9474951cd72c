#!/usr/bin/env python3
"""
=============================================================================
SENSITIVITY ANALYSIS -- TWO-WAY DATA TABLES
=============================================================================
Re-runs the valuation calculator across a cartesian grid of two perturbed
inputs and collects one scalar metric per cell:

    data[i][j] = metric( V(inputs | field_x = x_i, field_y = y_j) )

Typical grids:
    - Entry multiple vs Exit multiple   -> IRR
    - Bank rate vs Bank term            -> DSCR
    - Revenue growth vs Exit year       -> MOIC

Each cell builds an independent copy of the inputs; the base inputs are never
mutated and no result is cached, so identical overrides always recompute to
identical values.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from deal_valuation.calculator import calculate_valuation
from deal_valuation.config import EngineConfig
from deal_valuation.models import ValuationInputs, ValuationOutputs, field_names
from deal_valuation.utils import format_label, get_logger

log = get_logger(__name__)

MetricFn = Callable[[ValuationOutputs], Optional[float]]


# =============================================================================
# RESULT CONTAINER
# =============================================================================
@dataclass(frozen=True)
class SensitivityTable:
    """Two-way data table: row labels, column labels, metric matrix."""
    rows: List[str]
    cols: List[str]
    data: List[List[Optional[float]]]

    @property
    def shape(self):
        return len(self.rows), len(self.cols)

    def to_frame(self) -> pd.DataFrame:
        """Matrix as a DataFrame; missing metrics (e.g. no IRR) become NaN."""
        values = [[float("nan") if v is None else v for v in row]
                  for row in self.data]
        return pd.DataFrame(values, index=self.rows, columns=self.cols)


# =============================================================================
# METRICS
# =============================================================================
def metric_irr(outputs: ValuationOutputs) -> Optional[float]:
    return outputs.exit.irr


def metric_moic(outputs: ValuationOutputs) -> float:
    return outputs.exit.moic


def metric_equity_to_buyer(outputs: ValuationOutputs) -> float:
    return outputs.exit.equity_to_buyer


def metric_total_return(outputs: ValuationOutputs) -> float:
    return outputs.exit.total_return


def metric_dscr(outputs: ValuationOutputs) -> float:
    return outputs.cash_flow.dscr


METRICS: Dict[str, MetricFn] = {
    "irr":             metric_irr,
    "moic":            metric_moic,
    "equity_to_buyer": metric_equity_to_buyer,
    "total_return":    metric_total_return,
    "dscr":            metric_dscr,
}


# =============================================================================
# GRID GENERATOR
# =============================================================================
def generate_sensitivity_table(inputs: ValuationInputs,
                               field_x: str, values_x: Sequence,
                               field_y: str, values_y: Sequence,
                               metric_fn: MetricFn,
                               config: Optional[EngineConfig] = None
                               ) -> SensitivityTable:
    """
    Two-way sensitivity of a valuation metric.

    Parameters
    ----------
    inputs    : Base-case assumptions (left untouched).
    field_x   : ValuationInputs field varied down the rows.
    values_x  : Row values.
    field_y   : ValuationInputs field varied across the columns.
    values_y  : Column values.
    metric_fn : Maps a ValuationOutputs to the scalar shown in each cell.
    config    : Engine configuration forwarded to every calculation.

    Returns
    -------
    SensitivityTable with len(values_x) rows of len(values_y) cells.

    Raises
    ------
    ValueError
        If either field is not a ValuationInputs field.
    """
    valid = field_names()
    for name in (field_x, field_y):
        if name not in valid:
            raise ValueError(f"Unknown valuation input for sensitivity: {name!r}")

    values_x = list(values_x)
    values_y = list(values_y)
    log.debug("Sensitivity grid %s x %s (%d x %d)",
              field_x, field_y, len(values_x), len(values_y))

    data = []
    for vx in values_x:
        row = []
        for vy in values_y:
            tweaked = replace(inputs, **{field_x: vx, field_y: vy})
            row.append(metric_fn(calculate_valuation(tweaked, config)))
        data.append(row)

    return SensitivityTable(
        rows=[format_label(v) for v in values_x],
        cols=[format_label(v) for v in values_y],
        data=data,
    )

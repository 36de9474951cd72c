#!/usr/bin/env python3
"""
=============================================================================
DEAL CHARTS
=============================================================================
Figures for a valuation run, drawn on the shared dark theme:

    1. Sensitivity heatmap     any SensitivityTable, one colour per cell
    2. Projection              revenue / adjusted EBITDA bars + cumulative FCF
    3. Debt paydown            bank + seller balances, DSCR on a second axis

Every function returns the matplotlib Figure; saving is left to the caller
(see common.style.save_figure).
"""

import math
from typing import Callable, Optional

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from deal_valuation.amortization import amortization_schedule, remaining_balance
from deal_valuation.common.style import COLORS, fmt_thousands
from deal_valuation.models import ValuationInputs, ValuationOutputs
from deal_valuation.sensitivity import SensitivityTable


# -------------------------------------------------------------------------
# FIGURE 1: Sensitivity heatmap
# -------------------------------------------------------------------------
def plot_sensitivity_heatmap(table: SensitivityTable,
                             title: str = "Sensitivity",
                             x_label: str = "",
                             y_label: str = "",
                             cell_format: Callable[[float], str] = "{:.0%}".format,
                             cmap: str = "RdYlGn"):
    """
    Heatmap of a two-way sensitivity table.

    Rows of the table run down the y-axis, columns across the x-axis.
    Missing cells (e.g. no IRR) are masked and labelled N/A.
    """
    grid = table.to_frame().to_numpy(dtype=float)
    masked = np.ma.masked_invalid(grid)

    fig, ax = plt.subplots(figsize=(10, 7))
    im = ax.imshow(masked, cmap=cmap, aspect="auto")

    finite = grid[np.isfinite(grid)]
    midpoint = float(np.median(finite)) if finite.size else 0.0
    for i in range(grid.shape[0]):
        for j in range(grid.shape[1]):
            val = grid[i, j]
            if not np.isfinite(val):
                txt, clr = "N/A", "#666666"
            else:
                txt = cell_format(val)
                clr = "black" if val > midpoint else COLORS["white"]
            ax.text(j, i, txt, ha="center", va="center", fontsize=8, color=clr)

    ax.set_xticks(np.arange(len(table.cols)))
    ax.set_xticklabels(table.cols, rotation=45, ha="right")
    ax.set_yticks(np.arange(len(table.rows)))
    ax.set_yticklabels(table.rows)
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    ax.set_title(title, fontsize=13, fontweight="bold", pad=15)
    ax.grid(False)

    cbar = fig.colorbar(im, ax=ax, shrink=0.8)
    cbar.ax.yaxis.set_tick_params(color=COLORS["white"])
    plt.setp(plt.getp(cbar.ax.axes, "yticklabels"), color=COLORS["white"])

    fig.tight_layout()
    return fig


# -------------------------------------------------------------------------
# FIGURE 2: Operating projection
# -------------------------------------------------------------------------
def plot_projection(outputs: ValuationOutputs, exit_year: Optional[int] = None):
    """Revenue and adjusted EBITDA bars with cumulative FCF on a twin axis."""
    frame = outputs.projection_frame()
    years = frame.index.to_numpy()
    width = 0.38

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.bar(years - width / 2, frame["revenue"], width=width,
           color=COLORS["primary"], alpha=0.85, label="Revenue")
    ax.bar(years + width / 2, frame["adjusted_ebitda"], width=width,
           color=COLORS["secondary"], alpha=0.85, label="Adj. EBITDA")
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(fmt_thousands))

    axb = ax.twinx()
    axb.plot(years, frame["cumulative_fcf"], color=COLORS["accent"],
             marker="o", linewidth=2, markersize=6, label="Cumulative FCF")
    axb.set_ylabel("Cumulative FCF", color=COLORS["accent"])
    axb.tick_params(axis="y", labelcolor=COLORS["accent"])
    axb.yaxis.set_major_formatter(mticker.FuncFormatter(fmt_thousands))
    axb.grid(False)

    if exit_year is not None:
        ax.axvline(exit_year, color=COLORS["danger"], linestyle="--",
                   linewidth=1.2, label=f"Exit (Y{exit_year})")

    ax.set_xlabel("Year")
    ax.set_ylabel("Revenue / EBITDA")
    ax.set_title("Operating Projection", fontsize=14, fontweight="bold", pad=15)
    ax.set_xticks(years)
    ax.set_xticklabels([f"Y{y}" for y in years])

    lines1, labels1 = ax.get_legend_handles_labels()
    lines2, labels2 = axb.get_legend_handles_labels()
    ax.legend(lines1 + lines2, labels1 + labels2, loc="upper left")

    fig.tight_layout()
    return fig


# -------------------------------------------------------------------------
# FIGURE 3: Debt paydown
# -------------------------------------------------------------------------
def balance_path(principal, annual_rate, term_years, n_years):
    """
    Tranche balance at close and at the end of years 1..n_years, read off the
    amortization schedule.  Loans with no finite term never amortize.
    """
    rows = amortization_schedule(principal, annual_rate, term_years)
    if not rows:
        return np.array([remaining_balance(principal, annual_rate, term_years, y)
                         for y in range(n_years + 1)])
    path = [rows[0].beginning_balance] + [r.ending_balance for r in rows]
    path += [0.0] * (n_years + 1 - len(path))
    return np.array(path[:n_years + 1])


def plot_debt_paydown(outputs: ValuationOutputs, inputs: ValuationInputs):
    """Stacked bank / seller balances from close through the horizon."""
    n_years = len(outputs.projection)
    x = np.arange(n_years + 1)
    bank = balance_path(outputs.deal.bank_debt, inputs.bank_interest_rate,
                        inputs.bank_term_years, n_years)
    seller = balance_path(outputs.deal.seller_note, inputs.seller_note_rate,
                          inputs.seller_note_term, n_years)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.fill_between(x, 0, bank, alpha=0.7, color=COLORS["primary"],
                    label=f"Bank debt ({inputs.bank_interest_rate:.1%})")
    ax.fill_between(x, bank, bank + seller, alpha=0.7, color=COLORS["accent"],
                    label=f"Seller note ({inputs.seller_note_rate:.1%})")
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(fmt_thousands))

    # DSCR is undefined (infinite) once the debt is repaid
    dscr = [row.dscr if math.isfinite(row.dscr) else np.nan
            for row in outputs.projection]
    axb = ax.twinx()
    axb.plot(x[1:], dscr, color=COLORS["danger"], marker="s",
             linewidth=2, markersize=7, label="DSCR (x)", zorder=5)
    axb.set_ylabel("DSCR (x)", color=COLORS["danger"])
    axb.tick_params(axis="y", labelcolor=COLORS["danger"])
    axb.grid(False)

    ax.set_xlabel("Year")
    ax.set_ylabel("Debt Outstanding")
    ax.set_title("Debt Paydown Schedule", fontsize=14, fontweight="bold", pad=15)
    ax.set_xticks(x)
    ax.set_xticklabels(["Close"] + [f"Y{y}" for y in x[1:]])

    lines1, labels1 = ax.get_legend_handles_labels()
    lines2, labels2 = axb.get_legend_handles_labels()
    ax.legend(lines1 + lines2, labels1 + labels2, loc="upper right")

    fig.tight_layout()
    return fig

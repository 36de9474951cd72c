#!/usr/bin/env python3
"""
=============================================================================
REPORT STYLE -- CHART THEME & CONSOLE TABLES
=============================================================================
Dark chart theme applied on import (headless Agg backend), figure saving,
number formatters and the boxed console tables printed by main.py.
"""

import math
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from deal_valuation.config import CONFIG

FIGURES_DIR = Path(CONFIG.output_dir).resolve() / "figures"

COLORS = {
    "primary"   : "#4fc3f7",    # revenue, bank debt
    "secondary" : "#81c784",    # EBITDA
    "accent"    : "#ffb74d",    # cash flow, seller note
    "danger"    : "#e57373",    # DSCR, exit marker
    "white"     : "#e0e0e0",
    "bg"        : "#0a0a0a",
    "axes_bg"   : "#111111",
}

plt.rcParams.update({
    "figure.facecolor"  : COLORS["bg"],
    "axes.facecolor"    : COLORS["axes_bg"],
    "axes.labelcolor"   : COLORS["white"],
    "axes.grid"         : True,
    "grid.alpha"        : 0.15,
    "xtick.color"       : COLORS["white"],
    "ytick.color"       : COLORS["white"],
    "text.color"        : COLORS["white"],
    "legend.facecolor"  : COLORS["axes_bg"],
    "savefig.dpi"       : 150,
    "savefig.facecolor" : COLORS["bg"],
    "savefig.bbox"      : "tight",
})


def save_figure(fig, filename, directory=None):
    """
    Write `fig` as <directory>/<filename>.png and close it.

    The directory defaults to <output_dir>/figures and is created on demand.
    Returns the path written.
    """
    target = Path(directory) if directory else FIGURES_DIR
    target.mkdir(parents=True, exist_ok=True)
    path = target / f"{filename}.png"
    fig.savefig(path)
    plt.close(fig)
    return path


# =============================================================================
# FORMATTERS
# =============================================================================
def fmt_thousands(x, pos=None):
    """Axis tick as $XK (matplotlib FuncFormatter signature)."""
    return f"${x/1e3:,.0f}K"


def fmt_multiple(value):
    return f"{value:.2f}x"


def fmt_pct(value):
    """Decimal as X.X%; a missing value (None / NaN) shows as N/A."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "N/A"
    return f"{value:.1%}"


def fmt_ratio(value):
    """Coverage ratio; infinite coverage (no debt) shows as 'n/m'."""
    return "n/m" if math.isinf(value) else f"{value:.2f}x"


def fmt_currency(value, decimals=0):
    """Dollar amount scaled to K / M / B."""
    for scale, suffix in ((1e9, "B"), (1e6, "M")):
        if abs(value) >= scale:
            return f"${value/scale:,.{max(decimals, 1)}f}{suffix}"
    if abs(value) >= 1e3:
        return f"${value/1e3:,.{decimals}f}K"
    return f"${value:,.{decimals}f}"


# =============================================================================
# CONSOLE OUTPUT
# =============================================================================
def print_section(title, width=70):
    print(f"\n{'=' * width}\n  {title}\n{'=' * width}")


def print_table(title, headers, rows):
    """
    Boxed table: headers centred, values right-aligned, each column as wide
    as its longest cell.
    """
    cells = [[str(v) for v in row] for row in rows]
    widths = [max([len(str(h))] + [len(r[i]) for r in cells if i < len(r)]) + 2
              for i, h in enumerate(headers)]
    rule = "+" + "+".join("-" * w for w in widths) + "+"

    print_section(title, width=len(rule))
    print(rule)
    print("|" + "|".join(str(h).center(w) for h, w in zip(headers, widths)) + "|")
    print(rule)
    for row in cells:
        print("|" + "|".join(v.rjust(w - 1) + " " for v, w in zip(row, widths)) + "|")
    print(rule)

"""
main.py
-------
Entry point for the Deal Valuation Engine demo.

Values a sample acquisition, prints the deal, debt, cash-flow, projection
and exit tables, runs an entry x exit multiple IRR grid and a three-company
roll-up, and writes the charts to <output_dir>/figures.

Usage
-----
    python main.py
    python main.py --revenue 4000000 --ebitda 800000 --entry-multiple 4.5
    python main.py --no-charts

Environment variables
---------------------
See deal_valuation/config.py for the full list of supported env vars.
"""

import os
import sys
import argparse

import numpy as np

# Ensure the package is importable when running from project root
sys.path.insert(0, os.path.dirname(__file__))

from deal_valuation.calculator import calculate_valuation
from deal_valuation.common.style import (
    fmt_currency, fmt_multiple, fmt_pct, fmt_ratio, print_section, print_table,
    save_figure,
)
from deal_valuation.config import CONFIG
from deal_valuation.models import DEFAULT_INPUTS, ValuationInputs
from deal_valuation.rollup import (
    RollupCompany, RollupInputs, calculate_rollup,
)
from deal_valuation.sensitivity import METRICS, generate_sensitivity_table
from deal_valuation.utils import get_logger

log = get_logger("main")


# =============================================================================
# Report sections
# =============================================================================

def report_valuation(inputs: ValuationInputs):
    out = calculate_valuation(inputs)

    warning = inputs.capital_structure_warning()
    if warning:
        log.warning(warning)

    print_section("DEAL STRUCTURE")
    print_table("Sources of Funds", ["Item", "Amount", "% of EV"], [
        ["Enterprise Value", fmt_currency(out.deal.enterprise_value),
         fmt_pct(1.0)],
        ["Equity Check", fmt_currency(out.deal.equity_check),
         fmt_pct(inputs.equity_pct)],
        ["Bank Debt", fmt_currency(out.deal.bank_debt),
         fmt_pct(inputs.bank_debt_pct)],
        ["Seller Note", fmt_currency(out.deal.seller_note),
         fmt_pct(inputs.seller_note_pct)],
    ])

    print_table("Debt Service", ["Tranche", "Monthly", "Annual"], [
        ["Bank Debt", f"${out.debt.bank_monthly_payment:,.0f}",
         f"${out.debt.bank_annual_payment:,.0f}"],
        ["Seller Note", f"${out.debt.seller_monthly_payment:,.0f}",
         f"${out.debt.seller_annual_payment:,.0f}"],
        ["Total", "", f"${out.debt.total_annual_debt_service:,.0f}"],
    ])

    print_table("Year-1 Cash Flow", ["Metric", "Value"], [
        ["Adjusted EBITDA", f"${out.cash_flow.adjusted_ebitda:,.0f}"],
        ["Pre-tax Cash Flow", f"${out.cash_flow.pre_tax_cash_flow:,.0f}"],
        ["After-tax Cash Flow", f"${out.cash_flow.after_tax_cash_flow:,.0f}"],
        ["DSCR", fmt_ratio(out.cash_flow.dscr)],
    ])

    print_section("PROJECTION")
    rows = []
    for p in out.projection:
        rows.append([
            f"Y{p.year}", fmt_currency(p.revenue, 1), fmt_currency(p.adjusted_ebitda, 1),
            fmt_currency(p.debt_service, 1), fmt_currency(p.free_cash_flow, 1),
            fmt_currency(p.remaining_debt, 1), fmt_currency(p.equity_value, 1),
            fmt_multiple(p.moic), fmt_ratio(p.dscr),
        ])
    print_table("Operating & Cash-Flow Projection",
                ["Year", "Revenue", "Adj. EBITDA", "Debt Svc", "FCF",
                 "Debt", "Equity", "MOIC", "DSCR"], rows)

    print_section(f"EXIT ANALYSIS (YEAR {inputs.exit_year})")
    print_table("Returns", ["Metric", "Value"], [
        ["Exit EBITDA", fmt_currency(out.exit.exit_ebitda)],
        ["Exit EV", fmt_currency(out.exit.exit_ev)],
        ["Debt at Exit", fmt_currency(out.exit.remaining_debt_at_exit)],
        ["Equity to Buyer", fmt_currency(out.exit.equity_to_buyer)],
        ["Cumulative FCF", fmt_currency(out.exit.cumulative_fcf)],
        ["Total Return", fmt_currency(out.exit.total_return)],
        ["MOIC", fmt_multiple(out.exit.moic)],
        ["IRR", fmt_pct(out.exit.irr)],
    ])
    return out


def report_sensitivity(inputs: ValuationInputs):
    entry_range = np.arange(3.0, 6.5, 0.5)
    exit_range = np.arange(4.0, 9.0, 1.0)
    table = generate_sensitivity_table(
        inputs, "entry_multiple", [float(m) for m in entry_range],
        "exit_multiple", [float(m) for m in exit_range],
        METRICS["irr"],
    )

    print_section("IRR SENSITIVITY (ENTRY x EXIT MULTIPLE)")
    rows = [[f"{label}x"] + [fmt_pct(v) for v in row]
            for label, row in zip(table.rows, table.data)]
    print_table("IRR by Entry (rows) and Exit (cols) Multiple",
                ["Entry"] + [f"{c}x" for c in table.cols], rows)
    return table


def report_rollup():
    inputs = RollupInputs(
        platform=RollupCompany("p", "Platform HVAC", revenue=5_000_000,
                               ebitda=1_000_000, entry_multiple=4.5),
        bolt_ons=(
            RollupCompany("b1", "Bolt-on Plumbing", revenue=2_000_000,
                          ebitda=350_000, entry_multiple=3.5, close_year=2),
            RollupCompany("b2", "Bolt-on Electrical", revenue=1_500_000,
                          ebitda=300_000, entry_multiple=3.0, close_year=3),
        ),
    )
    out = calculate_rollup(inputs)

    print_section("ROLL-UP MODEL")
    print_table("Acquisitions", ["Company", "EBITDA", "Multiple", "EV", "Equity"], [
        [a.company, fmt_currency(a.ebitda), fmt_multiple(a.multiple),
         fmt_currency(a.ev), fmt_currency(a.equity)]
        for a in out.acquisitions
    ])
    print_table("Roll-up Returns", ["Metric", "Value"], [
        ["Capital Deployed", fmt_currency(out.total_capital_deployed)],
        ["Equity Invested", fmt_currency(out.total_equity_invested)],
        ["Weighted Entry Multiple", fmt_multiple(out.weighted_entry_multiple)],
        ["Exit EV", fmt_currency(out.exit_ev)],
        ["Organic Growth Value", fmt_currency(out.value_bridge.organic_growth_value)],
        ["Synergy Value", fmt_currency(out.value_bridge.synergy_value)],
        ["Multiple Arbitrage", fmt_currency(out.value_bridge.multiple_expansion_value)],
        ["MOIC", fmt_multiple(out.moic)],
        ["IRR", fmt_pct(out.irr)],
    ])
    return out


def save_charts(inputs, outputs, table, directory=None):
    from deal_valuation.visualization import (
        plot_debt_paydown, plot_projection, plot_sensitivity_heatmap,
    )

    paths = [
        save_figure(plot_sensitivity_heatmap(
            table, title="IRR Sensitivity: Entry vs Exit Multiple",
            x_label="Exit EV/EBITDA Multiple",
            y_label="Entry EV/EBITDA Multiple"),
            "valuation_01_irr_sensitivity", directory),
        save_figure(plot_projection(outputs, exit_year=inputs.exit_year),
                    "valuation_02_projection", directory),
        save_figure(plot_debt_paydown(outputs, inputs),
                    "valuation_03_debt_paydown", directory),
    ]
    for path in paths:
        log.info("Saved %s", path)


# =============================================================================
# Entry point
# =============================================================================

def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Deal Valuation Engine - acquisition returns demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   # Sample deal
  python main.py --ebitda 800000 --entry-multiple 4.5
  python main.py --exit-year 7 --exit-multiple 5   # Longer hold
        """,
    )
    p.add_argument("--revenue", type=float, default=2_500_000.0, help="Target revenue")
    p.add_argument("--ebitda", type=float, default=500_000.0, help="Target EBITDA")
    p.add_argument("--entry-multiple", type=float, default=DEFAULT_INPUTS.entry_multiple)
    p.add_argument("--exit-multiple", type=float, default=DEFAULT_INPUTS.exit_multiple)
    p.add_argument("--exit-year", type=int, default=DEFAULT_INPUTS.exit_year)
    p.add_argument("--output-dir", default=None, help="Directory for charts")
    p.add_argument("--no-charts", action="store_true", help="Skip chart output")
    p.add_argument("--log-level", default=CONFIG.log_level,
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log verbosity")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    log.setLevel(args.log_level)

    inputs = DEFAULT_INPUTS.with_overrides(
        target_revenue=args.revenue,
        target_ebitda=args.ebitda,
        entry_multiple=args.entry_multiple,
        exit_multiple=args.exit_multiple,
        exit_year=args.exit_year,
    )

    log.info("=" * 60)
    log.info("  DEAL VALUATION ENGINE")
    log.info("  Revenue: %s | EBITDA: %s | Entry: %.1fx | Exit: %.1fx in Y%d",
             fmt_currency(inputs.target_revenue), fmt_currency(inputs.target_ebitda),
             inputs.entry_multiple, inputs.exit_multiple, inputs.exit_year)
    log.info("=" * 60)

    outputs = report_valuation(inputs)
    table = report_sensitivity(inputs)
    report_rollup()

    if not args.no_charts:
        save_charts(inputs, outputs, table, args.output_dir)


if __name__ == "__main__":
    main()

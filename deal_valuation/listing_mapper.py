"""
listing_mapper.py
-----------------
Maps a sourced target business (a listing) into model inputs for the
valuation, roll-up and comparison screens.

Centralises the EBITDA fallback chain so every screen resolves the same
figure for the same listing.  The valuation engine itself only consumes the
resolved scalars and is agnostic to how they were derived.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from deal_valuation.models import ValuationInputs
from deal_valuation.rollup import RollupCompany

# Derived entry multiples outside these windows are treated as noise
VALUATION_MULTIPLE_RANGE = (2.0, 8.0)
ROLLUP_MULTIPLE_RANGE = (2.0, 6.0)
DEFAULT_ROLLUP_MULTIPLE = 3.5


@dataclass(frozen=True)
class ListingSummary:
    """Financial fields of a listing as returned by the listings API."""
    id:              str
    business_name:   Optional[str]   = None
    title:           Optional[str]   = None
    revenue:         Optional[float] = None
    ebitda:          Optional[float] = None
    sde:             Optional[float] = None
    cash_flow:       Optional[float] = None
    asking_price:    Optional[float] = None
    inferred_ebitda: Optional[float] = None
    inferred_sde:    Optional[float] = None
    city:            Optional[str]   = None
    state:           Optional[str]   = None
    industry:        Optional[str]   = None

    @property
    def display_name(self) -> str:
        return self.business_name or self.title or "Unnamed"


def _amount(value) -> float:
    """Missing or zero amounts count as absent (0.0)."""
    return float(value) if value else 0.0


# =============================================================================
# EBITDA fallback chain
# =============================================================================
_EBITDA_CHAIN = (
    ("ebitda",          "Reported EBITDA"),
    ("sde",             "Reported SDE"),
    ("inferred_ebitda", "Inferred EBITDA"),
    ("inferred_sde",    "Inferred SDE"),
)


def resolve_ebitda(listing: ListingSummary) -> float:
    """
    Best available EBITDA figure:
    reported EBITDA -> reported SDE -> inferred EBITDA -> inferred SDE -> 0.
    """
    for attr, _ in _EBITDA_CHAIN:
        value = _amount(getattr(listing, attr))
        if value:
            return value
    return 0.0


def ebitda_source_label(listing: ListingSummary) -> str:
    """Which link of the fallback chain supplied the EBITDA figure."""
    for attr, label in _EBITDA_CHAIN:
        if getattr(listing, attr):
            return label
    return "No data"


def resolve_deal_value(deal_value: Optional[float] = None,
                       offer_price: Optional[float] = None,
                       actual_ebitda: Optional[float] = None,
                       listing_ebitda: Optional[float] = None,
                       target_multiple: Optional[float] = None,
                       asking_price: Optional[float] = None) -> Optional[float]:
    """
    Purchase price of a pipeline opportunity, first available tier wins:

        1. explicit deal value
        2. offer price
        3. actual EBITDA x target multiple
        4. listing EBITDA x target multiple
        5. asking price

    Returns None when no tier has data.
    """
    tiers: Sequence[Optional[float]] = (
        deal_value,
        offer_price,
        actual_ebitda * target_multiple
        if actual_ebitda is not None and target_multiple is not None else None,
        listing_ebitda * target_multiple
        if listing_ebitda is not None and target_multiple is not None else None,
        asking_price,
    )
    for value in tiers:
        if value is not None:
            return float(value)
    return None


# =============================================================================
# Mapping
# =============================================================================
def derived_entry_multiple(listing: ListingSummary,
                           ebitda: Optional[float] = None) -> Optional[float]:
    """Asking price / EBITDA rounded to one decimal, or None without both."""
    ebitda = resolve_ebitda(listing) if ebitda is None else ebitda
    asking = _amount(listing.asking_price)
    if asking > 0 and ebitda > 0:
        return round(asking / ebitda, 1)
    return None


def _within(value: Optional[float], bounds) -> bool:
    lo, hi = bounds
    return value is not None and lo <= value <= hi


def map_listing_to_inputs(listing: ListingSummary,
                          defaults: ValuationInputs) -> ValuationInputs:
    """
    Valuation inputs for a listing, layered over `defaults`.

    Revenue, EBITDA and margin come from the listing.  The entry multiple is
    taken from asking price / EBITDA only when that lands in the 2x-8x
    window; otherwise the default multiple is kept.
    """
    revenue = _amount(listing.revenue)
    ebitda = resolve_ebitda(listing)
    multiple = derived_entry_multiple(listing, ebitda)
    return replace(
        defaults,
        target_revenue=revenue,
        target_ebitda=ebitda,
        target_ebitda_margin=ebitda / revenue if revenue > 0 else 0.0,
        entry_multiple=(multiple if _within(multiple, VALUATION_MULTIPLE_RANGE)
                        else defaults.entry_multiple),
    )


def map_listing_to_rollup_company(listing: ListingSummary,
                                  company_id: Optional[str] = None,
                                  entry_multiple: Optional[float] = None,
                                  close_year: int = 1) -> RollupCompany:
    """Platform or bolt-on slot for the roll-up model (2x-6x window)."""
    ebitda = resolve_ebitda(listing)
    multiple = derived_entry_multiple(listing, ebitda)
    if not _within(multiple, ROLLUP_MULTIPLE_RANGE):
        multiple = (entry_multiple if entry_multiple is not None
                    else DEFAULT_ROLLUP_MULTIPLE)
    return RollupCompany(
        id=company_id or listing.id,
        name=listing.display_name,
        revenue=_amount(listing.revenue),
        ebitda=ebitda,
        entry_multiple=multiple,
        close_year=close_year,
    )


def build_comparison_inputs(listing: ListingSummary,
                            standard_defaults: ValuationInputs) -> ValuationInputs:
    """
    Inputs for the side-by-side comparison matrix.

    Every listing is valued on the same standard multiples so the columns are
    comparable; only the financials change.
    """
    revenue = _amount(listing.revenue)
    ebitda = resolve_ebitda(listing)
    return replace(
        standard_defaults,
        target_revenue=revenue,
        target_ebitda=ebitda,
        target_ebitda_margin=ebitda / revenue if revenue > 0 else 0.0,
    )

"""
Display strings for the price tables.

Numbers follow the browser conventions the dashboard has always shown:
``toLocaleString()`` for prices, billions with two decimals for market caps
and two decimals for the 24h change.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from coinwatch.models import AssetDetail, AssetRow, AssetSummary

MISSING = "N/A"
_THOUSANDTHS = Decimal("0.001")


def format_price(value: Optional[float]) -> str:
    """en-US locale style: thousands separators, at most three fraction digits.

    Rounds the shortest decimal form of ``value`` half away from zero, as
    ``Intl.NumberFormat`` does, rather than the underlying binary value.
    """
    if value is None:
        return MISSING
    rounded = Decimal(repr(value)).quantize(_THOUSANDTHS, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_usd(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"${format_price(value)}"


def format_market_cap(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"${value / 1e9:.2f}B"


def format_change(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"{value:.2f}%"


def change_css_class(value: Optional[float]) -> str:
    return "positive" if value is not None and value >= 0 else "negative"


def summary_label(asset: AssetSummary) -> str:
    return f"{asset.name} ({asset.symbol.upper()})"


def detail_header(detail: AssetDetail) -> str:
    return f"{detail.name} {detail.id} ({detail.symbol.upper()})"


def summary_row(asset: AssetSummary) -> AssetRow:
    return AssetRow(
        id=asset.id,
        label=summary_label(asset),
        price=format_usd(asset.current_price),
        market_cap=format_market_cap(asset.market_cap),
        change=format_change(asset.price_change_percentage_24h),
        change_class=change_css_class(asset.price_change_percentage_24h),
    )


def detail_row(detail: AssetDetail) -> AssetRow:
    market = detail.market_data
    return AssetRow(
        id=detail.id,
        label=detail_header(detail),
        price=format_usd(market.current_price_usd),
        market_cap=format_market_cap(market.market_cap_usd),
        change=format_change(market.price_change_percentage_24h),
        change_class=change_css_class(market.price_change_percentage_24h),
    )


def summary_rows(assets: Sequence[AssetSummary]) -> List[AssetRow]:
    return [summary_row(asset) for asset in assets]

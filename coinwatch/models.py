from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AssetSummary(BaseModel):
    """One ranked row of the market snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Provider asset identifier (e.g. 'bitcoin').")
    name: str = Field(..., description="Asset display name.")
    symbol: str = Field(..., description="Ticker symbol as returned by the provider.")
    current_price: Optional[float] = Field(None, description="Last price in USD.")
    market_cap: Optional[float] = Field(None, description="Market capitalization in USD.")
    price_change_percentage_24h: Optional[float] = Field(
        None, description="Signed percentage change over the last 24h."
    )


class MarketData(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_price_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None


class AssetDetail(BaseModel):
    """Full detail record of a resolved search."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    symbol: str
    market_data: MarketData = Field(default_factory=MarketData)


class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp_label: str = Field(..., description="Localized hour:minute of the sample.")
    value: float


class ChartSeries(BaseModel):
    """Chart-ready price series for a single asset."""

    model_config = ConfigDict(frozen=True)

    asset_id: str
    asset_label: str
    points: Tuple[PricePoint, ...] = ()

    @property
    def labels(self) -> List[str]:
        return [p.timestamp_label for p in self.points]

    @property
    def values(self) -> List[float]:
        return [p.value for p in self.points]


class AssetRow(BaseModel):
    """Display strings for one price table row."""

    id: str
    label: str
    price: str
    market_cap: str
    change: str
    change_class: str


class SearchRequest(BaseModel):
    query: str = ""

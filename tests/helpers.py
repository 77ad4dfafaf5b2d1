"""Fakes and fixed data shared by the test modules."""

from __future__ import annotations

import asyncio

from coinwatch.models import AssetDetail, AssetSummary, MarketData


class FakeProvider:
    """In-memory stand-in for the CoinGecko client."""

    name = "fake"

    def __init__(
        self,
        markets: list[AssetSummary] | None = None,
        search_results: dict[str, list[str]] | None = None,
        details: dict[str, AssetDetail] | None = None,
        charts: dict[str, list[tuple[int, float]]] | None = None,
    ) -> None:
        self.markets = markets or []
        self.search_results = search_results or {}
        self.details = details or {}
        self.charts = charts or {}
        self.errors: dict[tuple[str, str], Exception] = {}
        self.chart_gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, object]] = []

    def _maybe_raise(self, method: str, key: str) -> None:
        error = self.errors.get((method, key))
        if error is not None:
            raise error

    async def top_markets(self, limit: int) -> list[AssetSummary]:
        self.calls.append(("top_markets", limit))
        self._maybe_raise("top_markets", "")
        return list(self.markets)[:limit]

    async def search(self, query: str) -> list[str]:
        self.calls.append(("search", query))
        self._maybe_raise("search", query)
        return list(self.search_results.get(query, []))

    async def coin_detail(self, asset_id: str) -> AssetDetail:
        self.calls.append(("coin_detail", asset_id))
        self._maybe_raise("coin_detail", asset_id)
        return self.details[asset_id]

    async def market_chart(self, asset_id: str, days: int) -> list[tuple[int, float]]:
        self.calls.append(("market_chart", asset_id))
        gate = self.chart_gates.get(asset_id)
        if gate is not None:
            await gate.wait()
        self._maybe_raise("market_chart", asset_id)
        return list(self.charts.get(asset_id, []))

    def called(self, method: str) -> list[object]:
        return [arg for name, arg in self.calls if name == method]


def make_summary(asset_id: str, market_cap: float, price: float = 1.0, change: float = 0.0) -> AssetSummary:
    return AssetSummary(
        id=asset_id,
        name=asset_id.title(),
        symbol=asset_id[:3],
        current_price=price,
        market_cap=market_cap,
        price_change_percentage_24h=change,
    )


def make_detail(asset_id: str, name: str, symbol: str, price: float = 1.0) -> AssetDetail:
    return AssetDetail(
        id=asset_id,
        name=name,
        symbol=symbol,
        market_data=MarketData(
            current_price_usd=price,
            market_cap_usd=1_280_000_000_000.0,
            price_change_percentage_24h=-1.234,
        ),
    )


# Fixed "now" for the chart window: 2024-01-01 12:00:00 UTC.
NOW_MS = 1_704_110_400_000
MINUTE_MS = 60_000



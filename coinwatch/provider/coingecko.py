from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Tuple
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from coinwatch.config import settings
from coinwatch.errors import ProviderError, TransportError
from coinwatch.models import AssetDetail, AssetSummary, MarketData

logger = logging.getLogger(__name__)

RawSample = Tuple[int, float]


class MarketDataProvider(Protocol):
    """Read-only market data boundary shared by the three flows."""

    name: str

    async def top_markets(self, limit: int) -> List[AssetSummary]: ...

    async def search(self, query: str) -> List[str]: ...

    async def coin_detail(self, asset_id: str) -> AssetDetail: ...

    async def market_chart(self, asset_id: str, days: int) -> List[RawSample]: ...


def _usd(block: Any) -> Optional[float]:
    if isinstance(block, dict):
        return block.get("usd")
    return None


class CoinGeckoClient:
    """Public CoinGecko v3 API (no API key)."""

    name = "CoinGecko"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        vs_currency: Optional[str] = None,
        request_timeout_seconds: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self.vs_currency = vs_currency or settings.vs_currency
        if client is None:
            timeout = httpx.Timeout(request_timeout_seconds or settings.request_timeout_seconds)
            client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    async def __aenter__(self) -> "CoinGeckoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict, what: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ProviderError(
                f"{what} failed (HTTP {status})",
                status_code=status,
                response_text=exc.response.text,
            ) from exc
        except httpx.DecodingError as exc:
            raise ProviderError(f"{what} failed: undecodable response body ({exc})") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{what} failed: could not reach {self.name} ({exc})") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(
                f"{what} failed: malformed JSON",
                status_code=resp.status_code,
                response_text=resp.text,
            ) from exc

    async def top_markets(self, limit: int) -> List[AssetSummary]:
        params = {
            "vs_currency": self.vs_currency,
            "order": "market_cap_desc",
            "per_page": limit,
            "page": 1,
            "sparkline": "false",
        }
        payload = await self._get_json("/coins/markets", params, "Market snapshot request")
        if not isinstance(payload, list):
            raise ProviderError("Market snapshot request failed: expected a list of assets")

        try:
            records = [
                AssetSummary(
                    id=entry["id"],
                    name=entry.get("name", ""),
                    symbol=entry.get("symbol", ""),
                    current_price=entry.get("current_price"),
                    market_cap=entry.get("market_cap"),
                    price_change_percentage_24h=entry.get("price_change_percentage_24h"),
                )
                for entry in payload
            ]
        except (KeyError, TypeError, AttributeError, PydanticValidationError) as exc:
            raise ProviderError(f"Market snapshot request failed: unexpected asset payload ({exc})") from exc

        logger.info("Fetched %s assets from %s", len(records), self.name)
        return records

    async def search(self, query: str) -> List[str]:
        payload = await self._get_json("/search", {"query": query}, "Search request")
        coins = payload.get("coins") if isinstance(payload, dict) else None
        if not isinstance(coins, list):
            raise ProviderError("Search request failed: response has no 'coins' list")

        ids = [str(coin["id"]) for coin in coins if isinstance(coin, dict) and coin.get("id")]
        logger.info("Search for %r matched %s assets on %s", query, len(ids), self.name)
        return ids

    async def coin_detail(self, asset_id: str) -> AssetDetail:
        params = {
            "localization": "false",
            "tickers": "false",
            "market_data": "true",
            "community_data": "false",
            "developer_data": "false",
            "sparkline": "false",
        }
        payload = await self._get_json(f"/coins/{quote(asset_id, safe='')}", params, "Detail request")
        if not isinstance(payload, dict):
            raise ProviderError("Detail request failed: expected an object")

        market = payload.get("market_data") or {}
        try:
            detail = AssetDetail(
                id=payload["id"],
                name=payload.get("name", ""),
                symbol=payload.get("symbol", ""),
                market_data=MarketData(
                    current_price_usd=_usd(market.get("current_price")),
                    market_cap_usd=_usd(market.get("market_cap")),
                    price_change_percentage_24h=market.get("price_change_percentage_24h"),
                ),
            )
        except (KeyError, AttributeError, PydanticValidationError) as exc:
            raise ProviderError(f"Detail request failed: unexpected payload ({exc})") from exc

        logger.info("Fetched detail for %s from %s", detail.id, self.name)
        return detail

    async def market_chart(self, asset_id: str, days: int) -> List[RawSample]:
        params = {"vs_currency": self.vs_currency, "days": days}
        payload = await self._get_json(
            f"/coins/{quote(asset_id, safe='')}/market_chart", params, "Chart request"
        )
        prices = payload.get("prices") if isinstance(payload, dict) else None
        if not isinstance(prices, list):
            raise ProviderError("Chart request failed: response has no 'prices' list")

        try:
            samples = [(int(ts), float(price)) for ts, price in prices]
        except (TypeError, ValueError) as exc:
            raise ProviderError(f"Chart request failed: malformed price sample ({exc})") from exc

        logger.info("Fetched %s price samples for %s from %s", len(samples), asset_id, self.name)
        return samples


def build_provider() -> CoinGeckoClient:
    """Create a client with default settings."""
    return CoinGeckoClient()

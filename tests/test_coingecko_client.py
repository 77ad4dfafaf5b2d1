import asyncio

import httpx
import pytest

from coinwatch.errors import ProviderError, TransportError
from coinwatch.provider.coingecko import CoinGeckoClient

BASE_URL = "https://api.test/v3"


def run_with(handler, call):
    async def _run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as http:
            client = CoinGeckoClient(client=http, base_url=BASE_URL, vs_currency="usd")
            return await call(client)

    return asyncio.run(_run())


def test_top_markets_sends_snapshot_params_and_maps_rows() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "id": "bitcoin",
                    "name": "Bitcoin",
                    "symbol": "btc",
                    "current_price": 65000.5,
                    "market_cap": 1.28e12,
                    "price_change_percentage_24h": 2.5,
                    "total_volume": 1,
                }
            ],
        )

    assets = run_with(handler, lambda client: client.top_markets(10))

    params = seen[0].url.params
    assert seen[0].url.path == "/v3/coins/markets"
    assert params["vs_currency"] == "usd"
    assert params["order"] == "market_cap_desc"
    assert params["per_page"] == "10"
    assert params["page"] == "1"
    assert params["sparkline"] == "false"
    assert assets[0].id == "bitcoin"
    assert assets[0].current_price == 65000.5
    assert assets[0].price_change_percentage_24h == 2.5


def test_non_success_status_is_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="slow down")

    with pytest.raises(ProviderError) as excinfo:
        run_with(handler, lambda client: client.top_markets(10))

    assert excinfo.value.status_code == 429
    assert excinfo.value.response_text == "slow down"
    assert excinfo.value.kind == "provider"


def test_connection_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        run_with(handler, lambda client: client.search("bitcoin"))


def test_malformed_json_is_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not json</html>")

    with pytest.raises(ProviderError):
        run_with(handler, lambda client: client.search("bitcoin"))


def test_search_returns_ids_in_provider_order() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["query"] == "bit coin"
        return httpx.Response(200, json={"coins": [{"id": "bitcoin"}, {"id": "bitcoin-cash"}], "exchanges": []})

    ids = run_with(handler, lambda client: client.search("bit coin"))

    assert ids == ["bitcoin", "bitcoin-cash"]


def test_search_without_coins_list_is_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "nope"})

    with pytest.raises(ProviderError):
        run_with(handler, lambda client: client.search("bitcoin"))


def test_coin_detail_excludes_heavy_sections_and_reads_usd_market_data() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "id": "bitcoin",
                "name": "Bitcoin",
                "symbol": "btc",
                "market_data": {
                    "current_price": {"usd": 65000.5, "eur": 60000},
                    "market_cap": {"usd": 1.28e12},
                    "price_change_percentage_24h": -1.5,
                },
            },
        )

    detail = run_with(handler, lambda client: client.coin_detail("bitcoin"))

    params = seen[0].url.params
    assert seen[0].url.path == "/v3/coins/bitcoin"
    assert params["localization"] == "false"
    assert params["tickers"] == "false"
    assert params["market_data"] == "true"
    assert params["community_data"] == "false"
    assert params["developer_data"] == "false"
    assert params["sparkline"] == "false"
    assert detail.market_data.current_price_usd == 65000.5
    assert detail.market_data.market_cap_usd == 1.28e12
    assert detail.market_data.price_change_percentage_24h == -1.5


def test_market_chart_returns_samples() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v3/coins/ethereum/market_chart"
        assert request.url.params["days"] == "1"
        return httpx.Response(200, json={"prices": [[1000, 1.5], [2000, 2.5]], "market_caps": []})

    samples = run_with(handler, lambda client: client.market_chart("ethereum", 1))

    assert samples == [(1000, 1.5), (2000, 2.5)]


def test_market_chart_with_broken_sample_is_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"prices": [[1000]]})

    with pytest.raises(ProviderError):
        run_with(handler, lambda client: client.market_chart("ethereum", 1))


def test_corrupt_compressed_body_is_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")

    with pytest.raises(ProviderError):
        run_with(handler, lambda client: client.top_markets(10))


def test_redirect_loop_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

    with pytest.raises(TransportError):
        run_with(handler, lambda client: client.search("bitcoin"))

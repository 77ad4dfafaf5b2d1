import pytest

from tests.helpers import MINUTE_MS, NOW_MS, FakeProvider, make_detail, make_summary


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        markets=[make_summary("bitcoin", 1.2e12), make_summary("ethereum", 4.0e11)],
        search_results={"bitcoin": ["bitcoin", "wrapped-bitcoin"], "eth": ["ethereum"], "nothing": []},
        details={
            "bitcoin": make_detail("bitcoin", "Bitcoin", "btc", price=65000.5),
            "ethereum": make_detail("ethereum", "Ethereum", "eth", price=3200.0),
        },
        charts={
            "bitcoin": [(NOW_MS - 6 * 60 * MINUTE_MS, 64000.0), (NOW_MS - 30 * MINUTE_MS, 65000.0)],
            "ethereum": [(NOW_MS - 10 * MINUTE_MS, 3200.0)],
        },
    )

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from coinwatch.config import settings
from coinwatch.errors import MarketDataError
from coinwatch.flows.state import ErrorPolicy, Flow, FlowState
from coinwatch.models import AssetSummary
from coinwatch.provider.coingecko import MarketDataProvider

logger = logging.getLogger(__name__)


def rank_by_market_cap(assets: Iterable[AssetSummary]) -> List[AssetSummary]:
    """Order assets by descending market cap; ties and missing caps keep provider order."""
    return sorted(
        assets,
        key=lambda asset: asset.market_cap if asset.market_cap is not None else float("-inf"),
        reverse=True,
    )


class MarketSnapshotFetcher(Flow[Tuple[AssetSummary, ...]]):
    """Fetches the ranked top-N asset list once per lifetime."""

    name = "Market snapshot"
    policy = ErrorPolicy.VISIBLE

    def __init__(self, provider: MarketDataProvider, limit: Optional[int] = None) -> None:
        super().__init__()
        self.provider = provider
        self.limit = settings.top_n_assets if limit is None else limit
        self._started = False

    @property
    def assets(self) -> Tuple[AssetSummary, ...]:
        return self.state.data or ()

    async def run(self) -> FlowState[Tuple[AssetSummary, ...]]:
        if self._started:
            logger.debug("Snapshot already requested; not refetching.")
            return self.state
        self._started = True

        self.state = self.state.loading(keep_data=False)
        try:
            assets = await self.provider.top_markets(self.limit)
        except MarketDataError as exc:
            self._fail(exc)
            return self.state

        self.state = self.state.succeeded(tuple(rank_by_market_cap(assets)))
        logger.info("Snapshot ready with %s assets", len(self.assets))
        return self.state

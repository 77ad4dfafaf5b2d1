from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

import pandas as pd

from coinwatch.config import settings
from coinwatch.errors import MarketDataError
from coinwatch.flows.state import ErrorPolicy, Flow
from coinwatch.models import ChartSeries, PricePoint
from coinwatch.provider.coingecko import MarketDataProvider, RawSample

logger = logging.getLogger(__name__)

LABEL_FORMAT = "%H:%M"


class PriceHistoryPhase(str, Enum):
    NO_SELECTION = "no_selection"
    LOADING = "loading"
    RENDERED = "rendered"
    SILENTLY_FAILED = "silently_failed"


def now_ms() -> int:
    return int(time.time() * 1000)


def filter_recent(samples: Iterable[RawSample], current_ms: int, window_ms: int) -> List[RawSample]:
    """Keep samples stamped at or after ``current_ms - window_ms``, in their original order."""
    cutoff = current_ms - window_ms
    return [sample for sample in samples if sample[0] >= cutoff]


def to_price_points(samples: Sequence[RawSample], tz: str) -> List[PricePoint]:
    """Label each sample with its hour:minute in ``tz``."""
    if not samples:
        return []
    df = pd.DataFrame(list(samples), columns=["timestamp_ms", "price"])
    stamps = pd.to_datetime(df["timestamp_ms"], unit="ms", utc=True).dt.tz_convert(tz)
    df["label"] = stamps.dt.strftime(LABEL_FORMAT)
    return [
        PricePoint(timestamp_label=label, value=float(price))
        for label, price in zip(df["label"], df["price"])
    ]


def series_label(asset_id: str) -> str:
    return asset_id[:1].upper() + asset_id[1:]


def build_chart_series(
    asset_id: str,
    samples: Sequence[RawSample],
    current_ms: int,
    window_ms: int,
    tz: str,
) -> ChartSeries:
    recent = filter_recent(samples, current_ms, window_ms)
    return ChartSeries(
        asset_id=asset_id,
        asset_label=series_label(asset_id),
        points=tuple(to_price_points(recent, tz)),
    )


class PriceHistoryTransformer(Flow[ChartSeries]):
    """
    Fetches the 1-day price history of the selected asset and narrows it to
    the recent chart window.

    Each ``run`` is tagged with the asset it was issued for and a generation
    number; a response is applied only if no newer selection (or clear) has
    happened since. Failures are logged and leave the previous series in place.
    """

    name = "Price history"
    policy = ErrorPolicy.LOG_ONLY

    def __init__(
        self,
        provider: MarketDataProvider,
        days: Optional[int] = None,
        window_ms: Optional[int] = None,
        tz: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        super().__init__()
        self.provider = provider
        self.days = settings.chart_days if days is None else days
        self.window_ms = settings.chart_window_ms if window_ms is None else window_ms
        self.tz = tz or settings.display_tz
        self.clock = clock
        self.phase = PriceHistoryPhase.NO_SELECTION
        self.asset_id: Optional[str] = None
        self._generation = 0

    @property
    def series(self) -> Optional[ChartSeries]:
        return self.state.data

    def _is_current(self, asset_id: str, generation: int) -> bool:
        return generation == self._generation and asset_id == self.asset_id

    def abort(self, exc: BaseException) -> None:
        self.phase = PriceHistoryPhase.SILENTLY_FAILED
        super().abort(exc)

    def clear(self) -> None:
        self._generation += 1
        self.asset_id = None
        self.phase = PriceHistoryPhase.NO_SELECTION
        self.state = self.state.reset()

    async def run(self, asset_id: Optional[str]) -> Optional[ChartSeries]:
        if not asset_id:
            self.clear()
            return None

        self._generation += 1
        generation = self._generation
        self.asset_id = asset_id
        self.phase = PriceHistoryPhase.LOADING
        self.state = self.state.loading(keep_data=True)

        try:
            samples = await self.provider.market_chart(asset_id, self.days)
        except asyncio.CancelledError:
            logger.debug("Chart fetch for %s cancelled", asset_id)
            raise
        except MarketDataError as exc:
            if self._is_current(asset_id, generation):
                self.phase = PriceHistoryPhase.SILENTLY_FAILED
                self._fail(exc)
            else:
                logger.debug("Ignoring failure of superseded chart fetch for %s", asset_id)
            return None

        if not self._is_current(asset_id, generation):
            logger.debug("Discarding stale chart response for %s", asset_id)
            return None

        series = build_chart_series(asset_id, samples, self.clock(), self.window_ms, self.tz)
        self.phase = PriceHistoryPhase.RENDERED
        self.state = self.state.succeeded(series)
        logger.info("Chart for %s ready with %s points", asset_id, len(series.points))
        return series

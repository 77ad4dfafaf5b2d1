"""
Composition of the three dashboard flows.

The coordinator owns the only state the flows share: the selected asset
identifier. It is written by list clicks and successful searches and read by
the price history flow.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from coinwatch.flows.history import PriceHistoryPhase, PriceHistoryTransformer
from coinwatch.flows.search import SearchPhase, SearchResolver
from coinwatch.flows.snapshot import MarketSnapshotFetcher
from coinwatch.models import AssetDetail, AssetSummary, ChartSeries
from coinwatch.provider.coingecko import MarketDataProvider

logger = logging.getLogger(__name__)


class PrimaryView(str, Enum):
    SNAPSHOT = "snapshot"
    DETAIL = "detail"


class DashboardView(BaseModel):
    """Read-only picture of the dashboard handed to the presentation layer."""

    search_query: str = ""
    primary_view: PrimaryView = PrimaryView.SNAPSHOT
    selected_asset_id: Optional[str] = None
    assets: List[AssetSummary] = Field(default_factory=list)
    detail: Optional[AssetDetail] = None
    chart: Optional[ChartSeries] = None
    snapshot_loading: bool = False
    search_loading: bool = False
    chart_loading: bool = False
    search_phase: SearchPhase = SearchPhase.IDLE
    chart_phase: PriceHistoryPhase = PriceHistoryPhase.NO_SELECTION
    error_message: Optional[str] = None
    validation_prompt: Optional[str] = None


class DashboardCoordinator:
    """Wires user events to the snapshot, search and price history flows."""

    def __init__(
        self,
        provider: MarketDataProvider,
        snapshot: Optional[MarketSnapshotFetcher] = None,
        search: Optional[SearchResolver] = None,
        history: Optional[PriceHistoryTransformer] = None,
    ) -> None:
        self.provider = provider
        self.snapshot = snapshot or MarketSnapshotFetcher(provider)
        self.search = search or SearchResolver(provider)
        self.history = history or PriceHistoryTransformer(provider)
        self.selected_asset_id: Optional[str] = None
        self._search_task: Optional[asyncio.Task] = None
        self._chart_task: Optional[asyncio.Task] = None

    async def start(self) -> DashboardView:
        try:
            await self.snapshot.run()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Snapshot flow crashed")
            self.snapshot.abort(exc)
        return self.view()

    @staticmethod
    def _task_error(task: asyncio.Task, flow_name: str) -> Optional[BaseException]:
        """Retrieve the outcome of a finished flow task; cancellation is not an error."""
        if task.cancelled():
            return None
        exc = task.exception()
        if exc is not None:
            logger.error("%s flow crashed", flow_name, exc_info=exc)
        return exc

    async def submit_search(self, query: Optional[str]) -> DashboardView:
        """Run a search; a newer submission cancels one still in flight."""
        if self._search_task is not None and not self._search_task.done():
            logger.debug("Cancelling superseded search for %r", self.search.query)
            self._search_task.cancel()
        task = asyncio.create_task(self._run_search(query))
        self._search_task = task
        await asyncio.wait({task})
        exc = self._task_error(task, self.search.name)
        if exc is not None and task is self._search_task:
            self.search.abort(exc)
            await self.select_asset(None)
        return self.view()

    async def _run_search(self, query: Optional[str]) -> None:
        detail = await self.search.submit(query)
        if detail is None:
            await self.select_asset(None)
            return
        await self.select_asset(self.search.resolved_id)

    async def select_asset(self, asset_id: Optional[str]) -> DashboardView:
        """Point the chart at ``asset_id``; re-selecting the same asset refetches."""
        self.selected_asset_id = asset_id or None
        if self._chart_task is not None and not self._chart_task.done():
            self._chart_task.cancel()
            self._chart_task = None

        if self.selected_asset_id is None:
            self.history.clear()
            return self.view()

        task = asyncio.create_task(self.history.run(self.selected_asset_id))
        self._chart_task = task
        await asyncio.wait({task})
        exc = self._task_error(task, self.history.name)
        if exc is not None and task is self._chart_task:
            self.history.abort(exc)
        return self.view()

    async def close(self) -> None:
        pending = [t for t in (self._search_task, self._chart_task) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def view(self) -> DashboardView:
        detail = self.search.detail
        search_error = self.search.visible_error
        snapshot_error = self.snapshot.visible_error

        error_message = None
        if search_error is not None and self.search.validation_prompt is None:
            error_message = search_error.message
        elif snapshot_error is not None:
            error_message = snapshot_error.message

        return DashboardView(
            search_query=self.search.query,
            primary_view=PrimaryView.DETAIL if detail is not None else PrimaryView.SNAPSHOT,
            selected_asset_id=self.selected_asset_id,
            assets=list(self.snapshot.assets),
            detail=detail,
            chart=self.history.series,
            snapshot_loading=self.snapshot.state.is_loading,
            search_loading=self.search.state.is_loading,
            chart_loading=self.history.state.is_loading,
            search_phase=self.search.phase,
            chart_phase=self.history.phase,
            error_message=error_message,
            validation_prompt=self.search.validation_prompt,
        )

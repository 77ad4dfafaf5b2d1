from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coinwatch.config import settings
from coinwatch.flows.coordinator import DashboardCoordinator, DashboardView
from coinwatch.formatting import detail_row, summary_rows
from coinwatch.models import AssetRow, ChartSeries, SearchRequest
from coinwatch.provider.coingecko import build_provider

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

provider = build_provider()
coordinator = DashboardCoordinator(provider)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    view = await coordinator.start()
    logger.info("Dashboard started with %s assets", len(view.assets))
    yield
    await coordinator.close()
    await provider.aclose()


app = FastAPI(
    title="Coinwatch API",
    version="0.1.0",
    description="Market snapshot, asset search and chart-ready price history.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/state", response_model=DashboardView)
async def get_state() -> DashboardView:
    return coordinator.view()


@app.get("/markets", response_model=List[AssetRow])
async def list_markets() -> List[AssetRow]:
    return summary_rows(coordinator.snapshot.assets)


@app.get("/detail", response_model=Optional[AssetRow])
async def get_detail() -> Optional[AssetRow]:
    detail = coordinator.search.detail
    return detail_row(detail) if detail is not None else None


@app.post("/search", response_model=DashboardView)
async def submit_search(request: SearchRequest) -> DashboardView:
    """Resolve the query; on success the chart follows the resolved asset."""
    return await coordinator.submit_search(request.query)


@app.post("/select/{asset_id}", response_model=DashboardView)
async def select_asset(asset_id: str) -> DashboardView:
    return await coordinator.select_asset(asset_id)


@app.get("/chart", response_model=Optional[ChartSeries])
async def get_chart() -> Optional[ChartSeries]:
    return coordinator.history.series

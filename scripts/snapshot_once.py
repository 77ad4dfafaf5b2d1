from __future__ import annotations

import asyncio
import json
import logging

from coinwatch.config import settings
from coinwatch.flows.snapshot import MarketSnapshotFetcher
from coinwatch.formatting import summary_rows
from coinwatch.provider.coingecko import build_provider

logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


async def main() -> int:
    async with build_provider() as provider:
        fetcher = MarketSnapshotFetcher(provider)
        state = await fetcher.run()

    if fetcher.visible_error is not None:
        logger.error("Snapshot failed: %s", fetcher.visible_error.message)
        return 1
    logger.info("Snapshot status: %s", state.status.value)
    print(json.dumps([row.model_dump() for row in summary_rows(fetcher.assets)], indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from coinwatch.config import settings
from coinwatch.flows.coordinator import DashboardCoordinator
from coinwatch.provider.coingecko import build_provider

logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve a search query and print its detail and chart series.")
    parser.add_argument("query", help="Cryptocurrency name or symbol, e.g. 'bitcoin'.")
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    async with build_provider() as provider:
        coordinator = DashboardCoordinator(provider)
        view = await coordinator.submit_search(args.query)
        await coordinator.close()

    message = view.validation_prompt or view.error_message
    if message:
        logger.error("Search failed: %s", message)
        return 1
    print(json.dumps(view.model_dump(include={"detail", "chart"}, mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from coinwatch.errors import MarketDataError, NotFoundError, ValidationError
from coinwatch.flows.state import ErrorPolicy, Flow
from coinwatch.models import AssetDetail
from coinwatch.provider.coingecko import MarketDataProvider

logger = logging.getLogger(__name__)

VALIDATION_PROMPT = "Please enter a cryptocurrency's name"


class SearchPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    DETAIL_FETCHING = "detail_fetching"
    SUCCESS = "success"
    ERROR = "error"


class SearchResolver(Flow[AssetDetail]):
    """
    Resolves free text to a single asset and fetches its detail record.

    The detail fetch only starts once the resolve step has answered. Every
    failure (blank query included) clears the detail record; the caller is
    expected to clear the selected asset as well.
    """

    name = "Search"
    policy = ErrorPolicy.VISIBLE

    def __init__(self, provider: MarketDataProvider) -> None:
        super().__init__()
        self.provider = provider
        self.phase = SearchPhase.IDLE
        self.query = ""
        self.resolved_id: Optional[str] = None

    @property
    def detail(self) -> Optional[AssetDetail]:
        return self.state.data

    @property
    def validation_prompt(self) -> Optional[str]:
        error = self.state.error
        if error is not None and error.kind == ValidationError.kind:
            return error.message
        return None

    def abort(self, exc: BaseException) -> None:
        self.resolved_id = None
        self.phase = SearchPhase.ERROR
        super().abort(exc)

    async def submit(self, query: Optional[str]) -> Optional[AssetDetail]:
        """Run validate -> resolve -> detail fetch. Returns the detail, or None on failure."""
        self.query = query or ""
        self.phase = SearchPhase.VALIDATING
        text = self.query.strip()
        try:
            if not text:
                raise ValidationError(VALIDATION_PROMPT)

            self.state = self.state.loading(keep_data=True)
            self.phase = SearchPhase.RESOLVING
            matches = await self.provider.search(text)
            if not matches:
                raise NotFoundError(text)

            asset_id = matches[0]
            self.phase = SearchPhase.DETAIL_FETCHING
            detail = await self.provider.coin_detail(asset_id)
        except MarketDataError as exc:
            self.resolved_id = None
            self.phase = SearchPhase.ERROR
            self._fail(exc)
            return None

        self.resolved_id = asset_id
        self.phase = SearchPhase.SUCCESS
        self.state = self.state.succeeded(detail)
        logger.info("Search %r resolved to %s", text, asset_id)
        return detail

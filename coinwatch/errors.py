"""Failure taxonomy shared by the provider client and the flows."""

from __future__ import annotations

from typing import Optional


class MarketDataError(Exception):
    """Base class; ``kind`` tags the failure for the flow state."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MarketDataError):
    """Blank or otherwise unusable user input, rejected before any request."""

    kind = "validation"


class TransportError(MarketDataError):
    """No response was received from the provider."""

    kind = "transport"


class ProviderError(MarketDataError):
    """Non-success status, malformed JSON or an unexpected payload shape."""

    kind = "provider"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class NotFoundError(MarketDataError):
    """A search returned zero matching assets."""

    kind = "not_found"

    def __init__(self, query: str) -> None:
        super().__init__(f"No cryptocurrency matches '{query}'")
        self.query = query

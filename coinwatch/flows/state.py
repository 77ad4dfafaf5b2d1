"""
Per-flow state container.

Each flow owns one immutable ``FlowState`` and replaces it on every
transition. ``ErrorPolicy`` decides whether a failure is shown to the user
(and the owned data reset) or only logged (and the owned data kept).
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from coinwatch.errors import MarketDataError

DataT = TypeVar("DataT")


class FlowStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ErrorPolicy(str, Enum):
    VISIBLE = "visible"
    LOG_ONLY = "log_only"


class FlowError(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: MarketDataError) -> "FlowError":
        return cls(kind=exc.kind, message=exc.message)


class FlowState(BaseModel, Generic[DataT]):
    model_config = ConfigDict(frozen=True)

    status: FlowStatus = FlowStatus.IDLE
    data: Optional[DataT] = None
    error: Optional[FlowError] = None

    @property
    def is_loading(self) -> bool:
        return self.status is FlowStatus.LOADING

    def loading(self, keep_data: bool = True) -> "FlowState[DataT]":
        return self.model_copy(
            update={
                "status": FlowStatus.LOADING,
                "data": self.data if keep_data else None,
                "error": None,
            }
        )

    def succeeded(self, data: DataT) -> "FlowState[DataT]":
        return self.model_copy(update={"status": FlowStatus.SUCCESS, "data": data, "error": None})

    def failed(self, error: FlowError, keep_data: bool = False) -> "FlowState[DataT]":
        return self.model_copy(
            update={
                "status": FlowStatus.ERROR,
                "data": self.data if keep_data else None,
                "error": error,
            }
        )

    def reset(self) -> "FlowState[DataT]":
        return self.model_copy(update={"status": FlowStatus.IDLE, "data": None, "error": None})


class Flow(Generic[DataT]):
    """Base for the dashboard flows: holds the state and applies the error policy."""

    name = "flow"
    policy = ErrorPolicy.VISIBLE

    def __init__(self) -> None:
        self.state: FlowState[DataT] = FlowState()
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def visible_error(self) -> Optional[FlowError]:
        if self.policy is ErrorPolicy.VISIBLE:
            return self.state.error
        return None

    def abort(self, exc: BaseException) -> None:
        """Settle the flow after an exception outside the failure taxonomy."""
        self._fail(MarketDataError(f"{self.name} failed unexpectedly: {exc}"))

    def _fail(self, exc: MarketDataError) -> None:
        error = FlowError.from_exception(exc)
        if self.policy is ErrorPolicy.LOG_ONLY:
            self._logger.warning("%s failed (not shown): %s", self.name, exc.message)
            self.state = self.state.failed(error, keep_data=True)
        else:
            self._logger.warning("%s failed: %s", self.name, exc.message)
            self.state = self.state.failed(error, keep_data=False)

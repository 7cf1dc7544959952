"""
Lifecycle wrapper for one orchestrator call: IDLE -> IN_FLIGHT -> SUCCEEDED | FAILED.

Cancelling never aborts the call. It only marks the eventual outcome as
unwanted, so the result (or error) is dropped when it arrives.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Generic, Optional, TypeVar

from src.app.domain.models import RequestState
from src.services.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TrackedRequest(Generic[T]):
    def __init__(self, label: str = "request") -> None:
        self.label = label
        self.state = RequestState.IDLE
        self.result: Optional[T] = None
        self.error: Optional[ServiceError] = None
        self.cancelled = False

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def cancel(self) -> None:
        self.cancelled = True

    async def run(self, operation: Awaitable[T]) -> Optional[T]:
        """
        Await the operation and record its outcome.

        Returns:
            The result, or None when the request was cancelled meanwhile

        Raises:
            ServiceError: The operation's error, unless the request was cancelled
        """
        if self.state is not RequestState.IDLE:
            if hasattr(operation, "close"):
                operation.close()
            raise RuntimeError(f"{self.label} already started ({self.state.value})")

        self.state = RequestState.IN_FLIGHT
        try:
            value = await operation
        except ServiceError as err:
            self.state = RequestState.FAILED
            if self.cancelled:
                logger.debug("Dropping error from cancelled %s: %s", self.label, err)
                return None
            self.error = err
            raise
        except Exception:
            self.state = RequestState.FAILED
            raise

        self.state = RequestState.SUCCEEDED
        if self.cancelled:
            logger.debug("Dropping result from cancelled %s", self.label)
            return None
        self.result = value
        return value

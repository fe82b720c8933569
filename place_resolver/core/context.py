"""Per-request timeout, deadline and cancellation state."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, MutableMapping, Optional, Tuple

from place_resolver.core.errors import ResolutionCancelled


class RequestLogger(logging.LoggerAdapter):
    """Prefix every line with the request id so concurrent resolutions stay readable."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['request_id']}] {msg}", kwargs


class RequestContext:
    """Carries the caller's deadline and cancel flag through every external call.

    Each call asks for ``timeout()``, which is the per-call timeout capped by the
    time left before the deadline. An expired deadline or a set cancel event
    raises ``ResolutionCancelled`` so the pipeline stops before the next stage.
    """

    def __init__(
        self,
        *,
        call_timeout: float = 10.0,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        logger: Optional[logging.Logger] = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.call_timeout = call_timeout
        self.deadline = deadline
        self.cancel_event = cancel_event
        self.request_id = request_id or uuid.uuid4().hex[:8]
        self.log = RequestLogger(logger or logging.getLogger("place_resolver"), {"request_id": self.request_id})

    @classmethod
    def with_budget(cls, seconds: float, **kwargs: Any) -> "RequestContext":
        return cls(deadline=time.monotonic() + seconds, **kwargs)

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ResolutionCancelled("The request was cancelled.")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise ResolutionCancelled("The request deadline passed before resolution finished.")

    def timeout(self) -> float:
        self.check()
        remaining = self.remaining()
        if remaining is None:
            return self.call_timeout
        return min(self.call_timeout, remaining)

import logging
import threading

import pytest

from place_resolver.core.context import RequestContext
from place_resolver.core.errors import ResolutionCancelled


def test_timeout_without_deadline_is_call_timeout():
    assert RequestContext(call_timeout=7).timeout() == 7


def test_timeout_is_capped_by_remaining_budget():
    context = RequestContext.with_budget(2.0, call_timeout=10)

    assert 0 < context.timeout() <= 2.0


def test_expired_deadline_cancels():
    context = RequestContext.with_budget(-1.0)

    with pytest.raises(ResolutionCancelled):
        context.check()
    with pytest.raises(ResolutionCancelled):
        context.timeout()


def test_cancel_event_cancels():
    event = threading.Event()
    context = RequestContext(cancel_event=event)
    context.check()

    event.set()

    with pytest.raises(ResolutionCancelled, match="cancelled"):
        context.check()


def test_log_lines_carry_request_id(caplog):
    context = RequestContext(request_id="abc123", logger=logging.getLogger("place_resolver.test"))

    with caplog.at_level(logging.INFO, logger="place_resolver.test"):
        context.log.info("resolving %s", "x")

    assert "[abc123] resolving x" in caplog.text

import pytest
import requests

from place_resolver.core import url_normalizer
from place_resolver.core.context import RequestContext
from place_resolver.core.errors import UnsupportedUrlError, UrlExpansionError


class DummyResponse:
    def __init__(self, headers=None):
        self.headers = headers or {}


class DummySession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def head(self, url, allow_redirects=True, headers=None, timeout=None):
        self.calls.append({"url": url, "allow_redirects": allow_redirects, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def context():
    return RequestContext(call_timeout=5)


def test_short_link_is_expanded_without_following(context):
    target = "https://www.google.com/maps/place/Sample+Cafe/@35.6762,139.6503,17z"
    session = DummySession(DummyResponse({"Location": target}))

    url = url_normalizer.normalize_url("  https://maps.app.goo.gl/abc123 ", session, context=context)

    assert url == target
    assert session.calls == [{"url": "https://maps.app.goo.gl/abc123", "allow_redirects": False, "timeout": 5}]


def test_full_url_is_only_decoded(context):
    session = DummySession()

    url = url_normalizer.normalize_url(
        "https://www.google.com/maps/place/%E6%97%A5%E6%9C%AC%E4%B8%80/@34.8,134.6", session, context=context
    )

    assert url == "https://www.google.com/maps/place/日本一/@34.8,134.6"
    assert session.calls == []


def test_missing_location_header_fails(context):
    session = DummySession(DummyResponse({}))

    with pytest.raises(UrlExpansionError, match="no redirect location"):
        url_normalizer.normalize_url("https://maps.app.goo.gl/abc123", session, context=context)


def test_transport_error_fails_expansion(context):
    session = DummySession(exc=requests.ConnectionError("boom"))

    with pytest.raises(UrlExpansionError):
        url_normalizer.expand_short_link("https://goo.gl/maps/abc", session, context=context)


def test_custom_short_link_prefix(context):
    session = DummySession(DummyResponse({"Location": "https://www.google.com/maps/place/X"}))

    url = url_normalizer.normalize_url(
        "https://short.example/x", session, context=context, short_link_prefixes=("https://short.example/",)
    )

    assert url == "https://www.google.com/maps/place/X"


def test_unwrap_redirect_follows_wrapped_target():
    wrapped = "https://consent.google.com/ml?continue=https://www.google.com/maps/place/X&gl=JP"

    assert url_normalizer.unwrap_redirect(wrapped) == "https://www.google.com/maps/place/X"
    assert url_normalizer.unwrap_redirect("https://www.google.com/maps/place/X?q=https://a") is None
    assert url_normalizer.unwrap_redirect("https://www.google.com/maps?q=cafe") is None


def test_ensure_supported():
    assert url_normalizer.ensure_supported(" https://maps.app.goo.gl/abc ") == "https://maps.app.goo.gl/abc"
    assert url_normalizer.ensure_supported("https://www.google.com/maps/place/X")

    with pytest.raises(UnsupportedUrlError):
        url_normalizer.ensure_supported("https://example.com/maps/place/X")
    with pytest.raises(UnsupportedUrlError):
        url_normalizer.ensure_supported("")


def test_expand_url_keeps_percent_escapes(context):
    target = "https://www.google.com/maps/place/Why%3F+Not+Cafe/@35.6,139.6"
    session = DummySession(DummyResponse({"Location": target}))

    assert url_normalizer.expand_url("https://maps.app.goo.gl/abc", session, context=context) == target
    assert url_normalizer.normalize_url(target, session, context=context) == (
        "https://www.google.com/maps/place/Why?+Not+Cafe/@35.6,139.6"
    )

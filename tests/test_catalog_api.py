import pytest

from place_resolver.vendors import catalog_api


class DummyResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class DummySession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.response


def test_create_store_success():
    session = DummySession(DummyResponse(201, {"data": {"id": "store-1", "name": "Sample Cafe"}}))

    store = catalog_api.create_store(session, "https://catalog.example", "secret", {"name": "Sample Cafe"})

    assert store == {"id": "store-1", "name": "Sample Cafe"}
    call = session.calls[0]
    assert call["url"] == "https://catalog.example/api/v1/stores"
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["json"] == {"name": "Sample Cafe"}


def test_duplicate_is_reported_with_details():
    session = DummySession(
        DummyResponse(409, {"error": {"code": "DUPLICATE_STORE", "details": "Sample Cafe exists within 50m"}})
    )

    with pytest.raises(catalog_api.DuplicatePlaceError, match="within 50m"):
        catalog_api.create_store(session, "https://catalog.example", "", {"name": "Sample Cafe"})
    assert "Authorization" not in session.calls[0]["headers"]


def test_other_status_is_catalog_error():
    session = DummySession(DummyResponse(500, {"error": {"message": "boom"}}))

    with pytest.raises(catalog_api.CatalogApiError) as excinfo:
        catalog_api.create_store(session, "https://catalog.example", "secret", {"name": "x"})
    assert not isinstance(excinfo.value, catalog_api.DuplicatePlaceError)


def test_missing_base_url_fails_fast():
    with pytest.raises(catalog_api.CatalogApiError):
        catalog_api.create_store(DummySession(None), "", "secret", {})

import json

import pytest

from place_resolver.core.config import Settings
from place_resolver.core.errors import NoConfidentMatchError, UnsupportedUrlError
from place_resolver.etl.hours import default_schedule
from place_resolver.jobs import resolve_url
from place_resolver.models import CanonicalPlace, Coordinates

SETTINGS = Settings(google_maps_api_key="key", catalog_api_url="https://catalog.example", catalog_api_token="secret")
PLACE = CanonicalPlace(
    name="Sample Cafe",
    address="東京都渋谷区",
    coordinates=Coordinates(35.6762, 139.6503),
    business_hours=default_schedule(),
    source_url="https://maps.app.goo.gl/abc",
    place_id="ChIJcafe",
)


def test_run_resolve_job_without_submit(monkeypatch):
    seen = {}

    def fake_resolve(url, *, settings, budget_seconds):
        seen["url"] = url
        seen["budget"] = budget_seconds
        return PLACE

    monkeypatch.setattr(resolve_url, "resolve_place", fake_resolve)

    result = resolve_url.run_resolve_job(url=" https://maps.app.goo.gl/abc ", budget_seconds=30, settings=SETTINGS)

    assert seen == {"url": "https://maps.app.goo.gl/abc", "budget": 30}
    assert result == {"place": PLACE.to_dict()}


def test_run_resolve_job_submits_catalog_payload(monkeypatch):
    monkeypatch.setattr(resolve_url, "resolve_place", lambda url, **kwargs: PLACE)
    submitted = {}

    def fake_create_store(session, base_url, token, payload):
        submitted.update(base_url=base_url, token=token, payload=payload)
        return {"id": "store-1"}

    monkeypatch.setattr(resolve_url.catalog_api, "create_store", fake_create_store)

    result = resolve_url.run_resolve_job(url="https://maps.app.goo.gl/abc", submit=True, settings=SETTINGS)

    assert result["store"] == {"id": "store-1"}
    assert submitted["base_url"] == "https://catalog.example"
    assert submitted["token"] == "secret"
    assert submitted["payload"]["tags"] == ["discord"]
    assert submitted["payload"]["google_map_url"] == "https://maps.app.goo.gl/abc"


def test_run_resolve_job_rejects_unsupported_url():
    with pytest.raises(UnsupportedUrlError):
        resolve_url.run_resolve_job(url="https://example.com/place", settings=SETTINGS)


def test_main_prints_json(monkeypatch, capsys):
    monkeypatch.setattr(resolve_url, "get_settings", lambda: SETTINGS)
    monkeypatch.setattr(resolve_url, "run_resolve_job", lambda **kwargs: {"place": {"name": "日本一のだがし売場"}})

    resolve_url.main(["https://maps.app.goo.gl/abc"])

    assert json.loads(capsys.readouterr().out) == {"place": {"name": "日本一のだがし売場"}}


def test_main_exits_non_zero_on_resolution_error(monkeypatch):
    monkeypatch.setattr(resolve_url, "get_settings", lambda: SETTINGS)
    def fail(**kwargs):
        raise NoConfidentMatchError("No nearby place matches")

    monkeypatch.setattr(resolve_url, "run_resolve_job", fail)

    with pytest.raises(SystemExit) as excinfo:
        resolve_url.main(["https://maps.app.goo.gl/abc"])
    assert excinfo.value.code == 1


def test_build_parser():
    args = resolve_url.build_parser().parse_args(["https://maps.app.goo.gl/abc", "--submit", "--budget", "45"])

    assert args.url == "https://maps.app.goo.gl/abc"
    assert args.submit is True
    assert args.budget_seconds == 45.0


def test_main_exits_with_config_error_without_api_key(monkeypatch):
    monkeypatch.setattr(resolve_url, "get_settings", lambda: Settings(google_maps_api_key=""))

    with pytest.raises(SystemExit) as excinfo:
        resolve_url.main(["https://maps.app.goo.gl/abc"])
    assert excinfo.value.code == 2

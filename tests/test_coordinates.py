import pytest
from bs4 import BeautifulSoup

from place_resolver.core import coordinates, page_scan
from place_resolver.core.context import RequestContext
from place_resolver.models import Coordinates, PlaceDetails


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://maps.example/maps/place/Sample+Cafe/@35.6762,139.6503", Coordinates(35.6762, 139.6503)),
        (
            "https://www.google.com/maps/place/X/@35.0,139.0,17z/data=!3m1!4b1!4m5!3m4!8m2!3d35.1234!4d139.5678",
            Coordinates(35.1234, 139.5678),
        ),
        ("https://maps.google.com/maps?ll=34.5,135.5&z=15", Coordinates(34.5, 135.5)),
        ("https://maps.google.com/maps?center=-33.86,151.2", Coordinates(-33.86, 151.2)),
        ("https://www.google.com/maps?q=35.1,139.2", Coordinates(35.1, 139.2)),
        ("https://www.google.com/maps/place/Sample+Cafe", None),
        ("https://www.google.com/maps/@95.0,139.0,17z", None),
    ],
)
def test_coordinates_from_url(url, expected):
    assert coordinates.coordinates_from_url(url) == expected


def test_extractor_prefers_url_over_details():
    calls = []

    def lookup(place_id):
        calls.append(place_id)
        return PlaceDetails(place_id=place_id, coordinates=Coordinates(1.0, 2.0))

    extractor = coordinates.CoordinateExtractor(lookup)
    result = extractor.extract("https://maps.example/maps/place/A/@35.0,139.0", place_id="ChIJabc")

    assert result == Coordinates(35.0, 139.0)
    assert calls == []


def test_extractor_uses_details_when_place_id_known():
    extractor = coordinates.CoordinateExtractor(
        lambda place_id: PlaceDetails(place_id=place_id, coordinates=Coordinates(1.0, 2.0))
    )

    assert extractor.extract("https://www.google.com/maps/place/A", place_id="ChIJabc") == Coordinates(1.0, 2.0)


def test_extractor_scans_page_last():
    soup = BeautifulSoup('<html><script>var cfg = {"lat":35.5,"lng":139.7};</script></html>', "html.parser")
    extractor = coordinates.CoordinateExtractor()

    assert extractor.extract("https://www.google.com/maps/place/A", page=soup) == Coordinates(35.5, 139.7)
    assert extractor.extract("https://www.google.com/maps/place/A") is None


@pytest.mark.parametrize(
    "html, expected",
    [
        ("<script>window.x = [null,null,35.25,139.75];</script>", Coordinates(35.25, 139.75)),
        ("<script>init({lat: 34.1, lng: 135.2})</script>", Coordinates(34.1, 135.2)),
        ('<div>{"latitude": 43.06, "longitude": 141.35}</div>', Coordinates(43.06, 141.35)),
        ("<p>nothing here</p>", None),
    ],
)
def test_scan_coordinates(html, expected):
    assert page_scan.scan_coordinates(BeautifulSoup(html, "html.parser")) == expected


def test_scan_place_id_prefers_data_attribute_and_ignores_short_ids():
    soup = BeautifulSoup(
        '<div data-place-id="ChIJN1t_tDeuEmsRUsoyG83frY4"></div><script>{"place_id":"short"}</script>',
        "html.parser",
    )
    assert page_scan.scan_place_id(soup) == "ChIJN1t_tDeuEmsRUsoyG83frY4"

    soup = BeautifulSoup('<script>{"place_id":"short"}</script>', "html.parser")
    assert page_scan.scan_place_id(soup) is None
    assert page_scan.scan_place_id(None) is None


class DummyResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class DummySession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, headers=None, timeout=None, allow_redirects=True):
        self.calls.append((url, timeout))
        return self.response


def test_fetch_page_returns_soup_or_none():
    context = RequestContext(call_timeout=5)
    soup = page_scan.fetch_page(DummySession(DummyResponse(text="<p>hi</p>")), "https://x", context=context)
    assert soup.find("p").get_text() == "hi"

    assert page_scan.fetch_page(DummySession(DummyResponse(status_code=404)), "https://x", context=context) is None

"""Pull a best-effort place name out of a map URL path."""

import logging
import re
from typing import List
from urllib.parse import unquote_plus, urlparse

from place_resolver.models import ResolvedName

logger = logging.getLogger(__name__)

MIN_PLAUSIBLE_RATIO = 0.3

_PLACE_SEGMENT = re.compile(r"/place/([^/]+)")
_COORDINATE_FRAGMENT = re.compile(r"@-?\d+\.\d+,-?\d+\.\d+")
_DATA_ATTRIBUTE = re.compile(r'data-[^=]*="[^"]*"')
_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")
_POSTAL_CODE = re.compile(r"〒|\b\d{3}-\d{4}\b|[0-9０-９]{3}[-−－ー][0-9０-９]{4}")
_NUMERIC_TOKEN = re.compile(r"^[0-9０-９\-−－ー‐,，、.]+$")

ADMIN_SUFFIXES = ("丁目", "番地", "都", "道", "府", "県", "市", "区", "町", "村", "郡", "番", "号", "条")
ADMIN_MARKERS = ("都", "道", "府", "県", "市", "区", "町", "村", "丁目", "番地")
INVALID_PATTERNS = ("<", ">", "null", "{", "}", "[", "]", "data-", "aria-", "class=", "id=")


def extract_name(url: str) -> ResolvedName:
    """Return the candidate name after ``/place/``; empty when nothing plausible is found.

    ``url`` must still be percent-encoded: the segment is cut from the raw path
    and decoded exactly once, so encoded ``?``, ``#`` and ``+`` survive.
    """
    segment = place_segment(url)
    if not segment:
        return ResolvedName()

    has_postal_code = bool(_POSTAL_CODE.search(segment))
    name = split_address_and_name(segment) or segment
    valid = is_valid_name(name)
    if not valid:
        logger.debug("Rejected name candidate %r from segment %r", name, segment)
    return ResolvedName(
        name=name if valid else "",
        raw_segment=segment,
        is_valid=valid,
        has_postal_code=has_postal_code,
    )


def place_segment(url: str) -> str:
    match = _PLACE_SEGMENT.search(urlparse(url).path or "")
    if not match:
        return ""
    raw = match.group(1).split("@", 1)[0]
    return clean_name(unquote_plus(raw))


def clean_name(name: str) -> str:
    name = _COORDINATE_FRAGMENT.sub("", name)
    name = _DATA_ATTRIBUTE.sub("", name)
    name = _HTML_TAG.sub("", name)
    return _WHITESPACE.sub(" ", name).strip()


def is_address_token(token: str) -> bool:
    if _POSTAL_CODE.search(token) or _NUMERIC_TOKEN.match(token):
        return True
    if token.endswith(ADMIN_SUFFIXES):
        return True
    return any(marker in token for marker in ADMIN_MARKERS) and token[-1].isdigit()


def split_address_and_name(segment: str) -> str:
    """Keep the trailing run of tokens after the last address-like token.

    Mobile share links glue the postal address in front of the business
    name (``"〒150-0001 東京都渋谷区神宮前１丁目２−３ Sample Cafe"``).
    """
    tokens = segment.split()
    trailing: List[str] = []
    for token in reversed(tokens):
        if is_address_token(token):
            break
        trailing.append(token)
    return " ".join(reversed(trailing))


def is_valid_name(name: str) -> bool:
    if not name:
        return False
    lowered = name.lower()
    if any(pattern in lowered for pattern in INVALID_PATTERNS):
        return False
    plausible = sum(1 for char in name if _is_name_char(char))
    return plausible / len(name) >= MIN_PLAUSIBLE_RATIO


def _is_name_char(char: str) -> bool:
    return (
        ("a" <= char <= "z")
        or ("A" <= char <= "Z")
        or ("぀" <= char <= "ゟ")
        or ("゠" <= char <= "ヿ")
        or ("一" <= char <= "龯")
    )

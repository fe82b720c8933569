"""Client for the store catalog REST API that persists resolved places."""

import logging
from typing import Any, Dict, Optional

import requests

from place_resolver.core.errors import ResolutionError

logger = logging.getLogger(__name__)
REQUEST_TIMEOUT = 30


class CatalogApiError(ResolutionError):
    """Raised when the catalog refuses or fails a store creation."""


class DuplicatePlaceError(CatalogApiError):
    """Raised when the catalog already holds a store with the same name nearby."""


def create_store(
    session: requests.Session,
    base_url: str,
    token: str,
    payload: Dict[str, Any],
    *,
    timeout: float = REQUEST_TIMEOUT,
) -> Dict[str, Any]:
    """POST a store to the catalog and return the created record.

    The catalog owns duplicate detection (same name within ~50m) and answers
    409; that is final and never retried here.
    """
    if not base_url:
        raise CatalogApiError("CATALOG_API_URL is required to submit places")

    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = session.post(f"{base_url}/api/v1/stores", json=payload, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Failed to call catalog API: %s", exc)
        raise CatalogApiError(f"Catalog request failed: {exc}") from exc

    if response.status_code == 409:
        details = _error_details(response)
        logger.info("Catalog rejected %s as duplicate: %s", payload.get("name"), details)
        raise DuplicatePlaceError(f"Duplicate store found: {details or 'this store is already registered'}")

    if response.status_code != 201:
        logger.error("Catalog API returned status %s: %s", response.status_code, response.text[:500])
        raise CatalogApiError(f"Store creation failed with status {response.status_code}")

    try:
        body = response.json()
    except ValueError as exc:
        raise CatalogApiError("Catalog API returned a non-JSON body") from exc
    return body.get("data") or body


def _error_details(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return None
    return error.get("details") or error.get("message")

"""HTTP entrypoint the chat bot calls to resolve and register places."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Tuple

import requests
from flask import Flask, jsonify, request

from place_resolver.core.config import get_settings
from place_resolver.core.errors import ResolutionCancelled, ResolutionError, UnsupportedUrlError
from place_resolver.core.url_normalizer import ensure_supported
from place_resolver.etl.transform import to_catalog_payload
from place_resolver.pipeline import resolve_place
from place_resolver.vendors import catalog_api

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

REQUEST_BUDGET_SECONDS = 60.0

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "worker_port_config": settings.worker_port,
                "places_configured": bool(settings.google_maps_api_key),
                "catalog_configured": bool(settings.catalog_api_url),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/resolve")
def resolve() -> Any:
    """
    Resolve a map URL into a canonical place.
    Required JSON fields: url
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    url = payload.get("url")
    if not url:
        return jsonify({"error": {"code": "BadRequest", "message": "url is required"}}), 400

    try:
        settings = get_settings()
        url = ensure_supported(str(url), settings.short_link_prefixes)
        place = resolve_place(url, settings=settings, budget_seconds=REQUEST_BUDGET_SECONDS)
    except ResolutionError as exc:
        return _error_response(exc)

    return jsonify({"data": place.to_dict()}), 200


@app.post("/places")
def register_place() -> Any:
    """
    Resolve a map URL and create the store in the catalog.
    Required JSON fields: url
    Optional: token (bearer token of the requesting user; defaults to CATALOG_API_TOKEN)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    url = payload.get("url")
    if not url:
        return jsonify({"error": {"code": "BadRequest", "message": "url is required"}}), 400

    settings = get_settings()
    token = payload.get("token") or settings.catalog_api_token
    try:
        url = ensure_supported(str(url), settings.short_link_prefixes)
        place = resolve_place(url, settings=settings, budget_seconds=REQUEST_BUDGET_SECONDS)
        with requests.Session() as session:
            store = catalog_api.create_store(
                session,
                settings.catalog_api_url,
                token,
                to_catalog_payload(place, source_tag=settings.catalog_source_tag),
            )
    except ResolutionError as exc:
        return _error_response(exc)

    logger.info("Store registered: %s", place.name)
    return jsonify({"data": {"place": place.to_dict(), "store": store}}), 201


# ---------- Internals ----------


def _status_for(exc: ResolutionError) -> int:
    if isinstance(exc, UnsupportedUrlError):
        return 400
    if isinstance(exc, catalog_api.DuplicatePlaceError):
        return 409
    if isinstance(exc, catalog_api.CatalogApiError):
        return 502
    if isinstance(exc, ResolutionCancelled):
        return 504
    return 422


def _error_response(exc: ResolutionError) -> Tuple[Any, int]:
    status = _status_for(exc)
    logger.warning("Request failed with %s (%s): %s", exc.code, status, exc)
    return jsonify({"error": {"code": exc.code, "message": str(exc)}}), status


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()

"""CLI job that resolves a map URL and optionally submits it to the catalog."""

import argparse
import json
import logging
from typing import Any, Dict, Optional

import requests

from place_resolver.core.config import Settings, get_settings
from place_resolver.core.errors import ResolutionError
from place_resolver.core.url_normalizer import ensure_supported
from place_resolver.etl.transform import to_catalog_payload
from place_resolver.pipeline import resolve_place
from place_resolver.vendors import catalog_api

logger = logging.getLogger(__name__)


def run_resolve_job(
    *,
    url: str,
    submit: bool = False,
    budget_seconds: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    settings = settings or get_settings()
    url = ensure_supported(url, settings.short_link_prefixes)

    logger.info("Resolving %s", url)
    place = resolve_place(url, settings=settings, budget_seconds=budget_seconds)
    result: Dict[str, Any] = {"place": place.to_dict()}

    if submit:
        payload = to_catalog_payload(place, source_tag=settings.catalog_source_tag)
        with requests.Session() as session:
            result["store"] = catalog_api.create_store(
                session,
                settings.catalog_api_url,
                settings.catalog_api_token,
                payload,
            )
        logger.info("Submitted %r to the catalog", place.name)
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve a Google Maps URL into a canonical place record")
    parser.add_argument("url", help="Google Maps place URL or shortened share link")
    parser.add_argument("--submit", action="store_true", help="Create the store in the catalog after resolving")
    parser.add_argument(
        "--budget",
        dest="budget_seconds",
        type=float,
        default=None,
        help="Overall time budget in seconds for the whole resolution",
    )
    return parser


def main(argv: Optional[list] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if not settings.google_maps_api_key:
        logger.error("GOOGLE_MAPS_API_KEY must be set to resolve places")
        raise SystemExit(2)
    if args.submit and not settings.catalog_api_url:
        logger.error("CATALOG_API_URL must be set to submit places")
        raise SystemExit(2)

    try:
        result = run_resolve_job(
            url=args.url,
            submit=args.submit,
            budget_seconds=args.budget_seconds,
            settings=settings,
        )
    except ResolutionError as exc:
        logger.error("%s: %s", exc.code, exc)
        raise SystemExit(1) from exc

    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()

"""Command line entrypoint for running a Yelp business search."""

from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional, Sequence

import requests

from .client import YelpAPIError, build_search_params, search
from .config import ConfigError, default_locale_options
from .nullable import Nullable
from .options import (
    BoundOptions,
    CoordinateOptions,
    GeneralOptions,
    LocaleOptions,
    LocationOptions,
    SearchOptions,
    SortMode,
    ValidationError,
)

logger = logging.getLogger(__name__)

_SORT_CHOICES = {mode.name.lower(): mode for mode in SortMode}


def _parse_floats(raw: str, count: int, flag: str) -> List[float]:
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != count:
        raise argparse.ArgumentTypeError(f"{flag} expects {count} comma separated numbers, got {raw!r}")
    try:
        return [float(part) for part in parts]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{flag} expects numbers, got {raw!r}") from exc


def build_options(args: argparse.Namespace) -> SearchOptions:
    """Translate parsed CLI arguments into SearchOptions."""
    general = GeneralOptions(
        term=args.term,
        limit=Nullable.from_optional(args.limit),
        offset=Nullable.from_optional(args.offset),
        sort=Nullable.from_optional(_SORT_CHOICES[args.sort] if args.sort else None),
        radius_filter=Nullable.from_optional(args.radius),
        deals_filter=Nullable.of(True) if args.deals else Nullable.empty(),
    )

    if args.cc and args.lang:
        locale: Optional[LocaleOptions] = LocaleOptions(cc=args.cc, lang=args.lang)
    else:
        locale = default_locale_options()

    options = SearchOptions(general_options=general, locale_options=locale)
    if args.location:
        options.location_options = LocationOptions(location=args.location)
    if args.ll:
        lat, lng = _parse_floats(args.ll, 2, "--ll")
        options.coordinate_options = CoordinateOptions(latitude=Nullable.of(lat), longitude=Nullable.of(lng))
    if args.bounds:
        sw_lat, sw_lng, ne_lat, ne_lng = _parse_floats(args.bounds, 4, "--bounds")
        options.bound_options = BoundOptions(
            sw_latitude=sw_lat,
            sw_longitude=sw_lng,
            ne_latitude=ne_lat,
            ne_longitude=ne_lng,
        )
    return options


def _parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search Yelp for local businesses.")
    parser.add_argument("term", help="Search term, e.g. 'coffee'")
    parser.add_argument("--location", help="Named location, e.g. 'San Francisco, CA'")
    parser.add_argument("--ll", help="Coordinate in the form 'lat,lng' (e.g. '37.9,-122.5')")
    parser.add_argument("--bounds", help="Bounding box in the form 'sw_lat,sw_lng,ne_lat,ne_lng'")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--offset", type=int, default=None)
    parser.add_argument("--sort", choices=sorted(_SORT_CHOICES), default=None)
    parser.add_argument("--radius", type=float, default=None, help="Search radius in meters")
    parser.add_argument("--deals", action="store_true", help="Only return businesses with deals")
    parser.add_argument("--cc", help="ISO 3166-1 alpha-2 country code used to localize results")
    parser.add_argument("--lang", help="ISO 639 language code used to localize results")
    parser.add_argument("--dry-run", action="store_true", help="Print the query parameters and exit")
    args = parser.parse_args(argv)
    if bool(args.cc) != bool(args.lang):
        parser.error("--cc and --lang must be given together")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = _parse_cli_args(argv)

    try:
        options = build_options(args)
        if args.dry_run:
            print(json.dumps(build_search_params(options), indent=2, sort_keys=True))
            return 0
        payload = search(options)
    except (ValidationError, argparse.ArgumentTypeError) as exc:
        logger.error("Invalid search options: %s", exc)
        return 2
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except (YelpAPIError, requests.RequestException) as exc:
        logger.error("Yelp search failed: %s", exc)
        return 1

    for business in payload.get("businesses", []):
        print(f"{business.get('name', '?')}\t{business.get('rating', '')}\t{business.get('url', '')}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

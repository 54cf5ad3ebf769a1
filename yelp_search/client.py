"""Client utilities for the Yelp business search API."""

import logging
import math
from typing import Any, Dict, Optional

import requests

from .config import ConfigError, get_settings
from .options import SearchOptions, SortMode

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

MAX_RADIUS_METERS = 40000
_EARTH_RADIUS_METERS = 6371008.8

_SORT_BY = {
    str(SortMode.BEST_MATCHED.value): "best_match",
    str(SortMode.DISTANCE.value): "distance",
    str(SortMode.HIGHEST_RATED.value): "rating",
}
_RENAMED = {"radius_filter": "radius", "category_filter": "categories"}
_UNSUPPORTED = ("accuracy", "altitude", "altitude_accuracy")


class YelpAPIError(RuntimeError):
    """Raised when the search API returns an error payload."""


def _haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * _EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def _bounds_to_circle(bounds: str) -> Dict[str, str]:
    """The endpoint has no bounding box filter; search the circle around the box instead."""
    sw, ne = bounds.split("|")
    sw_lat, sw_lng = (float(part) for part in sw.split(","))
    ne_lat, ne_lng = (float(part) for part in ne.split(","))
    center_lat = (sw_lat + ne_lat) / 2
    center_lng = (sw_lng + ne_lng) / 2
    radius = min(int(math.ceil(_haversine_meters(center_lat, center_lng, ne_lat, ne_lng))), MAX_RADIUS_METERS)
    return {"latitude": str(center_lat), "longitude": str(center_lng), "radius": str(radius)}


def to_fusion_params(params: Dict[str, str]) -> Dict[str, str]:
    """Translate option-group parameters into the keys the v3 search endpoint accepts.

    ``cc``/``lang`` become ``locale``, ``sort`` becomes ``sort_by``, a deals
    filter becomes ``attributes=deals``, the ``cll`` hint becomes latitude and
    longitude next to the location, and ``bounds`` becomes a centre point with
    a radius covering the box (capped at the API maximum).
    """
    translated: Dict[str, str] = {}
    for key, value in params.items():
        if key in ("cc", "lang"):
            continue
        if key == "sort":
            translated["sort_by"] = _SORT_BY[value]
        elif key == "deals_filter":
            if value == "true":
                translated["attributes"] = "deals"
        elif key == "radius_filter":
            translated["radius"] = str(min(int(float(value)), MAX_RADIUS_METERS))
        elif key == "cll":
            lat, lng = value.split(",")
            translated["latitude"] = lat
            translated["longitude"] = lng
        elif key == "bounds":
            circle = _bounds_to_circle(value)
            logger.info("Searching bounds %s as a circle of radius %sm", value, circle["radius"])
            translated.update(circle)
        elif key in _UNSUPPORTED:
            logger.warning("Search endpoint does not accept %s; dropping it", key)
        else:
            translated[_RENAMED.get(key, key)] = value

    if "cc" in params and "lang" in params:
        translated["locale"] = f"{params['lang'].lower()}_{params['cc'].upper()}"
    return translated


def build_search_params(options: SearchOptions) -> Dict[str, str]:
    """Validate ``options`` and return the query-string parameters sent to the API."""
    return to_fusion_params(options.get_parameters())


def search(options: SearchOptions, api_key: Optional[str] = None) -> Dict[str, Any]:
    """Run a business search and return the decoded JSON payload.

    Options are validated before anything goes over the wire, so an invalid
    request never reaches the API.
    """
    params = build_search_params(options)

    settings = get_settings()
    api_key = api_key or settings.api_key
    if not api_key:
        raise ConfigError("YELP_API_KEY is required to call the search API")

    headers = {"Authorization": f"Bearer {api_key}", "Accept": "application/json"}
    logger.info("Calling Yelp search with strategy=%s params=%s", options.location_strategy, sorted(params))
    response = _SESSION.get(settings.search_url, params=params, headers=headers, timeout=settings.timeout)
    response.raise_for_status()
    payload = response.json()

    error = payload.get("error")
    if error:
        message = error.get("description") if isinstance(error, dict) else error
        logger.error("search failed: error=%s", error)
        raise YelpAPIError(message or "unknown error")

    logger.info("Search returned %s businesses", len(payload.get("businesses", [])))
    return payload

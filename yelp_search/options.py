"""Search option groups and the aggregator that turns them into query parameters.

A search is described by a handful of independent option groups. General and
locale options are optional; exactly one location strategy (a named location,
a coordinate, or a bounding box) must be supplied. Every group knows how to
produce its own flat parameter contribution, and ``SearchOptions`` merges the
contributions into the query string sent to the search endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .nullable import Nullable

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when search options cannot be turned into request parameters."""


class NoLocationStrategyError(ValidationError):
    """None of the location, coordinate or bound options were supplied."""

    def __init__(self) -> None:
        super().__init__("no location strategy provided")


class AmbiguousLocationStrategyError(ValidationError):
    """More than one location strategy was supplied; their names are kept on ``strategies``."""

    def __init__(self, strategies: List[str]) -> None:
        self.strategies = list(strategies)
        super().__init__("multiple mutually exclusive location strategies provided")


class GroupSerializationError(ValidationError):
    """An option group could not produce its parameter contribution."""

    def __init__(self, group: str, field_name: str, message: str) -> None:
        self.group = group
        self.field = field_name
        super().__init__(f"{group}.{field_name}: {message}")


class SortMode(IntEnum):
    BEST_MATCHED = 0
    DISTANCE = 1
    HIGHEST_RATED = 2


_INT: Tuple[type, ...] = (int,)
_NUMBER: Tuple[type, ...] = (int, float)
_TEXT: Tuple[type, ...] = (str,)
_BOOL: Tuple[type, ...] = (bool,)
_SORT: Tuple[type, ...] = (SortMode,)


def _check_type(group: str, field_name: str, value: Any, expected: Tuple[type, ...]) -> None:
    # bool is an int subclass, so it only matches fields that ask for it
    if isinstance(value, bool) and bool not in expected:
        matches = False
    else:
        matches = isinstance(value, expected)
    if not matches:
        wanted = " or ".join(kind.__name__ for kind in expected)
        raise GroupSerializationError(group, field_name, f"expected {wanted}, got {value!r}")


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _nullable_value(group: str, key: str, value: Any, expected: Tuple[type, ...]) -> Optional[str]:
    """Formatted value of a Nullable field, or None when it is absent."""
    if not isinstance(value, Nullable):
        raise GroupSerializationError(group, key, f"expected a Nullable, got {type(value).__name__}")
    if not value.valid:
        return None
    _check_type(group, key, value.value, expected)
    return _format_scalar(value.value)


def _put_nullable(params: Dict[str, str], group: str, key: str, value: Any, expected: Tuple[type, ...]) -> None:
    formatted = _nullable_value(group, key, value, expected)
    if formatted is not None:
        params[key] = formatted


def _require(group: str, field_name: str, value: Any, expected: Tuple[type, ...]) -> str:
    _check_type(group, field_name, value, expected)
    return _format_scalar(value)


class OptionGroup:
    """A self-contained set of search parameters."""

    __slots__ = ()

    def get_parameters(self) -> Dict[str, str]:
        raise NotImplementedError


@dataclass(slots=True)
class GeneralOptions(OptionGroup):
    """Search term and result filters."""

    term: str
    limit: Nullable[int] = field(default_factory=Nullable.empty)
    offset: Nullable[int] = field(default_factory=Nullable.empty)
    sort: Nullable[SortMode] = field(default_factory=Nullable.empty)
    category_filter: Nullable[str] = field(default_factory=Nullable.empty)
    radius_filter: Nullable[float] = field(default_factory=Nullable.empty)
    deals_filter: Nullable[bool] = field(default_factory=Nullable.empty)

    def get_parameters(self) -> Dict[str, str]:
        params = {"term": _require("GeneralOptions", "term", self.term, _TEXT)}
        _put_nullable(params, "GeneralOptions", "limit", self.limit, _INT)
        _put_nullable(params, "GeneralOptions", "offset", self.offset, _INT)
        _put_nullable(params, "GeneralOptions", "sort", self.sort, _SORT)
        _put_nullable(params, "GeneralOptions", "category_filter", self.category_filter, _TEXT)
        _put_nullable(params, "GeneralOptions", "radius_filter", self.radius_filter, _NUMBER)
        _put_nullable(params, "GeneralOptions", "deals_filter", self.deals_filter, _BOOL)
        return params


@dataclass(slots=True)
class LocaleOptions(OptionGroup):
    """Country code and language used to localize results."""

    cc: str
    lang: str

    def get_parameters(self) -> Dict[str, str]:
        return {
            "cc": _require("LocaleOptions", "cc", self.cc, _TEXT),
            "lang": _require("LocaleOptions", "lang", self.lang, _TEXT),
        }


@dataclass(slots=True)
class CoordinateOptions(OptionGroup):
    """Search around a latitude/longitude. Missing fields are left out of the request."""

    latitude: Nullable[float] = field(default_factory=Nullable.empty)
    longitude: Nullable[float] = field(default_factory=Nullable.empty)
    accuracy: Nullable[float] = field(default_factory=Nullable.empty)
    altitude: Nullable[float] = field(default_factory=Nullable.empty)
    altitude_accuracy: Nullable[float] = field(default_factory=Nullable.empty)

    def get_parameters(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        _put_nullable(params, "CoordinateOptions", "latitude", self.latitude, _NUMBER)
        _put_nullable(params, "CoordinateOptions", "longitude", self.longitude, _NUMBER)
        _put_nullable(params, "CoordinateOptions", "accuracy", self.accuracy, _NUMBER)
        _put_nullable(params, "CoordinateOptions", "altitude", self.altitude, _NUMBER)
        _put_nullable(params, "CoordinateOptions", "altitude_accuracy", self.altitude_accuracy, _NUMBER)
        return params


@dataclass(slots=True)
class LocationOptions(OptionGroup):
    """Search a named location (address, neighborhood, city, ...).

    ``coordinates`` is an optional hint used to disambiguate the location; it
    is sent as ``cll`` only when both latitude and longitude are present.
    """

    location: str
    coordinates: Optional[CoordinateOptions] = None

    def get_parameters(self) -> Dict[str, str]:
        params = {"location": _require("LocationOptions", "location", self.location, _TEXT)}
        hint = self.coordinates
        if hint is None:
            return params
        if not isinstance(hint, CoordinateOptions):
            raise GroupSerializationError(
                "LocationOptions", "coordinates", f"expected CoordinateOptions, got {type(hint).__name__}"
            )
        lat = _nullable_value("LocationOptions", "coordinates.latitude", hint.latitude, _NUMBER)
        lng = _nullable_value("LocationOptions", "coordinates.longitude", hint.longitude, _NUMBER)
        if lat is not None and lng is not None:
            params["cll"] = f"{lat},{lng}"
        return params


@dataclass(slots=True)
class BoundOptions(OptionGroup):
    """Search inside a bounding box given by its south-west and north-east corners."""

    sw_latitude: float
    sw_longitude: float
    ne_latitude: float
    ne_longitude: float

    def get_parameters(self) -> Dict[str, str]:
        sw_lat = _require("BoundOptions", "sw_latitude", self.sw_latitude, _NUMBER)
        sw_lng = _require("BoundOptions", "sw_longitude", self.sw_longitude, _NUMBER)
        ne_lat = _require("BoundOptions", "ne_latitude", self.ne_latitude, _NUMBER)
        ne_lng = _require("BoundOptions", "ne_longitude", self.ne_longitude, _NUMBER)
        return {"bounds": f"{sw_lat},{sw_lng}|{ne_lat},{ne_lng}"}


_LOCATION_GROUPS = ("location_options", "coordinate_options", "bound_options")


@dataclass(slots=True)
class SearchOptions:
    """Top level search request.

    Any combination of groups may be set, but only one of ``location_options``,
    ``coordinate_options`` or ``bound_options`` can be used at a time.
    """

    general_options: Optional[GeneralOptions] = None
    locale_options: Optional[LocaleOptions] = None
    location_options: Optional[LocationOptions] = None
    coordinate_options: Optional[CoordinateOptions] = None
    bound_options: Optional[BoundOptions] = None

    def groups(self) -> Iterator[Tuple[str, OptionGroup]]:
        """Yield the populated groups in declaration order."""
        ordered: List[Tuple[str, Optional[OptionGroup]]] = [
            ("general_options", self.general_options),
            ("locale_options", self.locale_options),
            ("location_options", self.location_options),
            ("coordinate_options", self.coordinate_options),
            ("bound_options", self.bound_options),
        ]
        for name, group in ordered:
            if group is not None:
                yield name, group

    @property
    def location_strategy(self) -> Optional[str]:
        """Name of the single location group in use, or None when zero or several are set."""
        present = self._location_strategies()
        return present[0] if len(present) == 1 else None

    def _location_strategies(self) -> List[str]:
        return [name for name in _LOCATION_GROUPS if getattr(self, name) is not None]

    def validate(self) -> None:
        present = self._location_strategies()
        if not present:
            raise NoLocationStrategyError()
        if len(present) > 1:
            raise AmbiguousLocationStrategyError(present)

    def get_parameters(self) -> Dict[str, str]:
        """Build the flat query-string parameters for every populated group."""
        self.validate()

        params: Dict[str, str] = {}
        for name, group in self.groups():
            contribution = group.get_parameters()
            for key, value in contribution.items():
                if key in params:
                    logger.warning("Parameter %s from %s overrides an earlier group's value", key, name)
                params[key] = value

        logger.debug("Built %s search parameters using %s", len(params), self.location_strategy)
        return params

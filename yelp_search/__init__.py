"""Yelp business search client."""

from .nullable import Nullable
from .options import (
    AmbiguousLocationStrategyError,
    BoundOptions,
    CoordinateOptions,
    GeneralOptions,
    GroupSerializationError,
    LocaleOptions,
    LocationOptions,
    NoLocationStrategyError,
    OptionGroup,
    SearchOptions,
    SortMode,
    ValidationError,
)

__all__ = [
    "AmbiguousLocationStrategyError",
    "BoundOptions",
    "CoordinateOptions",
    "GeneralOptions",
    "GroupSerializationError",
    "LocaleOptions",
    "LocationOptions",
    "NoLocationStrategyError",
    "Nullable",
    "OptionGroup",
    "SearchOptions",
    "SortMode",
    "ValidationError",
]

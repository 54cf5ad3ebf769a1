"""Nullable scalar used for optional search fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True, eq=False)
class Nullable(Generic[T]):
    """A value that is either present or absent.

    Presence follows the value: ``Nullable(37.9)`` is present and
    ``Nullable()`` is absent. Option groups omit absent fields from the query
    string entirely; present fields are emitted under their key.
    """

    value: Optional[T] = None
    valid: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "valid", self.value is not None)

    @classmethod
    def of(cls, value: T) -> "Nullable[T]":
        if value is None:
            raise ValueError("Nullable.of() requires a value; use Nullable.empty() instead.")
        return cls(value)

    @classmethod
    def empty(cls) -> "Nullable[T]":
        return cls()

    @classmethod
    def from_optional(cls, value: Optional[T]) -> "Nullable[T]":
        return cls(value)

    def get(self) -> T:
        if not self.valid:
            raise ValueError("Nullable value is absent.")
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        return self.value if self.valid else default  # type: ignore[return-value]

    def __bool__(self) -> bool:
        return self.valid

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Nullable):
            return NotImplemented
        if not self.valid or not other.valid:
            return self.valid == other.valid
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((self.valid, self.value))

    def __repr__(self) -> str:
        if not self.valid:
            return "Nullable.empty()"
        return f"Nullable.of({self.value!r})"

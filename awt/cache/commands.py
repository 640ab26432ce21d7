"""Commands that drive a result cache."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Load:
    """Replace the result set with a fresh backend result."""

    query: str
    records: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class TurnPage:
    """Show another page (clamped into range)."""

    page: int


@dataclass(frozen=True)
class Create:
    """Add a record the backend confirmed it created."""

    record: Any


@dataclass(frozen=True)
class Update:
    """Replace or patch a record the backend confirmed it updated."""

    record_id: str
    patch: Mapping[str, Any] | Any


@dataclass(frozen=True)
class Delete:
    """Remove a record the backend confirmed it deleted."""

    record_id: str


Command = Load | TurnPage | Create | Update | Delete

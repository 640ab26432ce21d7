"""Client-side result cache with local pagination.

A ``ResultCache`` holds the complete result set of one search (one cache
epoch) and serves page slices from it without going back to the backend.
Mutations confirmed by the backend are applied locally so the visible page
always reflects the latest known write.
"""

import dataclasses
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from awt.cache.commands import Command, Create, Delete, Load, TurnPage, Update
from awt.core.constants import PaginationConstants
from awt.exceptions import CacheError, DuplicateRecordError, RecordNotFoundError, ValidationError
from awt.models.cache import PageView

logger = logging.getLogger(__name__)

T = TypeVar("T")


def record_id(record: Any) -> str:
    """Get the identifier of a model, dataclass, object or mapping record."""
    if isinstance(record, Mapping):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)

    if value is None:
        raise ValidationError("id", record, "Record has no 'id' field")
    return str(value)


def merge_record(record: T, patch: Mapping[str, Any] | T) -> T:
    """Apply a patch to a record without mutating it.

    A mapping patch is merged field by field; any other value replaces the
    record as a whole.
    """
    if not isinstance(patch, Mapping):
        return patch

    if isinstance(record, BaseModel):
        return type(record).model_validate({**record.model_dump(), **patch})  # type: ignore[return-value]
    if isinstance(record, Mapping):
        return {**record, **patch}  # type: ignore[return-value]
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.replace(record, **patch)  # type: ignore[return-value]

    raise CacheError(f"Cannot patch record of type {type(record).__name__}")


class ResultCache(Generic[T]):
    """Full result set of one query, paginated locally."""

    def __init__(
        self,
        page_size: int = PaginationConstants.DEFAULT_PAGE_SIZE,
        key: Callable[[T], str] = record_id,
    ) -> None:
        """Initialize an empty cache.

        Args:
            page_size: Records per page, fixed for the cache's lifetime
            key: Function returning a record's unique identifier

        Raises:
            ValidationError: If page_size is not positive
        """
        if page_size < 1:
            raise ValidationError("page_size", page_size, "Page size must be a positive integer")

        self.page_size = int(page_size)
        self.key = key
        self.query = ""
        self.current_page = 1
        self._records: list[T] = []

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return (
            f"ResultCache(query={self.query!r}, total={self.total_count}, "
            f"page={self.current_page}/{self.page_count})"
        )

    @property
    def records(self) -> list[T]:
        """Copy of the full result set in server order."""
        return list(self._records)

    @property
    def total_count(self) -> int:
        return len(self._records)

    @property
    def page_count(self) -> int:
        """Number of pages; an empty result set still has one (empty) page."""
        return max(1, math.ceil(len(self._records) / self.page_size))

    @property
    def visible(self) -> list[T]:
        """Records on the current page."""
        return self._slice(self.current_page)

    def _slice(self, page: int) -> list[T]:
        start = (page - 1) * self.page_size
        return self._records[start : start + self.page_size]

    def _clamp(self, page: int) -> int:
        return min(max(1, page), self.page_count)

    def _index_of(self, record_id: str) -> int | None:
        for index, record in enumerate(self._records):
            if self.key(record) == record_id:
                return index
        return None

    def contains(self, record_id: str) -> bool:
        return self._index_of(str(record_id)) is not None

    def get(self, record_id: str) -> T | None:
        """Get a cached record by id."""
        index = self._index_of(str(record_id))
        return self._records[index] if index is not None else None

    def load(self, query: str, records: Iterable[T]) -> list[T]:
        """Start a new epoch with a full backend result and show page 1.

        Records repeating an id already in the set are dropped, keeping the
        first occurrence, so every id addresses exactly one record.

        Args:
            query: The query the records answer
            records: Complete result set in server order (may be empty)

        Returns:
            The first page
        """
        received = list(records)
        unique: dict[str, T] = {}
        for record in received:
            unique.setdefault(self.key(record), record)
        if len(unique) != len(received):
            logger.warning(f"Dropped {len(received) - len(unique)} records with repeated ids for {query!r}")

        self.query = query
        self._records = list(unique.values())
        self.current_page = 1
        logger.debug(f"Loaded {len(self._records)} records for {query!r} ({self.page_count} pages)")
        return self.visible

    def get_page(self, page: int) -> list[T]:
        """Show a page, clamping the number into ``[1, page_count]``.

        Args:
            page: Requested page number (1-based)

        Returns:
            The records on the resulting current page
        """
        self.current_page = self._clamp(page)
        return self.visible

    def apply_create(self, record: T) -> None:
        """Append a record created on the backend.

        Raises:
            DuplicateRecordError: If a record with the same id is cached
        """
        new_id = self.key(record)
        if self._index_of(new_id) is not None:
            raise DuplicateRecordError(new_id)

        self._records.append(record)
        logger.debug(f"Added record {new_id} (total {len(self._records)})")

    def apply_update(self, record_id: str, patch: Mapping[str, Any] | T) -> T:
        """Replace a record in place, keeping its position.

        Args:
            record_id: Id of the record to update
            patch: Field updates or a full replacement record

        Returns:
            The updated record

        Raises:
            RecordNotFoundError: If no cached record has this id
            ValidationError: If the patch would change the record id
        """
        record_id = str(record_id)
        index = self._index_of(record_id)
        if index is None:
            raise RecordNotFoundError(record_id)

        updated = merge_record(self._records[index], patch)
        if self.key(updated) != record_id:
            raise ValidationError("id", self.key(updated), f"Update may not change the id of record '{record_id}'")

        self._records[index] = updated
        logger.debug(f"Updated record {record_id} at position {index}")
        return updated

    def apply_delete(self, record_id: str) -> T:
        """Remove a record and keep the current page pointing at existing data.

        Returns:
            The removed record

        Raises:
            RecordNotFoundError: If no cached record has this id
        """
        record_id = str(record_id)
        index = self._index_of(record_id)
        if index is None:
            raise RecordNotFoundError(record_id)

        removed = self._records.pop(index)
        previous_page = self.current_page
        self.current_page = self._clamp(self.current_page)
        if self.current_page != previous_page:
            logger.debug(f"Page {previous_page} emptied, moved back to page {self.current_page}")
        return removed

    def view(self) -> PageView:
        """Snapshot of the current page for the presentation layer."""
        return PageView(
            records=self.visible,
            query=self.query,
            page=self.current_page,
            page_size=self.page_size,
            total_count=self.total_count,
            total_pages=self.page_count,
        )

    def dispatch(self, command: Command) -> PageView:
        """Apply one command and return the resulting view."""
        if isinstance(command, Load):
            self.load(command.query, command.records)
        elif isinstance(command, TurnPage):
            self.get_page(command.page)
        elif isinstance(command, Create):
            self.apply_create(command.record)
        elif isinstance(command, Update):
            self.apply_update(command.record_id, command.patch)
        elif isinstance(command, Delete):
            self.apply_delete(command.record_id)
        else:
            raise CacheError(f"Unknown command: {command!r}")
        return self.view()

    def subset(self, records: Sequence[T], query: str | None = None) -> "ResultCache[T]":
        """Open a new epoch over some of this cache's records, with the same page size."""
        derived: ResultCache[T] = ResultCache(self.page_size, self.key)
        derived.load(self.query if query is None else query, records)
        return derived


def replay(
    commands: Iterable[Command],
    page_size: int = PaginationConstants.DEFAULT_PAGE_SIZE,
    key: Callable[[Any], str] = record_id,
) -> ResultCache[Any]:
    """Fold a command stream into a fresh cache."""
    cache: ResultCache[Any] = ResultCache(page_size, key)
    for command in commands:
        cache.dispatch(command)
    return cache

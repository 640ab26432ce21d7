"""Local fuzzy search and date filtering over cached records."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any, TypeVar

import dateparser
from rapidfuzz import fuzz, process

from awt.core.constants import FilterConstants
from awt.exceptions import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SEARCH_FIELDS = ("id", "mlbu", "sku", "company", "type")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _naive(value: datetime) -> datetime:
    """Drop timezone info after converting to local time, so bounds compare cleanly."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_date_bound(value: str, field: str) -> datetime:
    """Parse a human-friendly date such as ``2024-01-01`` or ``1 week ago``.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    parsed = dateparser.parse(value)
    if parsed is None:
        raise ValidationError(field, value, f"Invalid date for {field}: {value}")
    return _naive(parsed)


class RecordSearcher:
    """Filter a cached result set without going back to the backend."""

    def __init__(
        self,
        fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
        date_field: str = "updated_at",
    ) -> None:
        self.fields = tuple(fields)
        self.date_field = date_field

    def filter(
        self,
        records: Sequence[T],
        text: str | None = None,
        updated_after: str | None = None,
        updated_before: str | None = None,
        threshold: int = FilterConstants.FUZZY_THRESHOLD,
    ) -> list[T]:
        """Combined date filtering and fuzzy text search in one pass.

        Matching records keep their original order so the result can be
        paginated like the full set.

        Args:
            records: Cached records
            text: Optional fuzzy search text
            updated_after: Optional lower date bound
            updated_before: Optional upper date bound
            threshold: Minimum score for fuzzy matches (0-100)

        Returns:
            Matching records
        """
        matched = list(records)

        if updated_after or updated_before:
            matched = self._filter_by_date(matched, updated_after, updated_before)

        if text and text.strip():
            matched = self._fuzzy_search(matched, text.strip(), threshold)

        return matched

    def _filter_by_date(self, records: list[T], after_str: str | None, before_str: str | None) -> list[T]:
        after_dt = parse_date_bound(after_str, "updated_after") if after_str else None
        before_dt = parse_date_bound(before_str, "updated_before") if before_str else None

        filtered = []
        for record in records:
            value = _field(record, self.date_field)
            if isinstance(value, str):
                value = dateparser.parse(value)
            if not isinstance(value, datetime):
                continue

            record_dt = _naive(value)
            if after_dt and record_dt < after_dt:
                continue
            if before_dt and record_dt > before_dt:
                continue
            filtered.append(record)

        return filtered

    def search_text(self, record: Any) -> str:
        """Lowercased text a record is matched against."""
        values = (_field(record, name) for name in self.fields)
        return " ".join(str(value) for value in values if value).lower()

    def _fuzzy_search(self, records: list[T], query: str, threshold: int) -> list[T]:
        index = {position: self.search_text(record) for position, record in enumerate(records)}

        # partial_ratio finds the query as a fuzzy substring of the record text
        matches = process.extract(
            query.lower(),
            index,
            scorer=fuzz.partial_ratio,
            score_cutoff=threshold,
            limit=None,
        )

        positions = sorted(position for _text, _score, position in matches)
        logger.debug(f"Fuzzy filter {query!r} matched {len(positions)} of {len(records)} records")
        return [records[position] for position in positions]

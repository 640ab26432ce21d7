"""Result cache data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageView(BaseModel):
    """The visible slice of a result cache plus pagination info."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    records: list[Any] = Field(default_factory=list)
    query: str = ""
    page: int = 1
    page_size: int
    total_count: int = 0
    total_pages: int = 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def first_index(self) -> int:
        """1-based position of the first visible record (0 when empty)."""
        if not self.records:
            return 0
        return (self.page - 1) * self.page_size + 1

"""Statistics and status tracking models."""

from pydantic import BaseModel

from awt.core.classifier import SearchMode


class SearchCommandStats(BaseModel):
    """Statistics for search command execution."""

    start_time: float
    query: str
    mode: SearchMode | None = None
    records_found: int = 0
    filtered_count: int | None = None

    def summary(self) -> str:
        mode = self.mode.value if self.mode else "auto"
        text = f"Found {self.records_found} records by {mode}"
        if self.filtered_count is not None:
            text += f", {self.filtered_count} after filtering"
        return text


class JobWaitStats(BaseModel):
    """Status checks made while waiting for a job's log bundle."""

    checks: int = 0
    failed_checks: int = 0
    delivered: bool = False

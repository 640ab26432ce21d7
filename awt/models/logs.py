"""Job log and XML integration models."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from awt.core.constants import DefaultLogValues, LogSeverity


class LogEvent(BaseModel):
    """A single status event emitted by a backend job."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    level: LogSeverity = LogSeverity.INFO
    step: str = DefaultLogValues.STEP.value
    message: str = DefaultLogValues.MESSAGE.value
    process_id: str | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime:
        """Parse RFC 3339 strings, falling back to now for missing values."""
        if isinstance(v, datetime):
            return v
        if isinstance(v, str) and v:
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                pass
        return datetime.now(UTC)

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> LogSeverity:
        """Unknown or missing levels are reported as info."""
        try:
            return LogSeverity(str(v).lower())
        except ValueError:
            return LogSeverity.INFO

    @field_validator("step", mode="before")
    @classmethod
    def default_step(cls, v: Any) -> str:
        return str(v) if v else DefaultLogValues.STEP.value

    @field_validator("message", mode="before")
    @classmethod
    def default_message(cls, v: Any) -> str:
        return str(v) if v else DefaultLogValues.MESSAGE.value

    @property
    def level_icon(self) -> str:
        """Get emoji for the severity."""
        icon_map = {
            LogSeverity.INFO: "ℹ️",
            LogSeverity.SUCCESS: "✅",
            LogSeverity.WARNING: "⚠️",
            LogSeverity.ERROR: "❌",
        }
        return icon_map.get(self.level, "📝")

    @property
    def level_color(self) -> str:
        """Get Rich color for the severity."""
        color_map = {
            LogSeverity.INFO: "blue",
            LogSeverity.SUCCESS: "green",
            LogSeverity.WARNING: "yellow",
            LogSeverity.ERROR: "red",
        }
        return color_map.get(self.level, "white")


def parse_log_bundle(raw_logs: list[dict[str, Any]] | None, process_id: str | None = None) -> list[LogEvent]:
    """Convert raw backend log entries into events, preserving order."""
    events = []
    for entry in raw_logs or []:
        data = dict(entry)
        if process_id and not data.get("process_id"):
            data["process_id"] = process_id
        events.append(LogEvent.model_validate(data))
    return events


class XMLIntegrationResult(BaseModel):
    """Outcome of an XML integration run for one order."""

    total_processed: int = 0
    success_count: int = 0
    error_count: int = 0
    results: list[dict[str, Any]] = Field(default_factory=list)
    logs: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("results", "logs", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> list[dict[str, Any]]:
        return v or []

    @property
    def has_log_bundle(self) -> bool:
        return bool(self.logs)

    def log_events(self, process_id: str | None = None) -> list[LogEvent]:
        """Get the embedded log bundle as events."""
        return parse_log_bundle(self.logs, process_id)

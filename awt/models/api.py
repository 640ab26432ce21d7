"""Portal API envelope and audit models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class APIResponse(BaseModel):
    """Standard response envelope returned by the portal backend."""

    success: bool = False
    message: str = ""
    data: Any = None
    error: str | None = None


class AuditLog(BaseModel):
    """Audit trail entry recorded for a DePara write."""

    id: str
    table_name: str = ""
    record_id: str = ""
    operation: str = ""
    user_id: str = ""
    user_email: str = ""
    user_name: str = ""
    old_values: str = ""
    new_values: str = ""
    changed_fields: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    @field_validator("changed_fields", mode="before")
    @classmethod
    def parse_changed_fields(cls, v: Any) -> list[str]:
        """Changed fields arrive as a JSON-encoded list or comma-separated text."""
        if v is None or v == "":
            return []
        if isinstance(v, list):
            return [str(item) for item in v]
        text = str(v).strip()
        if text.startswith("["):
            text = text.strip("[]")
        return [part.strip().strip('"') for part in text.split(",") if part.strip()]

    @field_validator("old_values", "new_values", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

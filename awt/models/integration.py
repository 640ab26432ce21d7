"""Marketplace order integration models."""

from typing import Any

from pydantic import BaseModel, field_validator

from awt.core.constants import (
    FAILED_INTEGRATION_STATUSES,
    FINISHED_INTEGRATION_STATUSES,
    INTEGRATION_CONTAS,
    INTEGRATION_MARKETPLACES,
    LogSeverity,
)
from awt.models.logs import LogEvent


class IntegrationRequest(BaseModel):
    """Payload for integrating a marketplace order into the ERP."""

    conta: str
    marketplace: str
    num_pedido: str

    @field_validator("conta", "marketplace", "num_pedido", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        """Trim required fields and reject blanks."""
        text = "" if v is None else str(v).strip()
        if not text:
            raise ValueError("field is required")
        return text

    @field_validator("conta")
    @classmethod
    def known_conta(cls, v: str) -> str:
        if v.lower() not in INTEGRATION_CONTAS:
            raise ValueError(f"unknown account, expected one of {', '.join(INTEGRATION_CONTAS)}")
        return v.lower()

    @field_validator("marketplace")
    @classmethod
    def known_marketplace(cls, v: str) -> str:
        if v.lower() not in INTEGRATION_MARKETPLACES:
            raise ValueError(f"unknown marketplace, expected one of {', '.join(INTEGRATION_MARKETPLACES)}")
        return v.lower()


class IntegrationStatus(BaseModel):
    """Execution status of an integration."""

    integration_id: str
    status: str = "pending"
    progress: int = 0

    @field_validator("integration_id", mode="before")
    @classmethod
    def id_to_text(cls, v: Any) -> str:
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        return str(v).strip().lower() if v else "pending"

    @field_validator("progress", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_INTEGRATION_STATUSES or self.progress >= 100

    @property
    def failed(self) -> bool:
        return self.status in FAILED_INTEGRATION_STATUSES

    def to_event(self) -> LogEvent:
        """Summarize a finished integration as a single log event."""
        return LogEvent(
            level=LogSeverity.ERROR if self.failed else LogSeverity.SUCCESS,
            step="Integração",
            message=f"Integração {self.integration_id}: {self.status} ({self.progress}%)",
            process_id=self.integration_id,
        )

"""DePara product models for the portal API."""

import ast
import json
import logging
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from awt.core.constants import (
    DEFAULT_CONTA,
    DEFAULT_EMPRESA,
    DEFAULT_MARKETPLACE,
    DEFAULT_TABLE_NAME,
    PERMALINK_BASE_URL,
)
from awt.exceptions import ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_nullable_float(v: Any) -> float | None:
    """Parse plain numbers and the backend's ``{"Float64": x, "Valid": bool}`` objects."""
    if v is None:
        return None
    if isinstance(v, bool):
        return None
    if isinstance(v, int | float):
        return float(v)
    if isinstance(v, dict):
        if not v.get("Valid"):
            return None
        value = v.get("Float64")
        return float(value) if isinstance(value, int | float) else None
    if isinstance(v, str):
        try:
            return float(v)
        except ValueError:
            return None
    return None


class DeParaProduct(BaseModel):
    """A marketplace listing mapped to an internal SKU."""

    id: str  # MLBXXXXXXXXXX listing id
    mlbu: str = ""
    type: str = ""
    sku: str = ""
    company: str = ""
    permalink: str = ""
    ship_cost_slow: float | None = None
    ship_cost_standard: float | None = None
    ship_cost_nextday: float | None = None
    pictures: list[str] = Field(default_factory=list)
    updated_at: datetime | None = None
    created_at: datetime | None = None

    @field_validator("mlbu", "type", "sku", "company", "permalink", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        """Columns coalesced to empty strings by the backend may still arrive as null."""
        return "" if v is None else str(v)

    @field_validator("ship_cost_slow", "ship_cost_standard", "ship_cost_nextday", mode="before")
    @classmethod
    def parse_ship_cost(cls, v: Any) -> float | None:
        """Parse shipping costs from numbers or nullable-float objects."""
        return _parse_nullable_float(v)

    @field_validator("pictures", mode="before")
    @classmethod
    def parse_pictures(cls, v: Any) -> list[str]:
        """Parse pictures stored as a list, a JSON array or a quoted Python list."""
        if v is None or v == "":
            return []
        if isinstance(v, list):
            return [str(item) for item in v]
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                try:
                    parsed = ast.literal_eval(v)
                except (ValueError, SyntaxError):
                    logger.debug(f"Could not parse pictures value: {v[:80]}")
                    return []
            if isinstance(parsed, list | tuple):
                return [str(item) for item in parsed]
        return []

    @field_validator("updated_at", "created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime | None:
        """Parse timestamps, treating Go zero times as missing."""
        if v is None or v == "":
            return None
        if isinstance(v, datetime):
            return v
        if isinstance(v, int | float):
            return datetime.fromtimestamp(v)
        if isinstance(v, str):
            if v.startswith("0001-01-01"):
                return None
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None

    @property
    def shipping_summary(self) -> str:
        """Shipping costs formatted as the portal shows them."""
        return " / ".join(format_currency(cost) for cost in self.ship_costs)

    @property
    def ship_costs(self) -> tuple[float | None, float | None, float | None]:
        """Shipping costs ordered slow, standard, next day."""
        return (self.ship_cost_slow, self.ship_cost_standard, self.ship_cost_nextday)


def format_currency(value: float | None) -> str:
    """Format a value as Brazilian reais, e.g. ``R$ 12,50``."""
    amount = value if value is not None else 0.0
    return f"R$ {amount:.2f}".replace(".", ",")


class CreateProductRequest(BaseModel):
    """Payload for creating a DePara product."""

    table_name: str = DEFAULT_TABLE_NAME
    id: str
    sku: str
    company: str
    mlbu: str = ""
    type: str = ""

    @field_validator("id", "sku", "company", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        """Trim required fields and reject blanks."""
        text = "" if v is None else str(v).strip()
        if not text:
            raise ValueError("field is required")
        return text

    @field_validator("mlbu", "type", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @model_validator(mode="after")
    def apply_defaults(self) -> "CreateProductRequest":
        """Default the catalog code to the listing id and the type to ``product``."""
        if not self.mlbu:
            self.mlbu = self.id
        if not self.type:
            self.type = "product"
        return self

    def to_product(self) -> DeParaProduct:
        """Build the record the backend stores for this request."""
        return DeParaProduct(
            id=self.id,
            mlbu=self.mlbu,
            type=self.type,
            sku=self.sku,
            company=self.company,
            permalink=f"{PERMALINK_BASE_URL}/{self.id}",
        )


class UpdateProductRequest(BaseModel):
    """Payload for updating the editable fields of a DePara product."""

    sku: str
    company: str

    @field_validator("sku", "company", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        """Trim required fields and reject blanks."""
        text = "" if v is None else str(v).strip()
        if not text:
            raise ValueError("field is required")
        return text


class IntegrationTable(BaseModel):
    """An integration table the backend can search."""

    id: str
    table_name: str
    display_name: str = ""
    is_active: bool = True
    created_at: datetime | None = None


class TableOptions(BaseModel):
    """Values available for building a table name."""

    empresa: list[str] = Field(default_factory=list)
    conta: list[str] = Field(default_factory=list)
    marketplace: list[str] = Field(default_factory=list)


class TableSelection(BaseModel):
    """Company, account and marketplace that identify an integration table."""

    empresa: str = DEFAULT_EMPRESA
    conta: str = DEFAULT_CONTA
    marketplace: str = DEFAULT_MARKETPLACE

    @property
    def table_name(self) -> str:
        return f"integration.{self.empresa}_{self.conta}.{self.marketplace}_base"

    @classmethod
    def parse(cls, value: str | None) -> "TableSelection":
        """Parse ``integration.empresa_conta.marketplace_base`` or ``empresa_conta_marketplace``.

        Falls back to the default table for empty or unrecognized values.
        """
        if not value:
            return cls()

        if "." in value:
            parts = value.split(".")
            if len(parts) == 3 and parts[0] == "integration" and parts[2].endswith("_base"):
                account = parts[1].split("_", 1)
                if len(account) == 2:
                    return cls(empresa=account[0], conta=account[1], marketplace=parts[2].removesuffix("_base"))
            logger.warning(f"Unrecognized table name {value!r}, using default table")
            return cls()

        parts = value.split("_")
        if len(parts) >= 3:
            return cls(empresa=parts[0], conta=parts[1], marketplace=parts[2])

        logger.warning(f"Unrecognized table name {value!r}, using default table")
        return cls()


def build_request(model: type[M], **fields: Any) -> M:
    """Validate a request payload, reporting failures as AWT validation errors."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        failed = ", ".join(str(error["loc"][0]) for error in e.errors() if error.get("loc"))
        raise ValidationError(failed or model.__name__, fields, f"Invalid {failed or 'request'}: {e}") from e

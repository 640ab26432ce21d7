"""Column layouts shared by the product and stock tables and the TUI."""

from typing import Any

from pydantic import BaseModel, Field

from awt.models.product import DeParaProduct, format_currency
from awt.models.stock import StockItem


class ColumnDefinition(BaseModel):
    """Configuration for a table column."""

    key: str = Field(description="Product field shown in the column")
    label: str = Field(description="Display label for the column header")
    width: int | None = Field(default=None, description="Column width (None for dynamic)")
    # Rich table styling options
    style: str | None = Field(default=None, description="Rich text style for the column")
    no_wrap: bool = Field(default=False, description="Prevent text wrapping")
    overflow: str | None = Field(default=None, description="Text overflow handling: fold, crop, ellipsis")

    def get_table_kwargs(self) -> dict[str, Any]:
        """Get kwargs for Rich table.add_column(), excluding None values."""
        kwargs: dict[str, Any] = {"no_wrap": self.no_wrap}
        if self.style:
            kwargs["style"] = self.style
        if self.width:
            kwargs["width"] = self.width
        if self.overflow:
            kwargs["overflow"] = self.overflow
        return kwargs


PRODUCT_COLUMNS = [
    ColumnDefinition(key="id", label="ID", width=16, style="cyan", no_wrap=True),
    ColumnDefinition(key="mlbu", label="MLBU", width=16, style="blue", no_wrap=True),
    ColumnDefinition(key="sku", label="SKU", width=20, style="magenta", overflow="fold"),
    ColumnDefinition(key="company", label="Empresa", width=14, style="green", overflow="fold"),
    ColumnDefinition(key="type", label="Tipo", width=10, style="dim", no_wrap=True),
    ColumnDefinition(key="ship_cost_slow", label="Frete Lento", width=12, no_wrap=True),
    ColumnDefinition(key="ship_cost_standard", label="Frete Padrão", width=12, no_wrap=True),
    ColumnDefinition(key="ship_cost_nextday", label="Frete Expresso", width=14, no_wrap=True),
    ColumnDefinition(key="updated_at", label="Atualizado", width=16, style="dim", no_wrap=True),
]

CSV_FIELDS = [
    "id",
    "mlbu",
    "sku",
    "company",
    "type",
    "permalink",
    "ship_cost_slow",
    "ship_cost_standard",
    "ship_cost_nextday",
    "updated_at",
]


def cell_value(product: DeParaProduct, key: str) -> str:
    """Display text for one product field."""
    value = getattr(product, key, None)
    if key.startswith("ship_cost_"):
        return format_currency(value)
    if key == "updated_at":
        return value.strftime("%Y-%m-%d %H:%M") if value else ""
    return "" if value is None else str(value)


def product_row(product: DeParaProduct) -> tuple[str, ...]:
    return tuple(cell_value(product, column.key) for column in PRODUCT_COLUMNS)


STOCK_COLUMNS = [
    ColumnDefinition(key="cod_empresa", label="Cód.", width=6, style="cyan", no_wrap=True),
    ColumnDefinition(key="nome_empresa", label="Empresa", width=20, style="green", overflow="fold"),
    ColumnDefinition(key="cod_item", label="Item", width=16, style="magenta", no_wrap=True),
    ColumnDefinition(key="nome_fornecedor", label="Fornecedor", width=20, overflow="fold"),
    ColumnDefinition(key="valor_venda", label="Venda", width=12, no_wrap=True),
    ColumnDefinition(key="valor_reposicao", label="Reposição", width=12, no_wrap=True),
    ColumnDefinition(key="estoque", label="Estoque", width=8, no_wrap=True),
    ColumnDefinition(key="reservado", label="Reservado", width=9, style="dim", no_wrap=True),
    ColumnDefinition(key="estoque_disponivel", label="Disponível", width=10, style="bold", no_wrap=True),
]

STOCK_CSV_FIELDS = [
    "cod_empresa",
    "nome_empresa",
    "cod_fornecedor",
    "nome_fornecedor",
    "cod_item",
    "valor_reposicao",
    "custo_contabil",
    "valor_venda",
    "estoque",
    "reservado",
    "estoque_disponivel",
]


def stock_row(item: StockItem) -> tuple[str, ...]:
    cells = []
    for column in STOCK_COLUMNS:
        value = getattr(item, column.key)
        cells.append(format_currency(value) if column.key.startswith("valor_") else str(value))
    return tuple(cells)

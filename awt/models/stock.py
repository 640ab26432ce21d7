"""Stock query models."""

from typing import Any

from pydantic import BaseModel, field_validator


class StockItem(BaseModel):
    """Stock position of a part at one company of the group."""

    cod_empresa: int
    nome_empresa: str = ""
    cod_fornecedor: str = ""
    nome_fornecedor: str = ""
    cod_item: str
    valor_reposicao: float = 0.0
    custo_contabil: float = 0.0
    valor_venda: float = 0.0
    estoque: int = 0
    reservado: int = 0
    estoque_disponivel: int = 0

    @field_validator("nome_empresa", "cod_fornecedor", "nome_fornecedor", "cod_item", mode="before")
    @classmethod
    def to_text(cls, v: Any) -> str:
        """Oracle codes may arrive as numbers or nulls."""
        return "" if v is None else str(v).strip()

    @field_validator(
        "valor_reposicao",
        "custo_contabil",
        "valor_venda",
        "estoque",
        "reservado",
        "estoque_disponivel",
        mode="before",
    )
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def id(self) -> str:
        """Cache key: the backend lists an item once per company."""
        return f"{self.cod_empresa}:{self.cod_item}"

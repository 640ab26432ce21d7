from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

import pytest

from awt.core.classifier import SearchMode
from awt.exceptions import ConflictError, NotFoundError, UnavailableError
from awt.models.api import AuditLog
from awt.models.integration import IntegrationRequest, IntegrationStatus
from awt.models.logs import LogEvent, XMLIntegrationResult
from awt.models.product import (
    CreateProductRequest,
    DeParaProduct,
    IntegrationTable,
    TableOptions,
    UpdateProductRequest,
)
from awt.models.stock import StockItem

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: property-based deterministic tests")


def make_product(index: int, **overrides: Any) -> DeParaProduct:
    data: dict[str, Any] = {
        "id": f"MLB{4000000000 + index}",
        "mlbu": f"MLBU{9000 + index}",
        "type": "product",
        "sku": f"SKU-{index:03d}",
        "company": "AMZ" if index % 2 else "PSA",
        "ship_cost_standard": 19.9,
        "updated_at": BASE_TIME + timedelta(days=index),
    }
    data.update(overrides)
    return DeParaProduct.model_validate(data)


def make_products(count: int) -> list[DeParaProduct]:
    return [make_product(index) for index in range(count)]


def make_events(count: int, process_id: str = "P-1") -> list[LogEvent]:
    return [
        LogEvent(
            timestamp=BASE_TIME + timedelta(seconds=index),
            step=f"Step {index}",
            message=f"message {index}",
            process_id=process_id,
        )
        for index in range(count)
    ]


class FakePortalClient:
    """In-memory stand-in for PortalAPIClient."""

    def __init__(self, records: Sequence[DeParaProduct] = ()) -> None:
        self.records = list(records)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_with: Exception | None = None
        self.readback_fails = False
        self.bundles: list[list[LogEvent] | None | Exception] = []
        self.xml_result = XMLIntegrationResult()
        self.audit_logs: list[AuditLog] = []
        self.stock_items: list[StockItem] = []
        self.integration_result = XMLIntegrationResult()
        self.statuses: list[IntegrationStatus | Exception] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> list[str]:
        return [name for name, _args in self.calls]

    def list_tables(self) -> list[IntegrationTable]:
        self._record("list_tables")
        return [IntegrationTable(id="1", table_name="integration.amazonas_psa.mercadolivre_base", display_name="PSA")]

    def get_table_options(self) -> TableOptions:
        self._record("get_table_options")
        return TableOptions(empresa=["amazonas"], conta=["psa", "loja"], marketplace=["mercadolivre", "shopee"])

    def search_products(self, table_name: str, query: str, mode: SearchMode | None = None) -> list[DeParaProduct]:
        self._record("search_products", table_name, query, mode)
        return list(self.records)

    def get_product(self, product_id: str, table_name: str) -> DeParaProduct:
        self._record("get_product", product_id, table_name)
        if self.readback_fails:
            raise UnavailableError("read back failed")
        for record in self.records:
            if record.id == product_id:
                return record
        raise NotFoundError(f"{product_id} not found")

    def create_product(self, request: CreateProductRequest) -> str:
        self._record("create_product", request)
        if any(record.id == request.id for record in self.records):
            raise ConflictError(f"{request.id} exists")
        self.records.append(request.to_product().model_copy(update={"updated_at": BASE_TIME}))
        return request.id

    def update_product(self, product_id: str, request: UpdateProductRequest, table_name: str) -> None:
        self._record("update_product", product_id, request, table_name)
        for index, record in enumerate(self.records):
            if record.id == product_id:
                self.records[index] = record.model_copy(update=request.model_dump())
                return
        raise NotFoundError(f"{product_id} not found")

    def delete_product(self, product_id: str, table_name: str) -> None:
        self._record("delete_product", product_id, table_name)
        before = len(self.records)
        self.records = [record for record in self.records if record.id != product_id]
        if len(self.records) == before:
            raise NotFoundError(f"{product_id} not found")

    def get_audit_logs(self, table_name: str, record_id: str | None = None, limit: int = 10) -> list[AuditLog]:
        self._record("get_audit_logs", table_name, record_id, limit)
        return self.audit_logs[:limit]

    def process_xml_integration(self, num_pedido: str) -> XMLIntegrationResult:
        self._record("process_xml_integration", num_pedido)
        return self.xml_result

    def fetch_job_log_bundle(self, process_id: str) -> list[LogEvent] | None:
        self.calls.append(("fetch_job_log_bundle", (process_id,)))
        outcome = self.bundles.pop(0) if self.bundles else None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def search_stock(self, sku: str) -> list[StockItem]:
        self._record("search_stock", sku)
        return list(self.stock_items)

    def execute_integration(self, request: IntegrationRequest) -> XMLIntegrationResult:
        self._record("execute_integration", request)
        return self.integration_result

    def integration_status(self, integration_id: str) -> IntegrationStatus:
        self.calls.append(("integration_status", (integration_id,)))
        outcome = self.statuses.pop(0) if self.statuses else IntegrationStatus(integration_id=integration_id)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def fetch_integration_bundle(self, integration_id: str) -> list[LogEvent] | None:
        status = self.integration_status(integration_id)
        return [status.to_event()] if status.is_finished else None


@pytest.fixture
def products() -> list[DeParaProduct]:
    return make_products(32)


@pytest.fixture
def fake_client(products: list[DeParaProduct]) -> FakePortalClient:
    return FakePortalClient(products)


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def event_factory():
    return make_events


@pytest.fixture
def client_factory():
    return FakePortalClient


def make_stock_item(cod_empresa: int, **overrides: Any) -> StockItem:
    data: dict[str, Any] = {
        "cod_empresa": cod_empresa,
        "nome_empresa": f"Filial {cod_empresa}",
        "cod_fornecedor": "100",
        "nome_fornecedor": "FORNECEDOR",
        "cod_item": "7087301",
        "valor_venda": 129.9,
        "estoque": 5,
        "reservado": 1,
        "estoque_disponivel": 4,
    }
    data.update(overrides)
    return StockItem.model_validate(data)


@pytest.fixture
def stock_factory():
    return make_stock_item

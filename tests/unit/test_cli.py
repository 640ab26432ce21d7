import json
from contextlib import nullcontext

import pytest
from typer.testing import CliRunner

from awt.cli.main import app
from awt.exceptions import UnavailableError
from awt.models.integration import IntegrationStatus
from awt.models.logs import XMLIntegrationResult

runner = CliRunner()


@pytest.fixture
def backend(fake_client, monkeypatch):
    """Route every command's client to the in-memory backend."""
    for module in ("search", "tables", "products", "xml", "stock", "integration"):
        monkeypatch.setattr(f"awt.cli.commands.{module}.open_client", lambda *args, **kwargs: nullcontext(fake_client))
    monkeypatch.setenv("AWT_PAGE_SIZE", "15")
    return fake_client


def test_search_prints_requested_page(backend):
    result = runner.invoke(app, ["search", "SKU", "--no-tui", "--page", "2"])

    assert result.exit_code == 0, result.output
    assert "Page 2/3" in result.output
    assert backend.call_names() == ["search_products"]


def test_search_json_page(backend, tmp_path):
    output = tmp_path / "page.json"

    result = runner.invoke(app, ["search", "SKU", "--format", "json", "--output", str(output), "--page", "3"])

    assert result.exit_code == 0, result.output
    page = json.loads(output.read_text(encoding="utf-8"))
    assert page["page"] == 3
    assert page["total_count"] == 32
    assert [record["sku"] for record in page["records"]] == ["SKU-030", "SKU-031"]


def test_search_all_csv_with_filter(backend, tmp_path):
    output = tmp_path / "products.csv"

    result = runner.invoke(
        app,
        ["search", "SKU", "--all", "--updated-after", "2024-03-30 00:00", "--format", "csv", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    lines = output.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 4


def test_search_backend_failure_exits_with_error(backend):
    backend.fail_with = UnavailableError("backend down")

    result = runner.invoke(app, ["search", "SKU", "--no-tui"])

    assert result.exit_code == 1
    assert "backend down" in result.output


def test_search_empty_query_exits_with_error(backend):
    result = runner.invoke(app, ["search", "  ", "--no-tui"])

    assert result.exit_code == 1
    assert backend.calls == []


def test_tables_json(backend, tmp_path):
    output = tmp_path / "tables.json"

    result = runner.invoke(app, ["tables", "--format", "json", "--output", str(output)])

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["tables"][0]["display_name"] == "PSA"
    assert data["options"]["marketplace"] == ["mercadolivre", "shopee"]


def test_delete_with_yes_skips_confirmation(backend, products):
    result = runner.invoke(app, ["delete", products[0].id, "--yes"])

    assert result.exit_code == 0, result.output
    assert f"Deleted {products[0].id}" in result.output
    assert len(backend.records) == 31


def test_delete_declined_keeps_record(backend, products):
    result = runner.invoke(app, ["delete", products[0].id], input="n\n")

    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert len(backend.records) == 32


def test_delete_missing_product_exits_with_error(backend):
    result = runner.invoke(app, ["delete", "MLB-missing", "--yes"])

    assert result.exit_code == 1
    assert "delete_product" not in backend.call_names()


def test_xml_process_json(backend, tmp_path):
    backend.xml_result = XMLIntegrationResult.model_validate(
        {"total_processed": 2, "success_count": 2, "logs": [{"level": "success", "message": "ok"}]}
    )
    output = tmp_path / "xml.json"

    result = runner.invoke(app, ["xml-process", "777", "--format", "json", "--output", str(output)])

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["result"]["success_count"] == 2
    assert data["events"][0]["process_id"] == "777"


def test_stock_json_page(backend, stock_factory, tmp_path):
    backend.stock_items = [stock_factory(index) for index in range(1, 21)]
    output = tmp_path / "stock.json"

    result = runner.invoke(app, ["stock", " LC7087301 ", "--format", "json", "--output", str(output), "--page", "2"])

    assert result.exit_code == 0, result.output
    assert backend.calls == [("search_stock", ("LC7087301",))]
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["page"] == 2
    assert data["total_count"] == 20
    assert [record["cod_empresa"] for record in data["records"]] == [16, 17, 18, 19, 20]


def test_stock_all_csv(backend, stock_factory, tmp_path):
    backend.stock_items = [stock_factory(index) for index in range(1, 21)]
    output = tmp_path / "stock.csv"

    result = runner.invoke(app, ["stock", "7087301", "--all", "--format", "csv", "--output", str(output)])

    assert result.exit_code == 0, result.output
    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("cod_empresa,nome_empresa")
    assert len(lines) == 21


def test_stock_table_sums_available_stock(backend, stock_factory):
    backend.stock_items = [stock_factory(1), stock_factory(2, estoque_disponivel=7)]

    result = runner.invoke(app, ["stock", "7087301"])

    assert result.exit_code == 0, result.output
    assert "2 positions, 11 available" in result.output


def test_stock_blank_sku_exits_with_error(backend):
    result = runner.invoke(app, ["stock", "  "])

    assert result.exit_code == 1
    assert backend.calls == []


def test_integration_json(backend, tmp_path):
    backend.integration_result = XMLIntegrationResult(total_processed=1, success_count=1)
    backend.statuses = [IntegrationStatus(integration_id="555", status="completed", progress=100)]
    output = tmp_path / "integration.json"

    result = runner.invoke(
        app, ["integration", "PSA", "mercadolivre", "555", "--format", "json", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    request = backend.calls[0][1][0]
    assert (request.conta, request.marketplace, request.num_pedido) == ("psa", "mercadolivre", "555")
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["result"]["success_count"] == 1
    assert data["events"][0]["process_id"] == "555"
    assert "completed" in data["events"][0]["message"]


def test_integration_unknown_account_exits_with_error(backend):
    result = runner.invoke(app, ["integration", "nowhere", "mercadolivre", "555"])

    assert result.exit_code == 1
    assert backend.calls == []

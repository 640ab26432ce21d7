"""Stock query command."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from awt.cache.result_cache import ResultCache
from awt.cli.utils.columns import STOCK_COLUMNS, STOCK_CSV_FIELDS, stock_row
from awt.cli.utils.options import (
    BASE_URL_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_SIZE_OPTION,
    TOKEN_OPTION,
    OutputFormat,
)
from awt.cli.utils.output import handle_csv_output, handle_json_output
from awt.cli.utils.session import open_client, report_errors
from awt.config import load_config
from awt.exceptions import InvalidQueryError
from awt.models.cache import PageView
from awt.models.stock import StockItem

console = Console()
logger = logging.getLogger(__name__)


def handle_table_output(view: PageView) -> None:
    table = Table(title=f"Estoque {view.query}", show_lines=False, expand=True)
    for column in STOCK_COLUMNS:
        table.add_column(column.label, **column.get_table_kwargs())
    for item in view.records:
        table.add_row(*stock_row(item))

    console.print(table)
    available = sum(item.estoque_disponivel for item in view.records)
    console.print(
        f"\n[bold]Page {view.page}/{view.total_pages}[/bold] "
        f"[dim]({view.total_count} positions, {available} available on this page)[/dim]"
    )


def search_stock(
    sku: Annotated[str, typer.Argument(help="Part code, with or without the LC prefix")],
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="Page to show")] = 1,
    page_size: PAGE_SIZE_OPTION = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Export every stock position instead of one page (json/csv)"),
    ] = False,
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Show the stock of a part at every company of the group."""
    cache: ResultCache[StockItem] = ResultCache(page_size or load_config().page_size)

    with report_errors("searching stock"):
        sku = sku.strip()
        if not sku:
            raise InvalidQueryError(sku, "SKU is required")

        with open_client(base_url, token) as client:
            with console.status(f"[bold blue]Searching stock for {sku}...[/bold blue]", spinner="dots"):
                cache.load(sku, client.search_stock(sku))

    cache.get_page(page)
    view = cache.view()
    logger.debug(f"Stock cache: {cache!r}")

    if not view.total_count:
        console.print(f"[yellow]No stock found for {sku}[/yellow]")
        return

    records = cache.records if show_all else view.records
    if output_format == OutputFormat.JSON:
        handle_json_output(view.model_copy(update={"records": records}) if show_all else view, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(records, output, fieldnames=STOCK_CSV_FIELDS)
    else:
        handle_table_output(view)

"""Search DePara products command implementation."""

import logging
import time
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from awt.cli.commands.depara_tui import launch_depara_tui
from awt.cli.utils.columns import CSV_FIELDS, PRODUCT_COLUMNS, product_row
from awt.cli.utils.options import (
    BASE_URL_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_SIZE_OPTION,
    SEARCH_MODE_OPTION,
    TABLE_OPTION,
    TOKEN_OPTION,
    OutputFormat,
)
from awt.cli.utils.output import handle_csv_output, handle_json_output
from awt.cli.utils.session import open_client, report_errors, resolve_table
from awt.config import load_config
from awt.core.highlighting import highlight_text
from awt.models.cache import PageView
from awt.models.stats import SearchCommandStats
from awt.services.depara import DeParaSession

console = Console()
logger = logging.getLogger(__name__)


def handle_table_output(view: PageView, table_name: str, patterns: list[str]) -> None:
    """Handle table format output for one page."""
    table = Table(title=f"DePara {table_name}", show_lines=False, expand=True)
    for column in PRODUCT_COLUMNS:
        table.add_column(column.label, **column.get_table_kwargs())

    for product in view.records:
        row = product_row(product)
        if patterns:
            table.add_row(*(highlight_text(cell, patterns) for cell in row))
        else:
            table.add_row(*row)

    console.print(table)
    if view.total_count:
        last_index = view.first_index + view.count - 1
        console.print(
            f"\n[bold]Page {view.page}/{view.total_pages}[/bold] "
            f"[dim]({view.first_index}-{last_index} of {view.total_count} records)[/dim]"
        )


def search_products(
    query: Annotated[str, typer.Argument(help="Listing id (MLB...), catalog code (MLBU...) or SKU")],
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="Page to show")] = 1,
    page_size: PAGE_SIZE_OPTION = None,
    by: SEARCH_MODE_OPTION = None,
    filter_text: Annotated[
        str | None,
        typer.Option("--filter", help="Fuzzy filter applied to the fetched results"),
    ] = None,
    updated_after: Annotated[
        str | None,
        typer.Option(
            "--updated-after",
            help="Keep records updated after this date (e.g., '2024-01-01', 'yesterday', '1 week ago')",
        ),
    ] = None,
    updated_before: Annotated[
        str | None,
        typer.Option(
            "--updated-before",
            help="Keep records updated before this date (e.g., '2024-12-31', 'today', '1 month ago')",
        ),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Export every matching record instead of one page (json/csv)"),
    ] = False,
    table: TABLE_OPTION = None,
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    no_tui: Annotated[
        bool,
        typer.Option("--no-tui", help="Print a single page instead of opening the interactive table"),
    ] = False,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Search the DePara table and page through the results.

    The backend is queried once; page turns and filters work on the fetched
    results. Table format opens the interactive view unless --no-tui is given.
    """
    stats = SearchCommandStats(start_time=time.time(), query=query)
    table_name = resolve_table(table)
    size = page_size or load_config().page_size

    with report_errors("searching products"), open_client(base_url, token) as client:
        session = DeParaSession(client, table_name, size)

        with console.status(f"[bold blue]Searching {query}...[/bold blue]", spinner="dots"):
            view = session.search(query, by)
        stats.mode = session.mode
        stats.records_found = view.total_count

        if filter_text or updated_after or updated_before:
            view = session.filter(filter_text, updated_after, updated_before)
            stats.filtered_count = view.total_count
            console.print(f"[dim]Filtered to {view.total_count} of {stats.records_found} records[/dim]")

        view = session.turn_page(page)
        console.print(f"[dim]{stats.summary()} in {time.time() - stats.start_time:.1f}s[/dim]")

        if not view.total_count:
            console.print(f"[yellow]No products found for {query}[/yellow]")
            return

        if output_format == OutputFormat.TABLE and not no_tui:
            # The interactive view writes through the open client
            launch_depara_tui(session, highlight=[query, filter_text or ""])
            return

    records = session.active.records if show_all else view.records
    if output_format == OutputFormat.JSON:
        payload = view.model_copy(update={"records": records}) if show_all else view
        handle_json_output(payload, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(records, output, fieldnames=CSV_FIELDS)
    else:
        handle_table_output(view, table_name, [query, filter_text or ""])

"""Main CLI entry point for Amazonas Web Tools."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from awt.cli.commands.integration import run_integration
from awt.cli.commands.products import audit_product, create_product, delete_product, update_product
from awt.cli.commands.search import search_products
from awt.cli.commands.stock import search_stock
from awt.cli.commands.tables import list_tables
from awt.cli.commands.xml import follow_logs, process_xml
from awt.config import load_config

app = typer.Typer(
    name="awt",
    help="Amazonas Web Tools - DePara products, stock queries and order integrations",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def setup_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """
    Amazonas Web Tools CLI
    """
    setup_logging("DEBUG" if verbose else load_config().log_level)


app.command("tables", help="List integration tables and the values used to select them")(list_tables)
app.command("search", help="Search DePara products and page through the results")(search_products)
app.command("create", help="Create a DePara product")(create_product)
app.command("update", help="Update the SKU and company of a DePara product")(update_product)
app.command("delete", help="Delete a DePara product")(delete_product)
app.command("audit", help="Show the audit trail of a DePara product")(audit_product)
app.command("xml-process", help="Run the XML integration for an order and show its log")(process_xml)
app.command("logs", help="Wait for a job's log bundle and print it")(follow_logs)
app.command("stock", help="Show the stock of a part at every company of the group")(search_stock)
app.command("integration", help="Integrate a marketplace order into the ERP and wait for it to finish")(run_integration)


if __name__ == "__main__":
    app()

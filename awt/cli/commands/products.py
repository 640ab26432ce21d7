"""Single-record DePara write and audit commands."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from awt.cli.utils.options import (
    BASE_URL_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    TABLE_OPTION,
    TOKEN_OPTION,
    YES_OPTION,
    OutputFormat,
)
from awt.cli.utils.output import handle_csv_output, handle_json_output
from awt.cli.utils.session import open_client, report_errors, resolve_table
from awt.core.constants import APIConstants
from awt.exceptions import AWTError
from awt.models.api import AuditLog
from awt.models.product import CreateProductRequest, DeParaProduct, UpdateProductRequest, build_request

console = Console()
logger = logging.getLogger(__name__)

PRODUCT_ID_ARGUMENT = Annotated[str, typer.Argument(help="Listing id (MLB...)")]


def print_product(product: DeParaProduct) -> None:
    """Print one product as a two-column table."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("ID", product.id)
    table.add_row("MLBU", product.mlbu)
    table.add_row("SKU", product.sku)
    table.add_row("Empresa", product.company)
    table.add_row("Tipo", product.type)
    table.add_row("Frete", product.shipping_summary)
    table.add_row("Link", product.permalink or "-")
    if product.updated_at:
        table.add_row("Atualizado", product.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


def create_product(
    product_id: PRODUCT_ID_ARGUMENT,
    sku: Annotated[str, typer.Option("--sku", prompt="SKU", help="Internal SKU")],
    company: Annotated[str, typer.Option("--company", prompt="Empresa", help="Company that owns the SKU")],
    mlbu: Annotated[str | None, typer.Option("--mlbu", help="Catalog code (defaults to the listing id)")] = None,
    product_type: Annotated[str | None, typer.Option("--type", help="Record type (defaults to 'product')")] = None,
    table: TABLE_OPTION = None,
    yes: YES_OPTION = False,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Create a DePara product."""
    table_name = resolve_table(table)

    with report_errors("creating product"):
        request = build_request(
            CreateProductRequest,
            table_name=table_name,
            id=product_id,
            sku=sku,
            company=company,
            mlbu=mlbu,
            type=product_type,
        )
        preview = request.to_product()
        print_product(preview)

        if not yes and not typer.confirm(f"\nCreate {request.id} in {table_name}?", default=True):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

        with open_client(base_url, token) as client:
            created_id = client.create_product(request)
            try:
                product = client.get_product(created_id, table_name)
            except AWTError as e:
                logger.warning(f"Could not read back {created_id}: {e}")
                product = preview

    console.print(f"[bold green]✓ Created {created_id}[/bold green]")
    print_product(product)


def update_product(
    product_id: PRODUCT_ID_ARGUMENT,
    sku: Annotated[str | None, typer.Option("--sku", help="New SKU (keeps the current one when omitted)")] = None,
    company: Annotated[
        str | None,
        typer.Option("--company", help="New company (keeps the current one when omitted)"),
    ] = None,
    table: TABLE_OPTION = None,
    yes: YES_OPTION = False,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Update the SKU and company of a DePara product."""
    table_name = resolve_table(table)

    with report_errors("updating product"), open_client(base_url, token) as client:
        current = client.get_product(product_id, table_name)
        request = build_request(UpdateProductRequest, sku=sku or current.sku, company=company or current.company)

        if request.sku == current.sku and request.company == current.company:
            console.print("[yellow]Nothing to update[/yellow]")
            return

        console.print(f"SKU: {current.sku or '-'} → [bold]{request.sku}[/bold]")
        console.print(f"Empresa: {current.company or '-'} → [bold]{request.company}[/bold]")
        if not yes and not typer.confirm(f"\nUpdate {product_id}?", default=True):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

        client.update_product(product_id, request, table_name)

    console.print(f"[bold green]✓ Updated {product_id}[/bold green]")


def delete_product(
    product_id: PRODUCT_ID_ARGUMENT,
    table: TABLE_OPTION = None,
    yes: YES_OPTION = False,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Delete a DePara product."""
    table_name = resolve_table(table)

    with report_errors("deleting product"), open_client(base_url, token) as client:
        product = client.get_product(product_id, table_name)
        print_product(product)

        if not yes and not typer.confirm(f"\nDelete {product_id} from {table_name}?", default=False):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

        client.delete_product(product_id, table_name)

    console.print(f"[bold green]✓ Deleted {product_id}[/bold green]")


def handle_audit_table(logs: list[AuditLog], product_id: str) -> None:
    """Handle table format output for audit entries."""
    table = Table(title=f"Audit trail for {product_id}", show_lines=True, expand=True)
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Operation", style="cyan", no_wrap=True)
    table.add_column("User", style="green")
    table.add_column("Changed", style="magenta")
    table.add_column("Before", overflow="fold")
    table.add_column("After", overflow="fold")

    for entry in logs:
        when = entry.created_at.strftime("%Y-%m-%d %H:%M") if entry.created_at else "-"
        user = entry.user_name or entry.user_email or entry.user_id or "-"
        table.add_row(
            when,
            entry.operation,
            user,
            ", ".join(entry.changed_fields) or "-",
            entry.old_values or "-",
            entry.new_values or "-",
        )

    console.print(table)


def audit_product(
    product_id: PRODUCT_ID_ARGUMENT,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, max=APIConstants.AUDIT_MAX_LIMIT, help="Maximum entries to show"),
    ] = APIConstants.AUDIT_DEFAULT_LIMIT,
    table: TABLE_OPTION = None,
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Show the audit trail recorded for a DePara product."""
    table_name = resolve_table(table)

    with report_errors("fetching audit trail"), open_client(base_url, token) as client:
        logs = client.get_audit_logs(table_name, product_id, limit)

    if not logs:
        console.print(f"[yellow]No audit entries for {product_id}[/yellow]")
        return

    if output_format == OutputFormat.JSON:
        handle_json_output(logs, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(logs, output)
    else:
        handle_audit_table(logs, product_id)

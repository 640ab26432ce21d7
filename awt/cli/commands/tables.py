"""List integration tables command implementation."""

from rich.console import Console
from rich.table import Table

from awt.cli.utils.options import BASE_URL_OPTION, OUTPUT_FORMAT_OPTION, OUTPUT_PATH_OPTION, TOKEN_OPTION, OutputFormat
from awt.cli.utils.output import handle_csv_output, handle_json_output
from awt.cli.utils.session import open_client, report_errors
from awt.models.product import IntegrationTable, TableOptions

console = Console()


def handle_table_output(tables: list[IntegrationTable], options: TableOptions) -> None:
    """Handle table format output."""
    table = Table(title="Integration tables", show_lines=False, expand=True)
    table.add_column("Table", style="cyan", no_wrap=True)
    table.add_column("Name", style="magenta")
    table.add_column("Active", no_wrap=True)

    for item in tables:
        active = "[green]yes[/green]" if item.is_active else "[red]no[/red]"
        table.add_row(item.table_name, item.display_name or "-", active)

    console.print(table)
    console.print(f"\n[bold]Empresas:[/bold] {', '.join(options.empresa) or '-'}")
    console.print(f"[bold]Contas:[/bold] {', '.join(options.conta) or '-'}")
    console.print(f"[bold]Marketplaces:[/bold] {', '.join(options.marketplace) or '-'}")


def list_tables(
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """List the integration tables and the values used to select one."""
    with report_errors("listing tables"):
        with open_client(base_url, token) as client:
            with console.status("[bold blue]Fetching tables...[/bold blue]", spinner="dots"):
                tables = client.list_tables()
                options = client.get_table_options()

    if output_format == OutputFormat.JSON:
        handle_json_output({"tables": tables, "options": options}, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(tables, output)
    else:
        handle_table_output(tables, options)


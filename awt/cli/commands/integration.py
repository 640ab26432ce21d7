"""Marketplace order integration command."""

from typing import Annotated

import typer
from rich.console import Console

from awt.cli.commands.xml import print_events, print_result, wait_for_bundle
from awt.cli.utils.options import (
    BASE_URL_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    TIMEOUT_OPTION,
    TOKEN_OPTION,
    OutputFormat,
)
from awt.cli.utils.output import handle_json_output
from awt.cli.utils.session import open_client, report_errors
from awt.config import load_config
from awt.core.constants import INTEGRATION_CONTAS, INTEGRATION_MARKETPLACES, PollingConstants
from awt.feed.log_feed import FeedMode
from awt.services.integration import MarketplaceIntegrationService

console = Console()


def run_integration(
    conta: Annotated[str, typer.Argument(help=f"Account: {', '.join(INTEGRATION_CONTAS)}")],
    marketplace: Annotated[str, typer.Argument(help=f"Marketplace: {', '.join(INTEGRATION_MARKETPLACES)}")],
    num_pedido: Annotated[str, typer.Argument(help="Marketplace order number")],
    timeout: TIMEOUT_OPTION = float(PollingConstants.CLI_WAIT_TIMEOUT_SECONDS),
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Integrate a marketplace order into the ERP and wait for it to finish."""
    config = load_config()

    with report_errors("running integration"), open_client(base_url, token) as client:
        with MarketplaceIntegrationService(client, config.poll_interval) as service:
            with console.status(f"[bold blue]Integrating order {num_pedido}...[/bold blue]", spinner="dots"):
                result, feed = service.launch(conta, marketplace, num_pedido)

            if feed.mode != FeedMode.REPLAYING:
                wait_for_bundle(feed, timeout)
            events = feed.events

    if output_format == OutputFormat.JSON:
        handle_json_output({"result": result, "events": events}, output)
        return

    print_result(result, feed.job_id)
    print_events(events)

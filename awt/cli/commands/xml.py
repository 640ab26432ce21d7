"""XML integration commands."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

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
from awt.core.constants import PollingConstants
from awt.exceptions import TimeoutError
from awt.feed.log_feed import FeedMode, ProcessLogFeed
from awt.models.logs import LogEvent, XMLIntegrationResult
from awt.models.stats import JobWaitStats
from awt.services.xml_integrator import XMLIntegrationService

console = Console()
logger = logging.getLogger(__name__)


def print_events(events: list[LogEvent]) -> None:
    """Print job log events in delivered order."""
    table = Table(title="Process log", show_lines=False, expand=True)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("", no_wrap=True)
    table.add_column("Step", style="cyan")
    table.add_column("Message", overflow="fold")

    for event in events:
        table.add_row(
            event.timestamp.astimezone().strftime("%H:%M:%S"),
            event.level_icon,
            event.step,
            f"[{event.level_color}]{event.message}[/{event.level_color}]",
        )

    console.print(table)


def print_result(result: XMLIntegrationResult, num_pedido: str) -> None:
    """Print the integration summary for an order."""
    status = "[green]✓[/green]" if result.error_count == 0 else "[red]✗[/red]"
    console.print(
        f"{status} [bold]Order {num_pedido}:[/bold] {result.total_processed} processed, "
        f"[green]{result.success_count} ok[/green], [red]{result.error_count} failed[/red]"
    )


def wait_for_bundle(feed: ProcessLogFeed, timeout: float) -> JobWaitStats:
    """Block until the feed replays a bundle, showing each status check.

    Raises:
        TimeoutError: If no bundle arrives within the timeout
    """
    stats = JobWaitStats()

    def on_change(changed: ProcessLogFeed) -> None:
        if changed.mode == FeedMode.POLLING:
            stats.checks += 1
        elif changed.mode == FeedMode.STALLED:
            stats.checks += 1
            stats.failed_checks += 1
            console.print(f"[yellow]Status check failed, retrying: {changed.last_error}[/yellow]")

    unsubscribe = feed.subscribe(on_change)
    try:
        with console.status(f"[bold blue]Waiting for logs of {feed.job_id}...[/bold blue]", spinner="dots"):
            stats.delivered = feed.wait(timeout)
    finally:
        unsubscribe()

    if not stats.delivered:
        raise TimeoutError(f"waiting for logs of {feed.job_id}", timeout)
    return stats


def process_xml(
    num_pedido: Annotated[str, typer.Argument(help="Order number to integrate")],
    timeout: TIMEOUT_OPTION = float(PollingConstants.CLI_WAIT_TIMEOUT_SECONDS),
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Run the XML integration for an order and show its log."""
    config = load_config()

    with report_errors("processing XML integration"), open_client(base_url, token) as client:
        with XMLIntegrationService(client, config.poll_interval) as service:
            with console.status(f"[bold blue]Processing order {num_pedido}...[/bold blue]", spinner="dots"):
                result, feed = service.launch(num_pedido)

            if feed.mode != FeedMode.REPLAYING:
                wait_for_bundle(feed, timeout)
            events = feed.events

    if output_format == OutputFormat.JSON:
        handle_json_output({"result": result, "events": events}, output)
        return

    print_result(result, num_pedido.strip())
    print_events(events)


def follow_logs(
    process_id: Annotated[str, typer.Argument(help="Process id (the order number for XML integrations)")],
    timeout: TIMEOUT_OPTION = float(PollingConstants.CLI_WAIT_TIMEOUT_SECONDS),
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    base_url: BASE_URL_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Wait for a job's log bundle and print it."""
    config = load_config()

    with report_errors("following logs"), open_client(base_url, token) as client:
        with XMLIntegrationService(client, config.poll_interval) as service:
            feed = service.follow(process_id)
            if feed.mode != FeedMode.REPLAYING:
                stats = wait_for_bundle(feed, timeout)
                logger.debug(f"Bundle arrived after {stats.checks} checks ({stats.failed_checks} failed)")
            events = feed.events

    if output_format == OutputFormat.JSON:
        handle_json_output(events, output)
    else:
        print_events(events)

"""Client setup and error reporting shared by backend commands."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console

from awt.api.client import PortalAPIClient
from awt.cli.utils.auth import get_api_credentials, with_api_client
from awt.config import load_config
from awt.exceptions import AWTError
from awt.models.product import TableSelection

console = Console()
logger = logging.getLogger(__name__)


@contextmanager
def report_errors(action: str) -> Iterator[None]:
    """Print AWT errors in red and exit with status 1.

    Args:
        action: What the command was doing, e.g. "searching products"

    Raises:
        typer.Exit: If an AWT error escapes the block
    """
    try:
        yield
    except AWTError as e:
        console.print(f"[red]Error {action}: {e}[/red]")
        if e.details:
            logger.debug(f"Error details: {e.details}")
        raise typer.Exit(1) from e


def open_client(
    base_url: str | None = None,
    api_token: str | None = None,
    check_health: bool = False,
) -> PortalAPIClient:
    """Resolve credentials and build a client for use in a 'with' statement."""
    final_base_url, final_token, use_test_routes = get_api_credentials(base_url, api_token)
    return with_api_client(final_base_url, final_token, use_test_routes, check_health=check_health)


def resolve_table(table: str | None) -> str:
    """Full table name for a --table value, falling back to AWT_DEFAULT_TABLE."""
    return TableSelection.parse(table or load_config().default_table).table_name

"""Utility functions for CLI commands."""

import typer
from rich.console import Console

from awt.api.client import PortalAPIClient
from awt.config import load_config

console = Console()


def with_api_client(
    base_url: str,
    api_token: str | None,
    use_test_routes: bool = False,
    check_health: bool = True,
) -> PortalAPIClient:
    """Build an API client, optionally checking the backend is reachable first.

    Args:
        base_url: Portal backend URL
        api_token: Bearer token
        use_test_routes: Call the unauthenticated test routes
        check_health: Whether to call the health endpoint before returning

    Returns:
        Initialized API client

    Note: This returns the client, not an open session. Use it in a regular
          'with' statement in the calling code.
    """
    client = PortalAPIClient(base_url, api_token, use_test_routes)
    if check_health:
        with console.status("[bold blue]Connecting to backend...[/bold blue]", spinner="dots"):
            client.check_health()
        console.print("[green]✓ Connected[/green]")

    return client


def get_api_credentials(
    base_url: str | None = None,
    api_token: str | None = None,
) -> tuple[str, str | None, bool]:
    """Get backend URL and token from parameters, environment or prompts.

    Args:
        base_url: Optional backend URL override
        api_token: Optional token override

    Returns:
        Tuple of (base_url, api_token, use_test_routes)

    Note:
        The token is only prompted for when the authenticated routes are used.
        Nothing is written to any config file.
    """
    config = load_config()

    final_base_url = base_url or config.api_base_url

    final_token = api_token
    if not final_token and config.api_token:
        final_token = config.api_token.get_secret_value()
    if not final_token and not config.use_test_routes:
        final_token = typer.prompt(
            "Portal API token",
            hide_input=True,
            confirmation_prompt=False,
        )

    return final_base_url, final_token, config.use_test_routes

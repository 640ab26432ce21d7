"""Shared CLI options and enums for commands."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer

from awt.core.classifier import SearchMode


class OutputFormat(StrEnum):
    """Supported output formats across commands."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


# Common typer options
BASE_URL_OPTION = Annotated[
    str | None,
    typer.Option(
        "--base-url",
        help="Portal backend URL (auto-detected from AWT_API_BASE_URL env var)",
    ),
]

TOKEN_OPTION = Annotated[
    str | None,
    typer.Option(
        "--token",
        "-t",
        help="Bearer token (auto-detected from AWT_API_TOKEN env var)",
        hide_input=True,
    ),
]

TABLE_OPTION = Annotated[
    str | None,
    typer.Option(
        "--table",
        help="Integration table, e.g. 'amazonas_psa_mercadolivre' or its full name (defaults to AWT_DEFAULT_TABLE)",
    ),
]

OUTPUT_PATH_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file path (json/csv formats print to stdout when omitted)",
    ),
]

OUTPUT_FORMAT_OPTION = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format (table, json, csv)",
        case_sensitive=False,
    ),
]

SEARCH_MODE_OPTION = Annotated[
    SearchMode | None,
    typer.Option(
        "--by",
        help="Force the search mode instead of detecting it from the query",
        case_sensitive=False,
    ),
]

PAGE_SIZE_OPTION = Annotated[
    int | None,
    typer.Option(
        "--page-size",
        min=1,
        max=100,
        help="Records per page (defaults to AWT_PAGE_SIZE)",
    ),
]

YES_OPTION = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
]

TIMEOUT_OPTION = Annotated[
    float,
    typer.Option(
        "--timeout",
        min=1,
        help="Seconds to wait for the job log bundle",
    ),
]

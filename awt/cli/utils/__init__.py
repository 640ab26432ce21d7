"""CLI utilities module."""

from awt.cli.utils.auth import get_api_credentials, with_api_client
from awt.cli.utils.columns import CSV_FIELDS, PRODUCT_COLUMNS, ColumnDefinition, cell_value, product_row
from awt.cli.utils.options import (
    BASE_URL_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_SIZE_OPTION,
    SEARCH_MODE_OPTION,
    TABLE_OPTION,
    TIMEOUT_OPTION,
    TOKEN_OPTION,
    YES_OPTION,
    OutputFormat,
)
from awt.cli.utils.output import handle_csv_output, handle_json_output, to_plain
from awt.cli.utils.session import open_client, report_errors, resolve_table

__all__ = [
    "BASE_URL_OPTION",
    "CSV_FIELDS",
    "OUTPUT_FORMAT_OPTION",
    "OUTPUT_PATH_OPTION",
    "PAGE_SIZE_OPTION",
    "PRODUCT_COLUMNS",
    "SEARCH_MODE_OPTION",
    "TABLE_OPTION",
    "TIMEOUT_OPTION",
    "TOKEN_OPTION",
    "YES_OPTION",
    "ColumnDefinition",
    "OutputFormat",
    "cell_value",
    "get_api_credentials",
    "handle_csv_output",
    "handle_json_output",
    "open_client",
    "product_row",
    "report_errors",
    "resolve_table",
    "to_plain",
    "with_api_client",
]

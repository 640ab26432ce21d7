"""Shared output handlers for CLI commands."""

import csv
import io
import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from rich.console import Console

from awt.core.constants import FormattingConstants

console = Console()


def to_plain(item: Any) -> Any:
    """Convert models to JSON-compatible dicts, leaving other values alone."""
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json")
    if isinstance(item, dict):
        return {key: to_plain(value) for key, value in item.items()}
    if isinstance(item, list | tuple):
        return [to_plain(value) for value in item]
    return item


def _write(content: str, output_path: Path | None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Saved to:[/bold green] {output_path}")
    else:
        print(content)


def handle_json_output(
    data: Any,
    output_path: Path | None,
    transformer: Callable[[Any], Any] | None = None,
) -> None:
    """Handle JSON format output.

    Args:
        data: Data to output (models are dumped in JSON mode)
        output_path: Optional file path to save output
        transformer: Optional function to transform data before serialization
    """
    output_data = transformer(data) if transformer else to_plain(data)
    _write(json.dumps(output_data, indent=FormattingConstants.JSON_INDENT, default=str, ensure_ascii=False), output_path)


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict | list):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def handle_csv_output(
    data: Sequence[Any],
    output_path: Path | None,
    fieldnames: list[str] | None = None,
) -> None:
    """Handle CSV format output.

    Args:
        data: Rows to output (models or dicts)
        output_path: Optional file path to save output
        fieldnames: Optional column order; defaults to the first row's keys
    """
    rows = [to_plain(item) for item in data]
    string_buffer = io.StringIO()

    if rows:
        if not fieldnames:
            fieldnames = list(rows[0].keys())
        writer = csv.DictWriter(string_buffer, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({key: _csv_cell(row.get(key)) for key in fieldnames})

    _write(string_buffer.getvalue(), output_path)

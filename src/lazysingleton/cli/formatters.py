"""
CLI-specific formatting functions for human-readable output.

This module handles presentation formatting for the CLI:
- JSON output for scripting
- Rich tables for interactive use
"""

import json
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "table":
        return format_table_output(data)
    return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    if isinstance(data, dict) and "singletons" in data:
        return format_singletons_table(data["singletons"])
    elif isinstance(data, dict):
        return format_key_value_table(data)
    else:
        # Fallback to JSON for unknown data structures
        return json.dumps(data, indent=2, default=str)


def format_key_value_table(data: Dict[str, Any]) -> str:
    """Format a flat result dictionary as a two-column table."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    for key, value in data.items():
        if isinstance(value, list):
            rendered = "\n".join(str(item) for item in value) if value else "-"
        elif isinstance(value, dict):
            rendered = json.dumps(value, default=str)
        else:
            rendered = str(value)
        table.add_row(str(key), rendered)

    return _render(table)


def format_singletons_table(singletons: List[Dict[str, Any]]) -> str:
    """Format registry registrations as a table."""
    if not singletons:
        return "No singletons registered."

    table = Table(show_header=True, header_style="bold magenta", show_lines=True)
    table.add_column("Name", style="cyan")
    table.add_column("State", style="green", width=10)
    table.add_column("Failure policy", style="yellow", width=14)

    for singleton in singletons:
        table.add_row(
            str(singleton.get("name", "N/A")),
            str(singleton.get("state", "N/A")),
            str(singleton.get("failure_policy", "N/A")),
        )

    return _render(table)


def _render(table: Table) -> str:
    # Capture Rich output as string
    console = Console(width=120, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()

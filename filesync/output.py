"""Output formatting for the command line."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from .utils import format_size


class OutputFormatter:
    """Formats messages, tables and JSON for the terminal."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def print(self, message: str = "") -> None:
        """Print a plain message."""
        if not self.json_output:
            self.console.print(message, highlight=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self.quiet and not self.json_output:
            self.console.print(message, highlight=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if not self.quiet and not self.json_output:
            self.console.print(f"[green]✓[/green] {message}", highlight=False)

    def warning(self, message: str) -> None:
        """Print a warning (always shown, on stderr)."""
        self.err_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

    def error(self, message: str) -> None:
        """Print an error (always shown, on stderr)."""
        self.err_console.print(f"[red]Error:[/red] {message}", highlight=False)

    def output_json(self, data: Any) -> None:
        """Print data as JSON."""
        self.console.print_json(json.dumps(data, default=str))

    def output_entries(self, entries: list) -> None:
        """Print file entries as a table (or JSON).

        Args:
            entries: List of FileEntry objects
        """
        if self.json_output:
            self.output_json([entry.to_dict() for entry in entries])
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Modified")
        table.add_column("Path")
        for entry in entries:
            size = format_size(entry.size) if entry.size is not None else "-"
            modified = (
                entry.modified.strftime("%Y-%m-%d %H:%M:%S") if entry.modified else "-"
            )
            table.add_row(size, modified, entry.path)
        self.console.print(table)

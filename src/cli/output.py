"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for spinners, tables, colored output, and formatted
text. Supports verbosity levels and --no-color flag.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Migrating..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Args:
            message: Message to display with spinner
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    def print_publish_summary(self, response: Dict[str, Any], committed: List[str]) -> None:
        """Display the outcome of a migration.

        Args:
            response: Successful migration response
            committed: Ids of every page created or updated
        """
        page = response.get("page", {})
        links = page.get("_links") or {}
        self.console.print()
        self.console.print("[bold]Migration Summary:[/bold]")
        self.console.print(
            f"  [green]↑ {response.get('action', '?')}:[/green] "
            f"{page.get('title', '')} ({page.get('id', '?')})"
        )
        if links.get("webui"):
            self.console.print(f"  Link: {links.get('base') or ''}{links['webui']}")
        others = len([page_id for page_id in committed if page_id != page.get("id")])
        if others:
            self.console.print(f"  [cyan]+ related pages written:[/cyan] {others}")

    def print_committed(self, committed: List[str]) -> None:
        """List pages written before a failure."""
        if not committed:
            return
        self.warning(f"{len(committed)} page(s) were written before the failure:")
        for page_id in committed:
            self.console.print(f"  - {page_id}")

    def print_spaces(self, spaces: Iterable[Dict[str, Any]]) -> int:
        """Display spaces as a table.

        Returns:
            Number of spaces displayed
        """
        table = Table(show_header=True, header_style="bold")
        table.add_column("ID", justify="right")
        table.add_column("Key")
        table.add_column("Name")
        count = 0
        for space in spaces:
            table.add_row(str(space.get("id", "")), space.get("key") or "", space.get("name") or "")
            count += 1
        self.console.print(table)
        return count

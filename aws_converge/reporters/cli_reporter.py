"""
CLI Reporter Module
===================

Terminal output for tag plans, sync results and waits, using Rich.

Classes
-------
CLIReporter
    Main reporter class for terminal output.

Example
-------
>>> from aws_converge.reporters import CLIReporter
>>>
>>> reporter = CLIReporter()
>>> reporter.report_delta(delta, title="acm_certificate arn:aws:acm:...")
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from aws_converge.core.base_tagger import SyncResult
from aws_converge.core.poller import PollResult
from aws_converge.core.sync_manager import BatchSyncResult
from aws_converge.core.tags import TagDelta

# Module logger
logger = logging.getLogger(__name__)


def _error_sort_key(entry: dict) -> tuple:
    return (entry["resource_id"], entry["region"] or "", entry["resource_type"])


class CLIReporter:
    """
    Reporter for displaying results in the terminal.

    Parameters
    ----------
    console : Console, optional
        Rich Console instance. If not provided, creates a new one.

    Examples
    --------
    >>> reporter = CLIReporter()
    >>> reporter.report_sync(sync_result)

    Showing a spinner while waiting:

    >>> with reporter.create_progress() as progress:
    ...     progress.add_task("Waiting for certificate...", total=None)
    ...     poller.wait(condition, policy)
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def report_delta(self, delta: TagDelta, title: str = "Tag plan") -> None:
        """
        Print a tag plan as a table of removed, changed and added keys.

        Parameters
        ----------
        delta : TagDelta
            The plan to display.
        title : str
            Table title.
        """
        if delta.is_empty:
            self.console.print(f"\n[green]{title}: tags already converged.[/green]")
            return

        table = Table(title=f"\n{title}", title_style="bold", show_lines=False)
        table.add_column("Action", no_wrap=True)
        table.add_column("Key", style="cyan")
        table.add_column("Old Value", style="dim")
        table.add_column("New Value", style="white")

        changed = delta.changed_keys
        for key in sorted(delta.removed_keys):
            table.add_row("[red]remove[/red]", key, delta.to_remove[key], "")
        for key in sorted(changed):
            table.add_row(
                "[yellow]change[/yellow]",
                key,
                delta.to_remove[key],
                delta.to_add[key],
            )
        for key in sorted(delta.added_keys):
            table.add_row("[green]add[/green]", key, "", delta.to_add[key])

        self.console.print(table)

    def report_sync(self, result: SyncResult) -> None:
        """Print the outcome of a single tag sync."""
        mode = " (dry run)" if result.dry_run else ""
        self.report_delta(
            result.delta,
            title=f"{result.resource_type} {result.resource_id}{mode}",
        )

    def report_batch(self, batch: BatchSyncResult) -> None:
        """
        Print a summary of a batch sync, then each changed resource.

        Parameters
        ----------
        batch : BatchSyncResult
            Aggregated results of a batch.
        """
        header = Text()
        header.append("\nTag Sync Report", style="bold blue")
        if batch.dry_run:
            header.append("  (dry run)", style="yellow")
        self.console.print(Panel(header, border_style="blue"))

        summary = Table(show_header=False, box=None, padding=(0, 2))
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="white")
        summary.add_row("Resources:", str(batch.total))
        summary.add_row("Changed:", f"[yellow]{batch.changed}[/]")
        summary.add_row("Unchanged:", f"[green]{batch.unchanged}[/]")
        failed_style = "red" if batch.failed else "green"
        summary.add_row("Failed:", f"[{failed_style}]{batch.failed}[/]")
        self.console.print(summary)

        for result in sorted(batch.results, key=lambda r: r.resource_id):
            if result.changed:
                self.report_sync(result)

        if batch.errors:
            self.console.print("\n[yellow bold]Errors encountered:[/yellow bold]")
            for entry in sorted(batch.errors, key=_error_sort_key):
                where = f" ({entry['region']})" if entry["region"] else ""
                self.console.print(
                    f"  [red]• {entry['resource_type']} {entry['resource_id']}{where}: "
                    f"{escape(entry['error'])}[/red]"
                )

    def report_poll(self, result: PollResult) -> None:
        """Print the outcome of a successful wait."""
        target = result.description or "condition"
        self.console.print(
            f"\n[green bold]Converged:[/green bold] {target} "
            f"[dim]({result.elapsed:.1f}s, {result.attempts} checks)[/dim]"
        )

    def create_progress(self) -> Progress:
        """Create a spinner with elapsed time for long-running waits."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    def print_error(self, message: str) -> None:
        self.console.print(f"\n[red bold]Error:[/red bold] {message}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"\n[yellow bold]Warning:[/yellow bold] {message}")

    def __repr__(self) -> str:
        return "CLIReporter()"

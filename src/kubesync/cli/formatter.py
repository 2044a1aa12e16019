# src/kubesync/cli/formatter.py
from typing import List, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kubesync.sync.reconciler import SyncReport

# Initialize the Rich console for high-quality terminal output
console = Console()

STATUS_STYLES = {
    "CREATED": "green",
    "UPDATED": "cyan",
    "DELETED": "red",
    "UNCHANGED": "dim",
    "NOT_FOUND": "yellow",
}


class SyncFormatter:
    """
    SyncFormatter: renders paths, basenames and sync reports for the CLI.
    """

    def print_rows(self, title: str, rows: List[Tuple[str, str]], value_header: str):
        """Two-column table of resource slug and computed value."""
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Resource", style="white")
        table.add_column(value_header, style="cyan")
        for resource, value in rows:
            table.add_row(resource, value)
        console.print(table)

    def print_error(self, source: str, message: str):
        console.print(f"[bold red]Error in {escape(source)}:[/bold red] {escape(message)}")

    def print_sync_report(self, report: SyncReport):
        """
        Builds the summary table shown at the end of a sync pass.
        """
        table = Table(title="KubeSync Sync Report", show_lines=True, header_style="bold magenta")
        table.add_column("Spec File", style="cyan")
        table.add_column("Resource", style="white")
        table.add_column("Status", style="bold")

        for change in report.changes:
            style = STATUS_STYLES.get(change["status"], "white")
            table.add_row(
                change["path"] or "-",
                change["resource"],
                f"[{style}]{change['status']}[/{style}]",
            )
        console.print(table)

        for path in report.skipped:
            console.print(f"[yellow]Skipped unparseable spec file:[/yellow] {path}")

        counts = {}
        for change in report.changes:
            counts[change["status"]] = counts.get(change["status"], 0) + 1
        console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Action:     {report.action.value}\n"
            f"Created:    [green]{counts.get('CREATED', 0)}[/green]\n"
            f"Updated:    [cyan]{counts.get('UPDATED', 0)}[/cyan]\n"
            f"Deleted:    [red]{counts.get('DELETED', 0)}[/red]\n"
            f"Committed:  {'yes' if report.committed else 'no'}",
            border_style="dim"
        ))

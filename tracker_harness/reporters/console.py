"""Console reporter using Rich library for formatted CLI output.

Provides colorful output as the run progresses:
- A rule when each section starts
- One dim [TIME] line per HTTP call
- [PASS]/[FAIL]/[WARN] lines per step
- A summary table once the run completes
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from tracker_harness.models import ResultStatus, SectionResult, StepResult
from tracker_harness.reporters.base import Reporter
from tracker_harness.runner import RunResult

STATUS_STYLES = {
    ResultStatus.PASS: "green",
    ResultStatus.FAIL: "red",
    ResultStatus.WARN: "yellow",
}


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress timing and per-step output (only show summary)
    """

    def __init__(self, quiet: bool = False):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = Console(legacy_windows=True)
        self.quiet = quiet

    def on_section_start(self, name: str) -> None:
        if self.quiet:
            return
        self.console.print()
        self.console.print(
            Rule(f"[bold cyan]{escape(name)}[/bold cyan]", style="cyan", characters="-")
        )

    def on_request(
        self,
        method: str,
        endpoint: str,
        status: Optional[int],
        duration_ms: float,
    ) -> None:
        if self.quiet:
            return
        status_text = status if status is not None else "no response"
        self.console.print(
            f"[bright_black][TIME] {method} {escape(endpoint)} ({status_text}) "
            f"took {duration_ms:.0f}ms[/bright_black]"
        )

    def on_step_complete(self, section: str, result: StepResult) -> None:
        if self.quiet:
            return
        style = STATUS_STYLES[result.status]
        label = result.status.name
        self.console.print(
            f"[{style}][{label}] {escape(result.name)}: {escape(result.message)}[/{style}]"
        )

    def on_section_complete(self, result: SectionResult) -> None:
        if self.quiet or not result.aborted:
            return
        self.console.print(f"  [dim]Remaining {escape(result.name)} steps skipped[/dim]")

    def on_run_complete(self, result: RunResult) -> None:
        """Display a summary table of every section."""
        if not result.sections:
            self.console.print("[yellow]No results to display.[/yellow]")
            return

        self.console.print()
        self.console.print(Rule("[bold]Run Summary[/bold]", style="magenta", characters="-"))

        table = Table(
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Section", style="cyan", no_wrap=True)
        table.add_column("Pass", justify="right", no_wrap=True)
        table.add_column("Warn", justify="right", no_wrap=True)
        table.add_column("Fail", justify="right", no_wrap=True)
        table.add_column("Status", justify="center", no_wrap=True)

        for section in result.sections:
            style = STATUS_STYLES[section.status]
            table.add_row(
                escape(section.name),
                str(section.count(ResultStatus.PASS)),
                str(section.count(ResultStatus.WARN)),
                str(section.count(ResultStatus.FAIL)),
                f"[{style}]{section.status.name}[/{style}]",
            )

        self.console.print(table)
        self.console.print(
            f"All tests completed in {result.total_duration:.1f}s: "
            f"{result.count(ResultStatus.PASS)} passed, "
            f"{result.count(ResultStatus.WARN)} warned, "
            f"{result.count(ResultStatus.FAIL)} failed"
        )
        self.console.print()

    def on_fatal(self, message: str, sections: Optional[list[SectionResult]] = None) -> None:
        self.console.print(f"[bold red][FATAL] {escape(message)}[/bold red]")

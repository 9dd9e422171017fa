"""Rich UI components for the CLI.

Kept apart from the commands so tables and panels can be reused by several
commands (and left out entirely in JSON mode).
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ChecklistSummary, LintReport, Release


def print_banner(console: Console) -> None:
    """Print the welcome banner (interactive table output only)."""

    title = Text("eksup", style="bold cyan")
    subtitle = Text("EKS upgrade readiness • Checklists • Playbooks", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_lint_table(report: LintReport) -> Table:
    table = Table(title=f"Lint: {report.path or '<stdin>'}")
    table.add_column("Line", style="cyan", justify="right", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Rule", style="magenta", no_wrap=True)
    table.add_column("Message", style="white")
    for issue in report.issues:
        severity = "[red]error[/red]" if issue.severity == "error" else "[yellow]warning[/yellow]"
        table.add_row(str(issue.line) if issue.line else "-", severity, issue.rule, issue.message)
    return table


def build_summary_table(summary: ChecklistSummary) -> Table:
    table = Table(title=summary.title or "Checklist")
    table.add_column("Section", style="cyan")
    table.add_column("Done", justify="right", style="green")
    table.add_column("Total", justify="right")
    table.add_column("%", justify="right", style="bold")
    for row in summary.sections:
        indent = "  " * (row.level - 1)
        table.add_row(f"{indent}{row.title}", str(row.done), str(row.total), f"{row.percent:.1f}")
    table.add_section()
    table.add_row("Total", str(summary.done), str(summary.total), f"{summary.percent:.1f}", style="bold")
    return table


def build_releases_table(releases: dict[str, Release], supported: list[tuple[str, str]]) -> Table:
    table = Table(title="Kubernetes releases")
    table.add_column("Current", style="cyan", no_wrap=True)
    table.add_column("Target", style="green", no_wrap=True)
    table.add_column("Release notes", style="white")
    table.add_column("API removals", style="dim")
    for current, target in supported:
        release = releases.get(target)
        if release is None:
            table.add_row(current, target, "[red]missing release data[/red]", "")
            continue
        table.add_row(current, target, release.release_url, release.deprecation_url or "-")
    return table

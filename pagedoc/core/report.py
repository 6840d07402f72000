"""Render a diagnosis as a human-readable terminal report."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pagedoc.models.types import DiagnosisResult, Issue


IMPACT_COLORS = {"HIGH": "red bold", "MEDIUM": "yellow", "LOW": "cyan"}


def grade_color(score: int | None) -> str:
    if score is None:
        return "dim"
    if score >= 90:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def print_report(result: DiagnosisResult, console: Console | None = None):
    """Print the grade, headline stats and one card per issue."""
    console = console or Console()

    duration = ""
    if result.started_at and result.completed_at:
        secs = (result.completed_at - result.started_at).total_seconds()
        duration = f" in {secs:.1f}s"

    header = Text()
    header.append("\n PageDoc Diagnosis\n", style="bold")
    header.append(f" {result.url}\n", style="dim")
    if result.page_metrics.title:
        header.append(f" {result.page_metrics.title}\n", style="dim")
    header.append(f" {result.viewport} viewport{duration}\n", style="dim")
    console.print(Panel(header, border_style="blue"))

    color = grade_color(result.score)
    score_text = Text()
    score_text.append("  Grade: ", style="bold")
    score_text.append(result.grade, style=f"bold {color}")
    score_text.append(f"  ({result.score if result.score is not None else '-'}/100)", style=color)
    console.print()
    console.print(score_text)
    console.print()

    stats = Table(show_header=True, header_style="bold", padding=(0, 1))
    stats.add_column("Load", justify="right")
    stats.add_column("Page Weight", justify="right")
    stats.add_column("Blocking", justify="right")
    stats.add_column("DOM Nodes", justify="right")
    stats.add_column("Frameworks")
    stats.add_row(
        f"{result.load_time_ms / 1000:.2f}s",
        f"{result.total_bytes / (1024 * 1024):.2f} MB",
        f"{round(result.total_blocking_ms)}ms",
        str(result.page_metrics.dom_nodes),
        ", ".join(result.page_metrics.frameworks) or "—",
    )
    console.print(stats)
    console.print()

    issues = result.report.issues if result.report else []
    if not issues:
        console.print("  [green bold]Clean Bill of Health![/green bold]")
        console.print("  [dim]No performance bottlenecks detected.[/dim]\n")
    else:
        console.print(f"  Issues found: {len(issues)}\n")
        for issue in issues:
            console.print(_issue_card(issue))

    if result.errors:
        console.print(f"  [dim]Collection warnings: {len(result.errors)}[/dim]")
        for err in result.errors[:5]:
            console.print(f"    [dim]• {err[:120]}[/dim]")
        console.print()


def _issue_card(issue: Issue) -> Panel:
    style = IMPACT_COLORS.get(issue.impact.value, "white")
    body = Text()
    body.append(issue.explanation + "\n\n")
    body.append("Rx: ", style="bold")
    body.append(issue.fix + "\n")
    body.append(f"\nPotential saving: {issue.save}\n", style="dim")
    body.append(issue.technical, style="dim")

    title = Text()
    title.append(f"[{issue.impact.value}] ", style=style)
    title.append(issue.title, style="bold")
    return Panel(body, title=title, title_align="left", border_style=style.split()[0])

# Rich console output: findings grouped by file, remediation hints, summary footer.

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from secbuddy.findings.models import Finding
from secbuddy.rules.catalog import all_rules

# Every finding is a warning
WARNING_STYLE = "bold yellow"


def _get_remediation(finding: Finding) -> str | None:
    """Return the remediation hint of the rule that produced a finding, or None."""
    for rule in all_rules():
        if rule.id == finding.rule_id and rule.remediation:
            return rule.remediation
    return None


def _shorten_path(path: str | Path) -> str:
    """Show paths relative to the working directory when possible."""
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def findings_to_json(findings: Sequence[Finding]) -> str:
    """Serialize findings as a JSON array (paths as strings)."""
    return json.dumps([f.model_dump(mode="json") for f in findings], indent=2)


def print_findings(
    findings: Sequence[Finding],
    analyzed_files: Sequence[Path] | None = None,
    verbose: bool = False,
    console: Optional[Console] = None,
) -> None:
    """
    Print findings grouped by file, ordered by position.
    If verbose, also prints the remediation hint of each rule that fired.
    If analyzed_files is provided, ends with a per-file summary table.
    """
    if console is None:
        console = Console()

    if not findings:
        console.print(
            Panel(
                "[green]No issues found.[/green]",
                title="sec-buddy",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        if analyzed_files:
            _print_file_summary_table([], analyzed_files, console)
        return

    by_file: dict[str, list[Finding]] = {}
    for f in findings:
        by_file.setdefault(str(f.location.path), []).append(f)

    for path in sorted(by_file):
        file_findings = sorted(by_file[path], key=lambda x: (x.location.line, x.location.column))

        console.print()
        console.print(Panel(
            f"[bold cyan]{_shorten_path(path)}[/bold cyan]",
            box=box.SIMPLE_HEAD,
            border_style="blue",
            padding=(0, 1),
        ))

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 1),
            expand=False,
        )
        table.add_column("Line", justify="right", style="dim", width=5)
        table.add_column("Col", justify="right", style="dim", width=4)
        table.add_column("Severity", width=10)
        table.add_column("Rule", width=18)
        table.add_column("Message", style="white")

        for f in file_findings:
            loc = f.location
            table.add_row(
                str(loc.line),
                str(loc.column),
                Text(f.severity.upper(), style=WARNING_STYLE),
                Text(f"[{f.rule_id}]", style="dim"),
                Text(f.message),
            )

        console.print(table)

        if verbose:
            seen_rules: set[str] = set()
            for f in file_findings:
                if f.rule_id in seen_rules:
                    continue
                seen_rules.add(f.rule_id)
                rem = _get_remediation(f)
                if rem:
                    console.print(f"  [dim]\\[Fix][/dim] \\[{f.rule_id}] {rem}")
            console.print()

    if analyzed_files:
        _print_file_summary_table(findings, analyzed_files, console)

    _print_summary(findings, console)


def _print_file_summary_table(
    findings: Sequence[Finding],
    analyzed_files: Sequence[Path],
    console: Console,
) -> None:
    """Print a table of clean vs flagged files."""
    by_path: dict[str, int] = {}
    for f in findings:
        key = str(f.location.path)
        by_path[key] = by_path.get(key, 0) + 1

    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=10)
    table.add_column("Findings", justify="right", width=8)

    for p in sorted(analyzed_files, key=lambda p: (str(p) not in by_path, str(p))):
        count = by_path.get(str(p), 0)
        status = Text("FLAGGED", style="bold yellow") if count else Text("OK", style="bold green")
        table.add_row(_shorten_path(p), status, str(count))

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))


def _print_summary(findings: Sequence[Finding], console: Console) -> None:
    by_rule: dict[str, int] = {}
    for f in findings:
        by_rule[f.rule_id] = by_rule.get(f.rule_id, 0) + 1

    total = len(findings)
    summary_parts = [f"[bold]{total} finding{'s' if total != 1 else ''}[/bold]"]
    for rule_id in sorted(by_rule):
        summary_parts.append(f"{by_rule[rule_id]} {rule_id}")

    console.print()
    console.print(
        Panel(
            " | ".join(summary_parts),
            title="Summary",
            border_style="yellow",
            box=box.ROUNDED,
        )
    )

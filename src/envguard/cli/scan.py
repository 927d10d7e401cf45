"""CLI command: envguard scan [directory] — env usage, secrets and .env reconciliation."""

from __future__ import annotations

import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envguard.cli.options import build_config, split_values
from envguard.report.json_report import scan_report_to_dict
from envguard.report.score import compute_health_score
from envguard.scanner.engine import ScanEngine
from envguard.scanner.models import Framework, ScanReport, Severity

console = Console(stderr=True)

_SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

_SEVERITY_ORDER = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--env", help="Declaration file to compare against (default .env).")
@click.option("--example", help="Example declaration file (default .env.example).")
@click.option("--ignore", multiple=True, help="Variable names to ignore.")
@click.option("--ignore-regex", multiple=True, help="Regexes of variable names to ignore.")
@click.option("--ignore-urls", multiple=True, help="URL substrings that are never flagged.")
@click.option("--include", multiple=True, help="Extra file globs to scan.")
@click.option("--exclude", "-e", multiple=True, help="File or directory globs to skip.")
@click.option("--secrets/--no-secrets", default=None, help="Run the secret detector.")
@click.option("--t3env/--no-t3env", default=None, help="Check usages against a t3-env schema.")
@click.option("--allow-duplicates", is_flag=True, default=None, help="Do not report duplicate keys.")
@click.option("--strict", is_flag=True, default=None, help="Fail on any warning.")
@click.option("--ci", is_flag=True, default=None, help="Fail when the declaration file is unreadable.")
@click.option("--json", "as_json", is_flag=True, help="Print the JSON report to stdout.")
@click.pass_context
def scan(
    ctx: click.Context,
    directory: str,
    env: str | None,
    example: str | None,
    ignore: tuple[str, ...],
    ignore_regex: tuple[str, ...],
    ignore_urls: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    secrets: bool | None,
    t3env: bool | None,
    allow_duplicates: bool | None,
    strict: bool | None,
    ci: bool | None,
    as_json: bool,
) -> None:
    """Scan source code for environment variable usage and hardcoded secrets."""
    config = build_config(
        ctx,
        directory,
        {
            "env": env,
            "example": example,
            "ignore": split_values(ignore),
            "ignore_regex": list(ignore_regex),
            "ignore_urls": split_values(ignore_urls),
            "include": split_values(include),
            "exclude": split_values(exclude),
            "secrets": secrets,
            "t3env": t3env,
            "allow_duplicates": allow_duplicates,
            "strict": strict,
            "ci": ci,
        },
    )

    if not as_json:
        console.print(f"[bold]envguard[/bold] scanning [cyan]{escape(directory)}[/cyan]\n")

    report = ScanEngine(config=config).scan(directory)

    if as_json:
        click.echo(json.dumps(scan_report_to_dict(report), indent=2))
    else:
        _print_report(report)

    if _should_fail(report, config.strict):
        sys.exit(1)


def _should_fail(report: ScanReport, strict: bool) -> bool:
    if report.error is not None and report.error.should_exit:
        return True
    if report.missing:
        return True
    if any(s.severity == Severity.HIGH for s in report.secrets):
        return True
    return strict and report.stats.warnings_count > 0


def _print_report(report: ScanReport) -> None:
    if report.error is not None:
        console.print(f"[red]{escape(report.error.message)}[/red]")

    if report.framework is not Framework.UNKNOWN:
        console.print(f"Framework: [cyan]{report.framework.value}[/cyan]")
    if report.compared_against:
        console.print(
            f"Compared against [cyan]{escape(report.compared_against)}[/cyan] "
            f"({report.total_env_variables} variables)\n"
        )

    _print_secrets(report)

    if report.missing:
        table = Table(title="Missing variables")
        table.add_column("Variable", style="bold red")
        table.add_column("Used in", style="cyan")
        for variable in report.missing:
            locations = [f"{u.file}:{u.line}" for u in report.used if u.variable == variable]
            table.add_row(escape(variable), escape(", ".join(locations[:3])))
        console.print(table)

    if report.unused:
        console.print(f"[yellow]Unused:[/yellow] {escape(', '.join(report.unused))}")

    framework_warnings = [*report.framework_warnings, *report.t3env_warnings]
    if framework_warnings:
        table = Table(title="Framework warnings")
        table.add_column("Variable", style="bold")
        table.add_column("File", style="cyan")
        table.add_column("Line", justify="right")
        table.add_column("Reason")
        table.add_column("Framework")
        for w in framework_warnings:
            table.add_row(
                escape(w.variable), escape(w.file), str(w.line), escape(w.reason), w.framework.value
            )
        console.print(table)

    for name, dups in (("env", report.duplicates_env), ("example", report.duplicates_example)):
        for d in dups:
            console.print(f"[yellow]Duplicate[/yellow] {escape(d.key)} ({d.count}x in {name} file)")

    for w in report.naming_warnings:
        console.print(
            f"[yellow]Inconsistent naming[/yellow] {escape(w.key1)} / {escape(w.key2)} "
            f"-> {escape(w.suggestion)}"
        )
    for w in report.uppercase_warnings:
        console.print(f"[yellow]Not uppercase[/yellow] {escape(w.key)} -> {escape(w.suggestion)}")
    for w in report.expire_warnings:
        when = "expired" if w.days_left < 0 else f"expires in {w.days_left} day(s)"
        console.print(f"[yellow]{escape(w.key)}[/yellow] {when} ({escape(w.date)})")
    for w in report.example_warnings:
        color = _SEVERITY_COLORS[w.severity]
        console.print(f"[{color}]Example secret[/{color}] {escape(w.key)}: {escape(w.reason)}")
    for u in report.logged:
        console.print(f"[red]Logged[/red] {escape(u.variable)} at {escape(u.file)}:{u.line}")
    if report.stats.files_scanned and not report.has_csp:
        console.print("[yellow]CSP is missing[/yellow]: no Content-Security-Policy detected in the project")

    _print_summary(report)


def _print_secrets(report: ScanReport) -> None:
    if not report.secrets:
        return

    table = Table(title="Potential secrets", show_lines=False)
    table.add_column("Severity", style="bold", width=8)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Message")
    table.add_column("Snippet", max_width=50)

    ordered = sorted(report.secrets, key=lambda s: (_SEVERITY_ORDER[s.severity], s.file, s.line))
    for s in ordered:
        color = _SEVERITY_COLORS[s.severity]
        table.add_row(
            f"[{color}]{s.severity.value}[/{color}]",
            escape(s.file),
            str(s.line),
            escape(s.message),
            escape(s.snippet[:50]),
        )
    console.print(table)


def _print_summary(report: ScanReport) -> None:
    stats = report.stats
    console.print(
        f"\nScanned {stats.files_scanned} files "
        f"({stats.files_skipped} skipped) "
        f"in {stats.duration:.2f}s"
    )
    console.print(
        f"{stats.total_usages} usages of {stats.unique_variables} variables, "
        f"{stats.warnings_count} warning(s)"
    )
    score = compute_health_score(report)
    color = "green" if score >= 80 else "yellow" if score >= 50 else "red"
    console.print(f"Health score: [{color}]{score}[/{color}]/100")

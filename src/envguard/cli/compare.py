"""CLI command: envguard compare — check every .env* file against its example."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envguard.cli.options import build_config, split_values
from envguard.compare import ComparisonResult, compare_files
from envguard.envfile.discovery import discover_env_files, pair_with_example
from envguard.report.json_report import comparison_to_dict

console = Console(stderr=True)


@click.command()
@click.option("--root", type=click.Path(exists=True, file_okay=False), default=".", help="Project root.")
@click.option("--env", help="Declaration file (default .env).")
@click.option("--example", help="Example file (default .env.example).")
@click.option("--ignore", multiple=True, help="Keys to ignore.")
@click.option("--ignore-regex", multiple=True, help="Regexes of keys to ignore.")
@click.option(
    "--only",
    multiple=True,
    help="Restrict checks to categories (missing, extra, empty, mismatch, "
    "duplicate, gitignore, naming, expiration).",
)
@click.option("--check-values", is_flag=True, default=None, help="Compare values, not just keys.")
@click.option("--allow-duplicates", is_flag=True, default=None, help="Do not report duplicate keys.")
@click.option("--strict", is_flag=True, default=None, help="Fail on any warning.")
@click.option("--ci", is_flag=True, default=None, help="Fail when a file is unreadable.")
@click.option("--json", "as_json", is_flag=True, help="Print the JSON result to stdout.")
@click.pass_context
def compare(
    ctx: click.Context,
    root: str,
    env: str | None,
    example: str | None,
    ignore: tuple[str, ...],
    ignore_regex: tuple[str, ...],
    only: tuple[str, ...],
    check_values: bool | None,
    allow_duplicates: bool | None,
    strict: bool | None,
    ci: bool | None,
    as_json: bool,
) -> None:
    """Compare each .env* file with its .env.example counterpart."""
    config = build_config(
        ctx,
        root,
        {
            "env": env,
            "example": example,
            "ignore": split_values(ignore),
            "ignore_regex": list(ignore_regex),
            "only": split_values(only),
            "check_values": check_values,
            "allow_duplicates": allow_duplicates,
            "strict": strict,
            "ci": ci,
        },
    )

    root_path = Path(root)
    discovery = discover_env_files(root_path, config.env, config.example)
    primary_example = root_path / discovery.primary_example
    if not primary_example.is_file():
        raise click.ClickException(f"Example file not found: {primary_example}")

    results: list[ComparisonResult] = []
    for pair in pair_with_example(discovery):
        try:
            results.append(compare_files(pair.env_path, pair.example_path, config, root=root_path))
        except ValueError as e:
            raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps([comparison_to_dict(r) for r in results], indent=2))
    else:
        for result in results:
            _print_result(result)

    if any(r.has_errors(config.strict) for r in results):
        sys.exit(1)


def _print_result(result: ComparisonResult) -> None:
    console.print(
        f"[bold]envguard[/bold] comparing [cyan]{escape(result.env_name)}[/cyan] "
        f"with [cyan]{escape(result.example_name)}[/cyan]\n"
    )
    if result.error is not None:
        console.print(f"[red]{escape(result.error.message)}[/red]\n")
        return

    if result.missing or result.extra or result.empty:
        table = Table(title="Keys")
        table.add_column("Issue", style="bold")
        table.add_column("Key", style="cyan")
        for key in result.missing:
            table.add_row("[red]missing[/red]", escape(key))
        for key in result.extra:
            table.add_row("[yellow]extra[/yellow]", escape(key))
        for key in result.empty:
            table.add_row("[yellow]empty[/yellow]", escape(key))
        console.print(table)

    for m in result.value_mismatches:
        console.print(
            f"[yellow]Value mismatch[/yellow] {escape(m.key)}: "
            f"expected {escape(repr(m.expected))}, got {escape(repr(m.actual))}"
        )
    for name, dups in (("env", result.duplicates_env), ("example", result.duplicates_example)):
        for d in dups:
            console.print(f"[yellow]Duplicate[/yellow] {escape(d.key)} ({d.count}x in {name} file)")
    if result.gitignore_issue is not None:
        console.print(
            f"[red]{escape(result.env_name)} is not git-ignored[/red] ({result.gitignore_issue.value})"
        )
    for w in result.naming_warnings:
        console.print(
            f"[yellow]Inconsistent naming[/yellow] {escape(w.key1)} / {escape(w.key2)} "
            f"-> {escape(w.suggestion)}"
        )
    for w in result.expire_warnings:
        when = "expired" if w.days_left < 0 else f"expires in {w.days_left} day(s)"
        console.print(f"[yellow]{escape(w.key)}[/yellow] {when} ({escape(w.date)})")

    if result.ok:
        console.print("[green]All keys match.[/green]")
    console.print()

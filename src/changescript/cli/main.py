"""CLI entry point for changescript.

Invoked as::

    changescript [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m changescript.cli.main

Commands
--------
fmt         Print a script in canonical form
holes       List the holes a script still needs
validate    Report forward references, duplicates and pending input
run         Resolve a script and execute it with the dry-run driver
revert      Dry-run a script and print the script that undoes it
diff        Compare two scripts statement by statement
parse       Dump the parsed tree to JSON or YAML
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from changescript.ast.nodes import Script

console = Console()
err_console = Console(stderr=True)


def _read_source(path: str) -> str:
    """Read a script file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _parse_or_exit(source: str, path: str) -> "Script":
    """Parse script source, printing errors and exiting on failure."""
    from changescript.lexer import LexError
    from changescript.parser import ParseErrorCollection, parse

    try:
        return parse(source)
    except LexError as exc:
        err_console.print(f"[red]Lex error[/red] in {path}: {exc}")
        sys.exit(1)
    except ParseErrorCollection as exc:
        err_console.print(f"[red]Parse errors[/red] in {path}:")
        for error in exc.errors:
            err_console.print(f"  {error}")
        sys.exit(1)


def _load_script(path: str) -> "Script":
    return _parse_or_exit(_read_source(path), path)


def _collect_fills(fill_pairs: tuple[str, ...], fills_file: str | None) -> dict[str, Any]:
    """Merge fills from ``--fills FILE`` then ``--fill`` pairs."""
    from changescript.fills import FillError, load_fills, merge_fills, parse_fill_args

    try:
        from_file = load_fills(fills_file) if fills_file else {}
        from_args = parse_fill_args(fill_pairs)
    except FillError as exc:
        raise click.BadParameter(str(exc)) from exc
    return merge_fills(from_file, from_args)


def _severity_color(severity_name: str) -> str:
    """Map a DiagnosticSeverity name to a Rich color string."""
    colors = {
        "ERROR": "red",
        "WARNING": "yellow",
        "INFORMATION": "blue",
        "HINT": "dim",
    }
    return colors.get(severity_name, "white")


def _fill_options(func: Any) -> Any:
    func = click.option(
        "--fills",
        "fills_file",
        type=click.Path(exists=False),
        default=None,
        help="YAML file mapping hole names to values",
    )(func)
    func = click.option(
        "--fill",
        "fill_pairs",
        multiple=True,
        metavar="NAME=VALUE",
        help="Value for a hole; may be repeated",
    )(func)
    return func


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="changescript")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every resolution step")
def cli(verbose: bool) -> None:
    """Resolve, execute, render and diff infrastructure change scripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from changescript import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]changescript[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# fmt command
# ---------------------------------------------------------------------------


@cli.command(name="fmt")
@click.argument("file", type=click.Path(exists=False))
@click.option("--check", is_flag=True, default=False, help="Check if file is already canonical")
def fmt_command(file: str, check: bool) -> None:
    """Print a script in canonical form.

    FILE is the path to the script. Comments and blank lines are dropped
    and command operands are sorted.
    """
    source = _read_source(file)
    script = _parse_or_exit(source, file)
    formatted = f"{script}\n" if len(script) else ""

    if check:
        if formatted == source:
            console.print(f"[green]OK[/green] {file} — already canonical")
            sys.exit(0)
        console.print(f"[yellow]NEEDS FORMATTING[/yellow] {file}")
        sys.exit(1)

    click.echo(formatted, nl=False)


# ---------------------------------------------------------------------------
# holes command
# ---------------------------------------------------------------------------


@cli.command(name="holes")
@click.argument("file", type=click.Path(exists=False))
@_fill_options
def holes_command(file: str, fill_pairs: tuple[str, ...], fills_file: str | None) -> None:
    """List the holes FILE still needs after applying the given fills."""
    script = _load_script(file)
    script.process_holes(_collect_fills(fill_pairs, fills_file))

    if not script.get_holes():
        console.print(f"[green]OK[/green] {file} — no holes left")
        return

    table = Table(title=f"Holes: {file}", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Statement")
    table.add_column("Needs")
    for index, stat in enumerate(script.statements, start=1):
        holes = stat.get_holes()
        if holes:
            table.add_row(str(index), escape(str(stat)), ", ".join(holes))
    console.print(table)


# ---------------------------------------------------------------------------
# validate command
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("file", type=click.Path(exists=False))
@click.option("--strict", is_flag=True, default=False, help="Treat warnings as errors")
def validate_command(file: str, strict: bool) -> None:
    """Parse and validate a script.

    FILE is the path to the script to validate.
    """
    from changescript.validator import Validator

    script = _load_script(file)
    diagnostics = Validator(strict=strict).validate(script)

    if not diagnostics:
        console.print(f"[green]OK[/green] {file} — no issues found")
        sys.exit(0)

    errors = [d for d in diagnostics if d.is_error]
    warnings = [d for d in diagnostics if not d.is_error]

    table = Table(title=f"Validation: {file}", show_lines=True)
    table.add_column("Severity", style="bold", min_width=10)
    table.add_column("Code", min_width=6)
    table.add_column("Stmt", justify="right")
    table.add_column("Message")

    for d in diagnostics:
        color = _severity_color(d.severity.name)
        table.add_row(
            f"[{color}]{d.severity.name}[/{color}]",
            d.code,
            str(d.index),
            d.message + (f"\n[dim]hint: {d.suggestion}[/dim]" if d.suggestion else ""),
        )

    console.print(table)
    console.print(
        f"\n[bold]Summary:[/bold] {len(errors)} error(s), {len(warnings)} other finding(s)"
    )

    if errors:
        sys.exit(1)


# ---------------------------------------------------------------------------
# run command
# ---------------------------------------------------------------------------


@cli.command(name="run")
@click.argument("file", type=click.Path(exists=False))
@_fill_options
def run_command(file: str, fill_pairs: tuple[str, ...], fills_file: str | None) -> None:
    """Resolve FILE and execute it with the dry-run driver.

    Nothing is changed remotely: every command is answered with a
    fabricated identifier so references can be followed end to end.
    """
    from changescript.runner import DryRunDriver, Runner

    script = _load_script(file)
    report = Runner(DryRunDriver()).run(script, _collect_fills(fill_pairs, fills_file))

    table = Table(title=f"Dry run: {file}", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Statement")
    table.add_column("Status")
    pending = {id(cmd) for cmd in report.pending}
    for index, stat in enumerate(report.script.statements, start=1):
        cmd = stat.command
        if cmd is None:
            status = "[dim]value[/dim]"
        elif cmd.error is not None:
            status = f"[red]failed: {escape(str(cmd.error))}[/red]"
        elif id(cmd) in pending:
            status = "[yellow]pending[/yellow]"
        else:
            status = f"[green]{escape(str(cmd.result))}[/green]"
        table.add_row(str(index), escape(str(stat)), status)

    console.print(table)
    console.print(f"\n[bold]Summary:[/bold] {report.summary()}")

    if not report.ok:
        sys.exit(1)


# ---------------------------------------------------------------------------
# revert command
# ---------------------------------------------------------------------------


@cli.command(name="revert")
@click.argument("file", type=click.Path(exists=False))
@_fill_options
def revert_command(file: str, fill_pairs: tuple[str, ...], fills_file: str | None) -> None:
    """Dry-run FILE and print the script that would undo it."""
    from changescript.runner import DryRunDriver, Runner, is_revertible, revert

    script = _load_script(file)
    report = Runner(DryRunDriver()).run(script, _collect_fills(fill_pairs, fills_file))

    if not is_revertible(report.script):
        err_console.print(f"[yellow]Warning:[/yellow] {file} cannot be fully reverted")
    click.echo(str(revert(report.script)))


# ---------------------------------------------------------------------------
# diff command
# ---------------------------------------------------------------------------


@cli.command(name="diff")
@click.argument("old", type=click.Path(exists=False))
@click.argument("new", type=click.Path(exists=False))
@_fill_options
def diff_command(
    old: str, new: str, fill_pairs: tuple[str, ...], fills_file: str | None
) -> None:
    """Compare two scripts statement by statement.

    OLD and NEW are script paths. Fills are applied to both before
    comparing.
    """
    from changescript.diff import diff

    fills = _collect_fills(fill_pairs, fills_file)
    old_script = _load_script(old)
    new_script = _load_script(new)
    old_script.process_holes(fills)
    new_script.process_holes(fills)

    changes = diff(old_script, new_script)

    if not changes:
        console.print("[green]No changes between the two scripts.[/green]")
        sys.exit(0)

    console.print(f"[bold]Diff:[/bold] {old} → {new}\n")
    for change in changes:
        line = str(change)
        if line.startswith("[+]"):
            console.print(f"[green]{escape(line)}[/green]", highlight=False)
        elif line.startswith("[-]"):
            console.print(f"[red]{escape(line)}[/red]", highlight=False)
        else:
            console.print(f"[yellow]{escape(line)}[/yellow]", highlight=False)

    console.print(f"\n[bold]{len(changes)}[/bold] change(s) total")


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Tree output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def parse_command(file: str, output_format: str, output: str | None) -> None:
    """Parse a script and dump its tree.

    FILE is the path to the script to parse.
    """
    from changescript.ast import AstSerializer

    script = _load_script(file)
    serializer = AstSerializer()

    if output_format == "json":
        text = serializer.to_json(script, indent=2)
        lang = "json"
    else:
        text = serializer.to_yaml(script)
        lang = "yaml"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Tree written to[/green] {output}")
    else:
        console.print(Syntax(text, lang, line_numbers=True))


if __name__ == "__main__":
    cli()

"""qortex-metrics-lint: typer entry point for the literal name checker."""

from __future__ import annotations

from pathlib import Path

import typer

from qortex_metrics.lint import lint_paths

app = typer.Typer(
    name="qortex-metrics-lint",
    help="Check literal metric names, labels and quantiles before deploying.",
    no_args_is_help=True,
)


@app.command()
def lint(
    paths: list[Path] = typer.Argument(..., help="Files or directories to scan"),
) -> None:
    """Report every literal Name/Label/Suffix/Quantile that would fail validation.

    Examples:
        qortex-metrics-lint src/
        qortex-metrics-lint app/metrics.py
    """
    missing = [p for p in paths if not p.exists()]
    if missing:
        typer.echo(f"Error: path not found: {missing[0]}", err=True)
        raise typer.Exit(2)

    try:
        issues = lint_paths(paths)
    except SyntaxError as e:
        typer.echo(f"Error: could not parse {e.filename}: {e.msg}", err=True)
        raise typer.Exit(2)

    for issue in issues:
        typer.echo(str(issue))
    if issues:
        typer.echo(f"{len(issues)} invalid literal(s) found.", err=True)
        raise typer.Exit(1)
    typer.echo("No invalid literals found.")


def main() -> None:
    """Entry point for qortex-metrics-lint."""
    app()

"""Authoring CLI: registry health before publishing, and ad-hoc verification runs."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from exverify.core.config import VerifierConfig, load_verifier_config
from exverify.engine.extractor import DeclarationKind, brace_balance, extract_segment
from exverify.registry.bootstrap import DEFAULT_CONFIG_PATH, build_registry
from exverify.registry.module_registry import ModuleRegistry

app = typer.Typer(help="Inspect and run exercise verification modules.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


def _extend_search_path(paths: List[Path]) -> None:
    for entry in [Path.cwd(), *paths]:
        resolved = str(entry.expanduser().resolve())
        if resolved not in sys.path:
            sys.path.insert(0, resolved)


def _load_config(config_path: Optional[Path]) -> VerifierConfig:
    if config_path is not None:
        return load_verifier_config(config_path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_verifier_config(DEFAULT_CONFIG_PATH)
    return VerifierConfig()


def _registry(config_path: Optional[Path], package: Optional[str], search_path: List[Path]) -> ModuleRegistry:
    _extend_search_path(search_path)
    try:
        config = _load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Invalid verifier config: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    return build_registry(config, root_package_override=package)


CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Verifier YAML (defaults to config/verifier.yaml when present).")
PACKAGE_OPTION = typer.Option(None, "--package", "-p", help="Dotted exercise package overriding the config.")
SEARCH_PATH_OPTION = typer.Option([], "--search-path", help="Extra directories to import exercise content from.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show registry debug logging.")


@app.command()
def stats(
    config_path: Optional[Path] = CONFIG_OPTION,
    package: Optional[str] = PACKAGE_OPTION,
    search_path: List[Path] = SEARCH_PATH_OPTION,
    fail_on_unreachable: bool = typer.Option(
        False, "--fail-on-unreachable", help="Exit non-zero when a registered exercise has no loadable module."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print stats as JSON instead of a table."),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Discover exercise content and report registry statistics."""

    _configure_logging(verbose)
    registry = _registry(config_path, package, search_path)
    unreachable = registry.unreachable()
    summary = registry.stats()

    if as_json:
        typer.echo(json.dumps({**summary.to_dict(), "unreachable": unreachable}, indent=2))
    else:
        table = Table(title="Verification Registry", show_header=True)
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("registered", str(summary.total_registered))
        table.add_row("loaded", str(summary.total_loaded))
        table.add_row("cache hits", str(summary.cache_hits))
        table.add_row("cache misses", str(summary.cache_misses))
        for category, count in summary.categories.items():
            table.add_row(f"category: {category}", str(count))
        console.print(table)
        for exercise_id in unreachable:
            console.print(f"[bold red]unreachable[/bold red] {exercise_id}")

    if fail_on_unreachable and unreachable:
        raise typer.Exit(code=1)
    if not as_json and not unreachable:
        console.print("[green]All registered exercises are verifiable.[/green]")


@app.command()
def check(
    exercise_id: str = typer.Argument(..., help="Exercise id, e.g. react-hooks/04-custom-hooks."),
    blob_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Compiled code to verify."),
    config_path: Optional[Path] = CONFIG_OPTION,
    package: Optional[str] = PACKAGE_OPTION,
    search_path: List[Path] = SEARCH_PATH_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the result set as JSON."),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run one exercise's verification module against a compiled blob."""

    _configure_logging(verbose)
    registry = _registry(config_path, package, search_path)
    try:
        module = registry.resolve(exercise_id)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    results = module.run(blob_file.read_text(encoding="utf-8"))
    if as_json:
        typer.echo(json.dumps(results.to_list(), indent=2))
    else:
        if not module.available:
            console.print(f"[yellow]No verification available for {exercise_id}[/yellow]")
        table = Table(title=f"{module.title}", show_header=True)
        table.add_column("Rule")
        table.add_column("Status", justify="center")
        table.add_column("Message")
        for result in results:
            style = "green" if result.passed else "bold red"
            table.add_row(result.name, result.status.value, result.message or "", style=style)
        console.print(table)

    if results.failed:
        raise typer.Exit(code=1)


@app.command()
def extract(
    blob_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Compiled code to search."),
    name: str = typer.Argument(..., help="Declaration name."),
    kind: Optional[DeclarationKind] = typer.Option(None, "--kind", case_sensitive=False, help="Restrict the declaration shape."),
) -> None:
    """Show the segment the extractor finds for NAME (useful when writing rules)."""

    try:
        segment = extract_segment(blob_file.read_text(encoding="utf-8"), name, kind)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    if not segment.found:
        console.print(f"[yellow]{name} not found[/yellow]")
        raise typer.Exit(code=1)
    console.print(
        f"[bold]{name}[/bold] via {segment.strategy.value} "
        f"[{segment.start}:{segment.end}] balance={brace_balance(segment.text)}"
    )
    console.print(segment.text, markup=False, highlight=False)


if __name__ == "__main__":
    app()

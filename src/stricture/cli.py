"""CLI interface using Typer."""

import os
import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from stricture import __version__
from stricture.checks import (
  CheckNotFoundError,
  CheckRegistry,
  ContractViolationError,
  get_all_checks,
)
from stricture.config import load_config
from stricture.filters import FilterError
from stricture.history import GitError
from stricture.output import get_formatter
from stricture.run import run_checks
from stricture.sources import FileError

app = typer.Typer(
  name="stricture",
  help="Rule checks for C# sources and git history",
  no_args_is_help=False,
)

console = Console()
err_console = Console(stderr=True)


def _is_debug() -> bool:
  return os.environ.get("STRICTURE_DEBUG", "").lower() in ("1", "true", "yes")


def version_callback(value: bool) -> None:
  if value:
    console.print(f"stricture {__version__}")
    raise typer.Exit()


def list_callback(value: bool) -> None:
  if value:
    CheckRegistry.load_all()
    for check in get_all_checks():
      console.print(f"{check.id}  {check.name}")
    raise typer.Exit()


@app.command()
def main(
  paths: Optional[list[str]] = typer.Argument(
    None,
    help="Files, directories or glob patterns to check (e.g., src/**/*.cs)",
  ),
  history: bool = typer.Option(
    False, "--history", "-g", help="Check commits of the current branch"
  ),
  repo: Path = typer.Option(None, "--repo", help="Repository path for --history"),
  check: Optional[list[str]] = typer.Option(
    None, "--check", "-k", help="Check id to run (repeatable, default: all)"
  ),
  ignore_path: Optional[list[str]] = typer.Option(
    None, "--ignore-path", help="Regex of file paths to ignore (repeatable)"
  ),
  ignore_namespace: Optional[list[str]] = typer.Option(
    None, "--ignore-namespace", help="Regex of namespaces to ignore (repeatable)"
  ),
  format_type: str = typer.Option(
    None, "--format", help="Output format: terminal, plain, json"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Show full traceback on errors"),
  list_all: bool = typer.Option(
    None, "--list", callback=list_callback, is_eager=True, help="List available checks"
  ),
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Check source files and commit history against the registered rules.

  Exits with status 1 when any check reports an error.
  """
  show_traceback = debug or _is_debug()

  try:
    settings = load_config(config)
    output_format = format_type or settings.format
    formatter = get_formatter(output_format)

    report = run_checks(
      paths=paths,
      history=history,
      repo=repo,
      checks=check,
      ignore_paths=ignore_path,
      ignore_namespaces=ignore_namespace,
      config_path=config,
      output_format=output_format,
      settings=settings,
    )

    output = formatter.format(report)
    if output:
      console.print(output, markup=False, highlight=False, soft_wrap=True)

  except (CheckNotFoundError, FileError, FilterError, GitError, FileNotFoundError) as e:
    err_console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1) from None
  except ContractViolationError as e:
    err_console.print(f"[red]Internal error:[/red] {e}")
    if show_traceback:
      err_console.print(traceback.format_exc())
    raise typer.Exit(1) from None
  except Exception as e:
    err_console.print(f"[red]Error:[/red] {e}")
    if show_traceback:
      err_console.print("\n[dim]Traceback:[/dim]")
      err_console.print(traceback.format_exc())
    raise typer.Exit(1) from None

  if report.has_errors:
    raise typer.Exit(1)


if __name__ == "__main__":
  app()

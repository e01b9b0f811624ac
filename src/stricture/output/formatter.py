"""Output formatting for check reports."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from stricture.models import CheckReport


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, report: CheckReport) -> str:
    """Format a check report for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter.

  Messages are already rendered by the checks, possibly with ANSI
  styles, so they are printed as-is.
  """

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, report: CheckReport) -> str:
    self._print_errors(report)
    self._print_summary(report)
    return ""

  def _print_errors(self, report: CheckReport) -> None:
    for error in report.errors:
      self.console.print(Text.from_ansi(error.message))
      self.console.print()

  def _print_summary(self, report: CheckReport) -> None:
    style = "red" if report.has_errors else "green"
    self.console.print(Panel(
      report.summary,
      title="[bold]stricture[/bold]",
      border_style=style,
    ))


class PlainFormatter(OutputFormatter):
  """Rendered messages separated by blank lines, then the summary."""

  def format(self, report: CheckReport) -> str:
    blocks = [error.message for error in report.errors]
    blocks.append(report.summary)
    return "\n\n".join(blocks)


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, report: CheckReport) -> str:
    data = {
      "summary": report.summary,
      "errors": [
        {
          "check": e.check_id,
          "path": e.path,
          "commit": e.commit_id,
          "message": Text.from_ansi(e.message).plain,
        }
        for e in report.errors
      ],
    }
    return json.dumps(data, indent=2)


def get_formatter(format_type: str) -> OutputFormatter:
  """Get formatter by type name."""
  formatters = {
    "terminal": TerminalFormatter,
    "plain": PlainFormatter,
    "json": JsonFormatter,
  }
  formatter_class = formatters.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()

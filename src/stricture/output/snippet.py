"""Compiler-style rendering of annotated source snippets."""

import io
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Sequence

from rich.console import Console
from rich.text import Text

_ERROR_STYLE = "bold red"
_GUTTER_STYLE = "bold blue"
_HELP_STYLE = "bold cyan"


@dataclass(frozen=True)
class Annotation:
  """A labelled byte range inside a snippet's source."""

  span: range
  label: str


@dataclass(frozen=True)
class Snippet:
  """Source text with one annotated region.

  With `fold` set only the annotated lines are shown.
  """

  source: str
  origin: str
  annotation: Annotation
  fold: bool = True


@dataclass(frozen=True)
class Message:
  """An error title, its snippets, and an optional help footer."""

  title: Text
  snippets: Sequence[Snippet] = field(default_factory=list)
  footer: Text | None = None


class _LineIndex:
  """Maps byte offsets of a source text to lines and columns."""

  def __init__(self, source: str):
    self._data = source.encode("utf-8")
    self._starts = [0]
    for i, byte in enumerate(self._data):
      if byte == 0x0A:
        self._starts.append(i + 1)

  def __len__(self) -> int:
    return len(self._starts)

  def line_of(self, offset: int) -> int:
    """0-based line containing the byte at `offset`."""
    return max(bisect_right(self._starts, offset) - 1, 0)

  def column_of(self, offset: int) -> int:
    """0-based character column of `offset` in its line."""
    start = self._starts[self.line_of(offset)]
    return len(self._data[start:offset].decode("utf-8", errors="replace"))

  def width_until(self, line: int, offset: int) -> int:
    """Characters from the start of `line` up to `offset`."""
    start = self._starts[line]
    return len(self._data[start:max(offset, start)].decode("utf-8", errors="replace"))

  def line_text(self, line: int) -> str:
    start = self._starts[line]
    end = self._starts[line + 1] if line + 1 < len(self._starts) else len(self._data)
    return self._data[start:end].decode("utf-8", errors="replace").rstrip("\r\n")


class SnippetRenderer:
  """Renders a Message into a display string.

  Example output:

    error: expected postfix Async for method that returns Task
     --> src/Service.cs:3:17
      |
    3 |     public Task Load() { }
      |                 ^^^^ expected postfix Async for method that returns Task
      |
      = help: consider LoadAsync
  """

  def __init__(self, styled: bool = False):
    self.styled = styled

  def render(self, message: Message) -> str:
    text = Text()
    text.append("error", style=_ERROR_STYLE)
    text.append(": ", style="bold")
    text.append_text(message.title)

    for i, snippet in enumerate(message.snippets):
      is_last = i == len(message.snippets) - 1
      text.append("\n")
      text.append_text(
        self._render_snippet(snippet, message.footer if is_last else None)
      )

    if not message.snippets and message.footer is not None:
      text.append("\n")
      text.append_text(self._render_footer(message.footer, ""))

    return self._export(text)

  def _render_snippet(self, snippet: Snippet, footer: Text | None) -> Text:
    index = _LineIndex(snippet.source)
    span = snippet.annotation.span
    last_offset = span.stop - 1 if span.stop > span.start else span.start
    first_line = index.line_of(span.start)
    last_line = index.line_of(last_offset)

    shown = range(first_line, last_line + 1) if snippet.fold else range(len(index))
    width = len(str(shown[-1] + 1))
    pad = " " * width

    text = Text()
    text.append(f"{pad}--> ", style=_GUTTER_STYLE)
    text.append(
      f"{snippet.origin}:{first_line + 1}:{index.column_of(span.start) + 1}\n"
    )
    text.append(f"{pad} |\n", style=_GUTTER_STYLE)

    for line in shown:
      line_text = index.line_text(line)
      text.append(f"{line + 1:>{width}} | ", style=_GUTTER_STYLE)
      text.append(f"{line_text}\n")

      if not first_line <= line <= last_line:
        continue

      start_col = index.column_of(span.start) if line == first_line else 0
      end_col = index.width_until(line, span.stop) if line == last_line else len(line_text)
      text.append(f"{pad} | ", style=_GUTTER_STYLE)
      text.append(" " * start_col)
      text.append("^" * max(end_col - start_col, 1), style=_ERROR_STYLE)
      if line == last_line and snippet.annotation.label:
        text.append(f" {snippet.annotation.label}", style=_ERROR_STYLE)
      text.append("\n")

    text.append(f"{pad} |", style=_GUTTER_STYLE)
    if footer is not None:
      text.append("\n")
      text.append_text(self._render_footer(footer, pad))
    return text

  def _render_footer(self, footer: Text, pad: str) -> Text:
    text = Text()
    text.append(f"{pad} = ", style=_GUTTER_STYLE)
    text.append("help", style=_HELP_STYLE)
    text.append(": ")
    text.append_text(footer)
    return text

  def _export(self, text: Text) -> str:
    if not self.styled:
      return text.plain

    buffer = io.StringIO()
    console = Console(
      file=buffer,
      force_terminal=True,
      color_system="standard",
      soft_wrap=True,
      highlight=False,
    )
    console.print(text, end="")
    return buffer.getvalue()

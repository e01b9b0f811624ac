"""Output rendering and formatting."""

from stricture.output.formatter import (
    JsonFormatter,
    OutputFormatter,
    PlainFormatter,
    TerminalFormatter,
    get_formatter,
)
from stricture.output.snippet import Annotation, Message, Snippet, SnippetRenderer

__all__ = [
  "Annotation",
  "Message",
  "Snippet",
  "SnippetRenderer",
  "OutputFormatter",
  "TerminalFormatter",
  "PlainFormatter",
  "JsonFormatter",
  "get_formatter",
]

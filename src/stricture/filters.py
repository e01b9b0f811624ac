"""Filters that let callers suppress findings."""

import re
from dataclasses import dataclass
from typing import Iterable


class FilterError(Exception):
  """Filter expression could not be compiled."""


def _compile(expression: str) -> re.Pattern[str]:
  try:
    return re.compile(expression)
  except re.error as e:
    raise FilterError(f"Invalid filter pattern '{expression}': {e}") from e


@dataclass(frozen=True)
class IgnoreByFilePath:
  """Ignore files whose path matches the pattern."""

  pattern: re.Pattern[str]

  @classmethod
  def compile(cls, expression: str) -> "IgnoreByFilePath":
    return cls(_compile(expression))

  def matches(self, path: str) -> bool:
    """True if the pattern is found anywhere in `path`."""
    return self.pattern.search(path) is not None


@dataclass(frozen=True)
class IgnoreByNamespace:
  """Ignore files that declare a namespace matching the pattern."""

  pattern: re.Pattern[str]

  @classmethod
  def compile(cls, expression: str) -> "IgnoreByNamespace":
    return cls(_compile(expression))

  def matches(self, namespace: str) -> bool:
    """True if the pattern is found anywhere in `namespace`."""
    return self.pattern.search(namespace) is not None


CheckFilter = IgnoreByFilePath | IgnoreByNamespace


def build_filters(
  ignore_paths: Iterable[str] = (),
  ignore_namespaces: Iterable[str] = (),
) -> list[CheckFilter]:
  """Compile ignore expressions into filters, paths first."""
  filters: list[CheckFilter] = [IgnoreByFilePath.compile(p) for p in ignore_paths]
  filters.extend(IgnoreByNamespace.compile(n) for n in ignore_namespaces)
  return filters

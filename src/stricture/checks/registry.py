"""Check registration and discovery."""

from typing import Callable, Iterable

from stricture.checks.base import Check
from stricture.output.snippet import SnippetRenderer

# Factories take the renderer their checks should draw diagnostics with.
CheckFactory = Callable[..., Check]

_checks: dict[str, CheckFactory] = {}


class CheckNotFoundError(Exception):
  """Requested check is not registered."""


def register_check(check_id: str, factory: CheckFactory) -> None:
  """Register a check factory.

  Args:
    check_id: Unique identifier for the check (e.g., 'ASY001').
    factory: Callable taking an optional `renderer` and returning a Check.
  """
  _checks[check_id] = factory


def get_all_checks(renderer: SnippetRenderer | None = None) -> list[Check]:
  """Get instances of all registered checks."""
  return [factory(renderer=renderer) for factory in _checks.values()]


def get_checks(
  check_ids: Iterable[str],
  renderer: SnippetRenderer | None = None,
) -> list[Check]:
  """Get instances of the named checks, in the order given.

  Raises:
    CheckNotFoundError: An id is not registered.
  """
  checks = []
  for check_id in check_ids:
    factory = _checks.get(check_id.upper())
    if factory is None:
      available = ", ".join(_checks.keys()) or "none"
      raise CheckNotFoundError(
        f"Check '{check_id}' not found. Available: {available}"
      )
    checks.append(factory(renderer=renderer))
  return checks


def list_checks() -> list[str]:
  """List all registered check IDs."""
  return list(_checks.keys())


class CheckRegistry:
  """Registry for lazy check loading."""

  @staticmethod
  def load_all() -> None:
    """Load all check modules to trigger registration."""
    from stricture.checks import (
      async_for_task,  # noqa: F401
      no_todos_in_committed_code,  # noqa: F401
    )

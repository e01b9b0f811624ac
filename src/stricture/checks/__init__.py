"""Rule checks and the contract they share."""

from stricture.checks.async_for_task import CheckAsyncForTask
from stricture.checks.base import Check, ContractViolationError
from stricture.checks.no_todos_in_committed_code import CheckNoTodosInCommittedCode
from stricture.checks.registry import (
  CheckNotFoundError,
  CheckRegistry,
  get_all_checks,
  get_checks,
  list_checks,
)

__all__ = [
  "Check",
  "CheckAsyncForTask",
  "CheckNoTodosInCommittedCode",
  "CheckNotFoundError",
  "CheckRegistry",
  "ContractViolationError",
  "get_all_checks",
  "get_checks",
  "list_checks",
]

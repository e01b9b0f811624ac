"""Check abstractions shared by all rules."""

from typing import Protocol, Sequence

from stricture.filters import CheckFilter
from stricture.models import CheckContext, CheckError


class ContractViolationError(Exception):
  """A parser or history collaborator returned data that breaks its contract.

  Raised for a missing required syntax field, a blob that is not valid
  UTF-8, or a commit without a message. It aborts the whole check run.
  """


class Check(Protocol):
  """Protocol for rule checks.

  Each check decides on its own whether a context is relevant to it and
  interprets the filters against its own data. A check never mutates the
  context or the filters and has no side effects beyond the reads its
  collaborators perform.

  Example:
    class MyCheck:
      @property
      def id(self) -> str:
        return "ASY001"

      @property
      def name(self) -> str:
        return "async-suffix-for-task"

      def execute(
        self,
        context: CheckContext,
        filters: Sequence[CheckFilter],
      ) -> Sequence[CheckError]:
        if not isinstance(context, FileContext):
          return []
        ...
  """

  @property
  def id(self) -> str:
    """Unique identifier for this check (e.g., 'ASY001')."""
    ...

  @property
  def name(self) -> str:
    """Human-readable check name (e.g., 'async-suffix-for-task')."""
    ...

  def execute(
    self,
    context: CheckContext,
    filters: Sequence[CheckFilter],
  ) -> Sequence[CheckError]:
    """Run the check against a context.

    Args:
      context: The file, directory or repository to inspect.
      filters: Suppression filters. A matching filter suppresses every
        finding for the unit it applies to.

    Returns:
      Errors in the order they were found. Empty if the context kind is
      not handled by this check or a filter matched.

    Raises:
      ContractViolationError: A collaborator broke its contract.
    """
    ...

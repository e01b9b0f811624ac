"""Check engine that runs checks against contexts."""

from typing import Sequence

from stricture.checks import Check, CheckRegistry, get_all_checks
from stricture.filters import CheckFilter
from stricture.models import CheckContext, CheckError, CheckReport


class CheckEngine:
  """Runs every check against every context and aggregates the errors.

  Checks share no state, so the order only affects the order of the
  reported errors: contexts first, then checks.

  Example:
    engine = CheckEngine()
    report = engine.run([FileContext("a.cs", source)], filters)
  """

  def __init__(self, checks: list[Check] | None = None):
    """Initialize the engine.

    Args:
      checks: Checks to run. If None, all registered checks are used.
    """
    self._checks = checks

  @property
  def checks(self) -> list[Check]:
    # Lazy load checks if not provided
    if self._checks is None:
      CheckRegistry.load_all()
      self._checks = get_all_checks()
    return self._checks

  def run(
    self,
    contexts: Sequence[CheckContext],
    filters: Sequence[CheckFilter] = (),
  ) -> CheckReport:
    """Execute all checks and return the report.

    Raises:
      ContractViolationError: A check hit a collaborator contract
        violation. Nothing is reported in that case.
    """
    errors: list[CheckError] = []

    for context in contexts:
      for check in self.checks:
        errors.extend(check.execute(context, filters))

    return CheckReport(errors=errors, summary=self._generate_summary(errors))

  def _generate_summary(self, errors: list[CheckError]) -> str:
    if not errors:
      return "No issues found."

    by_check: dict[str, int] = {}
    for error in errors:
      by_check[error.check_id] = by_check.get(error.check_id, 0) + 1

    parts = [f"{count} {check_id}" for check_id, count in by_check.items()]
    summary = f"Found {len(errors)} issue{'s' if len(errors) != 1 else ''}"
    return f"{summary}: {', '.join(parts)}."

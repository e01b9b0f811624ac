"""Check run orchestration."""

from pathlib import Path

from stricture.checks import CheckRegistry, get_all_checks, get_checks
from stricture.config import Settings, load_config
from stricture.engine import CheckEngine
from stricture.models import CheckReport
from stricture.output.snippet import SnippetRenderer
from stricture.sources import collect_contexts


class CheckOrchestrator:
  """Builds contexts and filters from settings and runs the engine.

  Diagnostics carry ANSI styles only when they are shown on a terminal.
  """

  def __init__(self, settings: Settings | None = None):
    self.settings = settings or Settings()

  def check(
    self,
    paths: list[str],
    repo: Path | None = None,
    cwd: Path | None = None,
  ) -> CheckReport:
    contexts = collect_contexts(
      paths,
      history=self.settings.history,
      repo=repo,
      cwd=cwd,
    )
    if not contexts:
      return CheckReport(errors=[], summary="Nothing to check.")

    CheckRegistry.load_all()
    renderer = SnippetRenderer(styled=self.settings.format == "terminal")
    if self.settings.checks:
      checks = get_checks(self.settings.checks, renderer=renderer)
    else:
      checks = get_all_checks(renderer=renderer)
    engine = CheckEngine(checks)
    return engine.run(contexts, self.settings.build_filters())


def run_checks(
  paths: list[str] | None = None,
  history: bool = False,
  repo: Path | None = None,
  checks: list[str] | None = None,
  ignore_paths: list[str] | None = None,
  ignore_namespaces: list[str] | None = None,
  config_path: Path | None = None,
  cwd: Path | None = None,
  output_format: str | None = None,
  settings: Settings | None = None,
) -> CheckReport:
  """Run checks with the given options on top of the loaded config.

  `settings` replaces loading the config from `config_path`.
  """
  settings = (settings or load_config(config_path)).model_copy(deep=True)

  if output_format:
    settings.format = output_format
  if history:
    settings.history = True
  if checks:
    settings.checks = [c.upper() for c in checks]
  if ignore_paths:
    settings.ignore_paths = [*settings.ignore_paths, *ignore_paths]
  if ignore_namespaces:
    settings.ignore_namespaces = [*settings.ignore_namespaces, *ignore_namespaces]

  orchestrator = CheckOrchestrator(settings)
  return orchestrator.check(paths or [], repo=repo, cwd=cwd)

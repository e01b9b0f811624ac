"""GIT001: Detection of TODO/FIXME markers in committed changes."""

import json
from typing import Sequence

from rich.text import Text

from stricture.checks.base import ContractViolationError
from stricture.checks.registry import register_check
from stricture.filters import CheckFilter, IgnoreByFilePath
from stricture.models import (
  Change,
  CheckContext,
  CheckError,
  Commit,
  GitContext,
  RepositoryHandle,
)
from stricture.output.snippet import Annotation, Message, Snippet, SnippetRenderer

TODO = "TODO"
FIXME = "FIXME"
MARKERS = (f"// {TODO}", f"// {FIXME}")


def display_range(content: bytes, content_range: range) -> range:
  """Range to annotate for a change.

  Drops the trailing line terminator and then any leading whitespace,
  one character at a time.
  """
  start = content_range.start
  end = content_range.stop - 1

  while start < end:
    first = content[start:end].decode("utf-8", errors="ignore")[:1]
    if not first.isspace():
      break
    start += len(first.encode("utf-8"))

  return range(start, end)


class CheckNoTodosInCommittedCode:
  """Detects `// TODO` and `// FIXME` markers added by commits on the
  current branch.

  The snippet shows the file as it was in the commit, not its current
  content.
  """

  TITLE = f"expected no commited changes to contain {TODO} or {FIXME}"

  def __init__(self, renderer: SnippetRenderer | None = None):
    self._renderer = renderer or SnippetRenderer()

  @property
  def id(self) -> str:
    return "GIT001"

  @property
  def name(self) -> str:
    return "no-committed-todos"

  def execute(
    self,
    context: CheckContext,
    filters: Sequence[CheckFilter],
  ) -> Sequence[CheckError]:
    if not isinstance(context, GitContext):
      return []

    path_filters = [f for f in filters if isinstance(f, IgnoreByFilePath)]
    repository = context.repository
    errors: list[CheckError] = []

    for commit in repository.commits_of_current_branch():
      for changed_file in commit.changed_files:
        # An ignored path anywhere in history ends the scan and drops
        # everything collected so far.
        if any(f.matches(changed_file.file_path) for f in path_filters):
          return []

        if commit.message is None:
          raise ContractViolationError(f"commit {commit.id} has no message")

        changes = [
          c for c in changed_file.changes
          if any(marker in c.content for marker in MARKERS)
        ]

        for change in changes:
          errors.append(CheckError(
            check_id=self.id,
            message=self._render(repository, commit, changed_file.file_path, change),
            path=changed_file.file_path,
            commit_id=commit.id,
          ))

    return errors

  def _render(
    self,
    repository: RepositoryHandle,
    commit: Commit,
    file_path: str,
    change: Change,
  ) -> str:
    content = repository.find_blob(change.blob_id)
    try:
      source = content.decode("utf-8")
    except UnicodeDecodeError as e:
      raise ContractViolationError(
        f"blob {change.blob_id} of {file_path} is not valid UTF-8"
      ) from e

    title = Text(self.TITLE)
    title.highlight_words([TODO, FIXME], style="red")

    help_text = Text("consider removing all ")
    help_text.append(f"{TODO}s", style="red")
    help_text.append(" and ")
    help_text.append(f"{FIXME}s", style="red")
    help_text.append(" from commit ")
    help_text.append(commit.id, style="yellow")
    help_text.append(" with message ")
    help_text.append(json.dumps(commit.message, ensure_ascii=False), style="cyan")

    snippet = Snippet(
      source=source,
      origin=file_path,
      annotation=Annotation(display_range(content, change.content_range), self.TITLE),
    )
    return self._renderer.render(Message(title, [snippet], help_text))


def _create_no_todos(renderer: SnippetRenderer | None = None) -> CheckNoTodosInCommittedCode:
  return CheckNoTodosInCommittedCode(renderer)


register_check("GIT001", _create_no_todos)

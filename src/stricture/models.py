"""Core domain models for rule checks."""

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence


@dataclass(frozen=True)
class Change:
  """A single added line recorded in a commit.

  `content_range` is a byte range into the blob identified by `blob_id`
  and includes the trailing line terminator.
  """

  content: str
  content_range: range
  blob_id: str


@dataclass(frozen=True)
class ChangedFile:
  """A file touched by a commit and the lines it added."""

  file_path: str
  changes: Sequence[Change]


@dataclass(frozen=True)
class Commit:
  """A commit on the current branch."""

  id: str
  message: str | None
  changed_files: Sequence[ChangedFile]


class RepositoryHandle(Protocol):
  """Read access to a repository's history."""

  def commits_of_current_branch(self) -> Iterable[Commit]:
    """Commits reachable from HEAD, newest first."""
    ...

  def find_blob(self, blob_id: str) -> bytes:
    """Raw content of the blob with the given id."""
    ...


@dataclass(frozen=True)
class FileContext:
  """A single source file and its full contents."""

  path: str
  contents: str


@dataclass(frozen=True)
class DirectoryContext:
  """A directory, for checks that work on a whole tree."""

  path: str


@dataclass(frozen=True)
class GitContext:
  """A repository whose history is checked."""

  repository: RepositoryHandle


CheckContext = FileContext | DirectoryContext | GitContext


@dataclass(frozen=True)
class CheckError:
  """A single finding reported by a check.

  `path` and `commit_id` identify where the finding came from. They are
  copied out of the context so an error stays valid after the context
  is gone.
  """

  check_id: str
  message: str
  path: str
  commit_id: str | None = None


@dataclass(frozen=True)
class CheckReport:
  """Result of running a set of checks."""

  errors: Sequence[CheckError]
  summary: str

  @property
  def has_errors(self) -> bool:
    return bool(self.errors)

"""Git history reading through the git executable."""

import functools
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterator

from stricture.models import Change, ChangedFile, Commit

# Pattern to parse diff hunk headers: @@ -start,count +start,count @@
_HUNK_HEADER = re.compile(rb"^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@")
_INDEX_LINE = re.compile(rb"^index ([0-9a-f]+)\.\.([0-9a-f]+)(?: (\d+))?")
_NEW_MODE_LINE = re.compile(rb"^new (?:file )?mode (\d+)")
_NULL_BLOB = re.compile(r"^0+$")
_QUOTED_ESCAPE = re.compile(rb"\\([0-7]{3}|.)")
_ESCAPES = {b"a": b"\a", b"b": b"\b", b"f": b"\f", b"n": b"\n", b"r": b"\r", b"t": b"\t", b"v": b"\v"}

# Submodules are recorded as gitlinks; their "blob id" is a commit sha.
GITLINK_MODE = b"160000"
BLOB_CACHE_SIZE = 64

BlobLoader = Callable[[str], bytes]


class GitError(Exception):
  """Git command failed."""


def _sanitize_error(stderr: str) -> str:
  """Remove potentially sensitive path information from error messages."""
  lines = stderr.strip().split("\n")
  sanitized = []
  for line in lines:
    if "fatal:" in line or "error:" in line:
      sanitized.append(line.split("/")[-1] if "/" in line else line)
    else:
      sanitized.append(line)
  return "\n".join(sanitized)


def run_git_bytes(*args: str, cwd: Path | None = None) -> bytes:
  """Run a git command and return raw stdout."""
  try:
    result = subprocess.run(
      ["git", "-c", "core.quotePath=false", *args],
      capture_output=True,
      check=True,
      cwd=cwd,
    )
    return result.stdout
  except subprocess.CalledProcessError as e:
    sanitized = _sanitize_error(e.stderr.decode("utf-8", errors="replace"))
    raise GitError(f"git {' '.join(args)} failed: {sanitized}") from e
  except FileNotFoundError as e:
    raise GitError("git executable not found") from e


def run_git(*args: str, cwd: Path | None = None) -> str:
  """Run a git command and return stdout."""
  return run_git_bytes(*args, cwd=cwd).decode("utf-8", errors="replace")


def _line_starts(blob: bytes) -> list[int]:
  starts = [0]
  for i, byte in enumerate(blob):
    if byte == 0x0A:
      starts.append(i + 1)
  return starts


def _changes_for_lines(
  blob_id: str,
  blob: bytes,
  line_numbers: list[int],
) -> list[Change]:
  """Build one Change per 1-based line number of `blob`."""
  starts = _line_starts(blob)
  changes = []
  for number in line_numbers:
    if number < 1 or number > len(starts):
      continue
    start = starts[number - 1]
    end = starts[number] if number < len(starts) else len(blob)
    if start == end:
      continue
    changes.append(Change(
      content=blob[start:end].decode("utf-8", errors="replace"),
      content_range=range(start, end),
      blob_id=blob_id,
    ))
  return changes


def _build_changed_file(
  path: str,
  blob_id: str | None,
  added_lines: list[int],
  load_blob: BlobLoader,
) -> ChangedFile:
  if blob_id is None or not added_lines:
    return ChangedFile(file_path=path, changes=[])
  blob = load_blob(blob_id)
  return ChangedFile(
    file_path=path,
    changes=_changes_for_lines(blob_id, blob, added_lines),
  )


def _unquote_path(raw: bytes) -> bytes:
  """Undo git's C-style quoting of a path, if present."""
  if not (raw.startswith(b'"') and raw.endswith(b'"') and len(raw) >= 2):
    return raw

  def _replace(match: re.Match) -> bytes:
    escaped = match.group(1)
    if len(escaped) == 3:
      return bytes([int(escaped, 8)])
    return _ESCAPES.get(escaped, escaped)

  return _QUOTED_ESCAPE.sub(_replace, raw[1:-1])


def _header_path(line: bytes, prefix: bytes) -> str | None:
  """Path from a `--- a/...` or `+++ b/...` line, None for /dev/null."""
  # git appends a tab after names that contain a space.
  path = _unquote_path(line[4:].rstrip(b"\t"))
  if not path.startswith(prefix):
    return None
  return path[len(prefix):].decode("utf-8", errors="replace")


def _fallback_path(line: bytes) -> str | None:
  """Path from a `diff --git a/x b/x` header.

  Only used for changes without `---`/`+++` lines (binary or mode-only),
  where the path may be ambiguous if it contains " b/".
  """
  header = line[len(b"diff --git "):]
  if header.endswith(b'"'):
    start = header.rfind(b' "b/')
    if start != -1:
      return _unquote_path(header[start + 1:])[2:].decode("utf-8", errors="replace")
  parts = header.split(b" b/")
  return parts[-1].decode("utf-8", errors="replace") if len(parts) > 1 else None


def parse_diff_tree_output(output: bytes, load_blob: BlobLoader) -> list[ChangedFile]:
  """Parse `git diff-tree -p --full-index --unified=0` output.

  Every added line becomes a Change whose range covers the line and its
  terminator inside the new blob. Deleted files, submodules and files
  without added lines are still reported, with no changes.
  """
  if not output.strip():
    return []

  files: list[ChangedFile] = []
  current_file: str | None = None
  old_path: str | None = None
  blob_id: str | None = None
  gitlink = False
  added_lines: list[int] = []
  next_line = 0
  in_hunk = False

  def _flush() -> None:
    if current_file is None:
      return
    new_blob = None if gitlink else blob_id
    files.append(_build_changed_file(current_file, new_blob, added_lines, load_blob))

  for line in output.split(b"\n"):
    if line.startswith(b"diff --git"):
      _flush()
      current_file = _fallback_path(line)
      old_path = None
      blob_id = None
      gitlink = False
      added_lines = []
      in_hunk = False
      continue

    if current_file is None:
      continue

    hunk_match = _HUNK_HEADER.match(line)
    if hunk_match:
      in_hunk = True
      next_line = int(hunk_match.group(1))
      continue

    if not in_hunk:
      mode_match = _NEW_MODE_LINE.match(line)
      index_match = _INDEX_LINE.match(line)
      if line.startswith(b"--- "):
        old_path = _header_path(line, b"a/")
      elif line.startswith(b"+++ "):
        current_file = _header_path(line, b"b/") or old_path or current_file
      elif mode_match:
        gitlink = mode_match.group(1) == GITLINK_MODE
      elif index_match:
        new_id = index_match.group(2).decode()
        blob_id = None if _NULL_BLOB.match(new_id) else new_id
        if index_match.group(3) == GITLINK_MODE:
          gitlink = True
      continue

    if line.startswith(b"+"):
      added_lines.append(next_line)
      next_line += 1

  _flush()
  return files


class Repository:
  """A git work tree whose history can be read.

  Recently read blobs are kept in a bounded cache, so reading a blob while
  parsing a commit and again while rendering it costs one git call.
  """

  def __init__(self, path: Path, blob_cache_size: int = BLOB_CACHE_SIZE):
    self.path = path
    self._read_blob = functools.lru_cache(maxsize=blob_cache_size)(self._cat_blob)

  @classmethod
  def discover(cls, path: Path | None = None) -> "Repository":
    """Open the repository containing `path` (default: cwd)."""
    start = path or Path.cwd()
    top_level = run_git("rev-parse", "--show-toplevel", cwd=start).strip()
    return cls(Path(top_level))

  def has_commits(self) -> bool:
    """False while HEAD is unborn (no commit yet)."""
    try:
      run_git("rev-parse", "--verify", "-q", "HEAD", cwd=self.path)
    except GitError:
      return False
    return True

  def commit_ids(self) -> list[str]:
    """Ids of commits reachable from HEAD, newest first."""
    if not self.has_commits():
      return []
    output = run_git("rev-list", "HEAD", cwd=self.path)
    return [line for line in output.split("\n") if line]

  def commit_message(self, commit_id: str) -> str | None:
    """Full commit message, or None if it is not valid UTF-8."""
    raw = run_git_bytes("show", "-s", "--format=%B", commit_id, cwd=self.path)
    try:
      return raw.decode("utf-8").rstrip("\n")
    except UnicodeDecodeError:
      return None

  def changed_files(self, commit_id: str) -> list[ChangedFile]:
    output = run_git_bytes(
      "diff-tree",
      "-p",
      "--root",
      "--full-index",
      "--unified=0",
      "--no-renames",
      "--no-color",
      "--no-commit-id",
      "--no-ext-diff",
      "--src-prefix=a/",
      "--dst-prefix=b/",
      commit_id,
      cwd=self.path,
    )
    return parse_diff_tree_output(output, self.find_blob)

  def commits_of_current_branch(self) -> Iterator[Commit]:
    for commit_id in self.commit_ids():
      yield Commit(
        id=commit_id,
        message=self.commit_message(commit_id),
        changed_files=self.changed_files(commit_id),
      )

  def find_blob(self, blob_id: str) -> bytes:
    return self._read_blob(blob_id)

  def _cat_blob(self, blob_id: str) -> bytes:
    return run_git_bytes("cat-file", "blob", blob_id, cwd=self.path)

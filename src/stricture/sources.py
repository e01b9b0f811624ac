"""Collection of analysis contexts from command line arguments."""

import glob as globmod
from pathlib import Path

from stricture.history import Repository
from stricture.models import CheckContext, DirectoryContext, FileContext, GitContext

SOURCE_EXTENSIONS = ("cs",)

# Build output and tooling directories that never hold checked sources
_FALLBACK_EXCLUDES: set[str] = {
  ".git",
  ".vs",
  ".idea",
  "bin",
  "obj",
  "node_modules",
  "packages",
  "TestResults",
}


class FileError(Exception):
  """File operation failed."""


def _expand_directories(patterns: list[str], base_path: Path) -> list[str]:
  """Expand directory patterns to recursive source globs."""
  result: list[str] = []

  for pattern in patterns:
    p = Path(pattern)
    full_path = p if p.is_absolute() else base_path / p

    if full_path.is_dir():
      for ext in SOURCE_EXTENSIONS:
        result.append(str(full_path / "**" / f"*.{ext}"))
    else:
      result.append(pattern)

  return result


def _expand_pattern(pattern: str, base_path: Path) -> list[Path]:
  """Expand a single pattern to matching paths."""
  p = Path(pattern)
  glob_path = p if p.is_absolute() else base_path / p

  if any(c in pattern for c in "*?["):
    return sorted(Path(match) for match in globmod.glob(str(glob_path), recursive=True))
  return [glob_path]


def _filter_with_fallback(paths: list[Path], base_path: Path) -> list[Path]:
  """Filter paths using hardcoded exclude patterns below `base_path`."""
  result = []
  for path in paths:
    try:
      parts = set(path.relative_to(base_path).parts)
    except ValueError:
      parts = set(path.parts)
    if not parts & _FALLBACK_EXCLUDES:
      result.append(path)
  return result


def _resolve_patterns(patterns: list[str], base_path: Path) -> list[Path]:
  """Expand glob patterns and return unique file paths."""
  seen: set[Path] = set()
  result: list[Path] = []

  for pattern in _expand_directories(patterns, base_path):
    for path in _expand_pattern(pattern, base_path):
      if path not in seen and path.is_file():
        seen.add(path)
        result.append(path)

  return _filter_with_fallback(result, base_path)


def _read_file_context(file_path: Path, base_path: Path) -> FileContext:
  try:
    rel_path = str(file_path.relative_to(base_path))
  except ValueError:
    rel_path = str(file_path)

  try:
    contents = file_path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    raise FileError(f"Cannot read {rel_path}: {e}") from e

  return FileContext(path=rel_path, contents=contents)


def collect_file_contexts(
  patterns: list[str],
  cwd: Path | None = None,
) -> list[FileContext]:
  """Read files, directories and glob patterns into file contexts."""
  base_path = cwd or Path.cwd()
  resolved = _resolve_patterns(patterns, base_path)

  if patterns and not resolved:
    raise FileError(
      f"No files matched: {', '.join(patterns)}\n"
      "Use a directory or glob patterns like: stricture 'src/**/*.cs'"
    )

  return [_read_file_context(p, base_path) for p in resolved]


def collect_contexts(
  patterns: list[str],
  history: bool = False,
  repo: Path | None = None,
  cwd: Path | None = None,
) -> list[CheckContext]:
  """Build every context a run should check.

  Directory arguments contribute a DirectoryContext in addition to the
  files found below them. `history` adds the repository containing
  `repo` (default: cwd).
  """
  base_path = cwd or Path.cwd()
  contexts: list[CheckContext] = []

  for pattern in patterns:
    p = Path(pattern)
    full_path = p if p.is_absolute() else base_path / p
    if full_path.is_dir():
      contexts.append(DirectoryContext(path=pattern))

  contexts.extend(collect_file_contexts(patterns, base_path))

  if history:
    contexts.append(GitContext(repository=Repository.discover(repo or base_path)))

  return contexts

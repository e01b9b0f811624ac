"""Pytest fixtures."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Iterable

import pytest
from stricture.models import Change, ChangedFile, Commit, FileContext


class FakeRepository:
  """In-memory repository handle."""

  def __init__(self, commits: list[Commit], blobs: dict[str, bytes]):
    self.commits = commits
    self.blobs = blobs
    self.blob_reads: list[str] = []

  def commits_of_current_branch(self) -> Iterable[Commit]:
    return iter(self.commits)

  def find_blob(self, blob_id: str) -> bytes:
    self.blob_reads.append(blob_id)
    return self.blobs[blob_id]


def make_change(blob: bytes, line: int, blob_id: str) -> Change:
  """Change covering the 1-based `line` of `blob`, terminator included."""
  lines = blob.splitlines(keepends=True)
  start = sum(len(x) for x in lines[:line - 1])
  end = start + len(lines[line - 1])
  return Change(
    content=lines[line - 1].decode("utf-8"),
    content_range=range(start, end),
    blob_id=blob_id,
  )


@pytest.fixture
def todo_blob() -> bytes:
  return b"class Service\n{\n    // TODO: cache this\n    void Run() { }\n}\n"


@pytest.fixture
def todo_repository(todo_blob: bytes) -> FakeRepository:
  commit = Commit(
    id="a1b2c3d",
    message="Add service",
    changed_files=[
      ChangedFile(
        file_path="src/Service.cs",
        changes=[
          make_change(todo_blob, 3, "blob1"),
          make_change(todo_blob, 4, "blob1"),
        ],
      ),
    ],
  )
  return FakeRepository([commit], {"blob1": todo_blob})


@pytest.fixture
def violating_file() -> FileContext:
  return FileContext(path="some/file.cs", contents="public Task Foo() { }")


def _git_env() -> dict[str, str]:
  env = dict(os.environ)
  env.update({
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
    "HOME": env.get("HOME", "/tmp"),
  })
  return env


class GitRepo:
  """Throwaway git repository for history tests."""

  def __init__(self, path: Path):
    self.path = path
    self.git("init", "-q")
    self.git("config", "commit.gpgsign", "false")

  def git(self, *args: str) -> str:
    result = subprocess.run(
      ["git", *args],
      cwd=self.path,
      env=_git_env(),
      capture_output=True,
      text=True,
      check=True,
    )
    return result.stdout

  def commit(self, files: dict[str, str], message: str) -> str:
    for name, content in files.items():
      path = self.path / name
      path.parent.mkdir(parents=True, exist_ok=True)
      path.write_text(content)
      self.git("add", name)
    self.git("commit", "-q", "-m", message)
    return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
  if shutil.which("git") is None:
    pytest.skip("git executable not available")
  return GitRepo(tmp_path)

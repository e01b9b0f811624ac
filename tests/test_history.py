"""Tests for git history reading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from stricture.checks.no_todos_in_committed_code import display_range
from stricture.history import GitError, Repository, parse_diff_tree_output
from stricture.history.git import run_git_bytes

NEW_BLOB = "b" * 40
OLD_BLOB = "a" * 40
NULL_BLOB = "0" * 40


def _loader(blobs: dict[str, bytes]):
  def load(blob_id: str) -> bytes:
    return blobs[blob_id]
  return load


class TestParseDiffTreeOutput:
  def test_empty_output(self) -> None:
    assert parse_diff_tree_output(b"", _loader({})) == []
    assert parse_diff_tree_output(b"  \n\n", _loader({})) == []

  def test_added_lines_map_to_blob_ranges(self) -> None:
    blob = b"class A\n{\n    // TODO\n}\n"
    output = (
      f"diff --git a/src/A.cs b/src/A.cs\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      "--- a/src/A.cs\n"
      "+++ b/src/A.cs\n"
      "@@ -2,0 +3 @@\n"
      "+    // TODO\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob}))

    assert len(files) == 1
    assert files[0].file_path == "src/A.cs"
    change = files[0].changes[0]
    assert change.blob_id == NEW_BLOB
    assert change.content == "    // TODO\n"
    assert blob[change.content_range.start:change.content_range.stop] == b"    // TODO\n"

  def test_multiple_hunks_and_files(self) -> None:
    blob_a = b"1\n2\n3\n4\n"
    blob_b = b"x\n"
    output = (
      f"diff --git a/a.cs b/a.cs\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      "--- a/a.cs\n"
      "+++ b/a.cs\n"
      "@@ -1 +1 @@\n"
      "-one\n"
      "+1\n"
      "@@ -3,0 +4 @@\n"
      "+4\n"
      f"diff --git a/b.cs b/b.cs\n"
      "new file mode 100644\n"
      f"index {NULL_BLOB}..{'c' * 40}\n"
      "--- /dev/null\n"
      "+++ b/b.cs\n"
      "@@ -0,0 +1 @@\n"
      "+x\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob_a, "c" * 40: blob_b}))

    assert [f.file_path for f in files] == ["a.cs", "b.cs"]
    assert [c.content for c in files[0].changes] == ["1\n", "4\n"]
    assert files[0].changes[1].content_range == range(6, 8)
    assert [c.content for c in files[1].changes] == ["x\n"]

  def test_added_line_that_looks_like_header(self) -> None:
    blob = b"++i;\n"
    output = (
      f"diff --git a/a.cs b/a.cs\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      "--- a/a.cs\n"
      "+++ b/a.cs\n"
      "@@ -1 +1 @@\n"
      "-i++;\n"
      "+++i;\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob}))

    assert [c.content for c in files[0].changes] == ["++i;\n"]

  def test_deleted_file_has_no_changes(self) -> None:
    output = (
      f"diff --git a/old.cs b/old.cs\n"
      "deleted file mode 100644\n"
      f"index {OLD_BLOB}..{NULL_BLOB}\n"
      "--- a/old.cs\n"
      "+++ /dev/null\n"
      "@@ -1 +0,0 @@\n"
      "-gone\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({}))

    assert files[0].file_path == "old.cs"
    assert files[0].changes == []

  def test_no_newline_at_end_of_file(self) -> None:
    blob = b"a\n// TODO"
    output = (
      f"diff --git a/a.cs b/a.cs\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      "--- a/a.cs\n"
      "+++ b/a.cs\n"
      "@@ -1,0 +2 @@\n"
      "+// TODO\n"
      "\\ No newline at end of file\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob}))

    change = files[0].changes[0]
    assert change.content_range == range(2, 9)
    assert change.content == "// TODO"

    # The final line has no terminator, so trimming drops its last character.
    shown = display_range(blob, change.content_range)
    assert blob[shown.start:shown.stop] == b"// TOD"

  def test_submodule_is_not_read_as_blob(self) -> None:
    commit_sha = "d" * 40
    output = (
      "diff --git a/vendor/lib b/vendor/lib\n"
      "new file mode 160000\n"
      f"index {NULL_BLOB}..{commit_sha}\n"
      "--- /dev/null\n"
      "+++ b/vendor/lib\n"
      "@@ -0,0 +1 @@\n"
      f"+Subproject commit {commit_sha}\n"
      "diff --git a/ext b/ext\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 160000\n"
      "--- a/ext\n"
      "+++ b/ext\n"
      "@@ -1 +1 @@\n"
      f"-Subproject commit {OLD_BLOB}\n"
      f"+Subproject commit {NEW_BLOB}\n"
    ).encode()

    def refuse(blob_id: str) -> bytes:
      raise AssertionError(f"submodule commit {blob_id} read as a blob")

    files = parse_diff_tree_output(output, refuse)

    assert [f.file_path for f in files] == ["vendor/lib", "ext"]
    assert all(f.changes == [] for f in files)

  def test_path_containing_b_slash(self) -> None:
    blob = b"// TODO\n"
    output = (
      "diff --git a/docs b/notes.cs b/docs b/notes.cs\n"
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      "--- a/docs b/notes.cs\t\n"
      "+++ b/docs b/notes.cs\t\n"
      "@@ -0,0 +1 @@\n"
      "+// TODO\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob}))

    assert files[0].file_path == "docs b/notes.cs"

  def test_quoted_path(self) -> None:
    blob = b"x\n"
    output = (
      'diff --git "a/tab\\there.cs" "b/tab\\there.cs"\n'
      f"index {OLD_BLOB}..{NEW_BLOB} 100644\n"
      '--- "a/tab\\there.cs"\n'
      '+++ "b/tab\\there.cs"\n'
      "@@ -0,0 +1 @@\n"
      "+x\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({NEW_BLOB: blob}))

    assert files[0].file_path == "tab\there.cs"

  def test_quoted_path_without_content_lines(self) -> None:
    output = (
      'diff --git "a/q\\"uote.cs" "b/q\\"uote.cs"\n'
      "old mode 100644\n"
      "new mode 100755\n"
    ).encode()

    files = parse_diff_tree_output(output, _loader({}))

    assert files[0].file_path == 'q"uote.cs'
    assert files[0].changes == []


class TestRepository:
  def test_reads_commits_newest_first(self, git_repo) -> None:
    first = git_repo.commit({"a.cs": "int a;\n"}, "First")
    second = git_repo.commit({"a.cs": "int a;\nint b;\n", "b.cs": "x\n"}, "Second\n\nBody")

    commits = list(Repository(git_repo.path).commits_of_current_branch())

    assert [c.id for c in commits] == [second, first]
    assert commits[0].message == "Second\n\nBody"
    assert sorted(f.file_path for f in commits[0].changed_files) == ["a.cs", "b.cs"]
    a_changes = next(f for f in commits[0].changed_files if f.file_path == "a.cs").changes
    assert [c.content for c in a_changes] == ["int b;\n"]

  def test_root_commit_has_changes(self, git_repo) -> None:
    git_repo.commit({"a.cs": "one\ntwo\n"}, "Root")

    commits = list(Repository(git_repo.path).commits_of_current_branch())

    assert [c.content for c in commits[0].changed_files[0].changes] == ["one\n", "two\n"]

  def test_find_blob_is_cached(self, git_repo) -> None:
    git_repo.commit({"a.cs": "content\n"}, "Root")
    repository = Repository(git_repo.path)
    blob_id = git_repo.git("rev-parse", "HEAD:a.cs").strip()

    assert repository.find_blob(blob_id) == b"content\n"
    assert repository.find_blob(blob_id) is repository.find_blob(blob_id)

  def test_discover_from_subdirectory(self, git_repo) -> None:
    git_repo.commit({"src/a.cs": "x\n"}, "Root")

    repository = Repository.discover(git_repo.path / "src")

    assert repository.path.resolve() == git_repo.path.resolve()

  def test_discover_outside_repository(self, tmp_path: Path) -> None:
    outside = tmp_path / "not-a-repo"
    outside.mkdir()

    with pytest.raises(GitError):
      Repository.discover(outside)

  def test_repository_without_commits(self, git_repo) -> None:
    repository = Repository(git_repo.path)

    assert repository.has_commits() is False
    assert list(repository.commits_of_current_branch()) == []

  def test_submodule_commit_is_skipped(self, git_repo) -> None:
    first = git_repo.commit({"a.cs": "// TODO later\n"}, "Add todo")
    git_repo.git("update-index", "--add", "--cacheinfo", f"160000,{first},vendor/lib")
    git_repo.git("commit", "-q", "-m", "Add submodule")

    commits = list(Repository(git_repo.path).commits_of_current_branch())

    assert [c.message for c in commits] == ["Add submodule", "Add todo"]
    assert [(f.file_path, f.changes) for f in commits[0].changed_files] == [("vendor/lib", [])]

  def test_path_with_space_from_git(self, git_repo) -> None:
    git_repo.commit({"docs b/notes.cs": "// TODO\n"}, "Notes")

    commits = list(Repository(git_repo.path).commits_of_current_branch())

    assert [f.file_path for f in commits[0].changed_files] == ["docs b/notes.cs"]

  def test_blob_cache_is_bounded(self, git_repo) -> None:
    git_repo.commit({"a.cs": "a\n", "b.cs": "b\n", "c.cs": "c\n"}, "Root")
    blob_ids = [git_repo.git("rev-parse", f"HEAD:{name}").strip() for name in ("a.cs", "b.cs", "c.cs")]
    repository = Repository(git_repo.path, blob_cache_size=2)

    with patch("stricture.history.git.run_git_bytes", wraps=run_git_bytes) as mock_git:
      for blob_id in blob_ids:
        repository.find_blob(blob_id)
      repository.find_blob(blob_ids[2])
      assert mock_git.call_count == 3

      repository.find_blob(blob_ids[0])
      assert mock_git.call_count == 4

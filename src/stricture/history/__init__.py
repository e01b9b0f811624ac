"""Repository history reading."""

from stricture.history.git import (
    GitError,
    Repository,
    parse_diff_tree_output,
)

__all__ = [
  "GitError",
  "Repository",
  "parse_diff_tree_output",
]

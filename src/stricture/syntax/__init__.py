"""Source parsing."""

from stricture.syntax.tree import SyntaxNode, SyntaxTree

__all__ = ["SyntaxNode", "SyntaxTree"]

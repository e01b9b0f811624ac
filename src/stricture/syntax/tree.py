"""C# syntax trees backed by tree-sitter."""

from dataclasses import dataclass
from typing import Iterator

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

CSHARP = Language(tree_sitter_c_sharp.language())

# Grammar releases disagree on the name of the return type field.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
  "type": ("type", "returns"),
}


@dataclass(frozen=True)
class SyntaxNode:
  """A node of a parsed tree together with the source it came from."""

  node: Node
  source: bytes

  @property
  def kind(self) -> str:
    return self.node.type

  @property
  def byte_range(self) -> range:
    return range(self.node.start_byte, self.node.end_byte)

  @property
  def text(self) -> str:
    return self.source[self.node.start_byte:self.node.end_byte].decode(
      "utf-8", errors="replace"
    )

  def child_by_field(self, field_name: str) -> "SyntaxNode | None":
    """Named child lookup, e.g. `name` or `type`."""
    for name in _FIELD_ALIASES.get(field_name, (field_name,)):
      child = self.node.child_by_field_name(name)
      if child is not None:
        return SyntaxNode(child, self.source)
    return None


class SyntaxTree:
  """A parsed C# source file.

  Iterating yields every node in pre-order, which is source order.
  Regions the parser could not make sense of show up as nodes of kind
  `ERROR`.
  """

  def __init__(self, tree, source: bytes):
    self._tree = tree
    self.source = source

  @classmethod
  def from_source(cls, text: str) -> "SyntaxTree":
    source = text.encode("utf-8")
    parser = Parser(CSHARP)
    return cls(parser.parse(source), source)

  @property
  def root(self) -> SyntaxNode:
    return SyntaxNode(self._tree.root_node, self.source)

  def __iter__(self) -> Iterator[SyntaxNode]:
    stack = [self._tree.root_node]
    while stack:
      node = stack.pop()
      yield SyntaxNode(node, self.source)
      stack.extend(reversed(node.children))

  def nodes_of_kind(self, *kinds: str) -> Iterator[SyntaxNode]:
    return (n for n in self if n.kind in kinds)

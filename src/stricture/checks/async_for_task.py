"""ASY001: Methods returning Task must carry the Async suffix."""

from typing import Iterator, Sequence

from rich.text import Text

from stricture.checks.base import ContractViolationError
from stricture.checks.registry import register_check
from stricture.filters import CheckFilter, IgnoreByFilePath, IgnoreByNamespace
from stricture.models import CheckContext, CheckError, FileContext
from stricture.output.snippet import Annotation, Message, Snippet, SnippetRenderer
from stricture.syntax import SyntaxNode, SyntaxTree

ASYNC_POSTFIX = "Async"
TASK = "Task"


def _required_child(node: SyntaxNode, field_name: str) -> SyntaxNode:
  child = node.child_by_field(field_name)
  if child is None:
    raise ContractViolationError(
      f"{node.kind} at bytes {node.byte_range.start}..{node.byte_range.stop} "
      f"has no '{field_name}' field"
    )
  return child


def declared_namespaces(tree: SyntaxTree) -> Iterator[str]:
  """Names of all namespaces declared in the tree.

  The parser may not model a file scoped `namespace Foo;` declaration,
  in which case it appears as an ERROR node starting with the keyword.
  """
  for node in tree:
    if node.kind in ("namespace_declaration", "file_scoped_namespace_declaration"):
      yield _required_child(node, "name").text
    elif node.kind == "ERROR":
      source = node.text.strip()
      if source.startswith("namespace"):
        yield source.removeprefix("namespace ").rstrip(";")


class CheckAsyncForTask:
  """Detects methods and local functions that return a Task-like type
  without an `Async` suffix.

  Only the name is inspected: a synchronous method returning a Task is
  still reported, and a correctly suffixed method never is.
  """

  TITLE = f"expected postfix {ASYNC_POSTFIX} for method that returns {TASK}"
  METHOD_KINDS = ("method_declaration", "local_function_statement")

  def __init__(self, renderer: SnippetRenderer | None = None):
    self._renderer = renderer or SnippetRenderer()

  @property
  def id(self) -> str:
    return "ASY001"

  @property
  def name(self) -> str:
    return "async-suffix-for-task"

  def execute(
    self,
    context: CheckContext,
    filters: Sequence[CheckFilter],
  ) -> Sequence[CheckError]:
    if not isinstance(context, FileContext):
      return []

    tree = SyntaxTree.from_source(context.contents)

    for check_filter in filters:
      if isinstance(check_filter, IgnoreByFilePath):
        if check_filter.matches(context.path):
          return []
      elif isinstance(check_filter, IgnoreByNamespace):
        if any(check_filter.matches(n) for n in declared_namespaces(tree)):
          return []

    errors: list[CheckError] = []

    for node in tree.nodes_of_kind(*self.METHOD_KINDS):
      method_type = _required_child(node, "type").text
      name_node = _required_child(node, "name")
      method_name = name_node.text

      if TASK in method_type and not method_name.endswith(ASYNC_POSTFIX):
        errors.append(CheckError(
          check_id=self.id,
          message=self._render(context, name_node),
          path=context.path,
        ))

    return errors

  def _render(self, context: FileContext, name_node: SyntaxNode) -> str:
    title = Text(self.TITLE)
    title.highlight_words([ASYNC_POSTFIX, TASK], style="magenta")

    help_text = Text(f"consider {name_node.text}")
    help_text.append(ASYNC_POSTFIX, style="cyan")

    snippet = Snippet(
      source=context.contents,
      origin=context.path,
      annotation=Annotation(name_node.byte_range, self.TITLE),
    )
    return self._renderer.render(Message(title, [snippet], help_text))


def _create_async_for_task(renderer: SnippetRenderer | None = None) -> CheckAsyncForTask:
  return CheckAsyncForTask(renderer)


register_check("ASY001", _create_async_for_task)

"""
Hierarchical test-case tree built from a job result's metadata.

The service nests test cases inside objects where any list-valued key (other
than "steps") names a category, and the remaining keys describe a test case.
One source object can therefore yield categories, a test case, or both.

The tree itself is immutable. Expand/collapse flags live in a TreeView, keyed
by node path, so toggling never touches the tree.
"""

import dataclasses
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Union

from ci_common.models import JobResult

# Per-step detail of a test case; never a category
STEPS_KEY = "steps"

NodePath = tuple[int, ...]


@dataclass(frozen=True)
class TestCaseNode:
    """Leaf record of one executed test case (raw fields minus category keys)."""

    __test__ = False  # Not a pytest test class

    fields: dict[str, Any]

    @property
    def id(self) -> str:
        return str(self.fields["id"])


@dataclass(frozen=True)
class CategoryNode:
    """Named grouping of test cases and sub-categories."""

    name: str
    children: tuple["TreeNode", ...] = ()


TreeNode = Union[CategoryNode, TestCaseNode]


@dataclass(frozen=True)
class CategoryOnly:
    categories: tuple[CategoryNode, ...]

    def nodes(self) -> tuple[TreeNode, ...]:
        return self.categories


@dataclass(frozen=True)
class TestCaseOnly:
    __test__ = False

    test_case: TestCaseNode

    def nodes(self) -> tuple[TreeNode, ...]:
        return (self.test_case,)


@dataclass(frozen=True)
class CategoryAndTestCase:
    """A source object that both opens categories and is itself a test case."""

    categories: tuple[CategoryNode, ...]
    test_case: TestCaseNode

    def nodes(self) -> tuple[TreeNode, ...]:
        return (*self.categories, self.test_case)


Classification = Union[CategoryOnly, TestCaseOnly, CategoryAndTestCase]


def _has_id(fields: dict[str, Any]) -> bool:
    value = fields.get("id")
    return value is not None and str(value) != ""


def classify_item(raw: Any) -> Classification | None:
    """
    Classify one source object of a test_cases list.

    Returns None for anything that is neither a category holder nor a test
    case (including non-objects).
    """
    if not isinstance(raw, dict):
        return None

    categories = []
    remainder = dict(raw)
    for key, value in raw.items():
        if key != STEPS_KEY and isinstance(value, list):
            categories.append(CategoryNode(name=key, children=build_tree(value)))
            del remainder[key]

    test_case = TestCaseNode(fields=remainder) if _has_id(remainder) else None

    if categories and test_case:
        return CategoryAndTestCase(categories=tuple(categories), test_case=test_case)
    if categories:
        return CategoryOnly(categories=tuple(categories))
    if test_case:
        return TestCaseOnly(test_case=test_case)
    return None


def build_tree(raw: Any) -> tuple[TreeNode, ...]:
    """
    Build the ordered node list for a test_cases value.

    Anything other than a list yields an empty tree.
    """
    if not isinstance(raw, list):
        return ()
    nodes: list[TreeNode] = []
    for item in raw:
        classification = classify_item(item)
        if classification is not None:
            nodes.extend(classification.nodes())
    return tuple(nodes)


def flatten_tree(nodes: Sequence[TreeNode]) -> tuple[TestCaseNode, ...]:
    """All test-case nodes of a tree, depth-first in source order."""
    collected: list[TestCaseNode] = []
    for node in nodes:
        if isinstance(node, CategoryNode):
            collected.extend(flatten_tree(node.children))
        else:
            collected.append(node)
    return tuple(collected)


def flatten_test_cases(raw: Any) -> tuple[TestCaseNode, ...]:
    """The flattened test case set of a raw test_cases value."""
    return flatten_tree(build_tree(raw))


def attach_tree(result: JobResult) -> JobResult:
    """Return a copy of result with its tree built from metadata."""
    return dataclasses.replace(result, tree=build_tree(result.raw_test_cases))


def node_at(nodes: Sequence[TreeNode], path: NodePath) -> TreeNode:
    """
    Look up a node by its path of child indices.

    Raises:
        KeyError: If the path does not lead to a node
    """
    node: TreeNode | None = None
    children: Sequence[TreeNode] = nodes
    for index in path:
        if not 0 <= index < len(children):
            raise KeyError(path)
        node = children[index]
        children = node.children if isinstance(node, CategoryNode) else ()
    if node is None:
        raise KeyError(path)
    return node


@dataclass(frozen=True)
class TreeRow:
    """One render-ready line of a tree view."""

    depth: int
    path: NodePath
    node: TreeNode
    expanded: bool = True


class TreeView:
    """
    Expand/collapse state for one displayed tree.

    Every category starts expanded. Each view owns its own state, so two
    views over the same tree never affect each other, and a view created for
    a freshly built tree always starts from the defaults.
    """

    def __init__(self, nodes: Sequence[TreeNode]):
        self.nodes = tuple(nodes)
        self._expanded: dict[NodePath, bool] = {}

    def _category_paths(
        self, nodes: Sequence[TreeNode], prefix: NodePath = ()
    ) -> Iterator[NodePath]:
        for index, node in enumerate(nodes):
            if isinstance(node, CategoryNode):
                path = (*prefix, index)
                yield path
                yield from self._category_paths(node.children, path)

    def is_expanded(self, path: NodePath) -> bool:
        return self._expanded.get(tuple(path), True)

    def set_expanded(self, path: NodePath, expanded: bool) -> None:
        """
        Set the flag of the category at path.

        Raises:
            KeyError: If path does not lead to a category
        """
        path = tuple(path)
        if not isinstance(node_at(self.nodes, path), CategoryNode):
            raise KeyError(path)
        self._expanded[path] = expanded

    def toggle(self, path: NodePath) -> bool:
        """Flip the flag of the category at path and return the new value."""
        expanded = not self.is_expanded(path)
        self.set_expanded(path, expanded)
        return expanded

    def expand_all(self) -> None:
        self._expanded.clear()

    def collapse_all(self) -> None:
        for path in self._category_paths(self.nodes):
            self._expanded[path] = False

    def rows(self) -> Iterator[TreeRow]:
        """Yield visible rows, skipping the children of collapsed categories."""
        yield from self._rows(self.nodes, (), 0)

    def _rows(
        self, nodes: Sequence[TreeNode], prefix: NodePath, depth: int
    ) -> Iterator[TreeRow]:
        for index, node in enumerate(nodes):
            path = (*prefix, index)
            if isinstance(node, CategoryNode):
                expanded = self.is_expanded(path)
                yield TreeRow(depth=depth, path=path, node=node, expanded=expanded)
                if expanded:
                    yield from self._rows(node.children, path, depth + 1)
            else:
                yield TreeRow(depth=depth, path=path, node=node)

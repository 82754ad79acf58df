"""Parse TSX source with tree-sitter and apply byte-range edits."""

import logging
from dataclasses import dataclass

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

# Leaf node types that carry one segment of a dotted name
NAME_SEGMENT_TYPES = {"identifier", "type_identifier", "property_identifier"}

# Node types that join name segments with "."
QUALIFIED_NAME_TYPES = {"nested_type_identifier", "nested_identifier", "member_expression"}


class SourceParseError(Exception):
    """Source text could not be parsed without syntax errors."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line


@dataclass(frozen=True)
class TextEdit:
    """Replace source bytes [start, end) with replacement text."""

    start: int
    end: int
    replacement: str


@dataclass
class SourceTree:
    """A parsed source file: the tree and the bytes it was parsed from."""

    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        """Return the source text covered by a node."""
        return self.source[node.start_byte : node.end_byte].decode("utf-8")


def parse_source(source: str) -> SourceTree:
    """Parse TSX source text.

    Args:
        source: The file content

    Returns:
        The parsed SourceTree

    Raises:
        SourceParseError: If tree-sitter reports a syntax error
    """
    data = source.encode("utf-8")
    tree = Parser(TSX_LANGUAGE).parse(data)
    if tree.root_node.has_error:
        line = _first_error_line(tree.root_node)
        logger.warning(f"Syntax error near line {line}")
        raise SourceParseError(f"Syntax error near line {line}", line=line)
    return SourceTree(source=data, tree=tree)


def _first_error_line(node: Node) -> int | None:
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error:
            return _first_error_line(child)
    return None


def named_children(node: Node) -> list[Node]:
    """Named children of a node, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def walk(node: Node):
    """Yield a node and all its descendants in source order."""
    yield node
    for child in node.children:
        yield from walk(child)


def name_segments(tree: SourceTree, node: Node) -> tuple[str, ...] | None:
    """Split a simple or dotted name node into its segments.

    Handles any nesting depth, so ``A.B.C`` yields ``("A", "B", "C")``.

    Returns:
        The segments, or None if the node is not a name
    """
    if node.type in NAME_SEGMENT_TYPES:
        return (tree.text(node),)
    if node.type not in QUALIFIED_NAME_TYPES:
        return None

    segments: list[str] = []
    for child in named_children(node):
        child_segments = name_segments(tree, child)
        if child_segments is None:
            return None
        segments.extend(child_segments)
    return tuple(segments) if segments else None


def apply_edits(source: bytes, edits: list[TextEdit]) -> bytes:
    """Apply non-overlapping edits to source bytes in a single pass.

    Args:
        source: Original source bytes
        edits: Edits with offsets into ``source``

    Returns:
        The edited source bytes

    Raises:
        ValueError: If two edits overlap
    """
    ordered = sorted(edits, key=lambda edit: (edit.start, edit.end))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise ValueError(
                f"Overlapping edits at bytes {previous.start}-{previous.end} "
                f"and {current.start}-{current.end}"
            )

    result = source
    for edit in reversed(ordered):
        result = (
            result[: edit.start] + edit.replacement.encode("utf-8") + result[edit.end :]
        )
    return result

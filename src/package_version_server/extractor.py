"""Locate the dependency entry under the cursor in a package.json document.

The matcher only relies on the small ``SyntaxNode`` capability set (kind,
children, byte span, point span), so any JSON parser that can produce such a
tree would do. ``parse_document`` builds one with tree-sitter-json.

Extraction is re-run from scratch on every request. Between two requests the
user may have typed anywhere in the file, so nothing from an earlier query is
reused.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol

import structlog
import tree_sitter_json
from tree_sitter import Language, Node, Parser

from package_version_server.models.document import (
    ExtractionResult,
    Position,
    Range,
    TokenKind,
)

log = structlog.get_logger()

DEPENDENCY_KEYS = frozenset(
    {
        "dependencies",
        "devDependencies",
        "peerDependencies",
        "optionalDependencies",
        "bundledDependencies",
        "bundleDependencies",
    }
)

_JSON_LANGUAGE = Language(tree_sitter_json.language())

Point = tuple[int, int]


class SyntaxNode(Protocol):
    """Minimal view of a concrete syntax tree node."""

    @property
    def kind(self) -> str: ...

    @property
    def children(self) -> Sequence[SyntaxNode]: ...

    @property
    def start_byte(self) -> int: ...

    @property
    def end_byte(self) -> int: ...

    @property
    def start_point(self) -> Point: ...

    @property
    def end_point(self) -> Point: ...


class TreeSitterNode:
    """Adapts a ``tree_sitter.Node`` to ``SyntaxNode``."""

    __slots__ = ("_node",)

    def __init__(self, node: Node) -> None:
        self._node = node

    @property
    def kind(self) -> str:
        return self._node.type

    @property
    def children(self) -> list[TreeSitterNode]:
        return [TreeSitterNode(child) for child in self._node.children]

    @property
    def start_byte(self) -> int:
        return self._node.start_byte

    @property
    def end_byte(self) -> int:
        return self._node.end_byte

    @property
    def start_point(self) -> Point:
        return (self._node.start_point[0], self._node.start_point[1])

    @property
    def end_point(self) -> Point:
        return (self._node.end_point[0], self._node.end_point[1])


def parse_document(text: str) -> TreeSitterNode | None:
    """Parse ``text`` as JSON. Returns ``None`` when no tree could be built.

    tree-sitter recovers from syntax errors, so a half-typed document still
    yields a tree with ERROR nodes around the broken region.
    """
    parser = Parser(_JSON_LANGUAGE)
    tree = parser.parse(text.encode("utf-8"))
    if tree is None or tree.root_node is None:
        return None
    return TreeSitterNode(tree.root_node)


def extract(
    tree: SyntaxNode | None, text: str, position: Position
) -> ExtractionResult | None:
    """Return the dependency entry whose name or version token holds ``position``.

    Containment is inclusive on both ends, so a cursor right after the last
    character of a token (the usual place while typing) still matches.
    """
    if tree is None:
        return None

    source = text.encode("utf-8")
    point = position.as_point()

    for name_node, version_node in _dependency_entries(tree, source):
        name_text, name_range = _string_token(name_node, source)
        version_text, version_range = _string_token(version_node, source)

        if name_range.contains(position):
            return ExtractionResult(
                package_name=name_text,
                version_spec_text=version_text,
                matched_range=name_range,
                token_kind=TokenKind.NAME,
            )
        if version_range.contains(position):
            return ExtractionResult(
                package_name=name_text,
                version_spec_text=version_text,
                matched_range=version_range,
                token_kind=TokenKind.VERSION,
            )

    log.debug("no_dependency_at_position", line=point[0], column=point[1])
    return None


def extract_dependency(text: str, position: Position) -> ExtractionResult | None:
    """Parse ``text`` and run ``extract`` in one step."""
    return extract(parse_document(text), text, position)


# ---------------------------------------------------------------------------
# Tree walking
# ---------------------------------------------------------------------------


def _walk(root: SyntaxNode) -> Iterator[SyntaxNode]:
    """Pre-order traversal, i.e. document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _split_pair(pair: SyntaxNode) -> tuple[SyntaxNode, SyntaxNode] | None:
    """Return ``(key, value)`` of a ``pair`` node, or None if it is incomplete."""
    children = [child for child in pair.children if child.kind != "comment"]
    for index, child in enumerate(children):
        if child.kind == ":":
            if index == 0 or index + 1 >= len(children):
                return None
            return children[index - 1], children[index + 1]
    return None


def _dependency_entries(
    root: SyntaxNode, source: bytes
) -> Iterator[tuple[SyntaxNode, SyntaxNode]]:
    """Yield ``(name, version)`` string nodes of every dependency block entry."""
    for node in _walk(root):
        if node.kind != "pair":
            continue
        split = _split_pair(node)
        if split is None:
            continue
        key, value = split
        if key.kind != "string" or value.kind != "object":
            continue
        if _string_token(key, source)[0] not in DEPENDENCY_KEYS:
            continue
        for entry in value.children:
            if entry.kind != "pair":
                continue
            entry_split = _split_pair(entry)
            if entry_split is None:
                continue
            name, version = entry_split
            if name.kind == "string" and version.kind == "string":
                yield name, version


def _content_nodes(string_node: SyntaxNode) -> list[SyntaxNode]:
    # Everything between the quotes: string_content and escape_sequence runs.
    return [child for child in string_node.children if child.kind != '"']


def _string_token(string_node: SyntaxNode, source: bytes) -> tuple[str, Range]:
    """Text between the quotes of a string node and its span.

    An empty string yields a zero-width span just after the opening quote.
    """
    parts = _content_nodes(string_node)
    if not parts:
        line, column = string_node.start_point
        anchor = Position(line=line, column=column + 1)
        return "", Range(start=anchor, end=anchor)
    start_line, start_column = parts[0].start_point
    end_line, end_column = parts[-1].end_point
    return (
        source[parts[0].start_byte : parts[-1].end_byte].decode("utf-8", errors="replace"),
        Range(
            start=Position(line=start_line, column=start_column),
            end=Position(line=end_line, column=end_column),
        ),
    )

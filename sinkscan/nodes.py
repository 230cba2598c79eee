"""
Node model over the tree-sitter Java grammar.

``SourceNode`` is a thin handle around a ``tree_sitter.Node`` that knows its
compilation unit, so rules can go from any node to the unit's symbol table.
Every grammar node has a raw ``type``; the handful of node shapes the rules
care about also get a coarse ``kind`` (see ``NodeKind``).
"""

from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

if TYPE_CHECKING:
    from sinkscan.unit import CompilationUnit

JAVA_LANG = Language(tsjava.language())


def new_parser() -> Parser:
    """Return a parser for Java sources. Parsers are not shared across threads."""
    return Parser(JAVA_LANG)


class NodeKind(Enum):
    CALL = "call-expression"
    CONSTRUCTION = "construction-expression"
    BINARY = "binary-expression"
    ANNOTATION = "annotation"
    DECLARATION = "declaration-statement"
    RETURN = "return-statement"
    LITERAL = "literal"
    REFERENCE = "reference"
    CONDITIONAL = "conditional-expression"
    ARRAY_LITERAL = "array-literal"


LITERAL_TYPES = frozenset({
    "decimal_integer_literal", "hex_integer_literal", "octal_integer_literal",
    "binary_integer_literal", "decimal_floating_point_literal",
    "hex_floating_point_literal", "character_literal", "string_literal",
    "text_block", "null_literal", "true", "false", "class_literal",
})

REFERENCE_TYPES = frozenset({"identifier", "field_access"})

COMMENT_TYPES = frozenset({"line_comment", "block_comment"})

KIND_BY_TYPE = {
    "method_invocation": NodeKind.CALL,
    "object_creation_expression": NodeKind.CONSTRUCTION,
    "binary_expression": NodeKind.BINARY,
    "annotation": NodeKind.ANNOTATION,
    "marker_annotation": NodeKind.ANNOTATION,
    "local_variable_declaration": NodeKind.DECLARATION,
    "return_statement": NodeKind.RETURN,
    "ternary_expression": NodeKind.CONDITIONAL,
    "array_initializer": NodeKind.ARRAY_LITERAL,
    "array_creation_expression": NodeKind.ARRAY_LITERAL,
    "identifier": NodeKind.REFERENCE,
    "field_access": NodeKind.REFERENCE,
}
KIND_BY_TYPE.update({t: NodeKind.LITERAL for t in LITERAL_TYPES})

# Grammar parents whose ``name``/``key``/``field`` child is not a standalone use.
_NAMING_FIELDS = ("name", "key", "field")
_NON_REFERENCE_PARENTS = frozenset({
    "scoped_identifier", "import_declaration", "package_declaration",
    "labeled_statement", "break_statement", "continue_statement",
})


class SourceNode:
    """A syntax node bound to its compilation unit."""

    __slots__ = ("_node", "unit")

    def __init__(self, node: Node, unit: "CompilationUnit"):
        self._node = node
        self.unit = unit

    # -- identity -----------------------------------------------------------

    @property
    def key(self) -> Tuple[int, int, str]:
        return (self._node.start_byte, self._node.end_byte, self._node.type)

    def __eq__(self, other) -> bool:
        return isinstance(other, SourceNode) and self.key == other.key and self.unit is other.unit

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        snippet = self.text if len(self.text) <= 40 else self.text[:37] + "..."
        return f"<SourceNode {self.type} {self.line}:{self.column} {snippet!r}>"

    # -- content ------------------------------------------------------------

    @property
    def raw(self) -> Node:
        return self._node

    @property
    def type(self) -> str:
        return self._node.type

    @property
    def kind(self) -> Optional[NodeKind]:
        kind = KIND_BY_TYPE.get(self._node.type)
        if kind is NodeKind.REFERENCE and self._node.type == "identifier" and not self._is_reference():
            return None
        return kind

    @property
    def text(self) -> str:
        return self._node.text.decode("utf-8", errors="replace") if self._node.text else ""

    @property
    def start_byte(self) -> int:
        return self._node.start_byte

    @property
    def end_byte(self) -> int:
        return self._node.end_byte

    @property
    def line(self) -> int:
        """1-based line number."""
        return self._node.start_point[0] + 1

    @property
    def column(self) -> int:
        """0-based character column (tree-sitter reports UTF-8 bytes)."""
        row, offset = self._node.start_point
        lines = self.unit.lines
        if row >= len(lines):
            return offset
        return len(lines[row].encode("utf-8")[:offset].decode("utf-8", errors="ignore"))

    # -- navigation ---------------------------------------------------------

    def _wrap(self, node: Optional[Node]) -> Optional["SourceNode"]:
        return SourceNode(node, self.unit) if node is not None else None

    @property
    def parent(self) -> Optional["SourceNode"]:
        return self._wrap(self._node.parent)

    @property
    def children(self) -> List["SourceNode"]:
        return [SourceNode(c, self.unit) for c in self._node.children]

    @property
    def named_children(self) -> List["SourceNode"]:
        """Named children, comments excluded."""
        return [SourceNode(c, self.unit) for c in self._node.named_children
                if c.type not in COMMENT_TYPES]

    def field(self, name: str) -> Optional["SourceNode"]:
        return self._wrap(self._node.child_by_field_name(name))

    def fields(self, name: str) -> List["SourceNode"]:
        return [SourceNode(c, self.unit) for c in self._node.children_by_field_name(name)]

    def child_of_type(self, *types: str) -> Optional["SourceNode"]:
        """Get first direct child of one of the given types."""
        for child in self._node.children:
            if child.type in types:
                return SourceNode(child, self.unit)
        return None

    def ancestors(self) -> Iterator["SourceNode"]:
        node = self._node.parent
        while node is not None:
            yield SourceNode(node, self.unit)
            node = node.parent

    def descendants(self, *types: str) -> Iterator["SourceNode"]:
        """Pre-order walk over named descendants, optionally filtered by type."""
        stack = list(reversed(self._node.named_children))
        while stack:
            node = stack.pop()
            if not types or node.type in types:
                yield SourceNode(node, self.unit)
            stack.extend(reversed(node.named_children))

    def _is_reference(self) -> bool:
        parent = self._node.parent
        if parent is None:
            return False
        if parent.type in _NON_REFERENCE_PARENTS:
            return False
        for field_name in _NAMING_FIELDS:
            named = parent.child_by_field_name(field_name)
            if named is not None and named.start_byte == self._node.start_byte \
                    and named.end_byte == self._node.end_byte:
                return False
        return True


# ============================================================================
# AST Helpers
# ============================================================================

def unwrap(node: Optional[SourceNode]) -> Optional[SourceNode]:
    """Strip redundant parentheses around an expression."""
    while node is not None and node.type == "parenthesized_expression":
        inner = node.named_children
        node = inner[0] if inner else None
    return node


def arguments(node: SourceNode) -> List[SourceNode]:
    """Argument expressions of a call or ``new`` expression; empty when missing."""
    args = node.field("arguments")
    if args is None:
        return []
    return args.named_children


def snippet(node: SourceNode, limit: int = 120) -> str:
    """Single-line excerpt of a node's source, for messages."""
    text = " ".join(node.text.split())
    return text if len(text) <= limit else text[:limit - 3] + "..."

"""
Qualified-name resolution for calls and constructions.

``resolve`` answers "which ``owner.member`` does this call or ``new`` target?"
using only what one compilation unit declares plus the JDK catalogue in
``sinkscan.javatypes``. When the receiver's type cannot be determined the
answer is ``None`` and sink rules simply do not fire.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional

from sinkscan.javatypes import RETURN_TYPES, SUPERTYPES, normalize_type_text
from sinkscan.nodes import SourceNode, unwrap
from sinkscan.symbols import Symbol, SymbolTable

logger = logging.getLogger(__name__)

CONSTRUCTOR = "<init>"

_MAX_INFERENCE_DEPTH = 32


class QualifiedName(NamedTuple):
    owner: str
    member: str

    def __str__(self) -> str:
        return f"{self.owner}.{self.member}"


def lineage(type_name: str, symbols: Optional[SymbolTable] = None) -> List[str]:
    """``type_name`` followed by all its known supertypes, breadth first."""
    seen = [type_name]
    index = 0
    while index < len(seen):
        current = seen[index]
        index += 1
        parents = list(SUPERTYPES.get(current, ()))
        if symbols is not None:
            parents.extend(symbols.supertypes(current))
        for parent in parents:
            if parent not in seen:
                seen.append(parent)
    return seen


def is_subtype(type_name: Optional[str], parents: Iterable[str],
               symbols: Optional[SymbolTable] = None) -> bool:
    if not type_name:
        return False
    wanted = set(parents)
    return any(t in wanted for t in lineage(type_name, symbols))


def matches_any(qname: Optional[QualifiedName], sinks: Iterable[str],
                symbols: Optional[SymbolTable] = None) -> bool:
    """True when ``qname`` or an inherited member of a supertype is one of ``sinks``.

    Constructors are not inherited, so ``<init>`` sinks compare the owner exactly.
    """
    if qname is None:
        return False
    sinks = set(sinks)
    if qname.member == CONSTRUCTOR:
        return str(qname) in sinks
    return any(f"{owner}.{qname.member}" in sinks for owner in lineage(qname.owner, symbols))


def resolve(node: SourceNode, _depth: int = 0) -> Optional[QualifiedName]:
    """Resolve a method invocation or object creation to ``owner.member``.

    Receiver chains deeper than ``_MAX_INFERENCE_DEPTH`` resolve to ``None``.
    """
    node = unwrap(node)
    if node is None or _depth > _MAX_INFERENCE_DEPTH:
        return None
    symbols = node.unit.symbols
    if node.type == "object_creation_expression":
        type_node = node.field("type")
        owner = symbols.qualify(type_node.text) if type_node is not None else None
        return QualifiedName(owner, CONSTRUCTOR) if owner else None
    if node.type != "method_invocation":
        return None
    name = node.field("name")
    if name is None:
        return None
    target = node.field("object")
    if target is None:
        owner = symbols.static_imports.get(name.text) or symbols.enclosing_type(node)
    else:
        owner = type_of(target, _depth=_depth + 1)
    return QualifiedName(owner, name.text) if owner else None


def type_of(expr: Optional[SourceNode], allow_unqualified: bool = False,
            _depth: int = 0) -> Optional[str]:
    """Static type of an expression, fully qualified.

    With ``allow_unqualified`` a type that is written in source but cannot be
    qualified (e.g. a class from an unlisted import) is returned by its
    simple name instead of ``None``.
    """
    node = unwrap(expr)
    if node is None or _depth > _MAX_INFERENCE_DEPTH:
        return None
    symbols = node.unit.symbols
    kind = node.type

    if kind in ("string_literal", "text_block"):
        return "java.lang.String"
    if kind == "this":
        return symbols.enclosing_type(node)
    if kind == "super":
        owner = symbols.enclosing_type(node)
        parents = symbols.supertypes(owner) if owner else ()
        return parents[0] if parents else None
    if kind == "cast_expression":
        return _written_type(symbols, node.field("type"), allow_unqualified)
    if kind == "object_creation_expression":
        return _written_type(symbols, node.field("type"), allow_unqualified)
    if kind in ("identifier", "field_access"):
        symbol = symbols.resolve_reference(node)
        if symbol is not None:
            return _symbol_type(symbol, allow_unqualified, _depth)
        # Not a variable: maybe a type name used as a static receiver.
        if not _looks_like_type_name(node):
            return None
        return _written_type(symbols, node, allow_unqualified)
    if kind == "method_invocation":
        return _return_type(node, symbols, _depth)
    if kind == "ternary_expression":
        return (type_of(node.field("consequence"), allow_unqualified, _depth + 1)
                or type_of(node.field("alternative"), allow_unqualified, _depth + 1))
    if kind == "binary_expression" and type_of(node.field("left"), False, _depth + 1) == "java.lang.String":
        return "java.lang.String"
    return None


def _looks_like_type_name(node: SourceNode) -> bool:
    if node.type == "identifier":
        return node.text[:1].isupper()
    member = node.field("field")
    target = unwrap(node.field("object"))
    return (member is not None and member.text[:1].isupper()
            and target is not None and target.type in ("identifier", "field_access"))


def _written_type(symbols: SymbolTable, type_node: Optional[SourceNode],
                  allow_unqualified: bool) -> Optional[str]:
    if type_node is None:
        return None
    qualified = symbols.qualify(type_node.text)
    if qualified is None and allow_unqualified:
        return normalize_type_text(type_node.text) or None
    return qualified


def _symbol_type(symbol: Symbol, allow_unqualified: bool, depth: int) -> Optional[str]:
    if symbol.type_name:
        return symbol.type_name
    declared = normalize_type_text(symbol.declared_type or "")
    if declared in ("", "var") and symbol.initializer is not None:
        return type_of(symbol.initializer, allow_unqualified, depth + 1)
    if allow_unqualified and declared and declared != "var":
        return declared
    return None


def _return_type(call: SourceNode, symbols: SymbolTable, depth: int) -> Optional[str]:
    qname = resolve(call, depth + 1)
    if qname is None:
        return None
    for owner in lineage(qname.owner, symbols):
        returned = RETURN_TYPES.get(f"{owner}.{qname.member}")
        if returned:
            return returned
    method = symbols.method_of(qname.owner, qname.member)
    if method is not None:
        return method.type_name
    logger.debug("No return type known for %s", qname)
    return None

"""
Resource and information leaks.

Both checks are intra-procedural: a resource counts as released when any
``finally`` block of the declaring method closes it, and exception messages
count as leaked when they are part of a ``return`` value.
"""

from typing import Optional

from sinkscan.findings import Severity
from sinkscan.javatypes import normalize_type_text, simple_name
from sinkscan.nodes import NodeKind, SourceNode, unwrap
from sinkscan.resolver import is_subtype, resolve, type_of
from sinkscan.rules.base import Rule
from sinkscan.symbols import Symbol

RESOURCE_TYPES = frozenset({
    "java.io.InputStream",
    "java.io.OutputStream",
    "java.io.Reader",
    "java.io.Writer",
    "java.io.FileInputStream",
    "java.io.FileOutputStream",
    "java.io.BufferedReader",
    "java.io.BufferedWriter",
    "java.sql.Connection",
    "java.sql.Statement",
    "java.sql.PreparedStatement",
    "java.sql.ResultSet",
    "java.net.Socket",
    "java.net.ServerSocket",
})

_CALLABLE_TYPES = frozenset({"method_declaration", "constructor_declaration", "lambda_expression"})


class ResourceLeakRule(Rule):
    rule_id = "RESOURCE_LEAK"
    name = "Resource not released"
    severity = Severity.WARNING
    kinds = frozenset({NodeKind.DECLARATION, NodeKind.CALL})

    def matches(self, node):
        if node.kind is NodeKind.DECLARATION:
            return self.leaking_variable(node) is not None
        if node.kind is NodeKind.CALL:
            return self._is_close_quietly(node)
        return False

    # -- declarations -------------------------------------------------------

    def leaking_variable(self, decl: SourceNode) -> Optional[Symbol]:
        """First resource declared by ``decl`` that is never released."""
        scope = self._scope(decl)
        if scope is None or scope.type == "resource_specification":
            return None
        symbols = decl.unit.symbols
        for symbol in symbols.declared_symbols(decl):
            if not is_subtype(self._resource_type(symbol), RESOURCE_TYPES, symbols):
                continue
            if not self._is_released(symbol, scope):
                return symbol
        return None

    @staticmethod
    def _scope(decl: SourceNode) -> Optional[SourceNode]:
        for ancestor in decl.ancestors():
            if ancestor.type in _CALLABLE_TYPES or ancestor.type == "resource_specification":
                return ancestor
        return decl.parent

    @staticmethod
    def _resource_type(symbol: Symbol) -> Optional[str]:
        if symbol.type_name:
            return symbol.type_name
        if normalize_type_text(symbol.declared_type or "") == "var":
            return type_of(symbol.initializer)
        return None

    def _is_released(self, symbol: Symbol, scope: SourceNode) -> bool:
        for finally_clause in scope.descendants("finally_clause"):
            for call in finally_clause.descendants("method_invocation"):
                name = call.field("name")
                if name is not None and name.text == "close" and self._refers_to(call.field("object"), symbol):
                    return True
        # Java 9 form: try (existingVariable) { ... }
        for resource in scope.descendants("resource"):
            if resource.field("name") is None and any(self._refers_to(c, symbol) for c in resource.named_children):
                return True
        return False

    @staticmethod
    def _refers_to(expr: Optional[SourceNode], symbol: Symbol) -> bool:
        expr = unwrap(expr)
        if expr is None or expr.type not in ("identifier", "field_access"):
            return False
        resolved = expr.unit.symbols.resolve_reference(expr)
        return resolved is not None and resolved.declaration == symbol.declaration

    # -- closeQuietly -------------------------------------------------------

    @staticmethod
    def _close_quietly_owner(call: SourceNode) -> Optional[str]:
        name = call.field("name")
        if name is None or name.text.lower() != "closequietly":
            return None
        qname = resolve(call)
        if qname is None:
            return None
        return qname.owner if "IOUtil" in qname.owner else None

    def _is_close_quietly(self, call: SourceNode) -> bool:
        return self._close_quietly_owner(call) is not None

    def message_key(self, node):
        return "close_quietly" if node.kind is NodeKind.CALL else "default"

    def details(self, node):
        if node.kind is NodeKind.CALL:
            owner = self._close_quietly_owner(node) or "IOUtils"
            return {"owner": simple_name(owner)}
        symbol = self.leaking_variable(node)
        if symbol is None:
            return {"variable": "?", "type": "?"}
        return {
            "variable": symbol.name,
            "type": simple_name(self._resource_type(symbol) or normalize_type_text(symbol.declared_type or "")),
        }


EXCEPTION_MARKERS = ("Exception", "Error", "Throwable")
MESSAGE_GETTERS = frozenset({"getMessage", "getLocalizedMessage"})
_RETURN_BOUNDARIES = frozenset({"method_declaration", "constructor_declaration", "class_body"})


def is_exception_message(call: SourceNode) -> bool:
    """``e.getMessage()`` / ``e.getLocalizedMessage()`` on an exception-family receiver."""
    if call.type != "method_invocation":
        return False
    name = call.field("name")
    if name is None or name.text not in MESSAGE_GETTERS:
        return False
    symbols = call.unit.symbols
    target = call.field("object")
    if target is None:
        # inherited getMessage() inside a Throwable subclass
        owner = symbols.enclosing_type(call)
        return is_subtype(owner, {"java.lang.Throwable"}, symbols)
    type_name = type_of(target, allow_unqualified=True)
    if not type_name:
        return False
    if any(marker in simple_name(type_name) for marker in EXCEPTION_MARKERS):
        return True
    return is_subtype(type_name, {"java.lang.Throwable"}, symbols)


def _inside_return(node: SourceNode) -> bool:
    for ancestor in node.ancestors():
        if ancestor.type == "return_statement":
            return True
        if ancestor.type in _RETURN_BOUNDARIES:
            return False
    return False


class InformationLeakRule(Rule):
    rule_id = "INFORMATION_LEAK"
    name = "System information leak"
    severity = Severity.WARNING
    kinds = frozenset({NodeKind.RETURN, NodeKind.CALL})

    def matches(self, node):
        if node.kind is NodeKind.CALL:
            return is_exception_message(node) and _inside_return(node)
        if node.kind is NodeKind.RETURN:
            return self._leaked_call(node) is not None
        return False

    @staticmethod
    def _leaked_call(statement: SourceNode) -> Optional[SourceNode]:
        return next((c for c in statement.descendants("method_invocation") if is_exception_message(c)), None)

    def details(self, node):
        call = node if node.kind is NodeKind.CALL else self._leaked_call(node)
        name = call.field("name") if call is not None else None
        return {"method": name.text if name is not None else "getMessage"}

"""SQL and OS command injection."""

from typing import Optional, Set

from sinkscan.classifier import (
    MAX_DEPTH, contains_concatenation_of, has_tainted_operand, is_concatenation, is_constant,
)
from sinkscan.findings import Severity
from sinkscan.nodes import NodeKind, SourceNode, arguments, unwrap
from sinkscan.resolver import resolve
from sinkscan.rules.base import SinkRule
from sinkscan.javatypes import simple_name

SQL_KEYWORDS = frozenset({
    "SELECT", "INSERT", "UPDATE", "DELETE", "DROP", "CREATE",
    "ALTER", "FROM", "WHERE", "JOIN", "UNION", "ORDER", "GROUP",
})

MYBATIS_ANNOTATIONS = frozenset({
    "org.apache.ibatis.annotations.Select",
    "org.apache.ibatis.annotations.Insert",
    "org.apache.ibatis.annotations.Update",
    "org.apache.ibatis.annotations.Delete",
})

# Calls that build a collection from their arguments.
COLLECTION_FACTORIES = frozenset({
    "java.util.List.of", "java.util.Set.of", "java.util.Arrays.asList",
})


def _skip_parentheses_up(node: SourceNode) -> Optional[SourceNode]:
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        parent = parent.parent
    return parent


class SqlInjectionRule(SinkRule):
    rule_id = "SQL_INJECTION"
    name = "SQL injection"
    severity = Severity.CRITICAL
    kinds = frozenset({NodeKind.CALL, NodeKind.BINARY, NodeKind.ANNOTATION})
    sinks = frozenset({
        "java.sql.Statement.executeQuery",
        "java.sql.Statement.execute",
        "java.sql.Statement.executeUpdate",
        "java.sql.Statement.executeLargeUpdate",
        "java.sql.Statement.addBatch",
        "java.sql.Connection.prepareStatement",
        "java.sql.Connection.prepareCall",
    })

    def matches(self, node):
        if node.kind is NodeKind.CALL:
            return self._unsafe_call(node)
        if node.kind is NodeKind.BINARY:
            return self._unsafe_concatenation(node)
        if node.kind is NodeKind.ANNOTATION:
            return self._mybatis_substitution(node)
        return False

    # -- calls --------------------------------------------------------------

    def _unsafe_call(self, node: SourceNode) -> bool:
        args = arguments(node)
        if not args or not self.is_sink(node):
            return False
        return self._is_unsafe_query(args[0], set(), 0)

    def _is_unsafe_query(self, expr: Optional[SourceNode], seen: Set, depth: int) -> bool:
        expr = unwrap(expr)
        if expr is None or depth > MAX_DEPTH:
            return False
        if expr.type == "binary_expression":
            return contains_concatenation_of(SQL_KEYWORDS, expr)
        if expr.type == "ternary_expression":
            return (self._is_unsafe_query(expr.field("consequence"), seen, depth + 1)
                    or self._is_unsafe_query(expr.field("alternative"), seen, depth + 1))
        if expr.type in ("identifier", "field_access"):
            symbol = expr.unit.symbols.resolve_reference(expr)
            if symbol is None or symbol.initializer is None or symbol.declaration in seen:
                return False
            seen.add(symbol.declaration)
            return self._is_unsafe_query(symbol.initializer, seen, depth + 1)
        return False

    # -- bare concatenations -----------------------------------------------

    def _unsafe_concatenation(self, node: SourceNode) -> bool:
        if not is_concatenation(node):
            return False
        # only the outermost operator of a chain is reported
        if is_concatenation(_skip_parentheses_up(node)):
            return False
        if not contains_concatenation_of(SQL_KEYWORDS, node):
            return False
        return not self._is_sink_query_argument(node)

    def _is_sink_query_argument(self, node: SourceNode) -> bool:
        """True when ``node`` flows directly into the query argument of a sink call."""
        current = node
        parent = current.parent
        while parent is not None:
            if parent.type == "parenthesized_expression":
                pass
            elif parent.type == "ternary_expression":
                condition = parent.field("condition")
                if condition is not None and condition == current:
                    return False
            else:
                break
            current, parent = parent, parent.parent
        if parent is None or parent.type != "argument_list":
            return False
        call = parent.parent
        if call is None or call.type != "method_invocation":
            return False
        args = parent.named_children
        return bool(args) and args[0] == current and self.is_sink(call)

    # -- MyBatis -------------------------------------------------------------

    def _mybatis_substitution(self, node: SourceNode) -> bool:
        name = node.field("name")
        if name is None or node.unit.symbols.qualify(name.text) not in MYBATIS_ANNOTATIONS:
            return False
        return any("${" in text for text in self._annotation_values(node))

    @staticmethod
    def _annotation_values(node: SourceNode):
        args = node.field("arguments")
        if args is None:
            return []
        values = []
        for child in args.named_children:
            if child.type == "element_value_pair":
                key = child.field("key")
                value = child.field("value")
                if key is not None and key.text == "value" and value is not None:
                    values.append(value.text)
            else:
                values.append(child.text)
        return values

    def message_key(self, node):
        if node.kind is NodeKind.ANNOTATION:
            return "annotation"
        if node.kind is NodeKind.CALL:
            return "call"
        return "default"

    def details(self, node):
        name = node.field("name")
        if node.kind is NodeKind.ANNOTATION:
            return {"annotation": simple_name(name.text) if name is not None else ""}
        if node.kind is NodeKind.CALL:
            return {"method": name.text if name is not None else ""}
        return {}


class CommandInjectionRule(SinkRule):
    rule_id = "COMMAND_INJECTION"
    name = "Command injection"
    severity = Severity.CRITICAL
    kinds = frozenset({NodeKind.CALL, NodeKind.CONSTRUCTION})
    sinks = frozenset({
        "java.lang.Runtime.exec",
        "java.lang.ProcessBuilder.command",
        "java.lang.ProcessBuilder.<init>",
    })

    def matches(self, node):
        args = arguments(node)
        if not args or not self.is_sink(node):
            return False
        return any(self.is_unsafe_argument(arg) for arg in args)

    def is_unsafe_argument(self, expr: Optional[SourceNode], depth: int = 0) -> bool:
        """True if ``expr`` may carry non-constant data into the command line."""
        expr = unwrap(expr)
        if expr is None:
            return False
        if depth > MAX_DEPTH:
            return True
        kind = expr.type
        if is_concatenation(expr):
            return has_tainted_operand(expr)
        if kind in ("identifier", "field_access"):
            return not is_constant(expr)
        if kind == "ternary_expression":
            return any(self.is_unsafe_argument(branch, depth + 1)
                       for branch in (expr.field("consequence"), expr.field("alternative")))
        if kind == "array_creation_expression":
            initializer = expr.field("value")
            return initializer is not None and self.is_unsafe_argument(initializer, depth + 1)
        if kind == "array_initializer":
            return any(self.is_unsafe_argument(element, depth + 1) for element in expr.named_children)
        if kind == "method_invocation" and str(resolve(expr)) in COLLECTION_FACTORIES:
            return any(self.is_unsafe_argument(arg, depth + 1) for arg in arguments(expr))
        return False

    def details(self, node):
        if node.kind is NodeKind.CONSTRUCTION:
            return {"target": "new ProcessBuilder()"}
        qname = self.resolve_sink(node)
        owner = simple_name(qname.owner) if qname else "Runtime"
        return {"target": f"{owner}.{node.field('name').text}()"}

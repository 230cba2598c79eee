"""File paths and URLs built from non-constant input."""

from sinkscan.classifier import is_constant
from sinkscan.findings import Severity
from sinkscan.nodes import NodeKind, arguments, snippet
from sinkscan.rules.base import SinkRule


class FirstArgumentRule(SinkRule):
    """Matches a sink whose first argument is not a constant."""

    def matches(self, node):
        args = arguments(node)
        if not args or not self.is_sink(node):
            return False
        return not is_constant(args[0], allow_conditional=True)

    def details(self, node):
        args = arguments(node)
        return {"argument": snippet(args[0], 60) if args else ""}


class PathTraversalRule(FirstArgumentRule):
    rule_id = "PATH_TRAVERSAL"
    name = "Path traversal"
    severity = Severity.ERROR
    kinds = frozenset({NodeKind.CONSTRUCTION, NodeKind.CALL})
    sinks = frozenset({
        "java.io.File.<init>",
        "java.nio.file.Paths.get",
        "java.nio.file.Path.of",
    })

    def details(self, node):
        values = super().details(node)
        if node.kind is NodeKind.CONSTRUCTION:
            values["target"] = "new File()"
        else:
            target = node.field("object")
            values["target"] = f"{target.text if target is not None else ''}.{node.field('name').text}()"
        return values


class UnsafeUrlCreationRule(FirstArgumentRule):
    rule_id = "UNSAFE_URL_CREATION"
    name = "Unsafe URL creation (SSRF)"
    severity = Severity.ERROR
    kinds = frozenset({NodeKind.CONSTRUCTION})
    sinks = frozenset({"java.net.URL.<init>"})

from sinkscan.findings import Severity
from sinkscan.nodes import NodeKind
from sinkscan.rules.base import SinkRule


class InsecureRandomRule(SinkRule):
    """``new java.util.Random()``; subclasses such as SecureRandom are not matched."""

    rule_id = "INSECURE_RANDOM"
    name = "Insecure random number generator"
    severity = Severity.WARNING
    kinds = frozenset({NodeKind.CONSTRUCTION})
    sinks = frozenset({"java.util.Random.<init>"})

    def matches(self, node):
        return self.is_sink(node)

"""
Traversal engine: one depth-first, pre-order pass per compilation unit.

Each node with a ``kind`` is handed to the rules registered for that kind;
every match becomes a ``Finding``. The walk uses an explicit stack, so deep
expression trees cannot exhaust Python's recursion limit.
"""

import logging
from typing import List, Optional

from sinkscan.findings import Finding
from sinkscan.registry import RuleRegistry, default_registry
from sinkscan.unit import CompilationUnit

logger = logging.getLogger(__name__)


class TraversalEngine:
    """Runs a registry's rules over compilation units.

    The engine holds no per-unit state, so one instance may analyse
    independent units from several threads at once.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    def analyze(self, unit: CompilationUnit) -> List[Finding]:
        findings: List[Finding] = []
        stack = [unit.root]
        while stack:
            node = stack.pop()
            if node.raw.is_error:
                continue
            for rule in self.registry.rules_for(node.kind):
                finding = self._apply(rule, node)
                if finding is not None:
                    findings.append(finding)
            stack.extend(reversed(node.named_children))
        logger.debug("%s: %d finding(s)", unit.path, len(findings))
        return findings

    @staticmethod
    def _apply(rule, node) -> Optional[Finding]:
        try:
            if not rule.matches(node):
                return None
            return Finding.from_match(rule, node, rule.describe(node))
        except Exception:
            logger.warning("Rule %s failed on %s:%d; skipping", rule.rule_id,
                           node.unit.path, node.line, exc_info=True)
            return None


def analyze(unit: CompilationUnit, registry: Optional[RuleRegistry] = None) -> List[Finding]:
    """Analyse one unit with ``registry`` (the default registry when omitted)."""
    return TraversalEngine(registry).analyze(unit)

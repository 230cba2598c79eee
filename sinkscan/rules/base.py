"""Base class for detection rules."""

from typing import Dict, FrozenSet, Optional

from sinkscan.findings import Severity
from sinkscan.messages import ADVICE, DEFAULT_ADVICE, MESSAGES
from sinkscan.nodes import NodeKind, SourceNode, snippet
from sinkscan.resolver import QualifiedName, matches_any, resolve


class Rule:
    """A stateless, severity-tagged predicate over syntax nodes.

    Subclasses set ``rule_id``, ``name``, ``severity`` and the node ``kinds``
    they inspect, and implement ``matches``. Messages come from
    ``sinkscan.messages`` unless the subclass supplies its own ``templates``.
    """

    rule_id: str = ""
    name: str = ""
    severity: Severity = Severity.WARNING
    kinds: FrozenSet[NodeKind] = frozenset()
    templates: Optional[Dict[str, str]] = None
    advice_text: Optional[str] = None

    def matches(self, node: SourceNode) -> bool:
        raise NotImplementedError

    def message_key(self, node: SourceNode) -> str:
        return "default"

    def details(self, node: SourceNode) -> Dict[str, str]:
        return {}

    def describe(self, node: SourceNode) -> str:
        templates = self.templates or MESSAGES.get(self.rule_id, {"default": "{code}"})
        template = templates.get(self.message_key(node), templates["default"])
        values = {"code": snippet(node)}
        values.update(self.details(node))
        return template.format(**values)

    def advice(self) -> str:
        if self.advice_text is not None:
            return self.advice_text
        return ADVICE.get(self.rule_id, DEFAULT_ADVICE)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.rule_id} {self.severity.value}>"


class SinkRule(Rule):
    """A rule keyed on calls or constructions that resolve to one of ``sinks``."""

    sinks: FrozenSet[str] = frozenset()

    def resolve_sink(self, node: SourceNode) -> Optional[QualifiedName]:
        qname = resolve(node)
        if matches_any(qname, self.sinks, node.unit.symbols):
            return qname
        return None

    def is_sink(self, node: SourceNode) -> bool:
        return self.resolve_sink(node) is not None

"""Rule registry with kind-based dispatch."""

import logging
from typing import Dict, Iterable, List, Optional

from sinkscan.nodes import NodeKind
from sinkscan.rules import Rule, builtin_rules

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Ordered collection of rules, unique by ``rule_id``.

    ``register`` and ``clear`` are not thread-safe; populate the registry
    before analysis starts and treat it as read-only afterwards.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: List[Rule] = []
        self._by_kind: Dict[NodeKind, List[Rule]] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if not rule.rule_id:
            raise ValueError(f"Rule {rule!r} has no rule_id")
        if self.rule_by_id(rule.rule_id) is not None:
            raise ValueError(f"Duplicate rule id: {rule.rule_id}")
        self._rules.append(rule)
        for kind in rule.kinds:
            self._by_kind.setdefault(kind, []).append(rule)
        logger.debug("Registered rule %s for %s", rule.rule_id,
                     ", ".join(sorted(k.value for k in rule.kinds)))
        return rule

    def all_rules(self) -> List[Rule]:
        return list(self._rules)

    def rule_by_id(self, rule_id: str) -> Optional[Rule]:
        return next((r for r in self._rules if r.rule_id == rule_id), None)

    def rules_for(self, kind: Optional[NodeKind]) -> List[Rule]:
        if kind is None:
            return []
        return list(self._by_kind.get(kind, ()))

    def clear(self):
        self._rules.clear()
        self._by_kind.clear()

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return self.rule_by_id(rule_id) is not None


def create_registry(disabled_rules: Iterable[str] = ()) -> RuleRegistry:
    """A registry holding the built-in rules minus ``disabled_rules``."""
    disabled = set(disabled_rules)
    return RuleRegistry(r for r in builtin_rules() if r.rule_id not in disabled)


_default_registry: Optional[RuleRegistry] = None


def default_registry() -> RuleRegistry:
    """Process-wide registry preloaded with the built-in rules."""
    global _default_registry
    if _default_registry is None:
        _default_registry = create_registry()
    return _default_registry

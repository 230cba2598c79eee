from typing import List

from sinkscan.rules.base import Rule, SinkRule
from sinkscan.rules.deserialization import FastjsonDeserializationRule, JavaDeserializationRule
from sinkscan.rules.injection import CommandInjectionRule, SqlInjectionRule
from sinkscan.rules.leaks import InformationLeakRule, ResourceLeakRule
from sinkscan.rules.randomness import InsecureRandomRule
from sinkscan.rules.traversal import PathTraversalRule, UnsafeUrlCreationRule

BUILTIN_RULES = (
    FastjsonDeserializationRule,
    JavaDeserializationRule,
    SqlInjectionRule,
    CommandInjectionRule,
    PathTraversalRule,
    UnsafeUrlCreationRule,
    ResourceLeakRule,
    InformationLeakRule,
    InsecureRandomRule,
)


def builtin_rules() -> List[Rule]:
    """Fresh instances of the nine built-in rules, in catalogue order."""
    return [rule_class() for rule_class in BUILTIN_RULES]


__all__ = [
    "Rule", "SinkRule", "BUILTIN_RULES", "builtin_rules",
    "FastjsonDeserializationRule", "JavaDeserializationRule", "SqlInjectionRule",
    "CommandInjectionRule", "PathTraversalRule", "UnsafeUrlCreationRule",
    "ResourceLeakRule", "InformationLeakRule", "InsecureRandomRule",
]

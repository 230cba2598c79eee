"""Severity levels and the Finding record produced for each rule match."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sinkscan.nodes import SourceNode

if TYPE_CHECKING:
    from sinkscan.rules.base import Rule


class Severity(Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


SEVERITY_ORDER = {
    Severity.CRITICAL: 3,
    Severity.ERROR: 2,
    Severity.WARNING: 1,
    Severity.INFO: 0,
}

# Findings at or above this level make the CLI exit non-zero.
FAILING_SEVERITY = Severity.ERROR


def parse_severity(value) -> Severity:
    """Accept a ``Severity`` or its case-insensitive name."""
    if isinstance(value, Severity):
        return value
    try:
        return Severity(str(value).strip().upper())
    except ValueError:
        valid = ", ".join(s.value for s in Severity)
        raise ValueError(f"Unknown severity {value!r} (expected one of: {valid})") from None


@dataclass
class Finding:
    file_path: str
    line_number: int
    col_offset: int
    line_content: str
    rule_id: str
    rule_name: str
    severity: Severity
    message: str
    advice: str = ""
    node: Optional[SourceNode] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_match(cls, rule: "Rule", node: SourceNode, message: str) -> "Finding":
        unit = node.unit
        return cls(
            file_path=unit.path,
            line_number=node.line,
            col_offset=node.column,
            line_content=unit.line_content(node.line),
            rule_id=rule.rule_id,
            rule_name=rule.name,
            severity=rule.severity,
            message=message,
            advice=rule.advice(),
            node=node,
        )

    def to_dict(self) -> dict:
        return {
            "file": self.file_path,
            "line": self.line_number,
            "column": self.col_offset,
            "code": self.line_content,
            "rule": self.rule_id,
            "name": self.rule_name,
            "severity": self.severity.value,
            "message": self.message,
        }

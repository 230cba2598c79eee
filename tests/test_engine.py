import logging

from sinkscan.engine import TraversalEngine, analyze
from sinkscan.findings import Severity
from sinkscan.nodes import NodeKind
from sinkscan.registry import RuleRegistry, create_registry
from sinkscan.rules import InsecureRandomRule, Rule

SERVICE = """
import java.io.File;
import java.sql.Connection;
import java.util.Random;

class Service {
    void handle(Connection conn, String userInput) throws Exception {
        Random random = new Random();
        File file = new File(userInput);
        conn.createStatement().executeQuery("SELECT * FROM users WHERE name = '" + userInput + "'");
    }
}
"""


class ExplodingRule(Rule):
    rule_id = "EXPLODING"
    name = "Always fails"
    severity = Severity.INFO
    kinds = frozenset({NodeKind.CONSTRUCTION})

    def matches(self, node):
        raise RuntimeError("boom")


class ExitRule(Rule):
    rule_id = "SYSTEM_EXIT"
    name = "System.exit call"
    severity = Severity.INFO
    kinds = frozenset({NodeKind.CALL})
    templates = {"default": "Process terminated directly: {code}"}
    advice_text = "Throw an exception instead."

    def matches(self, node):
        return node.field("name").text == "exit"


def test_end_to_end_three_findings_in_traversal_order(parse):
    findings = analyze(parse(SERVICE, "Service.java"), create_registry())
    assert [f.severity for f in findings] == [Severity.WARNING, Severity.ERROR, Severity.CRITICAL]
    assert [f.rule_id for f in findings] == ["INSECURE_RANDOM", "PATH_TRAVERSAL", "SQL_INJECTION"]


def test_finding_location(parse):
    findings = analyze(parse(SERVICE, "Service.java"), create_registry())
    random_finding = findings[0]
    assert random_finding.file_path == "Service.java"
    assert random_finding.line_number == 7
    assert random_finding.col_offset == 24
    assert random_finding.line_content == "Random random = new Random();"
    assert random_finding.to_dict()["severity"] == "WARNING"


def test_failing_rule_is_logged_and_skipped(parse, caplog):
    registry = RuleRegistry([ExplodingRule(), InsecureRandomRule()])
    with caplog.at_level(logging.WARNING, logger="sinkscan.engine"):
        findings = analyze(parse(SERVICE), registry)
    assert [f.rule_id for f in findings] == ["INSECURE_RANDOM"]
    assert "EXPLODING" in caplog.text


def test_custom_rule_templates(parse):
    unit = parse("class Main { void stop() { System.exit(1); } }")
    findings = TraversalEngine(RuleRegistry([ExitRule()])).analyze(unit)
    assert len(findings) == 1
    assert findings[0].message == "Process terminated directly: System.exit(1)"
    assert findings[0].advice == "Throw an exception instead."


def test_engine_is_reusable_across_units(parse):
    engine = TraversalEngine(create_registry())
    first = engine.analyze(parse(SERVICE, "A.java"))
    second = engine.analyze(parse(SERVICE, "B.java"))
    assert len(first) == len(second) == 3
    assert {f.file_path for f in second} == {"B.java"}


def test_syntax_errors_do_not_raise(parse):
    unit = parse("class Broken { void m( { new java.util.Random( }")
    assert unit.has_errors
    assert isinstance(analyze(unit, create_registry()), list)


def test_deep_expressions_do_not_exhaust_recursion(parse):
    chain = " + ".join(['"x"'] * 3000)
    unit = parse(f"class Long {{ String s = {chain}; }}")
    assert analyze(unit, create_registry()) == []


def test_long_fluent_chains_stay_quiet(parse, caplog):
    chain = "b" + ".add(1)" * 400 + ".build()"
    unit = parse(f"""
        class Builder {{
            Builder add(int x) {{ return this; }}
            Object build() {{ return null; }}
            Object make(Builder b) {{ return {chain}; }}
        }}
    """)
    with caplog.at_level(logging.WARNING):
        findings = analyze(unit, create_registry())
    assert findings == []
    assert caplog.records == []

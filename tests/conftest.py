import textwrap

import pytest

from sinkscan.engine import analyze
from sinkscan.registry import RuleRegistry
from sinkscan.unit import parse_java


def java(source: str) -> str:
    return textwrap.dedent(source).strip() + "\n"


def find_node(unit, node_type, text=None):
    """First node of ``node_type`` (optionally with exactly ``text``) in pre-order."""
    for node in unit.root.descendants(node_type):
        if text is None or node.text == text:
            return node
    raise AssertionError(f"no {node_type} node with text {text!r}")


def initializer(unit, name):
    """Initializer expression of the variable declarator called ``name``."""
    for declarator in unit.root.descendants("variable_declarator"):
        if declarator.field("name").text == name:
            return declarator.field("value")
    raise AssertionError(f"no declarator {name!r}")


@pytest.fixture
def parse():
    def _parse(source, path="Test.java"):
        return parse_java(java(source), path)
    return _parse


@pytest.fixture
def run_rule():
    """Run a single rule over a snippet and return its findings."""
    def _run(rule, source):
        return analyze(parse_java(java(source), "Test.java"), RuleRegistry([rule]))
    return _run


@pytest.fixture
def in_method(run_rule):
    """Run a rule over statements placed inside a method body."""
    def _run(rule, statements, imports="", members="", params="String input, boolean flag"):
        body = textwrap.indent(textwrap.dedent(statements).strip(), " " * 8)
        source = (
            f"{textwrap.dedent(imports).strip()}\n"
            "class Subject {\n"
            f"{textwrap.indent(textwrap.dedent(members).strip(), ' ' * 4)}\n"
            f"    Object run({params}) throws Exception {{\n"
            f"{body}\n"
            "        return null;\n"
            "    }\n"
            "}\n"
        )
        return analyze(parse_java(source, "Subject.java"), RuleRegistry([rule]))
    return _run


@pytest.fixture
def find():
    return find_node


@pytest.fixture
def init_of():
    return initializer

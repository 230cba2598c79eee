"""Unsafe deserialization: Fastjson and native Java object streams."""

from sinkscan.findings import Severity
from sinkscan.nodes import NodeKind, arguments
from sinkscan.rules.base import SinkRule
from sinkscan.javatypes import simple_name

AUTOTYPE_MARKERS = ("SupportAutoType", "setAutoTypeSupport(true)", "autoTypeSupport = true")


class FastjsonDeserializationRule(SinkRule):
    rule_id = "FASTJSON_DESERIALIZATION"
    name = "Fastjson deserialization"
    severity = Severity.CRITICAL
    kinds = frozenset({NodeKind.CALL})
    sinks = frozenset({
        "com.alibaba.fastjson.JSON.parseObject",
        "com.alibaba.fastjson.JSON.parse",
        "com.alibaba.fastjson.JSON.parseArray",
        "com.alibaba.fastjson2.JSON.parseObject",
        "com.alibaba.fastjson2.JSON.parse",
        "com.alibaba.fastjson2.JSON.parseArray",
    })

    def matches(self, node):
        return self.is_sink(node)

    def message_key(self, node):
        if any(marker in arg.text for arg in arguments(node) for marker in AUTOTYPE_MARKERS):
            return "autotype"
        return "default"

    def details(self, node):
        return {"method": node.field("name").text}


class JavaDeserializationRule(SinkRule):
    rule_id = "JAVA_DESERIALIZATION"
    name = "Java native deserialization"
    severity = Severity.CRITICAL
    kinds = frozenset({NodeKind.CALL})
    sinks = frozenset({
        "java.io.ObjectInputStream.readObject",
        "java.io.ObjectInputStream.readUnshared",
        "java.beans.XMLDecoder.readObject",
    })

    def matches(self, node):
        return self.is_sink(node)

    def details(self, node):
        qname = self.resolve_sink(node)
        return {
            "method": node.field("name").text,
            "owner": simple_name(qname.owner) if qname else "ObjectInputStream",
        }

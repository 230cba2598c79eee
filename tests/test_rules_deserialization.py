from sinkscan.findings import Severity
from sinkscan.rules import FastjsonDeserializationRule, JavaDeserializationRule

FASTJSON_IMPORTS = """
import com.alibaba.fastjson.JSON;
import com.alibaba.fastjson.parser.Feature;
"""


def test_fastjson_parse_object_matches(in_method):
    findings = in_method(FastjsonDeserializationRule(), 'Object o = JSON.parseObject("{}");',
                         imports=FASTJSON_IMPORTS)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.rule_id == "FASTJSON_DESERIALIZATION"
    assert finding.severity is Severity.CRITICAL
    assert "parseObject" in finding.message
    assert "AutoType" not in finding.message


def test_fastjson_autotype_gets_its_own_message(in_method):
    findings = in_method(FastjsonDeserializationRule(),
                         "Object o = JSON.parseObject(input, Object.class, Feature.SupportAutoType);",
                         imports=FASTJSON_IMPORTS)
    assert len(findings) == 1
    assert "AutoType" in findings[0].message


def test_fastjson2_and_parse_array(in_method):
    findings = in_method(FastjsonDeserializationRule(), """
        Object a = JSON.parseArray(input);
        Object b = JSON.parse(input);
    """, imports="import com.alibaba.fastjson2.JSON;")
    assert [f.line_content for f in findings] == ["Object a = JSON.parseArray(input);",
                                                  "Object b = JSON.parse(input);"]


def test_fastjson_subclass_static_call(in_method):
    findings = in_method(FastjsonDeserializationRule(), "Object o = JSONObject.parseObject(input);",
                         imports="import com.alibaba.fastjson.JSONObject;")
    assert len(findings) == 1


def test_unrelated_json_class_does_not_match(run_rule):
    findings = run_rule(FastjsonDeserializationRule(), """
        class JSON {
            static Object parseObject(String s) { return null; }
        }
        class Use {
            Object go(String s) { return JSON.parseObject(s); }
        }
    """)
    assert findings == []


def test_object_input_stream_read_object(in_method):
    findings = in_method(JavaDeserializationRule(), """
        ObjectInputStream in = new ObjectInputStream(raw);
        Object a = in.readObject();
        Object b = in.readUnshared();
        int c = in.readInt();
    """, imports="import java.io.ObjectInputStream;\nimport java.io.InputStream;",
        params="InputStream raw")
    assert [f.line_content for f in findings] == ["Object a = in.readObject();",
                                                  "Object b = in.readUnshared();"]
    assert all(f.severity is Severity.CRITICAL for f in findings)
    assert "ObjectInputStream" in findings[0].message


def test_xml_decoder(in_method):
    findings = in_method(JavaDeserializationRule(), "Object o = new XMLDecoder(raw).readObject();",
                         imports="import java.beans.XMLDecoder;\nimport java.io.InputStream;",
                         params="InputStream raw")
    assert len(findings) == 1
    assert "XMLDecoder" in findings[0].message


def test_object_input_stream_subclass_self_call(run_rule):
    findings = run_rule(JavaDeserializationRule(), """
        import java.io.*;

        class Filtered extends ObjectInputStream {
            Filtered(InputStream raw) throws IOException { super(raw); }

            Object next() throws Exception { return readObject(); }
        }
    """)
    assert len(findings) == 1

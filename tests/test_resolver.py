from sinkscan.resolver import QualifiedName, lineage, matches_any, resolve, type_of

SOURCE = """
package com.example;

import java.io.*;
import java.sql.Connection;
import java.sql.PreparedStatement;
import com.alibaba.fastjson.JSON;
import static com.alibaba.fastjson.JSON.parseObject;

class Repo {
    void run(Connection conn, String sql, Widget widget) throws Exception {
        PreparedStatement ps = conn.prepareStatement(sql);
        ps.execute();
        JSON.parseObject(sql);
        parseObject(sql);
        com.alibaba.fastjson.JSON.parseArray(sql);
        new File(sql);
        var in = new ObjectInputStream(new FileInputStream(sql));
        in.readObject();
        unknown.call();
        widget.spin();
        Runtime.getRuntime().exec(sql);
        conn.createStatement().executeQuery(sql);
        helper();
    }

    void helper() {}
}

class SafeStream extends ObjectInputStream {
    SafeStream(InputStream raw) throws IOException { super(raw); }

    Object load() throws Exception {
        return readObject();
    }
}
"""


def _call(unit, find, text):
    return resolve(find(unit, "method_invocation", text))


def test_resolves_receiver_static_types(parse, find):
    unit = parse(SOURCE)
    assert _call(unit, find, "conn.prepareStatement(sql)") == QualifiedName("java.sql.Connection", "prepareStatement")
    assert _call(unit, find, "ps.execute()") == QualifiedName("java.sql.PreparedStatement", "execute")
    assert _call(unit, find, "in.readObject()") == QualifiedName("java.io.ObjectInputStream", "readObject")


def test_resolves_static_calls_and_static_imports(parse, find):
    unit = parse(SOURCE)
    fastjson = "com.alibaba.fastjson.JSON"
    assert _call(unit, find, "JSON.parseObject(sql)") == QualifiedName(fastjson, "parseObject")
    assert _call(unit, find, "parseObject(sql)") == QualifiedName(fastjson, "parseObject")
    assert _call(unit, find, "com.alibaba.fastjson.JSON.parseArray(sql)") == QualifiedName(fastjson, "parseArray")


def test_resolves_chained_calls_through_return_types(parse, find):
    unit = parse(SOURCE)
    assert _call(unit, find, "Runtime.getRuntime().exec(sql)") == QualifiedName("java.lang.Runtime", "exec")
    assert _call(unit, find, "conn.createStatement().executeQuery(sql)") == \
        QualifiedName("java.sql.Statement", "executeQuery")


def test_unqualified_calls_use_enclosing_class(parse, find):
    unit = parse(SOURCE)
    assert _call(unit, find, "helper()") == QualifiedName("com.example.Repo", "helper")
    qname = _call(unit, find, "readObject()")
    assert qname == QualifiedName("com.example.SafeStream", "readObject")
    assert matches_any(qname, {"java.io.ObjectInputStream.readObject"}, unit.symbols)


def test_constructions_resolve_to_init(parse, find):
    unit = parse(SOURCE)
    assert resolve(find(unit, "object_creation_expression", "new File(sql)")) == \
        QualifiedName("java.io.File", "<init>")


def test_unresolvable_receivers_give_none(parse, find):
    unit = parse(SOURCE)
    assert _call(unit, find, "unknown.call()") is None
    assert _call(unit, find, "widget.spin()") is None


def test_matches_any_follows_known_supertypes():
    qname = QualifiedName("java.sql.PreparedStatement", "execute")
    assert matches_any(qname, {"java.sql.Statement.execute"})
    assert not matches_any(qname, {"java.sql.Statement.executeQuery"})
    assert not matches_any(None, {"java.sql.Statement.execute"})


def test_constructors_match_owner_exactly():
    assert matches_any(QualifiedName("java.util.Random", "<init>"), {"java.util.Random.<init>"})
    assert not matches_any(QualifiedName("java.security.SecureRandom", "<init>"), {"java.util.Random.<init>"})


def test_lineage_orders_nearest_first():
    assert lineage("java.io.BufferedReader") == [
        "java.io.BufferedReader", "java.io.Reader", "java.io.Closeable", "java.lang.AutoCloseable",
    ]


def test_type_of_unqualified_fallback(parse, find):
    unit = parse("""
        class Handler {
            Object handle(BusinessException e) { return e.getMessage(); }
        }
    """)
    receiver = find(unit, "method_invocation").field("object")
    assert type_of(receiver) is None
    assert type_of(receiver, allow_unqualified=True) == "BusinessException"


FLUENT = """
class Builder {
    Builder add(int x) { return this; }
    Object build() { return null; }
    Object shortChain(Builder b) { return b.add(1).add(2).build(); }
    Object longChain(Builder b) { return b%s.build(); }
}
""" % (".add(1)" * 200)


def test_fluent_chains_resolve_until_depth_limit(parse, find):
    unit = parse(FLUENT)
    assert _call(unit, find, "b.add(1).add(2).build()") == QualifiedName("Builder", "build")
    long_call = [c for c in unit.root.descendants("method_invocation") if c.text.endswith(".build()")][-1]
    assert long_call.text.count(".add(1)") == 200
    assert resolve(long_call) is None

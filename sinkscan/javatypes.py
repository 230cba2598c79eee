"""
Catalogue of JDK and library types the rules reason about.

Without a classpath we cannot load real type hierarchies, so the supertypes,
implicit ``java.lang`` imports and return types of the calls that matter for
receiver typing are listed here by hand.
"""

import re
from typing import Dict, FrozenSet, Tuple

PRIMITIVE_TYPES = frozenset({
    "byte", "short", "int", "long", "float", "double", "boolean", "char", "void",
})

JAVA_LANG_TYPES = frozenset({
    "Object", "String", "StringBuilder", "StringBuffer", "CharSequence",
    "Runtime", "Process", "ProcessBuilder", "System", "Math", "Thread",
    "Class", "ClassLoader", "Integer", "Long", "Short", "Byte", "Double",
    "Float", "Boolean", "Character", "Number", "Void", "Enum", "Record",
    "Iterable", "AutoCloseable", "Comparable", "Runnable",
    "Throwable", "Exception", "RuntimeException", "Error",
    "IllegalArgumentException", "IllegalStateException",
    "NullPointerException", "ClassNotFoundException", "InterruptedException",
    "SecurityException", "UnsupportedOperationException",
    "IndexOutOfBoundsException", "ArithmeticException", "ClassCastException",
    "NumberFormatException", "CloneNotSupportedException",
    "ReflectiveOperationException",
    "Override", "Deprecated", "SuppressWarnings", "FunctionalInterface",
})

# Direct supertypes (superclass first, then interfaces).
SUPERTYPES: Dict[str, Tuple[str, ...]] = {
    # exceptions
    "java.lang.Throwable": (),
    "java.lang.Exception": ("java.lang.Throwable",),
    "java.lang.Error": ("java.lang.Throwable",),
    "java.lang.RuntimeException": ("java.lang.Exception",),
    "java.io.IOException": ("java.lang.Exception",),
    "java.io.FileNotFoundException": ("java.io.IOException",),
    "java.io.UncheckedIOException": ("java.lang.RuntimeException",),
    "java.sql.SQLException": ("java.lang.Exception",),

    # streams, readers and writers
    "java.lang.AutoCloseable": (),
    "java.io.Closeable": ("java.lang.AutoCloseable",),
    "java.io.InputStream": ("java.io.Closeable",),
    "java.io.FilterInputStream": ("java.io.InputStream",),
    "java.io.FileInputStream": ("java.io.InputStream",),
    "java.io.BufferedInputStream": ("java.io.FilterInputStream",),
    "java.io.DataInputStream": ("java.io.FilterInputStream",),
    "java.io.ByteArrayInputStream": ("java.io.InputStream",),
    "java.io.ObjectInputStream": ("java.io.InputStream",),
    "java.util.zip.InflaterInputStream": ("java.io.FilterInputStream",),
    "java.util.zip.GZIPInputStream": ("java.util.zip.InflaterInputStream",),
    "java.util.zip.ZipInputStream": ("java.util.zip.InflaterInputStream",),
    "java.io.OutputStream": ("java.io.Closeable",),
    "java.io.FilterOutputStream": ("java.io.OutputStream",),
    "java.io.FileOutputStream": ("java.io.OutputStream",),
    "java.io.BufferedOutputStream": ("java.io.FilterOutputStream",),
    "java.io.DataOutputStream": ("java.io.FilterOutputStream",),
    "java.io.PrintStream": ("java.io.FilterOutputStream",),
    "java.io.ByteArrayOutputStream": ("java.io.OutputStream",),
    "java.io.ObjectOutputStream": ("java.io.OutputStream",),
    "java.io.Reader": ("java.io.Closeable",),
    "java.io.InputStreamReader": ("java.io.Reader",),
    "java.io.FileReader": ("java.io.InputStreamReader",),
    "java.io.BufferedReader": ("java.io.Reader",),
    "java.io.StringReader": ("java.io.Reader",),
    "java.io.Writer": ("java.io.Closeable",),
    "java.io.OutputStreamWriter": ("java.io.Writer",),
    "java.io.FileWriter": ("java.io.OutputStreamWriter",),
    "java.io.BufferedWriter": ("java.io.Writer",),
    "java.io.PrintWriter": ("java.io.Writer",),
    "java.io.StringWriter": ("java.io.Writer",),
    "java.io.RandomAccessFile": ("java.io.Closeable",),
    "java.util.Scanner": ("java.io.Closeable",),
    "java.beans.XMLDecoder": ("java.lang.AutoCloseable",),
    "org.apache.commons.io.input.ValidatingObjectInputStream": ("java.io.ObjectInputStream",),

    # jdbc
    "java.sql.Connection": ("java.lang.AutoCloseable",),
    "java.sql.Statement": ("java.lang.AutoCloseable",),
    "java.sql.PreparedStatement": ("java.sql.Statement",),
    "java.sql.CallableStatement": ("java.sql.PreparedStatement",),
    "java.sql.ResultSet": ("java.lang.AutoCloseable",),
    "java.sql.DriverManager": (),
    "javax.sql.DataSource": (),

    # network and files
    "java.net.Socket": ("java.io.Closeable",),
    "java.net.ServerSocket": ("java.io.Closeable",),
    "java.net.URL": (),
    "java.net.URI": (),
    "java.io.File": (),
    "java.nio.file.Path": (),
    "java.nio.file.Paths": (),
    "java.nio.file.Files": (),

    # randomness
    "java.util.Random": (),
    "java.security.SecureRandom": ("java.util.Random",),
    "java.util.concurrent.ThreadLocalRandom": ("java.util.Random",),

    # collections
    "java.util.Collection": (),
    "java.util.List": ("java.util.Collection",),
    "java.util.Set": ("java.util.Collection",),
    "java.util.Arrays": (),

    # third-party sinks
    "com.alibaba.fastjson.JSON": (),
    "com.alibaba.fastjson.JSONObject": ("com.alibaba.fastjson.JSON",),
    "com.alibaba.fastjson.JSONArray": ("com.alibaba.fastjson.JSON",),
    "com.alibaba.fastjson2.JSON": (),
    "com.alibaba.fastjson2.JSONObject": (),
    "com.alibaba.fastjson2.JSONArray": (),
    "org.apache.commons.io.IOUtils": (),
    "org.apache.ibatis.annotations.Select": (),
    "org.apache.ibatis.annotations.Insert": (),
    "org.apache.ibatis.annotations.Update": (),
    "org.apache.ibatis.annotations.Delete": (),
}

KNOWN_TYPES: FrozenSet[str] = frozenset(SUPERTYPES) | frozenset(
    parent for parents in SUPERTYPES.values() for parent in parents
)

# Static return types of calls whose results are commonly used as receivers.
RETURN_TYPES: Dict[str, str] = {
    "java.lang.Runtime.getRuntime": "java.lang.Runtime",
    "java.lang.Runtime.exec": "java.lang.Process",
    "java.lang.ProcessBuilder.start": "java.lang.Process",
    "java.lang.ProcessBuilder.directory": "java.lang.ProcessBuilder",
    "java.lang.ProcessBuilder.redirectErrorStream": "java.lang.ProcessBuilder",
    "java.lang.Process.getInputStream": "java.io.InputStream",
    "java.lang.Process.getErrorStream": "java.io.InputStream",
    "java.lang.Process.getOutputStream": "java.io.OutputStream",
    "java.lang.Throwable.getCause": "java.lang.Throwable",
    "java.sql.DriverManager.getConnection": "java.sql.Connection",
    "javax.sql.DataSource.getConnection": "java.sql.Connection",
    "java.sql.Connection.createStatement": "java.sql.Statement",
    "java.sql.Connection.prepareStatement": "java.sql.PreparedStatement",
    "java.sql.Connection.prepareCall": "java.sql.CallableStatement",
    "java.sql.Statement.executeQuery": "java.sql.ResultSet",
    "java.sql.Statement.getResultSet": "java.sql.ResultSet",
    "java.nio.file.Paths.get": "java.nio.file.Path",
    "java.nio.file.Path.of": "java.nio.file.Path",
    "java.nio.file.Path.resolve": "java.nio.file.Path",
    "java.nio.file.Path.normalize": "java.nio.file.Path",
    "java.io.File.toPath": "java.nio.file.Path",
    "java.net.URL.openStream": "java.io.InputStream",
    "java.net.Socket.getInputStream": "java.io.InputStream",
    "java.net.Socket.getOutputStream": "java.io.OutputStream",
    "java.net.ServerSocket.accept": "java.net.Socket",
}

_GENERIC_RE = re.compile(r"<[^<>]*>")
_ANNOTATION_RE = re.compile(r"@[\w.]+(\([^()]*\))?")


def normalize_type_text(text: str) -> str:
    """Reduce a source type to its erased name: ``final List<String>[]`` -> ``List``."""
    text = _ANNOTATION_RE.sub("", text)
    previous = None
    while previous != text:
        previous = text
        text = _GENERIC_RE.sub("", text)
    text = text.replace("...", "").replace("[]", "")
    return "".join(text.split())


def simple_name(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1]

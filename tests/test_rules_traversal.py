from sinkscan.findings import Severity
from sinkscan.rules import PathTraversalRule, UnsafeUrlCreationRule

PATH_IMPORTS = """
import java.io.File;
import java.nio.file.Path;
import java.nio.file.Paths;
"""


def paths(in_method, statements):
    return in_method(PathTraversalRule(), statements, imports=PATH_IMPORTS,
                     members='static final String BASE_DIR = "/srv/data";',
                     params="String name, boolean flag")


def test_file_from_user_input(in_method):
    findings = paths(in_method, "File f = new File(name);")
    assert len(findings) == 1
    assert findings[0].severity is Severity.ERROR
    assert findings[0].rule_id == "PATH_TRAVERSAL"
    assert "(name)" in findings[0].message


def test_file_from_constants(in_method):
    findings = paths(in_method, """
        File a = new File("/tmp/app.log");
        File b = new File(BASE_DIR);
        File c = new File(BASE_DIR, name);
    """)
    assert findings == []


def test_concatenated_path(in_method):
    assert len(paths(in_method, 'File f = new File(BASE_DIR + "/" + name);')) == 1


def test_local_final_is_not_constant(in_method):
    findings = paths(in_method, """
        final String base = "/srv";
        File f = new File(base);
    """)
    assert len(findings) == 1


def test_nio_factories(in_method):
    findings = paths(in_method, """
        Path a = Paths.get(name, "x");
        Path b = Path.of(name);
        Path c = Paths.get("/etc", "hosts");
    """)
    assert [f.line_content for f in findings] == ['Path a = Paths.get(name, "x");', "Path b = Path.of(name);"]
    assert "Paths.get()" in findings[0].message


def test_conditional_between_constants_is_allowed(in_method):
    assert paths(in_method, 'Path p = Path.of(flag ? "/a" : BASE_DIR);') == []
    assert len(paths(in_method, 'Path p = Path.of(flag ? "/a" : name);')) == 1


def test_url_from_input(in_method):
    findings = in_method(UnsafeUrlCreationRule(), """
        URL a = new URL(target);
        URL b = new URL("https://example.com/health");
        java.net.URL c = new java.net.URL(target);
    """, imports="import java.net.URL;", params="String target")
    assert [f.line_content for f in findings] == ["URL a = new URL(target);",
                                                  "java.net.URL c = new java.net.URL(target);"]
    assert all(f.severity is Severity.ERROR for f in findings)
    assert "(target)" in findings[0].message


def test_url_class_from_other_package(in_method):
    findings = in_method(UnsafeUrlCreationRule(), "URL a = new URL(target);",
                         imports="import com.example.net.URL;", params="String target")
    assert findings == []

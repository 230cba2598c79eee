from sinkscan.config import ScanConfig
from sinkscan.findings import Severity
from sinkscan.registry import RuleRegistry
from sinkscan.rules import InsecureRandomRule
from sinkscan.scanner import (
    apply_severity_overrides, filter_findings, is_suppressed, scan_file, scan_path, scan_source,
)

SOURCE = """import java.io.File;
import java.util.Random;

class App {
    void run(String name) {
        Random a = new Random();
        Random b = new Random(); // nosec
        Random c = new Random(); /* sinkscan:ignore */
        File f = new File(name);
    }
}
"""


def write_tree(root):
    (root / "src").mkdir()
    (root / "src" / "App.java").write_text(SOURCE, encoding="utf-8")
    (root / "src" / "Clean.java").write_text("class Clean { int x = 1; }", encoding="utf-8")
    (root / "generated").mkdir()
    (root / "generated" / "Gen.java").write_text(SOURCE, encoding="utf-8")
    (root / "README.md").write_text("not java", encoding="utf-8")


def test_scan_source_uses_given_registry():
    findings = scan_source(SOURCE, "App.java", RuleRegistry([InsecureRandomRule()]))
    assert [f.line_number for f in findings] == [6, 7, 8]


def test_inline_suppression():
    findings = filter_findings(scan_source(SOURCE, "App.java"))
    assert [(f.rule_id, f.line_number) for f in findings] == [("INSECURE_RANDOM", 6), ("PATH_TRAVERSAL", 9)]
    assert is_suppressed("x(); // audit-ok", "audit-ok")
    assert not is_suppressed('String s = "nosec";')


def test_min_severity_filter():
    findings = filter_findings(scan_source(SOURCE, "App.java"), min_severity="ERROR")
    assert [f.rule_id for f in findings] == ["PATH_TRAVERSAL"]


def test_severity_overrides_do_not_mutate_input():
    findings = scan_source(SOURCE, "App.java")
    overridden = apply_severity_overrides(findings, {"INSECURE_RANDOM": Severity.CRITICAL})
    assert {f.severity for f in overridden if f.rule_id == "INSECURE_RANDOM"} == {Severity.CRITICAL}
    assert {f.severity for f in findings if f.rule_id == "INSECURE_RANDOM"} == {Severity.WARNING}


def test_scan_path_walks_directory(tmp_path):
    write_tree(tmp_path)
    findings, file_count, elapsed = scan_path(str(tmp_path), show_progress=False)
    assert file_count == 3
    assert elapsed >= 0
    assert {f.file_path for f in findings} == {
        str(tmp_path / "generated" / "Gen.java"), str(tmp_path / "src" / "App.java"),
    }


def test_scan_path_honours_config(tmp_path):
    write_tree(tmp_path)
    config = ScanConfig(exclude_paths=["generated/"], disabled_rules=["INSECURE_RANDOM"])
    findings, file_count, _ = scan_path(str(tmp_path), show_progress=False, config=config)
    assert file_count == 2
    assert [f.rule_id for f in findings] == ["PATH_TRAVERSAL"]


def test_scan_single_file_and_non_java(tmp_path):
    write_tree(tmp_path)
    findings, file_count, _ = scan_path(str(tmp_path / "src" / "App.java"), show_progress=False)
    assert file_count == 1
    assert len(findings) == 4

    findings, file_count, _ = scan_path(str(tmp_path / "README.md"), show_progress=False)
    assert (findings, file_count) == ([], 0)


def test_unreadable_file_is_skipped(tmp_path, caplog):
    assert scan_file(str(tmp_path / "Missing.java")) == []
    assert "Missing.java" in caplog.text


def test_form_feed_does_not_shift_suppression():
    source = (
        "class Feed {\n"
        "    // page break \f here\n"
        "    void run(String p) {\n"
        "        java.io.File f = new java.io.File(p);\n"
        "        Object r = new java.util.Random(); // nosec\n"
        "    }\n"
        "}\n"
    )
    findings = scan_source(source, "Feed.java")
    random_finding = next(f for f in findings if f.rule_id == "INSECURE_RANDOM")
    assert random_finding.line_content == "Object r = new java.util.Random(); // nosec"
    assert [f.rule_id for f in filter_findings(findings)] == ["PATH_TRAVERSAL"]


def test_columns_count_characters_not_bytes():
    line = "class Cjk { /* 随机数 */ Object r = new java.util.Random(); }"
    findings = scan_source(line + "\n", "Cjk.java")
    assert [f.col_offset for f in findings] == [line.index("new java.util.Random")]

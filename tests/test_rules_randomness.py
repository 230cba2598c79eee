from sinkscan.findings import Severity
from sinkscan.rules import InsecureRandomRule


def test_new_random_is_reported(in_method):
    findings = in_method(InsecureRandomRule(), """
        Random a = new Random();
        Random b = new java.util.Random(42L);
    """, imports="import java.util.Random;")
    assert len(findings) == 2
    assert all(f.severity is Severity.WARNING for f in findings)
    assert findings[0].advice.startswith("Use java.security.SecureRandom")


def test_secure_random_is_fine(in_method):
    findings = in_method(InsecureRandomRule(), "SecureRandom r = new SecureRandom();",
                         imports="import java.security.SecureRandom;")
    assert findings == []


def test_wildcard_import(in_method):
    findings = in_method(InsecureRandomRule(), "Object r = new Random();", imports="import java.util.*;")
    assert len(findings) == 1


def test_same_file_random_class_is_not_jdk(run_rule):
    findings = run_rule(InsecureRandomRule(), """
        class Random {}
        class Dice {
            Object roll() { return new Random(); }
        }
    """)
    assert findings == []

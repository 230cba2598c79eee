import pytest

from sinkscan.config import ConfigError, ScanConfig, config_from_dict, load_config
from sinkscan.findings import Severity


def test_config_discovered_by_walking_up(tmp_path):
    (tmp_path / ".sinkscan.yml").write_text(
        """
disabled_rules:
  - INSECURE_RANDOM
severity_overrides:
  RESOURCE_LEAK: error
exclude_paths:
  - "generated/"
suppression_keyword: "audit-ok"
min_severity: WARNING
""".strip(),
        encoding="utf-8",
    )
    nested = tmp_path / "src" / "main"
    nested.mkdir(parents=True)
    target = nested / "App.java"
    target.write_text("class App {}", encoding="utf-8")

    config = load_config(str(target))

    assert config.disabled_rules == ["INSECURE_RANDOM"]
    assert config.severity_overrides == {"RESOURCE_LEAK": Severity.ERROR}
    assert config.exclude_paths == ["generated/"]
    assert config.suppression_keyword == "audit-ok"
    assert config.min_severity is Severity.WARNING
    assert config.source.endswith(".sinkscan.yml")


def test_yaml_extension_and_defaults(tmp_path):
    (tmp_path / ".sinkscan.yaml").write_text("exclude_paths: []\n", encoding="utf-8")
    config = load_config(str(tmp_path))
    assert config.disabled_rules == []
    assert config.suppression_keyword == "nosec"
    assert config.min_severity is Severity.INFO


def test_explicit_config_path(tmp_path):
    custom = tmp_path / "scan-settings.yml"
    custom.write_text("min_severity: critical\n", encoding="utf-8")
    assert load_config(str(tmp_path), str(custom)).min_severity is Severity.CRITICAL


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path), str(tmp_path / "nope.yml"))


def test_unknown_rule_id_raises():
    with pytest.raises(ConfigError, match="NOT_A_RULE"):
        config_from_dict({"disabled_rules": ["NOT_A_RULE"]})
    with pytest.raises(ConfigError, match="NOT_A_RULE"):
        config_from_dict({"severity_overrides": {"NOT_A_RULE": "INFO"}})


def test_unknown_severity_raises():
    with pytest.raises(ConfigError, match="HIGH"):
        config_from_dict({"min_severity": "HIGH"})
    with pytest.raises(ConfigError):
        config_from_dict({"severity_overrides": {"SQL_INJECTION": "URGENT"}})


def test_malformed_yaml_raises(tmp_path):
    bad = tmp_path / ".sinkscan.yml"
    bad.write_text("disabled_rules: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(tmp_path))


def test_top_level_must_be_mapping(tmp_path):
    bad = tmp_path / ".sinkscan.yml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(tmp_path))


def test_should_exclude():
    config = ScanConfig(exclude_paths=["target/", "**/*Test.java"])
    assert config.should_exclude("project/target/classes/App.java")
    assert config.should_exclude("src/test/java/AppTest.java")
    assert not config.should_exclude("src/main/java/App.java")

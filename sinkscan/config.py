"""Configuration file support for sinkscan.

Loads .sinkscan.yml from the project root (or a specified path) and provides
rule selection, severity overrides, path exclusions and suppression settings.

Config format example:

    disabled_rules:
      - INSECURE_RANDOM

    severity_overrides:
      RESOURCE_LEAK: ERROR

    exclude_paths:
      - "target/"
      - "test/"
      - "**/*Test.java"

    suppression_keyword: "nosec"
    min_severity: "WARNING"
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from sinkscan.findings import Severity, parse_severity
from sinkscan.rules import BUILTIN_RULES

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".sinkscan.yml", ".sinkscan.yaml")


class ConfigError(Exception):
    """Raised for unreadable or invalid configuration files."""


@dataclass
class ScanConfig:
    """Parsed configuration from .sinkscan.yml."""
    disabled_rules: List[str] = field(default_factory=list)
    severity_overrides: Dict[str, Severity] = field(default_factory=dict)
    exclude_paths: List[str] = field(default_factory=list)
    suppression_keyword: str = "nosec"
    min_severity: Severity = Severity.INFO
    source: Optional[str] = None

    def should_exclude(self, file_path: str) -> bool:
        """Check if a file path matches any exclusion pattern."""
        normalized = file_path.replace(os.sep, "/")
        for pattern in self.exclude_paths:
            if fnmatch.fnmatch(normalized, pattern) or fnmatch.fnmatch(os.path.basename(file_path), pattern):
                return True
            # "dir/" excludes any path with that component
            if pattern.endswith("/") and pattern.rstrip("/") in normalized.split("/"):
                return True
        return False


def known_rule_ids() -> List[str]:
    return [rule.rule_id for rule in BUILTIN_RULES]


def load_config(target_path: str, config_path: str = None) -> Optional[ScanConfig]:
    """Load sinkscan configuration.

    Args:
        target_path: The scan target path (used to find .sinkscan.yml)
        config_path: Explicit config path (overrides auto-discovery)

    Returns:
        ScanConfig if found, None otherwise.

    Raises:
        ConfigError: the explicit file is missing, or a file is invalid.
    """
    if config_path:
        if not os.path.isfile(config_path):
            raise ConfigError(f"Config file not found: {config_path}")
        return parse_config(config_path)

    # Walk up from target_path to find .sinkscan.yml
    search_dir = os.path.abspath(target_path)
    if os.path.isfile(search_dir):
        search_dir = os.path.dirname(search_dir)

    while True:
        for name in CONFIG_FILENAMES:
            candidate = os.path.join(search_dir, name)
            if os.path.isfile(candidate):
                return parse_config(candidate)
        parent = os.path.dirname(search_dir)
        if parent == search_dir:
            break  # Reached filesystem root
        search_dir = parent

    return None


def parse_config(config_path: str) -> ScanConfig:
    """Parse a .sinkscan.yml file into a ScanConfig."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")

    logger.debug("Loaded config from %s", config_path)
    return config_from_dict(data, source=config_path)


def config_from_dict(data: dict, source: str = None) -> ScanConfig:
    where = source or "config"
    known = set(known_rule_ids())
    config = ScanConfig(source=source)

    disabled = data.get("disabled_rules", []) or []
    if not isinstance(disabled, list):
        raise ConfigError(f"{where}: disabled_rules must be a list")
    for rule_id in disabled:
        if str(rule_id) not in known:
            raise ConfigError(f"{where}: unknown rule id {rule_id!r} in disabled_rules")
        config.disabled_rules.append(str(rule_id))

    overrides = data.get("severity_overrides", {}) or {}
    if not isinstance(overrides, dict):
        raise ConfigError(f"{where}: severity_overrides must be a mapping")
    for rule_id, level in overrides.items():
        if str(rule_id) not in known:
            raise ConfigError(f"{where}: unknown rule id {rule_id!r} in severity_overrides")
        config.severity_overrides[str(rule_id)] = _severity(level, where)

    exclude = data.get("exclude_paths", []) or []
    if not isinstance(exclude, list):
        raise ConfigError(f"{where}: exclude_paths must be a list")
    config.exclude_paths = [str(p) for p in exclude]

    config.suppression_keyword = str(data.get("suppression_keyword", "nosec"))
    config.min_severity = _severity(data.get("min_severity", "INFO"), where)
    return config


def _severity(value, where: str) -> Severity:
    try:
        return parse_severity(value)
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from None

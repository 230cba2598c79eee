"""File processing: parse, analyse, filter."""

import dataclasses
import logging
import re
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from sinkscan.config import ScanConfig
from sinkscan.engine import TraversalEngine
from sinkscan.findings import SEVERITY_ORDER, Finding, Severity, parse_severity
from sinkscan.registry import RuleRegistry, create_registry
from sinkscan.report import console
from sinkscan.unit import parse_java

logger = logging.getLogger(__name__)

IGNORE_MARKER = "sinkscan:ignore"


def _registry_for(config: Optional[ScanConfig], registry: Optional[RuleRegistry]) -> RuleRegistry:
    if registry is not None:
        return registry
    return create_registry(config.disabled_rules if config else ())


def scan_source(source: str, path: str = "<string>",
                registry: Optional[RuleRegistry] = None) -> List[Finding]:
    """Analyse Java source text held in memory."""
    return TraversalEngine(_registry_for(None, registry)).analyze(parse_java(source, path))


def scan_file(file_path: str, config: ScanConfig = None,
              registry: Optional[RuleRegistry] = None) -> List[Finding]:
    """Scan a single Java file and return findings."""
    if config and config.should_exclude(file_path):
        logger.debug("Excluded by config: %s", file_path)
        return []
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            source = f.read()
    except OSError as e:
        logger.error("Error reading %s: %s", file_path, e)
        return []

    return scan_source(source, file_path, _registry_for(config, registry))


def scan_path(target: str, show_progress: bool = True, config: ScanConfig = None,
              registry: Optional[RuleRegistry] = None) -> Tuple[List[Finding], int, float]:
    """Scan a file or directory for Java files. Returns (findings, file_count, elapsed)."""
    registry = _registry_for(config, registry)
    all_findings = []
    target_path = Path(target)
    file_count = 0
    start = time.time()

    if target_path.is_file():
        if target_path.suffix == ".java":
            if show_progress:
                with Progress(
                    SpinnerColumn("moon"),
                    TextColumn("[bold cyan]Parsing...[/bold cyan]"),
                    TextColumn("[dim]{task.fields[file]}[/dim]"),
                    console=console, transient=True,
                ) as progress:
                    task = progress.add_task("Scanning", total=1, file=target_path.name)
                    all_findings.extend(scan_file(str(target_path), config, registry))
                    progress.advance(task)
            else:
                all_findings.extend(scan_file(str(target_path), config, registry))
            file_count = 1
        else:
            logger.warning("%s is not a .java file", target)
    elif target_path.is_dir():
        java_files = [p for p in sorted(target_path.rglob("*.java"))
                      if not (config and config.should_exclude(str(p)))]
        file_count = len(java_files)
        if show_progress and java_files:
            with Progress(
                SpinnerColumn("moon"),
                TextColumn("[bold cyan]{task.description}[/bold cyan]"),
                BarColumn(bar_width=30, style="cyan", complete_style="green"),
                MofNCompleteColumn(),
                TextColumn("[dim]{task.fields[current_file]}[/dim]"),
                console=console, transient=True,
            ) as progress:
                task = progress.add_task("Scanning", total=len(java_files), current_file="")
                for jf in java_files:
                    progress.update(task, current_file=jf.name)
                    all_findings.extend(scan_file(str(jf), config, registry))
                    progress.advance(task)
        else:
            for jf in java_files:
                all_findings.extend(scan_file(str(jf), config, registry))
    else:
        logger.error("%s does not exist", target)

    elapsed = time.time() - start
    return all_findings, file_count, elapsed


def is_suppressed(line_content: str, suppression_keyword: str = "nosec") -> bool:
    """Inline suppression: ``// nosec``, ``/* nosec``, or ``sinkscan:ignore``."""
    if re.search(rf"(?://|/\*)\s*{re.escape(suppression_keyword)}\b", line_content):
        return True
    return IGNORE_MARKER in line_content


def filter_findings(findings: List[Finding], min_severity=None,
                    suppression_keyword: str = "nosec") -> List[Finding]:
    """Filter findings by severity and inline suppression."""
    result = [f for f in findings if not is_suppressed(f.line_content, suppression_keyword)]
    if min_severity:
        min_sev_order = SEVERITY_ORDER[parse_severity(min_severity)]
        result = [f for f in result if SEVERITY_ORDER[f.severity] >= min_sev_order]
    return result


def apply_severity_overrides(findings: List[Finding],
                             overrides: Dict[str, Severity]) -> List[Finding]:
    """Return findings with per-rule severities replaced; the input is left untouched."""
    if not overrides:
        return list(findings)
    return [dataclasses.replace(f, severity=overrides[f.rule_id]) if f.rule_id in overrides else f
            for f in findings]

"""Rendering of findings: rich console, JSON and plain-text reports."""

import json
import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from rich import box
from rich.align import Align
from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule as RichRule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from sinkscan import __version__
from sinkscan.findings import SEVERITY_ORDER, Finding, Severity

logger = logging.getLogger(__name__)

console = Console()

SEVERITY_NAMES = [s.value for s in sorted(Severity, key=SEVERITY_ORDER.get, reverse=True)]

BORDER_STYLES = {
    "CRITICAL": "bold red", "ERROR": "red", "WARNING": "yellow", "INFO": "dim white",
}
BADGE_STYLES = {
    "CRITICAL": "bold white on red", "ERROR": "bold red", "WARNING": "bold yellow", "INFO": "dim",
}


def print_banner():
    banner_lines = [
        "███████╗██╗███╗   ██╗██╗  ██╗",
        "██╔════╝██║████╗  ██║██║ ██╔╝",
        "███████╗██║██╔██╗ ██║█████╔╝ ",
        "╚════██║██║██║╚██╗██║██╔═██╗ ",
        "███████║██║██║ ╚████║██║  ██╗",
        "╚══════╝╚═╝╚═╝  ╚═══╝╚═╝  ╚═╝",
    ]
    title_content = Text()
    title_content.append("\n".join(banner_lines), style="bold red")
    title_content.append("\n\n")
    title_content.append(f"Java Security Rule Scanner v{__version__}\n", style="bold white")
    title_content.append("tree-sitter AST | Sink Resolution | Constant Propagation", style="dim")

    console.print()
    console.print(Panel(
        Align.center(title_content),
        border_style="red",
        box=box.DOUBLE,
        padding=(1, 2),
    ))
    console.print()


def _count_by(findings: Iterable[Finding], key) -> Dict[str, int]:
    counts = defaultdict(int)
    for f in findings:
        counts[key(f)] += 1
    return counts


def build_stats_panel(findings: List[Finding], file_count: int, elapsed: float) -> Panel:
    """Build the statistics panel."""
    stats = Table(show_header=False, box=None, padding=(0, 1), expand=True)
    stats.add_column("key", style="bold cyan", no_wrap=True, ratio=3)
    stats.add_column("value", style="white", ratio=1)

    stats.add_row("Files Scanned", str(file_count))
    stats.add_row("Total Findings", str(len(findings)))
    stats.add_row("Scan Time", f"{elapsed:.2f}s")
    stats.add_row("", "")

    sev_counts = _count_by(findings, lambda f: f.severity.value)
    for sev in SEVERITY_NAMES:
        count = sev_counts.get(sev, 0)
        if count > 0:
            stats.add_row(Text(sev, style=BORDER_STYLES.get(sev, "white")), str(count))

    stats.add_row("", "")

    rule_counts = _count_by(findings, lambda f: f.rule_id)
    for rule_id, count in sorted(rule_counts.items(), key=lambda x: -x[1]):
        stats.add_row(Text(rule_id, style="cyan"), str(count))

    return Panel(
        stats,
        title="[bold white]Scan Statistics[/bold white]",
        border_style="cyan",
        box=box.ROUNDED,
        padding=(1, 1),
    )


def build_finding_panel(f: Finding, source_code: Optional[str] = None) -> Panel:
    """Build a Rich Panel for a single finding."""
    sev = f.severity.value

    title = Text()
    title.append(f" {sev} ", style=BADGE_STYLES.get(sev, "white"))
    title.append(f" {f.rule_name} ", style="bold white")
    title.append(f" {f.rule_id} ", style="dim")

    location = Text()
    location.append("Location: ", style="bold cyan")
    location.append(f"Line {f.line_number}", style="white")
    location.append(f", Col {f.col_offset + 1}", style="dim")

    rule_text = Text()
    rule_text.append("Rule: ", style="bold magenta")
    rule_text.append(f.rule_id, style="white")

    content_parts = [Columns([location, rule_text], padding=(0, 4))]

    if f.message:
        content_parts.append(Text(f"\n{f.message}", style="italic white"))

    code_line = f.line_content.strip()
    if code_line:
        if source_code:
            src_lines = source_code.split("\n")
            start = max(0, f.line_number - 3)
            end = min(len(src_lines), f.line_number + 2)
            syntax = Syntax(
                "\n".join(src_lines[start:end]), "java", theme="monokai",
                line_numbers=True, start_line=start + 1,
                highlight_lines={f.line_number},
            )
        else:
            syntax = Syntax(
                code_line, "java", theme="monokai",
                line_numbers=True, start_line=f.line_number,
            )
        content_parts.append(Text(""))
        content_parts.append(syntax)

    if f.advice:
        advice = Text()
        advice.append("\nFix: ", style="bold green")
        advice.append(f.advice, style="green")
        content_parts.append(advice)

    return Panel(
        Group(*content_parts),
        title=title,
        border_style=BORDER_STYLES.get(sev, "white"),
        box=box.ROUNDED,
        padding=(1, 2),
    )


def output_rich(findings: List[Finding], target: str, file_count: int,
                elapsed: float, min_severity: str):
    """Output findings using Rich panels and formatting."""
    scan_date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header_text = Text()
    header_text.append("Target: ", style="bold cyan")
    header_text.append(f"{target}  ", style="white")
    header_text.append("Date: ", style="bold cyan")
    header_text.append(f"{scan_date}  ", style="white")
    header_text.append("Severity: ", style="bold cyan")
    header_text.append(f">= {min_severity}", style="white")

    console.print(Panel(
        Align.center(header_text),
        title="[bold white]Scan Info[/bold white]",
        border_style="blue",
        box=box.ROUNDED,
    ))
    console.print()

    console.print(build_stats_panel(findings, file_count, elapsed))
    console.print()

    if not findings:
        console.print(Panel(
            Align.center(Text("No insecure patterns found.", style="bold green")),
            border_style="green",
            box=box.ROUNDED,
            padding=(1, 4),
        ))
        return

    console.print(RichRule("[bold white]Findings[/bold white]", style="red"))
    console.print()

    findings_by_file = defaultdict(list)
    for f in findings:
        findings_by_file[f.file_path].append(f)

    for file_path, file_findings in sorted(findings_by_file.items()):
        console.print(Text(f"FILE: {file_path}", style="bold underline cyan"))
        console.print()
        src = _read_source(file_path)
        for f in sorted(file_findings, key=lambda x: (x.line_number, x.col_offset)):
            console.print(build_finding_panel(f, source_code=src))
            console.print()


def _read_source(file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.debug("No source for %s: %s", file_path, e)
        return None


def output_text_plain(findings: List[Finding], file_path: str):
    """Output findings in plain text format (for file output)."""
    with open(file_path, "w", encoding="utf-8") as out:
        for f in findings:
            out.write(f"\n{'=' * 70}\n")
            out.write(f"  [{f.severity.value}] {f.rule_id} {f.rule_name}\n")
            out.write(f"  File: {f.file_path}:{f.line_number}:{f.col_offset + 1}\n")
            out.write(f"  Code: {f.line_content}\n")
            out.write(f"  Message: {f.message}\n")
            if f.advice:
                out.write(f"  Advice: {f.advice}\n")

        out.write(f"\n{'=' * 70}\n")
        out.write(f"Total findings: {len(findings)}\n")

        by_sev = _count_by(findings, lambda f: f.severity.value)
        by_rule = _count_by(findings, lambda f: f.rule_id)

        if by_sev:
            out.write("\nBy severity:\n")
            for sev in SEVERITY_NAMES:
                if sev in by_sev:
                    out.write(f"  {sev}: {by_sev[sev]}\n")

        if by_rule:
            out.write("\nBy rule:\n")
            for rule_id, count in sorted(by_rule.items()):
                out.write(f"  {rule_id}: {count}\n")


def build_json_report(findings: List[Finding], file_count: int = None) -> dict:
    if file_count is None:
        file_count = len(set(f.file_path for f in findings))
    return {
        "scan_date": datetime.now().isoformat(),
        "scanner": f"sinkscan v{__version__}",
        "files_scanned": file_count,
        "total_findings": len(findings),
        "findings": [f.to_dict() for f in findings],
        "summary": {
            "by_severity": dict(sorted(_count_by(findings, lambda f: f.severity.value).items())),
            "by_rule": dict(sorted(_count_by(findings, lambda f: f.rule_id).items())),
        },
    }


def output_json(findings: List[Finding], file_path: str = None, file_count: int = None):
    """Output findings in JSON format."""
    json_str = json.dumps(build_json_report(findings, file_count), indent=2)
    if file_path:
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


def print_rule_list(rules):
    table = Table(title="Registered rules", box=box.ROUNDED)
    table.add_column("Rule", style="bold cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Name", style="white")
    table.add_column("Node kinds", style="dim")
    for rule in rules:
        sev = rule.severity.value
        table.add_row(rule.rule_id, Text(sev, style=BORDER_STYLES.get(sev, "white")), rule.name,
                      ", ".join(sorted(k.value for k in rule.kinds)))
    console.print(table)

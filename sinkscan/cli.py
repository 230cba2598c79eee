"""Command line entry point."""

import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from sinkscan import __version__
from sinkscan.config import ConfigError, load_config
from sinkscan.findings import FAILING_SEVERITY, SEVERITY_ORDER, Severity
from sinkscan.registry import create_registry
from sinkscan.report import (
    console, output_json, output_rich, output_text_plain, print_banner, print_rule_list,
)
from sinkscan.scanner import apply_severity_overrides, filter_findings, scan_path

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sinkscan",
        description="Java security rule scanner using tree-sitter",
    )
    parser.add_argument("target", nargs="?", help="Java file or directory to scan")
    parser.add_argument("--output", choices=["text", "json"], default="text",
                        help="Output format (default: text)")
    parser.add_argument("-o", "--output-file", help="Write output to file")
    parser.add_argument("--min-severity", choices=[s.value for s in Severity],
                        help="Minimum severity to report")
    parser.add_argument("--config", help="Path to .sinkscan.yml config file")
    parser.add_argument("--list-rules", action="store_true",
                        help="List the registered rules and exit")
    parser.add_argument("--no-banner", action="store_true",
                        help="Suppress banner output")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.list_rules:
        print_rule_list(create_registry().all_rules())
        return 0
    if not args.target:
        parser.error("the following arguments are required: target")

    try:
        config = load_config(args.target, args.config)
    except ConfigError as e:
        console.print(f"[bold red]Config error:[/bold red] {e}")
        return 2

    min_severity = args.min_severity or (config.min_severity.value if config else Severity.INFO.value)
    is_json = args.output == "json"

    if not args.no_banner and not is_json:
        print_banner()

    registry = create_registry(config.disabled_rules if config else ())
    findings, file_count, elapsed = scan_path(args.target, show_progress=not is_json,
                                              config=config, registry=registry)
    if config:
        findings = apply_severity_overrides(findings, config.severity_overrides)
    suppression_kw = config.suppression_keyword if config else "nosec"
    findings = filter_findings(findings, min_severity, suppression_kw)

    # Sort by file, then position
    findings.sort(key=lambda f: (f.file_path, f.line_number, f.col_offset))

    if is_json:
        output_json(findings, args.output_file, file_count)
    else:
        output_rich(findings, args.target, file_count, elapsed, min_severity)

        # Save plain text to file if requested
        if args.output_file:
            output_text_plain(findings, args.output_file)
            console.print(f"\n[bold green]Report saved to {args.output_file}[/bold green]")

    failing = sum(1 for f in findings if SEVERITY_ORDER[f.severity] >= SEVERITY_ORDER[FAILING_SEVERITY])
    return 1 if failing else 0

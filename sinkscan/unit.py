"""Parsed Java compilation units."""

import logging
from typing import List

from sinkscan.nodes import SourceNode, new_parser
from sinkscan.symbols import SymbolTable

logger = logging.getLogger(__name__)


class CompilationUnit:
    """One parsed Java source file together with its symbol table."""

    def __init__(self, source: str, path: str = "<string>"):
        self.source = source
        self.path = path
        # tree-sitter counts rows at "\n" only
        self.lines: List[str] = [line[:-1] if line.endswith("\r") else line
                                 for line in source.split("\n")]
        self.tree = new_parser().parse(source.encode("utf-8"))
        self.root = SourceNode(self.tree.root_node, self)
        self.symbols = SymbolTable(self.root)
        if self.has_errors:
            logger.debug("Syntax errors in %s; error nodes are skipped", path)

    @property
    def package(self) -> str:
        return self.symbols.package

    @property
    def has_errors(self) -> bool:
        return self.tree.root_node.has_error

    def line_content(self, line: int) -> str:
        """Source text of a 1-based line, stripped; empty when out of range."""
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1].strip()
        return ""

    def __repr__(self) -> str:
        return f"<CompilationUnit {self.path}>"


def parse_java(source: str, path: str = "<string>") -> CompilationUnit:
    """Parse Java source text. Syntax errors never raise."""
    return CompilationUnit(source, path)

"""sinkscan: tree-sitter based security rule scanner for Java sources."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sinkscan")
except PackageNotFoundError:
    __version__ = "0.0.0"

"""TSX parsing into a typed syntax tree."""

from .parser import SourceParser, parse_source

__all__ = ["SourceParser", "parse_source"]

"""DOT subset parser producing pipegraph Graph models."""

from pipegraph.parser.errors import ParseError
from pipegraph.parser.transformer import parse_dot, parse_dot_file

__all__ = ["ParseError", "parse_dot", "parse_dot_file"]

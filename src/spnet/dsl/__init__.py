"""Circuit description DSL entry points."""

from spnet.dsl.compiler import build_tree, compile_dsl, format_tree, tree_to_expr
from spnet.dsl.parser import format_expr, parse_dsl

__all__ = ["build_tree", "compile_dsl", "format_expr", "format_tree", "parse_dsl", "tree_to_expr"]

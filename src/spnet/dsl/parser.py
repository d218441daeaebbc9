"""Parser and formatter for the circuit description DSL."""

from __future__ import annotations

from pathlib import Path
import re
from typing import List, Optional

from lark import Lark, Transformer, UnexpectedInput

from spnet.dsl.ast import DSLExpr, ParallelExpr, ResistorExpr, SeriesExpr
from spnet.errors import DSLParseError


_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_MULTIPLIERS = {
    "f": 1e-15,
    "p": 1e-12,
    "n": 1e-9,
    "u": 1e-6,
    "m": 1e-3,
    "k": 1e3,
    "K": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
}


def _load_parser() -> Lark:
    return Lark(_GRAMMAR_PATH.read_text(encoding="utf-8"), parser="lalr", propagate_positions=True)


_PARSER = _load_parser()


class _DSLTransformer(Transformer):
    def series_expr(self, items):
        label, children = items[0] if items[0] is not None else (None, [])
        return SeriesExpr(items=children, label=label)

    def parallel_expr(self, items):
        label, children = items[0] if items[0] is not None else (None, [])
        return ParallelExpr(items=children, label=label)

    def labeled_args(self, items):
        return items[0], list(items[1:])

    def plain_args(self, items):
        return None, list(items)

    def resistor_expr(self, items):
        return ResistorExpr(value=items[1], label=items[0])

    def NUMBER(self, token):
        return _parse_number(str(token))

    def STRING(self, token):
        return re.sub(r"\\(.)", r"\1", str(token)[1:-1])


def parse_dsl(text: str) -> DSLExpr:
    """Parse DSL text into an expression tree."""
    try:
        tree = _PARSER.parse(text)
    except UnexpectedInput as exc:
        context = exc.get_context(text) if hasattr(exc, "get_context") else ""
        raise DSLParseError(
            f"DSL parse error at line {exc.line}, column {exc.column}: {exc}".strip(),
            line=exc.line,
            column=exc.column,
            context=context,
        ) from exc
    return _DSLTransformer().transform(tree)


def format_expr(expr: DSLExpr) -> str:
    """Format an expression into canonical DSL text."""
    if isinstance(expr, ResistorExpr):
        args = [_format_number(expr.value)]
        if expr.label is not None:
            args.insert(0, _format_string(expr.label))
        return f"R({', '.join(args)})"
    if isinstance(expr, SeriesExpr):
        return f"series({_format_group_args(expr.label, expr.items)})"
    if isinstance(expr, ParallelExpr):
        return f"parallel({_format_group_args(expr.label, expr.items)})"
    raise TypeError(f"Unsupported expression: {expr}")


def _format_group_args(label: Optional[str], items: List[DSLExpr]) -> str:
    args = [format_expr(item) for item in items]
    if label is not None:
        args.insert(0, _format_string(label))
    return ", ".join(args)


def _format_number(value: float) -> str:
    return repr(float(value))


def _format_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_number(token: str) -> float:
    if not token:
        raise DSLParseError("Empty number token.")
    suffix = token[-1]
    if suffix in _MULTIPLIERS:
        return float(token[:-1]) * _MULTIPLIERS[suffix]
    return float(token)

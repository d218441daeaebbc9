"""Compiler from DSL expressions to component trees, and back."""

from __future__ import annotations

from typing import Dict, Optional, Type

from spnet.circuits.core import Component, ParallelGroup, Resistor, SeriesGroup
from spnet.circuits.labels import LabelCounter
from spnet.dsl.ast import DSLExpr, ParallelExpr, ResistorExpr, SeriesExpr
from spnet.dsl.parser import format_expr, parse_dsl
from spnet.errors import CircuitValidationError, DSLValidationError


_GROUP_EXPRS: Dict[str, Type[DSLExpr]] = {
    SeriesGroup.kind: SeriesExpr,
    ParallelGroup.kind: ParallelExpr,
}


def compile_dsl(expr: DSLExpr, labels: Optional[LabelCounter] = None) -> Component:
    """Build a component tree; unlabeled nodes take the next label from ``labels``."""
    labels = labels if labels is not None else LabelCounter()
    return _compile_expr(expr, labels, path="root")


def build_tree(text: str, labels: Optional[LabelCounter] = None) -> Component:
    return compile_dsl(parse_dsl(text), labels)


def _compile_expr(expr: DSLExpr, labels: LabelCounter, path: str) -> Component:
    if isinstance(expr, ResistorExpr):
        label = expr.label if expr.label is not None else labels.next_resistor()
        try:
            return Resistor(label, expr.value)
        except CircuitValidationError as exc:
            raise DSLValidationError(f"Invalid resistor at {path} ('{label}'): {exc}") from exc
    if isinstance(expr, SeriesExpr):
        group: Component = SeriesGroup(expr.label if expr.label is not None else labels.next_group(SeriesGroup.kind))
    elif isinstance(expr, ParallelExpr):
        group = ParallelGroup(expr.label if expr.label is not None else labels.next_group(ParallelGroup.kind))
    else:
        raise DSLValidationError(f"Unsupported expression at {path}: {expr!r}")
    for index, item in enumerate(expr.items):
        group.children.append(_compile_expr(item, labels, f"{path}.{index}"))
    return group


def tree_to_expr(root: Component) -> DSLExpr:
    """Describe a tree as a DSL expression with every label spelled out."""
    value = root.intrinsic_resistance()
    if value is not None:
        return ResistorExpr(value=value, label=root.label)
    expr_cls = _GROUP_EXPRS.get(root.kind)
    if expr_cls is None:
        raise DSLValidationError(f"No DSL form for component kind '{root.kind}'.")
    return expr_cls(items=[tree_to_expr(child) for child in root.children], label=root.label)


def format_tree(root: Component) -> str:
    return format_expr(tree_to_expr(root))

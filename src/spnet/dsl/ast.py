"""AST definitions for the circuit description DSL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class DSLExpr:
    """Base class for DSL expressions."""


@dataclass(frozen=True)
class ResistorExpr(DSLExpr):
    value: float
    label: Optional[str] = None


@dataclass(frozen=True)
class SeriesExpr(DSLExpr):
    items: List[DSLExpr] = field(default_factory=list)
    label: Optional[str] = None


@dataclass(frozen=True)
class ParallelExpr(DSLExpr):
    items: List[DSLExpr] = field(default_factory=list)
    label: Optional[str] = None

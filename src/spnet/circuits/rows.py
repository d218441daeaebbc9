"""Flat row format for component trees (one row per node)."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from spnet.circuits.core import COMPONENT_TYPES, Component, Resistor
from spnet.circuits.tree import iter_nodes, iter_with_parents
from spnet.errors import CircuitValidationError, RowFormatError, StorageError

logger = logging.getLogger(__name__)

ROW_COLUMNS = ("id", "parent_id", "type", "identifier", "value")
REQUIRED_COLUMNS = ("id", "type", "identifier")

NodeRow = Dict[str, str]


def export_rows(root: Component) -> List[NodeRow]:
    """Flatten a tree into rows in pre-order; the root has an empty parent id."""
    rows: List[NodeRow] = []
    for node, parent in iter_with_parents(root):
        value = node.intrinsic_resistance()
        rows.append(
            {
                "id": node.id,
                "parent_id": parent.id if parent is not None else "",
                "type": node.kind,
                "identifier": node.label,
                "value": repr(value) if value is not None else "",
            }
        )
    return rows


def import_rows(rows: Iterable[Mapping[str, object]]) -> Component:
    """Rebuild a tree from rows in any parent/child order.

    Every node is built first, then attached to its parent in row order.
    Exactly one row may lack a parent id.
    """
    rows = list(rows)
    nodes: Dict[str, Component] = {}
    for number, row in enumerate(rows, start=1):
        node = _build_node(row, number)
        if node.id in nodes:
            raise RowFormatError(f"Duplicate id '{node.id}'.", row=number)
        nodes[node.id] = node

    roots: List[Component] = []
    for number, row in enumerate(rows, start=1):
        child = nodes[_text(row, "id")]
        parent_id = _text(row, "parent_id")
        if not parent_id:
            roots.append(child)
            continue
        parent = nodes.get(parent_id)
        if parent is None:
            raise RowFormatError(f"Unknown parent id '{parent_id}'.", row=number)
        if not parent.holds_children:
            raise RowFormatError(f"{parent.kind} '{parent.label}' cannot hold children.", row=number)
        parent.children.append(child)

    if not roots:
        raise RowFormatError("No root row found; exactly one row must have an empty parent_id.")
    if len(roots) > 1:
        labels = ", ".join(f"'{root.label}'" for root in roots)
        raise RowFormatError(f"Multiple root rows found ({labels}); exactly one is allowed.")

    root = roots[0]
    reachable = sum(1 for _ in iter_nodes(root))
    if reachable != len(nodes):
        raise RowFormatError(
            f"{len(nodes) - reachable} row(s) are not reachable from the root; parent links form a cycle."
        )
    return root


def rows_to_csv(rows: Iterable[Mapping[str, object]]) -> str:
    buffer = io.StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=ROW_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({column: row.get(column, "") for column in ROW_COLUMNS})
    return buffer.getvalue()


def rows_from_csv(text: str) -> List[NodeRow]:
    reader = csv.DictReader(io.StringIO(text, newline=""))
    header = reader.fieldnames or []
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise RowFormatError(f"Missing CSV columns: {', '.join(missing)}.")
    return [dict(row) for row in reader]


def write_rows_csv(path: Path, root: Component) -> None:
    """Export ``root`` to a CSV file at ``path``."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(rows_to_csv(export_rows(root)))
    except OSError as exc:
        logger.error("Failed to write circuit rows to %s: %s", path, exc)
        raise StorageError(f"Unable to write circuit rows to {path!s}") from exc
    logger.debug("Wrote circuit rows to %s", path)


def read_rows_csv(path: Path) -> Component:
    """Import a tree from a CSV file written by :func:`write_rows_csv`."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            text = handle.read()
    except OSError as exc:
        logger.error("Failed to read circuit rows from %s: %s", path, exc)
        raise StorageError(f"Unable to read circuit rows from {path!s}") from exc
    return import_rows(rows_from_csv(text))


def _build_node(row: Mapping[str, object], number: int) -> Component:
    missing = [column for column in REQUIRED_COLUMNS if column not in row]
    if missing:
        raise RowFormatError(f"Missing fields: {', '.join(missing)}.", row=number)
    node_id = _text(row, "id")
    if not node_id:
        raise RowFormatError("Empty id.", row=number)
    kind = _text(row, "type")
    cls = COMPONENT_TYPES.get(kind)
    if cls is None:
        expected = ", ".join(sorted(COMPONENT_TYPES))
        raise RowFormatError(f"Unknown type '{kind}' (expected one of: {expected}).", row=number)
    label = "" if row["identifier"] is None else str(row["identifier"])
    if cls is Resistor:
        try:
            return Resistor(label, _resistance(row, number), node_id=node_id)
        except CircuitValidationError as exc:
            raise CircuitValidationError(f"Row {number}: {exc}") from exc
    return cls(label, node_id=node_id)


def _resistance(row: Mapping[str, object], number: int) -> float:
    raw = _text(row, "value")
    if not raw:
        raise RowFormatError("Resistor row has no value.", row=number)
    try:
        return float(raw)
    except ValueError as exc:
        raise RowFormatError(f"Resistor value '{raw}' is not a number.", row=number) from exc


def _text(row: Mapping[str, object], column: str) -> str:
    value: Optional[object] = row.get(column)
    if value is None:
        return ""
    return str(value).strip()

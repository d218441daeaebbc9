"""In-process editing session for component trees."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import Callable, Iterable, List, Mapping, Optional

from spnet.circuits.circuit import Circuit
from spnet.circuits.core import Component, ParallelGroup, Resistor, SeriesGroup
from spnet.circuits.labels import LabelCounter
from spnet.circuits.rows import NodeRow, export_rows, import_rows
from spnet.circuits.tree import find, insert_child, remove_child
from spnet.errors import CircuitStructureError, CircuitValidationError

logger = logging.getLogger(__name__)

DEFAULT_ROOT_LABEL = "Main Circuit"
DEFAULT_SOURCE_VOLTAGE = 12.0


@dataclass(frozen=True)
class SolveResult:
    circuit: Circuit
    report: str
    tutorial: str


@dataclass
class TreeHistory:
    """Bounded undo/redo stacks of tree snapshots."""

    capacity: int = 50
    _undo: List[Component] = field(default_factory=list)
    _redo: List[Component] = field(default_factory=list)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def push(self, previous: Component) -> None:
        self._undo.append(previous)
        if len(self._undo) > self.capacity:
            self._undo.pop(0)
        self._redo.clear()

    def undo(self, current: Component) -> Optional[Component]:
        if not self._undo:
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: Component) -> Optional[Component]:
        if not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)


class CircuitEditor:
    """Holds the current tree, the source voltage and the label counters.

    Every edit swaps ``root`` for a new tree, so snapshots handed out earlier
    (including those kept for undo) never change.
    """

    def __init__(
        self,
        root: Optional[Component] = None,
        source_voltage: float = DEFAULT_SOURCE_VOLTAGE,
        history_capacity: int = 50,
    ) -> None:
        self.root: Component = root if root is not None else SeriesGroup(DEFAULT_ROOT_LABEL)
        self.source_voltage = source_voltage
        self.labels = LabelCounter()
        self.history = TreeHistory(capacity=history_capacity)

    def add_resistor(self, parent_id: str, value: float, label: Optional[str] = None) -> Component:
        return self._insert_new(
            parent_id, lambda: Resistor(label if label is not None else self.labels.next_resistor(), value)
        )

    def add_series_group(self, parent_id: str, label: Optional[str] = None) -> Component:
        return self._insert_new(
            parent_id, lambda: SeriesGroup(label if label is not None else self.labels.next_group(SeriesGroup.kind))
        )

    def add_parallel_group(self, parent_id: str, label: Optional[str] = None) -> Component:
        return self._insert_new(
            parent_id,
            lambda: ParallelGroup(label if label is not None else self.labels.next_group(ParallelGroup.kind)),
        )

    def remove(self, node_id: str) -> None:
        new_root = remove_child(self.root, node_id)
        self._replace(new_root)
        logger.debug("Removed node %s", node_id)

    def node(self, node_id: str) -> Optional[Component]:
        located = find(self.root, node_id)
        return located[0] if located is not None else None

    def set_voltage(self, source_voltage: float) -> None:
        self.source_voltage = float(source_voltage)

    def circuit(self) -> Circuit:
        return Circuit(source_voltage=self.source_voltage, root=self.root)

    def solve(self) -> SolveResult:
        """Solve a copy of the current tree and render its report and tutorial."""
        solved = self.circuit().solved()
        return SolveResult(circuit=solved, report=solved.report(), tutorial=solved.tutorial())

    def undo(self) -> bool:
        previous = self.history.undo(self.root)
        if previous is None:
            return False
        self.root = previous
        return True

    def redo(self) -> bool:
        following = self.history.redo(self.root)
        if following is None:
            return False
        self.root = following
        return True

    def export_rows(self) -> List[NodeRow]:
        return export_rows(self.root)

    def load_rows(self, rows: Iterable[Mapping[str, object]]) -> Component:
        """Replace the tree with one rebuilt from rows; history starts over."""
        self.root = import_rows(rows)
        self.history.clear()
        logger.debug("Loaded tree '%s' from rows", self.root.label)
        return self.root

    def _insert_new(self, parent_id: str, build: Callable[[], Component]) -> Component:
        # Failed edits must not consume a label.
        saved = copy.copy(self.labels)
        try:
            return self._insert(parent_id, build())
        except (CircuitValidationError, CircuitStructureError):
            self.labels = saved
            raise

    def _insert(self, parent_id: str, component: Component) -> Component:
        new_root = insert_child(self.root, parent_id, component)
        self._replace(new_root)
        logger.debug("Inserted %s '%s' under %s", component.kind, component.label, parent_id)
        located = find(new_root, component.id)
        return located[0]

    def _replace(self, new_root: Component) -> None:
        self.history.push(self.root)
        self.root = new_root

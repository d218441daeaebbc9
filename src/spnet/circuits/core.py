"""Core series/parallel component tree."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import math
import uuid
from typing import Dict, Iterable, List, Optional

from spnet.errors import CircuitValidationError


Row = Dict[str, str]

ROW_HEADERS = ("Component", "Resistance (Ω)", "Voltage (V)", "Current (A)", "Power (W)")


def new_component_id() -> str:
    """Return a process-unique component id."""
    return f"comp_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class StepNarrative:
    """Reduction steps for a subtree plus its equivalent resistance."""

    steps: List[str] = field(default_factory=list)
    resistance: float = 0.0
    description: str = ""


def conductance_sum(resistances: Iterable[float]) -> float:
    """Sum 1/r over strictly positive resistances."""
    total = 0.0
    for value in resistances:
        if value > 0:
            total += 1.0 / value
    return total


def parallel_resistance(resistances: Iterable[float]) -> float:
    total = conductance_sum(resistances)
    return 1.0 / total if total > 0 else 0.0


class Component(ABC):
    """Node of a series/parallel resistor tree."""

    kind: str = ""
    holds_children: bool = False
    # Derived field every child shares with its group after a solve.
    shared_field: Optional[str] = None

    def __init__(self, label: str, node_id: Optional[str] = None) -> None:
        self.id = node_id or new_component_id()
        self.label = label
        self.children: List[Component] = []
        self.resistance_ohms = 0.0
        self.voltage_v = 0.0
        self.current_a = 0.0
        self.power_w = 0.0

    def __repr__(self) -> str:
        return f"{self.kind}(label={self.label!r}, id={self.id!r}, children={len(self.children)})"

    def intrinsic_resistance(self) -> Optional[float]:
        """Fixed resistance for leaves, ``None`` for groups."""
        return None

    @abstractmethod
    def resistance(self) -> float:
        """Equivalent resistance, recomputed from the subtree on every call."""

    @abstractmethod
    def collect_rows(self) -> List[Row]:
        """Formatted per-leaf rows in depth-first, left-to-right order."""

    @abstractmethod
    def step_narrative(self) -> StepNarrative:
        """Reduction steps for this subtree, innermost groups first."""

    def assign(self, *, voltage: Optional[float] = None, current: Optional[float] = None) -> None:
        """Set the voltage across or the current through this node and propagate it.

        Exactly one of ``voltage`` or ``current`` must be given. The node's
        resistance is recomputed first; a node with zero resistance that is
        given a voltage carries no current, so an empty group reports 0 A
        instead of an infinite current.
        """
        if (voltage is None) == (current is None):
            raise ValueError("Exactly one of voltage or current must be supplied.")
        self.resistance_ohms = self.resistance()
        if voltage is not None:
            self.voltage_v = float(voltage)
            self.current_a = self.voltage_v / self.resistance_ohms if self.resistance_ohms > 0 else 0.0
        else:
            self.current_a = float(current)
            self.voltage_v = self.current_a * self.resistance_ohms
        self.power_w = self.voltage_v * self.current_a
        self._propagate()

    def _propagate(self) -> None:
        pass


class Resistor(Component):
    """Leaf with a fixed, strictly positive resistance."""

    kind = "Resistor"

    def __init__(self, label: str, resistance_ohms: float, node_id: Optional[str] = None) -> None:
        try:
            value = float(resistance_ohms)
        except (TypeError, ValueError) as exc:
            raise CircuitValidationError(f"Resistor value must be a number, got {resistance_ohms!r}.") from exc
        if not value > 0:
            raise CircuitValidationError("Resistor value must be positive.")
        if not math.isfinite(value):
            raise CircuitValidationError("Resistor value must be finite.")
        super().__init__(label, node_id)
        self._value_ohms = value
        self.resistance_ohms = value

    @property
    def value_ohms(self) -> float:
        return self._value_ohms

    def intrinsic_resistance(self) -> Optional[float]:
        return self._value_ohms

    def resistance(self) -> float:
        return self._value_ohms

    def collect_rows(self) -> List[Row]:
        values = (
            self.label,
            f"{self.resistance_ohms:.2f}",
            f"{self.voltage_v:.2f}",
            f"{self.current_a:.3f}",
            f"{self.power_w:.2f}",
        )
        return [dict(zip(ROW_HEADERS, values))]

    def step_narrative(self) -> StepNarrative:
        description = f"{self.kind} '{self.label}' ({self._value_ohms:.2f} Ω)"
        return StepNarrative(steps=[], resistance=self._value_ohms, description=description)


class _Group(Component):
    holds_children = True

    def __init__(
        self,
        label: str,
        children: Optional[Iterable[Component]] = None,
        node_id: Optional[str] = None,
    ) -> None:
        super().__init__(label, node_id)
        for child in children or ():
            self.add(child)

    def add(self, child: Component) -> Component:
        self.children.append(child)
        return child

    def collect_rows(self) -> List[Row]:
        rows: List[Row] = []
        for child in self.children:
            rows.extend(child.collect_rows())
        return rows

    def _reduce_children(self) -> tuple[List[str], List[float], List[str]]:
        steps: List[str] = []
        resistances: List[float] = []
        descriptions: List[str] = []
        for child in self.children:
            narrative = child.step_narrative()
            steps.extend(narrative.steps)
            resistances.append(narrative.resistance)
            descriptions.append(narrative.description)
        return steps, resistances, descriptions

    def _describe(self, resistance: float) -> str:
        return f"'{self.label}' (now {resistance:.2f} Ω)"


class SeriesGroup(_Group):
    """Children carry the same current; resistances add."""

    kind = "SeriesGroup"
    shared_field = "current_a"

    def resistance(self) -> float:
        return float(sum(child.resistance() for child in self.children))

    def _propagate(self) -> None:
        for child in self.children:
            child.assign(current=self.current_a)

    def step_narrative(self) -> StepNarrative:
        steps, resistances, descriptions = self._reduce_children()
        total = float(sum(resistances))
        if self.children:
            terms = " + ".join(f"{value:.2f}" for value in resistances)
            steps.append(
                f"Resolve '{self.label}' (Series).\n"
                f"  Components: {', '.join(descriptions)}.\n"
                f"  Calculation: R_eq = {terms} = {total:.2f} Ω."
            )
        return StepNarrative(steps=steps, resistance=total, description=self._describe(total))


class ParallelGroup(_Group):
    """Children share the same voltage; conductances add.

    Children whose resistance is not strictly positive add no conductance,
    and a group with no conductance at all has resistance 0.
    """

    kind = "ParallelGroup"
    shared_field = "voltage_v"

    def resistance(self) -> float:
        return parallel_resistance(child.resistance() for child in self.children)

    def _propagate(self) -> None:
        for child in self.children:
            child.assign(voltage=self.voltage_v)

    def step_narrative(self) -> StepNarrative:
        steps, resistances, descriptions = self._reduce_children()
        conductance = conductance_sum(resistances)
        total = 1.0 / conductance if conductance > 0 else 0.0
        if self.children:
            terms = " + ".join(f"1/{value:.2f}" for value in resistances)
            steps.append(
                f"Resolve '{self.label}' (Parallel).\n"
                f"  Components: {', '.join(descriptions)}.\n"
                f"  Calculation: 1/R_eq = {terms} = {conductance:.4f} S.\n"
                f"  Therefore: R_eq = 1 / {conductance:.4f} = {total:.2f} Ω."
            )
        return StepNarrative(steps=steps, resistance=total, description=self._describe(total))


COMPONENT_TYPES = {cls.kind: cls for cls in (Resistor, SeriesGroup, ParallelGroup)}

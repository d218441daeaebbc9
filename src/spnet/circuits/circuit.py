"""Source-driven circuit wrapper with report and tutorial text."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import List

from spnet.circuits.core import Component


NO_COMPONENTS_LINE = "No components in the circuit."


def total_current(source_voltage: float, resistance: float) -> float:
    return source_voltage / resistance if resistance > 0 else 0.0


@dataclass
class Circuit:
    """A source voltage applied across a root component."""

    source_voltage: float
    root: Component

    def resolve(self) -> None:
        """Propagate the source voltage through the tree, in place."""
        self.root.assign(voltage=self.source_voltage)

    def solved(self) -> "Circuit":
        """Return a resolved copy, leaving this circuit's tree untouched."""
        resolved = Circuit(source_voltage=self.source_voltage, root=copy.deepcopy(self.root))
        resolved.resolve()
        return resolved

    def total_resistance(self) -> float:
        return self.root.resistance()

    def report(self) -> str:
        """Summary block plus a tab-separated table of leaf values."""
        resistance = self.root.resistance()
        current = total_current(self.source_voltage, resistance)
        power = self.source_voltage * current

        lines: List[str] = [
            "--- Circuit Report ---",
            f"Source Voltage: {self.source_voltage:.2f} V",
            f"Total Resistance: {resistance:.2f} Ω",
            f"Total Current: {current:.3f} A",
            f"Total Power: {power:.2f} W",
            "",
            "--- Component Details ---",
        ]
        rows = self.root.collect_rows()
        if rows:
            headers = list(rows[0].keys())
            lines.append("\t".join(headers))
            lines.extend("\t".join(row[header] for header in headers) for row in rows)
        else:
            lines.append(NO_COMPONENTS_LINE)
        return "\n".join(lines)

    def tutorial(self) -> str:
        """Numbered reduction steps followed by the totals they lead to.

        The narrative recomputes every resistance, so it does not depend on a
        prior :meth:`resolve`.
        """
        narrative = self.root.step_narrative()
        resistance = narrative.resistance

        text = "--- Circuit Solution Tutorial ---\n\n"
        text += "To find the total resistance, we simplify the circuit from the inside out:\n\n"
        for index, step in enumerate(narrative.steps, start=1):
            text += f"Step {index}: {step}\n\n"
        text += "--- Final Summary ---\n\n"
        text += f"The total equivalent resistance of the circuit is {resistance:.2f} Ω.\n\n"
        if resistance > 0:
            current = total_current(self.source_voltage, resistance)
            power = self.source_voltage * current
            volts = f"{self.source_voltage:.2f} V"
            text += f"Total Current (I) = V / R_eq = {volts} / {resistance:.2f} Ω = {current:.3f} A.\n"
            text += f"Total Power (P) = V * I = {volts} * {current:.3f} A = {power:.2f} W.\n"
        return text

"""Sequential display labels for newly created components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


GROUP_TITLES: Dict[str, str] = {
    "SeriesGroup": "Series Group",
    "ParallelGroup": "Parallel Group",
}


@dataclass
class LabelCounter:
    """Per-session counters behind labels like ``R3`` or ``Parallel Group 2``.

    Series and parallel groups share one counter.
    """

    resistors: int = 0
    groups: int = 0

    def next_resistor(self) -> str:
        self.resistors += 1
        return f"R{self.resistors}"

    def next_group(self, kind: str) -> str:
        title = GROUP_TITLES.get(kind)
        if title is None:
            raise ValueError(f"Unsupported group kind: {kind}")
        self.groups += 1
        return f"{title} {self.groups}"

"""Circuit primitives, tree edits and row serialization."""

from spnet.circuits.circuit import Circuit
from spnet.circuits.core import Component, ParallelGroup, Resistor, SeriesGroup, StepNarrative
from spnet.circuits.labels import LabelCounter
from spnet.circuits.rows import export_rows, import_rows, read_rows_csv, write_rows_csv
from spnet.circuits.tree import find, insert_child, iter_nodes, remove_child, snapshot

__all__ = [
    "Circuit",
    "Component",
    "Resistor",
    "SeriesGroup",
    "ParallelGroup",
    "StepNarrative",
    "LabelCounter",
    "export_rows",
    "import_rows",
    "read_rows_csv",
    "write_rows_csv",
    "find",
    "insert_child",
    "iter_nodes",
    "remove_child",
    "snapshot",
]

"""spnet package initialization."""

from spnet.circuits import (
    Circuit,
    Component,
    LabelCounter,
    ParallelGroup,
    Resistor,
    SeriesGroup,
    StepNarrative,
    export_rows,
    find,
    import_rows,
    insert_child,
    remove_child,
)
from spnet.editor import CircuitEditor, SolveResult
from spnet.errors import (
    CircuitStructureError,
    CircuitValidationError,
    ConfigError,
    ConservationError,
    DSLParseError,
    DSLValidationError,
    RowFormatError,
    StorageError,
)

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
    "find",
    "insert_child",
    "remove_child",
    "CircuitEditor",
    "SolveResult",
    "CircuitStructureError",
    "CircuitValidationError",
    "ConfigError",
    "ConservationError",
    "DSLParseError",
    "DSLValidationError",
    "RowFormatError",
    "StorageError",
]

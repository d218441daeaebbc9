"""Custom exceptions for spnet circuit handling."""


class CircuitValidationError(ValueError):
    """Raised when a component is constructed with invalid values."""


class CircuitStructureError(ValueError):
    """Raised when a tree edit or reconstruction would break the tree shape."""


class RowFormatError(CircuitStructureError):
    """Raised when serialized rows cannot be turned back into a tree."""

    def __init__(self, message: str, row: int | None = None):
        if row is not None:
            message = f"Row {row}: {message}"
        super().__init__(message)
        self.row = row


class DSLParseError(ValueError):
    """Raised when DSL parsing fails with location context."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None, context: str | None = None):
        super().__init__(message)
        self.line = line
        self.column = column
        self.context = context


class DSLValidationError(ValueError):
    """Raised when DSL semantics are invalid."""


class ConfigError(ValueError):
    """Raised when a YAML configuration has the wrong shape."""


class StorageError(RuntimeError):
    """Raised when reading or writing circuit files fails."""


class ConservationError(RuntimeError):
    """Raised when a solved tree violates series/parallel conservation."""

"""Custom exception hierarchy for mallgrid."""

from __future__ import annotations


class MallGridError(Exception):
    """Base exception for all mallgrid-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(MallGridError):
    """Raised when configuration is invalid or missing."""
    pass


class SchemaError(MallGridError):
    """Base class for structural errors in input documents."""
    pass


class UnsupportedSchemaError(SchemaError):
    """Raised when a document's schema kind is not recognised."""
    pass


class MalformedDocumentError(SchemaError):
    """Raised when a document has a recognised kind but an unusable shape."""
    pass


class ContractViolationError(MallGridError):
    """Base class for inputs that break the grid/rect contract."""
    pass


class CoordinateError(ContractViolationError):
    """Raised for non-integer, negative or out-of-grid coordinates."""
    pass


class InvalidRectError(ContractViolationError):
    """Raised when a rect has non-positive width or height."""
    pass


class ContentLimitError(ContractViolationError):
    """Raised when normalized content exceeds the configured tile extent."""
    pass


class ExportError(MallGridError):
    """Raised when building the scene.3d.v1 document fails."""
    pass

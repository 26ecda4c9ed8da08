"""Tests for custom exception hierarchy."""

import pytest

from mallgrid.exceptions import (
    ConfigurationError,
    ContentLimitError,
    ContractViolationError,
    CoordinateError,
    ExportError,
    InvalidRectError,
    MalformedDocumentError,
    MallGridError,
    SchemaError,
    UnsupportedSchemaError,
)


def test_mallgrid_error_base():
    """Test base MallGridError."""
    error = MallGridError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_details_default_to_empty_dict():
    error = ExportError("Export failed")
    assert error.details == {}


def test_schema_errors():
    """Unsupported and malformed documents are both schema errors."""
    for cls in (UnsupportedSchemaError, MalformedDocumentError):
        error = cls("bad document")
        assert isinstance(error, SchemaError)
        assert isinstance(error, MallGridError)


def test_contract_violations():
    for cls in (CoordinateError, InvalidRectError, ContentLimitError):
        error = cls("out of contract", {"x": "1"})
        assert isinstance(error, ContractViolationError)
        assert not isinstance(error, SchemaError)
        assert error.details == {"x": "1"}


def test_configuration_error():
    """Test ConfigurationError."""
    error = ConfigurationError("Config missing", {"setting": "rules"})
    assert isinstance(error, MallGridError)
    assert error.message == "Config missing"


def test_exception_raising():
    """Test that exceptions can be raised and caught."""
    with pytest.raises(CoordinateError) as exc_info:
        raise CoordinateError("Invalid tiles.floor[0]")
    assert exc_info.value.message == "Invalid tiles.floor[0]"

    with pytest.raises(MallGridError):
        raise ContentLimitError("Too large")

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
import pytest

from desal_thermal.exceptions import (
    EmptyCatalogError,
    InputValidationError,
    PipeNotFoundError,
    PropertyRangeError,
    ValidationResult,
)
from desal_thermal.logging_utils import LOG_LEVEL_ENV, configure_logging
from desal_thermal.serialization import to_record


class TestValidationResult:
    def test_valid_when_no_errors(self):
        result = ValidationResult(warnings=("just a note",))
        assert result.is_valid
        result.raise_for_errors()

    def test_errors_are_joined(self):
        result = ValidationResult(errors=("first problem", "second problem"))
        assert not result.is_valid
        with pytest.raises(InputValidationError) as excinfo:
            result.raise_for_errors(prefix="Invalid input: ")
        assert str(excinfo.value) == "Invalid input: first problem; second problem"
        assert excinfo.value.errors == ["first problem", "second problem"]

    def test_error_hierarchy(self):
        assert issubclass(InputValidationError, ValueError)
        assert issubclass(PropertyRangeError, ValueError)
        assert issubclass(EmptyCatalogError, LookupError)
        assert issubclass(PipeNotFoundError, KeyError)

    def test_pipe_not_found_message_is_not_quoted(self):
        assert str(PipeNotFoundError("Pipe size NPS 7 not found")) == "Pipe size NPS 7 not found"


class _Color(str, Enum):
    RED = "red"


@dataclass(frozen=True)
class _Inner:
    value: float
    note: str | None = None


@dataclass(frozen=True)
class _Outer:
    color: _Color
    items: tuple[_Inner, ...]
    scalar: float
    optional: float | None = None


class TestToRecord:
    def test_nested_conversion(self):
        record = to_record(
            _Outer(color=_Color.RED, items=(_Inner(1.0), _Inner(2.0, "x")), scalar=np.float64(3.5))
        )

        assert record == {
            "color": "red",
            "items": [{"value": 1.0}, {"value": 2.0, "note": "x"}],
            "scalar": 3.5,
        }
        assert "optional" not in record
        assert type(record["scalar"]) is float

    def test_plain_values_pass_through(self):
        assert to_record(4) == 4
        assert to_record("text") == "text"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
        configure_logging(force=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_explicit_level(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        configure_logging(logging.WARNING, force=True)
        assert logging.getLogger().level == logging.WARNING

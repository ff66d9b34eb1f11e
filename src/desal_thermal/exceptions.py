"""Error types and the validation result shared by the calculators.

Invalid input aborts a calculation with :class:`InputValidationError`. Design-quality
issues never raise; they are collected as strings on each result's ``warnings``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class DesalThermalError(Exception):
    """Base class for errors raised by desal_thermal."""


class InputValidationError(DesalThermalError, ValueError):
    """One or more blocking input errors."""

    def __init__(self, errors: list[str] | tuple[str, ...], prefix: str = ""):
        self.errors = list(errors)
        super().__init__(f"{prefix}{'; '.join(self.errors)}")


class EmptyCatalogError(DesalThermalError, LookupError):
    """Pipe selection was asked to choose from an empty catalog."""


class PipeNotFoundError(DesalThermalError, KeyError):
    """A calculation needs a pipe size that the catalog does not contain."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class PropertyRangeError(DesalThermalError, ValueError):
    """Property lookup outside the supported physical domain."""


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self, prefix: str = "") -> None:
        if self.errors:
            raise InputValidationError(self.errors, prefix=prefix)


__all__ = [
    "DesalThermalError",
    "InputValidationError",
    "EmptyCatalogError",
    "PipeNotFoundError",
    "PropertyRangeError",
    "ValidationResult",
]

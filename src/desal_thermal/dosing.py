"""Chemical dosing for feed water treatment (antiscalant, acid, biocide)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from desal_thermal.exceptions import ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_DAYS = 7.0


class ChemicalType(str, Enum):
    ANTISCALANT = "ANTISCALANT"
    ACID = "ACID"
    BIOCIDE = "BIOCIDE"


# mg/L of active chemical in the feed
TYPICAL_DOSE_RANGES = {
    ChemicalType.ANTISCALANT: (1.0, 6.0),
    ChemicalType.ACID: (10.0, 150.0),
    ChemicalType.BIOCIDE: (0.5, 5.0),
}


@dataclass(frozen=True)
class DosingInput:
    chemical_type: ChemicalType
    feed_flow: float  # m³/h
    dose: float  # mg/L active
    product_concentration: float  # % active in the neat product
    product_density: float = 1.0  # kg/L
    storage_days: float = DEFAULT_STORAGE_DAYS


@dataclass(frozen=True)
class DosingResult:
    active_chemical: float  # kg/h
    product_mass_flow: float  # kg/h
    product_volume_flow: float  # L/h
    daily_product_mass: float  # kg/day
    daily_product_volume: float  # L/day
    storage_volume: float  # L
    warnings: tuple[str, ...] = field(default_factory=tuple)


def validate_dosing_input(inp: DosingInput) -> ValidationResult:
    errors = []
    if inp.feed_flow <= 0:
        errors.append("Feed flow must be positive")
    if inp.dose <= 0:
        errors.append("Dose must be positive")
    if inp.product_concentration <= 0:
        errors.append("Product concentration must be positive")
    elif inp.product_concentration > 100:
        errors.append("Product concentration cannot exceed 100%")
    if inp.product_density <= 0:
        errors.append("Product density must be positive")
    if inp.storage_days <= 0:
        errors.append("Storage days must be positive")
    return ValidationResult(errors=tuple(errors))


def calculate_dosing(inp: DosingInput) -> DosingResult:
    validate_dosing_input(inp).raise_for_errors()
    chemical = ChemicalType(inp.chemical_type)

    # mg/L * m³/h = g/h
    active = inp.dose * inp.feed_flow / 1000
    product = active / (inp.product_concentration / 100)
    volume = product / inp.product_density

    warnings = []
    low, high = TYPICAL_DOSE_RANGES[chemical]
    if not (low <= inp.dose <= high):
        warnings.append(
            f"{chemical.value.capitalize()} dose of {inp.dose} mg/L is outside the typical range "
            f"({low}-{high} mg/L)"
        )

    return DosingResult(
        active_chemical=active,
        product_mass_flow=product,
        product_volume_flow=volume,
        daily_product_mass=product * 24,
        daily_product_volume=volume * 24,
        storage_volume=volume * 24 * inp.storage_days,
        warnings=tuple(warnings),
    )


__all__ = [
    "ChemicalType",
    "TYPICAL_DOSE_RANGES",
    "DosingInput",
    "DosingResult",
    "validate_dosing_input",
    "calculate_dosing",
]

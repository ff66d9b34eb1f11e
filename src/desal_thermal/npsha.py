"""
npsha.py

Net positive suction head available for a pump drawing from a vessel:

    NPSHa = Hs + Hp - Hvp - Hf

Hs static head of liquid above the pump centerline, Hp head equivalent of the pressure on the
liquid surface, Hvp head equivalent of the liquid vapour pressure and Hf suction line friction,
all in m of the pumped liquid.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.units import ATM_PRESSURE_BAR, bar_to_head

logger = logging.getLogger(__name__)

DEEP_VACUUM_BAR = 0.1
HIGH_TEMPERATURE_C = 90.0
SIGNIFICANT_BPE = 0.1  # K
DEFAULT_LEVEL_SAFETY_MARGIN = 0.5  # m


class VesselType(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    VACUUM = "VACUUM"


class LiquidType(str, Enum):
    PURE_WATER = "PURE_WATER"
    SEAWATER = "SEAWATER"


@dataclass(frozen=True)
class NPSHaInput:
    vessel_type: VesselType
    liquid_temperature: float  # °C
    liquid_level_above_pump: float = 0.0  # m, negative for suction lift
    liquid_type: LiquidType = LiquidType.PURE_WATER
    salinity: float = 0.0  # ppm
    vessel_pressure: float | None = None  # bar abs, CLOSED and VACUUM
    atmospheric_pressure: float = ATM_PRESSURE_BAR  # bar abs, OPEN
    friction_loss: float = 0.0  # m


@dataclass(frozen=True)
class HeadComponent:
    component: str
    value: float
    sign: str


@dataclass(frozen=True)
class NPSHaResult:
    static_head: float
    pressure_head: float
    vapor_pressure: float  # bar abs
    vapor_pressure_head: float
    friction_loss: float
    npsh_available: float
    liquid_density: float
    boiling_point_elevation: float
    breakdown: tuple[HeadComponent, ...]
    recommendation: str
    warnings: tuple[str, ...] = field(default_factory=tuple)


def validate_npsha_input(inp: NPSHaInput) -> ValidationResult:
    errors = []
    vessel = VesselType(inp.vessel_type)
    if vessel is VesselType.OPEN:
        if inp.atmospheric_pressure <= 0:
            errors.append("Atmospheric pressure must be positive")
    elif inp.vessel_pressure is None:
        errors.append(f"Vessel pressure is required for {vessel.value} vessels")
    elif inp.vessel_pressure <= 0:
        errors.append("Vessel pressure must be positive")

    if not (0 <= inp.liquid_temperature < properties.CRITICAL_TEMPERATURE_C):
        errors.append(
            f"Liquid temperature must be between 0 and {properties.CRITICAL_TEMPERATURE_C} °C"
        )
    if LiquidType(inp.liquid_type) is LiquidType.SEAWATER and inp.salinity < 0:
        errors.append("Salinity cannot be negative")
    if inp.friction_loss < 0:
        errors.append("Friction loss cannot be negative")
    return ValidationResult(errors=tuple(errors))


def surface_pressure(inp: NPSHaInput) -> float:
    """Absolute pressure (bar) acting on the liquid surface."""
    vessel = VesselType(inp.vessel_type)
    if vessel is VesselType.OPEN:
        return inp.atmospheric_pressure
    if vessel in (VesselType.CLOSED, VesselType.VACUUM):
        return inp.vessel_pressure
    raise ValueError(f"Unknown vessel type {inp.vessel_type}")


def npsh_recommendation(npsha: float) -> str:
    if npsha < 0:
        return (
            f"CRITICAL: NPSHa is negative ({npsha:.2f} m). The pump will cavitate. "
            "Raise the liquid level, reduce suction losses or lower the liquid temperature."
        )
    if npsha < 1:
        return (
            f"WARNING: NPSHa is very low ({npsha:.2f} m). Few pumps can operate here; consider a "
            "vertical can pump or an inducer."
        )
    if npsha < 2:
        return (
            f"NPSHa is low ({npsha:.2f} m). Select a low-NPSHr pump and keep at least 0.5 m margin."
        )
    if npsha < 5:
        return (
            f"NPSHa is adequate ({npsha:.2f} m) for most centrifugal pumps. Confirm NPSHr with "
            "the pump vendor."
        )
    return f"NPSHa is excellent ({npsha:.2f} m). Standard centrifugal pumps are suitable."


def calculate_npsha(inp: NPSHaInput) -> NPSHaResult:
    validate_npsha_input(inp).raise_for_errors()

    liquid = LiquidType(inp.liquid_type)
    t = inp.liquid_temperature
    if liquid is LiquidType.SEAWATER:
        density = properties.seawater_density(inp.salinity, t)
        bpe = properties.boiling_point_elevation(inp.salinity, t)
    else:
        density = properties.density_liquid(t)
        bpe = 0.0

    # Salt lowers the vapour pressure: seawater at T boils like pure water at T - BPE
    vapor_pressure = properties.saturation_pressure(max(t - bpe, 0.0))
    pressure = surface_pressure(inp)

    static_head = inp.liquid_level_above_pump
    pressure_head = bar_to_head(pressure, density)
    vapor_pressure_head = bar_to_head(vapor_pressure, density)
    friction = inp.friction_loss
    npsha = static_head + pressure_head - vapor_pressure_head - friction

    breakdown = [
        HeadComponent("Static Head (Hs)", static_head, "+"),
        HeadComponent("Pressure Head (Hp)", pressure_head, "+"),
        HeadComponent("Vapor Pressure Head (Hvp)", vapor_pressure_head, "-"),
        HeadComponent("Friction Loss (Hf)", friction, "-"),
    ]
    if bpe > SIGNIFICANT_BPE:
        breakdown.append(HeadComponent("BPE Note", bpe, "info"))

    warnings = []
    if VesselType(inp.vessel_type) is not VesselType.OPEN and pressure < DEEP_VACUUM_BAR:
        warnings.append(
            f"Operating at deep vacuum ({pressure * 1000:.0f} mbar abs) - small level or pressure "
            "changes have a large effect on NPSHa"
        )
    if t > HIGH_TEMPERATURE_C:
        warnings.append(
            f"High temperature ({t:.1f}°C) - vapor pressure significantly reduces NPSHa"
        )
    if pressure < vapor_pressure:
        warnings.append("Surface pressure is below the liquid vapor pressure - liquid will boil")
    if static_head < 0:
        warnings.append(
            f"Liquid level is {abs(static_head):.2f} m below pump centerline (suction lift)"
        )
    if npsha < 0:
        warnings.append("NPSHa is negative - cavitation is certain")

    return NPSHaResult(
        static_head=static_head,
        pressure_head=pressure_head,
        vapor_pressure=vapor_pressure,
        vapor_pressure_head=vapor_pressure_head,
        friction_loss=friction,
        npsh_available=npsha,
        liquid_density=density,
        boiling_point_elevation=bpe,
        breakdown=tuple(breakdown),
        recommendation=npsh_recommendation(npsha),
        warnings=tuple(warnings),
    )


def calculate_minimum_liquid_level(
    npshr: float, inp: NPSHaInput, safety_margin: float = DEFAULT_LEVEL_SAFETY_MARGIN
) -> float:
    """Liquid level above the pump (m) giving NPSHa = NPSHr + safety margin."""
    base = calculate_npsha(dataclasses.replace(inp, liquid_level_above_pump=0.0))
    return npshr + safety_margin - base.npsh_available


__all__ = [
    "VesselType",
    "LiquidType",
    "NPSHaInput",
    "HeadComponent",
    "NPSHaResult",
    "validate_npsha_input",
    "surface_pressure",
    "npsh_recommendation",
    "calculate_npsha",
    "calculate_minimum_liquid_level",
]

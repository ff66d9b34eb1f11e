"""
desuperheating.py

Spray-water desuperheater energy balance:

    m_w = m_s (h_in - h_out) / (h_out - h_w)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.units import ton_hr_to_kg_s

logger = logging.getLogger(__name__)

DEFAULT_OUTLET_SUPERHEAT = 3.0  # K above saturation
MIN_OUTLET_SUPERHEAT = 2.0  # K


@dataclass(frozen=True)
class DesuperheatingInput:
    steam_pressure: float  # bar abs
    steam_temperature: float  # °C
    steam_flow: float  # ton/hr
    spray_water_temperature: float  # °C
    target_temperature: float | None = None  # °C, default Tsat + 3 K


@dataclass(frozen=True)
class DesuperheatingResult:
    saturation_temperature: float
    target_temperature: float
    inlet_superheat: float
    outlet_superheat: float
    steam_enthalpy: float
    outlet_enthalpy: float
    spray_water_enthalpy: float
    spray_water_flow: float  # ton/hr
    outlet_flow: float  # ton/hr
    heat_removed: float  # kW
    warnings: tuple[str, ...] = field(default_factory=tuple)


def _target(inp: DesuperheatingInput, t_sat: float) -> float:
    if inp.target_temperature is not None:
        return inp.target_temperature
    return t_sat + DEFAULT_OUTLET_SUPERHEAT


def validate_desuperheating_input(inp: DesuperheatingInput) -> ValidationResult:
    errors = []
    if inp.steam_pressure <= 0:
        errors.append("Steam pressure must be positive")
    if inp.steam_flow <= 0:
        errors.append("Steam flow must be positive")
    if errors:
        return ValidationResult(errors=tuple(errors))

    t_sat = properties.saturation_temperature(inp.steam_pressure)
    target = _target(inp, t_sat)
    if inp.steam_temperature <= t_sat:
        errors.append(
            f"Steam at {inp.steam_temperature}°C is not superheated at {inp.steam_pressure} bar "
            f"(saturation {t_sat:.1f}°C)"
        )
    if target >= inp.steam_temperature:
        errors.append(
            f"Target temperature ({target:.1f}°C) must be below steam inlet temperature "
            f"({inp.steam_temperature}°C)"
        )
    if target <= t_sat:
        errors.append(
            f"Target temperature ({target:.1f}°C) must be above saturation temperature "
            f"({t_sat:.1f}°C)"
        )
    if inp.spray_water_temperature >= target:
        errors.append("Spray water temperature must be below the target temperature")
    return ValidationResult(errors=tuple(errors))


def calculate_desuperheating(inp: DesuperheatingInput) -> DesuperheatingResult:
    validate_desuperheating_input(inp).raise_for_errors()

    t_sat = properties.saturation_temperature(inp.steam_pressure)
    target = _target(inp, t_sat)
    h_in = properties.enthalpy_superheated(inp.steam_pressure, inp.steam_temperature)
    h_out = properties.enthalpy_superheated(inp.steam_pressure, target)
    h_w = properties.enthalpy_liquid(inp.spray_water_temperature)

    spray = inp.steam_flow * (h_in - h_out) / (h_out - h_w)
    heat_removed = ton_hr_to_kg_s(inp.steam_flow) * (h_in - h_out)

    warnings = []
    outlet_superheat = target - t_sat
    if outlet_superheat < MIN_OUTLET_SUPERHEAT:
        warnings.append(
            f"Outlet superheat ({outlet_superheat:.1f} K) is below {MIN_OUTLET_SUPERHEAT:.0f} K "
            "- risk of wet steam downstream"
        )

    return DesuperheatingResult(
        saturation_temperature=t_sat,
        target_temperature=target,
        inlet_superheat=inp.steam_temperature - t_sat,
        outlet_superheat=outlet_superheat,
        steam_enthalpy=h_in,
        outlet_enthalpy=h_out,
        spray_water_enthalpy=h_w,
        spray_water_flow=spray,
        outlet_flow=inp.steam_flow + spray,
        heat_removed=heat_removed,
        warnings=tuple(warnings),
    )


__all__ = [
    "DesuperheatingInput",
    "DesuperheatingResult",
    "validate_desuperheating_input",
    "calculate_desuperheating",
]

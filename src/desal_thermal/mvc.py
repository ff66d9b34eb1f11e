"""
mvc.py

Mechanical vapour compressor: isentropic compression of (slightly superheated) vapour with an
isentropic and a mechanical efficiency.

    s(P_d, T_is) = s(P_s, T_s)                     -> bisection on entropy
    h_d = h_s + (h_is - h_s) / eta_is
    h(P_d, T_d) = h_d                              -> bisection on enthalpy
    W_is = m (h_is - h_s),  W_shaft = W_is / eta_is,  W_el = W_shaft / eta_mech
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.solvers import (
    BISECTION_MAX_ITERATIONS,
    ENTHALPY_TOLERANCE,
    ENTROPY_TOLERANCE,
    bisect,
)
from desal_thermal.units import ton_hr_to_kg_s

logger = logging.getLogger(__name__)

DEFAULT_ISENTROPIC_EFFICIENCY = 0.75
DEFAULT_MECHANICAL_EFFICIENCY = 0.95
DEFAULT_SUCTION_SUPERHEAT = 0.5  # K
DISCHARGE_SEARCH_SPAN = 300.0  # K above discharge saturation
MAX_COMPRESSION_RATIO = 3.0
TYPICAL_ISENTROPIC_EFFICIENCY = (0.6, 0.9)


@dataclass(frozen=True)
class MVCInput:
    suction_pressure: float  # bar abs
    discharge_pressure: float  # bar abs
    flow_rate: float  # ton/hr of vapour
    isentropic_efficiency: float = DEFAULT_ISENTROPIC_EFFICIENCY
    mechanical_efficiency: float = DEFAULT_MECHANICAL_EFFICIENCY
    suction_temperature: float | None = None  # °C, default Tsat + 0.5 K


@dataclass(frozen=True)
class MVCResult:
    compression_ratio: float
    suction_temperature: float
    suction_sat_temperature: float
    suction_enthalpy: float
    suction_entropy: float
    suction_specific_volume: float  # m³/kg
    volumetric_suction_flow: float  # m³/h
    isentropic_discharge_temperature: float
    isentropic_discharge_enthalpy: float
    discharge_temperature: float
    discharge_sat_temperature: float
    discharge_enthalpy: float
    discharge_superheat: float
    mass_flow_kg_s: float
    specific_work: float  # kJ/kg, actual
    isentropic_power: float  # kW
    shaft_power: float  # kW
    electrical_power: float  # kW
    isentropic_efficiency: float
    mechanical_efficiency: float
    warnings: tuple[str, ...] = field(default_factory=tuple)


def validate_mvc_input(inp: MVCInput) -> ValidationResult:
    errors = []
    if inp.suction_pressure <= 0:
        errors.append("Suction pressure must be positive")
    if inp.discharge_pressure <= 0:
        errors.append("Discharge pressure must be positive")
    if 0 < inp.discharge_pressure <= inp.suction_pressure:
        errors.append(
            f"Discharge pressure ({inp.discharge_pressure} bar) must be greater than "
            f"suction pressure ({inp.suction_pressure} bar)"
        )
    if inp.flow_rate <= 0:
        errors.append("Flow rate must be positive")
    if not (0 < inp.isentropic_efficiency <= 1):
        errors.append("Isentropic efficiency must be between 0 and 1")
    if not (0 < inp.mechanical_efficiency <= 1):
        errors.append("Mechanical efficiency must be between 0 and 1")
    if inp.suction_temperature is not None and inp.suction_pressure > 0 and not errors:
        t_sat = properties.saturation_temperature(inp.suction_pressure)
        if inp.suction_temperature <= t_sat:
            errors.append(
                f"Suction temperature ({inp.suction_temperature}°C) must be above saturation "
                f"temperature ({t_sat:.2f}°C) at {inp.suction_pressure} bar"
            )
    return ValidationResult(errors=tuple(errors))


def calculate_mvc(inp: MVCInput) -> MVCResult:
    validate_mvc_input(inp).raise_for_errors()

    p_s, p_d = inp.suction_pressure, inp.discharge_pressure
    t_sat_s = properties.saturation_temperature(p_s)
    if inp.suction_temperature is not None:
        t_s = inp.suction_temperature
    else:
        t_s = t_sat_s + DEFAULT_SUCTION_SUPERHEAT

    h_s = properties.enthalpy_superheated(p_s, t_s)
    s_s = properties.entropy_superheated(p_s, t_s)
    v_s = properties.specific_volume_superheated(p_s, t_s)

    t_sat_d = properties.saturation_temperature(p_d)
    lower, upper = t_sat_d, t_sat_d + DISCHARGE_SEARCH_SPAN

    isentropic = bisect(
        lambda t: properties.entropy_superheated(p_d, t),
        lower,
        upper,
        s_s,
        tolerance=ENTROPY_TOLERANCE,
        max_iterations=BISECTION_MAX_ITERATIONS,
    )
    h_is = properties.enthalpy_superheated(p_d, isentropic.value)
    h_d = h_s + (h_is - h_s) / inp.isentropic_efficiency

    actual = bisect(
        lambda t: properties.enthalpy_superheated(p_d, t),
        lower,
        upper,
        h_d,
        tolerance=ENTHALPY_TOLERANCE,
        max_iterations=BISECTION_MAX_ITERATIONS,
    )

    m = ton_hr_to_kg_s(inp.flow_rate)
    isentropic_power = m * (h_is - h_s)
    shaft_power = isentropic_power / inp.isentropic_efficiency
    electrical_power = shaft_power / inp.mechanical_efficiency

    compression_ratio = p_d / p_s
    warnings = []
    if compression_ratio > MAX_COMPRESSION_RATIO:
        warnings.append(
            f"Compression ratio {compression_ratio:.2f} exceeds {MAX_COMPRESSION_RATIO:.0f} "
            "- consider multi-stage compression"
        )
    eta_min, eta_max = TYPICAL_ISENTROPIC_EFFICIENCY
    if not (eta_min <= inp.isentropic_efficiency <= eta_max):
        warnings.append(
            f"Isentropic efficiency {inp.isentropic_efficiency:.2f} is outside the typical "
            f"range ({eta_min}-{eta_max})"
        )

    logger.debug(
        "MVC %.3f -> %.3f bar: T_d %.1f °C, shaft %.1f kW", p_s, p_d, actual.value, shaft_power
    )
    return MVCResult(
        compression_ratio=compression_ratio,
        suction_temperature=t_s,
        suction_sat_temperature=t_sat_s,
        suction_enthalpy=h_s,
        suction_entropy=s_s,
        suction_specific_volume=v_s,
        volumetric_suction_flow=m * v_s * 3600,
        isentropic_discharge_temperature=isentropic.value,
        isentropic_discharge_enthalpy=h_is,
        discharge_temperature=actual.value,
        discharge_sat_temperature=t_sat_d,
        discharge_enthalpy=h_d,
        discharge_superheat=actual.value - t_sat_d,
        mass_flow_kg_s=m,
        specific_work=h_d - h_s,
        isentropic_power=isentropic_power,
        shaft_power=shaft_power,
        electrical_power=electrical_power,
        isentropic_efficiency=inp.isentropic_efficiency,
        mechanical_efficiency=inp.mechanical_efficiency,
        warnings=tuple(warnings),
    )


__all__ = [
    "DEFAULT_ISENTROPIC_EFFICIENCY",
    "DEFAULT_MECHANICAL_EFFICIENCY",
    "MVCInput",
    "MVCResult",
    "validate_mvc_input",
    "calculate_mvc",
]

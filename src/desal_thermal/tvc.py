"""
tvc.py

Thermo vapour compressor (steam ejector), 1-D constant pressure mixing model (Huang et al. 1999).

    Ra,th = (h_m - h_d,sat) / (h_d,sat - h_e)
    eta   = eta_nozzle * eta_mixing * eta_diffuser * exp(-(CR - 1))
    Ra    = Ra,th * eta
    h_d   = (m_m h_m + m_e h_e) / (m_m + m_e)

Ra is entrained mass per unit motive mass; CR = P_discharge / P_suction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.solvers import ENTHALPY_TOLERANCE, bisect
from desal_thermal.units import ton_hr_to_kg_s

logger = logging.getLogger(__name__)

DEFAULT_NOZZLE_EFFICIENCY = 0.92
DEFAULT_MIXING_EFFICIENCY = 0.85
DEFAULT_DIFFUSER_EFFICIENCY = 0.78
MAX_SINGLE_STAGE_CR = 2.5
TYPICAL_MAX_CR = 2.2
LOW_ENTRAINMENT_RATIO = 0.1
HIGH_ENTRAINMENT_RATIO = 2.0
HIGH_DISCHARGE_SUPERHEAT = 20.0  # K
DISCHARGE_SEARCH_SPAN = 300.0  # K


@dataclass(frozen=True)
class TVCInput:
    motive_pressure: float  # bar abs
    suction_pressure: float  # bar abs
    discharge_pressure: float  # bar abs
    entrained_flow: float | None = None  # ton/hr
    motive_flow: float | None = None  # ton/hr
    motive_temperature: float | None = None  # °C, saturated when None
    nozzle_efficiency: float = DEFAULT_NOZZLE_EFFICIENCY
    mixing_efficiency: float = DEFAULT_MIXING_EFFICIENCY
    diffuser_efficiency: float = DEFAULT_DIFFUSER_EFFICIENCY


@dataclass(frozen=True)
class TVCResult:
    theoretical_entrainment_ratio: float
    entrainment_ratio: float
    ejector_efficiency: float
    nozzle_efficiency: float
    mixing_efficiency: float
    diffuser_efficiency: float
    compression_ratio: float
    expansion_ratio: float
    motive_flow: float  # ton/hr
    entrained_flow: float  # ton/hr
    discharge_flow: float  # ton/hr
    motive_enthalpy: float
    suction_enthalpy: float
    discharge_enthalpy: float
    discharge_temperature: float
    discharge_sat_temperature: float
    discharge_superheat: float
    motive_sat_temperature: float
    suction_sat_temperature: float
    warnings: tuple[str, ...] = field(default_factory=tuple)


def _has_flow(value: float | None) -> bool:
    return value is not None and value > 0


def validate_tvc_input(inp: TVCInput) -> ValidationResult:
    errors = []
    pressures = (inp.motive_pressure, inp.suction_pressure, inp.discharge_pressure)
    if any(p <= 0 for p in pressures):
        errors.append("All pressures must be positive")
    else:
        if inp.motive_pressure <= inp.discharge_pressure:
            errors.append(
                f"Motive pressure ({inp.motive_pressure} bar) must be greater than discharge "
                f"pressure ({inp.discharge_pressure} bar)"
            )
        if inp.discharge_pressure <= inp.suction_pressure:
            errors.append(
                f"Discharge pressure ({inp.discharge_pressure} bar) must be greater than suction "
                f"pressure ({inp.suction_pressure} bar)"
            )
        else:
            cr = inp.discharge_pressure / inp.suction_pressure
            if cr > MAX_SINGLE_STAGE_CR:
                errors.append(
                    f"Compression ratio {cr:.2f} exceeds single-stage limit "
                    f"of {MAX_SINGLE_STAGE_CR}"
                )

    if not _has_flow(inp.entrained_flow) and not _has_flow(inp.motive_flow):
        errors.append("Specify either entrained flow or motive flow")

    for label, value in (
        ("Nozzle", inp.nozzle_efficiency),
        ("Mixing", inp.mixing_efficiency),
        ("Diffuser", inp.diffuser_efficiency),
    ):
        if not (0 < value <= 1):
            errors.append(f"{label} efficiency must be between 0 and 1")

    return ValidationResult(errors=tuple(errors))


def calculate_tvc(inp: TVCInput) -> TVCResult:
    validate_tvc_input(inp).raise_for_errors()

    t_sat_m = properties.saturation_temperature(inp.motive_pressure)
    t_sat_e = properties.saturation_temperature(inp.suction_pressure)
    t_sat_d = properties.saturation_temperature(inp.discharge_pressure)

    if inp.motive_temperature is not None and properties.is_superheated(
        inp.motive_pressure, inp.motive_temperature
    ):
        h_m = properties.enthalpy_superheated(inp.motive_pressure, inp.motive_temperature)
    else:
        h_m = properties.enthalpy_vapor(t_sat_m)
    h_e = properties.enthalpy_vapor(t_sat_e)
    h_d_sat = properties.enthalpy_vapor(t_sat_d)

    cr = inp.discharge_pressure / inp.suction_pressure
    er = inp.motive_pressure / inp.suction_pressure

    ra_theoretical = (h_m - h_d_sat) / (h_d_sat - h_e)
    efficiency = (
        inp.nozzle_efficiency
        * inp.mixing_efficiency
        * inp.diffuser_efficiency
        * float(np.exp(-(cr - 1)))
    )
    ra = ra_theoretical * efficiency

    if _has_flow(inp.entrained_flow):
        entrained = inp.entrained_flow
        motive = entrained / ra
    else:
        motive = inp.motive_flow
        entrained = motive * ra
    discharge = motive + entrained

    m_m = ton_hr_to_kg_s(motive)
    m_e = ton_hr_to_kg_s(entrained)
    h_d = (m_m * h_m + m_e * h_e) / (m_m + m_e)

    warnings = []
    if h_d <= h_d_sat:
        t_d = t_sat_d
        warnings.append("Discharge steam is wet at the discharge pressure")
    else:
        t_d = bisect(
            lambda t: properties.enthalpy_superheated(inp.discharge_pressure, t),
            t_sat_d,
            t_sat_d + DISCHARGE_SEARCH_SPAN,
            h_d,
            tolerance=ENTHALPY_TOLERANCE,
        ).value
    superheat = t_d - t_sat_d

    if cr > TYPICAL_MAX_CR:
        warnings.append(
            f"Compression ratio {cr:.2f} is above typical limit of {TYPICAL_MAX_CR} "
            "for single-stage TVC"
        )
    if ra < LOW_ENTRAINMENT_RATIO:
        warnings.append(f"Low entrainment ratio ({ra:.3f}) - consider higher motive pressure")
    elif ra > HIGH_ENTRAINMENT_RATIO:
        warnings.append(f"High entrainment ratio ({ra:.2f}) - verify against vendor data")
    if superheat > HIGH_DISCHARGE_SUPERHEAT:
        warnings.append(
            f"Discharge superheat of {superheat:.1f} K - desuperheating may be required"
        )

    return TVCResult(
        theoretical_entrainment_ratio=ra_theoretical,
        entrainment_ratio=ra,
        ejector_efficiency=efficiency,
        nozzle_efficiency=inp.nozzle_efficiency,
        mixing_efficiency=inp.mixing_efficiency,
        diffuser_efficiency=inp.diffuser_efficiency,
        compression_ratio=cr,
        expansion_ratio=er,
        motive_flow=motive,
        entrained_flow=entrained,
        discharge_flow=discharge,
        motive_enthalpy=h_m,
        suction_enthalpy=h_e,
        discharge_enthalpy=h_d,
        discharge_temperature=t_d,
        discharge_sat_temperature=t_sat_d,
        discharge_superheat=superheat,
        motive_sat_temperature=t_sat_m,
        suction_sat_temperature=t_sat_e,
        warnings=tuple(warnings),
    )


__all__ = [
    "DEFAULT_NOZZLE_EFFICIENCY",
    "DEFAULT_MIXING_EFFICIENCY",
    "DEFAULT_DIFFUSER_EFFICIENCY",
    "MAX_SINGLE_STAGE_CR",
    "TVCInput",
    "TVCResult",
    "validate_tvc_input",
    "calculate_tvc",
]

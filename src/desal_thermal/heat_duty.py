"""
heat_duty.py

Heat duties and log mean temperature difference for exchanger sizing.

    Sensible: Q = m cp ΔT        (cp at the mean temperature)
    Latent:   Q = m h_fg(T)
    Sizing:   Q = U A F LMTD

Heat duties in kW, mass flows in ton/hr, temperatures in °C, U in W/(m²·K).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from desal_thermal import properties
from desal_thermal.units import ton_hr_to_kg_s

logger = logging.getLogger(__name__)

STEAM_SPECIFIC_HEAT = 2.0  # kJ/(kg·K), superheated steam at low pressure
EQUAL_DELTA_T_TOLERANCE = 0.01  # K, below this the arithmetic mean replaces the log mean
LOW_LMTD_WARNING = 5.0  # K
CROSSFLOW_F_BOUNDS = (0.7, 1.0)


class HeatFluidType(str, Enum):
    PURE_WATER = "PURE_WATER"
    SEAWATER = "SEAWATER"
    STEAM = "STEAM"


class HeatProcess(str, Enum):
    EVAPORATION = "EVAPORATION"
    CONDENSATION = "CONDENSATION"


class FlowArrangement(str, Enum):
    COUNTER = "COUNTER"
    PARALLEL = "PARALLEL"
    CROSSFLOW = "CROSSFLOW"


@dataclass(frozen=True)
class HTCRange:
    min: float
    typical: float
    max: float


# Typical overall heat transfer coefficients, W/(m²·K)
TYPICAL_HTC = {
    "condensing_steam": HTCRange(2000.0, 5000.0, 10000.0),
    "steam_to_water": HTCRange(1500.0, 3000.0, 6000.0),
    "water_to_water": HTCRange(800.0, 1500.0, 2500.0),
    "seawater_to_water": HTCRange(700.0, 1200.0, 2000.0),
    "evaporating_seawater": HTCRange(1500.0, 2500.0, 4000.0),
    "oil_to_water": HTCRange(100.0, 300.0, 600.0),
    "air_to_water": HTCRange(10.0, 50.0, 100.0),
}


@dataclass(frozen=True)
class SensibleHeatInput:
    fluid_type: HeatFluidType
    mass_flow_rate: float  # ton/hr
    inlet_temperature: float
    outlet_temperature: float
    salinity: float = 0.0  # ppm, seawater only


@dataclass(frozen=True)
class SensibleHeatResult:
    mass_flow_kg_s: float
    delta_t: float
    is_heating: bool
    specific_heat: float  # kJ/(kg·K)
    heat_duty: float  # kW, always >= 0


@dataclass(frozen=True)
class LatentHeatInput:
    mass_flow_rate: float  # ton/hr
    temperature: float
    process: HeatProcess


@dataclass(frozen=True)
class LatentHeatResult:
    process: HeatProcess
    mass_flow_kg_s: float
    latent_heat: float  # kJ/kg
    heat_duty: float  # kW


@dataclass(frozen=True)
class LMTDInput:
    hot_inlet: float
    hot_outlet: float
    cold_inlet: float
    cold_outlet: float
    flow_arrangement: FlowArrangement = FlowArrangement.COUNTER


@dataclass(frozen=True)
class LMTDResult:
    delta_t1: float
    delta_t2: float
    lmtd: float
    correction_factor: float
    corrected_lmtd: float
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CombinedHeatResult:
    total_heat_duty: float
    sensible: SensibleHeatResult | None = None
    latent: LatentHeatResult | None = None


def _specific_heat(inp: SensibleHeatInput, mean_temp: float) -> float:
    fluid = HeatFluidType(inp.fluid_type)
    if fluid is HeatFluidType.STEAM:
        return STEAM_SPECIFIC_HEAT
    if fluid is HeatFluidType.SEAWATER:
        return properties.seawater_specific_heat(inp.salinity, mean_temp)
    if fluid is HeatFluidType.PURE_WATER:
        return properties.specific_heat_liquid(mean_temp)
    raise ValueError(f"Unknown fluid type {inp.fluid_type}")


def calculate_sensible_heat(inp: SensibleHeatInput) -> SensibleHeatResult:
    mass_flow = ton_hr_to_kg_s(inp.mass_flow_rate)
    delta = inp.outlet_temperature - inp.inlet_temperature
    mean_temp = 0.5 * (inp.inlet_temperature + inp.outlet_temperature)
    cp = _specific_heat(inp, mean_temp)
    return SensibleHeatResult(
        mass_flow_kg_s=mass_flow,
        delta_t=abs(delta),
        is_heating=delta > 0,
        specific_heat=cp,
        heat_duty=mass_flow * cp * abs(delta),
    )


def calculate_latent_heat(inp: LatentHeatInput) -> LatentHeatResult:
    process = HeatProcess(inp.process)
    mass_flow = ton_hr_to_kg_s(inp.mass_flow_rate)
    h_fg = properties.latent_heat(inp.temperature)
    return LatentHeatResult(
        process=process,
        mass_flow_kg_s=mass_flow,
        latent_heat=h_fg,
        heat_duty=mass_flow * h_fg,
    )


def crossflow_correction_factor(inp: LMTDInput) -> float:
    """
    LMTD correction factor F from the R-P relation (one shell pass, even tube passes),
    clamped to [0.7, 1.0].

        R = (Th,in - Th,out) / (Tc,out - Tc,in)
        P = (Tc,out - Tc,in) / (Th,in - Tc,in)
    """

    f_min, f_max = CROSSFLOW_F_BOUNDS
    cold_rise = inp.cold_outlet - inp.cold_inlet
    span = inp.hot_inlet - inp.cold_inlet
    if cold_rise <= 0 or span <= 0:
        return f_max
    r = (inp.hot_inlet - inp.hot_outlet) / cold_rise
    p = cold_rise / span

    s = np.sqrt(r**2 + 1)
    if abs(r - 1) < 1e-6:
        num = p * np.sqrt(2) / (1 - p) if p < 1 else np.nan
        arg = (2 - p * (2 - np.sqrt(2))) / (2 - p * (2 + np.sqrt(2)))
        factor = num / np.log(arg) if arg > 0 else np.nan
    else:
        ratio = (1 - p) / (1 - r * p)
        arg = (2 - p * (r + 1 - s)) / (2 - p * (r + 1 + s))
        if ratio <= 0 or arg <= 0 or arg == 1:
            factor = np.nan
        else:
            factor = s / (r - 1) * np.log(ratio) / np.log(arg)

    if not np.isfinite(factor):
        return f_min
    return float(min(max(factor, f_min), f_max))


def calculate_lmtd(inp: LMTDInput) -> LMTDResult:
    arrangement = FlowArrangement(inp.flow_arrangement)
    if arrangement is FlowArrangement.COUNTER:
        dt1 = inp.hot_inlet - inp.cold_outlet
        dt2 = inp.hot_outlet - inp.cold_inlet
    elif arrangement in (FlowArrangement.PARALLEL, FlowArrangement.CROSSFLOW):
        dt1 = inp.hot_inlet - inp.cold_inlet
        dt2 = inp.hot_outlet - inp.cold_outlet
    else:
        raise ValueError(f"Unknown flow arrangement {inp.flow_arrangement}")

    warnings = []
    if dt1 <= 0 or dt2 <= 0:
        warnings.append("Temperature cross detected - invalid heat exchanger configuration")
        return LMTDResult(dt1, dt2, 0.0, 1.0, 0.0, tuple(warnings))

    if abs(dt1 - dt2) < EQUAL_DELTA_T_TOLERANCE:
        lmtd = 0.5 * (dt1 + dt2)
    else:
        lmtd = (dt1 - dt2) / np.log(dt1 / dt2)
    lmtd = float(lmtd)

    correction = 1.0
    if arrangement is FlowArrangement.CROSSFLOW:
        correction = crossflow_correction_factor(inp)

    if lmtd < LOW_LMTD_WARNING:
        warnings.append("Very low LMTD may result in large heat exchanger")

    return LMTDResult(dt1, dt2, lmtd, correction, lmtd * correction, tuple(warnings))


def calculate_heat_duty_from_lmtd(overall_htc: float, area: float, lmtd: float) -> float:
    """Q (kW) = U (W/m²K) * A (m²) * LMTD (K) / 1000."""
    return overall_htc * area * lmtd / 1000


def calculate_required_area(heat_duty: float, overall_htc: float, lmtd: float) -> float:
    """A (m²) = Q (kW) * 1000 / (U LMTD)."""
    if overall_htc <= 0 or lmtd <= 0:
        raise ValueError("Overall HTC and LMTD must be positive to size an area")
    return heat_duty * 1000 / (overall_htc * lmtd)


def calculate_combined_heat(
    sensible: SensibleHeatInput | None = None, latent: LatentHeatInput | None = None
) -> CombinedHeatResult:
    sensible_result = calculate_sensible_heat(sensible) if sensible is not None else None
    latent_result = calculate_latent_heat(latent) if latent is not None else None
    total = (sensible_result.heat_duty if sensible_result else 0.0) + (
        latent_result.heat_duty if latent_result else 0.0
    )
    return CombinedHeatResult(total_heat_duty=total, sensible=sensible_result, latent=latent_result)


__all__ = [
    "STEAM_SPECIFIC_HEAT",
    "HeatFluidType",
    "HeatProcess",
    "FlowArrangement",
    "HTCRange",
    "TYPICAL_HTC",
    "SensibleHeatInput",
    "SensibleHeatResult",
    "LatentHeatInput",
    "LatentHeatResult",
    "LMTDInput",
    "LMTDResult",
    "CombinedHeatResult",
    "calculate_sensible_heat",
    "calculate_latent_heat",
    "crossflow_correction_factor",
    "calculate_lmtd",
    "calculate_heat_duty_from_lmtd",
    "calculate_required_area",
    "calculate_combined_heat",
]

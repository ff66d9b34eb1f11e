"""
properties.py

Property provider for water, steam and seawater.

Pure water and steam come from CoolProp (IAPWS formulation, reference state h = s = 0 for
saturated liquid at the triple point). Seawater density, viscosity, specific heat and
conductivity come from CoolProp's MIT seawater model (INCOMP::MITSW, Sharqawy et al. 2010).
Seawater enthalpy and boiling point elevation use the Sharqawy et al. (2010) correlations on
top of the IAPWS liquid enthalpy so that seawater and steam enthalpies share one reference.

Units: temperature °C, pressure bar abs, enthalpy kJ/kg, entropy kJ/(kg·K), density kg/m³,
viscosity Pa·s, conductivity W/(m·K), salinity ppm (mg/kg).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

import CoolProp.CoolProp as CP

from desal_thermal.exceptions import PropertyRangeError

logger = logging.getLogger(__name__)

KELVIN = 273.15
CRITICAL_TEMPERATURE_C = 373.946
CRITICAL_PRESSURE_BAR = 220.64
TRIPLE_POINT_PRESSURE_BAR = 0.00611657
TRIPLE_POINT_C = 0.01

SEAWATER_MAX_SALINITY_PPM = 120000.0
SEAWATER_T_RANGE_C = (0.0, 120.0)
# Pressure at which the incompressible seawater model is evaluated (Pa)
SEAWATER_REFERENCE_PRESSURE_PA = 101325.0

WATER_BACKEND_ENV = "DESAL_THERMAL_WATER_BACKEND"
SUPPORTED_WATER_BACKENDS = ("HEOS", "IF97")

_WATER_FLUID = "HEOS::Water"
_BACKEND_CONFIGURED = False

# Sharqawy et al. (2010) eq. 43, S in kg/kg, t in °C, result in J/kg
_SEAWATER_ENTHALPY_B = (
    -2.348e4,
    3.152e5,
    2.803e6,
    -1.446e7,
    7.826e3,
    -4.417e1,
    2.139e-1,
    -1.991e4,
    2.778e4,
    9.728e1,
)


def configure_property_backend(backend: str | None = None) -> str:
    """Select the CoolProp backend for pure water and steam.

    With no argument the backend is read from ``DESAL_THERMAL_WATER_BACKEND`` the first time
    and left alone afterwards; an explicit backend always reconfigures.
    Returns the CoolProp fluid string in use.
    """

    global _WATER_FLUID, _BACKEND_CONFIGURED
    if backend is None and _BACKEND_CONFIGURED:
        return _WATER_FLUID

    name = (backend or os.environ.get(WATER_BACKEND_ENV) or "HEOS").strip().upper()
    if name not in SUPPORTED_WATER_BACKENDS:
        raise ValueError(
            f"Unsupported water backend '{name}', expected one of {SUPPORTED_WATER_BACKENDS}"
        )

    fluid = f"{name}::Water"
    if fluid != _WATER_FLUID:
        _clear_caches()
    _WATER_FLUID = fluid
    _BACKEND_CONFIGURED = True
    logger.debug("Water/steam properties from CoolProp fluid %s", fluid)
    return _WATER_FLUID


def _water() -> str:
    if not _BACKEND_CONFIGURED:
        configure_property_backend()
    return _WATER_FLUID


def _check_pressure(pressure_bar: float) -> None:
    if pressure_bar <= 0:
        raise PropertyRangeError(f"Pressure must be positive (got {pressure_bar} bar)")
    if pressure_bar < TRIPLE_POINT_PRESSURE_BAR:
        raise PropertyRangeError(
            f"Pressure {pressure_bar} bar is below the triple point pressure "
            f"({TRIPLE_POINT_PRESSURE_BAR} bar)"
        )
    if pressure_bar >= CRITICAL_PRESSURE_BAR:
        raise PropertyRangeError(
            f"Pressure {pressure_bar} bar is above the critical pressure "
            f"({CRITICAL_PRESSURE_BAR} bar)"
        )


def _check_temperature(temp_c: float) -> None:
    if not (0.0 <= temp_c < CRITICAL_TEMPERATURE_C):
        raise PropertyRangeError(
            f"Temperature {temp_c} °C outside saturation range (0 to {CRITICAL_TEMPERATURE_C} °C)"
        )


def _check_seawater(salinity_ppm: float, temp_c: float) -> None:
    if not (0.0 <= salinity_ppm <= SEAWATER_MAX_SALINITY_PPM):
        raise PropertyRangeError(
            f"Salinity {salinity_ppm} ppm outside 0 to {SEAWATER_MAX_SALINITY_PPM:.0f} ppm"
        )
    t_min, t_max = SEAWATER_T_RANGE_C
    if not (t_min <= temp_c <= t_max):
        raise PropertyRangeError(
            f"Seawater temperature {temp_c} °C outside {t_min} to {t_max} °C"
        )


# ---------------------------------------------------------------------------
# Saturation properties (pure water)
# ---------------------------------------------------------------------------


@lru_cache(maxsize=4096)
def saturation_temperature(pressure_bar: float) -> float:
    """Saturation temperature (°C) at `pressure_bar`."""
    _check_pressure(pressure_bar)
    return CP.PropsSI("T", "P", pressure_bar * 1e5, "Q", 0, _water()) - KELVIN


@lru_cache(maxsize=4096)
def saturation_pressure(temp_c: float) -> float:
    """Saturation pressure (bar abs) at `temp_c`."""
    _check_temperature(temp_c)
    return CP.PropsSI("P", "T", max(temp_c, TRIPLE_POINT_C) + KELVIN, "Q", 0, _water()) / 1e5


def _saturated(output: str, temp_c: float, quality: int) -> float:
    _check_temperature(temp_c)
    return CP.PropsSI(output, "T", max(temp_c, TRIPLE_POINT_C) + KELVIN, "Q", quality, _water())


@lru_cache(maxsize=4096)
def enthalpy_liquid(temp_c: float) -> float:
    return _saturated("Hmass", temp_c, 0) / 1000.0


@lru_cache(maxsize=4096)
def enthalpy_vapor(temp_c: float) -> float:
    return _saturated("Hmass", temp_c, 1) / 1000.0


def latent_heat(temp_c: float) -> float:
    return enthalpy_vapor(temp_c) - enthalpy_liquid(temp_c)


@lru_cache(maxsize=4096)
def density_liquid(temp_c: float) -> float:
    return _saturated("Dmass", temp_c, 0)


@lru_cache(maxsize=4096)
def density_vapor(temp_c: float) -> float:
    return _saturated("Dmass", temp_c, 1)


def specific_volume_vapor(temp_c: float) -> float:
    return 1.0 / density_vapor(temp_c)


@lru_cache(maxsize=4096)
def viscosity_liquid(temp_c: float) -> float:
    return _saturated("V", temp_c, 0)


@lru_cache(maxsize=4096)
def thermal_conductivity_liquid(temp_c: float) -> float:
    return _saturated("L", temp_c, 0)


@lru_cache(maxsize=4096)
def specific_heat_liquid(temp_c: float) -> float:
    """Specific heat of saturated liquid water in kJ/(kg·K)."""
    return _saturated("Cpmass", temp_c, 0) / 1000.0


# ---------------------------------------------------------------------------
# Superheated steam
# ---------------------------------------------------------------------------


def is_superheated(pressure_bar: float, temp_c: float) -> bool:
    return temp_c > saturation_temperature(pressure_bar)


def _superheated(output: str, pressure_bar: float, temp_c: float) -> float:
    t_sat = saturation_temperature(pressure_bar)
    if temp_c <= t_sat:
        # At or below saturation the vapour branch ends at the saturated vapour state
        return CP.PropsSI(output, "P", pressure_bar * 1e5, "Q", 1, _water())
    return CP.PropsSI(output, "P", pressure_bar * 1e5, "T", temp_c + KELVIN, _water())


@lru_cache(maxsize=16384)
def enthalpy_superheated(pressure_bar: float, temp_c: float) -> float:
    return _superheated("Hmass", pressure_bar, temp_c) / 1000.0


@lru_cache(maxsize=16384)
def entropy_superheated(pressure_bar: float, temp_c: float) -> float:
    return _superheated("Smass", pressure_bar, temp_c) / 1000.0


@lru_cache(maxsize=4096)
def specific_volume_superheated(pressure_bar: float, temp_c: float) -> float:
    return 1.0 / _superheated("Dmass", pressure_bar, temp_c)


def density_superheated(pressure_bar: float, temp_c: float) -> float:
    return 1.0 / specific_volume_superheated(pressure_bar, temp_c)


# ---------------------------------------------------------------------------
# Seawater
# ---------------------------------------------------------------------------


def _mitsw(output: str, salinity_ppm: float, temp_c: float) -> float:
    fluid = f"INCOMP::MITSW[{salinity_ppm / 1e6}]"
    return CP.PropsSI(output, "T", temp_c + KELVIN, "P", SEAWATER_REFERENCE_PRESSURE_PA, fluid)


@lru_cache(maxsize=4096)
def seawater_density(salinity_ppm: float, temp_c: float) -> float:
    _check_seawater(salinity_ppm, temp_c)
    if salinity_ppm == 0:
        return density_liquid(temp_c)
    return _mitsw("Dmass", salinity_ppm, temp_c)


@lru_cache(maxsize=4096)
def seawater_viscosity(salinity_ppm: float, temp_c: float) -> float:
    """Dynamic viscosity (Pa·s); zero salinity returns pure water."""
    _check_seawater(salinity_ppm, temp_c)
    if salinity_ppm == 0:
        return viscosity_liquid(temp_c)
    return _mitsw("V", salinity_ppm, temp_c)


@lru_cache(maxsize=4096)
def seawater_specific_heat(salinity_ppm: float, temp_c: float) -> float:
    """Specific heat in kJ/(kg·K)."""
    _check_seawater(salinity_ppm, temp_c)
    if salinity_ppm == 0:
        return specific_heat_liquid(temp_c)
    return _mitsw("Cpmass", salinity_ppm, temp_c) / 1000.0


@lru_cache(maxsize=4096)
def seawater_thermal_conductivity(salinity_ppm: float, temp_c: float) -> float:
    _check_seawater(salinity_ppm, temp_c)
    if salinity_ppm == 0:
        return thermal_conductivity_liquid(temp_c)
    return _mitsw("L", salinity_ppm, temp_c)


@lru_cache(maxsize=4096)
def seawater_enthalpy(salinity_ppm: float, temp_c: float) -> float:
    """Specific enthalpy (kJ/kg) on the steam-table reference."""
    _check_seawater(salinity_ppm, temp_c)
    h_w = enthalpy_liquid(temp_c)
    if salinity_ppm == 0:
        return h_w
    s = salinity_ppm / 1e6
    t = temp_c
    b1, b2, b3, b4, b5, b6, b7, b8, b9, b10 = _SEAWATER_ENTHALPY_B
    correction = s * (
        b1
        + b2 * s
        + b3 * s**2
        + b4 * s**3
        + b5 * t
        + b6 * t**2
        + b7 * t**3
        + b8 * s * t
        + b9 * s**2 * t
        + b10 * s * t**2
    )
    return h_w - correction / 1000.0


def boiling_point_elevation(salinity_ppm: float, temp_c: float) -> float:
    """Boiling point elevation (K) of seawater, Sharqawy et al. (2010)."""
    if salinity_ppm <= 0:
        return 0.0
    if salinity_ppm > SEAWATER_MAX_SALINITY_PPM:
        raise PropertyRangeError(
            f"Salinity {salinity_ppm} ppm outside 0 to {SEAWATER_MAX_SALINITY_PPM:.0f} ppm"
        )
    s = salinity_ppm / 1e6
    a = -4.584e-4 * temp_c**2 + 2.823e-1 * temp_c + 17.95
    b = 1.536e-4 * temp_c**2 + 5.267e-2 * temp_c + 6.56
    return a * s**2 + b * s


def brine_salinity(inlet_salinity_ppm: float, feed_flow: float, vapor_flow: float) -> float:
    """Salt balance: all salt leaves with the brine (flows in any common unit)."""
    if feed_flow <= vapor_flow:
        raise PropertyRangeError("Vapour flow must be smaller than feed flow for a brine balance")
    return inlet_salinity_ppm * feed_flow / (feed_flow - vapor_flow)


def _clear_caches() -> None:
    for func in (
        saturation_temperature,
        saturation_pressure,
        enthalpy_liquid,
        enthalpy_vapor,
        density_liquid,
        density_vapor,
        viscosity_liquid,
        thermal_conductivity_liquid,
        specific_heat_liquid,
        enthalpy_superheated,
        entropy_superheated,
        specific_volume_superheated,
        seawater_density,
        seawater_viscosity,
        seawater_specific_heat,
        seawater_thermal_conductivity,
        seawater_enthalpy,
    ):
        func.cache_clear()


# ---------------------------------------------------------------------------
# State object
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    LIQUID = "liquid"
    SATURATED_LIQUID = "saturated_liquid"
    VAPOUR = "vapour"
    TWO_PHASE = "two_phase"


@dataclass(frozen=True)
class FluidState:
    """Temperature (°C), pressure (bar abs), salinity (ppm) and phase of a stream.

    Derived properties are evaluated on each access through the property functions.
    """

    temperature: float
    pressure: float
    salinity: float = 0.0
    phase: Phase = Phase.LIQUID

    def __post_init__(self):
        if self.phase in (Phase.SATURATED_LIQUID, Phase.VAPOUR):
            if self.temperature < self.saturation_temperature - 1e-6:
                raise PropertyRangeError(
                    f"{self.phase.value} at {self.temperature} °C is below the saturation "
                    f"temperature {self.saturation_temperature:.3f} °C at {self.pressure} bar"
                )

    @property
    def saturation_temperature(self) -> float:
        """Boiling temperature at the state pressure including BPE."""
        t_sat = saturation_temperature(self.pressure)
        return t_sat + boiling_point_elevation(self.salinity, t_sat)

    @property
    def superheat(self) -> float:
        return self.temperature - self.saturation_temperature

    @property
    def is_superheated(self) -> bool:
        return self.superheat > 0

    @property
    def density(self) -> float:
        if self.phase is Phase.VAPOUR:
            return density_superheated(self.pressure, self.temperature)
        return seawater_density(self.salinity, self.temperature)

    @property
    def viscosity(self) -> float:
        if self.phase is Phase.VAPOUR:
            return CP.PropsSI(
                "V", "P", self.pressure * 1e5, "T", self.temperature + KELVIN, _water()
            )
        return seawater_viscosity(self.salinity, self.temperature)

    @property
    def enthalpy(self) -> float:
        if self.phase is Phase.VAPOUR:
            return enthalpy_superheated(self.pressure, self.temperature)
        return seawater_enthalpy(self.salinity, self.temperature)

    @property
    def entropy(self) -> float:
        if self.phase is not Phase.VAPOUR:
            raise PropertyRangeError("Entropy is only provided for the vapour phase")
        return entropy_superheated(self.pressure, self.temperature)


__all__ = [
    "configure_property_backend",
    "saturation_temperature",
    "saturation_pressure",
    "enthalpy_liquid",
    "enthalpy_vapor",
    "latent_heat",
    "density_liquid",
    "density_vapor",
    "specific_volume_vapor",
    "viscosity_liquid",
    "thermal_conductivity_liquid",
    "specific_heat_liquid",
    "is_superheated",
    "enthalpy_superheated",
    "entropy_superheated",
    "specific_volume_superheated",
    "density_superheated",
    "seawater_density",
    "seawater_viscosity",
    "seawater_specific_heat",
    "seawater_thermal_conductivity",
    "seawater_enthalpy",
    "boiling_point_elevation",
    "brine_salinity",
    "Phase",
    "FluidState",
]

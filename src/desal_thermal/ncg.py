"""
ncg.py

Properties of non-condensable gas (NCG) + water vapour mixtures in vacuum systems.

NCG is treated as dry air (M = 28.97 g/mol) and the mixture as an ideal gas with the water
vapour at its saturation partial pressure (Dalton). Dissolved O2/N2 released from seawater
follow Weiss (1970), valid for 0-36 °C and 0-40 g/kg.

References:
    Weiss R.F. (1970), Deep-Sea Research 17, 721-735.
    Wilke C.R. (1950), J. Chem. Phys. 18(4), 517-519.
    Wassiljewa (1904) with Mason & Saxena (1958) for conductivity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from desal_thermal import properties

logger = logging.getLogger(__name__)

M_AIR = 28.97  # g/mol
M_H2O = 18.015  # g/mol
R_UNIVERSAL = 8.314  # J/(mol·K)
CP_AIR = 1.005  # kJ/(kg·K)
CP_VAPOR = 1.872  # kJ/(kg·K), low pressure steam
O2_MG_PER_ML_STP = 32.0 / 22.414
N2_MG_PER_ML_STP = 28.014 / 22.414
DEFAULT_SALINITY_GKG = 35.0
TEMPERATURE_RANGE_C = (0.0, 350.0)
WEISS_VALID_RANGE_C = (0.0, 36.0)
WEISS_CLAMP_RANGE_C = (0.0, 80.0)
_NEGLIGIBLE_FRACTION = 1e-9

WEISS_O2_A = (-173.4292, 249.6339, 143.3483, -21.8492)
WEISS_O2_B = (-0.033096, 0.014259, -0.0017)
WEISS_N2_A = (-172.4965, 248.4262, 143.0738, -21.712)
WEISS_N2_B = (-0.049781, 0.025018, -0.0034861)


class NCGInputMode(str, Enum):
    SEAWATER = "seawater"
    DRY_NCG = "dry_ncg"
    WET_NCG = "wet_ncg"
    SPLIT_FLOWS = "split_flows"


@dataclass(frozen=True)
class NCGInput:
    """Mixture conditions and the flow basis for one of the four input modes.

    With ``use_sat_pressure`` the given ``pressure_bar`` is the NCG partial pressure on top of
    P_sat(T); otherwise it is the total pressure. Split-flow mode derives the pressure from the
    two mass flows instead.
    """

    mode: NCGInputMode
    temperature_c: float
    pressure_bar: float | None = None
    use_sat_pressure: bool | None = None
    seawater_flow_m3h: float | None = None
    seawater_temp_c: float | None = None
    salinity_gkg: float | None = None
    dry_ncg_flow_kgh: float | None = None
    wet_ncg_flow_kgh: float | None = None
    vapour_flow_kgh: float | None = None


@dataclass(frozen=True)
class SeawaterGasContent:
    gas_temp_c: float
    salinity_gkg: float
    o2_ml_l: float
    n2_ml_l: float
    o2_mg_l: float
    n2_mg_l: float
    total_gas_mg_l: float
    extrapolated: bool


@dataclass(frozen=True)
class NCGResult:
    temperature_c: float
    total_pressure_bar: float
    sat_pressure_bar: float
    ncg_partial_pressure_bar: float
    water_vapour_partial_pressure_bar: float
    water_vapour_mole_frac: float
    ncg_mole_frac: float
    water_vapour_mass_frac: float
    ncg_mass_frac: float
    mix_molar_mass: float  # g/mol
    density: float  # kg/m³
    specific_volume: float  # m³/kg
    specific_enthalpy: float  # kJ/kg, dry air at 0 °C and liquid water at 0.01 °C
    vapor_enthalpy: float
    air_enthalpy: float
    cp_mix: float
    cv_mix: float
    gamma_mix: float
    dynamic_viscosity: float  # Pa·s
    thermal_conductivity: float  # W/(m·K)
    dry_ncg_flow_kgh: float | None = None
    water_vapour_flow_kgh: float | None = None
    total_flow_kgh: float | None = None
    volumetric_flow_m3h: float | None = None
    seawater_info: SeawaterGasContent | None = None


def weiss_concentration(a, b, temp_c: float, salinity_gkg: float) -> float:
    """Dissolved gas at air saturation, mL(STP)/L.

    ln C = A1 + A2/t + A3 ln t + A4 t + S (B1 + B2 t + B3 t²), t = T[K]/100
    """
    t = (temp_c + 273.15) / 100
    ln_c = a[0] + a[1] / t + a[2] * np.log(t) + a[3] * t
    ln_c += salinity_gkg * (b[0] + b[1] * t + b[2] * t**2)
    return float(np.exp(ln_c))


def air_viscosity(temp_k: float) -> float:
    """Sutherland's law, Pa·s."""
    return 1.458e-6 * temp_k**1.5 / (temp_k + 110.4)


def steam_viscosity(temp_k: float) -> float:
    """Low pressure water vapour, linear fit to NIST data for 0-300 °C, Pa·s."""
    return (0.407 * (temp_k - 273.15) + 80.4) * 1e-7


def air_conductivity(temp_c: float) -> float:
    return 0.02442 + 7.18e-5 * temp_c


def steam_conductivity(temp_c: float) -> float:
    return 0.01601 + 9.7e-5 * temp_c


def _wilke_phi(mu_i: float, mu_j: float, m_i: float, m_j: float) -> float:
    numerator = (1 + np.sqrt(mu_i / mu_j) * (m_j / m_i) ** 0.25) ** 2
    return numerator / (np.sqrt(8) * np.sqrt(1 + m_i / m_j))


def wilke_viscosity(y1, y2, mu1, mu2, m1, m2) -> float:
    if y1 < _NEGLIGIBLE_FRACTION:
        return mu2
    if y2 < _NEGLIGIBLE_FRACTION:
        return mu1
    phi12 = _wilke_phi(mu1, mu2, m1, m2)
    phi21 = _wilke_phi(mu2, mu1, m2, m1)
    return y1 * mu1 / (y1 + y2 * phi12) + y2 * mu2 / (y2 + y1 * phi21)


def wassiljewa_conductivity(y1, y2, k1, k2, mu1, mu2, m1, m2) -> float:
    """Mason-Saxena form, same interaction parameters as Wilke."""
    if y1 < _NEGLIGIBLE_FRACTION:
        return k2
    if y2 < _NEGLIGIBLE_FRACTION:
        return k1
    phi12 = _wilke_phi(mu1, mu2, m1, m2)
    phi21 = _wilke_phi(mu2, mu1, m2, m1)
    return y1 * k1 / (y1 + y2 * phi12) + y2 * k2 / (y2 + y1 * phi21)


def dissolved_gas_content(
    temp_c: float, salinity_gkg: float = DEFAULT_SALINITY_GKG
) -> SeawaterGasContent:
    """Dissolved O2 and N2 at air saturation. Flagged as extrapolated outside 0-36 °C."""
    valid_min, valid_max = WEISS_VALID_RANGE_C
    clamp_min, clamp_max = WEISS_CLAMP_RANGE_C
    extrapolated = temp_c < valid_min or temp_c > valid_max
    t_calc = min(max(temp_c, clamp_min), clamp_max)

    o2_ml = weiss_concentration(WEISS_O2_A, WEISS_O2_B, t_calc, salinity_gkg)
    n2_ml = weiss_concentration(WEISS_N2_A, WEISS_N2_B, t_calc, salinity_gkg)
    o2_mg = o2_ml * O2_MG_PER_ML_STP
    n2_mg = n2_ml * N2_MG_PER_ML_STP
    return SeawaterGasContent(
        gas_temp_c=t_calc,
        salinity_gkg=salinity_gkg,
        o2_ml_l=o2_ml,
        n2_ml_l=n2_ml,
        o2_mg_l=o2_mg,
        n2_mg_l=n2_mg,
        total_gas_mg_l=o2_mg + n2_mg,
        extrapolated=extrapolated,
    )


def _composition(inp: NCGInput, p_sat: float) -> tuple[float, float, float, float, float]:
    """Total pressure, vapour and NCG mole fractions, vapour and NCG partial pressures."""
    mode = NCGInputMode(inp.mode)
    if mode is NCGInputMode.SPLIT_FLOWS:
        m_ncg = inp.dry_ncg_flow_kgh or 0.0
        m_vap = inp.vapour_flow_kgh
        if m_vap is None or m_vap <= 0:
            raise ValueError("Water vapour flow must be positive in NCG + Vapour split mode.")
        if m_ncg < 0:
            raise ValueError("NCG flow rate cannot be negative.")
        n_ncg = m_ncg / M_AIR
        n_h2o = m_vap / M_H2O
        y_water = n_h2o / (n_ncg + n_h2o)
        total = p_sat / y_water
        return total, y_water, 1 - y_water, p_sat, total - p_sat

    if inp.pressure_bar is None or inp.use_sat_pressure is None:
        raise ValueError("pressureBar and useSatPressure are required for this input mode.")
    if inp.pressure_bar <= 0:
        raise ValueError("Pressure must be positive.")

    total = p_sat + inp.pressure_bar if inp.use_sat_pressure else inp.pressure_bar
    if total < p_sat and not inp.use_sat_pressure:
        raise ValueError(
            f"Total pressure ({total:.4f} bar) is below the saturation pressure at "
            f"{inp.temperature_c} °C ({p_sat:.4f} bar). "
            "Either raise the pressure or lower the temperature."
        )
    vapour_pp = min(p_sat, total)
    ncg_pp = max(0.0, total - vapour_pp)
    return total, vapour_pp / total, ncg_pp / total, vapour_pp, ncg_pp


def calculate_ncg_properties(inp: NCGInput) -> NCGResult:
    t_min, t_max = TEMPERATURE_RANGE_C
    if not (t_min <= inp.temperature_c <= t_max):
        raise ValueError("Temperature must be between 0 and 350 °C.")

    mode = NCGInputMode(inp.mode)
    temp_c = inp.temperature_c
    temp_k = temp_c + 273.15
    p_sat = properties.saturation_pressure(temp_c)
    total, y_water, y_ncg, vapour_pp, ncg_pp = _composition(inp, p_sat)

    mix_molar_mass = y_water * M_H2O + y_ncg * M_AIR
    x_water = y_water * M_H2O / mix_molar_mass
    x_ncg = y_ncg * M_AIR / mix_molar_mass

    density = total * 1e5 * mix_molar_mass * 1e-3 / (R_UNIVERSAL * temp_k)
    specific_volume = 1 / density

    h_vapor = properties.enthalpy_vapor(temp_c)
    h_air = CP_AIR * temp_c
    cp_mix = x_water * CP_VAPOR + x_ncg * CP_AIR
    # R [J/(mol·K)] / M [g/mol] is kJ/(kg·K)
    cv_mix = x_water * (CP_VAPOR - R_UNIVERSAL / M_H2O) + x_ncg * (CP_AIR - R_UNIVERSAL / M_AIR)

    mu_air = air_viscosity(temp_k)
    mu_steam = steam_viscosity(temp_k)
    viscosity = wilke_viscosity(y_ncg, y_water, mu_air, mu_steam, M_AIR, M_H2O)
    conductivity = wassiljewa_conductivity(
        y_ncg,
        y_water,
        air_conductivity(temp_c),
        steam_conductivity(temp_c),
        mu_air,
        mu_steam,
        M_AIR,
        M_H2O,
    )

    def vapour_with(dry):
        return dry * (x_water / x_ncg) if y_ncg > _NEGLIGIBLE_FRACTION else 0.0

    dry = vapour = flow_total = None
    seawater_info = None
    if mode is NCGInputMode.SEAWATER and inp.seawater_flow_m3h:
        gas_temp = inp.seawater_temp_c if inp.seawater_temp_c is not None else temp_c
        salinity = inp.salinity_gkg if inp.salinity_gkg is not None else DEFAULT_SALINITY_GKG
        seawater_info = dissolved_gas_content(gas_temp, salinity)
        # mg/L * m³/h * 1000 L/m³ * 1e-6 kg/mg
        dry = seawater_info.total_gas_mg_l * inp.seawater_flow_m3h * 1e-3
        vapour = vapour_with(dry)
    elif mode is NCGInputMode.DRY_NCG and inp.dry_ncg_flow_kgh:
        dry = inp.dry_ncg_flow_kgh
        vapour = vapour_with(dry)
    elif mode is NCGInputMode.WET_NCG and inp.wet_ncg_flow_kgh:
        dry = inp.wet_ncg_flow_kgh * x_ncg
        vapour = inp.wet_ncg_flow_kgh * x_water
    elif mode is NCGInputMode.SPLIT_FLOWS:
        dry = inp.dry_ncg_flow_kgh or 0.0
        vapour = inp.vapour_flow_kgh

    if dry is not None:
        flow_total = inp.wet_ncg_flow_kgh if mode is NCGInputMode.WET_NCG else dry + vapour

    return NCGResult(
        temperature_c=temp_c,
        total_pressure_bar=total,
        sat_pressure_bar=p_sat,
        ncg_partial_pressure_bar=ncg_pp,
        water_vapour_partial_pressure_bar=vapour_pp,
        water_vapour_mole_frac=y_water,
        ncg_mole_frac=y_ncg,
        water_vapour_mass_frac=x_water,
        ncg_mass_frac=x_ncg,
        mix_molar_mass=mix_molar_mass,
        density=density,
        specific_volume=specific_volume,
        specific_enthalpy=x_water * h_vapor + x_ncg * h_air,
        vapor_enthalpy=h_vapor,
        air_enthalpy=h_air,
        cp_mix=cp_mix,
        cv_mix=cv_mix,
        gamma_mix=cp_mix / cv_mix,
        dynamic_viscosity=viscosity,
        thermal_conductivity=conductivity,
        dry_ncg_flow_kgh=dry,
        water_vapour_flow_kgh=vapour,
        total_flow_kgh=flow_total,
        volumetric_flow_m3h=flow_total * specific_volume if flow_total is not None else None,
        seawater_info=seawater_info,
    )


__all__ = [
    "M_AIR",
    "M_H2O",
    "NCGInputMode",
    "NCGInput",
    "SeawaterGasContent",
    "NCGResult",
    "weiss_concentration",
    "air_viscosity",
    "steam_viscosity",
    "air_conductivity",
    "steam_conductivity",
    "wilke_viscosity",
    "wassiljewa_conductivity",
    "dissolved_gas_content",
    "calculate_ncg_properties",
]

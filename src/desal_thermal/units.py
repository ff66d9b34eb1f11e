"""
units.py

Flow, pressure and head conversions used across the calculators.
Internal units: mass flow ton/hr, pressure bar abs, head m of liquid, temperature degC.
"""

from __future__ import annotations

from enum import Enum

GRAVITY = 9.81  # m/s²
ATM_PRESSURE_BAR = 1.01325
ATM_MBAR = 1013.25

# 10.33 m of water column = 1 atm (water at 4 °C, standard gravity)
WATER_HEAD_PER_ATM = 10.33


class FlowRateUnit(str, Enum):
    TON_HR = "TON_HR"
    KG_SEC = "KG_SEC"
    KG_HR = "KG_HR"


FLOW_RATE_TO_TON_HR = {
    FlowRateUnit.TON_HR: 1.0,
    FlowRateUnit.KG_SEC: 3.6,
    FlowRateUnit.KG_HR: 0.001,
}


class PressureUnit(str, Enum):
    MBAR_ABS = "mbar_abs"
    BAR_ABS = "bar_abs"
    KPA_ABS = "kpa_abs"


def to_ton_hr(value: float, unit: FlowRateUnit | str) -> float:
    return value * FLOW_RATE_TO_TON_HR[FlowRateUnit(unit)]


def pressure_to_bar(value: float, unit: PressureUnit | str) -> float:
    unit = PressureUnit(unit)
    if unit is PressureUnit.MBAR_ABS:
        return mbar_to_bar(value)
    if unit is PressureUnit.KPA_ABS:
        return kpa_to_bar(value)
    return value


def ton_hr_to_kg_s(flow_ton_hr: float) -> float:
    return flow_ton_hr * 1000.0 / 3600.0


def kg_s_to_ton_hr(flow_kg_s: float) -> float:
    return flow_kg_s * 3600.0 / 1000.0


def kg_hr_to_ton_hr(flow_kg_hr: float) -> float:
    return flow_kg_hr / 1000.0


def ton_hr_to_m3_s(flow_ton_hr: float, density: float) -> float:
    """Mass flow (ton/hr) to volumetric flow (m³/s) at `density` (kg/m³)."""
    return ton_hr_to_kg_s(flow_ton_hr) / density


def m3_s_to_ton_hr(flow_m3_s: float, density: float) -> float:
    return kg_s_to_ton_hr(flow_m3_s * density)


def bar_to_head(pressure_bar: float, density: float) -> float:
    """Pressure (bar) to liquid column height (m): h = P / (rho g)."""
    return pressure_bar * 1e5 / (density * GRAVITY)


def head_to_bar(head_m: float, density: float) -> float:
    """Liquid column height (m) to pressure (bar): P = h rho g / 1e5."""
    return head_m * density * GRAVITY / 1e5


# Pressure-drop results are quoted in "m H2O" of the flowing liquid
m_h2o_to_bar = head_to_bar
bar_to_m_h2o = bar_to_head


def bar_to_water_head(pressure_bar: float) -> float:
    """Density-free conversion used for water columns in vacuum vessels."""
    return pressure_bar / ATM_PRESSURE_BAR * WATER_HEAD_PER_ATM


def water_head_to_bar(head_m: float) -> float:
    return head_m / WATER_HEAD_PER_ATM * ATM_PRESSURE_BAR


def mbar_to_bar(pressure_mbar: float) -> float:
    return pressure_mbar / 1000.0


def bar_to_mbar(pressure_bar: float) -> float:
    return pressure_bar * 1000.0


def kpa_to_bar(pressure_kpa: float) -> float:
    return pressure_kpa / 100.0


def bar_to_kpa(pressure_bar: float) -> float:
    return pressure_bar * 100.0


__all__ = [
    "GRAVITY",
    "ATM_PRESSURE_BAR",
    "ATM_MBAR",
    "FlowRateUnit",
    "PressureUnit",
    "to_ton_hr",
    "pressure_to_bar",
    "ton_hr_to_kg_s",
    "kg_s_to_ton_hr",
    "kg_hr_to_ton_hr",
    "ton_hr_to_m3_s",
    "m3_s_to_ton_hr",
    "bar_to_head",
    "head_to_bar",
    "m_h2o_to_bar",
    "bar_to_m_h2o",
    "bar_to_water_head",
    "water_head_to_bar",
    "mbar_to_bar",
    "bar_to_mbar",
    "kpa_to_bar",
    "bar_to_kpa",
]

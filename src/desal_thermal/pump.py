"""
pump.py

Total differential head and power for a centrifugal pump.

    TDH = Hs + (Hp,d - Hp,s) + Hf,d + Hf,s
    P_hyd = rho g Q TDH,  P_brake = P_hyd / eta_pump,  P_motor = P_brake / eta_motor
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field

from desal_thermal.exceptions import ValidationResult
from desal_thermal.units import GRAVITY, bar_to_head, ton_hr_to_m3_s

logger = logging.getLogger(__name__)

DEFAULT_PUMP_EFFICIENCY = 0.70
DEFAULT_MOTOR_EFFICIENCY = 0.95

# IEC 60034 standard motor ratings, kW
IEC_MOTOR_SIZES = (
    0.37, 0.55, 0.75, 1.1, 1.5, 2.2, 3.0, 4.0, 5.5, 7.5, 11.0, 15.0, 18.5, 22.0, 30.0, 37.0,
    45.0, 55.0, 75.0, 90.0, 110.0, 132.0, 160.0, 200.0, 250.0, 315.0, 355.0, 400.0, 450.0, 500.0,
)  # fmt: skip


@dataclass(frozen=True)
class PumpInput:
    flow_rate: float  # ton/hr
    fluid_density: float  # kg/m³
    static_head: float  # m, discharge level minus suction level
    suction_pressure: float  # bar abs on the suction vessel
    discharge_pressure: float  # bar abs on the discharge vessel
    suction_friction_head: float = 0.0  # m
    discharge_friction_head: float = 0.0  # m
    pump_efficiency: float = DEFAULT_PUMP_EFFICIENCY
    motor_efficiency: float = DEFAULT_MOTOR_EFFICIENCY


@dataclass(frozen=True)
class PumpResult:
    volumetric_flow: float  # m³/h
    static_head: float
    pressure_head: float
    suction_pressure_head: float
    discharge_pressure_head: float
    friction_head: float
    total_differential_head: float
    hydraulic_power: float  # kW
    brake_power: float  # kW
    motor_power: float  # kW
    recommended_motor_size: float  # kW
    warnings: tuple[str, ...] = field(default_factory=tuple)


def select_motor_size(required_kw: float) -> float:
    """Smallest IEC rating >= `required_kw`; the largest rating when none is big enough."""
    index = bisect.bisect_left(IEC_MOTOR_SIZES, required_kw)
    if index >= len(IEC_MOTOR_SIZES):
        return IEC_MOTOR_SIZES[-1]
    return IEC_MOTOR_SIZES[index]


def validate_pump_input(inp: PumpInput) -> ValidationResult:
    errors = []
    if inp.flow_rate <= 0:
        errors.append("Flow rate must be positive")
    if inp.fluid_density <= 0:
        errors.append("Fluid density must be positive")
    if inp.suction_pressure <= 0 or inp.discharge_pressure <= 0:
        errors.append("Suction and discharge pressures must be positive (bar abs)")
    if inp.suction_friction_head < 0 or inp.discharge_friction_head < 0:
        errors.append("Friction heads cannot be negative")
    if not (0 < inp.pump_efficiency <= 1):
        errors.append("Pump efficiency must be between 0 and 1")
    if not (0 < inp.motor_efficiency <= 1):
        errors.append("Motor efficiency must be between 0 and 1")
    return ValidationResult(errors=tuple(errors))


def calculate_pump(inp: PumpInput) -> PumpResult:
    validate_pump_input(inp).raise_for_errors()

    suction_head = bar_to_head(inp.suction_pressure, inp.fluid_density)
    discharge_head = bar_to_head(inp.discharge_pressure, inp.fluid_density)
    pressure_head = discharge_head - suction_head
    friction_head = inp.suction_friction_head + inp.discharge_friction_head
    tdh = inp.static_head + pressure_head + friction_head

    warnings = []
    if tdh < 0:
        warnings.append(f"Negative TDH ({tdh:.2f} m) - gravity flow may suffice without a pump")

    q = ton_hr_to_m3_s(inp.flow_rate, inp.fluid_density)
    hydraulic = inp.fluid_density * GRAVITY * q * max(tdh, 0.0) / 1000
    brake = hydraulic / inp.pump_efficiency
    motor = brake / inp.motor_efficiency
    motor_size = select_motor_size(motor)
    if motor > IEC_MOTOR_SIZES[-1]:
        warnings.append(
            f"Required motor power ({motor:.0f} kW) exceeds the largest standard size "
            f"({IEC_MOTOR_SIZES[-1]:.0f} kW)"
        )

    return PumpResult(
        volumetric_flow=q * 3600,
        static_head=inp.static_head,
        pressure_head=pressure_head,
        suction_pressure_head=suction_head,
        discharge_pressure_head=discharge_head,
        friction_head=friction_head,
        total_differential_head=tdh,
        hydraulic_power=hydraulic,
        brake_power=brake,
        motor_power=motor,
        recommended_motor_size=motor_size,
        warnings=tuple(warnings),
    )


__all__ = [
    "DEFAULT_PUMP_EFFICIENCY",
    "DEFAULT_MOTOR_EFFICIENCY",
    "IEC_MOTOR_SIZES",
    "PumpInput",
    "PumpResult",
    "select_motor_size",
    "validate_pump_input",
    "calculate_pump",
]

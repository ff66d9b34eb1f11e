"""
pressure_drop.py

Darcy-Weisbach pressure drop for a straight pipe run with fittings and an elevation change.

Friction factor (Darcy):
    Re <= 2300        laminar, f = 64/Re
    2300 < Re < 4000  linear blend between 64/2300 and the turbulent value at Re = 4000
    Re >= 4000        Swamee-Jain explicit form of Colebrook-White
Fitting K factors from Crane TP-410.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from desal_thermal.exceptions import PipeNotFoundError
from desal_thermal.pipes import PipeVariant, get_pipe_by_nps
from desal_thermal.units import GRAVITY, m_h2o_to_bar, ton_hr_to_m3_s

logger = logging.getLogger(__name__)

RE_LAMINAR_LIMIT = 2300.0
RE_TURBULENT_LIMIT = 4000.0
DEFAULT_ROUGHNESS_MM = 0.045  # commercial steel
LOW_VELOCITY_WARNING = 0.3  # m/s
HIGH_VELOCITY_WARNING = 5.0  # m/s
ECCENTRIC_MULTIPLIER = 1.2


class FlowRegime(str, Enum):
    LAMINAR = "laminar"
    TRANSITIONAL = "transitional"
    TURBULENT = "turbulent"


class FittingType(str, Enum):
    ELBOW_90_STANDARD = "90_elbow_standard"
    ELBOW_90_LONG_RADIUS = "90_elbow_long_radius"
    ELBOW_45 = "45_elbow"
    TEE_THROUGH = "tee_through"
    TEE_BRANCH = "tee_branch"
    GATE_VALVE = "gate_valve"
    GLOBE_VALVE = "globe_valve"
    BALL_VALVE = "ball_valve"
    CHECK_VALVE_SWING = "check_valve_swing"
    CHECK_VALVE_LIFT = "check_valve_lift"
    BUTTERFLY_VALVE = "butterfly_valve"
    REDUCER_SUDDEN = "reducer_sudden"
    EXPANDER_SUDDEN = "expander_sudden"
    ENTRANCE_SHARP = "entrance_sharp"
    ENTRANCE_ROUNDED = "entrance_rounded"
    EXIT = "exit"
    STRAINER_Y_CLEAN = "strainer_y_clean"
    STRAINER_Y_DIRTY = "strainer_y_dirty"
    STRAINER_BUCKET_CLEAN = "strainer_bucket_clean"
    STRAINER_BUCKET_DIRTY = "strainer_bucket_dirty"


K_FACTORS = {
    FittingType.ELBOW_90_STANDARD: 0.75,
    FittingType.ELBOW_90_LONG_RADIUS: 0.45,
    FittingType.ELBOW_45: 0.35,
    FittingType.TEE_THROUGH: 0.4,
    FittingType.TEE_BRANCH: 1.5,
    FittingType.GATE_VALVE: 0.17,
    FittingType.GLOBE_VALVE: 6.0,
    FittingType.BALL_VALVE: 0.05,
    FittingType.CHECK_VALVE_SWING: 2.0,
    FittingType.CHECK_VALVE_LIFT: 10.0,
    FittingType.BUTTERFLY_VALVE: 0.3,
    FittingType.REDUCER_SUDDEN: 0.5,
    FittingType.EXPANDER_SUDDEN: 1.0,
    FittingType.ENTRANCE_SHARP: 0.5,
    FittingType.ENTRANCE_ROUNDED: 0.04,
    FittingType.EXIT: 1.0,
    FittingType.STRAINER_Y_CLEAN: 2.0,
    FittingType.STRAINER_Y_DIRTY: 8.0,
    FittingType.STRAINER_BUCKET_CLEAN: 4.0,
    FittingType.STRAINER_BUCKET_DIRTY: 12.0,
}

FITTING_NAMES = {
    FittingType.ELBOW_90_STANDARD: "90° Elbow (Standard)",
    FittingType.ELBOW_90_LONG_RADIUS: "90° Elbow (Long Radius)",
    FittingType.ELBOW_45: "45° Elbow",
    FittingType.TEE_THROUGH: "Tee (Flow Through)",
    FittingType.TEE_BRANCH: "Tee (Flow to Branch)",
    FittingType.GATE_VALVE: "Gate Valve (Open)",
    FittingType.GLOBE_VALVE: "Globe Valve (Open)",
    FittingType.BALL_VALVE: "Ball Valve (Open)",
    FittingType.CHECK_VALVE_SWING: "Check Valve (Swing)",
    FittingType.CHECK_VALVE_LIFT: "Check Valve (Lift)",
    FittingType.BUTTERFLY_VALVE: "Butterfly Valve (Open)",
    FittingType.REDUCER_SUDDEN: "Sudden Contraction",
    FittingType.EXPANDER_SUDDEN: "Sudden Expansion",
    FittingType.ENTRANCE_SHARP: "Pipe Entrance (Sharp)",
    FittingType.ENTRANCE_ROUNDED: "Pipe Entrance (Rounded)",
    FittingType.EXIT: "Pipe Exit",
    FittingType.STRAINER_Y_CLEAN: "Y-Strainer (Clean)",
    FittingType.STRAINER_Y_DIRTY: "Y-Strainer (Dirty)",
    FittingType.STRAINER_BUCKET_CLEAN: "Bucket Strainer (Clean)",
    FittingType.STRAINER_BUCKET_DIRTY: "Bucket Strainer (Dirty)",
}


@dataclass(frozen=True)
class FittingSpec:
    type: FittingType
    count: int = 1


@dataclass(frozen=True)
class FittingLoss:
    type: FittingType
    count: int
    k_factor: float
    loss: float  # m of liquid
    name: str = ""


@dataclass(frozen=True)
class PressureDropInput:
    pipe_nps: str
    flow_rate: float  # ton/hr
    fluid_density: float  # kg/m³
    fluid_viscosity: float  # Pa·s
    pipe_length: float  # m
    fittings: tuple[FittingSpec, ...] = ()
    elevation_change: float = 0.0  # m, positive upward
    roughness_mm: float = DEFAULT_ROUGHNESS_MM


@dataclass(frozen=True)
class PressureDropResult:
    velocity: float
    reynolds_number: float
    flow_regime: FlowRegime
    friction_factor: float
    straight_pipe_loss: float
    fittings_loss: float
    fittings_breakdown: tuple[FittingLoss, ...]
    total_k_factor: float
    equivalent_length: float
    elevation_head: float
    total_pressure_drop_mh2o: float
    total_pressure_drop_bar: float
    total_pressure_drop_mbar: float
    total_pressure_drop_kpa: float
    pipe: PipeVariant
    fluid_density: float
    warnings: tuple[str, ...] = field(default_factory=tuple)


def reynolds_number(density: float, velocity: float, diameter: float, viscosity: float) -> float:
    return density * velocity * diameter / viscosity


def turbulent_friction_factor(reynolds: float, relative_roughness: float) -> float:
    """Swamee-Jain (valid for 5e3 < Re < 1e8, 1e-6 < e/D < 1e-2)."""
    return 0.25 / np.log10(relative_roughness / 3.7 + 5.74 / reynolds**0.9) ** 2


def friction_factor(reynolds: float, relative_roughness: float) -> float:
    """Darcy friction factor with laminar, transitional and turbulent branches."""
    if reynolds <= 0:
        raise ValueError(f"Reynolds number must be positive (got {reynolds})")
    if reynolds <= RE_LAMINAR_LIMIT:
        return 64.0 / reynolds
    if reynolds < RE_TURBULENT_LIMIT:
        f_lam = 64.0 / RE_LAMINAR_LIMIT
        f_turb = turbulent_friction_factor(RE_TURBULENT_LIMIT, relative_roughness)
        fraction = (reynolds - RE_LAMINAR_LIMIT) / (RE_TURBULENT_LIMIT - RE_LAMINAR_LIMIT)
        return f_lam + fraction * (f_turb - f_lam)
    return turbulent_friction_factor(reynolds, relative_roughness)


def flow_regime(reynolds: float) -> FlowRegime:
    if reynolds <= RE_LAMINAR_LIMIT:
        return FlowRegime.LAMINAR
    if reynolds < RE_TURBULENT_LIMIT:
        return FlowRegime.TRANSITIONAL
    return FlowRegime.TURBULENT


def diameter_ratio(d_small_mm: float, d_large_mm: float) -> float:
    """β = d_small / d_large, capped at 1 when the "small" side is not smaller."""
    if d_small_mm <= 0 or d_large_mm <= 0:
        raise ValueError(f"Diameters must be positive (got {d_small_mm} and {d_large_mm} mm)")
    return min(d_small_mm / d_large_mm, 1.0)


def reducer_k(d_large_mm: float, d_small_mm: float, eccentric: bool = False) -> float:
    """Contraction K = 0.5 (1 - β²)², referenced to the smaller pipe velocity."""
    beta = diameter_ratio(d_small_mm, d_large_mm)
    k = 0.5 * (1 - beta**2) ** 2
    return k * ECCENTRIC_MULTIPLIER if eccentric else k


def expander_k(d_small_mm: float, d_large_mm: float, eccentric: bool = False) -> float:
    """Borda-Carnot expansion K = (1 - β²)², referenced to the smaller pipe velocity."""
    beta = diameter_ratio(d_small_mm, d_large_mm)
    k = (1 - beta**2) ** 2
    return k * ECCENTRIC_MULTIPLIER if eccentric else k


def calculate_pressure_drop(
    inp: PressureDropInput,
    pipes: Sequence[PipeVariant] | None = None,
    pipe: PipeVariant | None = None,
) -> PressureDropResult:
    """
    Pressure drop through a pipe run: h = f (L/D) v²/2g + ΣK v²/2g + Δz.

    Args:
        inp: Flow, fluid and geometry of the run
        pipes: Catalog used to look up ``inp.pipe_nps`` (schedule 40 by default)
        pipe: Explicit pipe (e.g. a custom plate-formed pipe); skips the catalog lookup

    Returns:
        PressureDropResult with losses in m of liquid and totals in m, bar, mbar and kPa.
    """

    if pipe is None:
        pipe = get_pipe_by_nps(inp.pipe_nps, pipes)
        if pipe is None:
            raise PipeNotFoundError(f"Pipe size NPS {inp.pipe_nps} not found in database")

    warnings = []
    diameter = pipe.id_mm / 1000
    area = pipe.area_mm2 / 1e6
    relative_roughness = inp.roughness_mm / 1000 / diameter

    velocity = ton_hr_to_m3_s(inp.flow_rate, inp.fluid_density) / area
    if velocity < LOW_VELOCITY_WARNING:
        warnings.append(f"Low velocity ({velocity:.2f} m/s) - risk of solids settling")
    elif velocity > HIGH_VELOCITY_WARNING:
        warnings.append(f"High velocity ({velocity:.2f} m/s) - risk of erosion")

    re = reynolds_number(inp.fluid_density, velocity, diameter, inp.fluid_viscosity)
    regime = flow_regime(re)
    if regime is FlowRegime.TRANSITIONAL:
        warnings.append("Flow is in transitional regime - results may be less accurate")

    f = friction_factor(re, relative_roughness)
    velocity_head = velocity**2 / (2 * GRAVITY)
    straight_pipe_loss = f * (inp.pipe_length / diameter) * velocity_head

    breakdown = []
    total_k = 0.0
    for fitting in inp.fittings:
        if fitting.count <= 0:
            continue
        kind = FittingType(fitting.type)
        k = K_FACTORS[kind]
        breakdown.append(
            FittingLoss(
                type=kind,
                count=fitting.count,
                k_factor=k,
                loss=k * fitting.count * velocity_head,
                name=FITTING_NAMES[kind],
            )
        )
        total_k += k * fitting.count

    fittings_loss = total_k * velocity_head
    equivalent_length = total_k * diameter / f if f > 0 else 0.0
    elevation_head = inp.elevation_change

    total_m = straight_pipe_loss + fittings_loss + elevation_head
    total_bar = m_h2o_to_bar(total_m, inp.fluid_density)

    return PressureDropResult(
        velocity=velocity,
        reynolds_number=re,
        flow_regime=regime,
        friction_factor=f,
        straight_pipe_loss=straight_pipe_loss,
        fittings_loss=fittings_loss,
        fittings_breakdown=tuple(breakdown),
        total_k_factor=total_k,
        equivalent_length=equivalent_length,
        elevation_head=elevation_head,
        total_pressure_drop_mh2o=total_m,
        total_pressure_drop_bar=total_bar,
        total_pressure_drop_mbar=total_bar * 1000,
        total_pressure_drop_kpa=total_bar * 100,
        pipe=pipe,
        fluid_density=inp.fluid_density,
        warnings=tuple(warnings),
    )


def add_local_loss(
    result: PressureDropResult,
    kind: FittingType,
    k_factor: float,
    loss_m: float,
    name: str = "",
) -> PressureDropResult:
    """Fold a computed local loss (e.g. a reducer) into a result, keeping the unit identities."""
    total_m = result.total_pressure_drop_mh2o + loss_m
    total_bar = m_h2o_to_bar(total_m, result.fluid_density)
    return dataclasses.replace(
        result,
        fittings_loss=result.fittings_loss + loss_m,
        fittings_breakdown=result.fittings_breakdown
        + (FittingLoss(type=kind, count=1, k_factor=k_factor, loss=loss_m, name=name),),
        total_k_factor=result.total_k_factor + k_factor,
        total_pressure_drop_mh2o=total_m,
        total_pressure_drop_bar=total_bar,
        total_pressure_drop_mbar=total_bar * 1000,
        total_pressure_drop_kpa=total_bar * 100,
    )


def available_fittings() -> list[dict[str, object]]:
    return [
        {"type": kind, "name": FITTING_NAMES[kind], "k_factor": K_FACTORS[kind]}
        for kind in FittingType
    ]


__all__ = [
    "RE_LAMINAR_LIMIT",
    "RE_TURBULENT_LIMIT",
    "DEFAULT_ROUGHNESS_MM",
    "FlowRegime",
    "FittingType",
    "K_FACTORS",
    "FITTING_NAMES",
    "FittingSpec",
    "FittingLoss",
    "PressureDropInput",
    "PressureDropResult",
    "reynolds_number",
    "turbulent_friction_factor",
    "friction_factor",
    "flow_regime",
    "diameter_ratio",
    "reducer_k",
    "expander_k",
    "calculate_pressure_drop",
    "add_local_loss",
    "available_fittings",
]

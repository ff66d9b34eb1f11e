"""
suction_system.py

Pump suction system below an MED effect:

    vessel nozzle -> holdup standpipe -> concentric reducer -> suction pipe
    -> tee (1W + 1S) -> elbows -> isolation valve -> strainer -> pump

The nozzle is sized for a very low velocity (vortex-free draw-off), the suction line for a normal
one. Valve and strainer follow the suction size. Friction is evaluated twice, with the strainer
clean and fouled; the fouled case sets the required elevation of the effect above the pump
centerline, which is found directly since friction does not depend on that elevation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from desal_thermal import properties
from desal_thermal.exceptions import PipeNotFoundError, ValidationResult
from desal_thermal.pipes import (
    SCHEDULE_40_PIPES,
    PipeVariant,
    SelectedPipe,
    VelocityStatus,
    get_pipe_by_nps,
    parse_nps,
    select_pipe_by_velocity,
)
from desal_thermal.pressure_drop import (
    FITTING_NAMES,
    K_FACTORS,
    FittingSpec,
    FittingType,
    PressureDropInput,
    PressureDropResult,
    add_local_loss,
    calculate_pressure_drop,
    diameter_ratio,
    reducer_k,
)
from desal_thermal.siphon import fluid_properties
from desal_thermal.units import (
    ATM_MBAR,
    GRAVITY,
    bar_to_head,
    head_to_bar,
    mbar_to_bar,
    ton_hr_to_m3_s,
)

logger = logging.getLogger(__name__)

NOZZLE_VELOCITY_LIMITS = (0.01, 0.15)  # m/s
SUCTION_VELOCITY_LIMITS = (0.5, 2.0)  # m/s
NPS_CUTOFF_FOR_GATE_VALVE = 4.0  # inch, gate valve and bucket strainer at and above
HOLDUP_FREEBOARD = 0.3  # m above the holdup column
DEEP_VACUUM_BAR = 0.05
HIGH_TEMPERATURE_C = 90.0
DEFAULT_SAFETY_MARGIN = 0.5  # m
MARGIN_TOLERANCE = 1e-9  # m, round-off at the solved elevation
MAX_SALINITY_PPM = 120000.0


class SuctionFluidType(str, Enum):
    BRINE = "brine"
    DISTILLATE = "distillate"


class ValveType(str, Enum):
    BALL = "ball"
    GATE = "gate"


class StrainerType(str, Enum):
    Y_TYPE = "y_type"
    BUCKET_TYPE = "bucket_type"


class SuctionCalculationMode(str, Enum):
    FIND_ELEVATION = "find_elevation"
    VERIFY_ELEVATION = "verify_elevation"


class GoverningConstraint(str, Enum):
    RESIDENCE_TIME = "residence_time"
    MIN_COLUMN_HEIGHT = "min_column_height"


VALVE_FITTINGS = {
    ValveType.BALL: FittingType.BALL_VALVE,
    ValveType.GATE: FittingType.GATE_VALVE,
}

# (clean, fouled)
STRAINER_FITTINGS = {
    StrainerType.Y_TYPE: (FittingType.STRAINER_Y_CLEAN, FittingType.STRAINER_Y_DIRTY),
    StrainerType.BUCKET_TYPE: (
        FittingType.STRAINER_BUCKET_CLEAN,
        FittingType.STRAINER_BUCKET_DIRTY,
    ),
}

STRAINER_NAMES = {
    StrainerType.Y_TYPE: "Y-Type Strainer",
    StrainerType.BUCKET_TYPE: "Bucket Strainer",
}


@dataclass(frozen=True)
class SuctionSystemInput:
    effect_pressure: float  # mbar abs
    flow_rate: float  # ton/hr
    pump_npshr: float  # m, from the pump datasheet
    fluid_type: SuctionFluidType = SuctionFluidType.BRINE
    salinity: float = 35000.0  # ppm, brine only
    nozzle_velocity_target: float = 0.1  # m/s
    suction_velocity_target: float = 1.2  # m/s
    elbow_count: int = 1
    vertical_pipe_run: float = 0.0  # m, nozzle down to pump level
    horizontal_pipe_run: float = 0.0  # m
    holdup_pipe_nps: str | None = None  # defaults to the nozzle size
    min_column_height: float = 1.0  # m, for the level gauge
    residence_time: float = 30.0  # s
    safety_margin: float = DEFAULT_SAFETY_MARGIN  # m above NPSHr
    mode: SuctionCalculationMode = SuctionCalculationMode.FIND_ELEVATION
    user_elevation: float | None = None  # m, verify mode


@dataclass(frozen=True)
class HoldupResult:
    holdup_pipe_nps: str
    holdup_pipe_id: float  # mm
    height_from_residence_time: float  # m
    height_from_min_column: float  # m
    governing_height: float  # m
    governing_constraint: GoverningConstraint
    holdup_volume: float  # L
    actual_residence_time: float  # s


@dataclass(frozen=True)
class StrainerPressureDrop:
    strainer_type: StrainerType
    strainer_name: str
    clean_k_factor: float
    dirty_k_factor: float
    clean_loss: float  # m
    dirty_loss: float  # m
    clean_loss_mbar: float
    dirty_loss_mbar: float


@dataclass(frozen=True)
class NPSHaCondition:
    label: str
    static_head: float
    pressure_head: float
    vapor_pressure_head: float
    friction_loss: float
    npsha: float
    margin: float  # NPSHa - NPSHr
    is_adequate: bool


@dataclass(frozen=True)
class SelectedFitting:
    name: str
    k_factor: float
    count: int
    loss: float  # m
    fitting_type: FittingType | None = None


@dataclass(frozen=True)
class ReducerDetail:
    beta: float  # d_suction / d_nozzle
    k_factor: float
    loss: float  # m
    large_pipe_nps: str
    small_pipe_nps: str
    type: str = "concentric"


@dataclass(frozen=True)
class ElevationBreakdown:
    holdup_height: float
    additional_head_required: float
    total: float


@dataclass(frozen=True)
class SuctionSystemResult:
    saturation_temperature: float  # °C, pure water
    boiling_point_elevation: float
    fluid_temperature: float
    fluid_density: float
    fluid_viscosity: float
    vapor_pressure: float  # bar
    nozzle_pipe: SelectedPipe
    suction_pipe: SelectedPipe
    valve_type: ValveType
    strainer_type: StrainerType
    fittings: tuple[SelectedFitting, ...]
    reducer: ReducerDetail
    holdup: HoldupResult
    pressure_drop_clean: PressureDropResult
    pressure_drop_dirty: PressureDropResult
    strainer_pressure_drop: StrainerPressureDrop
    npsha_clean: NPSHaCondition
    npsha_dirty: NPSHaCondition
    required_elevation: float  # m, pump centerline to vessel nozzle
    elevation_breakdown: ElevationBreakdown
    user_elevation: float | None = None
    elevation_adequate: bool | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def nozzle_velocity(self) -> float:
        return self.nozzle_pipe.actual_velocity

    @property
    def suction_velocity(self) -> float:
        return self.suction_pipe.actual_velocity


def select_components(suction_nps: str) -> tuple[ValveType, StrainerType]:
    """Gate valve and bucket strainer from 4" up, ball valve and Y-strainer below."""
    if parse_nps(suction_nps) >= NPS_CUTOFF_FOR_GATE_VALVE:
        return ValveType.GATE, StrainerType.BUCKET_TYPE
    return ValveType.BALL, StrainerType.Y_TYPE


def validate_suction_system_input(inp: SuctionSystemInput) -> ValidationResult:
    errors = []
    fluid_type = SuctionFluidType(inp.fluid_type)
    mode = SuctionCalculationMode(inp.mode)

    if inp.effect_pressure <= 0:
        errors.append("Effect pressure must be positive")
    if inp.effect_pressure > ATM_MBAR:
        errors.append("Effect pressure should be under vacuum (< 1013.25 mbar abs)")
    if fluid_type is SuctionFluidType.BRINE and not (0 <= inp.salinity <= MAX_SALINITY_PPM):
        errors.append("Salinity must be between 0 and 120,000 ppm")
    if inp.flow_rate <= 0:
        errors.append("Flow rate must be positive")

    for label, target, (v_min, v_max) in (
        ("Nozzle", inp.nozzle_velocity_target, NOZZLE_VELOCITY_LIMITS),
        ("Suction", inp.suction_velocity_target, SUCTION_VELOCITY_LIMITS),
    ):
        if not (v_min <= target <= v_max):
            errors.append(f"{label} velocity target must be between {v_min} and {v_max} m/s")

    if inp.elbow_count < 0 or int(inp.elbow_count) != inp.elbow_count:
        errors.append("Elbow count must be a non-negative integer")
    if inp.vertical_pipe_run < 0:
        errors.append("Vertical pipe run must be non-negative")
    if inp.horizontal_pipe_run < 0:
        errors.append("Horizontal pipe run must be non-negative")
    if inp.min_column_height <= 0:
        errors.append("Minimum column height must be positive")
    if inp.residence_time <= 0:
        errors.append("Residence time must be positive")
    if inp.pump_npshr < 0:
        errors.append("Pump NPSHr must be non-negative")
    if inp.safety_margin < 0:
        errors.append("Safety margin must be non-negative")
    if mode is SuctionCalculationMode.VERIFY_ELEVATION and (
        inp.user_elevation is None or inp.user_elevation <= 0
    ):
        errors.append("User elevation must be positive in verify mode")
    return ValidationResult(errors=tuple(errors))


def holdup_volume(
    holdup_pipe: PipeVariant,
    volumetric_flow: float,
    residence_time: float,
    min_column_height: float,
) -> HoldupResult:
    area = holdup_pipe.area_mm2 / 1e6
    from_residence = volumetric_flow * residence_time / area
    governing = max(from_residence, min_column_height)
    if from_residence >= min_column_height:
        constraint = GoverningConstraint.RESIDENCE_TIME
    else:
        constraint = GoverningConstraint.MIN_COLUMN_HEIGHT
    return HoldupResult(
        holdup_pipe_nps=holdup_pipe.nps,
        holdup_pipe_id=holdup_pipe.id_mm,
        height_from_residence_time=from_residence,
        height_from_min_column=min_column_height,
        governing_height=governing,
        governing_constraint=constraint,
        holdup_volume=area * governing * 1000,
        actual_residence_time=area * governing / volumetric_flow,
    )


def npsha_condition(
    label: str,
    static_head: float,
    pressure_head: float,
    vapor_pressure_head: float,
    friction_loss: float,
    npshr: float,
    safety_margin: float,
) -> NPSHaCondition:
    npsha = static_head + pressure_head - vapor_pressure_head - friction_loss
    margin = npsha - npshr
    return NPSHaCondition(
        label=label,
        static_head=static_head,
        pressure_head=pressure_head,
        vapor_pressure_head=vapor_pressure_head,
        friction_loss=friction_loss,
        npsha=npsha,
        margin=margin,
        is_adequate=bool(margin >= safety_margin - MARGIN_TOLERANCE),
    )


def calculate_suction_system(
    inp: SuctionSystemInput, pipes: Sequence[PipeVariant] | None = None
) -> SuctionSystemResult:
    validate_suction_system_input(inp).raise_for_errors()
    pipes = SCHEDULE_40_PIPES if pipes is None else pipes
    warnings = []
    fluid_type = SuctionFluidType(inp.fluid_type)
    mode = SuctionCalculationMode(inp.mode)
    salinity = 0.0 if fluid_type is SuctionFluidType.DISTILLATE else inp.salinity

    p_bar = mbar_to_bar(inp.effect_pressure)
    t_sat = properties.saturation_temperature(p_bar)
    bpe = properties.boiling_point_elevation(salinity, t_sat)
    fluid_temperature = t_sat + bpe
    density, viscosity = fluid_properties(fluid_type.value, fluid_temperature, salinity)
    # taken at Tsat + BPE, which overstates the brine vapour pressure slightly
    vapor_pressure = properties.saturation_pressure(fluid_temperature)

    if p_bar < DEEP_VACUUM_BAR:
        warnings.append(
            f"Deep vacuum operation ({inp.effect_pressure:.0f} mbar), "
            "verify pump seal compatibility"
        )
    if fluid_temperature > HIGH_TEMPERATURE_C:
        warnings.append(
            f"High fluid temperature ({fluid_temperature:.1f}°C), verify pump materials and seal "
            "selection"
        )

    q = ton_hr_to_m3_s(inp.flow_rate, density)
    nozzle = select_pipe_by_velocity(q, inp.nozzle_velocity_target, NOZZLE_VELOCITY_LIMITS, pipes)
    if nozzle.velocity_status is VelocityStatus.HIGH:
        warnings.append(
            f"Nozzle velocity {nozzle.actual_velocity:.3f} m/s exceeds recommended maximum of "
            f"{NOZZLE_VELOCITY_LIMITS[1]} m/s"
        )
    suction = select_pipe_by_velocity(
        q, inp.suction_velocity_target, SUCTION_VELOCITY_LIMITS, pipes
    )
    if suction.velocity_status is VelocityStatus.HIGH:
        warnings.append(
            f"Suction velocity {suction.actual_velocity:.2f} m/s exceeds recommended maximum of "
            f"{SUCTION_VELOCITY_LIMITS[1]} m/s"
        )
    elif suction.velocity_status is VelocityStatus.LOW:
        warnings.append(
            f"Suction velocity {suction.actual_velocity:.2f} m/s is below recommended minimum of "
            f"{SUCTION_VELOCITY_LIMITS[0]} m/s"
        )

    valve_type, strainer_type = select_components(suction.nps)
    base_fittings = [FittingSpec(FittingType.TEE_BRANCH, 1)]
    if inp.elbow_count > 0:
        base_fittings.append(FittingSpec(FittingType.ELBOW_90_STANDARD, int(inp.elbow_count)))
    base_fittings.append(FittingSpec(VALVE_FITTINGS[valve_type], 1))

    holdup_nps = inp.holdup_pipe_nps or nozzle.nps
    holdup_pipe = get_pipe_by_nps(holdup_nps, pipes)
    if holdup_pipe is None:
        raise PipeNotFoundError(f"Holdup pipe size NPS {holdup_nps} not found in database")
    holdup = holdup_volume(holdup_pipe, q, inp.residence_time, inp.min_column_height)

    # reducer K is referenced to the suction pipe velocity
    velocity_head = suction.actual_velocity**2 / (2 * GRAVITY)
    k_reducer = reducer_k(nozzle.id_mm, suction.id_mm)
    reducer_loss = k_reducer * velocity_head
    reducer = ReducerDetail(
        beta=diameter_ratio(suction.id_mm, nozzle.id_mm),
        k_factor=k_reducer,
        loss=reducer_loss,
        large_pipe_nps=nozzle.nps,
        small_pipe_nps=suction.nps,
    )

    clean_kind, dirty_kind = STRAINER_FITTINGS[strainer_type]
    drops = []
    for strainer_kind in (clean_kind, dirty_kind):
        drop = calculate_pressure_drop(
            PressureDropInput(
                pipe_nps=suction.nps,
                flow_rate=inp.flow_rate,
                fluid_density=density,
                fluid_viscosity=viscosity,
                pipe_length=inp.vertical_pipe_run + inp.horizontal_pipe_run,
                fittings=(*base_fittings, FittingSpec(strainer_kind, 1)),
            ),
            pipes,
        )
        drops.append(
            add_local_loss(
                drop, FittingType.REDUCER_SUDDEN, k_reducer, reducer_loss, "Concentric Reducer"
            )
        )
    drop_clean, drop_dirty = drops

    clean_loss = K_FACTORS[clean_kind] * velocity_head
    dirty_loss = K_FACTORS[dirty_kind] * velocity_head
    strainer_drop = StrainerPressureDrop(
        strainer_type=strainer_type,
        strainer_name=STRAINER_NAMES[strainer_type],
        clean_k_factor=K_FACTORS[clean_kind],
        dirty_k_factor=K_FACTORS[dirty_kind],
        clean_loss=clean_loss,
        dirty_loss=dirty_loss,
        clean_loss_mbar=head_to_bar(clean_loss, density) * 1000,
        dirty_loss_mbar=head_to_bar(dirty_loss, density) * 1000,
    )

    pressure_head = bar_to_head(p_bar, density)
    vapor_head = bar_to_head(vapor_pressure, density)
    # NPSHr + margin = Hs + Hp - Hvp - Hf with the fouled strainer
    required_static = (
        inp.pump_npshr
        + inp.safety_margin
        - pressure_head
        + vapor_head
        + drop_dirty.total_pressure_drop_mh2o
    )
    required_elevation = max(required_static, holdup.governing_height + HOLDUP_FREEBOARD)
    breakdown = ElevationBreakdown(
        holdup_height=holdup.governing_height,
        additional_head_required=max(0.0, required_static - holdup.governing_height),
        total=required_elevation,
    )

    verify = mode is SuctionCalculationMode.VERIFY_ELEVATION
    static_head = inp.user_elevation if verify else required_elevation
    npsha_clean, npsha_dirty = (
        npsha_condition(
            label,
            static_head,
            pressure_head,
            vapor_head,
            drop.total_pressure_drop_mh2o,
            inp.pump_npshr,
            inp.safety_margin,
        )
        for label, drop in (("Clean Strainer", drop_clean), ("Dirty Strainer", drop_dirty))
    )

    if npsha_dirty.npsha < 0:
        warnings.append("CRITICAL: NPSHa is negative with dirty strainer, pump will cavitate")
    elif npsha_dirty.margin < 0:
        warnings.append(
            f"NPSHa ({npsha_dirty.npsha:.2f} m) is less than NPSHr ({inp.pump_npshr:g} m) "
            "with dirty strainer"
        )
    elif not npsha_dirty.is_adequate:
        warnings.append(
            f"NPSHa margin ({npsha_dirty.margin:.2f} m) is less than recommended safety margin "
            f"({inp.safety_margin:g} m) with dirty strainer"
        )

    fittings = [
        SelectedFitting(
            name=f'Concentric Reducer ({nozzle.nps}" → {suction.nps}", '
            f"β={reducer.beta:.3f})",
            k_factor=k_reducer,
            count=1,
            loss=reducer_loss,
        )
    ]
    for item in base_fittings:
        k = K_FACTORS[item.type]
        fittings.append(
            SelectedFitting(
                name=FITTING_NAMES[item.type],
                k_factor=k,
                count=item.count,
                loss=k * item.count * velocity_head,
                fitting_type=item.type,
            )
        )

    logger.debug(
        "Suction system: nozzle %s\", suction %s\", required elevation %.2f m",
        nozzle.nps,
        suction.nps,
        required_elevation,
    )
    for warning in warnings:
        logger.info(warning)

    return SuctionSystemResult(
        saturation_temperature=t_sat,
        boiling_point_elevation=bpe,
        fluid_temperature=fluid_temperature,
        fluid_density=density,
        fluid_viscosity=viscosity,
        vapor_pressure=vapor_pressure,
        nozzle_pipe=nozzle,
        suction_pipe=suction,
        valve_type=valve_type,
        strainer_type=strainer_type,
        fittings=tuple(fittings),
        reducer=reducer,
        holdup=holdup,
        pressure_drop_clean=drop_clean,
        pressure_drop_dirty=drop_dirty,
        strainer_pressure_drop=strainer_drop,
        npsha_clean=npsha_clean,
        npsha_dirty=npsha_dirty,
        required_elevation=required_elevation,
        elevation_breakdown=breakdown,
        user_elevation=inp.user_elevation if verify else None,
        elevation_adequate=npsha_dirty.is_adequate if verify else None,
        warnings=tuple(warnings),
    )


__all__ = [
    "NOZZLE_VELOCITY_LIMITS",
    "SUCTION_VELOCITY_LIMITS",
    "NPS_CUTOFF_FOR_GATE_VALVE",
    "SuctionFluidType",
    "ValveType",
    "StrainerType",
    "SuctionCalculationMode",
    "GoverningConstraint",
    "SuctionSystemInput",
    "HoldupResult",
    "StrainerPressureDrop",
    "NPSHaCondition",
    "SelectedFitting",
    "ReducerDetail",
    "ElevationBreakdown",
    "SuctionSystemResult",
    "select_components",
    "validate_suction_system_input",
    "holdup_volume",
    "npsha_condition",
    "calculate_suction_system",
]

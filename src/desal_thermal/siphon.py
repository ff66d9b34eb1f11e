"""
siphon.py

Inter-effect siphons of a MED plant: a U-shaped pipe between two effects at different pressures.
The U-bend must be deep enough that the liquid column balances the pressure difference plus the
line friction, with a safety margin, or vapour blows through.

The pipe length contains both vertical legs, so friction depends on the height being solved for;
the height is found by fixed-point iteration

    H_{k+1} = (H_static + H_friction(L(H_k))) (1 + SF),   L(H) = L_horizontal + L_lateral + 2 H

starting from 1.3 H_static. The liquid enters saturated at the upstream pressure and therefore
always flashes partly at the downstream pressure.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.pipes import (
    DEFAULT_SCHEDULE,
    PipeVariant,
    SelectedPipe,
    VelocityStatus,
    custom_pipe,
    custom_pipe_display_name,
    get_pipes_by_schedule,
    select_pipe_by_velocity,
)
from desal_thermal.pressure_drop import (
    FittingSpec,
    FittingType,
    PressureDropInput,
    PressureDropResult,
    calculate_pressure_drop,
)
from desal_thermal.units import PressureUnit, bar_to_head, pressure_to_bar, ton_hr_to_m3_s

logger = logging.getLogger(__name__)

SIPHON_VELOCITY_MIN = 0.05  # m/s
SIPHON_VELOCITY_MAX = 1.0  # m/s
MIN_SAFETY_FACTOR = 20.0  # %
MAX_ITERATIONS = 10
CONVERGENCE_TOLERANCE = 0.01  # m
INITIAL_HEIGHT_FACTOR = 1.3
HIGH_FLASH_FRACTION = 0.05
MAX_SALINITY_PPM = 120000.0


class SiphonFluidType(str, Enum):
    SEAWATER = "seawater"
    BRINE = "brine"
    DISTILLATE = "distillate"


class ElbowConfig(str, Enum):
    """Routing of the siphon between the two nozzles.

    Two elbows keep the siphon in one plane, three add one lateral offset, four go out and back
    (e.g. around a neighbouring siphon).
    """

    TWO_ELBOWS = "2_elbows"
    THREE_ELBOWS = "3_elbows"
    FOUR_ELBOWS = "4_elbows"


ELBOW_COUNT = {
    ElbowConfig.TWO_ELBOWS: 2,
    ElbowConfig.THREE_ELBOWS: 3,
    ElbowConfig.FOUR_ELBOWS: 4,
}

# number of lateral offsets travelled
OFFSET_RUNS = {
    ElbowConfig.TWO_ELBOWS: 0,
    ElbowConfig.THREE_ELBOWS: 1,
    ElbowConfig.FOUR_ELBOWS: 2,
}


@dataclass(frozen=True)
class CustomPipeSpec:
    """Plate-formed pipe beyond the standard range, dimensions in mm."""

    id_mm: float
    wt_mm: float


@dataclass(frozen=True)
class SiphonInput:
    upstream_pressure: float  # in pressure_unit
    downstream_pressure: float  # in pressure_unit
    flow_rate: float  # ton/hr
    pressure_unit: PressureUnit = PressureUnit.MBAR_ABS
    fluid_type: SiphonFluidType = SiphonFluidType.SEAWATER
    salinity: float = 35000.0  # ppm, seawater and brine only
    elbow_config: ElbowConfig = ElbowConfig.TWO_ELBOWS
    horizontal_distance: float = 3.0  # m between nozzle centers
    offset_distance: float = 0.0  # m, 3 and 4 elbow routings
    target_velocity: float = 1.0  # m/s
    safety_factor: float = 20.0  # %
    pipe_schedule: str = DEFAULT_SCHEDULE
    custom_pipe: CustomPipeSpec | None = None


@dataclass(frozen=True)
class SiphonResult:
    pipe: SelectedPipe
    velocity: float  # m/s
    velocity_status: VelocityStatus
    pipe_exceeds_standard: bool
    pressure_drop: PressureDropResult
    static_head: float  # m
    friction_head: float  # m
    safety_margin: float  # m
    minimum_height: float  # m
    iterations: int
    converged: bool
    flash_occurs: bool
    flash_vapor_fraction: float
    flash_vapor_flow: float  # ton/hr
    liquid_flow_after_flash: float  # ton/hr
    downstream_sat_temp: float  # °C incl. BPE
    downstream_sat_temp_pure: float  # °C
    fluid_temperature: float  # °C, upstream Tsat + BPE
    upstream_sat_temp_pure: float  # °C
    fluid_density: float
    fluid_viscosity: float
    total_pipe_length: float  # m
    elbow_count: int
    pressure_diff_bar: float
    warnings: tuple[str, ...] = field(default_factory=tuple)


def _salinity(inp: SiphonInput) -> float:
    if SiphonFluidType(inp.fluid_type) is SiphonFluidType.DISTILLATE:
        return 0.0
    return inp.salinity


def fluid_properties(fluid_type: SiphonFluidType, temp_c: float, salinity: float):
    """(density kg/m³, viscosity Pa·s) of the siphon liquid."""
    fluid_type = SiphonFluidType(fluid_type)
    if fluid_type is SiphonFluidType.DISTILLATE:
        return properties.density_liquid(temp_c), properties.seawater_viscosity(0.0, temp_c)
    return (
        properties.seawater_density(salinity, temp_c),
        properties.seawater_viscosity(salinity, temp_c),
    )


def fluid_enthalpy(fluid_type: SiphonFluidType, temp_c: float, salinity: float) -> float:
    if SiphonFluidType(fluid_type) is SiphonFluidType.DISTILLATE:
        return properties.enthalpy_liquid(temp_c)
    return properties.seawater_enthalpy(salinity, temp_c)


def siphon_fittings(elbow_config: ElbowConfig) -> tuple[FittingSpec, ...]:
    """Entrance, the routing's elbows and the exit."""
    return (
        FittingSpec(FittingType.ENTRANCE_SHARP, 1),
        FittingSpec(FittingType.ELBOW_90_STANDARD, ELBOW_COUNT[ElbowConfig(elbow_config)]),
        FittingSpec(FittingType.EXIT, 1),
    )


def pipe_length(inp: SiphonInput, height: float) -> float:
    lateral = OFFSET_RUNS[ElbowConfig(inp.elbow_config)] * inp.offset_distance
    return inp.horizontal_distance + lateral + 2 * height


def _upstream_fluid_temperature(inp: SiphonInput) -> float | None:
    """Tsat + BPE at the upstream pressure, or None above the seawater range."""
    upstream_bar = pressure_to_bar(inp.upstream_pressure, inp.pressure_unit)
    if upstream_bar >= properties.CRITICAL_PRESSURE_BAR:
        return None
    t_sat = properties.saturation_temperature(upstream_bar)
    if t_sat > properties.SEAWATER_T_RANGE_C[1]:
        return None
    return t_sat + properties.boiling_point_elevation(inp.salinity, t_sat)


def validate_siphon_input(inp: SiphonInput) -> ValidationResult:
    errors = []
    fluid_type = SiphonFluidType(inp.fluid_type)
    elbow_config = ElbowConfig(inp.elbow_config)

    if inp.upstream_pressure <= 0:
        errors.append("Upstream pressure must be positive")
    if inp.downstream_pressure <= 0:
        errors.append("Downstream pressure must be positive")
    if inp.upstream_pressure <= inp.downstream_pressure:
        errors.append("Upstream pressure must be higher than downstream pressure")
    if fluid_type is not SiphonFluidType.DISTILLATE and not (
        0 <= inp.salinity <= MAX_SALINITY_PPM
    ):
        errors.append("Salinity must be between 0 and 120,000 ppm")
    elif fluid_type is not SiphonFluidType.DISTILLATE and inp.upstream_pressure > 0:
        fluid_temp = _upstream_fluid_temperature(inp)
        if fluid_temp is None or fluid_temp > properties.SEAWATER_T_RANGE_C[1]:
            errors.append(
                f"Upstream pressure too high: fluid temperature exceeds "
                f"{properties.SEAWATER_T_RANGE_C[1]:g}°C seawater property range"
            )
    if inp.flow_rate <= 0:
        errors.append("Flow rate must be positive")
    if inp.horizontal_distance <= 0:
        errors.append("Horizontal distance must be positive")
    if elbow_config is not ElbowConfig.TWO_ELBOWS and inp.offset_distance <= 0:
        errors.append("Offset distance must be positive for this elbow configuration")
    if not (SIPHON_VELOCITY_MIN <= inp.target_velocity <= SIPHON_VELOCITY_MAX):
        errors.append(
            f"Target velocity must be between {SIPHON_VELOCITY_MIN} and {SIPHON_VELOCITY_MAX} m/s"
        )
    if inp.safety_factor < MIN_SAFETY_FACTOR:
        errors.append(f"Safety factor must be at least {MIN_SAFETY_FACTOR:g}%")
    if inp.custom_pipe is not None:
        if inp.custom_pipe.id_mm <= 0:
            errors.append("Custom pipe ID must be positive")
        if inp.custom_pipe.wt_mm <= 0:
            errors.append("Custom pipe wall thickness must be positive")
    return ValidationResult(errors=tuple(errors))


def _velocity_status(velocity: float) -> VelocityStatus:
    if velocity > SIPHON_VELOCITY_MAX:
        return VelocityStatus.HIGH
    if velocity < SIPHON_VELOCITY_MIN:
        return VelocityStatus.LOW
    return VelocityStatus.OK


def _select_pipe(
    inp: SiphonInput, volumetric_flow: float, pipes: Sequence[PipeVariant] | None
) -> SelectedPipe:
    if inp.custom_pipe is not None:
        pipe = custom_pipe(inp.custom_pipe.id_mm, inp.custom_pipe.wt_mm)
        velocity = volumetric_flow / (pipe.area_mm2 / 1e6)
        return SelectedPipe(
            pipe=pipe,
            display_name=custom_pipe_display_name(pipe),
            is_exact_match=True,
            actual_velocity=velocity,
            velocity_status=_velocity_status(velocity),
        )
    if pipes is None:
        pipes = get_pipes_by_schedule(schedule=inp.pipe_schedule)
    return select_pipe_by_velocity(
        volumetric_flow,
        inp.target_velocity,
        (SIPHON_VELOCITY_MIN, SIPHON_VELOCITY_MAX),
        pipes,
        inp.pipe_schedule,
    )


def calculate_siphon(inp: SiphonInput, pipes: Sequence[PipeVariant] | None = None) -> SiphonResult:
    """
    Size a siphon between two effects.

    Args:
        inp: Effect pressures, flow, routing and pipe sizing targets
        pipes: Catalog to select from; defaults to the cached catalog of ``inp.pipe_schedule``

    Returns:
        SiphonResult with the selected pipe, the minimum U-bend depth below the upstream nozzle
        and the flash at the downstream effect.
    """

    validate_siphon_input(inp).raise_for_errors()
    warnings = []
    fluid_type = SiphonFluidType(inp.fluid_type)
    salinity = _salinity(inp)

    upstream_bar = pressure_to_bar(inp.upstream_pressure, inp.pressure_unit)
    downstream_bar = pressure_to_bar(inp.downstream_pressure, inp.pressure_unit)
    pressure_diff = upstream_bar - downstream_bar

    t_up_pure = properties.saturation_temperature(upstream_bar)
    fluid_temperature = t_up_pure + properties.boiling_point_elevation(salinity, t_up_pure)
    density, viscosity = fluid_properties(fluid_type, fluid_temperature, salinity)

    selected = _select_pipe(inp, ton_hr_to_m3_s(inp.flow_rate, density), pipes)
    exceeds_standard = selected.pipe.is_custom or selected.is_max_size
    if selected.velocity_status is VelocityStatus.HIGH:
        warnings.append(
            f"Velocity {selected.actual_velocity:.2f} m/s exceeds recommended maximum of "
            f"{SIPHON_VELOCITY_MAX} m/s"
        )
    elif selected.velocity_status is VelocityStatus.LOW:
        warnings.append(
            f"Velocity {selected.actual_velocity:.2f} m/s is below recommended minimum of "
            f"{SIPHON_VELOCITY_MIN} m/s"
        )

    fittings = siphon_fittings(inp.elbow_config)
    static_head = bar_to_head(pressure_diff, density)
    factor = 1 + inp.safety_factor / 100

    height = static_head * INITIAL_HEIGHT_FACTOR
    converged = False
    iterations = 0
    drop = None
    length = 0.0
    for iterations in range(1, MAX_ITERATIONS + 1):
        length = pipe_length(inp, height)
        drop = calculate_pressure_drop(
            PressureDropInput(
                pipe_nps=selected.nps,
                flow_rate=inp.flow_rate,
                fluid_density=density,
                fluid_viscosity=viscosity,
                pipe_length=length,
                fittings=fittings,
            ),
            pipe=selected.pipe,
        )
        new_height = (static_head + drop.total_pressure_drop_mh2o) * factor
        step = abs(new_height - height)
        height = new_height
        if step < CONVERGENCE_TOLERANCE:
            converged = True
            break
    if converged:
        logger.debug("Siphon height %.3f m after %d iterations", height, iterations)
    else:
        logger.warning(
            "Siphon height did not settle within %d iterations (last step %.4f m)",
            MAX_ITERATIONS,
            step,
        )

    friction_head = drop.total_pressure_drop_mh2o
    base_height = static_head + friction_head
    safety_margin = base_height * (inp.safety_factor / 100)

    t_down_pure = properties.saturation_temperature(downstream_bar)
    t_down = t_down_pure + properties.boiling_point_elevation(salinity, t_down_pure)
    flash_occurs = fluid_temperature > t_down
    vapor_flow = 0.0
    if flash_occurs:
        h_in = fluid_enthalpy(fluid_type, fluid_temperature, salinity)
        h_liquid = fluid_enthalpy(fluid_type, t_down, salinity)
        h_vapor = properties.enthalpy_vapor(t_down_pure)
        if h_vapor > h_liquid:
            vapor_flow = inp.flow_rate * (h_in - h_liquid) / (h_vapor - h_liquid)
    fraction = vapor_flow / inp.flow_rate
    if fraction > HIGH_FLASH_FRACTION:
        warnings.append(
            f"High flash vapor fraction ({fraction * 100:.1f}%), consider subcooling the liquid "
            "before the siphon"
        )

    for warning in warnings:
        logger.info(warning)

    return SiphonResult(
        pipe=selected,
        velocity=selected.actual_velocity,
        velocity_status=selected.velocity_status,
        pipe_exceeds_standard=exceeds_standard,
        pressure_drop=drop,
        static_head=static_head,
        friction_head=friction_head,
        safety_margin=safety_margin,
        minimum_height=base_height + safety_margin,
        iterations=iterations,
        converged=converged,
        flash_occurs=flash_occurs,
        flash_vapor_fraction=fraction,
        flash_vapor_flow=vapor_flow,
        liquid_flow_after_flash=inp.flow_rate - vapor_flow,
        downstream_sat_temp=t_down,
        downstream_sat_temp_pure=t_down_pure,
        fluid_temperature=fluid_temperature,
        upstream_sat_temp_pure=t_up_pure,
        fluid_density=density,
        fluid_viscosity=viscosity,
        total_pipe_length=length,
        elbow_count=ELBOW_COUNT[ElbowConfig(inp.elbow_config)],
        pressure_diff_bar=pressure_diff,
        warnings=tuple(warnings),
    )


# ---------------------------------------------------------------------------
# Effect train
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EffectStage:
    pressure: float  # in the template's pressure unit
    flow_to_next: float  # ton/hr through the siphon to the next effect


@dataclass(frozen=True)
class SiphonStageResult:
    from_effect: int
    to_effect: int
    result: SiphonResult


@dataclass(frozen=True)
class SiphonTrainResult:
    stages: tuple[SiphonStageResult, ...]
    errors: tuple[str, ...] = field(default_factory=tuple)


def calculate_siphon_train(
    effects: Sequence[EffectStage],
    template: SiphonInput,
    pipes: Sequence[PipeVariant] | None = None,
) -> SiphonTrainResult:
    """Size siphon S-i between effects i and i+1 (1-based) for every pair of consecutive effects.

    `template` supplies the routing, fluid and sizing targets common to all siphons. A stage that
    fails validation is reported in ``errors`` and the remaining stages are still sized.
    """

    stages = []
    errors = []
    for i, (upstream, downstream) in enumerate(zip(effects, effects[1:]), start=1):
        if upstream.pressure <= downstream.pressure:
            errors.append(f"S-{i}: E{i} pressure must be higher than E{i + 1}")
            continue
        inp = SiphonInput(
            upstream_pressure=upstream.pressure,
            downstream_pressure=downstream.pressure,
            flow_rate=upstream.flow_to_next,
            pressure_unit=template.pressure_unit,
            fluid_type=template.fluid_type,
            salinity=_salinity(template),
            elbow_config=template.elbow_config,
            horizontal_distance=template.horizontal_distance,
            offset_distance=template.offset_distance,
            target_velocity=template.target_velocity,
            safety_factor=template.safety_factor,
            pipe_schedule=template.pipe_schedule,
            custom_pipe=template.custom_pipe,
        )
        try:
            result = calculate_siphon(inp, pipes)
        except ValueError as exc:
            errors.append(f"S-{i}: {exc}")
            continue
        stages.append(SiphonStageResult(from_effect=i, to_effect=i + 1, result=result))
    return SiphonTrainResult(stages=tuple(stages), errors=tuple(errors))


__all__ = [
    "SIPHON_VELOCITY_MIN",
    "SIPHON_VELOCITY_MAX",
    "MIN_SAFETY_FACTOR",
    "MAX_ITERATIONS",
    "CONVERGENCE_TOLERANCE",
    "SiphonFluidType",
    "ElbowConfig",
    "ELBOW_COUNT",
    "CustomPipeSpec",
    "SiphonInput",
    "SiphonResult",
    "fluid_properties",
    "fluid_enthalpy",
    "siphon_fittings",
    "pipe_length",
    "validate_siphon_input",
    "calculate_siphon",
    "EffectStage",
    "SiphonStageResult",
    "SiphonTrainResult",
    "calculate_siphon_train",
]

"""
flash_chamber.py

Design of a vacuum flash chamber: hot feed enters above the liquid pool, part of it flashes to
vapour at the chamber pressure and the rest leaves as brine (or water, for DM feed).

Single pass:
    1. validate
    2. heat and mass balance, m_v = m_w (h_in - h_brine) / (h_v - h_brine)
    3. chamber diameter from the cross-section loading, zone heights
    4. inlet, brine and vapour nozzles by velocity
    5. elevations with the bottom tangent line (BTL) at 0
    6. NPSHa of the bottom pump at LG-L, operating level and LG-H

Flows are ton/hr, chamber pressure mbar abs, lengths mm for the chamber and m for elevations.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from desal_thermal import properties
from desal_thermal.exceptions import ValidationResult
from desal_thermal.pipes import (
    SCHEDULE_40_PIPES,
    PipeVariant,
    VelocityStatus,
    calculate_required_pipe_area,
    select_pipe_by_velocity,
)
from desal_thermal.units import (
    FlowRateUnit,
    bar_to_water_head,
    mbar_to_bar,
    to_ton_hr,
    ton_hr_to_m3_s,
)

logger = logging.getLogger(__name__)

CROSS_SECTION_LOADING = 2.0  # ton/hr of feed per m² of chamber cross-section
ESTIMATED_FRICTION_LOSS = 0.5  # m, suction piping of the bottom pump
MIN_NPSH_MARGIN = 1.5  # m
CALCULATOR_VERSION = "2.0.0"

DIAMETER_ROUNDING_MM = 100
INLET_PRESSURE_ALLOWANCE_MBAR = 50.0  # inlet row is quoted above chamber pressure
BALANCE_TOLERANCE_PERCENT = 1.0
MIN_TEMPERATURE_APPROACH = 5.0  # K
HIGH_BRINE_SALINITY_PPM = 70000.0
LOW_SEAWATER_SALINITY_PPM = 1000.0

# Vapour velocity through the chamber cross-section, m/s
VAPOR_VELOCITY_OK = 0.5
VAPOR_VELOCITY_HIGH = 1.0

PRESSURE_LIMITS_MBAR = (50.0, 500.0)
WATER_FLOW_LIMITS = (1.0, 10000.0)  # ton/hr
VAPOR_FLOW_LIMITS = (0.1, 1000.0)  # ton/hr
INLET_VELOCITY_LIMITS = (1.5, 4.0)  # m/s
OUTLET_VELOCITY_LIMITS = (0.01, 0.1)  # m/s, kept low against vortexing
VAPOR_VELOCITY_LIMITS = (5.0, 40.0)  # m/s
SALINITY_LIMITS_PPM = (0.0, 70000.0)  # feed seawater
SPRAY_ANGLE_LIMITS = (70.0, 100.0)  # deg, full cone

NPSHA_CRITICAL = 0.5  # m
NPSHA_MARGINAL = 1.5  # m
NPSHA_GOOD = 3.0  # m


class FlashChamberMode(str, Enum):
    WATER_FLOW = "WATER_FLOW"
    VAPOR_QUANTITY = "VAPOR_QUANTITY"


class WaterType(str, Enum):
    SEAWATER = "SEAWATER"
    DM_WATER = "DM_WATER"


class VaporVelocityStatus(str, Enum):
    OK = "OK"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class NozzleType(str, Enum):
    INLET = "inlet"
    OUTLET = "outlet"
    VAPOR = "vapor"


@dataclass(frozen=True)
class FlashChamberInput:
    """Flash chamber design basis; the defaults describe a 100 t/h seawater chamber at 200 mbar."""

    mode: FlashChamberMode = FlashChamberMode.WATER_FLOW
    water_type: WaterType = WaterType.SEAWATER
    flow_rate_unit: FlowRateUnit = FlowRateUnit.TON_HR
    operating_pressure: float = 200.0  # mbar abs
    water_flow_rate: float | None = 100.0  # in flow_rate_unit, WATER_FLOW mode
    vapor_quantity: float | None = None  # in flow_rate_unit, VAPOR_QUANTITY mode
    inlet_temperature: float = 70.0  # °C
    salinity: float = 35000.0  # ppm, ignored for DM water
    retention_time: float = 2.5  # min
    flashing_zone_height: float = 500.0  # mm
    spray_angle: float = 90.0  # deg, full cone angle
    inlet_water_velocity: float = 2.5  # m/s
    outlet_water_velocity: float = 0.05  # m/s
    vapor_velocity: float = 20.0  # m/s
    pump_centerline_above_ffl: float = 0.6  # m
    operating_level_above_pump: float = 4.0  # m
    operating_level_ratio: float = 0.5  # share of the retention zone below the operating level
    btl_gap_below_lgl: float = 0.1  # m
    user_diameter: float | None = None  # mm
    auto_calculate_diameter: bool = True

    @property
    def effective_salinity(self) -> float:
        return 0.0 if WaterType(self.water_type) is WaterType.DM_WATER else self.salinity


@dataclass(frozen=True)
class HeatMassBalanceRow:
    stream: str
    flow_rate: float  # ton/hr
    temperature: float  # °C
    pressure: float  # mbar abs
    enthalpy: float  # kJ/kg
    heat_duty: float  # kW


@dataclass(frozen=True)
class HeatMassBalance:
    inlet: HeatMassBalanceRow
    vapor: HeatMassBalanceRow
    brine: HeatMassBalanceRow
    heat_input: float  # kW
    heat_output: float  # kW
    balance_error: float  # %
    is_balanced: bool

    @property
    def rows(self) -> tuple[HeatMassBalanceRow, ...]:
        return self.inlet, self.vapor, self.brine


@dataclass(frozen=True)
class ChamberSizing:
    diameter: float  # mm
    cross_section_area: float  # m²
    retention_zone_height: float  # mm
    flashing_zone_height: float  # mm
    spray_zone_height: float  # mm
    total_height: float  # mm
    total_volume: float  # m³
    liquid_holdup_volume: float  # m³
    vapor_velocity: float  # m/s
    vapor_velocity_status: VaporVelocityStatus
    vapor_loading: float  # ton/hr/m²


@dataclass(frozen=True)
class NozzleSizing:
    type: NozzleType
    name: str
    required_area: float  # mm²
    calculated_diameter: float  # mm
    selected_pipe_size: str
    nps: str
    actual_id: float  # mm
    actual_velocity: float  # m/s
    velocity_status: VelocityStatus
    velocity_limits: tuple[float, float]


@dataclass(frozen=True)
class NozzleElevations:
    inlet: float
    vapor_outlet: float
    brine_outlet: float


@dataclass(frozen=True)
class FlashChamberElevations:
    """Elevations in m with the bottom tangent line at 0; floor and pump sit below it."""

    ffl: float
    pump_centerline: float
    btl: float
    lg_low: float
    operating_level: float
    lg_high: float
    flashing_zone_bottom: float
    flashing_zone_top: float
    ttl: float
    nozzle_elevations: NozzleElevations
    retention_zone_height: float
    flashing_zone_height: float
    spray_zone_height: float


@dataclass(frozen=True)
class NPSHaAtLevel:
    level_name: str
    elevation: float  # m
    static_head: float  # m
    npsh_available: float  # m


@dataclass(frozen=True)
class FlashChamberNPSHa:
    at_lgl: NPSHaAtLevel
    at_operating: NPSHaAtLevel
    at_lgh: NPSHaAtLevel
    chamber_pressure_head: float
    vapor_pressure_head: float
    friction_loss: float
    recommended_npsh_margin: float
    recommendation: str


@dataclass(frozen=True)
class CalculationMetadata:
    steam_table_source: str
    seawater_source: str = "MIT seawater (Sharqawy et al. 2010)"
    calculator_version: str = CALCULATOR_VERSION


@dataclass(frozen=True)
class FlashChamberResult:
    inputs: FlashChamberInput
    heat_mass_balance: HeatMassBalance
    chamber_sizing: ChamberSizing
    nozzles: tuple[NozzleSizing, ...]
    npsha: FlashChamberNPSHa
    elevations: FlashChamberElevations
    metadata: CalculationMetadata
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def nozzle(self, nozzle_type: NozzleType | str) -> NozzleSizing:
        nozzle_type = NozzleType(nozzle_type)
        return next(n for n in self.nozzles if n.type is nozzle_type)


def _out_of_band(value: float, limits: tuple[float, float]) -> bool:
    return value < limits[0] or value > limits[1]


def _effective_saturation(inp: FlashChamberInput) -> tuple[float, float]:
    """(pure water Tsat, Tsat + BPE) at the chamber pressure."""
    t_sat_pure = properties.saturation_temperature(mbar_to_bar(inp.operating_pressure))
    bpe = properties.boiling_point_elevation(inp.effective_salinity, t_sat_pure)
    return t_sat_pure, t_sat_pure + bpe


def validate_flash_chamber_input(inp: FlashChamberInput) -> ValidationResult:
    errors = []
    warnings = []
    mode = FlashChamberMode(inp.mode)
    water_type = WaterType(inp.water_type)

    p_min, p_max = PRESSURE_LIMITS_MBAR
    pressure_ok = p_min <= inp.operating_pressure <= p_max
    if not pressure_ok:
        errors.append(f"Operating pressure must be between {p_min:g} and {p_max:g} mbar abs")

    if mode is FlashChamberMode.WATER_FLOW:
        if not inp.water_flow_rate or inp.water_flow_rate <= 0:
            errors.append("Water flow rate is required when mode is WATER_FLOW")
        else:
            flow = to_ton_hr(inp.water_flow_rate, inp.flow_rate_unit)
            if _out_of_band(flow, WATER_FLOW_LIMITS):
                errors.append(
                    f"Water flow rate must be between {WATER_FLOW_LIMITS[0]:g} and "
                    f"{WATER_FLOW_LIMITS[1]:g} ton/hr (converted value: {flow:.2f} ton/hr)"
                )
    else:
        if not inp.vapor_quantity or inp.vapor_quantity <= 0:
            errors.append("Vapor quantity is required when mode is VAPOR_QUANTITY")
        else:
            flow = to_ton_hr(inp.vapor_quantity, inp.flow_rate_unit)
            if _out_of_band(flow, VAPOR_FLOW_LIMITS):
                errors.append(
                    f"Vapor quantity must be between {VAPOR_FLOW_LIMITS[0]:g} and "
                    f"{VAPOR_FLOW_LIMITS[1]:g} ton/hr (converted value: {flow:.2f} ton/hr)"
                )

    if water_type is WaterType.SEAWATER and inp.salinity < LOW_SEAWATER_SALINITY_PPM:
        warnings.append(
            "Seawater salinity is unusually low (< 1000 ppm). Consider using DM Water type."
        )
    if water_type is WaterType.DM_WATER and inp.salinity > 0:
        warnings.append("DM water should have zero salinity. Salinity will be treated as 0.")

    salinity_ok = not _out_of_band(inp.effective_salinity, SALINITY_LIMITS_PPM)
    if not salinity_ok:
        s_min, s_max = SALINITY_LIMITS_PPM
        errors.append(f"Salinity must be between {s_min:,.0f} and {s_max:,.0f} ppm")
    t_max = properties.SEAWATER_T_RANGE_C[1]
    if inp.effective_salinity > 0 and inp.inlet_temperature > t_max:
        errors.append(f"Inlet temperature must not exceed {t_max:g}°C for seawater")

    if _out_of_band(inp.spray_angle, SPRAY_ANGLE_LIMITS):
        a_min, a_max = SPRAY_ANGLE_LIMITS
        errors.append(f"Spray angle must be between {a_min:g} and {a_max:g} degrees")
    if inp.retention_time <= 0:
        errors.append("Retention time must be positive")
    if inp.flashing_zone_height <= 0:
        errors.append("Flashing zone height must be positive")

    # saturation lookups need a pressure and salinity the property tables accept
    if pressure_ok and salinity_ok:
        _, t_sat = _effective_saturation(inp)
        if inp.inlet_temperature <= t_sat:
            errors.append(
                f"Inlet temperature ({inp.inlet_temperature:g}°C) must be greater than saturation "
                f"temperature ({t_sat:.1f}°C including BPE) for flash evaporation"
            )
        approach = inp.inlet_temperature - t_sat
        if approach < MIN_TEMPERATURE_APPROACH:
            warnings.append(
                f"Small temperature approach ({approach:.1f}°C) may result in low vapor production"
            )

    for label, velocity, limits in (
        ("Inlet", inp.inlet_water_velocity, INLET_VELOCITY_LIMITS),
        ("Outlet", inp.outlet_water_velocity, OUTLET_VELOCITY_LIMITS),
        ("Vapor", inp.vapor_velocity, VAPOR_VELOCITY_LIMITS),
    ):
        if _out_of_band(velocity, limits):
            warnings.append(
                f"{label} velocity {velocity:g} m/s is outside typical range "
                f"({limits[0]:g}-{limits[1]:g} m/s)"
            )

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))


def calculate_flash_chamber(
    inp: FlashChamberInput, pipes: Sequence[PipeVariant] | None = None
) -> FlashChamberResult:
    validation = validate_flash_chamber_input(inp)
    validation.raise_for_errors(prefix="Invalid input: ")
    warnings = list(validation.warnings)

    pipes = SCHEDULE_40_PIPES if pipes is None else pipes
    mode = FlashChamberMode(inp.mode)
    salinity = inp.effective_salinity
    p_bar = mbar_to_bar(inp.operating_pressure)
    t_sat_pure, t_sat = _effective_saturation(inp)

    h_inlet = properties.seawater_enthalpy(salinity, inp.inlet_temperature)
    h_brine = properties.seawater_enthalpy(salinity, t_sat)
    h_vapor = properties.enthalpy_vapor(t_sat_pure)
    if mode is FlashChamberMode.WATER_FLOW:
        water_flow = to_ton_hr(inp.water_flow_rate, inp.flow_rate_unit)
        vapor_flow = water_flow * (h_inlet - h_brine) / (h_vapor - h_brine)
    else:
        vapor_flow = to_ton_hr(inp.vapor_quantity, inp.flow_rate_unit)
        water_flow = vapor_flow * (h_vapor - h_brine) / (h_inlet - h_brine)
    brine_flow = water_flow - vapor_flow

    if WaterType(inp.water_type) is WaterType.DM_WATER:
        brine_salinity = 0.0
    else:
        brine_salinity = properties.brine_salinity(salinity, water_flow, vapor_flow)
    if brine_salinity > HIGH_BRINE_SALINITY_PPM:
        warnings.append(
            f"Brine salinity ({brine_salinity / 1000:.1f} g/kg) is very high. "
            "Consider scaling prevention."
        )

    balance = heat_mass_balance(
        inp, water_flow, vapor_flow, brine_flow, t_sat, t_sat_pure, brine_salinity
    )

    sizing = size_chamber(inp, water_flow, vapor_flow, t_sat_pure)
    if sizing.vapor_velocity_status is VaporVelocityStatus.HIGH:
        warnings.append(
            f"Vapor velocity ({sizing.vapor_velocity:.2f} m/s) is elevated. "
            "Consider a larger diameter or mist eliminator."
        )
    elif sizing.vapor_velocity_status is VaporVelocityStatus.VERY_HIGH:
        warnings.append(
            f"Vapor velocity ({sizing.vapor_velocity:.2f} m/s) is too high, risk of liquid "
            "entrainment. Increase chamber diameter."
        )

    nozzles = size_nozzles(
        inp, water_flow, brine_flow, vapor_flow, t_sat, t_sat_pure, brine_salinity, pipes
    )
    for nozzle in nozzles:
        if nozzle.velocity_status is VelocityStatus.HIGH:
            warnings.append(
                f"{nozzle.name} velocity ({nozzle.actual_velocity:.2f} m/s) "
                "exceeds recommended maximum"
            )
        elif nozzle.velocity_status is VelocityStatus.LOW:
            warnings.append(
                f"{nozzle.name} velocity ({nozzle.actual_velocity:.2f} m/s) "
                "is below recommended minimum"
            )

    elevations = chamber_elevations(sizing, inp)
    npsha = chamber_npsha(elevations, p_bar, t_sat_pure)

    logger.debug(
        "Flash chamber: feed %.2f t/h, vapour %.3f t/h, D=%.0f mm, H=%.0f mm, NPSHa(LG-L)=%.2f m",
        water_flow,
        vapor_flow,
        sizing.diameter,
        sizing.total_height,
        npsha.at_lgl.npsh_available,
    )
    for warning in warnings:
        logger.info(warning)

    return FlashChamberResult(
        inputs=inp,
        heat_mass_balance=balance,
        chamber_sizing=sizing,
        nozzles=nozzles,
        npsha=npsha,
        elevations=elevations,
        metadata=CalculationMetadata(steam_table_source=properties.configure_property_backend()),
        warnings=tuple(warnings),
    )


def _duty_kw(flow_ton_hr: float, enthalpy: float) -> float:
    return flow_ton_hr * 1000 * enthalpy / 3600


def heat_mass_balance(
    inp: FlashChamberInput,
    water_flow: float,
    vapor_flow: float,
    brine_flow: float,
    t_sat: float,
    t_sat_pure: float,
    brine_salinity: float,
) -> HeatMassBalance:
    """Stream table of the chamber; the vapour leaves at the pure-water saturation temperature."""

    seawater = WaterType(inp.water_type) is WaterType.SEAWATER
    h_inlet = properties.seawater_enthalpy(inp.effective_salinity, inp.inlet_temperature)
    h_brine = properties.seawater_enthalpy(brine_salinity, t_sat)
    h_vapor = properties.enthalpy_vapor(t_sat_pure)

    inlet = HeatMassBalanceRow(
        stream="Seawater Inlet" if seawater else "DM Water Inlet",
        flow_rate=water_flow,
        temperature=inp.inlet_temperature,
        pressure=inp.operating_pressure + INLET_PRESSURE_ALLOWANCE_MBAR,
        enthalpy=h_inlet,
        heat_duty=_duty_kw(water_flow, h_inlet),
    )
    vapor = HeatMassBalanceRow(
        stream="Vapor Out",
        flow_rate=vapor_flow,
        temperature=t_sat_pure,
        pressure=inp.operating_pressure,
        enthalpy=h_vapor,
        heat_duty=_duty_kw(vapor_flow, h_vapor),
    )
    brine = HeatMassBalanceRow(
        stream="Brine Out" if seawater else "Water Out",
        flow_rate=brine_flow,
        temperature=t_sat,
        pressure=inp.operating_pressure,
        enthalpy=h_brine,
        heat_duty=_duty_kw(brine_flow, h_brine),
    )

    heat_in = inlet.heat_duty
    heat_out = vapor.heat_duty + brine.heat_duty
    error = abs((heat_in - heat_out) / heat_in) * 100
    return HeatMassBalance(
        inlet=inlet,
        vapor=vapor,
        brine=brine,
        heat_input=heat_in,
        heat_output=heat_out,
        balance_error=error,
        is_balanced=bool(error < BALANCE_TOLERANCE_PERCENT),
    )


def auto_diameter(water_flow: float) -> float:
    """Chamber diameter (mm) for `water_flow` t/h at the cross-section loading, rounded up."""
    area = water_flow / CROSS_SECTION_LOADING
    diameter_mm = np.sqrt(4 * area / np.pi) * 1000
    return math.ceil(diameter_mm / DIAMETER_ROUNDING_MM) * DIAMETER_ROUNDING_MM


def vapor_velocity_status(velocity: float) -> VaporVelocityStatus:
    if velocity <= VAPOR_VELOCITY_OK:
        return VaporVelocityStatus.OK
    if velocity <= VAPOR_VELOCITY_HIGH:
        return VaporVelocityStatus.HIGH
    return VaporVelocityStatus.VERY_HIGH


def size_chamber(
    inp: FlashChamberInput, water_flow: float, vapor_flow: float, t_sat_pure: float
) -> ChamberSizing:
    if not inp.auto_calculate_diameter and inp.user_diameter:
        diameter = float(inp.user_diameter)
    else:
        diameter = float(auto_diameter(water_flow))
    area = np.pi * (diameter / 1000) ** 2 / 4

    inlet_density = properties.seawater_density(inp.effective_salinity, inp.inlet_temperature)
    holdup = water_flow * 1000 / (inlet_density * 60) * inp.retention_time  # m³
    retention_mm = holdup / area * 1000

    # cone from the spray nozzle reaches the wall after radius / tan(half angle)
    half_angle = np.radians(inp.spray_angle / 2)
    spray_mm = (diameter / 2) / np.tan(half_angle)

    total_mm = retention_mm + inp.flashing_zone_height + spray_mm

    vapor_q = ton_hr_to_m3_s(vapor_flow, properties.density_vapor(t_sat_pure))
    velocity = vapor_q / area

    return ChamberSizing(
        diameter=diameter,
        cross_section_area=float(area),
        retention_zone_height=round(retention_mm),
        flashing_zone_height=inp.flashing_zone_height,
        spray_zone_height=round(spray_mm),
        total_height=round(total_mm),
        total_volume=float(area * total_mm / 1000),
        liquid_holdup_volume=holdup,
        vapor_velocity=float(velocity),
        vapor_velocity_status=vapor_velocity_status(velocity),
        vapor_loading=float(vapor_flow / area),
    )


def _nozzle(
    nozzle_type: NozzleType,
    name: str,
    flow: float,
    density: float,
    target_velocity: float,
    limits: tuple[float, float],
    pipes: Sequence[PipeVariant],
) -> NozzleSizing:
    required = calculate_required_pipe_area(flow, density, target_velocity)
    selected = select_pipe_by_velocity(
        ton_hr_to_m3_s(flow, density), target_velocity, limits, pipes
    )
    return NozzleSizing(
        type=nozzle_type,
        name=name,
        required_area=required,
        calculated_diameter=float(np.sqrt(4 * required / np.pi)),
        selected_pipe_size=selected.display_name,
        nps=selected.nps,
        actual_id=selected.id_mm,
        actual_velocity=selected.actual_velocity,
        velocity_status=selected.velocity_status,
        velocity_limits=limits,
    )


def size_nozzles(
    inp: FlashChamberInput,
    water_flow: float,
    brine_flow: float,
    vapor_flow: float,
    t_sat: float,
    t_sat_pure: float,
    brine_salinity: float,
    pipes: Sequence[PipeVariant],
) -> tuple[NozzleSizing, ...]:
    seawater = WaterType(inp.water_type) is WaterType.SEAWATER
    inlet_density = properties.seawater_density(inp.effective_salinity, inp.inlet_temperature)
    brine_density = properties.seawater_density(brine_salinity, t_sat)
    vapor_density = properties.density_vapor(t_sat_pure)
    return (
        _nozzle(
            NozzleType.INLET,
            "Seawater Inlet" if seawater else "DM Water Inlet",
            water_flow,
            inlet_density,
            inp.inlet_water_velocity,
            INLET_VELOCITY_LIMITS,
            pipes,
        ),
        _nozzle(
            NozzleType.OUTLET,
            "Brine Outlet" if seawater else "Water Outlet",
            brine_flow,
            brine_density,
            inp.outlet_water_velocity,
            OUTLET_VELOCITY_LIMITS,
            pipes,
        ),
        _nozzle(
            NozzleType.VAPOR,
            "Vapor Outlet",
            vapor_flow,
            vapor_density,
            inp.vapor_velocity,
            VAPOR_VELOCITY_LIMITS,
            pipes,
        ),
    )


def chamber_elevations(sizing: ChamberSizing, inp: FlashChamberInput) -> FlashChamberElevations:
    """Vertical layout of the chamber and its bottom pump, shifted so that BTL = 0.

    The operating level sits `operating_level_above_pump` over the pump centerline and splits
    the retention zone by `operating_level_ratio`; LG-L and LG-H bound that zone.
    """

    retention = sizing.retention_zone_height / 1000
    flashing = sizing.flashing_zone_height / 1000
    spray = sizing.spray_zone_height / 1000
    ratio = inp.operating_level_ratio

    # laid out from the floor first
    pump = inp.pump_centerline_above_ffl
    operating = pump + inp.operating_level_above_pump
    lg_low = operating - retention * ratio
    lg_high = operating + retention * (1 - ratio)
    btl = lg_low - inp.btl_gap_below_lgl
    flash_top = lg_high + flashing
    ttl = flash_top + spray

    def shift(z: float) -> float:
        return z - btl

    return FlashChamberElevations(
        ffl=shift(0.0),
        pump_centerline=shift(pump),
        btl=0.0,
        lg_low=shift(lg_low),
        operating_level=shift(operating),
        lg_high=shift(lg_high),
        flashing_zone_bottom=shift(lg_high),
        flashing_zone_top=shift(flash_top),
        ttl=shift(ttl),
        nozzle_elevations=NozzleElevations(
            inlet=shift(flash_top + spray * 0.5),
            vapor_outlet=shift(ttl),
            brine_outlet=0.0,
        ),
        retention_zone_height=retention,
        flashing_zone_height=flashing,
        spray_zone_height=spray,
    )


def npsha_recommendation(at_lgl: NPSHaAtLevel, at_operating: NPSHaAtLevel) -> str:
    worst = at_lgl.npsh_available
    if worst < 0:
        return (
            f"NPSHa at LG-L ({worst:.2f}m) is NEGATIVE. Pump cannot operate at minimum level. "
            "Submersible pump or barometric leg required."
        )
    if worst < NPSHA_CRITICAL:
        return (
            f"NPSHa at LG-L ({worst:.2f}m) is critically low. "
            "Submersible pump strongly recommended."
        )
    if worst < NPSHA_MARGINAL:
        return (
            f"NPSHa at LG-L ({worst:.2f}m) is marginal for vacuum service. "
            "Low-NPSH pump recommended."
        )
    if worst < NPSHA_GOOD:
        return (
            f"NPSHa at LG-L ({worst:.2f}m) is adequate. Select pump with NPSHr < "
            f"{worst - MIN_NPSH_MARGIN:.1f}m. Operating level provides "
            f"{at_operating.npsh_available:.2f}m."
        )
    return (
        f"NPSHa at LG-L ({worst:.2f}m) is good for vacuum service. Operating level provides "
        f"{at_operating.npsh_available:.2f}m."
    )


def chamber_npsha(
    elevations: FlashChamberElevations, chamber_pressure_bar: float, t_sat_pure: float
) -> FlashChamberNPSHa:
    """NPSHa of the bottom pump at the three gauge levels.

    The chamber is closed under vacuum, so the chamber pressure is the only driving pressure;
    the atmosphere does not act on the liquid.
    """

    pressure_head = bar_to_water_head(chamber_pressure_bar)
    vapor_head = bar_to_water_head(properties.saturation_pressure(t_sat_pure))

    def at_level(name: str, elevation: float) -> NPSHaAtLevel:
        static = elevation - elevations.pump_centerline
        return NPSHaAtLevel(
            level_name=name,
            elevation=elevation,
            static_head=static,
            npsh_available=static + pressure_head - vapor_head - ESTIMATED_FRICTION_LOSS,
        )

    at_lgl = at_level("LG-L (Low Level)", elevations.lg_low)
    at_operating = at_level("Operating Level", elevations.operating_level)
    at_lgh = at_level("LG-H (High Level)", elevations.lg_high)
    return FlashChamberNPSHa(
        at_lgl=at_lgl,
        at_operating=at_operating,
        at_lgh=at_lgh,
        chamber_pressure_head=pressure_head,
        vapor_pressure_head=vapor_head,
        friction_loss=ESTIMATED_FRICTION_LOSS,
        recommended_npsh_margin=MIN_NPSH_MARGIN,
        recommendation=npsha_recommendation(at_lgl, at_operating),
    )


__all__ = [
    "CROSS_SECTION_LOADING",
    "ESTIMATED_FRICTION_LOSS",
    "MIN_NPSH_MARGIN",
    "CALCULATOR_VERSION",
    "FlashChamberMode",
    "WaterType",
    "VaporVelocityStatus",
    "NozzleType",
    "FlashChamberInput",
    "HeatMassBalanceRow",
    "HeatMassBalance",
    "ChamberSizing",
    "NozzleSizing",
    "NozzleElevations",
    "FlashChamberElevations",
    "NPSHaAtLevel",
    "FlashChamberNPSHa",
    "CalculationMetadata",
    "FlashChamberResult",
    "validate_flash_chamber_input",
    "calculate_flash_chamber",
    "heat_mass_balance",
    "auto_diameter",
    "vapor_velocity_status",
    "size_chamber",
    "size_nozzles",
    "chamber_elevations",
    "npsha_recommendation",
    "chamber_npsha",
]

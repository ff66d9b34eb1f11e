"""
pipes.py

Standard pipe catalog (ASME B36.10) and the sizing rules used for nozzles, siphons
and suction lines.

A catalog is an ordered sequence of :class:`PipeVariant` sorted by nominal size (and therefore by
flow area within one schedule), one entry per NPS. Static schedule 10/40/80 tables ship with the
package; other sources are read once per schedule and memoized.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from functools import cached_property

import numpy as np

from desal_thermal.exceptions import EmptyCatalogError
from desal_thermal.units import ton_hr_to_m3_s

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE = "40"

NPS_ORDER = (
    "1/8",
    "1/4",
    "3/8",
    "1/2",
    "3/4",
    "1",
    "1-1/4",
    "1-1/2",
    "2",
    "2-1/2",
    "3",
    "3-1/2",
    "4",
    "5",
    "6",
    "8",
    "10",
    "12",
    "14",
    "16",
    "18",
    "20",
    "22",
    "24",
    "26",
    "28",
    "30",
    "32",
    "34",
    "36",
    "42",
    "48",
)
_UNKNOWN_NPS_INDEX = 999

SCHEDULE_TYPE_ALIASES = {"STD": "40", "XS": "80"}


class VelocityStatus(str, Enum):
    OK = "OK"
    HIGH = "HIGH"
    LOW = "LOW"


@dataclass(frozen=True)
class PipeVariant:
    """One pipe size of one schedule. Dimensions in mm, weight in kg/m.

    ``custom_id_mm`` marks a non-standard (e.g. plate-formed) pipe whose inner diameter is given
    directly instead of being derived from OD and wall thickness.
    """

    nps: str
    dn: str
    schedule: str
    od_mm: float
    wt_mm: float
    weight_kgm: float = 0.0
    schedule_type: str | None = None
    custom_id_mm: float | None = None

    @cached_property
    def id_mm(self) -> float:
        if self.custom_id_mm is not None:
            return self.custom_id_mm
        return self.od_mm - 2 * self.wt_mm

    @cached_property
    def area_mm2(self) -> float:
        return np.pi * (self.id_mm / 2) ** 2

    @property
    def is_custom(self) -> bool:
        return self.custom_id_mm is not None


@dataclass(frozen=True)
class SelectedPipe:
    """Result of a pipe selection; velocity fields are set by velocity-based selection only."""

    pipe: PipeVariant
    display_name: str
    is_exact_match: bool
    actual_velocity: float | None = None
    velocity_status: VelocityStatus | None = None

    @property
    def nps(self) -> str:
        return self.pipe.nps

    @property
    def dn(self) -> str:
        return self.pipe.dn

    @property
    def id_mm(self) -> float:
        return self.pipe.id_mm

    @property
    def area_mm2(self) -> float:
        return self.pipe.area_mm2

    @property
    def is_max_size(self) -> bool:
        return "(MAX)" in self.display_name


def _static(schedule: str, rows) -> tuple[PipeVariant, ...]:
    return tuple(
        PipeVariant(nps=nps, dn=dn, schedule=schedule, od_mm=od, wt_mm=wt, weight_kgm=weight)
        for nps, dn, od, wt, weight in rows
    )


# (NPS, DN, OD mm, WT mm, kg/m)
SCHEDULE_40_PIPES = _static(
    "40",
    [
        ("1/2", "15", 21.34, 2.77, 1.27),
        ("3/4", "20", 26.67, 2.87, 1.68),
        ("1", "25", 33.4, 3.38, 2.5),
        ("1-1/4", "32", 42.16, 3.56, 3.38),
        ("1-1/2", "40", 48.26, 3.68, 4.05),
        ("2", "50", 60.33, 3.91, 5.43),
        ("2-1/2", "65", 73.03, 5.16, 8.62),
        ("3", "80", 88.9, 5.49, 11.28),
        ("4", "100", 114.3, 6.02, 16.07),
        ("5", "125", 141.3, 6.55, 21.76),
        ("6", "150", 168.28, 7.11, 28.26),
        ("8", "200", 219.08, 8.18, 42.55),
        ("10", "250", 273.05, 9.27, 60.29),
        ("12", "300", 323.85, 9.53, 73.78),
        ("14", "350", 355.6, 9.53, 81.25),
        ("16", "400", 406.4, 9.53, 93.17),
        ("18", "450", 457.2, 9.53, 105.09),
        ("20", "500", 508.0, 9.53, 117.01),
        ("24", "600", 609.6, 9.53, 140.85),
    ],
)

# Seed data stops at 12"
SCHEDULE_10_PIPES = _static(
    "10",
    [
        ("1/2", "15", 21.34, 2.11, 1.0),
        ("3/4", "20", 26.67, 2.11, 1.28),
        ("1", "25", 33.4, 2.77, 2.09),
        ("1-1/4", "32", 42.16, 2.77, 2.69),
        ("1-1/2", "40", 48.26, 2.77, 3.1),
        ("2", "50", 60.32, 2.77, 3.93),
        ("2-1/2", "65", 73.02, 3.05, 5.26),
        ("3", "80", 88.9, 3.05, 6.45),
        ("4", "100", 114.3, 3.05, 8.37),
        ("6", "150", 168.27, 3.4, 13.82),
        ("8", "200", 219.07, 3.76, 19.96),
        ("10", "250", 273.05, 4.19, 27.78),
        ("12", "300", 323.85, 4.57, 35.98),
    ],
)

SCHEDULE_80_PIPES = _static(
    "80",
    [
        ("1/2", "15", 21.34, 3.73, 1.62),
        ("3/4", "20", 26.67, 3.91, 2.19),
        ("1", "25", 33.4, 4.55, 3.24),
        ("1-1/4", "32", 42.16, 4.85, 4.46),
        ("1-1/2", "40", 48.26, 5.08, 5.41),
        ("2", "50", 60.32, 5.54, 7.48),
        ("2-1/2", "65", 73.02, 7.01, 11.41),
        ("3", "80", 88.9, 7.62, 15.27),
        ("4", "100", 114.3, 8.56, 22.31),
        ("6", "150", 168.27, 10.97, 42.56),
        ("8", "200", 219.07, 12.7, 64.64),
        ("10", "250", 273.05, 15.06, 95.73),
        ("12", "300", 323.85, 17.45, 131.84),
    ],
)

_STATIC_TABLES = {
    "10": SCHEDULE_10_PIPES,
    "40": SCHEDULE_40_PIPES,
    "80": SCHEDULE_80_PIPES,
}


def get_static_pipes(schedule: str) -> tuple[PipeVariant, ...]:
    """Static table for `schedule`; schedules without a table fall back to schedule 40."""
    return _STATIC_TABLES.get(str(schedule), SCHEDULE_40_PIPES)


def nps_sort_index(nps: str) -> int:
    try:
        return NPS_ORDER.index(nps)
    except ValueError:
        return _UNKNOWN_NPS_INDEX


def parse_nps(nps: str) -> float:
    """Numeric nominal size in inches: "1-1/4" -> 1.25, "3/4" -> 0.75, "6" -> 6.0."""
    whole, _, frac = nps.strip().partition("-")
    if not frac and "/" in whole:
        whole, frac = "0", whole
    value = Fraction(whole or "0")
    if frac:
        value += Fraction(frac)
    return float(value)


def _is_pipe_record(record: object) -> bool:
    if not isinstance(record, Mapping):
        return False
    return (
        isinstance(record.get("nps"), str)
        and isinstance(record.get("dn"), str)
        and isinstance(record.get("od_mm"), (int, float))
        and isinstance(record.get("wt_mm"), (int, float))
    )


def build_pipe_catalog(
    records: Iterable[Mapping[str, object]], schedule: str = DEFAULT_SCHEDULE
) -> tuple[PipeVariant, ...]:
    """Turn material-database pipe records into a catalog for one schedule.

    Records match on ``schedule`` or on a ``scheduleType`` alias (STD, XS). Malformed records are
    skipped. The result is sorted by NPS and holds the first record seen for each NPS.
    """

    pipes = []
    for record in records:
        if not _is_pipe_record(record):
            continue
        schedule_type = record.get("scheduleType")
        matches = record.get("schedule") == schedule or (
            schedule_type is not None and SCHEDULE_TYPE_ALIASES.get(schedule_type) == schedule
        )
        if not matches:
            continue
        pipes.append(
            PipeVariant(
                nps=record["nps"],
                dn=record["dn"],
                schedule=schedule,
                od_mm=float(record["od_mm"]),
                wt_mm=float(record["wt_mm"]),
                weight_kgm=float(record.get("weight_kgm") or 0.0),
                schedule_type=schedule_type,
            )
        )

    pipes.sort(key=lambda p: nps_sort_index(p.nps))
    unique = []
    seen = set()
    for pipe in pipes:
        if pipe.nps not in seen:
            seen.add(pipe.nps)
            unique.append(pipe)
    return tuple(unique)


_PIPE_CACHE: dict[str, tuple[PipeVariant, ...]] = {}


def get_pipes_by_schedule(
    source: Callable[[], Iterable[Mapping[str, object]]] | None = None,
    schedule: str = DEFAULT_SCHEDULE,
) -> tuple[PipeVariant, ...]:
    """Catalog for `schedule`, loaded from `source` on first use and cached per schedule.

    `source` returns pipe records (see :func:`build_pipe_catalog`); without one the static tables
    are used. Concurrent first calls may both load; loading is deterministic so the last write wins.
    """

    cached = _PIPE_CACHE.get(schedule)
    if cached is not None:
        return cached

    if source is None:
        catalog = get_static_pipes(schedule)
    else:
        catalog = build_pipe_catalog(source(), schedule)
        logger.debug("Loaded %d schedule %s pipes from source", len(catalog), schedule)
    _PIPE_CACHE[schedule] = catalog
    return catalog


def clear_pipe_cache() -> None:
    _PIPE_CACHE.clear()


def select_pipe_size(
    required_area_mm2: float,
    pipes: Sequence[PipeVariant] | None = None,
    schedule: str = DEFAULT_SCHEDULE,
) -> SelectedPipe:
    """Smallest pipe whose flow area is at least `required_area_mm2`.

    When nothing is large enough the largest pipe is returned with "(MAX)" in its display name.
    """

    pipes = SCHEDULE_40_PIPES if pipes is None else pipes
    for pipe in pipes:
        if pipe.area_mm2 >= required_area_mm2:
            return SelectedPipe(
                pipe=pipe,
                display_name=f'{pipe.nps}" Sch {schedule}',
                is_exact_match=bool(pipe.area_mm2 == required_area_mm2),
            )

    if not pipes:
        raise EmptyCatalogError("No pipes available for selection")
    largest = pipes[-1]
    return SelectedPipe(
        pipe=largest,
        display_name=f'{largest.nps}" Sch {schedule} (MAX)',
        is_exact_match=False,
    )


def select_pipe_by_velocity(
    volumetric_flow_m3s: float,
    target_velocity: float,
    velocity_limits: tuple[float, float],
    pipes: Sequence[PipeVariant] | None = None,
    schedule: str = DEFAULT_SCHEDULE,
) -> SelectedPipe:
    """Size for `target_velocity` (m/s), then report the actual velocity against (min, max)."""

    v_min, v_max = velocity_limits
    required_area_mm2 = volumetric_flow_m3s / target_velocity * 1e6
    selected = select_pipe_size(required_area_mm2, pipes, schedule)

    actual_velocity = volumetric_flow_m3s / (selected.area_mm2 / 1e6)
    if actual_velocity > v_max:
        status = VelocityStatus.HIGH
    elif actual_velocity < v_min:
        status = VelocityStatus.LOW
    else:
        status = VelocityStatus.OK

    return SelectedPipe(
        pipe=selected.pipe,
        display_name=selected.display_name,
        is_exact_match=selected.is_exact_match,
        actual_velocity=actual_velocity,
        velocity_status=status,
    )


def calculate_required_pipe_area(mass_flow_ton_hr: float, density: float, velocity: float) -> float:
    """Flow area (mm²) that carries `mass_flow_ton_hr` at `velocity` (m/s)."""
    return ton_hr_to_m3_s(mass_flow_ton_hr, density) / velocity * 1e6


def calculate_velocity(mass_flow_ton_hr: float, density: float, pipe: PipeVariant) -> float:
    return ton_hr_to_m3_s(mass_flow_ton_hr, density) / (pipe.area_mm2 / 1e6)


def get_pipe_by_nps(nps: str, pipes: Sequence[PipeVariant] | None = None) -> PipeVariant | None:
    pipes = SCHEDULE_40_PIPES if pipes is None else pipes
    return next((p for p in pipes if p.nps == nps), None)


def get_pipe_by_dn(dn: str, pipes: Sequence[PipeVariant] | None = None) -> PipeVariant | None:
    pipes = SCHEDULE_40_PIPES if pipes is None else pipes
    return next((p for p in pipes if p.dn == dn), None)


def custom_pipe(id_mm: float, wt_mm: float) -> PipeVariant:
    """Plate-formed pipe with a user-given inner diameter (mm)."""
    if id_mm <= 0:
        raise ValueError("Custom pipe inner diameter must be positive")
    if wt_mm < 0:
        raise ValueError("Custom pipe wall thickness cannot be negative")
    return PipeVariant(
        nps="CUSTOM",
        dn=str(round(id_mm)),
        schedule="N/A",
        od_mm=id_mm + 2 * wt_mm,
        wt_mm=wt_mm,
        weight_kgm=0.0,
        custom_id_mm=id_mm,
    )


def custom_pipe_display_name(pipe: PipeVariant) -> str:
    return f"Custom (ID {pipe.id_mm:g} mm)"


__all__ = [
    "DEFAULT_SCHEDULE",
    "NPS_ORDER",
    "SCHEDULE_TYPE_ALIASES",
    "SCHEDULE_10_PIPES",
    "SCHEDULE_40_PIPES",
    "SCHEDULE_80_PIPES",
    "VelocityStatus",
    "PipeVariant",
    "SelectedPipe",
    "get_static_pipes",
    "nps_sort_index",
    "parse_nps",
    "build_pipe_catalog",
    "get_pipes_by_schedule",
    "clear_pipe_cache",
    "select_pipe_size",
    "select_pipe_by_velocity",
    "calculate_required_pipe_area",
    "calculate_velocity",
    "get_pipe_by_nps",
    "get_pipe_by_dn",
    "custom_pipe",
    "custom_pipe_display_name",
]

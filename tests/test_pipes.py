import numpy as np
import pytest

from desal_thermal.exceptions import EmptyCatalogError
from desal_thermal.pipes import (
    NPS_ORDER,
    SCHEDULE_10_PIPES,
    SCHEDULE_40_PIPES,
    SCHEDULE_80_PIPES,
    VelocityStatus,
    build_pipe_catalog,
    calculate_required_pipe_area,
    calculate_velocity,
    clear_pipe_cache,
    custom_pipe,
    custom_pipe_display_name,
    get_pipe_by_dn,
    get_pipe_by_nps,
    get_pipes_by_schedule,
    get_static_pipes,
    parse_nps,
    select_pipe_by_velocity,
    select_pipe_size,
)


@pytest.fixture(autouse=True)
def _empty_cache():
    clear_pipe_cache()
    yield
    clear_pipe_cache()


class TestStaticTables:
    @pytest.mark.parametrize("table", [SCHEDULE_10_PIPES, SCHEDULE_40_PIPES, SCHEDULE_80_PIPES])
    def test_sorted_by_area(self, table):
        areas = [p.area_mm2 for p in table]
        assert areas == sorted(areas)

    def test_schedule_40_range(self):
        sizes = [p.nps for p in SCHEDULE_40_PIPES]
        assert sizes[0] == "1/2"
        assert sizes[-1] == "24"
        assert "22" not in sizes

    def test_derived_geometry(self):
        pipe = get_pipe_by_nps("4")
        assert pipe.id_mm == pytest.approx(114.3 - 2 * 6.02)
        assert pipe.area_mm2 == pytest.approx(np.pi * (pipe.id_mm / 2) ** 2)

    def test_unknown_schedule_falls_back_to_40(self):
        assert get_static_pipes("160") is SCHEDULE_40_PIPES
        assert get_static_pipes("10") is SCHEDULE_10_PIPES

    def test_lookups(self):
        assert get_pipe_by_dn("150").nps == "6"
        assert get_pipe_by_nps("7") is None
        assert get_pipe_by_dn("999") is None


class TestParseNps:
    @pytest.mark.parametrize(
        "nps,expected", [("1-1/4", 1.25), ("3/4", 0.75), ("6", 6.0), ("2-1/2", 2.5)]
    )
    def test_parse(self, nps, expected):
        assert parse_nps(nps) == pytest.approx(expected)


class TestSelection:
    def test_smallest_pipe_that_fits(self):
        pipe_3 = get_pipe_by_nps("3")
        selected = select_pipe_size(pipe_3.area_mm2 + 1.0)
        assert selected.nps == "4"
        assert selected.display_name == '4" Sch 40'
        assert not selected.is_exact_match

    def test_exact_match(self):
        pipe_6 = get_pipe_by_nps("6")
        selected = select_pipe_size(pipe_6.area_mm2)
        assert selected.nps == "6"
        assert selected.is_exact_match

    def test_oversize_returns_largest(self):
        selected = select_pipe_size(1e9)
        assert selected.nps == "24"
        assert selected.is_max_size
        assert "(MAX)" in selected.display_name

    def test_empty_catalog(self):
        with pytest.raises(EmptyCatalogError, match="No pipes available for selection"):
            select_pipe_size(100.0, pipes=())

    @pytest.mark.parametrize("area", [10.0, 1500.0, 20000.0, 150000.0])
    def test_selected_area_covers_requirement(self, area):
        assert select_pipe_size(area).area_mm2 >= area

    def test_velocity_selection(self):
        # 0.01 m³/s at 2 m/s needs 5000 mm², a 4" pipe
        selected = select_pipe_by_velocity(0.01, 2.0, (1.0, 3.0))
        assert selected.nps == "4"
        assert selected.actual_velocity == pytest.approx(0.01 / (selected.area_mm2 / 1e6))
        assert selected.actual_velocity <= 2.0
        assert selected.velocity_status is VelocityStatus.OK

    def test_velocity_status_low(self):
        selected = select_pipe_by_velocity(0.01, 2.0, (2.0, 4.0))
        assert selected.velocity_status is VelocityStatus.LOW

    def test_velocity_status_high_when_oversized(self):
        selected = select_pipe_by_velocity(5.0, 1.0, (0.5, 2.0))
        assert selected.is_max_size
        assert selected.velocity_status is VelocityStatus.HIGH

    def test_area_and_velocity_helpers(self):
        pipe = get_pipe_by_nps("2")
        area = calculate_required_pipe_area(36.0, 1000.0, 2.0)
        assert area == pytest.approx(5000.0)
        v = calculate_velocity(36.0, 1000.0, pipe)
        assert v == pytest.approx(0.01 / (pipe.area_mm2 / 1e6))


class TestCustomPipe:
    def test_custom_dimensions(self):
        pipe = custom_pipe(700.0, 8.0)
        assert pipe.nps == "CUSTOM"
        assert pipe.schedule == "N/A"
        assert pipe.dn == "700"
        assert pipe.id_mm == 700.0
        assert pipe.od_mm == 716.0
        assert pipe.is_custom
        assert custom_pipe_display_name(pipe) == "Custom (ID 700 mm)"

    def test_invalid_custom(self):
        with pytest.raises(ValueError):
            custom_pipe(0.0, 5.0)


class TestCatalog:
    RECORDS = [
        {"nps": "6", "dn": "150", "schedule": "40", "od_mm": 168.28, "wt_mm": 7.11},
        {"nps": "2", "dn": "50", "schedule": "40", "od_mm": 60.33, "wt_mm": 3.91},
        {"nps": "4", "dn": "100", "scheduleType": "STD", "od_mm": 114.3, "wt_mm": 6.02},
        {"nps": "2", "dn": "50", "schedule": "40", "od_mm": 60.0, "wt_mm": 4.0},
        {"nps": "3", "dn": "80", "schedule": "80", "od_mm": 88.9, "wt_mm": 7.62},
        {"nps": "8", "dn": "200", "schedule": "40"},
        "not a record",
    ]

    def test_build_catalog(self):
        catalog = build_pipe_catalog(self.RECORDS, "40")
        assert [p.nps for p in catalog] == ["2", "4", "6"]
        assert catalog[0].od_mm == 60.33
        assert catalog[1].schedule_type == "STD"

    def test_catalog_order_follows_nps_order(self):
        catalog = build_pipe_catalog(self.RECORDS, "40")
        indexes = [NPS_ORDER.index(p.nps) for p in catalog]
        assert indexes == sorted(indexes)

    def test_memoized_per_schedule(self):
        calls = []

        def source():
            calls.append(1)
            return self.RECORDS

        first = get_pipes_by_schedule(source, "40")
        second = get_pipes_by_schedule(source, "40")
        assert first is second
        assert len(calls) == 1

        get_pipes_by_schedule(source, "80")
        assert len(calls) == 2

    def test_clear_cache(self):
        calls = []

        def source():
            calls.append(1)
            return self.RECORDS

        get_pipes_by_schedule(source, "40")
        clear_pipe_cache()
        get_pipes_by_schedule(source, "40")
        assert len(calls) == 2

    def test_default_source_is_static(self):
        assert get_pipes_by_schedule(schedule="80") is SCHEDULE_80_PIPES

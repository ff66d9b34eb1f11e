import pytest

from desal_thermal.units import (
    FlowRateUnit,
    PressureUnit,
    bar_to_head,
    bar_to_kpa,
    bar_to_m_h2o,
    bar_to_mbar,
    bar_to_water_head,
    head_to_bar,
    kg_hr_to_ton_hr,
    kg_s_to_ton_hr,
    kpa_to_bar,
    m3_s_to_ton_hr,
    m_h2o_to_bar,
    mbar_to_bar,
    pressure_to_bar,
    to_ton_hr,
    ton_hr_to_kg_s,
    ton_hr_to_m3_s,
    water_head_to_bar,
)


class TestFlowConversions:
    def test_ton_hr_kg_s_round_trip(self):
        assert ton_hr_to_kg_s(3.6) == pytest.approx(1.0)
        assert kg_s_to_ton_hr(ton_hr_to_kg_s(123.4)) == pytest.approx(123.4)

    def test_volumetric_flow_uses_density(self):
        # 3.6 t/h of 1000 kg/m³ water is 1 L/s
        assert ton_hr_to_m3_s(3.6, 1000.0) == pytest.approx(1e-3)
        assert m3_s_to_ton_hr(1e-3, 1000.0) == pytest.approx(3.6)

    @pytest.mark.parametrize(
        "value,unit,expected",
        [
            (100.0, FlowRateUnit.TON_HR, 100.0),
            (10.0, FlowRateUnit.KG_SEC, 36.0),
            (100000.0, FlowRateUnit.KG_HR, 100.0),
            (5.0, "KG_SEC", 18.0),
        ],
    )
    def test_to_ton_hr(self, value, unit, expected):
        assert to_ton_hr(value, unit) == pytest.approx(expected)

    def test_kg_hr(self):
        assert kg_hr_to_ton_hr(2500.0) == pytest.approx(2.5)

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValueError):
            to_ton_hr(1.0, "LB_HR")


class TestPressureAndHead:
    @pytest.mark.parametrize("pressure_bar", [0.05, 1.0, 7.3])
    @pytest.mark.parametrize("density", [980.0, 1025.0])
    def test_bar_head_round_trip(self, pressure_bar, density):
        head = bar_to_head(pressure_bar, density)
        assert head_to_bar(head, density) == pytest.approx(pressure_bar, rel=1e-6)

    def test_one_bar_of_water(self):
        assert bar_to_head(1.0, 1000.0) == pytest.approx(1e5 / (1000.0 * 9.81))

    def test_m_h2o_aliases(self):
        assert m_h2o_to_bar(10.0, 1000.0) == pytest.approx(head_to_bar(10.0, 1000.0))
        assert bar_to_m_h2o(0.5, 1000.0) == pytest.approx(bar_to_head(0.5, 1000.0))

    def test_water_head_is_density_free(self):
        assert bar_to_water_head(1.01325) == pytest.approx(10.33)
        assert water_head_to_bar(bar_to_water_head(0.2)) == pytest.approx(0.2)

    def test_pressure_units(self):
        assert mbar_to_bar(250.0) == pytest.approx(0.25)
        assert bar_to_mbar(0.25) == pytest.approx(250.0)
        assert kpa_to_bar(101.325) == pytest.approx(1.01325)
        assert bar_to_kpa(1.5) == pytest.approx(150.0)

    @pytest.mark.parametrize(
        "value,unit,expected",
        [
            (200.0, PressureUnit.MBAR_ABS, 0.2),
            (0.2, PressureUnit.BAR_ABS, 0.2),
            (20.0, PressureUnit.KPA_ABS, 0.2),
            (200.0, "mbar_abs", 0.2),
        ],
    )
    def test_pressure_to_bar(self, value, unit, expected):
        assert pressure_to_bar(value, unit) == pytest.approx(expected)

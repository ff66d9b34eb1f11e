import numpy as np
import pytest

from desal_thermal import properties
from desal_thermal.heat_duty import (
    STEAM_SPECIFIC_HEAT,
    TYPICAL_HTC,
    FlowArrangement,
    HeatFluidType,
    HeatProcess,
    LatentHeatInput,
    LMTDInput,
    SensibleHeatInput,
    calculate_combined_heat,
    calculate_heat_duty_from_lmtd,
    calculate_latent_heat,
    calculate_lmtd,
    calculate_required_area,
    calculate_sensible_heat,
    crossflow_correction_factor,
)


class TestSensibleHeat:
    def test_pure_water_heating(self):
        result = calculate_sensible_heat(
            SensibleHeatInput(HeatFluidType.PURE_WATER, 10.0, 20.0, 80.0)
        )
        assert result.is_heating
        assert result.delta_t == 60.0
        assert result.specific_heat == pytest.approx(properties.specific_heat_liquid(50.0))
        assert result.heat_duty == pytest.approx(10 / 3.6 * result.specific_heat * 60.0)

    def test_cooling_duty_is_positive(self):
        result = calculate_sensible_heat(
            SensibleHeatInput(HeatFluidType.SEAWATER, 10.0, 80.0, 20.0, salinity=35000.0)
        )
        assert not result.is_heating
        assert result.heat_duty > 0
        assert result.specific_heat < properties.specific_heat_liquid(50.0)

    def test_steam_uses_fixed_cp(self):
        result = calculate_sensible_heat(SensibleHeatInput("STEAM", 3.6, 150.0, 110.0))
        assert result.specific_heat == STEAM_SPECIFIC_HEAT
        assert result.heat_duty == pytest.approx(STEAM_SPECIFIC_HEAT * 40.0)


class TestLatentHeat:
    def test_one_kg_per_second_at_100c(self):
        result = calculate_latent_heat(LatentHeatInput(3.6, 100.0, HeatProcess.CONDENSATION))
        assert result.mass_flow_kg_s == pytest.approx(1.0)
        assert result.heat_duty == pytest.approx(2256.5, rel=2e-3)

    def test_combined(self):
        sensible = SensibleHeatInput(HeatFluidType.PURE_WATER, 3.6, 20.0, 100.0)
        latent = LatentHeatInput(3.6, 100.0, "EVAPORATION")
        result = calculate_combined_heat(sensible, latent)
        assert result.total_heat_duty == pytest.approx(
            result.sensible.heat_duty + result.latent.heat_duty
        )
        assert calculate_combined_heat().total_heat_duty == 0.0


class TestLMTD:
    def test_counter_current(self):
        result = calculate_lmtd(LMTDInput(90.0, 50.0, 20.0, 40.0))
        assert (result.delta_t1, result.delta_t2) == (50.0, 30.0)
        assert result.lmtd == pytest.approx(20.0 / np.log(50.0 / 30.0))
        assert result.correction_factor == 1.0
        assert result.warnings == ()

    def test_parallel_flow_is_lower(self):
        counter = calculate_lmtd(LMTDInput(90.0, 50.0, 20.0, 40.0))
        parallel = calculate_lmtd(LMTDInput(90.0, 50.0, 20.0, 40.0, FlowArrangement.PARALLEL))
        assert parallel.lmtd < counter.lmtd

    def test_equal_differences_use_arithmetic_mean(self):
        result = calculate_lmtd(LMTDInput(80.0, 60.0, 40.0, 60.0))
        assert result.lmtd == pytest.approx(20.0)

    def test_temperature_cross(self):
        result = calculate_lmtd(LMTDInput(80.0, 60.0, 70.0, 90.0))
        assert result.lmtd == 0.0
        assert result.corrected_lmtd == 0.0
        assert any("Temperature cross" in w for w in result.warnings)

    def test_low_lmtd_warning(self):
        result = calculate_lmtd(LMTDInput(45.0, 44.0, 40.0, 41.0))
        assert result.lmtd < 5.0
        assert any("Very low LMTD" in w for w in result.warnings)

    def test_crossflow_correction(self):
        inp = LMTDInput(120.0, 60.0, 20.0, 50.0, FlowArrangement.CROSSFLOW)
        result = calculate_lmtd(inp)
        assert 0.7 <= result.correction_factor < 1.0
        assert result.corrected_lmtd == pytest.approx(result.lmtd * result.correction_factor)

    def test_crossflow_factor_clamped(self):
        # an extreme approach makes the log argument invalid
        inp = LMTDInput(100.0, 45.0, 20.0, 95.0, FlowArrangement.CROSSFLOW)
        assert crossflow_correction_factor(inp) == 0.7

    def test_no_cold_rise_needs_no_correction(self):
        inp = LMTDInput(100.0, 90.0, 40.0, 40.0, FlowArrangement.CROSSFLOW)
        assert crossflow_correction_factor(inp) == 1.0


class TestSizing:
    def test_area_and_duty_are_inverse(self):
        area = calculate_required_area(1000.0, 2500.0, 8.0)
        assert area == pytest.approx(50.0)
        assert calculate_heat_duty_from_lmtd(2500.0, area, 8.0) == pytest.approx(1000.0)

    def test_area_needs_positive_lmtd(self):
        with pytest.raises(ValueError):
            calculate_required_area(1000.0, 2500.0, 0.0)

    def test_typical_ranges_are_ordered(self):
        for htc in TYPICAL_HTC.values():
            assert htc.min < htc.typical < htc.max

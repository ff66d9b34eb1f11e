import dataclasses

import numpy as np
import pytest

from desal_thermal import properties
from desal_thermal.exceptions import InputValidationError
from desal_thermal.mvc import MVCInput, calculate_mvc, validate_mvc_input
from desal_thermal.tvc import TVCInput, calculate_tvc, validate_tvc_input


@pytest.fixture(scope="module")
def mvc_base():
    return MVCInput(suction_pressure=0.5, discharge_pressure=1.0, flow_rate=10.0)


class TestMVC:
    def test_basic_compression(self, mvc_base):
        result = calculate_mvc(mvc_base)

        assert result.compression_ratio == 2.0
        assert result.suction_temperature == pytest.approx(result.suction_sat_temperature + 0.5)
        assert result.discharge_sat_temperature < result.isentropic_discharge_temperature
        assert result.isentropic_discharge_temperature < result.discharge_temperature
        assert 100.0 < result.isentropic_discharge_temperature < 200.0
        assert result.warnings == ()

    def test_isentropic_state_shares_suction_entropy(self, mvc_base):
        result = calculate_mvc(mvc_base)
        s_is = properties.entropy_superheated(1.0, result.isentropic_discharge_temperature)
        assert s_is == pytest.approx(result.suction_entropy, abs=1e-3)

    def test_power_chain(self, mvc_base):
        result = calculate_mvc(mvc_base)
        assert result.shaft_power > result.isentropic_power
        assert result.shaft_power == pytest.approx(result.isentropic_power / 0.75)
        assert result.electrical_power == pytest.approx(result.shaft_power / 0.95)
        assert result.shaft_power == pytest.approx(result.mass_flow_kg_s * result.specific_work)

    def test_power_scales_with_flow(self, mvc_base):
        single = calculate_mvc(mvc_base)
        double = calculate_mvc(dataclasses.replace(mvc_base, flow_rate=20.0))
        assert double.shaft_power == pytest.approx(2 * single.shaft_power)
        assert double.volumetric_suction_flow == pytest.approx(2 * single.volumetric_suction_flow)

    def test_power_rises_with_discharge_pressure(self, mvc_base):
        powers = [
            calculate_mvc(dataclasses.replace(mvc_base, discharge_pressure=p)).shaft_power
            for p in (0.7, 1.0, 1.3)
        ]
        assert powers == sorted(powers)

    def test_high_ratio_warning(self):
        result = calculate_mvc(MVCInput(0.3, 1.0, 5.0))
        assert any("multi-stage" in w for w in result.warnings)

    def test_efficiency_outside_typical_range(self, mvc_base):
        result = calculate_mvc(dataclasses.replace(mvc_base, isentropic_efficiency=0.95))
        assert any("typical" in w for w in result.warnings)

    def test_discharge_must_exceed_suction(self):
        with pytest.raises(InputValidationError, match="must be greater than suction"):
            calculate_mvc(MVCInput(1.0, 0.5, 10.0))

    def test_suction_must_be_superheated(self):
        result = validate_mvc_input(MVCInput(0.5, 1.0, 10.0, suction_temperature=70.0))
        assert not result.is_valid
        assert "above saturation" in result.errors[0]


@pytest.fixture(scope="module")
def tvc_base():
    return TVCInput(motive_pressure=10.0, suction_pressure=0.2, discharge_pressure=0.4, entrained_flow=10.0)


class TestTVC:
    def test_mass_and_energy_balance(self, tvc_base):
        result = calculate_tvc(tvc_base)

        assert result.compression_ratio == pytest.approx(2.0)
        assert result.expansion_ratio == pytest.approx(50.0)
        assert result.discharge_flow == pytest.approx(result.motive_flow + result.entrained_flow)
        assert result.entrainment_ratio == pytest.approx(result.entrained_flow / result.motive_flow)
        assert result.discharge_enthalpy * result.discharge_flow == pytest.approx(
            result.motive_enthalpy * result.motive_flow + result.suction_enthalpy * result.entrained_flow
        )

    def test_efficiency_product(self, tvc_base):
        result = calculate_tvc(tvc_base)
        assert result.ejector_efficiency == pytest.approx(0.92 * 0.85 * 0.78 * np.exp(-1.0))
        assert result.entrainment_ratio == pytest.approx(
            result.theoretical_entrainment_ratio * result.ejector_efficiency
        )

    def test_superheated_discharge(self, tvc_base):
        result = calculate_tvc(tvc_base)
        assert result.discharge_temperature > result.discharge_sat_temperature
        assert result.discharge_superheat == pytest.approx(
            result.discharge_temperature - result.discharge_sat_temperature
        )

    def test_motive_flow_basis_is_consistent(self, tvc_base):
        by_entrained = calculate_tvc(tvc_base)
        by_motive = calculate_tvc(
            dataclasses.replace(tvc_base, entrained_flow=None, motive_flow=by_entrained.motive_flow)
        )
        assert by_motive.entrained_flow == pytest.approx(10.0)

    def test_superheated_motive_steam_entrains_more(self, tvc_base):
        saturated = calculate_tvc(tvc_base)
        superheated = calculate_tvc(dataclasses.replace(tvc_base, motive_temperature=250.0))
        assert superheated.motive_enthalpy > saturated.motive_enthalpy
        assert superheated.entrainment_ratio > saturated.entrainment_ratio

    def test_typical_ratio_warning(self, tvc_base):
        result = calculate_tvc(dataclasses.replace(tvc_base, discharge_pressure=0.48))
        assert any("typical limit" in w for w in result.warnings)

    @pytest.mark.parametrize(
        "changes,message",
        [
            ({"motive_pressure": 0.3}, "Motive pressure"),
            ({"discharge_pressure": 0.6}, "single-stage limit"),
            ({"entrained_flow": None}, "Specify either entrained flow or motive flow"),
            ({"nozzle_efficiency": 1.2}, "Nozzle efficiency"),
        ],
    )
    def test_validation(self, tvc_base, changes, message):
        result = validate_tvc_input(dataclasses.replace(tvc_base, **changes))
        assert any(message in e for e in result.errors)
        with pytest.raises(InputValidationError):
            calculate_tvc(dataclasses.replace(tvc_base, **changes))

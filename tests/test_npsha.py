import dataclasses

import pytest

from desal_thermal import properties
from desal_thermal.exceptions import InputValidationError
from desal_thermal.npsha import (
    LiquidType,
    NPSHaInput,
    VesselType,
    calculate_minimum_liquid_level,
    calculate_npsha,
    npsh_recommendation,
    validate_npsha_input,
)
from desal_thermal.units import bar_to_head


class TestCalculateNPSHa:
    def test_open_tank(self):
        inp = NPSHaInput(VesselType.OPEN, liquid_temperature=20.0, liquid_level_above_pump=2.0)
        result = calculate_npsha(inp)

        rho = properties.density_liquid(20.0)
        expected = (
            2.0
            + bar_to_head(1.01325, rho)
            - bar_to_head(properties.saturation_pressure(20.0), rho)
        )
        assert result.npsh_available == pytest.approx(expected)
        assert result.npsh_available == pytest.approx(12.1, abs=0.1)
        assert result.recommendation.startswith("NPSHa is excellent")
        assert result.warnings == ()

    def test_saturated_vacuum_vessel(self):
        # liquid at its boiling point: pressure and vapour heads cancel
        inp = NPSHaInput(
            VesselType.VACUUM,
            liquid_temperature=60.0,
            liquid_level_above_pump=3.0,
            vessel_pressure=properties.saturation_pressure(60.0),
            friction_loss=0.5,
        )
        result = calculate_npsha(inp)
        assert result.npsh_available == pytest.approx(2.5, abs=1e-6)

    def test_salt_lowers_vapour_pressure(self):
        base = NPSHaInput(
            VesselType.VACUUM,
            liquid_temperature=60.0,
            liquid_level_above_pump=3.0,
            vessel_pressure=0.2,
        )
        pure = calculate_npsha(base)
        brine = calculate_npsha(
            dataclasses.replace(base, liquid_type=LiquidType.SEAWATER, salinity=70000.0)
        )
        assert brine.vapor_pressure < pure.vapor_pressure
        assert brine.boiling_point_elevation > 0.1
        assert brine.breakdown[-1].component == "BPE Note"

    def test_breakdown_signs(self):
        result = calculate_npsha(NPSHaInput(VesselType.OPEN, 30.0, 1.0, friction_loss=0.3))
        signed = sum(c.value if c.sign == "+" else -c.value for c in result.breakdown if c.sign != "info")
        assert signed == pytest.approx(result.npsh_available)

    def test_warnings(self):
        inp = NPSHaInput(
            VesselType.VACUUM,
            liquid_temperature=35.0,
            liquid_level_above_pump=-1.0,
            vessel_pressure=0.05,
        )
        result = calculate_npsha(inp)
        assert any("deep vacuum" in w for w in result.warnings)
        assert any("suction lift" in w for w in result.warnings)
        assert any("will boil" in w for w in result.warnings)
        assert any("negative" in w for w in result.warnings)
        assert result.recommendation.startswith("CRITICAL")

    def test_vessel_pressure_required(self):
        inp = NPSHaInput(VesselType.VACUUM, liquid_temperature=40.0)
        assert not validate_npsha_input(inp).is_valid
        with pytest.raises(InputValidationError, match="Vessel pressure is required for VACUUM"):
            calculate_npsha(inp)

    def test_negative_friction_rejected(self):
        with pytest.raises(InputValidationError):
            calculate_npsha(NPSHaInput(VesselType.OPEN, 20.0, friction_loss=-1.0))


class TestRecommendation:
    @pytest.mark.parametrize(
        "npsha,prefix",
        [
            (-0.5, "CRITICAL"),
            (0.5, "WARNING"),
            (1.5, "NPSHa is low"),
            (3.0, "NPSHa is adequate"),
            (6.0, "NPSHa is excellent"),
        ],
    )
    def test_bands(self, npsha, prefix):
        assert npsh_recommendation(npsha).startswith(prefix)


class TestMinimumLevel:
    def test_level_meets_requirement(self):
        inp = NPSHaInput(
            VesselType.VACUUM,
            liquid_temperature=55.0,
            vessel_pressure=properties.saturation_pressure(55.0),
            friction_loss=0.4,
        )
        level = calculate_minimum_liquid_level(3.0, inp, safety_margin=0.5)
        assert level == pytest.approx(3.9, abs=1e-6)

        check = calculate_npsha(dataclasses.replace(inp, liquid_level_above_pump=level))
        assert check.npsh_available == pytest.approx(3.5)

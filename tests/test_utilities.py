import pytest

from desal_thermal import properties
from desal_thermal.desuperheating import (
    DesuperheatingInput,
    calculate_desuperheating,
    validate_desuperheating_input,
)
from desal_thermal.dosing import ChemicalType, DosingInput, calculate_dosing
from desal_thermal.exceptions import InputValidationError
from desal_thermal.pump import IEC_MOTOR_SIZES, PumpInput, calculate_pump, select_motor_size
from desal_thermal.units import GRAVITY


class TestPump:
    def test_total_differential_head(self):
        inp = PumpInput(
            flow_rate=100.0,
            fluid_density=1000.0,
            static_head=10.0,
            suction_pressure=0.2,
            discharge_pressure=1.01325,
            suction_friction_head=1.0,
            discharge_friction_head=2.0,
        )
        result = calculate_pump(inp)

        pressure_head = (1.01325 - 0.2) * 1e5 / (1000.0 * GRAVITY)
        assert result.pressure_head == pytest.approx(pressure_head)
        assert result.total_differential_head == pytest.approx(10.0 + pressure_head + 3.0)
        assert result.volumetric_flow == pytest.approx(100.0)
        assert result.hydraulic_power == pytest.approx(
            1000.0 * GRAVITY * (100.0 / 3600) * result.total_differential_head / 1000
        )
        assert result.motor_power == pytest.approx(result.hydraulic_power / 0.70 / 0.95)
        assert result.recommended_motor_size == 11.0
        assert result.warnings == ()

    def test_negative_head_needs_no_power(self):
        inp = PumpInput(50.0, 1000.0, static_head=-20.0, suction_pressure=1.0, discharge_pressure=1.0)
        result = calculate_pump(inp)
        assert result.hydraulic_power == 0.0
        assert any("Negative TDH" in w for w in result.warnings)

    @pytest.mark.parametrize("required,expected", [(0.1, 0.37), (7.5, 7.5), (7.6, 11.0), (600.0, 500.0)])
    def test_motor_sizes(self, required, expected):
        assert select_motor_size(required) == expected

    def test_oversized_motor_warning(self):
        inp = PumpInput(5000.0, 1000.0, static_head=50.0, suction_pressure=1.0, discharge_pressure=1.0)
        result = calculate_pump(inp)
        assert result.motor_power > IEC_MOTOR_SIZES[-1]
        assert any("largest standard size" in w for w in result.warnings)

    def test_invalid_efficiency(self):
        with pytest.raises(InputValidationError, match="Pump efficiency"):
            calculate_pump(PumpInput(10.0, 1000.0, 5.0, 1.0, 1.0, pump_efficiency=0.0))


class TestDesuperheating:
    def test_energy_balance(self):
        inp = DesuperheatingInput(
            steam_pressure=1.0, steam_temperature=150.0, steam_flow=10.0, spray_water_temperature=40.0
        )
        result = calculate_desuperheating(inp)

        assert result.target_temperature == pytest.approx(properties.saturation_temperature(1.0) + 3.0)
        assert result.outlet_flow == pytest.approx(10.0 + result.spray_water_flow)
        assert 10.0 * result.steam_enthalpy + result.spray_water_flow * result.spray_water_enthalpy == (
            pytest.approx(result.outlet_flow * result.outlet_enthalpy)
        )
        assert 0.2 < result.spray_water_flow < 0.6
        assert result.heat_removed == pytest.approx(10 / 3.6 * (result.steam_enthalpy - result.outlet_enthalpy))
        assert result.warnings == ()

    def test_low_outlet_superheat_warning(self):
        t_sat = properties.saturation_temperature(1.0)
        result = calculate_desuperheating(DesuperheatingInput(1.0, 150.0, 10.0, 40.0, target_temperature=t_sat + 1.0))
        assert any("risk of wet steam" in w for w in result.warnings)

    def test_saturated_steam_rejected(self):
        result = validate_desuperheating_input(DesuperheatingInput(1.0, 95.0, 10.0, 40.0))
        assert any("not superheated" in e for e in result.errors)

    def test_target_above_saturation(self):
        with pytest.raises(InputValidationError, match="above saturation"):
            calculate_desuperheating(DesuperheatingInput(1.0, 150.0, 10.0, 40.0, target_temperature=95.0))

    def test_spray_water_colder_than_target(self):
        with pytest.raises(InputValidationError, match="Spray water"):
            calculate_desuperheating(DesuperheatingInput(1.0, 150.0, 10.0, 120.0))


class TestDosing:
    def test_product_quantities(self):
        result = calculate_dosing(
            DosingInput(
                ChemicalType.ANTISCALANT,
                feed_flow=100.0,
                dose=3.0,
                product_concentration=50.0,
                product_density=1.1,
            )
        )
        assert result.active_chemical == pytest.approx(0.3)
        assert result.product_mass_flow == pytest.approx(0.6)
        assert result.product_volume_flow == pytest.approx(0.6 / 1.1)
        assert result.daily_product_mass == pytest.approx(14.4)
        assert result.storage_volume == pytest.approx(0.6 / 1.1 * 24 * 7)
        assert result.warnings == ()

    def test_dose_outside_typical_range(self):
        result = calculate_dosing(DosingInput("ANTISCALANT", 100.0, 10.0, 100.0))
        assert result.warnings == ("Antiscalant dose of 10.0 mg/L is outside the typical range (1.0-6.0 mg/L)",)

    def test_concentration_limit(self):
        with pytest.raises(InputValidationError, match="cannot exceed 100%"):
            calculate_dosing(DosingInput(ChemicalType.ACID, 100.0, 50.0, 120.0))

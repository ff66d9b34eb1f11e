import numpy as np
import pytest

from desal_thermal.heat_transfer import (
    NUSSELT_LAMINAR,
    TUBE_CONDUCTIVITY,
    condensation_htc,
    gnielinski_nusselt,
    overall_htc,
    solve_condenser_wall_temperature,
    tube_side_htc,
)
from desal_thermal.pressure_drop import FlowRegime


class TestTubeSide:
    def test_turbulent_seawater(self):
        result = tube_side_htc(velocity=2.0, inner_diameter=0.0229, temperature=40.0, salinity=35000.0)
        assert result.flow_regime is FlowRegime.TURBULENT
        assert 4.0 < result.prandtl_number < 6.0
        assert 5000.0 < result.htc < 15000.0

    def test_laminar_uses_constant_nusselt(self):
        result = tube_side_htc(velocity=0.01, inner_diameter=0.01, temperature=40.0)
        assert result.flow_regime is FlowRegime.LAMINAR
        assert result.nusselt_number == NUSSELT_LAMINAR

    def test_velocity_raises_coefficient(self):
        slow = tube_side_htc(1.0, 0.0229, 40.0)
        fast = tube_side_htc(2.0, 0.0229, 40.0)
        assert fast.htc > slow.htc

    def test_invalid_geometry(self):
        with pytest.raises(ValueError):
            tube_side_htc(0.0, 0.0229, 40.0)

    def test_gnielinski_out_of_range_warns(self):
        with pytest.warns(UserWarning, match="Gnielinski"):
            gnielinski_nusselt(1e7, 5.0)


class TestCondensation:
    def test_typical_magnitude(self):
        h = condensation_htc(50.0, 45.0, 0.025)
        assert 5000.0 < h < 20000.0

    def test_row_correction(self):
        single = condensation_htc(50.0, 45.0, 0.025)
        bank = condensation_htc(50.0, 45.0, 0.025, n_rows=8)
        assert bank == pytest.approx(single * 8 ** (-1 / 6))

    def test_minimum_film_delta_t(self):
        assert condensation_htc(50.0, 50.0, 0.025) == pytest.approx(condensation_htc(50.0, 49.5, 0.025))

    def test_larger_film_delta_t_lowers_coefficient(self):
        assert condensation_htc(50.0, 40.0, 0.025) < condensation_htc(50.0, 48.0, 0.025)


class TestOverall:
    def test_series_resistances(self):
        do, di, k = 0.025, 0.023, TUBE_CONDUCTIVITY["titanium"]
        u = overall_htc(6000.0, 10000.0, do, di, k, fouling_inside=1e-4, fouling_outside=5e-5)
        expected = 1 / (
            1 / 10000.0 + 5e-5 + do * np.log(do / di) / (2 * k) + do / di * 1e-4 + do / di / 6000.0
        )
        assert u == pytest.approx(expected)

    def test_invalid_diameters(self):
        with pytest.raises(ValueError):
            overall_htc(6000.0, 10000.0, 0.02, 0.023, 21.9)


class TestCondenserWall:
    def test_flux_balance(self):
        do, di, k = 0.025, 0.023, 21.9
        result = solve_condenser_wall_temperature(50.0, 30.0, 5000.0, do, di, k, n_rows=4)

        assert result.converged
        assert 30.0 < result.wall_temperature < 50.0
        # the film and the wall path in series give the same overall coefficient
        u = overall_htc(5000.0, result.condensation_htc, do, di, k)
        assert result.overall_htc == pytest.approx(u, rel=1e-4)

    def test_saturation_must_exceed_coolant(self):
        with pytest.raises(ValueError):
            solve_condenser_wall_temperature(30.0, 30.0, 5000.0, 0.025, 0.023, 21.9)

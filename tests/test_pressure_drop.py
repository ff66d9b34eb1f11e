import pytest

from desal_thermal.exceptions import PipeNotFoundError
from desal_thermal.pipes import custom_pipe, get_pipe_by_nps
from desal_thermal.pressure_drop import (
    FittingSpec,
    FittingType,
    FlowRegime,
    K_FACTORS,
    PressureDropInput,
    RE_LAMINAR_LIMIT,
    RE_TURBULENT_LIMIT,
    add_local_loss,
    available_fittings,
    calculate_pressure_drop,
    diameter_ratio,
    expander_k,
    friction_factor,
    reducer_k,
    turbulent_friction_factor,
)
from desal_thermal.units import GRAVITY


def water_run(**overrides):
    params = dict(
        pipe_nps="4",
        flow_rate=50.0,
        fluid_density=1000.0,
        fluid_viscosity=1e-3,
        pipe_length=10.0,
    )
    params.update(overrides)
    return PressureDropInput(**params)


class TestFrictionFactor:
    def test_laminar(self):
        assert friction_factor(1000.0, 1e-4) == pytest.approx(0.064)

    def test_turbulent_smooth_pipe(self):
        # Blasius gives 0.0178 at Re = 1e5 for a smooth pipe
        assert friction_factor(1e5, 1e-6) == pytest.approx(0.018, rel=0.05)

    def test_transition_is_continuous(self):
        rr = 4.5e-4
        f_lam = friction_factor(RE_LAMINAR_LIMIT, rr)
        f_turb = turbulent_friction_factor(RE_TURBULENT_LIMIT, rr)
        assert friction_factor(RE_LAMINAR_LIMIT + 1e-6, rr) == pytest.approx(f_lam, rel=1e-6)
        assert friction_factor(RE_TURBULENT_LIMIT - 1e-6, rr) == pytest.approx(f_turb, rel=1e-6)
        midpoint = friction_factor(3150.0, rr)
        assert midpoint == pytest.approx((f_lam + f_turb) / 2)

    def test_roughness_raises_friction(self):
        assert friction_factor(2e5, 1e-3) > friction_factor(2e5, 1e-5)

    def test_non_positive_reynolds(self):
        with pytest.raises(ValueError):
            friction_factor(0.0, 1e-4)


class TestCalculatePressureDrop:
    def test_turbulent_water_run(self):
        result = calculate_pressure_drop(water_run())

        pipe = get_pipe_by_nps("4")
        velocity = 50.0 / 3.6 / 1000.0 / (pipe.area_mm2 / 1e6)
        assert result.velocity == pytest.approx(velocity)
        assert result.flow_regime is FlowRegime.TURBULENT
        expected_loss = result.friction_factor * 10.0 / (pipe.id_mm / 1000) * velocity**2 / (2 * GRAVITY)
        assert result.straight_pipe_loss == pytest.approx(expected_loss)
        assert result.fittings_loss == 0.0
        assert result.warnings == ()

    def test_laminar_regime(self):
        result = calculate_pressure_drop(water_run(fluid_viscosity=1.0))
        assert result.flow_regime is FlowRegime.LAMINAR
        assert result.friction_factor == pytest.approx(64.0 / result.reynolds_number)

    def test_transitional_regime_warns(self):
        result = calculate_pressure_drop(water_run(fluid_viscosity=0.0576))
        assert result.flow_regime is FlowRegime.TRANSITIONAL
        assert any("transitional" in w for w in result.warnings)

    def test_low_velocity_warning(self):
        result = calculate_pressure_drop(water_run(flow_rate=5.0))
        assert any(w.startswith("Low velocity") for w in result.warnings)

    def test_high_velocity_warning(self):
        result = calculate_pressure_drop(water_run(pipe_nps="1", flow_rate=20.0))
        assert any(w.startswith("High velocity") for w in result.warnings)

    def test_unit_identities(self):
        result = calculate_pressure_drop(
            water_run(
                fittings=(FittingSpec(FittingType.ELBOW_90_STANDARD, 3), FittingSpec(FittingType.GATE_VALVE)),
                elevation_change=2.0,
            )
        )
        assert result.total_pressure_drop_bar == pytest.approx(
            result.total_pressure_drop_mh2o * 1000.0 * GRAVITY / 1e5
        )
        assert result.total_pressure_drop_mbar == pytest.approx(result.total_pressure_drop_bar * 1000)
        assert result.total_pressure_drop_kpa == pytest.approx(result.total_pressure_drop_bar * 100)
        assert result.total_pressure_drop_mh2o == pytest.approx(
            result.straight_pipe_loss + result.fittings_loss + result.elevation_head
        )

    def test_fittings_breakdown(self):
        result = calculate_pressure_drop(
            water_run(
                fittings=(
                    FittingSpec(FittingType.ELBOW_90_STANDARD, 2),
                    FittingSpec(FittingType.EXIT, 0),
                    FittingSpec("ball_valve"),
                )
            )
        )
        assert [f.type for f in result.fittings_breakdown] == [
            FittingType.ELBOW_90_STANDARD,
            FittingType.BALL_VALVE,
        ]
        assert result.total_k_factor == pytest.approx(2 * 0.75 + 0.05)
        assert result.fittings_loss == pytest.approx(sum(f.loss for f in result.fittings_breakdown))
        assert result.equivalent_length == pytest.approx(
            result.total_k_factor * result.pipe.id_mm / 1000 / result.friction_factor
        )

    def test_downward_run_can_be_negative(self):
        result = calculate_pressure_drop(water_run(flow_rate=5.0, elevation_change=-5.0))
        assert result.total_pressure_drop_mh2o < 0

    def test_unknown_pipe(self):
        with pytest.raises(PipeNotFoundError, match="NPS 7"):
            calculate_pressure_drop(water_run(pipe_nps="7"))

    def test_explicit_pipe_skips_lookup(self):
        pipe = custom_pipe(700.0, 8.0)
        result = calculate_pressure_drop(water_run(pipe_nps="CUSTOM", flow_rate=1000.0), pipe=pipe)
        assert result.pipe is pipe

    def test_longer_pipe_loses_more(self):
        short = calculate_pressure_drop(water_run(pipe_length=5.0))
        long = calculate_pressure_drop(water_run(pipe_length=50.0))
        assert long.straight_pipe_loss == pytest.approx(10 * short.straight_pipe_loss)


class TestLocalLosses:
    def test_reducer_and_expander(self):
        assert reducer_k(100.0, 50.0) == pytest.approx(0.5 * (1 - 0.25) ** 2)
        assert expander_k(50.0, 100.0) == pytest.approx((1 - 0.25) ** 2)
        assert reducer_k(100.0, 50.0, eccentric=True) == pytest.approx(1.2 * reducer_k(100.0, 50.0))

    def test_no_size_change_has_no_loss(self):
        assert reducer_k(50.0, 50.0) == 0.0
        assert expander_k(80.0, 50.0) == 0.0

    @pytest.mark.parametrize("small,large,beta", [(50.0, 100.0, 0.5), (100.0, 100.0, 1.0), (120.0, 100.0, 1.0)])
    def test_diameter_ratio_is_capped(self, small, large, beta):
        assert diameter_ratio(small, large) == pytest.approx(beta)

    def test_reversed_reducer_has_no_loss(self):
        # nozzle already at the largest catalog size, suction line larger
        assert reducer_k(100.0, 120.0) == 0.0
        assert reducer_k(100.0, 120.0, eccentric=True) == 0.0

    @pytest.mark.parametrize("small,large", [(0.0, 100.0), (50.0, -1.0)])
    def test_non_positive_diameter(self, small, large):
        with pytest.raises(ValueError, match="Diameters must be positive"):
            diameter_ratio(small, large)
        with pytest.raises(ValueError):
            expander_k(small, large)

    def test_add_local_loss_keeps_identities(self):
        base = calculate_pressure_drop(water_run())
        updated = add_local_loss(base, FittingType.REDUCER_SUDDEN, 0.2, 0.05, "Reducer")

        assert updated.total_pressure_drop_mh2o == pytest.approx(base.total_pressure_drop_mh2o + 0.05)
        assert updated.fittings_loss == pytest.approx(base.fittings_loss + 0.05)
        assert updated.total_k_factor == pytest.approx(base.total_k_factor + 0.2)
        assert updated.fittings_breakdown[-1].name == "Reducer"
        assert updated.total_pressure_drop_mbar == pytest.approx(updated.total_pressure_drop_bar * 1000)

    def test_fitting_listing(self):
        listing = available_fittings()
        assert len(listing) == len(K_FACTORS)
        assert {"type": FittingType.EXIT, "name": "Pipe Exit", "k_factor": 1.0} in listing

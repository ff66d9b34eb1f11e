"""
Siphon and suction line sizing for a 6-effect MED train.

Prints one row per inter-effect siphon and the brine pump suction of the last effect.
"""

from tabulate import tabulate

from desal_thermal import configure_logging
from desal_thermal.siphon import EffectStage, ElbowConfig, SiphonFluidType, SiphonInput, calculate_siphon_train
from desal_thermal.suction_system import SuctionSystemInput, calculate_suction_system

# Effect pressures in mbar abs and the brine cascading to the next effect in t/h
EFFECTS = [
    EffectStage(310.0, 120.0),
    EffectStage(250.0, 230.0),
    EffectStage(198.0, 335.0),
    EffectStage(155.0, 435.0),
    EffectStage(120.0, 530.0),
    EffectStage(92.0, 620.0),
]

TEMPLATE = SiphonInput(
    upstream_pressure=EFFECTS[0].pressure,
    downstream_pressure=EFFECTS[1].pressure,
    flow_rate=EFFECTS[0].flow_to_next,
    fluid_type=SiphonFluidType.BRINE,
    salinity=60000.0,
    elbow_config=ElbowConfig.THREE_ELBOWS,
    horizontal_distance=4.0,
    offset_distance=1.2,
    target_velocity=0.8,
)

LAST_EFFECT_PUMP_NPSHR = 2.5  # m


def siphon_rows():
    train = calculate_siphon_train(EFFECTS, TEMPLATE)
    rows = []
    for stage in train.stages:
        r = stage.result
        rows.append(
            [
                f"S-{stage.from_effect}",
                r.pipe.display_name,
                r.velocity,
                r.static_head,
                r.friction_head,
                r.minimum_height,
                r.flash_vapor_fraction * 100,
                "yes" if r.converged else f"no ({r.iterations})",
            ]
        )
    return rows, train.errors


def main():
    configure_logging()
    rows, errors = siphon_rows()
    print(
        tabulate(
            rows,
            headers=["Siphon", "Pipe", "v [m/s]", "Hs [m]", "Hf [m]", "H min [m]", "Flash [%]", "Converged"],
            tablefmt="grid",
            floatfmt=".3f",
        )
    )
    for error in errors:
        print(f"  ! {error}")

    last = EFFECTS[-1]
    suction = calculate_suction_system(
        SuctionSystemInput(
            effect_pressure=last.pressure,
            flow_rate=last.flow_to_next,
            pump_npshr=LAST_EFFECT_PUMP_NPSHR,
            salinity=TEMPLATE.salinity,
            elbow_count=2,
            vertical_pipe_run=1.5,
            horizontal_pipe_run=4.0,
        )
    )
    print(
        f"\nBrine pump suction: nozzle {suction.nozzle_pipe.display_name}, line "
        f"{suction.suction_pipe.display_name}, {suction.valve_type.value} valve, "
        f"{suction.strainer_pressure_drop.strainer_name}"
    )
    print(
        f"Effect bottom {suction.required_elevation:.2f} m above pump centerline "
        f"(NPSHa clean {suction.npsha_clean.npsha:.2f} m, fouled {suction.npsha_dirty.npsha:.2f} m)"
    )
    for warning in suction.warnings:
        print(f"  ! {warning}")


if __name__ == "__main__":
    main()

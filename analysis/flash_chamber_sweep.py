import dataclasses

import matplotlib.pyplot as plt
import numpy as np
from tabulate import tabulate

from desal_thermal import configure_logging
from desal_thermal.flash_chamber import FlashChamberInput, calculate_flash_chamber

# ---------------------------
# Quick plot configuration
# ---------------------------
# Choose which plot to generate:
#   - "vapour_vs_inlet_temperature": flashed vapour and chamber diameter against feed temperature
#   - "npsha_vs_pressure": NPSHa at LG-L / operating level / LG-H against chamber pressure
PLOT_CASE = "vapour_vs_inlet_temperature"

BASE_CASE = FlashChamberInput(operating_pressure=200.0, water_flow_rate=250.0, salinity=45000.0)

INLET_TEMPERATURES = np.linspace(65.0, 95.0, 13)
CHAMBER_PRESSURES = np.linspace(80.0, 400.0, 17)  # mbar abs


def _run(**changes):
    return calculate_flash_chamber(dataclasses.replace(BASE_CASE, **changes))


def _print_base_case():
    result = calculate_flash_chamber(BASE_CASE)
    hmb = result.heat_mass_balance
    rows = [
        [row.stream, row.flow_rate, row.temperature, row.pressure, row.enthalpy, row.heat_duty]
        for row in hmb.rows
    ]
    print(
        tabulate(
            rows,
            headers=["Stream", "Flow [t/h]", "T [°C]", "P [mbar a]", "h [kJ/kg]", "Q [kW]"],
            tablefmt="github",
            floatfmt=".2f",
        )
    )
    print(f"Balance error {hmb.balance_error:.3f} %")

    nozzles = [
        [n.name, n.selected_pipe_size, n.actual_velocity, n.velocity_status.value]
        for n in result.nozzles
    ]
    print(tabulate(nozzles, headers=["Nozzle", "Pipe", "v [m/s]", "Status"], tablefmt="github", floatfmt=".3f"))
    for warning in result.warnings:
        print(f"  ! {warning}")


def _plot_vapour_vs_inlet_temperature():
    results = [_run(inlet_temperature=t) for t in INLET_TEMPERATURES]
    vapour = [r.heat_mass_balance.vapor.flow_rate for r in results]
    velocity = [r.chamber_sizing.vapor_velocity for r in results]

    fig, ax = plt.subplots()
    ax.plot(INLET_TEMPERATURES, vapour, "o-", label="Flashed vapour")
    ax.set_xlabel("Feed temperature [°C]")
    ax.set_ylabel("Vapour [t/h]")
    ax.grid(True, alpha=0.3)

    ax2 = ax.twinx()
    ax2.plot(INLET_TEMPERATURES, velocity, "s--", color="tab:red", label="Vapour velocity")
    ax2.set_ylabel("Vapour velocity in chamber [m/s]")
    fig.legend(loc="upper left")
    ax.set_title(
        f"Flash at {BASE_CASE.operating_pressure:.0f} mbar a, {BASE_CASE.water_flow_rate:.0f} t/h feed"
    )


def _plot_npsha_vs_pressure():
    results = [_run(operating_pressure=p, inlet_temperature=95.0) for p in CHAMBER_PRESSURES]

    plt.figure()
    for attr, label in (("at_lgl", "LG-L"), ("at_operating", "Operating"), ("at_lgh", "LG-H")):
        plt.plot(
            CHAMBER_PRESSURES,
            [getattr(r.npsha, attr).npsh_available for r in results],
            marker="+",
            label=label,
        )
    plt.xlabel("Chamber pressure [mbar a]")
    plt.ylabel("NPSHa [m]")
    plt.title("Bottom pump NPSHa")
    plt.legend()
    plt.grid(True, alpha=0.3)


if __name__ == "__main__":
    configure_logging()
    _print_base_case()

    if PLOT_CASE == "vapour_vs_inlet_temperature":
        _plot_vapour_vs_inlet_temperature()
        plt.show()
    elif PLOT_CASE == "npsha_vs_pressure":
        _plot_npsha_vs_pressure()
        plt.show()
    else:
        raise ValueError(f"Unknown PLOT_CASE '{PLOT_CASE}'")

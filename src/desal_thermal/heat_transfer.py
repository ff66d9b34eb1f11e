"""
heat_transfer.py

Film coefficients for tube-type condensers and evaporators.

- Tube side: Nu = 4.36 (laminar, constant heat flux), Gnielinski with the Petukhov friction
  factor above Re = 2300.
- Shell side: Nusselt film condensation on horizontal tubes with the Kern N^(-1/6) row correction.
- Overall coefficient referenced to the outside tube area, including fouling and wall conduction.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np
from scipy.optimize import root_scalar

from desal_thermal import properties
from desal_thermal.pressure_drop import RE_LAMINAR_LIMIT, FlowRegime, flow_regime
from desal_thermal.units import GRAVITY

logger = logging.getLogger(__name__)

NUSSELT_LAMINAR = 4.36
NUSSELT_CONDENSATION_COEFF = 0.725
MIN_CONDENSATION_DELTA_T = 0.5  # K
GNIELINSKI_RE_RANGE = (2300.0, 5e6)
GNIELINSKI_PR_RANGE = (0.5, 2000.0)

# Common tube wall conductivities, W/(m·K)
TUBE_CONDUCTIVITY = {
    "titanium": 21.9,
    "cuni_90_10": 45.0,
    "aluminium_brass": 100.0,
    "stainless_316": 16.3,
    "carbon_steel": 50.0,
}


@dataclass(frozen=True)
class TubeSideResult:
    velocity: float
    reynolds_number: float
    prandtl_number: float
    nusselt_number: float
    htc: float  # W/(m²·K)
    flow_regime: FlowRegime


@dataclass(frozen=True)
class CondenserWallResult:
    wall_temperature: float
    condensation_htc: float
    heat_flux: float  # W/m², outside area
    overall_htc: float  # W/(m²·K), outside area
    converged: bool


def petukhov_friction_factor(reynolds: float) -> float:
    return (0.79 * np.log(reynolds) - 1.64) ** -2


def gnielinski_nusselt(reynolds: float, prandtl: float) -> float:
    re_min, re_max = GNIELINSKI_RE_RANGE
    pr_min, pr_max = GNIELINSKI_PR_RANGE
    if not (re_min <= reynolds <= re_max):
        warnings.warn(f"Reynolds number {reynolds:.1e} outside Gnielinski range", stacklevel=2)
    if not (pr_min <= prandtl <= pr_max):
        warnings.warn(f"Prandtl number {prandtl:.2f} outside Gnielinski range", stacklevel=2)
    f = petukhov_friction_factor(reynolds)
    denominator = 1 + 12.7 * np.sqrt(f / 8) * (prandtl ** (2 / 3) - 1)
    return (f / 8) * (reynolds - 1000) * prandtl / denominator


def tube_side_htc(
    velocity: float, inner_diameter: float, temperature: float, salinity: float = 0.0
) -> TubeSideResult:
    """
    Tube-side coefficient for water or seawater.

    Args:
        velocity: Mean velocity in the tube (m/s)
        inner_diameter: Tube inner diameter (m)
        temperature: Bulk temperature (°C)
        salinity: Salinity (ppm), zero for pure water

    Returns:
        TubeSideResult with Re, Pr, Nu and h (W/m²K).
    """

    if velocity <= 0 or inner_diameter <= 0:
        raise ValueError("Velocity and tube diameter must be positive")

    rho = properties.seawater_density(salinity, temperature)
    mu = properties.seawater_viscosity(salinity, temperature)
    cp = properties.seawater_specific_heat(salinity, temperature) * 1000
    k = properties.seawater_thermal_conductivity(salinity, temperature)

    re = rho * velocity * inner_diameter / mu
    pr = mu * cp / k
    if re <= RE_LAMINAR_LIMIT:
        nu = NUSSELT_LAMINAR
    else:
        nu = gnielinski_nusselt(re, pr)

    return TubeSideResult(
        velocity=velocity,
        reynolds_number=re,
        prandtl_number=pr,
        nusselt_number=nu,
        htc=nu * k / inner_diameter,
        flow_regime=flow_regime(re),
    )


def condensation_htc(
    saturation_temperature: float,
    wall_temperature: float,
    outer_diameter: float,
    n_rows: int = 1,
) -> float:
    """
    Nusselt film condensation on a bank of horizontal tubes (W/m²K).

    h = 0.725 [rho_l (rho_l - rho_v) g h_fg k_l³ / (mu_l D ΔT)]^0.25 * N^(-1/6)
    Liquid properties at the film temperature; ΔT is held at 0.5 K or more.
    """

    if outer_diameter <= 0 or n_rows < 1:
        raise ValueError("Tube diameter must be positive and at least one tube row is needed")

    delta_t = max(saturation_temperature - wall_temperature, MIN_CONDENSATION_DELTA_T)
    t_film = saturation_temperature - 0.5 * delta_t

    rho_l = properties.density_liquid(t_film)
    rho_v = properties.density_vapor(saturation_temperature)
    mu_l = properties.viscosity_liquid(t_film)
    k_l = properties.thermal_conductivity_liquid(t_film)
    h_fg = properties.latent_heat(saturation_temperature) * 1000

    h_single = NUSSELT_CONDENSATION_COEFF * (
        rho_l * (rho_l - rho_v) * GRAVITY * h_fg * k_l**3 / (mu_l * outer_diameter * delta_t)
    ) ** 0.25
    return h_single * n_rows ** (-1 / 6)


def _wall_resistance(
    h_inside: float,
    outer_diameter: float,
    inner_diameter: float,
    wall_conductivity: float,
    fouling_inside: float,
) -> float:
    ratio = outer_diameter / inner_diameter
    return (
        outer_diameter * np.log(ratio) / (2 * wall_conductivity)
        + ratio * fouling_inside
        + ratio / h_inside
    )


def overall_htc(
    h_inside: float,
    h_outside: float,
    outer_diameter: float,
    inner_diameter: float,
    wall_conductivity: float,
    fouling_inside: float = 0.0,
    fouling_outside: float = 0.0,
) -> float:
    """Overall coefficient on the outside area (W/m²K). Fouling resistances in m²K/W."""
    if inner_diameter <= 0 or outer_diameter <= inner_diameter:
        raise ValueError("Outer diameter must exceed a positive inner diameter")
    resistance = (
        1 / h_outside
        + fouling_outside
        + _wall_resistance(
            h_inside, outer_diameter, inner_diameter, wall_conductivity, fouling_inside
        )
    )
    return 1 / resistance


def solve_condenser_wall_temperature(
    saturation_temperature: float,
    coolant_temperature: float,
    h_inside: float,
    outer_diameter: float,
    inner_diameter: float,
    wall_conductivity: float,
    n_rows: int = 1,
    fouling_inside: float = 0.0,
    fouling_outside: float = 0.0,
) -> CondenserWallResult:
    """
    Outside wall temperature at which the condensing film and the wall/tube-side path carry the
    same heat flux. Solved with brentq between the coolant and saturation temperatures.
    """

    if saturation_temperature <= coolant_temperature:
        raise ValueError("Saturation temperature must be above the coolant temperature")

    r_rest = fouling_outside + _wall_resistance(
        h_inside, outer_diameter, inner_diameter, wall_conductivity, fouling_inside
    )

    def residual(t_wall):
        h_c = condensation_htc(saturation_temperature, t_wall, outer_diameter, n_rows)
        return h_c * (saturation_temperature - t_wall) - (t_wall - coolant_temperature) / r_rest

    sol = root_scalar(
        residual, bracket=(coolant_temperature, saturation_temperature), method="brentq"
    )
    if not sol.converged:
        logger.warning("Wall temperature solve did not converge (%s)", sol.flag)

    t_wall = sol.root
    h_c = condensation_htc(saturation_temperature, t_wall, outer_diameter, n_rows)
    q = h_c * (saturation_temperature - t_wall)
    return CondenserWallResult(
        wall_temperature=t_wall,
        condensation_htc=h_c,
        heat_flux=q,
        overall_htc=q / (saturation_temperature - coolant_temperature),
        converged=sol.converged,
    )


__all__ = [
    "NUSSELT_LAMINAR",
    "MIN_CONDENSATION_DELTA_T",
    "TUBE_CONDUCTIVITY",
    "TubeSideResult",
    "CondenserWallResult",
    "petukhov_friction_factor",
    "gnielinski_nusselt",
    "tube_side_htc",
    "condensation_htc",
    "overall_htc",
    "solve_condenser_wall_temperature",
]

__all__ = [
    "InputValidationError",
    "ValidationResult",
    "configure_logging",
    "configure_property_backend",
    "FluidState",
    "to_record",
    "calculate_pressure_drop",
    "calculate_sensible_heat",
    "calculate_latent_heat",
    "calculate_lmtd",
    "calculate_npsha",
    "calculate_mvc",
    "calculate_tvc",
    "calculate_pump",
    "calculate_desuperheating",
    "calculate_dosing",
    "calculate_ncg_properties",
    "calculate_flash_chamber",
    "calculate_siphon",
    "calculate_siphon_train",
    "calculate_suction_system",
]  # top-level calculators; the input/result types live in their modules

__version__ = "2.0.0"

from desal_thermal.desuperheating import calculate_desuperheating
from desal_thermal.dosing import calculate_dosing
from desal_thermal.exceptions import InputValidationError, ValidationResult
from desal_thermal.flash_chamber import calculate_flash_chamber
from desal_thermal.heat_duty import calculate_latent_heat, calculate_lmtd, calculate_sensible_heat
from desal_thermal.logging_utils import configure_logging
from desal_thermal.mvc import calculate_mvc
from desal_thermal.ncg import calculate_ncg_properties
from desal_thermal.npsha import calculate_npsha
from desal_thermal.pressure_drop import calculate_pressure_drop
from desal_thermal.properties import FluidState, configure_property_backend
from desal_thermal.pump import calculate_pump
from desal_thermal.serialization import to_record
from desal_thermal.siphon import calculate_siphon, calculate_siphon_train
from desal_thermal.suction_system import calculate_suction_system
from desal_thermal.tvc import calculate_tvc

"""
Scalar Field Collapse Package

Evolution of a self-gravitating massless scalar field in spherical symmetry
using polar-areal gauge: leapfrog time stepping of the matter fields with
the metric and lapse re-solved from the constraint and slicing equations at
every time level.
"""

# Initialize logging system early
from .utils.logging_config import setup_from_environment

setup_from_environment()

__version__ = "0.1.0"
__author__ = "Scalar Field Collapse Team"

from . import core, equations, solvers, utils
from .config import SimulationConfig
from .core import ConfigurationError, GridParameters, PhysicalParameters, create_radial_grid
from .solvers import EvolutionEngine

__all__ = [
    "ConfigurationError",
    "EvolutionEngine",
    "GridParameters",
    "PhysicalParameters",
    "SimulationConfig",
    "core",
    "create_radial_grid",
    "equations",
    "solvers",
    "utils",
]

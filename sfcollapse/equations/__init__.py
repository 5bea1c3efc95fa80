"""
Field equations for scalar field collapse.

Constraint and slicing solvers, lapse normalization, initial data and
mass diagnostics.
"""

from .constraints import HamiltonianConstraintSolver, NewtonConvergenceWarning, PolarSlicingSolver
from .diagnostics import (
    compactness,
    horizon_forming,
    integrated_mass,
    mass_aspect,
    mass_summary,
    max_compactness,
)
from .gauge import LapseRescaler
from .initial_data import ScalarFieldProfile, generate_initial_data, profile_expression

__all__ = [
    "HamiltonianConstraintSolver",
    "LapseRescaler",
    "NewtonConvergenceWarning",
    "PolarSlicingSolver",
    "ScalarFieldProfile",
    "compactness",
    "generate_initial_data",
    "horizon_forming",
    "integrated_mass",
    "mass_aspect",
    "mass_summary",
    "max_compactness",
    "profile_expression",
]

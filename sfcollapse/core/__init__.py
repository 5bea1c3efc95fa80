"""
Core module for sfcollapse.

This module provides the building blocks shared by every solver: numerical
constants and configuration vocabularies, the radial coordinate mappings,
the immutable radial grid, and the three-level grid functions.
"""

from .constants import (
    COORDINATE_SYSTEMS,
    GAUSSIAN_SHELL,
    GAUSSIAN_SHELL_R3,
    INITIAL_CONDITIONS,
    NEWTON_MAX_ITER,
    NEWTON_TOL,
    NORMAL_FIELD,
    PHANTOM_FIELD,
    SINH_SPHERICAL,
    SPHERICAL,
    TANH_SHELL,
    TANH_SHELL_SQUARED,
    ConfigurationError,
)
from .coordinates import (
    CoordinateSystem,
    SinhSphericalCoordinates,
    SphericalCoordinates,
    create_coordinate_system,
)
from .fields import FieldSet, FieldValidationError, GridFunction, PhysicalParameters
from .grid import GridParameters, create_radial_grid
from .performance import monitor_performance, performance_report

__all__ = [
    "COORDINATE_SYSTEMS",
    "GAUSSIAN_SHELL",
    "GAUSSIAN_SHELL_R3",
    "INITIAL_CONDITIONS",
    "NEWTON_MAX_ITER",
    "NEWTON_TOL",
    "NORMAL_FIELD",
    "PHANTOM_FIELD",
    "SINH_SPHERICAL",
    "SPHERICAL",
    "TANH_SHELL",
    "TANH_SHELL_SQUARED",
    "ConfigurationError",
    "CoordinateSystem",
    "FieldSet",
    "FieldValidationError",
    "GridFunction",
    "GridParameters",
    "PhysicalParameters",
    "SinhSphericalCoordinates",
    "SphericalCoordinates",
    "create_coordinate_system",
    "create_radial_grid",
    "monitor_performance",
    "performance_report",
]

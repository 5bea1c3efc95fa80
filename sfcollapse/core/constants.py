"""
Numerical constants and configuration vocabularies for scalar field collapse.

This module collects the Newton tolerances, the supported coordinate systems
and initial-data families, and the validation helpers that turn unsupported
selections into configuration errors.
"""

import numpy as np

# Geometrized units (G = c = 1)
TWO_PI = 2.0 * np.pi

# Newton-Raphson settings for the Hamiltonian constraint
NEWTON_TOL = 1e-10
NEWTON_MAX_ITER = 10
# Largest change of ln(a) accepted from a single Newton step
NEWTON_MAX_STEP = 0.5

# Coordinate systems
SPHERICAL = "spherical"
SINH_SPHERICAL = "sinh_spherical"
COORDINATE_SYSTEMS = (SPHERICAL, SINH_SPHERICAL)

# Initial-data families
GAUSSIAN_SHELL = "gaussian_shell"
GAUSSIAN_SHELL_R3 = "gaussian_shell_r3"
TANH_SHELL = "tanh_shell"
TANH_SHELL_SQUARED = "tanh_shell_squared"
INITIAL_CONDITIONS = (GAUSSIAN_SHELL, GAUSSIAN_SHELL_R3, TANH_SHELL, TANH_SHELL_SQUARED)

# Sign of the matter term in the Hamiltonian constraint
NORMAL_FIELD = 1
PHANTOM_FIELD = -1

# Lapse rescaling diagnostics
RESCALING_LOG_FILE = "rescaling_values.dat"

# Apparent-horizon indicator: max 2m/r above this flags collapse
HORIZON_COMPACTNESS = 0.995

# Default Courant factor for dt = CFL * min(dr)
COURANT_FACTOR = 0.5


class ConfigurationError(ValueError):
    """Exception for unsupported or inconsistent run configurations."""

    pass


def validate_coordinate_system(name: str) -> str:
    """Validate a coordinate-system tag."""
    if name not in COORDINATE_SYSTEMS:
        raise ConfigurationError(
            f"Unknown coordinate system {name!r}; expected one of {COORDINATE_SYSTEMS}"
        )
    return name


def validate_initial_condition(name: str) -> str:
    """Validate an initial-data selector."""
    if name not in INITIAL_CONDITIONS:
        raise ConfigurationError(
            f"Unknown initial condition {name!r}; expected one of {INITIAL_CONDITIONS}"
        )
    return name


def validate_epsilon(epsilon: int) -> int:
    """Validate the matter sign parameter (+1 normal, -1 phantom)."""
    if epsilon not in (NORMAL_FIELD, PHANTOM_FIELD):
        raise ConfigurationError(f"Sign parameter must be +1 or -1, got {epsilon}")
    return int(epsilon)


def validate_positive(name: str, value: float) -> float:
    """Validate a strictly positive, finite scalar."""
    if not np.isfinite(value) or value <= 0.0:
        raise ConfigurationError(f"{name} must be positive and finite, got {value}")
    return float(value)

"""
Mass function and horizon diagnostics.

In polar-areal gauge the metric function encodes the Misner-Sharp mass,

    1/a^2 = 1 - 2m/r - L r^2/3,

and the Hamiltonian constraint is equivalent to dm/dr = 2 pi eps r^2 (Phi^2 + Pi^2)/a^2.
Comparing the two is a cheap consistency check of the constraint solve, and
2m/r approaching 1 signals apparent-horizon formation.
"""

import numpy as np
from scipy.integrate import cumulative_trapezoid

from ..core.constants import HORIZON_COMPACTNESS, NORMAL_FIELD, TWO_PI
from ..core.grid import GridParameters


def mass_aspect(grid: GridParameters, a: np.ndarray, cosmological_constant: float = 0.0) -> np.ndarray:
    """Misner-Sharp mass m(r) from the metric function."""
    r = grid.r
    return 0.5 * r * (1.0 - 1.0 / a**2 - cosmological_constant * r**2 / 3.0)


def integrated_mass(
    grid: GridParameters,
    Phi: np.ndarray,
    Pi: np.ndarray,
    a: np.ndarray,
    epsilon: int = NORMAL_FIELD,
) -> np.ndarray:
    """Mass enclosed within r from integrating the matter energy density."""
    integrand = TWO_PI * epsilon * grid.r**2 * (Phi**2 + Pi**2) / a**2
    return cumulative_trapezoid(integrand, grid.r, initial=0.0)


def compactness(grid: GridParameters, a: np.ndarray, cosmological_constant: float = 0.0) -> np.ndarray:
    """2m/r with the origin (where it vanishes) set to zero."""
    result = np.zeros(grid.num_points)
    m = mass_aspect(grid, a, cosmological_constant)
    result[1:] = 2.0 * m[1:] / grid.r[1:]
    return result


def max_compactness(grid: GridParameters, a: np.ndarray, cosmological_constant: float = 0.0) -> float:
    return float(np.max(compactness(grid, a, cosmological_constant)))


def horizon_forming(
    grid: GridParameters,
    a: np.ndarray,
    cosmological_constant: float = 0.0,
    threshold: float = HORIZON_COMPACTNESS,
) -> bool:
    """True when 2m/r exceeds ``threshold`` anywhere on the slice."""
    return max_compactness(grid, a, cosmological_constant) > threshold


def mass_summary(
    grid: GridParameters,
    Phi: np.ndarray,
    Pi: np.ndarray,
    a: np.ndarray,
    epsilon: int = NORMAL_FIELD,
    cosmological_constant: float = 0.0,
) -> dict[str, float]:
    """
    Scalar summary of the slice.

    Returns:
        Dictionary with the total mass from the metric, the total mass from
        the matter integral, their difference, and the maximum compactness.
    """
    m_metric = float(mass_aspect(grid, a, cosmological_constant)[-1])
    m_matter = float(integrated_mass(grid, Phi, Pi, a, epsilon)[-1])
    return {
        "mass": m_metric,
        "matter_mass": m_matter,
        "mass_discrepancy": abs(m_metric - m_matter),
        "max_compactness": max_compactness(grid, a, cosmological_constant),
    }

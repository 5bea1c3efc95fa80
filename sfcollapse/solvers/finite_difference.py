"""
Leapfrog finite-difference update of the scalar field variables.

The massless Klein-Gordon equation in polar-areal gauge is written as the
first-order system

    d(phi)/dt = alpha Pi / a
    d(Phi)/dt = d/dr (alpha Pi / a)
    d(Pi)/dt  = (1/S) d/dr (S alpha Phi / a)

with S the volume shape factor of the coordinate mapping. Phi and Pi are
advanced with a centered (leapfrog) step from the previous level; phi uses
a second-order extrapolation of its right-hand side from the current and
previous levels. The scheme starts from a single initial level, so the
first two steps use reduced coefficients.
"""

import numpy as np

from ..core.fields import FieldSet
from ..core.grid import GridParameters
from ..core.performance import monitor_performance
from ..utils.logging_config import get_logger

logger = get_logger("solvers.finite_difference")


def step_coefficients(n: int, dt: float) -> tuple[float, float]:
    """
    Time-step coefficients for step index n.

    Returns:
        (coefficient for Phi and Pi, coefficient for phi):
        n = 0 -> (dt/2, dt/2), n = 1 -> (dt, dt), n >= 2 -> (2 dt, dt)
    """
    if n < 0:
        raise ValueError(f"Step index must be non-negative, got {n}")
    if n >= 2:
        Phi_Pi_coeff = 2.0 * dt
    elif n == 1:
        Phi_Pi_coeff = dt
    else:
        Phi_Pi_coeff = 0.5 * dt
    phi_coeff = dt if n >= 1 else 0.5 * dt
    return Phi_Pi_coeff, phi_coeff


class LeapfrogScheme:
    """
    Interior update of phi, Phi and Pi.

    Every interior point reads only same-index and neighbouring values of
    the current and previous levels and writes only its own slot of the next
    level, so the whole interior is evaluated as single vectorized
    expressions.

    Args:
        grid: Radial grid
    """

    def __init__(self, grid: GridParameters):
        self.grid = grid
        coords = grid.coordinates
        x = grid.x
        self._x_minus = x[:-2]
        self._x_center = x[1:-1]
        self._x_plus = x[2:]
        self._shape = np.asarray(coords.shape_factor(x), dtype=np.float64)
        self._Phi_coefficient = 0.5 * grid.inv_dx * np.asarray(
            coords.dx_dr(self._x_center), dtype=np.float64
        )

    def advance(
        self,
        n: int,
        phi_n: np.ndarray,
        Phi_n: np.ndarray,
        Pi_n: np.ndarray,
        a_n: np.ndarray,
        alpha_n: np.ndarray,
        Phi_nm1: np.ndarray,
        Pi_nm1: np.ndarray,
        a_nm1: np.ndarray,
        alpha_nm1: np.ndarray,
        phi_np1: np.ndarray,
        Phi_np1: np.ndarray,
        Pi_np1: np.ndarray,
    ) -> None:
        """
        Write phi (indices 0..N-2) and Phi, Pi (indices 1..N-2) at level n+1.

        Suffix _n marks the current level, _nm1 the previous, _np1 the next.
        """
        Phi_Pi_coeff, phi_coeff = step_coefficients(n, self.grid.dt)

        alpha_Pi_over_a_n = alpha_n * Pi_n / a_n
        alpha_Pi_over_a_nm1 = alpha_nm1 * Pi_nm1 / a_nm1

        # phi at j = 0 uses the index-0 values of both levels directly
        rhs_phi = 1.5 * alpha_Pi_over_a_n[:-1] - 0.5 * alpha_Pi_over_a_nm1[:-1]
        phi_np1[:-1] = phi_n[:-1] + phi_coeff * rhs_phi

        rhs_Phi = self._Phi_coefficient * (alpha_Pi_over_a_n[2:] - alpha_Pi_over_a_n[:-2])

        alpha_Phi_S_over_a = alpha_n * Phi_n * self._shape / a_n
        rhs_Pi = self.grid.coordinates.central_divergence(
            alpha_Phi_S_over_a[:-2],
            alpha_Phi_S_over_a[2:],
            self._x_minus,
            self._x_center,
            self._x_plus,
        )

        Phi_np1[1:-1] = Phi_nm1[1:-1] + Phi_Pi_coeff * rhs_Phi
        Pi_np1[1:-1] = Pi_nm1[1:-1] + Phi_Pi_coeff * rhs_Pi

    @monitor_performance("leapfrog_step")
    def step(self, n: int, fields: FieldSet) -> None:
        """Advance the matter fields of ``fields`` into their next level."""
        self.advance(
            n,
            fields.phi.current,
            fields.Phi.current,
            fields.Pi.current,
            fields.a.current,
            fields.alpha.current,
            fields.Phi.previous,
            fields.Pi.previous,
            fields.a.previous,
            fields.alpha.previous,
            fields.phi.next,
            fields.Phi.next,
            fields.Pi.next,
        )

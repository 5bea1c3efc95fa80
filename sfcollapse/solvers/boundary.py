"""
Boundary conditions for the scalar field variables.

At the outer edge an outgoing-radiation (Sommerfeld) condition
d(r phi)/dt + d(r phi)/dr = 0 is imposed with second-order one-sided
differences, so that pulses leave the grid without an ingoing reflection.
At the origin the parity of the fields fixes Phi = 0 and dPi/dr = 0.
"""

import numpy as np

from ..core.fields import FieldSet
from ..core.grid import GridParameters
from ..core.performance import monitor_performance
from .finite_difference import step_coefficients


class OutgoingRadiationBoundary:
    """
    Overwrites phi, Phi and Pi at the outermost index J = N-1.

    Must run after the interior update, since the one-sided stencils read
    the freshly computed values at J-1 and J-2.

    Args:
        grid: Radial grid
    """

    def __init__(self, grid: GridParameters):
        self.grid = grid
        self.J = grid.outer_index
        self._x_J = float(grid.x[self.J])
        self._x_Jm2 = float(grid.x[self.J - 2])
        self._r_J = float(grid.r[self.J])
        shape = grid.coordinates.shape_factor(grid.x[self.J - 2 :])
        self._shape_Jm2, self._shape_Jm1, self._shape_J = (float(s) for s in shape)

    def apply(
        self,
        n: int,
        phi_nm1: np.ndarray,
        Pi_nm1: np.ndarray,
        phi_n: np.ndarray,
        Phi_n: np.ndarray,
        a_n: np.ndarray,
        alpha_n: np.ndarray,
        phi_np1: np.ndarray,
        Phi_np1: np.ndarray,
        Pi_np1: np.ndarray,
    ) -> None:
        """Update the boundary values of phi, then Phi, then Pi at level n+1."""
        J = self.J
        coords = self.grid.coordinates
        Phi_Pi_coeff, _ = step_coefficients(n, self.grid.dt)

        rhs_phi = -phi_n[J] / self._r_J - coords.backward_derivative(
            phi_n[J], phi_n[J - 1], phi_n[J - 2], self._x_J
        )
        phi_np1[J] = phi_nm1[J] + Phi_Pi_coeff * rhs_phi

        # Phi from the boundary value just written
        Phi_np1[J] = coords.backward_derivative(
            phi_np1[J], phi_np1[J - 1], phi_np1[J - 2], self._x_J
        )

        term_J = self._shape_J * alpha_n[J] / a_n[J] * Phi_n[J]
        term_Jm1 = self._shape_Jm1 * alpha_n[J - 1] / a_n[J - 1] * Phi_n[J - 1]
        term_Jm2 = self._shape_Jm2 * alpha_n[J - 2] / a_n[J - 2] * Phi_n[J - 2]
        rhs_Pi = coords.backward_divergence(term_J, term_Jm1, term_Jm2, self._x_J, self._x_Jm2)
        Pi_np1[J] = Pi_nm1[J] + Phi_Pi_coeff * rhs_Pi

    @monitor_performance("outgoing_radiation_boundary")
    def apply_to(self, n: int, fields: FieldSet) -> None:
        self.apply(
            n,
            fields.phi.previous,
            fields.Pi.previous,
            fields.phi.current,
            fields.Phi.current,
            fields.a.current,
            fields.alpha.current,
            fields.phi.next,
            fields.Phi.next,
            fields.Pi.next,
        )


class InnerRegularityBoundary:
    """Phi is odd and Pi even in r: Phi(0) = 0 and a one-sided dPi/dr = 0."""

    def apply(self, Phi_np1: np.ndarray, Pi_np1: np.ndarray) -> None:
        Phi_np1[0] = 0.0
        Pi_np1[0] = (4.0 * Pi_np1[1] - Pi_np1[2]) / 3.0

    def apply_to(self, fields: FieldSet) -> None:
        self.apply(fields.Phi.next, fields.Pi.next)

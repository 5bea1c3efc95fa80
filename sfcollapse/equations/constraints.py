"""
Hamiltonian constraint and polar slicing condition in polar-areal gauge.

Both equations are first-order ODEs in r and are integrated outward from
the origin, one grid point at a time. Point j needs the value just solved at
j-1 within the same sweep, so the marches are inherently sequential.

The Hamiltonian constraint is solved for A = ln(a) with Newton-Raphson on

    f(A) = (A - A_{j-1})/dx + h e^{A + A_{j-1}} (1 - L r_m^2) - h - 2 pi eps J (Phi_m^2 + Pi_m^2)

where quantities with subscript m are averages over the cell [j-1, j],
h = 1/(2 R_eff), R_eff = r/(dr/dx) and J = r dr/dx. The lapse follows from
the linearized polar slicing condition in closed form.
"""

import warnings

import numpy as np

from ..core.constants import (
    NEWTON_MAX_ITER,
    NEWTON_MAX_STEP,
    NEWTON_TOL,
    NORMAL_FIELD,
    TWO_PI,
    validate_epsilon,
)
from ..core.grid import GridParameters
from ..core.performance import monitor_performance
from ..utils.logging_config import get_logger, physics_logger

logger = get_logger("equations.constraints")


class NewtonConvergenceWarning(UserWarning):
    """Newton's method exhausted its iteration budget at a grid point."""

    pass


class HamiltonianConstraintSolver:
    """
    Pointwise Newton-Raphson solver for the metric function a.

    Args:
        grid: Radial grid
        epsilon: Matter sign parameter (+1 normal, -1 phantom)
        cosmological_constant: Lambda
        tolerance: Convergence threshold on |dA|
        max_iterations: Newton iteration budget per point
    """

    def __init__(
        self,
        grid: GridParameters,
        epsilon: int = NORMAL_FIELD,
        cosmological_constant: float = 0.0,
        tolerance: float = NEWTON_TOL,
        max_iterations: int = NEWTON_MAX_ITER,
    ):
        self.grid = grid
        self.epsilon = validate_epsilon(epsilon)
        self.cosmological_constant = float(cosmological_constant)
        self.tolerance = tolerance
        self.max_iterations = max_iterations

        coords = grid.coordinates
        x_mid = 0.5 * (grid.x[1:] + grid.x[:-1])
        # Entry k describes the cell between points k and k+1
        self._half_inv_r = 0.5 / coords.effective_radius(x_mid)
        self._cosmological_term = 1.0 - self.cosmological_constant * coords.radius(x_mid) ** 2
        self._matter_coefficient = TWO_PI * self.epsilon * coords.matter_jacobian(x_mid)

        self.last_failures: list[tuple[int, int]] = []

    def solve_point(
        self,
        j: int,
        Phi: np.ndarray,
        Pi: np.ndarray,
        a: np.ndarray,
        initial_guess: float | None = None,
    ) -> float:
        """
        Solve the discretized Hamiltonian constraint at point j >= 1.

        Args:
            j: Grid index
            Phi: Radial derivative variable at the target time level
            Pi: Time derivative variable at the target time level
            a: Metric array whose entry j-1 is already solved
            initial_guess: Starting value for a_j; defaults to a_{j-1}

        Returns:
            a_j. If Newton does not converge, a warning is emitted and the
            last iterate is returned.
        """
        k = j - 1
        inv_dx = self.grid.inv_dx
        A_inner = np.log(a[k])

        avg_Phi = 0.5 * (Phi[j] + Phi[k])
        avg_Pi = 0.5 * (Pi[j] + Pi[k])
        half_inv_r = self._half_inv_r[k]
        cosmological_term = self._cosmological_term[k]
        matter_term = self._matter_coefficient[k] * (avg_Phi * avg_Phi + avg_Pi * avg_Pi)

        A = A_inner
        if initial_guess is not None and np.isfinite(initial_guess) and initial_guess > 0.0:
            A = np.log(initial_guess)

        delta = np.inf
        with np.errstate(over="ignore", invalid="ignore"):
            for _ in range(self.max_iterations):
                curvature = half_inv_r * np.exp(A + A_inner) * cosmological_term
                f = inv_dx * (A - A_inner) + curvature - half_inv_r - matter_term
                df = inv_dx + curvature
                delta = f / df
                if not np.isfinite(delta):
                    # Keep the last finite iterate
                    break
                # Each step changes ln(a) by at most NEWTON_MAX_STEP
                delta = min(max(delta, -NEWTON_MAX_STEP), NEWTON_MAX_STEP)
                A -= delta
                if abs(delta) < self.tolerance:
                    return float(np.exp(A))

        warnings.warn(
            f"Newton's method did not converge to a root! j = {j} | iter = {self.max_iterations}",
            NewtonConvergenceWarning,
            stacklevel=2,
        )
        physics_logger.log_convergence(
            "hamiltonian_constraint", self.max_iterations, float(abs(delta)), False, j=j
        )
        self.last_failures.append((j, self.max_iterations))
        return float(np.exp(A))

    @monitor_performance("hamiltonian_constraint_march")
    def solve(
        self,
        Phi: np.ndarray,
        Pi: np.ndarray,
        a: np.ndarray,
        initial_guess: np.ndarray | None = None,
    ) -> np.ndarray:
        """
        March the constraint outward over the whole grid, writing into ``a``.

        a[0] is set to 1 (regularity at the origin) and never solved.

        Args:
            Phi: Radial derivative variable at the target level
            Pi: Time derivative variable at the target level
            a: Output array, overwritten in place
            initial_guess: Optional per-point starting values, typically the
                metric from the previous time level

        Returns:
            The array ``a``
        """
        self.last_failures = []
        a[0] = 1.0
        for j in range(1, self.grid.num_points):
            guess = None if initial_guess is None else initial_guess[j]
            a[j] = self.solve_point(j, Phi, Pi, a, guess)

        if self.last_failures:
            logger.warning(
                f"Hamiltonian constraint: Newton failed at {len(self.last_failures)} "
                f"of {self.grid.num_points - 1} points"
            )
        return a


class PolarSlicingSolver:
    """
    Closed-form outward recurrence for the lapse alpha.

    With b = a_j + a_{j-1}, c = a_j - a_{j-1} and the cell midpoint m,

        d = (1 - b^2 (1 - L r_m^2)/4) / (2 R_eff) - c/(dx b)
        alpha_j = alpha_{j-1} (1 - d dx) / (1 + d dx)

    Args:
        grid: Radial grid
        cosmological_constant: Lambda
    """

    def __init__(self, grid: GridParameters, cosmological_constant: float = 0.0):
        self.grid = grid
        self.cosmological_constant = float(cosmological_constant)

        coords = grid.coordinates
        x_mid = 0.5 * (grid.x[1:] + grid.x[:-1])
        self._midway_r = coords.effective_radius(x_mid)
        self._cosmological_term = 1.0 - self.cosmological_constant * coords.radius(x_mid) ** 2

    def solve_point(self, j: int, a: np.ndarray, alpha: np.ndarray) -> float:
        """Lapse at point j >= 1 from the solved metric and alpha_{j-1}."""
        k = j - 1
        dx = self.grid.dx
        b = a[j] + a[k]
        c = a[j] - a[k]
        d = (
            (1.0 - 0.25 * b * b * self._cosmological_term[k]) / (2.0 * self._midway_r[k])
            - self.grid.inv_dx * c / b
        )
        return float(alpha[k] * (1.0 - d * dx) / (1.0 + d * dx))

    @monitor_performance("polar_slicing_march")
    def solve(self, a: np.ndarray, alpha: np.ndarray) -> np.ndarray:
        """March outward from alpha[0] = 1, writing into ``alpha``."""
        alpha[0] = 1.0
        for j in range(1, self.grid.num_points):
            alpha[j] = self.solve_point(j, a, alpha)
        return alpha

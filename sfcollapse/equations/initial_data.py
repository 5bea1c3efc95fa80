"""
Initial data for scalar field collapse.

Four closed-form families of time-symmetric pulses are supported. Each
profile is built as a sympy expression in r so that Phi = d(phi)/dr is the
exact derivative rather than a hand-transcribed formula; both are then
lambdified to numpy. Pi vanishes initially, and the metric and lapse are
obtained by marching the constraint and slicing solvers outward.
"""

import numpy as np
import sympy as sp

from ..core.constants import (
    GAUSSIAN_SHELL,
    GAUSSIAN_SHELL_R3,
    NEWTON_MAX_ITER,
    NEWTON_TOL,
    RESCALING_LOG_FILE,
    TANH_SHELL,
    TANH_SHELL_SQUARED,
    ConfigurationError,
)
from ..core.fields import FieldSet, PhysicalParameters
from ..core.grid import GridParameters
from ..core.performance import monitor_performance
from ..utils.logging_config import get_logger
from .constraints import HamiltonianConstraintSolver, PolarSlicingSolver
from .gauge import LapseRescaler

logger = get_logger("equations.initial_data")

R = sp.Symbol("r", real=True, nonnegative=True)


def profile_expression(params: PhysicalParameters) -> sp.Expr:
    """
    Symbolic phi(r, t=0) for the selected family.

    gaussian_shell:      A1 exp(-(r-r1)^2/d1^2) + A2 exp(-(r-r2)^2/d2^2)
    gaussian_shell_r3:   A1 r^3 exp(-(r-r1)^2/d1^2)
    tanh_shell:          A1/2 [tanh((r-r_in)/d1) - tanh((r-r_out)/d1)]
    tanh_shell_squared:  A1 [1 - tanh((r-r1)^2/d1^2)]
    """
    amplitude = sp.Float(params.amplitude)
    width = sp.Float(params.width)
    center = sp.Float(params.center)

    if params.initial_condition == GAUSSIAN_SHELL:
        expr = amplitude * sp.exp(-((R - center) ** 2) / width**2)
        if params.second_amplitude != 0.0:
            expr += sp.Float(params.second_amplitude) * sp.exp(
                -((R - sp.Float(params.second_center)) ** 2) / sp.Float(params.second_width) ** 2
            )
        return expr

    if params.initial_condition == GAUSSIAN_SHELL_R3:
        return amplitude * R**3 * sp.exp(-((R - center) ** 2) / width**2)

    if params.initial_condition == TANH_SHELL:
        inner = sp.Float(params.inner_edge)
        outer = sp.Float(params.outer_edge)
        return sp.Rational(1, 2) * amplitude * (
            sp.tanh((R - inner) / width) - sp.tanh((R - outer) / width)
        )

    if params.initial_condition == TANH_SHELL_SQUARED:
        return amplitude * (1 - sp.tanh((R - center) ** 2 / width**2))

    raise ConfigurationError(f"Unknown initial condition {params.initial_condition!r}")


class ScalarFieldProfile:
    """
    Numerical evaluators for a symbolic initial profile and its r-derivative.

    Args:
        params: Physical parameters selecting the family and its constants
    """

    def __init__(self, params: PhysicalParameters):
        self.params = params
        self.expression = profile_expression(params)
        self.derivative = sp.diff(self.expression, R)
        self._phi = sp.lambdify(R, self.expression, modules="numpy")
        self._dphi_dr = sp.lambdify(R, self.derivative, modules="numpy")

    def phi(self, r: np.ndarray) -> np.ndarray:
        r = np.asarray(r, dtype=np.float64)
        return np.broadcast_to(np.asarray(self._phi(r), dtype=np.float64), r.shape).copy()

    def dphi_dr(self, r: np.ndarray) -> np.ndarray:
        r = np.asarray(r, dtype=np.float64)
        return np.broadcast_to(np.asarray(self._dphi_dr(r), dtype=np.float64), r.shape).copy()

    def __repr__(self) -> str:
        return f"ScalarFieldProfile({self.expression})"


@monitor_performance("initial_data")
def generate_initial_data(
    grid: GridParameters,
    params: PhysicalParameters,
    fields: FieldSet | None = None,
    tolerance: float = NEWTON_TOL,
    max_iterations: int = NEWTON_MAX_ITER,
    rescaling_log: str | None = RESCALING_LOG_FILE,
) -> FieldSet:
    """
    Populate the previous time level of every field.

    Args:
        grid: Radial grid
        params: Physical parameters
        fields: Field set to fill; a new one is created when omitted
        tolerance: Newton tolerance for the Hamiltonian constraint
        max_iterations: Newton iteration budget
        rescaling_log: Lapse-rescaling record file (None disables)

    Returns:
        The populated FieldSet
    """
    if fields is None:
        fields = FieldSet(grid.num_points)

    profile = ScalarFieldProfile(params)
    logger.info(f"Initial data: {params.initial_condition} | phi(r,0) = {profile.expression}")

    phi = fields.phi.previous
    Phi = fields.Phi.previous
    Pi = fields.Pi.previous
    a = fields.a.previous
    alpha = fields.alpha.previous

    phi[:] = profile.phi(grid.r)
    Pi[:] = 0.0
    Phi[:] = profile.dphi_dr(grid.r)
    # Regularity at the origin
    Phi[0] = 0.0

    HamiltonianConstraintSolver(
        grid,
        epsilon=params.epsilon,
        cosmological_constant=params.cosmological_constant,
        tolerance=tolerance,
        max_iterations=max_iterations,
    ).solve(Phi, Pi, a)
    PolarSlicingSolver(grid, cosmological_constant=params.cosmological_constant).solve(a, alpha)

    if params.lapse_rescaling:
        LapseRescaler(
            epsilon=params.epsilon, inverted=params.inverted_rescaling, log_file=rescaling_log
        ).rescale(a, alpha)

    return fields

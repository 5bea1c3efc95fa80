"""
Time evolution of a self-gravitating scalar field.

One step of the engine:

1. leapfrog update of phi, Phi, Pi on the interior,
2. regularity at the origin and outgoing radiation at the outer edge,
3. outward Newton march of the Hamiltonian constraint for a,
4. outward march of the polar slicing condition for alpha,
5. optional lapse rescaling,
6. rotation of the three time levels.

The metric and lapse are recomputed at every level from the matter fields
and never time-stepped themselves.
"""

from typing import Any

from ..core.constants import HORIZON_COMPACTNESS, NEWTON_MAX_ITER, NEWTON_TOL, RESCALING_LOG_FILE
from ..core.fields import FieldSet, PhysicalParameters
from ..core.grid import GridParameters
from ..core.performance import monitor_performance
from ..equations.constraints import HamiltonianConstraintSolver, PolarSlicingSolver
from ..equations.diagnostics import mass_summary
from ..equations.gauge import LapseRescaler
from ..equations.initial_data import generate_initial_data
from ..utils.logging_config import SFLoggerMixin, physics_logger
from .boundary import InnerRegularityBoundary, OutgoingRadiationBoundary
from .finite_difference import LeapfrogScheme, step_coefficients


class EvolutionEngine(SFLoggerMixin):
    """
    Owns the field set and drives the step loop.

    Args:
        grid: Radial grid
        params: Physical parameters
        tolerance: Newton tolerance for the Hamiltonian constraint
        max_iterations: Newton iteration budget per point
        rescale_every: Rescale the lapse every this many steps (0 disables;
            ignored when ``params.lapse_rescaling`` is False)
        rescaling_log: File receiving the rescaling factors (None disables)
        diagnostics_every: Log mass diagnostics every this many steps (0 disables)
        stop_on_horizon: End ``run`` early once 2m/r approaches 1
    """

    def __init__(
        self,
        grid: GridParameters,
        params: PhysicalParameters,
        tolerance: float = NEWTON_TOL,
        max_iterations: int = NEWTON_MAX_ITER,
        rescale_every: int = 0,
        rescaling_log: str | None = RESCALING_LOG_FILE,
        diagnostics_every: int = 0,
        stop_on_horizon: bool = False,
    ):
        self.grid = grid
        self.params = params
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.rescale_every = rescale_every
        self.rescaling_log = rescaling_log
        self.diagnostics_every = diagnostics_every
        self.stop_on_horizon = stop_on_horizon

        self.stepper = LeapfrogScheme(grid)
        self.inner_boundary = InnerRegularityBoundary()
        self.outer_boundary = OutgoingRadiationBoundary(grid)
        self.constraint_solver = HamiltonianConstraintSolver(
            grid,
            epsilon=params.epsilon,
            cosmological_constant=params.cosmological_constant,
            tolerance=tolerance,
            max_iterations=max_iterations,
        )
        self.slicing_solver = PolarSlicingSolver(
            grid, cosmological_constant=params.cosmological_constant
        )
        self.rescaler = (
            LapseRescaler(
                epsilon=params.epsilon,
                inverted=params.inverted_rescaling,
                log_file=rescaling_log,
            )
            if params.lapse_rescaling
            else None
        )

        self.fields: FieldSet | None = None
        self.step_index = 0
        self.time = 0.0
        self.newton_failures = 0

    def initialize(self) -> FieldSet:
        """Build initial data in the previous level and seed the current level from it."""
        self.fields = generate_initial_data(
            self.grid,
            self.params,
            tolerance=self.tolerance,
            max_iterations=self.max_iterations,
            rescaling_log=self.rescaling_log,
        )
        self.fields.seed_current_from_previous()
        self.step_index = 0
        self.time = 0.0
        self.newton_failures = 0
        self.logger.info(f"Initialized {self.grid!r}")
        return self.fields

    @monitor_performance("evolution_step")
    def step(self) -> None:
        """Advance every field by one step and rotate the time levels."""
        if self.fields is None:
            self.initialize()
        fields = self.fields
        n = self.step_index

        self.stepper.step(n, fields)
        self.inner_boundary.apply_to(fields)
        self.outer_boundary.apply_to(n, fields)

        self.constraint_solver.solve(
            fields.Phi.next, fields.Pi.next, fields.a.next, initial_guess=fields.a.current
        )
        self.newton_failures += len(self.constraint_solver.last_failures)
        self.slicing_solver.solve(fields.a.next, fields.alpha.next)

        if self.rescaler is not None and self.rescale_every > 0 and (n + 1) % self.rescale_every == 0:
            self.rescaler.rescale(fields.a.next, fields.alpha.next)

        fields.rotate()
        _, phi_coeff = step_coefficients(n, self.grid.dt)
        self.time += phi_coeff
        self.step_index += 1

    def diagnostics(self) -> dict[str, float]:
        """Mass summary of the current level."""
        fields = self.fields
        return mass_summary(
            self.grid,
            fields.Phi.current,
            fields.Pi.current,
            fields.a.current,
            epsilon=self.params.epsilon,
            cosmological_constant=self.params.cosmological_constant,
        )

    def run(self, num_steps: int) -> dict[str, Any]:
        """
        Take ``num_steps`` steps.

        Returns:
            Summary with the number of steps taken, the final time, the
            Newton failure count and the final mass diagnostics
        """
        if self.fields is None:
            self.initialize()

        horizon = False
        for _ in range(num_steps):
            self.step()
            if self.diagnostics_every > 0 and self.step_index % self.diagnostics_every == 0:
                summary = self.diagnostics()
                horizon = summary["max_compactness"] > HORIZON_COMPACTNESS
                physics_logger.log_mass_diagnostics(
                    self.step_index, self.time, summary["mass"], summary["max_compactness"], horizon
                )
                if horizon and self.stop_on_horizon:
                    self.logger.warning(
                        f"Apparent horizon forming at step {self.step_index}; stopping evolution"
                    )
                    break

        summary = self.diagnostics()
        return {
            "steps": self.step_index,
            "time": self.time,
            "newton_failures": self.newton_failures,
            "horizon_forming": horizon or summary["max_compactness"] > HORIZON_COMPACTNESS,
            **summary,
        }


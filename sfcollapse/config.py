"""
Run configuration for scalar field collapse simulations.

A SimulationConfig gathers grid, matter, numerics and run-control settings
in one flat dataclass that can be loaded from a dictionary or a JSON file
and turned into the grid, the physical parameters and the evolution engine.
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from .core.constants import (
    COURANT_FACTOR,
    GAUSSIAN_SHELL,
    NEWTON_MAX_ITER,
    NEWTON_TOL,
    NORMAL_FIELD,
    RESCALING_LOG_FILE,
    SPHERICAL,
    ConfigurationError,
    validate_coordinate_system,
)
from .core.fields import PhysicalParameters
from .core.grid import GridParameters, create_radial_grid
from .solvers.evolution import EvolutionEngine


@dataclass
class SimulationConfig:
    """Complete description of a collapse run."""

    # Grid
    num_points: int = 801
    coordinate_system: str = SPHERICAL
    dx: float | None = None
    r_max: float | None = 40.0
    sinh_width: float | None = None
    sinh_amplitude: float | None = None
    dt: float | None = None
    courant: float = COURANT_FACTOR

    # Matter and initial pulse
    initial_condition: str = GAUSSIAN_SHELL
    amplitude: float = 0.01
    width: float = 1.0
    center: float = 5.0
    second_amplitude: float = 0.0
    second_width: float = 1.0
    second_center: float = 0.0
    inner_edge: float | None = None
    outer_edge: float | None = None
    epsilon: int = NORMAL_FIELD
    cosmological_constant: float = 0.0

    # Lapse normalization
    lapse_rescaling: bool = True
    inverted_rescaling: bool = False
    rescale_every: int = 1
    rescaling_log: str | None = RESCALING_LOG_FILE

    # Newton-Raphson
    newton_tolerance: float = NEWTON_TOL
    newton_max_iterations: int = NEWTON_MAX_ITER

    # Run control
    num_steps: int = 100
    diagnostics_every: int = 0
    stop_on_horizon: bool = False

    def __post_init__(self):
        """Validate settings that do not depend on building the grid."""
        validate_coordinate_system(self.coordinate_system)
        if self.num_steps < 0:
            raise ConfigurationError(f"num_steps must be non-negative, got {self.num_steps}")
        if self.rescale_every < 0:
            raise ConfigurationError(f"rescale_every must be non-negative, got {self.rescale_every}")
        if self.diagnostics_every < 0:
            raise ConfigurationError(
                f"diagnostics_every must be non-negative, got {self.diagnostics_every}"
            )
        if self.newton_max_iterations < 1:
            raise ConfigurationError(
                f"newton_max_iterations must be at least 1, got {self.newton_max_iterations}"
            )
        if self.newton_tolerance <= 0.0:
            raise ConfigurationError(
                f"newton_tolerance must be positive, got {self.newton_tolerance}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimulationConfig":
        """Build a configuration, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> "SimulationConfig":
        path = Path(path)
        try:
            with open(path) as handle:
                data = json.load(handle)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def build_grid(self) -> GridParameters:
        return create_radial_grid(
            self.num_points,
            coordinate_system=self.coordinate_system,
            dx=self.dx,
            r_max=self.r_max,
            sinh_width=self.sinh_width,
            sinh_amplitude=self.sinh_amplitude,
            dt=self.dt,
            courant=self.courant,
        )

    def build_parameters(self) -> PhysicalParameters:
        return PhysicalParameters(
            initial_condition=self.initial_condition,
            amplitude=self.amplitude,
            width=self.width,
            center=self.center,
            second_amplitude=self.second_amplitude,
            second_width=self.second_width,
            second_center=self.second_center,
            inner_edge=self.inner_edge,
            outer_edge=self.outer_edge,
            epsilon=self.epsilon,
            cosmological_constant=self.cosmological_constant,
            lapse_rescaling=self.lapse_rescaling,
            inverted_rescaling=self.inverted_rescaling,
        )

    def build_engine(self) -> EvolutionEngine:
        """Create the grid, the parameters and an uninitialized evolution engine."""
        return EvolutionEngine(
            self.build_grid(),
            self.build_parameters(),
            tolerance=self.newton_tolerance,
            max_iterations=self.newton_max_iterations,
            rescale_every=self.rescale_every,
            rescaling_log=self.rescaling_log,
            diagnostics_every=self.diagnostics_every,
            stop_on_horizon=self.stop_on_horizon,
        )

"""
Field variables and run parameters for scalar field collapse.

This module defines the three-level grid functions used by the leapfrog
scheme, the set of primary fields (phi, Phi, Pi, a, alpha), and the frozen
bundle of physical parameters describing the initial pulse and the matter
model.
"""

from dataclasses import dataclass

import numpy as np

from .constants import (
    GAUSSIAN_SHELL,
    NORMAL_FIELD,
    PHANTOM_FIELD,
    TANH_SHELL,
    ConfigurationError,
    validate_epsilon,
    validate_initial_condition,
    validate_positive,
)


class FieldValidationError(Exception):
    """Exception for field validation errors."""

    pass


class GridFunction:
    """
    Scalar field sampled on the radial grid at three time levels.

    The three buffers are owned by the grid function and never shared.
    ``previous`` and ``current`` are the read-only sources of a step,
    ``next`` is the level being written. ``rotate`` relabels the buffers
    once a step is complete: previous <- current <- next <- old previous.

    Args:
        name: Field name
        num_points: Grid size N
        fill: Initial value of every level
    """

    LEVELS = ("previous", "current", "next")

    def __init__(self, name: str, num_points: int, fill: float = 0.0):
        if num_points < 1:
            raise FieldValidationError(f"Grid function {name} needs at least one point")
        self.name = name
        self.num_points = int(num_points)
        self._buffers = [np.full(self.num_points, fill, dtype=np.float64) for _ in range(3)]
        self._offset = 0

    @property
    def previous(self) -> np.ndarray:
        return self._buffers[self._offset]

    @property
    def current(self) -> np.ndarray:
        return self._buffers[(self._offset + 1) % 3]

    @property
    def next(self) -> np.ndarray:
        return self._buffers[(self._offset + 2) % 3]

    def level(self, name: str) -> np.ndarray:
        """Return the buffer holding the named level."""
        if name not in self.LEVELS:
            raise FieldValidationError(f"Unknown time level {name!r}; expected one of {self.LEVELS}")
        return getattr(self, name)

    def set_level(self, name: str, values: np.ndarray) -> None:
        """Copy values into the named level."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.num_points,):
            raise FieldValidationError(
                f"{self.name}: expected shape ({self.num_points},), got {values.shape}"
            )
        self.level(name)[:] = values

    def rotate(self) -> None:
        """Advance the time-level labels by one completed step."""
        self._offset = (self._offset + 1) % 3

    def seed_current_from_previous(self) -> None:
        """Copy the initial level into the current level before the first step."""
        self.current[:] = self.previous

    def __repr__(self) -> str:
        return f"GridFunction({self.name!r}, N={self.num_points})"


class FieldSet:
    """
    Primary fields of the evolution.

    phi, Phi and Pi are evolved; a and alpha are re-derived from the
    constraint and slicing equations at every level.
    """

    NAMES = ("phi", "Phi", "Pi", "a", "alpha")

    def __init__(self, num_points: int):
        self.num_points = int(num_points)
        self.phi = GridFunction("phi", num_points)
        self.Phi = GridFunction("Phi", num_points)
        self.Pi = GridFunction("Pi", num_points)
        self.a = GridFunction("a", num_points, fill=1.0)
        self.alpha = GridFunction("alpha", num_points, fill=1.0)

    def __iter__(self):
        return iter(getattr(self, name) for name in self.NAMES)

    def rotate(self) -> None:
        for field in self:
            field.rotate()

    def seed_current_from_previous(self) -> None:
        for field in self:
            field.seed_current_from_previous()

    def snapshot(self, level: str = "current") -> dict[str, np.ndarray]:
        """Copy of every field at one time level."""
        return {field.name: field.level(level).copy() for field in self}


@dataclass(frozen=True)
class PhysicalParameters:
    """
    Matter model and initial-pulse parameters.

    The second Gaussian pulse is switched off by a zero ``second_amplitude``.
    ``inner_edge`` and ``outer_edge`` are the two fronts of the double tanh
    shell. ``inverted_rescaling`` selects the maximum of a/alpha when
    normalizing the lapse and is only valid for a phantom field.
    """

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
    lapse_rescaling: bool = True
    inverted_rescaling: bool = False

    def __post_init__(self) -> None:
        validate_initial_condition(self.initial_condition)
        validate_epsilon(self.epsilon)
        validate_positive("width", self.width)
        if self.second_amplitude != 0.0:
            validate_positive("second_width", self.second_width)
        if not np.isfinite(self.cosmological_constant):
            raise ConfigurationError("Cosmological constant must be finite")

        if self.inverted_rescaling and self.epsilon != PHANTOM_FIELD:
            raise ConfigurationError(
                "Invalid configuration: inverted lapse rescaling is only allowed "
                f"for phantom fields (epsilon = -1), got epsilon = {self.epsilon}"
            )

        if self.initial_condition == TANH_SHELL:
            if self.inner_edge is None or self.outer_edge is None:
                raise ConfigurationError("tanh_shell initial data needs inner_edge and outer_edge")
            if self.inner_edge >= self.outer_edge:
                raise ConfigurationError(
                    f"tanh_shell inner_edge {self.inner_edge} must be below "
                    f"outer_edge {self.outer_edge}"
                )

    @property
    def is_phantom(self) -> bool:
        return self.epsilon == PHANTOM_FIELD

"""
Radial grid management for spherically symmetric collapse simulations.

The grid is uniform in the computational coordinate x with index 0 at the
origin and index N-1 at the outer boundary. The physical radius of every
point is tabulated once through the active coordinate mapping.
"""

import numpy as np

from .constants import (
    COURANT_FACTOR,
    SINH_SPHERICAL,
    ConfigurationError,
    validate_coordinate_system,
    validate_positive,
)
from .coordinates import CoordinateSystem, create_coordinate_system


class GridParameters:
    """
    Immutable per-run radial grid.

    Args:
        num_points: Number of radial points N (at least 3)
        coordinates: Coordinate mapping shared by all solvers
        dt: Time step
    """

    def __init__(self, num_points: int, coordinates: CoordinateSystem, dt: float):
        if int(num_points) != num_points or num_points < 3:
            raise ConfigurationError(
                f"Radial grid needs at least 3 integer points, got {num_points}"
            )
        self._num_points = int(num_points)
        self._coordinates = coordinates
        self._dt = validate_positive("dt", dt)

        x = np.arange(self._num_points, dtype=np.float64) * coordinates.dx
        r = np.asarray(coordinates.radius(x), dtype=np.float64)
        x.setflags(write=False)
        r.setflags(write=False)
        self._x = x
        self._r = r

    @property
    def num_points(self) -> int:
        return self._num_points

    @property
    def coordinates(self) -> CoordinateSystem:
        return self._coordinates

    @property
    def coordinate_system(self) -> str:
        return self._coordinates.name

    @property
    def dx(self) -> float:
        return self._coordinates.dx

    @property
    def inv_dx(self) -> float:
        return self._coordinates.inv_dx

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def x(self) -> np.ndarray:
        """Computational coordinate of every grid index (read-only)."""
        return self._x

    @property
    def r(self) -> np.ndarray:
        """Physical radius of every grid index (read-only)."""
        return self._r

    @property
    def outer_index(self) -> int:
        return self._num_points - 1

    @property
    def r_max(self) -> float:
        return float(self._r[-1])

    def __len__(self) -> int:
        return self._num_points

    def __repr__(self) -> str:
        return (
            f"GridParameters(N={self._num_points}, {self._coordinates!r}, "
            f"dt={self._dt}, r_max={self.r_max})"
        )


def create_radial_grid(
    num_points: int,
    coordinate_system: str = "spherical",
    dx: float | None = None,
    r_max: float | None = None,
    sinh_width: float | None = None,
    sinh_amplitude: float | None = None,
    dt: float | None = None,
    courant: float = COURANT_FACTOR,
) -> GridParameters:
    """
    Create a radial grid.

    Spherical grids take either ``dx`` or ``r_max``. Sinh-spherical grids
    cover x in [0, 1] so dx defaults to 1/(N-1) and ``r_max`` is ignored in
    favour of ``sinh_amplitude``. When ``dt`` is omitted it is set to
    ``courant`` times the smallest physical spacing.

    Args:
        num_points: Number of radial points
        coordinate_system: 'spherical' or 'sinh_spherical'
        dx: Computational spacing
        r_max: Outer radius for spherical grids
        sinh_width: Compactification width W
        sinh_amplitude: Outer physical radius A
        dt: Time step
        courant: Courant factor used when dt is omitted

    Returns:
        Configured GridParameters
    """
    validate_coordinate_system(coordinate_system)
    if num_points < 3:
        raise ConfigurationError(f"Radial grid needs at least 3 points, got {num_points}")

    if dx is None:
        if coordinate_system == SINH_SPHERICAL:
            dx = 1.0 / (num_points - 1)
        elif r_max is not None:
            dx = validate_positive("r_max", r_max) / (num_points - 1)
        else:
            raise ConfigurationError("Spherical grids need either dx or r_max")

    coordinates = create_coordinate_system(coordinate_system, dx, sinh_width, sinh_amplitude)

    if dt is None:
        x = np.arange(num_points, dtype=np.float64) * coordinates.dx
        min_spacing = float(np.min(np.diff(coordinates.radius(x))))
        dt = validate_positive("courant", courant) * min_spacing

    return GridParameters(num_points, coordinates, dt)

"""
Radial coordinate mappings for spherically symmetric evolutions.

Every formula in the evolution engine is written once against the
CoordinateSystem interface. The computational coordinate x is uniformly
spaced; each mapping supplies the physical areal radius r(x), the Jacobian
dr/dx, the volume shape factor that appears inside the radial divergence,
and the centered and one-sided divergence stencils built from them.
"""

from abc import ABC, abstractmethod

import numpy as np

from .constants import (
    SINH_SPHERICAL,
    SPHERICAL,
    ConfigurationError,
    validate_coordinate_system,
    validate_positive,
)


class CoordinateSystem(ABC):
    """
    Abstract radial mapping x -> r(x).

    Args:
        dx: Uniform spacing of the computational coordinate
    """

    name: str = ""

    def __init__(self, dx: float):
        self.dx = validate_positive("dx", dx)
        self.inv_dx = 1.0 / self.dx

    @abstractmethod
    def radius(self, x: np.ndarray | float) -> np.ndarray | float:
        """Physical areal radius r(x)."""
        pass

    @abstractmethod
    def dr_dx(self, x: np.ndarray | float) -> np.ndarray | float:
        """Jacobian dr/dx."""
        pass

    @abstractmethod
    def shape_factor(self, x: np.ndarray | float) -> np.ndarray | float:
        """Volume-element factor carried inside the radial divergence."""
        pass

    @abstractmethod
    def effective_radius(self, x: np.ndarray | float) -> np.ndarray | float:
        """r / (dr/dx), the radius seen by x-derivative forms of the constraints."""
        pass

    @abstractmethod
    def central_divergence(
        self, f_minus: np.ndarray, f_plus: np.ndarray, x_minus: np.ndarray,
        x_center: np.ndarray, x_plus: np.ndarray,
    ) -> np.ndarray:
        """
        Centered approximation of (1/S) d(f)/dr at x_center.

        f is expected to already carry the shape factor S.
        """
        pass

    @abstractmethod
    def backward_divergence(
        self, f_J: float, f_Jm1: float, f_Jm2: float, x_J: float, x_Jm2: float
    ) -> float:
        """Three-point one-sided version of central_divergence at the outer edge."""
        pass

    def dx_dr(self, x: np.ndarray | float) -> np.ndarray | float:
        """Inverse Jacobian dx/dr."""
        return 1.0 / self.dr_dx(x)

    def matter_jacobian(self, x: np.ndarray | float) -> np.ndarray | float:
        """r * dr/dx, multiplying the matter source of the Hamiltonian constraint."""
        return self.radius(x) * self.dr_dx(x)

    def backward_derivative(self, f_J: float, f_Jm1: float, f_Jm2: float, x_J: float) -> float:
        """Second-order backward df/dr at the outer edge."""
        return (
            self.dx_dr(x_J) * 0.5 * self.inv_dx * (3.0 * f_J - 4.0 * f_Jm1 + f_Jm2)
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dx={self.dx})"


class SphericalCoordinates(CoordinateSystem):
    """Linear mapping r = x."""

    name = SPHERICAL

    def radius(self, x):
        return x

    def dr_dx(self, x):
        return np.ones_like(x) if isinstance(x, np.ndarray) else 1.0

    def shape_factor(self, x):
        return x * x

    def effective_radius(self, x):
        return x

    def matter_jacobian(self, x):
        return x

    def central_divergence(self, f_minus, f_plus, x_minus, x_center, x_plus):
        # Volume-weighted difference: d/d(r^3/3) keeps the origin regular
        return 3.0 * (f_plus - f_minus) / (x_plus**3 - x_minus**3)

    def backward_divergence(self, f_J, f_Jm1, f_Jm2, x_J, x_Jm2):
        return 3.0 * (3.0 * f_J - 4.0 * f_Jm1 + f_Jm2) / (x_J**3 - x_Jm2**3)


class SinhSphericalCoordinates(CoordinateSystem):
    """
    Compactified mapping r = A sinh(x/W) / sinh(1/W) on x in [0, 1].

    Small widths W cluster resolution near the origin while the outer
    boundary sits at r(1) = A.

    Args:
        dx: Uniform spacing of x
        width: Compactification width W
        amplitude: Physical radius A of the outer boundary
    """

    name = SINH_SPHERICAL

    def __init__(self, dx: float, width: float, amplitude: float):
        super().__init__(dx)
        self.width = validate_positive("sinh width", width)
        self.amplitude = validate_positive("sinh amplitude", amplitude)
        self.inv_width = 1.0 / self.width
        self.sinh_inv_width = np.sinh(self.inv_width)
        self.amplitude_over_sinh_inv_width = self.amplitude / self.sinh_inv_width

    def radius(self, x):
        return self.amplitude_over_sinh_inv_width * np.sinh(x * self.inv_width)

    def dr_dx(self, x):
        return self.amplitude_over_sinh_inv_width * self.inv_width * np.cosh(x * self.inv_width)

    def shape_factor(self, x):
        return np.sinh(x * self.inv_width) ** 2

    def effective_radius(self, x):
        return self.width * np.tanh(x * self.inv_width)

    def matter_jacobian(self, x):
        sinh_x = np.sinh(x * self.inv_width)
        cosh_x = np.cosh(x * self.inv_width)
        return (
            self.amplitude**2 * self.inv_width * sinh_x * cosh_x / self.sinh_inv_width**2
        )

    def central_divergence(self, f_minus, f_plus, x_minus, x_center, x_plus):
        coefficient = 0.5 * self.inv_dx * self.dx_dr(x_center) / self.shape_factor(x_center)
        return coefficient * (f_plus - f_minus)

    def backward_divergence(self, f_J, f_Jm1, f_Jm2, x_J, x_Jm2):
        coefficient = 0.5 * self.inv_dx * self.dx_dr(x_J) / self.shape_factor(x_J)
        return coefficient * (3.0 * f_J - 4.0 * f_Jm1 + f_Jm2)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(dx={self.dx}, width={self.width}, "
            f"amplitude={self.amplitude})"
        )


def create_coordinate_system(
    name: str,
    dx: float,
    sinh_width: float | None = None,
    sinh_amplitude: float | None = None,
) -> CoordinateSystem:
    """
    Factory for coordinate mappings.

    Args:
        name: 'spherical' or 'sinh_spherical'
        dx: Computational grid spacing
        sinh_width: Compactification width (sinh_spherical only)
        sinh_amplitude: Outer physical radius (sinh_spherical only)

    Raises:
        ConfigurationError: For unknown tags or missing sinh constants
    """
    validate_coordinate_system(name)
    if name == SPHERICAL:
        return SphericalCoordinates(dx)

    if sinh_width is None or sinh_amplitude is None:
        raise ConfigurationError(
            "sinh_spherical coordinates require both sinh_width and sinh_amplitude"
        )
    return SinhSphericalCoordinates(dx, sinh_width, sinh_amplitude)

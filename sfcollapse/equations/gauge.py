"""
Lapse normalization for the polar slicing condition.

The slicing recurrence fixes alpha only up to a constant factor. The
rescaler picks kappa = min_j a_j/alpha_j (max_j for the inverted, phantom
variant) and multiplies the lapse by it, so that alpha matches 1/a where the
ratio is extremal, typically the outer boundary.
"""

from pathlib import Path

import numpy as np

from ..core.constants import PHANTOM_FIELD, RESCALING_LOG_FILE, ConfigurationError
from ..core.performance import monitor_performance
from ..utils.logging_config import physics_logger


class LapseRescaler:
    """
    Global rescaling of the lapse.

    Args:
        epsilon: Matter sign parameter
        inverted: Use the maximum of a/alpha (phantom fields only)
        log_file: File receiving one "<initial_kappa> <final_kappa>" line per
            call; None disables the file record
    """

    def __init__(
        self,
        epsilon: int = 1,
        inverted: bool = False,
        log_file: str | Path | None = RESCALING_LOG_FILE,
    ):
        if inverted and epsilon != PHANTOM_FIELD:
            raise ConfigurationError(
                "Invalid configuration. Rescaling can only be inverted for phantom fields "
                f"(epsilon = -1), got epsilon = {epsilon}"
            )
        self.epsilon = epsilon
        self.inverted = inverted
        self.log_file = Path(log_file) if log_file is not None else None

    def compute_kappa(self, a: np.ndarray, alpha: np.ndarray) -> tuple[float, float]:
        """Return (a_0/alpha_0, extremal a/alpha over the grid)."""
        ratio = a / alpha
        initial_kappa = float(ratio[0])
        kappa = float(np.max(ratio) if self.inverted else np.min(ratio))
        return initial_kappa, kappa

    @monitor_performance("lapse_rescaling")
    def rescale(self, a: np.ndarray, alpha: np.ndarray) -> float:
        """
        Rescale ``alpha`` in place.

        Returns:
            The factor kappa applied to the lapse
        """
        initial_kappa, kappa = self.compute_kappa(a, alpha)
        alpha *= kappa

        if self.log_file is not None:
            with open(self.log_file, "a") as handle:
                handle.write(f"{initial_kappa:.15e} {kappa:.15e}\n")
        physics_logger.log_lapse_rescaling(initial_kappa, kappa, self.inverted)
        return kappa

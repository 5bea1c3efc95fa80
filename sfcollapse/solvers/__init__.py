"""
Time integration for spherically symmetric scalar field collapse.

This module provides the pieces of a single evolution step:

- **LeapfrogScheme**: vectorized interior update of phi, Phi and Pi
- **OutgoingRadiationBoundary**: Sommerfeld condition at the outer edge
- **InnerRegularityBoundary**: parity conditions at the origin
- **EvolutionEngine**: step loop that re-solves the metric and lapse at
  every level and rotates the time levels

## Quick Start

```python
from sfcollapse.core import PhysicalParameters, create_radial_grid
from sfcollapse.solvers import EvolutionEngine

grid = create_radial_grid(801, r_max=40.0)
params = PhysicalParameters(amplitude=0.01, width=1.0, center=5.0)

engine = EvolutionEngine(grid, params, rescale_every=10, diagnostics_every=100)
summary = engine.run(1000)
```
"""

from .boundary import InnerRegularityBoundary, OutgoingRadiationBoundary
from .evolution import EvolutionEngine
from .finite_difference import LeapfrogScheme, step_coefficients

__all__ = [
    "EvolutionEngine",
    "InnerRegularityBoundary",
    "LeapfrogScheme",
    "OutgoingRadiationBoundary",
    "step_coefficients",
]

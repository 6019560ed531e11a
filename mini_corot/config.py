# mini_corot/config.py
"""
Configuration: offset interpretation flags and numerical tolerances.
"""

from dataclasses import dataclass
from enum import IntFlag


class OffsetFlag(IntFlag):
    """How rigid joint offsets combine with the nodal geometry."""
    NONE = 0            # Offsets are global vectors
    LOCAL = 1           # Offsets are given in the element local frame
    NORMALIZED = 2      # Offsets are fractions of the node-to-node length


@dataclass
class Tolerances:
    """Numerical tolerances shared by the kernel and the transformation."""

    # Reference vector vs. chord: |vecxz x e1| below this is "parallel"
    parallel_tol: float = 1.0e-12

    # Below this rotation angle the log-map coefficients use series expansions
    small_angle: float = 5.0e-2

    # |cos(theta)| below this triggers a warning in the tan(theta) correction
    tan_warning_cos: float = 1.0e-2

    # Newton harness defaults
    residual_tol: float = 1.0e-9
    max_iter: int = 25


# Global tolerance instance
TOLERANCES = Tolerances()

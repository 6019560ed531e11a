# mini_corot/kernel - Element-agnostic numerical core
"""
KERNEL: ROTATION ALGEBRA, DOF INDEXING, ASSEMBLY AND SOLVING
============================================================

Nothing in this package knows what a frame element is:
- so3.py        rotation matrices, versors, exp/log maps, dexp^-1
- dof.py        (node, local_dof) -> flat index, for element and global vectors
- assemble.py   scatter-add of element contributions
- solve.py      partitioned linear solve, load-stepped Newton driver
"""

from .dof import DOFManager, DOF_3D_FRAME
from .solve import solve_linear, solve_newton, MechanismError, ConvergenceError

__all__ = [
    'DOFManager', 'DOF_3D_FRAME',
    'solve_linear', 'solve_newton', 'MechanismError', 'ConvergenceError',
]

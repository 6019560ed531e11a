# mini_corot/v3d/model.py
"""
3D MODEL DEFINITIONS: FrameNode3D and Frame3D
=============================================

PURPOSE:
--------
This module defines the data structures the corotational transformation
talks to:
- FrameNode3D: a point in 3D space carrying trial and committed
  displacements (3 translations + 3 rotation-vector components)
- Frame3D: a two-node spatial beam record (section properties)

DISPLACEMENT CONTRACT:
----------------------
A node reports TOTAL displacements, accumulated since the start of the
analysis:

    trial_displacement      current iterate
    committed_displacement  last converged state

The rotational components are the running sum of the rotation increments
applied by the solver. They are NOT a rotation vector of the finite
nodal rotation; the transformation composes the increments into a
quaternion itself and only uses differences of these components.
"""

from dataclasses import dataclass, field

import numpy as np


def _zeros6() -> np.ndarray:
    return np.zeros(6, dtype=float)


@dataclass
class FrameNode3D:
    """
    A node (joint) of a spatial frame with 6 DOFs: ux, uy, uz, rx, ry, rz.

    Parameters:
    -----------
    id : int
        Unique identifier for this node (used for DOF mapping)
    x, y, z : float
        Coordinates in the global system

    Examples:
    ---------
    >>> n = FrameNode3D(0, 0.0, 0.0, 0.0)
    >>> n.set_trial_displacement([0.0, 0.0, 1.0, 0.0, 0.0, 0.0])
    >>> n.incremental_displacement()
    array([0., 0., 1., 0., 0., 0.])

    Notes:
    ------
    Unlike the frozen model records, nodes are mutable: the solver writes
    trial displacements into them and commits/reverts them.
    """
    id: int
    x: float
    y: float
    z: float
    trial_displacement: np.ndarray = field(default_factory=_zeros6)
    committed_displacement: np.ndarray = field(default_factory=_zeros6)

    def coordinates(self) -> np.ndarray:
        """Reference coordinates (3,)."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def set_trial_displacement(self, d) -> None:
        d = np.asarray(d, dtype=float)
        if d.shape != (6,):
            raise ValueError(f"Node {self.id}: expected 6 displacement components, got {d.shape}")
        self.trial_displacement = d.copy()

    def incremental_displacement(self) -> np.ndarray:
        """Trial minus committed displacement."""
        return self.trial_displacement - self.committed_displacement

    def commit(self) -> None:
        self.committed_displacement = self.trial_displacement.copy()

    def revert_to_last_commit(self) -> None:
        self.trial_displacement = self.committed_displacement.copy()

    def revert_to_start(self) -> None:
        self.trial_displacement = _zeros6()
        self.committed_displacement = _zeros6()


@dataclass(frozen=True)
class Frame3D:
    """
    A two-node spatial beam (Euler-Bernoulli) with uniform section.

    Parameters:
    -----------
    id : int
        Element identifier
    ni, nj : int
        Start and end node IDs
    E, G : float
        Young's and shear modulus (Pa)
    A : float
        Cross-sectional area (m²)
    Iy, Iz : float
        Second moments of area about local y and z (m⁴)
    J : float
        Torsion constant (m⁴)
    vecxz : tuple
        Reference vector in the local x-z plane
    """
    id: int
    ni: int
    nj: int
    E: float
    G: float
    A: float
    Iy: float
    Iz: float
    J: float
    vecxz: tuple = (0.0, 0.0, 1.0)

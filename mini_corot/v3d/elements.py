# mini_corot/v3d/elements.py
"""
3D FRAME GEOMETRY: Chord, Orientation, Offsets and Basic Stiffness
==================================================================

PURPOSE:
--------
This module computes the reference geometry of a spatial frame element:

    dX = X_J - X_I          (chord, between offset end points if any)
    L  = |dX|               (reference length, must be > 0)
    R0 = [e1 e2 e3]         (reference orientation)

The orientation uses a user supplied reference vector vecxz that lies in
the local x-z plane and fixes the twist about the chord:

    e1 = dX / L
    e2 = (vecxz x e1) / |vecxz x e1|
    e3 = e1 x e2

so a horizontal member along X with vecxz = (0, 0, 1) gets e2 = Y and
e3 = Z. A reference vector parallel to the chord leaves e2 undefined and
is rejected.

It also provides the linear-elastic stiffness of the element expressed in
the local deformation coordinates ul of the corotational transformation.
The transformation itself never evaluates section response; this matrix
exists for the verification harness and the demos.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from ..config import OffsetFlag, TOLERANCES
from ..errors import DegenerateGeometryError
from ..kernel.dof import DOFManager, DOF_3D_FRAME
from .model import Frame3D


def chord_geometry(
    xi: np.ndarray,
    xj: np.ndarray,
    element_id: Optional[int] = None
) -> Tuple[float, np.ndarray]:
    """
    Compute the chord vector and length between two points.

    Parameters:
    -----------
    xi, xj : np.ndarray
        End point coordinates (3,)
    element_id : int, optional
        Used in the error message only

    Returns:
    --------
    Tuple[float, np.ndarray]
        (L, dX) with dX = xj - xi

    Raises:
    -------
    DegenerateGeometryError
        If both points coincide
    """
    dX = np.asarray(xj, dtype=float) - np.asarray(xi, dtype=float)
    L = float(np.linalg.norm(dX))
    if L <= 0.0:
        raise DegenerateGeometryError(
            f"Element {element_id} has zero length (end points at {tuple(np.asarray(xi, dtype=float))})"
        )
    return L, dX


def orientation_matrix(
    dX: np.ndarray,
    vecxz: Sequence[float],
    element_id: Optional[int] = None
) -> np.ndarray:
    """
    Build the reference orientation R0 from the chord and a reference vector.

    Parameters:
    -----------
    dX : np.ndarray
        Chord vector (3,), nonzero
    vecxz : Sequence[float]
        Vector in the local x-z plane, not parallel to dX

    Returns:
    --------
    np.ndarray
        3x3 orthonormal matrix whose columns are the local axes e1, e2, e3

    Raises:
    -------
    DegenerateGeometryError
        If vecxz is (numerically) parallel to the chord

    Example:
    --------
    >>> orientation_matrix(np.array([10.0, 0, 0]), (0, 0, 1))
    array([[1., 0., 0.],
           [0., 1., 0.],
           [0., 0., 1.]])
    """
    dX = np.asarray(dX, dtype=float)
    e1 = dX / np.linalg.norm(dX)

    v = np.asarray(vecxz, dtype=float)
    e2 = np.cross(v, e1)
    ynorm = np.linalg.norm(e2)
    if ynorm <= TOLERANCES.parallel_tol * max(np.linalg.norm(v), 1.0):
        raise DegenerateGeometryError(
            f"Element {element_id}: reference vector {tuple(v)} is parallel to the chord"
        )
    e2 /= ynorm
    e3 = np.cross(e1, e2)

    R0 = np.zeros((3, 3), dtype=float)
    R0[:, 0], R0[:, 1], R0[:, 2] = e1, e2, e3
    return R0


def global_offsets(
    xi: np.ndarray,
    xj: np.ndarray,
    vecxz: Sequence[float],
    offsets: Optional[np.ndarray] = None,
    flags: OffsetFlag = OffsetFlag.NONE,
    element_id: Optional[int] = None
) -> np.ndarray:
    """
    Resolve rigid joint offsets into global vectors.

    Offsets are global vectors unless flags say otherwise:
    - OffsetFlag.LOCAL: components along the node-to-node local axes
    - OffsetFlag.NORMALIZED: multiples of the node-to-node length

    Parameters:
    -----------
    xi, xj : np.ndarray
        Node coordinates (3,)
    offsets : np.ndarray, optional
        (2, 3) array, one offset per end; None means no offsets

    Returns:
    --------
    np.ndarray
        (2, 3) array of global offset vectors, node to end point
    """
    if offsets is None:
        return np.zeros((2, 3))

    o = np.array([offsets[0], offsets[-1]], dtype=float)
    if flags & (OffsetFlag.LOCAL | OffsetFlag.NORMALIZED):
        L0, dX0 = chord_geometry(xi, xj, element_id)
        if flags & OffsetFlag.NORMALIZED:
            o *= L0
        if flags & OffsetFlag.LOCAL:
            R = orientation_matrix(dX0, vecxz, element_id)
            o = o @ R.T
    return o


def offset_end_points(
    xi: np.ndarray,
    xj: np.ndarray,
    vecxz: Sequence[float],
    offsets: Optional[np.ndarray] = None,
    flags: OffsetFlag = OffsetFlag.NONE,
    element_id: Optional[int] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Shift the element end points by rigid joint offsets.

    See global_offsets() for how flags are interpreted.

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray]
        Offset end points (xi', xj')
    """
    xi = np.asarray(xi, dtype=float)
    xj = np.asarray(xj, dtype=float)
    if offsets is None:
        return xi, xj
    o = global_offsets(xi, xj, vecxz, offsets, flags, element_id)
    return xi + o[0], xj + o[1]


def frame3d_basic_stiffness(
    element: Frame3D,
    L: float,
    dof: DOFManager = DOF_3D_FRAME
) -> np.ndarray:
    """
    Linear-elastic stiffness in the local deformation coordinates ul.

    Only the natural deformation modes carry stiffness:
    - axial elongation at the axial slot of end J:     EA/L
    - torsion (rx_I, rx_J):                            GJ/L [ 1 -1; -1 1]
    - bending about y (ry_I, ry_J) and z (rz_I, rz_J): EI/L [ 4  2;  2 4]

    Rotations are measured relative to the corotated chord, so the
    translational rows of the matrix stay zero.

    Returns:
    --------
    np.ndarray
        12x12 symmetric stiffness matrix
    """
    k = np.zeros((dof.ndof(2), dof.ndof(2)), dtype=float)

    a = dof.axial(1)
    k[a, a] = element.E * element.A / L

    GJ_L = element.G * element.J / L
    EIy_L = element.E * element.Iy / L
    EIz_L = element.E * element.Iz / L

    blocks = [
        (0, np.array([[GJ_L, -GJ_L], [-GJ_L, GJ_L]])),
        (1, EIy_L * np.array([[4.0, 2.0], [2.0, 4.0]])),
        (2, EIz_L * np.array([[4.0, 2.0], [2.0, 4.0]])),
    ]
    for axis, kb in blocks:
        i = dof.idx(0, 3 + axis)
        j = dof.idx(1, 3 + axis)
        k[np.ix_([i, j], [i, j])] += kb

    return k

# mini_corot/kernel/assemble.py
"""
ASSEMBLY: Scatter-Add of Element Contributions
==============================================

PURPOSE:
--------
The corotational transformation hands back element quantities in global
coordinates (12x12 tangent, 12-vector of resisting forces). Building the
structural system from them is a pure bookkeeping step: each element
contribution lands at the rows/columns given by its DOF map.

    K[map, map] += k_e
    F[map]      += f_e

Element type plays no role here. Repeated indices inside a single map are
accumulated (np.add.at), not overwritten.

USAGE:
------
    contributions = []
    for elem, transf in zip(elements, transforms):
        dof_map = dof.element_dof_map([elem.ni, elem.nj])
        contributions.append((dof_map, transf.push_stiffness(kl, pl)))

    K = assemble_global_K(dof.ndof(n_nodes), contributions)
"""

from typing import List, Sequence, Tuple

import numpy as np


def assemble_global_K(
    ndof: int,
    contributions: Sequence[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global tangent stiffness from element matrices.

    Parameters:
    -----------
    ndof : int
        Size of the global system
    contributions : Sequence[Tuple[List[int], np.ndarray]]
        (dof_map, ke) pairs; ke has shape (len(dof_map), len(dof_map)) and is
        already expressed in global coordinates

    Returns:
    --------
    np.ndarray
        Global matrix (ndof x ndof). Corotational tangents are not symmetric
        away from equilibrium, so neither is K.
    """
    K = np.zeros((ndof, ndof), dtype=float)
    for dof_map, ke in contributions:
        n = len(dof_map)
        assert ke.shape == (n, n), \
            f"Element matrix shape {ke.shape} doesn't match dof_map length {n}"
        np.add.at(K, np.ix_(dof_map, dof_map), ke)
    return K


def assemble_global_F(
    ndof: int,
    contributions: Sequence[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global force vector (resisting forces or loads).

    Parameters:
    -----------
    ndof : int
        Size of the global system
    contributions : Sequence[Tuple[List[int], np.ndarray]]
        (dof_map, fe) pairs with fe of shape (len(dof_map),)
    """
    F = np.zeros(ndof, dtype=float)
    for dof_map, fe in contributions:
        n = len(dof_map)
        assert fe.shape == (n,), \
            f"Element vector shape {fe.shape} doesn't match dof_map length {n}"
        np.add.at(F, dof_map, fe)
    return F


def add_nodal_load(
    F: np.ndarray,
    node_id: int,
    load_vector: Sequence[float],
    dof_per_node: int = 6
) -> None:
    """
    Add a nodal load [Fx, Fy, Fz, Mx, My, Mz] to F in place.

    >>> F = np.zeros(12)
    >>> add_nodal_load(F, 1, [0, 0, 0, 0, 0, 5.0])
    >>> F[11]
    5.0
    """
    load_vector = np.asarray(load_vector, dtype=float)
    base = dof_per_node * node_id
    F[base:base + len(load_vector)] += load_vector

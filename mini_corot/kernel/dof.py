# mini_corot/kernel/dof.py
"""
DOF MANAGER: Node-Count / DOF-Count Indexing
============================================

PURPOSE:
--------
This module handles the mapping from (node, local_dof) to a flat index.
The same mapping serves two vectors:

    Global system:   node = model node id,   size = dof_per_node * n_nodes
    Element vector:  node = element end (0..nn-1), size = dof_per_node * nn

For a spatial frame every node carries 6 DOFs, ordered

    0: ux   1: uy   2: uz   3: rx   4: ry   5: rz

so a 2-node element vector is [u_I(3), r_I(3), u_J(3), r_J(3)] and the
element's local deformation vector ul uses exactly the same slots:
the axial slot of each end is its first translational DOF.

USAGE:
------
    dof = DOFManager(dof_per_node=6)

    dof.idx(1, 0)          # → 6   (axial slot of end J)
    dof.rotation(0)        # → slice(3, 6)
    dof.element_dof_map([4, 7])  # → global indices of a 4-7 element
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DOFManager:
    """
    Manages degree-of-freedom indexing for nodes with a fixed DOF count.

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (6 for a 3D frame: ux, uy, uz, rx, ry, rz)

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=6)
    >>> dof.idx(1, 3)      # Node 1, rx
    9
    >>> dof.ndof(2)        # 2-node element vector
    12
    >>> dof.node_dofs(1)
    [6, 7, 8, 9, 10, 11]
    """
    dof_per_node: int

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Flat index of a node's local DOF.

        Parameters:
        -----------
        node_id : int
            Node identifier (global id, or element end index 0..nn-1)
        local_dof : int
            DOF within the node (0 to dof_per_node-1)
        """
        return self.dof_per_node * node_id + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total DOFs for n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        All flat indices of a single node.

        >>> DOFManager(dof_per_node=6).node_dofs(2)
        [12, 13, 14, 15, 16, 17]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: List[int]) -> List[int]:
        """
        Gather/scatter map of an element connecting several nodes.

        >>> DOFManager(dof_per_node=6).element_dof_map([0, 2])
        [0, 1, 2, 3, 4, 5, 12, 13, 14, 15, 16, 17]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def translation(self, node_id: int) -> slice:
        """Slice of the three translational DOFs of a node."""
        base = self.dof_per_node * node_id
        return slice(base, base + 3)

    def rotation(self, node_id: int) -> slice:
        """Slice of the three rotational DOFs of a node (6-DOF nodes only)."""
        if self.dof_per_node < 6:
            raise ValueError(f"Nodes with {self.dof_per_node} DOFs carry no rotations.")
        base = self.dof_per_node * node_id
        return slice(base + 3, base + 6)

    def axial(self, node_id: int) -> int:
        """Index of the axial (first translational) DOF of a node."""
        return self.idx(node_id, 0)


# Pre-configured manager for spatial frames
DOF_3D_FRAME = DOFManager(dof_per_node=6)   # ux, uy, uz, rx, ry, rz

# mini_corot/v3d/assembly.py
"""
FRAME ASSEMBLY: A Small Structural System Built on the Transformation
=====================================================================

PURPOSE:
--------
Owns the nodes, the Frame3D records and one EuclidFrameTransform per
element, and exposes the four calls a nonlinear solver needs:

    set_trial(d)             write trial displacements, update transforms
    response()               global tangent K_t and resisting forces R_int
    commit()                 accept the current state
    revert_to_last_commit()  discard the current iteration

Each element uses the linear-elastic basic stiffness kl evaluated at the
reference length, so pl = kl · ul and the element behaves as a
hyperelastic corotational beam.

USAGE:
------
    asm = FrameAssembly(nodes, elements)
    d, its = solve_newton(asm.response_at, F, fixed,
                          commit_func=asm.commit,
                          revert_func=asm.revert_to_last_commit)
"""

from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..kernel.assemble import assemble_global_F, assemble_global_K
from ..kernel.dof import DOF_3D_FRAME, DOFManager
from ..transform import EuclidFrameTransform
from .elements import frame3d_basic_stiffness
from .model import Frame3D, FrameNode3D


class FrameAssembly:
    """
    Collection of corotational frame elements sharing a node set.

    Parameters:
    -----------
    nodes : Dict[int, FrameNode3D]
        Nodes keyed by id; ids must be 0..n-1 (they index the global vector)
    elements : Sequence[Frame3D]
        Element records; each gets its own transformation
    """

    def __init__(
        self,
        nodes: Dict[int, FrameNode3D],
        elements: Sequence[Frame3D],
        dof: DOFManager = DOF_3D_FRAME
    ):
        if sorted(nodes) != list(range(len(nodes))):
            raise ValueError("Node ids must be consecutive integers starting at 0")
        self.nodes = nodes
        self.elements = list(elements)
        self.dof = dof
        self.ndof = dof.ndof(len(nodes))

        self.transforms: List[EuclidFrameTransform] = []
        for elem in self.elements:
            transf = EuclidFrameTransform(elem.id, elem.vecxz, dof=dof)
            transf.initialize([nodes[elem.ni], nodes[elem.nj]])
            transf.update()
            self.transforms.append(transf)

        self._kl = [
            frame3d_basic_stiffness(elem, transf.get_initial_length(), dof)
            for elem, transf in zip(self.elements, self.transforms)
        ]

    def set_trial(self, d: np.ndarray) -> None:
        """Write the global trial displacement vector into the nodes and update every element."""
        d = np.asarray(d, dtype=float)
        for node_id, node in self.nodes.items():
            node.set_trial_displacement(d[self.dof.node_dofs(node_id)])
        for transf in self.transforms:
            transf.update()

    def local_forces(self) -> List[np.ndarray]:
        """Local forces pl = kl · ul of each element."""
        return [kl @ transf.get_local_deformation()
                for kl, transf in zip(self._kl, self.transforms)]

    def response(self) -> Tuple[np.ndarray, np.ndarray]:
        """Global tangent stiffness and resisting force vector at the current trial state."""
        k_contrib = []
        f_contrib = []
        for elem, transf, kl, pl in zip(self.elements, self.transforms,
                                        self._kl, self.local_forces()):
            dof_map = self.dof.element_dof_map([elem.ni, elem.nj])
            k_contrib.append((dof_map, transf.push_stiffness(kl, pl)))
            f_contrib.append((dof_map, transf.push_force(pl)))
        return assemble_global_K(self.ndof, k_contrib), assemble_global_F(self.ndof, f_contrib)

    def response_at(self, d: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """set_trial(d) followed by response()."""
        self.set_trial(d)
        return self.response()

    def commit(self) -> None:
        for node in self.nodes.values():
            node.commit()
        for transf in self.transforms:
            transf.commit()

    def revert_to_last_commit(self) -> None:
        for node in self.nodes.values():
            node.revert_to_last_commit()
        for transf in self.transforms:
            transf.revert_to_last_commit()

    def node_positions(self) -> np.ndarray:
        """Current (trial) nodal positions, one row per node id."""
        return np.array([
            self.nodes[i].coordinates() + self.nodes[i].trial_displacement[0:3]
            for i in range(len(self.nodes))
        ])

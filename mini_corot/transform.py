# mini_corot/transform.py
"""
EUCLID FRAME TRANSFORM: Corotational Kinematics of a Spatial Frame Element
==========================================================================

PURPOSE:
--------
A nonlinear solver moves the nodes of a frame element through large
displacements and large rotations. A small-strain section model, however,
only understands small deformations measured in a frame that follows the
element. This module provides the object that sits between the two:

    global  (node displacements, 6 per node)
        │  update()                       ▲  push_force(pl)
        ▼                                 │  push_stiffness(kl, pl)
    local   (ul: axial elongation + end rotations relative to the triad)

LIFECYCLE:
----------
    initialize(nodes)        once, binds the nodes and the reference geometry
    update()                 after every change of the trial displacements
    commit()                 on convergence
    revert_to_last_commit()  on a rejected iteration
    revert_to_start()        on analysis reset

THE UPDATE:
-----------
1. for each end: dalpha = alpha_trial - alpha_last_seen and, if nonzero,
   Q <- Exp(dalpha) o Q     (increment composed on the LEFT)
2. dx = dX + (u_J + r_J - o_J) - (u_I + r_I - o_I),  Ln = |dx|
   with r_k = (Q_k R0^T) o_k the rigid offset arm carried by node k
3. corotational triad e from the isometry
4. theta_k = Log(e^T R_k)   (principal branch)
5. ul[axial_I] = 0,  ul[axial_J] = Ln - L
6. T = isometry.compute_tangent(ul) A

RIGID OFFSETS:
--------------
The offsets o_k are resolved to global vectors once, at initialize(). The
isometry works with the end points; the link matrix A maps node increments
to end point increments, per node

    A_k = [ I  -S(r_k) ]
          [ 0   I      ]

so the end forces transfer to the node as m += r x f, and push_stiffness
adds the variation of that arm, S(f_k) S(r_k), on the rotational block.
Without offsets A is the identity.

The nodes report total displacements. The rotational components are only
ever used through differences with the last seen value, so the nodal
orientation is path dependent exactly as the solver's increments are.
"""

import copy
import logging
import warnings
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import OffsetFlag, TOLERANCES
from .errors import (
    DegenerateGeometryError,
    StaleStateError,
    TopologyError,
    UnsupportedOperationWarning,
)
from .isometry import ChordIsometry
from .kernel.dof import DOFManager, DOF_3D_FRAME
from .kernel.so3 import compose_increment, log_so3, skew, versor_from_matrix
from .v3d.elements import chord_geometry, global_offsets, orientation_matrix

logger = logging.getLogger(__name__)


class TransformState(Enum):
    """Where the transformation is in its lifecycle."""
    UNINITIALIZED = "uninitialized"   # initialize() has not run
    INITIALIZED = "initialized"       # reference state set, no update() yet
    CURRENT = "current"               # ul, Ln and T match the last update()


class InitialDisplacement(Enum):
    """One-time capture of displacements present before initialization."""
    UNCHECKED = "unchecked"
    NONE = "none"
    CAPTURED = "captured"


class EuclidFrameTransform:
    """
    Corotational transformation of a two-node spatial frame element.

    Parameters:
    -----------
    tag : int
        Identifier reported in summaries and records
    vecxz : Sequence[float]
        Reference vector in the local x-z plane (must not be parallel to
        the chord)
    offsets : array-like, optional
        Rigid joint offsets, one 3-vector per end
    offset_flags : OffsetFlag
        How the offsets combine with the nodal geometry

    Example:
    --------
    >>> nodes = [FrameNode3D(0, 0.0, 0.0, 0.0), FrameNode3D(1, 10.0, 0.0, 0.0)]
    >>> transf = EuclidFrameTransform(1, (0.0, 0.0, 1.0))
    >>> transf.initialize(nodes)
    >>> nodes[1].set_trial_displacement([0, 0, 1, 0, 0, 0])
    >>> transf.update()
    >>> transf.get_deformed_length()    # sqrt(101)
    10.04987562112089
    """

    N_NODES = 2

    def __init__(
        self,
        tag: int,
        vecxz: Sequence[float],
        offsets: Optional[Sequence[Sequence[float]]] = None,
        offset_flags: OffsetFlag = OffsetFlag.NONE,
        dof: DOFManager = DOF_3D_FRAME
    ):
        self.tag = tag
        self.vecxz = np.array(vecxz, dtype=float)
        if self.vecxz.shape != (3,):
            raise ValueError(f"Transform {tag}: vecxz must have 3 components")

        if offsets is None:
            self.offsets = None
        else:
            self.offsets = np.array(offsets, dtype=float)
            if self.offsets.shape != (self.N_NODES, 3):
                raise ValueError(
                    f"Transform {tag}: expected {self.N_NODES} offsets of 3 components, "
                    f"got shape {self.offsets.shape}"
                )
        self.offset_flags = OffsetFlag(offset_flags)
        self.dof = dof

        n = dof.ndof(self.N_NODES)
        self.nodes: Tuple = (None,) * self.N_NODES
        self.isometry = ChordIsometry(dof)
        self.state = TransformState.UNINITIALIZED
        self.initial_displacement = InitialDisplacement.UNCHECKED

        self._init_disp = np.zeros((self.N_NODES, dof.dof_per_node))
        self._L = 0.0
        self._Ln = 0.0
        self._dX = np.zeros(3)
        self._R0 = np.eye(3)
        self._offset = np.zeros((self.N_NODES, 3))
        self._arm = np.zeros((self.N_NODES, 3))

        self._Qt = [versor_from_matrix(np.eye(3))] * self.N_NODES
        self._Qc = list(self._Qt)
        self._alpha = np.zeros((self.N_NODES, 3))

        self._ul = np.zeros(n)
        self._ulpr = np.zeros(n)
        self._ulc = np.zeros(n)
        self._T: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, nodes: Sequence) -> None:
        """
        Bind the end nodes and set up the reference configuration.

        Parameters:
        -----------
        nodes : Sequence
            The two end nodes (objects exposing coordinates(),
            trial_displacement and committed_displacement)

        Raises:
        -------
        TopologyError
            If a node is missing
        DegenerateGeometryError
            If the reference length is zero or vecxz is parallel to the chord

        Notes:
        ------
        Nothing is modified if an error is raised.
        """
        nodes = tuple(nodes)
        if len(nodes) != self.N_NODES or any(nd is None for nd in nodes):
            raise TopologyError(
                f"Transform {self.tag}: invalid node references {nodes!r}"
            )

        xi = np.asarray(nodes[0].coordinates(), dtype=float)
        xj = np.asarray(nodes[-1].coordinates(), dtype=float)
        offset = global_offsets(
            xi, xj, self.vecxz, self.offsets, self.offset_flags, self.tag
        )
        L, dX = chord_geometry(xi + offset[0], xj + offset[1], self.tag)
        R0 = orientation_matrix(dX, self.vecxz, self.tag)

        if self.initial_displacement is InitialDisplacement.UNCHECKED:
            present = np.array([nd.trial_displacement for nd in nodes], dtype=float)
            if np.any(present != 0.0):
                self._init_disp = present
                self.initial_displacement = InitialDisplacement.CAPTURED
                logger.info("Transform %s: captured initial nodal displacements", self.tag)
            else:
                self.initial_displacement = InitialDisplacement.NONE

        self.nodes = nodes
        self._L = L
        self._Ln = L
        self._dX = dX
        self._R0 = R0
        self._offset = offset
        self._arm = offset.copy()

        Q0 = versor_from_matrix(R0)
        self._Qt = [Q0] * self.N_NODES
        self._alpha = np.zeros((self.N_NODES, 3))
        self._ul = np.zeros_like(self._ul)
        self._ulpr = np.zeros_like(self._ul)
        self._T = None

        self.isometry.initialize(dX, R0)
        self.state = TransformState.INITIALIZED
        self.commit()
        logger.debug("Transform %s: L=%.6g, R0=%s", self.tag, L, R0.tolist())

    def update(self) -> None:
        """
        Recompute ul, Ln and T for the nodes' current trial displacements.

        Raises:
        -------
        DegenerateGeometryError
            If the deformed chord collapses (trial state is then unusable
            until the next successful update; the committed state is
            untouched)
        """
        self._require(TransformState.INITIALIZED, TransformState.CURRENT)
        self.state = TransformState.INITIALIZED
        d = self.dof

        dI = self._trial_displacement(0)
        dJ = self._trial_displacement(1)

        for end, disp in enumerate((dI, dJ)):
            alpha = disp[3:6]
            dalpha = alpha - self._alpha[end]
            self._alpha[end] = alpha
            if np.linalg.norm(dalpha) != 0.0:
                self._Qt[end] = compose_increment(dalpha, self._Qt[end])

        R = [Q.as_matrix() for Q in self._Qt]
        arm = np.array([R[end] @ self._R0.T @ self._offset[end]
                        for end in range(self.N_NODES)])
        # End point displacements
        uI = dI[0:3] + arm[0] - self._offset[0]
        uJ = dJ[0:3] + arm[1] - self._offset[1]
        dx = self._dX + uJ - uI
        Ln = float(np.linalg.norm(dx))
        if Ln <= 0.0:
            raise DegenerateGeometryError(f"Transform {self.tag}: deformed length is zero")

        self.isometry.update(R[0], R[1], dx)
        e = self.isometry.get_rotation()

        ul = np.zeros_like(self._ul)
        for end in range(self.N_NODES):
            ul[d.rotation(end)] = log_so3(e.T @ R[end])
        ul[d.axial(0)] = 0.0
        ul[d.axial(1)] = Ln - self._L

        self._ulpr = self._ul
        self._ul = ul
        self._Ln = Ln
        self._arm = arm
        self._T = self.isometry.compute_tangent(ul) @ self._link()
        self.state = TransformState.CURRENT

    def commit(self) -> None:
        """Snapshot the trial orientations and local deformations."""
        self._require(TransformState.INITIALIZED, TransformState.CURRENT)
        self._ulc = self._ul.copy()
        self._Qc = list(self._Qt)

    def revert_to_last_commit(self) -> None:
        """
        Return to the committed state and re-anchor the rotation memory.

        The last-seen rotations are taken from the nodes' CURRENT trial
        displacements, so the next update() only sees increments relative
        to what the solver reports after its own revert.
        """
        self._require(TransformState.INITIALIZED, TransformState.CURRENT)
        self._Qt = list(self._Qc)
        self._ul = self._ulc.copy()
        for end in range(self.N_NODES):
            self._alpha[end] = self._trial_displacement(end)[3:6]
        self.update()

    def revert_to_start(self) -> None:
        """Return to the undeformed reference configuration."""
        self._require(TransformState.INITIALIZED, TransformState.CURRENT)
        self._ul = np.zeros_like(self._ul)
        self._Qt[0] = versor_from_matrix(self._R0)
        for end in range(1, self.N_NODES):
            self._Qt[end] = self._Qt[0]
        self._alpha = np.zeros((self.N_NODES, 3))
        self.update()
        self.commit()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def push_force(self, pl: np.ndarray) -> np.ndarray:
        """
        Map local forces to global nodal forces: p = T^T pl.

        Parameters:
        -----------
        pl : np.ndarray
            Forces conjugate to the local deformations ul (12,)

        Returns:
        --------
        np.ndarray
            Global element force vector (12,), DOF order u_I, r_I, u_J, r_J
        """
        self._require(TransformState.CURRENT)
        return self._T.T @ np.asarray(pl, dtype=float)

    def push_stiffness(self, kl: np.ndarray, pl: np.ndarray) -> np.ndarray:
        """
        Map a local stiffness to the global tangent stiffness.

            K = T^T kl T + A^T K_isometry(pl, ul) A + K_arm
                + sum_k T_k^T p_k tan(theta_k) T_k

        where K_arm holds S(f_k) S(r_k) for the offset arms and the last sum
        runs over the rotational local coordinates.

        Parameters:
        -----------
        kl : np.ndarray
            Local tangent stiffness d(pl)/d(ul) (12x12)
        pl : np.ndarray
            Local forces (12,) at the current state

        Returns:
        --------
        np.ndarray
            12x12 global tangent stiffness

        Notes:
        ------
        tan(theta) is singular at theta = ±pi/2. The term is evaluated as is;
        a warning is logged when a local rotation gets close.
        """
        self._require(TransformState.CURRENT)
        T = self._T
        pl = np.asarray(pl, dtype=float)
        K = T.T @ np.asarray(kl, dtype=float) @ T

        A = self._link()
        Kg = np.zeros_like(K)
        self.isometry.add_tangent(Kg, pl, self._ul)
        K += A.T @ Kg @ A

        # Turning offset arms; end forces equal the node forces
        p = T.T @ pl
        for end in range(self.N_NODES):
            f = p[self.dof.translation(end)]
            s = self.dof.rotation(end)
            K[s, s] += skew(f) @ skew(self._arm[end])

        w = np.zeros_like(pl)
        for end in range(self.N_NODES):
            s = self.dof.rotation(end)
            theta = self._ul[s]
            if np.any(np.abs(np.cos(theta)) < TOLERANCES.tan_warning_cos):
                logger.warning(
                    "Transform %s: local rotation %s at end %d is close to ±pi/2",
                    self.tag, theta.tolist(), end
                )
            w[s] = pl[s] * np.tan(theta)
        K += T.T @ (w[:, None] * T)
        return K

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_initial_length(self) -> float:
        return self._L

    def get_deformed_length(self) -> float:
        return self._Ln

    def get_local_axes(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Reference local axes (x, y, z), the columns of R0."""
        return self._R0[:, 0].copy(), self._R0[:, 1].copy(), self._R0[:, 2].copy()

    def get_rotation(self) -> np.ndarray:
        """Current corotational basis."""
        return self.isometry.get_rotation()

    def get_nodal_rotation(self, end: int) -> np.ndarray:
        """Trial rotation matrix of an end node."""
        return self._Qt[end].as_matrix()

    def get_node_position(self, end: int) -> np.ndarray:
        """Local translational deformation of an end node (3,)."""
        return self._ul[self.dof.translation(end)].copy()

    def get_node_rotation_logarithm(self, end: int) -> np.ndarray:
        """Local rotation vector Log(e^T R) of an end node (3,)."""
        return self._ul[self.dof.rotation(end)].copy()

    def get_local_deformation(self) -> np.ndarray:
        return self._ul.copy()

    def get_state_variation(self) -> np.ndarray:
        """Change of ul produced by the last update()."""
        return self._ul - self._ulpr

    def get_tangent(self) -> np.ndarray:
        self._require(TransformState.CURRENT)
        return self._T.copy()

    def get_copy(self) -> "EuclidFrameTransform":
        """
        Independent copy of the transformation and its whole state.

        Node references are shared (they are not owned); offsets, the
        isometry and all state arrays are duplicated.
        """
        other = EuclidFrameTransform(
            self.tag, self.vecxz, self.offsets, self.offset_flags, self.dof
        )
        other.nodes = self.nodes
        other.isometry = copy.deepcopy(self.isometry)
        other.state = self.state
        other.initial_displacement = self.initial_displacement
        other._init_disp = self._init_disp.copy()
        other._L = self._L
        other._Ln = self._Ln
        other._dX = self._dX.copy()
        other._R0 = self._R0.copy()
        other._offset = self._offset.copy()
        other._arm = self._arm.copy()
        other._Qt = list(self._Qt)
        other._Qc = list(self._Qc)
        other._alpha = self._alpha.copy()
        other._ul = self._ul.copy()
        other._ulpr = self._ulpr.copy()
        other._ulc = self._ulc.copy()
        other._T = None if self._T is None else self._T.copy()
        return other

    # Sensitivity queries are not available for this transformation

    def get_length_grad(self) -> np.ndarray:
        warnings.warn(
            f"Transform {self.tag}: length sensitivity is not implemented",
            UnsupportedOperationWarning, stacklevel=2
        )
        return np.zeros(1)

    def get_basic_displacement_grad(self, grad_number: int) -> np.ndarray:
        warnings.warn(
            f"Transform {self.tag}: displacement sensitivity {grad_number} is not implemented",
            UnsupportedOperationWarning, stacklevel=2
        )
        return np.zeros(1)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Keyed record of the configuration."""
        record = {
            "name": self.tag,
            "type": type(self).__name__,
            "vecxz": self.vecxz.tolist(),
        }
        if self.offsets is not None:
            record["offsets"] = self.offsets.tolist()
            record["offset_flags"] = int(self.offset_flags)
        return record

    def __str__(self) -> str:
        lines = [
            f"{type(self).__name__} {self.tag}",
            "  vecxz: " + " ".join(f"{v:g}" for v in self.vecxz),
        ]
        if self.offsets is not None:
            for end, off in enumerate(self.offsets):
                lines.append(f"  offset {end}: " + " ".join(f"{v:g}" for v in off))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tag={self.tag}, state={self.state.value})"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _trial_displacement(self, end: int) -> np.ndarray:
        """Total trial displacement of an end, less any captured initial value."""
        return np.asarray(self.nodes[end].trial_displacement, dtype=float) - self._init_disp[end]

    def _link(self) -> np.ndarray:
        """Rigid offset link A: node increments to end point increments (12x12)."""
        A = np.eye(self.dof.ndof(self.N_NODES))
        for end in range(self.N_NODES):
            A[self.dof.translation(end), self.dof.rotation(end)] = -skew(self._arm[end])
        return A

    def _require(self, *states: TransformState) -> None:
        if self.state in states:
            return
        if self.state is TransformState.UNINITIALIZED:
            raise StaleStateError(f"Transform {self.tag}: initialize() has not been called")
        raise StaleStateError(
            f"Transform {self.tag}: update() must run before projecting forces or stiffness"
        )

# mini_corot/isometry.py
"""
CHORD ISOMETRY: The Corotational Triad and its Linearization
============================================================

PURPOSE:
--------
Given the two nodal rotation matrices and the deformed chord, this module
builds the corotational basis e = [e1 e2 e3] that follows the element's
rigid-body motion, and provides the two linearization pieces the frame
transformation needs:

    compute_tangent(ul)        T  with  dul = T dd          (12x12)
    add_tangent(K, pl, ul)     K += d(T^T pl)/dd - T^T d(pl)/dd

THE TRIAD:
----------
    e1 = dx / Ln                       (chord direction)
    q  = (R_I[:,1] + R_J[:,1]) / 2     (mean of the nodal y-axes)
    e3 = (e1 x q) / |e1 x q|
    e2 = e3 x e1

q lies in the e1-e2 plane, so in local components q = (q1, q2, 0) with
q2 = |e1 x q| > 0. The twist of the triad is driven by the nodal
rotations through the ratios

    eta  = q1 / q2
    eta_k1 = q_k,1 / q2,   eta_k2 = q_k,2 / q2      (k = I, J)

THE SPIN MATRIX:
----------------
The spin of the triad in local components is dw = G^T E^T dd with
E = diag(e, e, e, e) and (DOF order u_I, r_I, u_J, r_J)

    G^T = [ 0   0     eta/Ln  eta_I2/2 -eta_I1/2  0   0  0     -eta/Ln  eta_J2/2 -eta_J1/2  0 ]
          [ 0   0     1/Ln    0         0         0   0  0     -1/Ln    0         0         0 ]
          [ 0  -1/Ln  0       0         0         0   0  1/Ln   0       0         0         0 ]

and the local rotations vary as dtheta_k = Ts^-1(theta_k) (P E^T dd)_k with

    P = [ 0 I 0 0 ] - [ G^T ]
        [ 0 0 0 I ]   [ G^T ]

GEOMETRIC STIFFNESS:
--------------------
With m̄_k = Ts^-T(theta_k) m_k and n = P^T m̄, the variation of T^T pl at
fixed pl is the sum of
- the log-map curvature   Pi_k^T Kh_k Pi_k
- the chord rotation      N D
- the triad rotation     -E Q G^T E^T,   Q = [S(n_1); S(n_2); S(n_3); S(n_4)]
- the chord length        E G a r^T
- the triad twist         -(m̄_I,1 + m̄_J,1) E dG1/dd
All five are exact; the resulting matrix is not symmetric away from
equilibrium.
"""

import numpy as np

from .config import TOLERANCES
from .errors import DegenerateGeometryError
from .kernel.dof import DOFManager, DOF_3D_FRAME
from .kernel.so3 import skew, dexp_inv, dexp_inv_transpose_tangent


class ChordIsometry:
    """
    Corotational triad of a two-node spatial frame element.

    The object is stateful: update() recomputes the triad for a trial
    configuration and every other method reads that configuration.

    Parameters:
    -----------
    dof : DOFManager
        Layout of the element vectors (6 DOFs per node)
    """

    def __init__(self, dof: DOFManager = DOF_3D_FRAME):
        self.dof = dof
        self._L = 0.0
        self._Ln = 0.0
        self._e = np.eye(3)
        self._q = np.array([0.0, 1.0, 0.0])
        self._qI = np.array([0.0, 1.0, 0.0])
        self._qJ = np.array([0.0, 1.0, 0.0])

    def initialize(self, dX: np.ndarray, R0: np.ndarray) -> None:
        """Store the reference geometry and evaluate the reference triad."""
        self._L = float(np.linalg.norm(dX))
        if self._L <= 0.0:
            raise DegenerateGeometryError("Isometry initialized with a zero-length chord")
        self.update(R0, R0, dX)

    def update(self, R_i: np.ndarray, R_j: np.ndarray, dx: np.ndarray) -> None:
        """
        Recompute the triad for the current nodal rotations and chord.

        Raises:
        -------
        DegenerateGeometryError
            If the chord has collapsed or the mean nodal y-axis is parallel
            to it (the twist of the triad is then undefined)
        """
        dx = np.asarray(dx, dtype=float)
        Ln = float(np.linalg.norm(dx))
        if Ln <= 0.0:
            raise DegenerateGeometryError("Deformed chord length is zero")
        e1 = dx / Ln

        qI = R_i[:, 1]
        qJ = R_j[:, 1]
        q = 0.5 * (qI + qJ)

        e3 = np.cross(e1, q)
        q2 = np.linalg.norm(e3)
        if q2 <= TOLERANCES.parallel_tol:
            raise DegenerateGeometryError("Mean nodal y-axis is parallel to the chord")
        e3 /= q2
        e2 = np.cross(e3, e1)

        e = np.empty((3, 3))
        e[:, 0], e[:, 1], e[:, 2] = e1, e2, e3

        self._Ln = Ln
        self._e = e
        self._q = e.T @ q
        self._qI = e.T @ qI
        self._qJ = e.T @ qJ

    def get_rotation(self) -> np.ndarray:
        """Current corotational basis (columns e1, e2, e3)."""
        return self._e.copy()

    def get_length(self) -> float:
        return self._Ln

    # ------------------------------------------------------------------
    # Kinematic operators
    # ------------------------------------------------------------------

    def _block_rotation(self) -> np.ndarray:
        """E = diag(e, e, e, e)."""
        E = np.zeros((12, 12))
        for k in range(4):
            E[3*k:3*k+3, 3*k:3*k+3] = self._e
        return E

    def _eta(self) -> tuple[float, float, float, float, float]:
        q2 = self._q[1]
        return (self._q[0] / q2,
                self._qI[0] / q2, self._qI[1] / q2,
                self._qJ[0] / q2, self._qJ[1] / q2)

    def _spin(self) -> np.ndarray:
        """G^T: local triad spin per local DOF (3x12)."""
        d = self.dof
        Ln = self._Ln
        eta, eta_I1, eta_I2, eta_J1, eta_J2 = self._eta()

        Gt = np.zeros((3, 12))
        Gt[0, d.idx(0, 2)] = eta / Ln
        Gt[0, d.idx(0, 3)] = eta_I2 / 2.0
        Gt[0, d.idx(0, 4)] = -eta_I1 / 2.0
        Gt[0, d.idx(1, 2)] = -eta / Ln
        Gt[0, d.idx(1, 3)] = eta_J2 / 2.0
        Gt[0, d.idx(1, 4)] = -eta_J1 / 2.0

        Gt[1, d.idx(0, 2)] = 1.0 / Ln
        Gt[1, d.idx(1, 2)] = -1.0 / Ln

        Gt[2, d.idx(0, 1)] = -1.0 / Ln
        Gt[2, d.idx(1, 1)] = 1.0 / Ln
        return Gt

    def _selector(self, Gt: np.ndarray) -> np.ndarray:
        """P: local rotation spins relative to the triad (6x12)."""
        d = self.dof
        P = np.zeros((6, 12))
        P[0:3, d.rotation(0)] = np.eye(3)
        P[3:6, d.rotation(1)] = np.eye(3)
        P[0:3, :] -= Gt
        P[3:6, :] -= Gt
        return P

    def _chord_row(self) -> np.ndarray:
        """r: variation of the deformed length, dLn = r . dd."""
        r = np.zeros(12)
        r[self.dof.translation(0)] = -self._e[:, 0]
        r[self.dof.translation(1)] = self._e[:, 0]
        return r

    def _twist_gradient(self, Gt: np.ndarray, E: np.ndarray) -> np.ndarray:
        """Derivative of the first column of G with respect to dd (12x12)."""
        d = self.dof
        Ln = self._Ln
        q2 = self._q[1]
        eta, eta_I1, eta_I2, eta_J1, eta_J2 = self._eta()

        W = Gt @ E.T
        Et = E.T
        dqI = -skew(self._qI) @ (Et[d.rotation(0), :] - W)
        dqJ = -skew(self._qJ) @ (Et[d.rotation(1), :] - W)
        dq = 0.5 * (dqI + dqJ)

        deta = (dq[0] - eta * dq[1]) / q2
        deta_I1 = (dqI[0] - eta_I1 * dq[1]) / q2
        deta_I2 = (dqI[1] - eta_I2 * dq[1]) / q2
        deta_J1 = (dqJ[0] - eta_J1 * dq[1]) / q2
        deta_J2 = (dqJ[1] - eta_J2 * dq[1]) / q2

        dG1 = np.zeros((12, 12))
        dG1[d.idx(0, 2)] = deta / Ln
        dG1[d.idx(0, 3)] = deta_I2 / 2.0
        dG1[d.idx(0, 4)] = -deta_I1 / 2.0
        dG1[d.idx(1, 2)] = -deta / Ln
        dG1[d.idx(1, 3)] = deta_J2 / 2.0
        dG1[d.idx(1, 4)] = -deta_J1 / 2.0
        return dG1

    # ------------------------------------------------------------------
    # Linearization
    # ------------------------------------------------------------------

    def compute_tangent(self, ul: np.ndarray) -> np.ndarray:
        """
        Linear transformation T relating global to local increments.

        Parameters:
        -----------
        ul : np.ndarray
            Current local deformations (12,); only the rotational slots
            are read (they enter through Ts^-1)

        Returns:
        --------
        np.ndarray
            12x12 matrix; the translational local rows are zero except the
            axial row of end J
        """
        d = self.dof
        Gt = self._spin()
        PiE = self._selector(Gt) @ self._block_rotation().T

        T = np.zeros((12, 12))
        T[d.axial(1), :] = self._chord_row()
        for end in (0, 1):
            theta = ul[d.rotation(end)]
            T[d.rotation(end), :] = dexp_inv(theta) @ PiE[3*end:3*end+3, :]
        return T

    def add_tangent(
        self,
        K: np.ndarray,
        pl: np.ndarray,
        ul: np.ndarray
    ) -> None:
        """
        Add the geometric stiffness of the transformation to K (in place).

        Parameters:
        -----------
        K : np.ndarray
            12x12 global stiffness, modified in place
        pl : np.ndarray
            Local forces conjugate to ul (12,)
        ul : np.ndarray
            Local deformations (12,)
        """
        d = self.dof
        Ln = self._Ln
        e1 = self._e[:, 0]
        E = self._block_rotation()

        Gt = self._spin()
        P = self._selector(Gt)
        PiE = P @ E.T

        # Log-map curvature; collect spin-conjugate moments
        mbar = np.zeros(6)
        for end in (0, 1):
            theta = ul[d.rotation(end)]
            m = pl[d.rotation(end)]
            Pi = PiE[3*end:3*end+3, :]
            K += Pi.T @ dexp_inv_transpose_tangent(theta, m) @ Pi
            mbar[3*end:3*end+3] = dexp_inv(theta).T @ m

        # Rotation of the chord under axial force
        N = pl[d.axial(1)]
        D3 = N * (np.eye(3) - np.outer(e1, e1)) / Ln
        ti = d.translation(0)
        tj = d.translation(1)
        K[ti, ti] += D3
        K[ti, tj] -= D3
        K[tj, ti] -= D3
        K[tj, tj] += D3

        # Rotation of the triad
        n = P.T @ mbar
        Q = np.zeros((12, 3))
        for k in range(4):
            Q[3*k:3*k+3, :] = skew(n[3*k:3*k+3])
        K -= E @ Q @ Gt @ E.T

        # Change of the chord length inside G
        msum = mbar[0:3] + mbar[3:6]
        eta = self._q[0] / self._q[1]
        a = np.array([0.0, (eta * msum[0] + msum[1]) / Ln, msum[2] / Ln])
        K += np.outer(E @ Gt.T @ a, self._chord_row())

        # Change of the twist ratios inside G
        K -= msum[0] * (E @ self._twist_gradient(Gt, E))

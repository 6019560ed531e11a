# mini_corot/kernel/so3.py
"""
SO(3) ALGEBRA: Versors, Exponential and Logarithmic Maps
========================================================

PURPOSE:
--------
The corotational transformation stores nodal orientations as unit
quaternions (versors) and measures local rotations with the logarithmic
map. This module collects the small amount of rotation algebra it needs.

The quaternion type is scipy's Rotation. Composition is the Hamilton
product:

    Exp(dalpha) o Q   ->   Rotation.from_rotvec(dalpha) * Q

whose matrix is exp(S(dalpha)) @ Q.as_matrix(). The increment is applied
on the LEFT, i.e. in the current spatial frame. Reversing the order gives
a different (and wrong) finite-rotation path.

THE TANGENT OF THE EXPONENTIAL MAP:
-----------------------------------
If R = exp(S(theta)) then a spatial spin w (dR = S(w) R) changes the
rotation vector by

    dtheta = Ts^-1(theta) w,   Ts^-1 = I - S(theta)/2 + eta(|theta|) S(theta)^2

The geometric stiffness also needs the derivative of Ts^-T(theta) m with
respect to theta, which brings in a second coefficient mu = eta'/|theta|.
Both coefficients are 0/0 at theta = 0 and are evaluated with series
expansions below a small-angle threshold.
"""

import numpy as np
from scipy.spatial.transform import Rotation

from ..config import TOLERANCES


def skew(v: np.ndarray) -> np.ndarray:
    """
    Skew-symmetric matrix of a 3-vector: skew(a) @ b == cross(a, b).
    """
    return np.array([
        [ 0.0,  -v[2],  v[1]],
        [ v[2],  0.0,  -v[0]],
        [-v[1],  v[0],  0.0],
    ], dtype=float)


def exp_so3(theta: np.ndarray) -> np.ndarray:
    """Rotation matrix of a rotation (pseudo-)vector."""
    return Rotation.from_rotvec(np.asarray(theta, dtype=float)).as_matrix()


def log_so3(R: np.ndarray) -> np.ndarray:
    """
    Rotation vector of a rotation matrix on the principal branch.

    The returned angle |theta| lies in [0, pi]; together with the sign
    carried by the axis this is the (-pi, pi] branch.
    """
    return Rotation.from_matrix(R).as_rotvec()


def versor_from_matrix(R: np.ndarray) -> Rotation:
    """Unit quaternion equivalent of an orthonormal matrix."""
    return Rotation.from_matrix(R)


def versor_from_vector(theta: np.ndarray) -> Rotation:
    """Unit quaternion of a rotation vector."""
    return Rotation.from_rotvec(np.asarray(theta, dtype=float))


def compose_increment(dalpha: np.ndarray, Q: Rotation) -> Rotation:
    """
    Apply a spatial rotation increment to a versor: Exp(dalpha) o Q.

    Parameters:
    -----------
    dalpha : np.ndarray
        Rotation increment (3,), expressed in the global frame
    Q : Rotation
        Current nodal orientation

    Returns:
    --------
    Rotation
        The updated orientation. The increment is composed on the left.
    """
    return Rotation.from_rotvec(np.asarray(dalpha, dtype=float)) * Q


def dexp_inv_coefficients(angle: float) -> tuple[float, float]:
    """
    Coefficients (eta, mu) of the inverse tangent of the exponential map.

        eta = [2 sin(a) - a (1 + cos(a))] / [2 a^2 sin(a)]
        mu  = [a (a + sin(a)) - 8 sin^2(a/2)] / [4 a^4 sin^2(a/2)]

    with limits eta -> 1/12 and mu -> 1/360 as a -> 0.
    """
    a = float(angle)
    if a < TOLERANCES.small_angle:
        a2 = a * a
        eta = 1.0/12.0 + a2/720.0 + a2*a2/30240.0
        mu = 1.0/360.0 + a2/7560.0 + a2*a2/201600.0
        return eta, mu

    s = np.sin(a)
    sh2 = np.sin(0.5 * a)**2
    eta = (2.0*s - a*(1.0 + np.cos(a))) / (2.0*a*a*s)
    mu = (a*(a + s) - 8.0*sh2) / (4.0*a**4*sh2)
    return float(eta), float(mu)


def dexp_inv(theta: np.ndarray) -> np.ndarray:
    """
    Inverse of the (left) tangent of the exponential map, Ts^-1(theta).

    Maps a spatial spin to the variation of the rotation vector.
    Singular at |theta| = 2*pi; on the principal branch it is finite
    everywhere except at exactly pi.
    """
    theta = np.asarray(theta, dtype=float)
    eta, _ = dexp_inv_coefficients(np.linalg.norm(theta))
    St = skew(theta)
    return np.eye(3) - 0.5 * St + eta * (St @ St)


def dexp_inv_transpose_tangent(theta: np.ndarray, m: np.ndarray) -> np.ndarray:
    """
    Derivative of Ts^-T(theta) m with respect to theta, times Ts^-1(theta).

    For a fixed moment m conjugate to the rotation vector theta, this is
    the 3x3 stiffness that maps a spatial spin of the local rotation to the
    change of the spin-conjugate moment Ts^-T(theta) m:

        Kh = [ eta (theta m^T - 2 m theta^T + (theta.m) I)
               + mu S(theta)^2 m theta^T
               - S(m)/2 ] Ts^-1(theta)

    Parameters:
    -----------
    theta : np.ndarray
        Local rotation vector (3,)
    m : np.ndarray
        Moment conjugate to theta (3,)

    Returns:
    --------
    np.ndarray
        3x3 matrix (not symmetric in general)
    """
    theta = np.asarray(theta, dtype=float)
    m = np.asarray(m, dtype=float)
    eta, mu = dexp_inv_coefficients(np.linalg.norm(theta))
    St = skew(theta)

    Kh = eta * (np.outer(theta, m) - 2.0*np.outer(m, theta) + (theta @ m)*np.eye(3))
    Kh += mu * np.outer(St @ St @ m, theta)
    Kh -= 0.5 * skew(m)
    return Kh @ dexp_inv(theta)

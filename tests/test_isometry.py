# tests/test_isometry.py
"""
COROTATIONAL TRIAD TESTS
========================

For a straight member along X the triad and the linear transformation T
have simple closed forms that any beam textbook gives:

    theta_Iy = ry_I + (u_Jz - u_Iz)/L
    theta_Iz = rz_I - (u_Jy - u_Iy)/L
    theta_Ix = rx_I - (rx_I + rx_J)/2

These are checked entry by entry, then the triad is checked under a rigid
rotation of the whole configuration.
"""

import numpy as np
import pytest

from mini_corot.errors import DegenerateGeometryError
from mini_corot.isometry import ChordIsometry
from mini_corot.kernel.so3 import exp_so3


L = 4.0


@pytest.fixture
def isometry():
    iso = ChordIsometry()
    iso.initialize(np.array([L, 0.0, 0.0]), np.eye(3))
    return iso


def test_reference_triad(isometry):
    np.testing.assert_allclose(isometry.get_rotation(), np.eye(3), atol=1e-15)
    assert isometry.get_length() == pytest.approx(L)


def test_reference_tangent(isometry):
    T = isometry.compute_tangent(np.zeros(12))

    # Axial row: dLn = e1 . (du_J - du_I)
    np.testing.assert_allclose(T[6, 0:3], [-1.0, 0.0, 0.0])
    np.testing.assert_allclose(T[6, 6:9], [1.0, 0.0, 0.0])

    # Bending about y at end I
    assert T[4, 4] == pytest.approx(1.0)
    assert T[4, 2] == pytest.approx(-1.0 / L)
    assert T[4, 8] == pytest.approx(1.0 / L)

    # Bending about z at end J
    assert T[11, 11] == pytest.approx(1.0)
    assert T[11, 1] == pytest.approx(1.0 / L)
    assert T[11, 7] == pytest.approx(-1.0 / L)

    # Twist: relative to the mean nodal rotation
    assert T[3, 3] == pytest.approx(0.5)
    assert T[3, 9] == pytest.approx(-0.5)
    assert T[9, 9] == pytest.approx(0.5)

    # Translational local slots other than the axial one stay empty
    for i in (0, 1, 2, 7, 8):
        assert not np.any(T[i, :])


def test_rigid_rotation_of_triad(isometry):
    Rg = exp_so3(np.array([0.4, -0.9, 1.3]))
    isometry.update(Rg, Rg, Rg @ np.array([L, 0.0, 0.0]))
    np.testing.assert_allclose(isometry.get_rotation(), Rg, atol=1e-14)
    assert isometry.get_length() == pytest.approx(L)


def test_triad_follows_mean_twist(isometry):
    """Opposite twists of the two ends leave the triad untwisted."""
    Ri = exp_so3(np.array([0.3, 0.0, 0.0]))
    Rj = exp_so3(np.array([-0.3, 0.0, 0.0]))
    isometry.update(Ri, Rj, np.array([L, 0.0, 0.0]))
    np.testing.assert_allclose(isometry.get_rotation(), np.eye(3), atol=1e-14)


def test_degenerate_triad(isometry):
    """Nodal y-axes along the chord leave the twist undefined."""
    R = exp_so3(np.array([0.0, 0.0, -0.5 * np.pi]))   # y -> X
    with pytest.raises(DegenerateGeometryError, match="parallel"):
        isometry.update(R, R, np.array([L, 0.0, 0.0]))


def test_collapsed_chord(isometry):
    with pytest.raises(DegenerateGeometryError):
        isometry.update(np.eye(3), np.eye(3), np.zeros(3))


def test_add_tangent_is_zero_without_forces(isometry):
    K = np.zeros((12, 12))
    isometry.add_tangent(K, np.zeros(12), np.zeros(12))
    assert not np.any(K)


def test_add_tangent_axial_force_term(isometry):
    """Straight member under tension N: lateral stiffness N/L between the ends."""
    N = 7.0
    pl = np.zeros(12)
    pl[6] = N
    K = np.zeros((12, 12))
    isometry.add_tangent(K, pl, np.zeros(12))

    assert K[1, 1] == pytest.approx(N / L)
    assert K[2, 8] == pytest.approx(-N / L)
    assert K[0, 0] == pytest.approx(0.0)

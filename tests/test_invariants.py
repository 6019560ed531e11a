# tests/test_invariants.py
"""
OBJECTIVITY TESTS: Rigid Motions Produce No Deformation
=======================================================

WHAT IS THIS TEST?
==================
A corotational formulation exists to strip rigid-body motion out of the
nodal displacements. Whatever the element does as a rigid body (shift,
spin by a large angle) must leave the local deformations untouched:

    rigid translation            -> ul = 0, Ln = L
    rigid rotation (any size)    -> ul = 0, Ln = L, triad = Rg R0
    deformation + rigid rotation -> same ul as the deformation alone

The same holds when rigid joint offsets move the element end points away
from the nodes: the offset arms turn with their nodes.

If one of these fails, the section model would see strains that are not
there, and large-rotation analyses drift.
"""

import numpy as np
import pytest

from mini_corot import EuclidFrameTransform, OffsetFlag
from mini_corot.kernel.so3 import exp_so3
from mini_corot.v3d.model import FrameNode3D


XI = np.array([0.5, -1.0, 2.0])
XJ = np.array([3.5, 1.0, 2.5])
VECXZ = (0.0, 0.0, 1.0)


def make_element(offsets=None, flags=OffsetFlag.NONE):
    nodes = [FrameNode3D(0, *XI), FrameNode3D(1, *XJ)]
    transf = EuclidFrameTransform(1, VECXZ, offsets=offsets, offset_flags=flags)
    transf.initialize(nodes)
    return nodes, transf


def rigid_rotation_displacements(psi, points):
    """Displacements of points rotated by exp(psi) about the origin."""
    Rg = exp_so3(psi)
    return [Rg @ p - p for p in points]


def test_rigid_translation():
    nodes, transf = make_element()
    shift = np.array([0.3, -1.2, 2.0])
    for n in nodes:
        n.set_trial_displacement(np.concatenate([shift, np.zeros(3)]))
    transf.update()

    np.testing.assert_allclose(transf.get_local_deformation(), np.zeros(12), atol=1e-12)
    assert transf.get_deformed_length() == pytest.approx(transf.get_initial_length())


def test_large_rigid_rotation():
    nodes, transf = make_element()
    psi = np.array([0.3, -0.7, 1.1])
    u = rigid_rotation_displacements(psi, [XI, XJ])
    for n, uk in zip(nodes, u):
        n.set_trial_displacement(np.concatenate([uk, psi]))
    transf.update()

    np.testing.assert_allclose(transf.get_local_deformation(), np.zeros(12), atol=1e-12)
    assert transf.get_deformed_length() == pytest.approx(transf.get_initial_length())

    R0 = np.column_stack(transf.get_local_axes())
    np.testing.assert_allclose(transf.get_rotation(), exp_so3(psi) @ R0, atol=1e-12)


def test_superposed_rigid_rotation_keeps_local_deformation():
    nodes, transf = make_element()
    d = np.array([0.01, -0.02, 0.03, 0.05, -0.04, 0.02,
                  -0.03, 0.04, 0.01, -0.06, 0.03, 0.08])
    for k, n in enumerate(nodes):
        n.set_trial_displacement(d[6*k:6*k + 6])
    transf.update()
    ul_deformed = transf.get_local_deformation()

    # Rotate the deformed configuration rigidly about the origin
    psi = np.array([-0.8, 0.4, 0.6])
    Rg = exp_so3(psi)
    for k, (n, X) in enumerate(zip(nodes, (XI, XJ))):
        x = X + d[6*k:6*k + 3]
        u = Rg @ x - X
        n.set_trial_displacement(np.concatenate([u, d[6*k + 3:6*k + 6] + psi]))
    transf.update()

    np.testing.assert_allclose(transf.get_local_deformation(), ul_deformed, atol=1e-12)


def test_local_forces_objective():
    """A rigid rotation turns the global end forces with it."""
    nodes, transf = make_element()
    d = np.array([0.0, 0.0, 0.0, 0.02, 0.01, -0.03,
                  0.05, -0.02, 0.04, 0.01, -0.02, 0.03])
    for k, n in enumerate(nodes):
        n.set_trial_displacement(d[6*k:6*k + 6])
    transf.update()
    pl = np.zeros(12)
    pl[6] = 3.0
    pl[[3, 4, 5, 9, 10, 11]] = [0.2, -0.5, 0.7, -0.2, 0.4, 0.1]
    f0 = transf.push_force(pl)

    psi = np.array([0.5, 0.9, -0.2])
    Rg = exp_so3(psi)
    for k, (n, X) in enumerate(zip(nodes, (XI, XJ))):
        x = X + d[6*k:6*k + 3]
        n.set_trial_displacement(np.concatenate([Rg @ x - X, d[6*k + 3:6*k + 6] + psi]))
    transf.update()
    f1 = transf.push_force(pl)

    for k in range(4):
        np.testing.assert_allclose(f1[3*k:3*k + 3], Rg @ f0[3*k:3*k + 3], atol=1e-12)


OFFSETS = np.array([[0.2, -0.1, 0.0], [0.0, 0.3, 0.5]])
ALL_FLAGS = [
    OffsetFlag.NONE,
    OffsetFlag.LOCAL,
    OffsetFlag.NORMALIZED,
    OffsetFlag.LOCAL | OffsetFlag.NORMALIZED,
]


@pytest.mark.parametrize("flags", ALL_FLAGS)
def test_large_rigid_rotation_with_offsets(flags):
    nodes, transf = make_element(OFFSETS, flags)
    transf.update()
    L = transf.get_initial_length()
    assert L != pytest.approx(np.linalg.norm(XJ - XI))

    psi = np.array([0.8, -0.4, 1.3])
    u = rigid_rotation_displacements(psi, [XI, XJ])
    for n, uk in zip(nodes, u):
        n.set_trial_displacement(np.concatenate([uk, psi]))
    transf.update()

    np.testing.assert_allclose(transf.get_local_deformation(), np.zeros(12), atol=1e-12)
    assert transf.get_deformed_length() == pytest.approx(L)

    R0 = np.column_stack(transf.get_local_axes())
    np.testing.assert_allclose(transf.get_rotation(), exp_so3(psi) @ R0, atol=1e-12)


@pytest.mark.parametrize("flags", [OffsetFlag.NONE, OffsetFlag.LOCAL])
def test_superposed_rigid_rotation_with_offsets(flags):
    nodes, transf = make_element(OFFSETS, flags)
    d = np.array([0.01, -0.02, 0.03, 0.05, -0.04, 0.02,
                  -0.03, 0.04, 0.01, -0.06, 0.03, 0.08])
    for k, n in enumerate(nodes):
        n.set_trial_displacement(d[6*k:6*k + 6])
    transf.update()
    ul_deformed = transf.get_local_deformation()
    assert np.any(np.abs(ul_deformed) > 1e-3)

    psi = np.array([-0.8, 0.4, 0.6])
    Rg = exp_so3(psi)
    for k, (n, X) in enumerate(zip(nodes, (XI, XJ))):
        x = X + d[6*k:6*k + 3]
        n.set_trial_displacement(np.concatenate([Rg @ x - X, d[6*k + 3:6*k + 6] + psi]))
    transf.update()

    np.testing.assert_allclose(transf.get_local_deformation(), ul_deformed, atol=1e-12)


def test_local_forces_objective_with_offsets():
    nodes, transf = make_element(OFFSETS)
    d = np.array([0.0, 0.0, 0.0, 0.02, 0.01, -0.03,
                  0.05, -0.02, 0.04, 0.01, -0.02, 0.03])
    for k, n in enumerate(nodes):
        n.set_trial_displacement(d[6*k:6*k + 6])
    transf.update()
    pl = np.zeros(12)
    pl[6] = 3.0
    pl[[3, 4, 5, 9, 10, 11]] = [0.2, -0.5, 0.7, -0.2, 0.4, 0.1]
    f0 = transf.push_force(pl)

    psi = np.array([0.5, 0.9, -0.2])
    Rg = exp_so3(psi)
    for k, (n, X) in enumerate(zip(nodes, (XI, XJ))):
        x = X + d[6*k:6*k + 3]
        n.set_trial_displacement(np.concatenate([Rg @ x - X, d[6*k + 3:6*k + 6] + psi]))
    transf.update()
    f1 = transf.push_force(pl)

    for k in range(4):
        np.testing.assert_allclose(f1[3*k:3*k + 3], Rg @ f0[3*k:3*k + 3], atol=1e-12)

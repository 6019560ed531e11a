# tests/test_cantilever.py
"""
CANTILEVER ROLL-UP: Large-Rotation Benchmark
============================================

A straight cantilever of length L under a tip moment M bends into a
circular arc of radius rho = EI/M. With

    M = EI * (pi/2) / L

the tip turns by a quarter revolution and ends at

    x = y = rho = 2L/pi

This is the classic test for a corotational beam: a small-rotation
formulation gets it badly wrong, and an inconsistent tangent shows up as a
Newton iteration that stalls.

The chords of a 10-element mesh lie on a polygon, so the tip position is
only expected within about 0.1 %; the tip rotation is exact.
"""

import numpy as np
import pytest

from mini_corot.kernel.dof import DOF_3D_FRAME
from mini_corot.kernel.solve import solve_newton
from mini_corot.v3d.assembly import FrameAssembly
from mini_corot.v3d.model import Frame3D, FrameNode3D


def make_cantilever(n_elem=10, L=10.0, EI=1.0):
    nodes = {i: FrameNode3D(i, L * i / n_elem, 0.0, 0.0) for i in range(n_elem + 1)}
    elements = [
        Frame3D(i, i, i + 1, E=EI, G=EI, A=1000.0, Iy=1.0, Iz=1.0, J=1.0)
        for i in range(n_elem)
    ]
    return nodes, elements


def test_cantilever_tip_moment_rolls_into_quarter_circle():
    n_elem, L, EI = 10, 10.0, 1.0
    nodes, elements = make_cantilever(n_elem, L, EI)
    asm = FrameAssembly(nodes, elements)
    dof = DOF_3D_FRAME

    M = EI * (0.5 * np.pi) / L
    F = np.zeros(asm.ndof)
    F[dof.idx(n_elem, 5)] = M
    fixed = dof.node_dofs(0)

    d, iterations = solve_newton(
        asm.response_at, F, fixed, n_steps=10,
        commit_func=asm.commit, revert_func=asm.revert_to_last_commit,
    )

    tip = asm.node_positions()[n_elem]
    rho = 2.0 * L / np.pi
    assert tip[0] == pytest.approx(rho, rel=1e-2)
    assert tip[1] == pytest.approx(rho, rel=1e-2)
    assert tip[2] == pytest.approx(0.0, abs=1e-9)

    assert d[dof.idx(n_elem, 5)] == pytest.approx(0.5 * np.pi, rel=1e-6)
    assert max(iterations) < 15
    print(f"✓ Tip at ({tip[0]:.4f}, {tip[1]:.4f}), exact ({rho:.4f}, {rho:.4f})")


def test_cantilever_is_stress_free_in_axial_direction():
    """Pure moment: every element keeps its chord length."""
    n_elem, L, EI = 10, 10.0, 1.0
    nodes, elements = make_cantilever(n_elem, L, EI)
    asm = FrameAssembly(nodes, elements)
    dof = DOF_3D_FRAME

    F = np.zeros(asm.ndof)
    F[dof.idx(n_elem, 5)] = EI * 0.25 * np.pi / L
    solve_newton(asm.response_at, F, dof.node_dofs(0), n_steps=5,
                 commit_func=asm.commit, revert_func=asm.revert_to_last_commit)

    for transf in asm.transforms:
        assert transf.get_deformed_length() == pytest.approx(transf.get_initial_length(), rel=1e-8)


def test_small_load_matches_linear_theory():
    """A tiny tip force gives the textbook PL^3/(3EI) deflection."""
    n_elem, L, EI = 4, 2.0, 1.0
    nodes, elements = make_cantilever(n_elem, L, EI)
    asm = FrameAssembly(nodes, elements)
    dof = DOF_3D_FRAME

    P = 1e-6
    F = np.zeros(asm.ndof)
    F[dof.idx(n_elem, 2)] = P
    d, _ = solve_newton(asm.response_at, F, dof.node_dofs(0), n_steps=1, tol=1e-11)

    assert d[dof.idx(n_elem, 2)] == pytest.approx(P * L**3 / (3.0 * EI), rel=1e-4)


def test_commit_and_revert_through_assembly():
    nodes, elements = make_cantilever(2, 2.0, 1.0)
    asm = FrameAssembly(nodes, elements)
    d1 = np.zeros(asm.ndof)
    d1[DOF_3D_FRAME.idx(2, 5)] = 0.2
    asm.set_trial(d1)
    asm.commit()
    ul1 = [t.get_local_deformation() for t in asm.transforms]

    d2 = d1.copy()
    d2[DOF_3D_FRAME.idx(2, 1)] = 0.3
    asm.set_trial(d2)
    asm.revert_to_last_commit()

    for t, ul in zip(asm.transforms, ul1):
        np.testing.assert_allclose(t.get_local_deformation(), ul, atol=1e-12)
    np.testing.assert_allclose(nodes[2].trial_displacement, d1[12:18])

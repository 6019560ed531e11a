# mini_corot/v3d - Spatial frame model objects
"""
V3D: SPATIAL FRAME MODEL
========================

- FrameNode3D: node with trial/committed 6-DOF displacements
- Frame3D: two-node beam record (section properties, vecxz)
- elements.py: chord geometry, reference orientation, joint offsets and the
  basic elastic stiffness in corotational coordinates
- FrameAssembly: nodes + elements + one transformation per element

USAGE:
------
    from mini_corot.v3d import FrameNode3D, Frame3D
    from mini_corot.v3d.assembly import FrameAssembly
    from mini_corot.kernel import solve_newton

    nodes = {i: FrameNode3D(i, i * 1.0, 0.0, 0.0) for i in range(11)}
    elements = [Frame3D(i, i, i + 1, E=1.0, G=1.0, A=100.0, Iy=1.0, Iz=1.0, J=1.0)
                for i in range(10)]
    asm = FrameAssembly(nodes, elements)
"""

from .model import FrameNode3D, Frame3D
from .elements import (
    chord_geometry, orientation_matrix, global_offsets, offset_end_points,
    frame3d_basic_stiffness
)

__all__ = [
    'FrameNode3D', 'Frame3D',
    'chord_geometry', 'orientation_matrix', 'global_offsets', 'offset_end_points',
    'frame3d_basic_stiffness',
]

# mini_corot - Corotational kinematics for spatial frame elements
"""
MINI-COROT: Large-Rotation Spatial Frame Transformation
=======================================================

This package provides:
- EuclidFrameTransform: maps global nodal displacements of a 2-node
  spatial beam to small local deformations in a corotated frame, and
  pushes local forces/stiffness back to global coordinates
- ChordIsometry: the corotational triad and its linearization
- A small verification harness (assembly, Newton driver, FrameAssembly)

ARCHITECTURE:
-------------
    kernel/         SO(3) algebra, DOF indexing, assembly, solvers
    v3d/            Spatial frame model (nodes, elements, geometry)
    isometry.py     Corotational triad
    transform.py    The frame transformation and its lifecycle
    export.py       JSON / CSV / text export
    config.py       Offset flags and numerical tolerances
    errors.py       Exception hierarchy
"""

import logging

from .config import OffsetFlag, TOLERANCES
from .errors import (
    TransformError,
    TopologyError,
    DegenerateGeometryError,
    StaleStateError,
    UnsupportedOperationWarning,
)
from .isometry import ChordIsometry
from .transform import EuclidFrameTransform, TransformState, InitialDisplacement

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'OffsetFlag', 'TOLERANCES',
    'TransformError', 'TopologyError', 'DegenerateGeometryError',
    'StaleStateError', 'UnsupportedOperationWarning',
    'ChordIsometry', 'EuclidFrameTransform', 'TransformState', 'InitialDisplacement',
]

# mini_corot/export.py
"""
Export service: JSON records and CSV state tables for frame transformations.
"""

import csv
import io
import json
from typing import Iterable

import numpy as np

from .transform import EuclidFrameTransform


class ExportService:
    """Service for exporting transformation data to text formats."""

    @staticmethod
    def to_json(transforms: Iterable[EuclidFrameTransform]) -> str:
        """
        Serialize the configuration records of several transformations.

        Returns JSON content as a string.
        """
        model = {
            'version': '1.0',
            'type': 'frame_transforms',
            'transforms': [t.to_dict() for t in transforms],
        }
        return json.dumps(model, indent=2)

    @staticmethod
    def state_table_csv(transforms: Iterable[EuclidFrameTransform]) -> str:
        """
        Generate a CSV table of the current deformation state.

        One row per transformation: reference and deformed length, axial
        deformation and the magnitude of each end's local rotation.
        """
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow([
            'tag', 'L', 'Ln', 'axial_deformation',
            'rotation_I', 'rotation_J', 'state'
        ])

        for t in transforms:
            ul = t.get_local_deformation()
            writer.writerow([
                t.tag,
                round(t.get_initial_length(), 6),
                round(t.get_deformed_length(), 6),
                round(float(ul[t.dof.axial(1)]), 9),
                round(float(np.linalg.norm(t.get_node_rotation_logarithm(0))), 9),
                round(float(np.linalg.norm(t.get_node_rotation_logarithm(1))), 9),
                t.state.value,
            ])

        return output.getvalue()

    @staticmethod
    def summary(transforms: Iterable[EuclidFrameTransform]) -> str:
        """Human-readable text block, one entry per transformation."""
        blocks = []
        for t in transforms:
            lines = [str(t)]
            lines.append(f"  L  = {t.get_initial_length():.6g}")
            lines.append(f"  Ln = {t.get_deformed_length():.6g}")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

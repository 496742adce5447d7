"""Support plate that sits flush under the terrain footprint"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import EPSILON
from .mesh import Mesh
from .transform import Transform

# (outward normal, tangent u, tangent v) with u x v == normal
_BOX_FACES = (
    ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
    ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
    ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
    ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
)


def box_mesh(width: float, depth: float, height: float) -> Mesh:
    """
    Axis-aligned box centred on the origin.

    Each side has its own four vertices so the smooth normals stay equal to
    the side normal.
    """
    half = np.array([width, depth, height], dtype=np.float64) / 2
    points = []
    faces = []
    for normal, u, v in _BOX_FACES:
        n, u, v = (np.array(vec, dtype=np.float64) * half for vec in (normal, u, v))
        start = len(points)
        points.extend([n - u - v, n + u - v, n + u + v, n - u + v])
        faces.append([start, start + 1, start + 2])
        faces.append([start, start + 2, start + 3])
    return Mesh(np.array(points), np.array(faces))


class BasePlateBuilder:
    """Build the plate for a given terrain bounding box and thickness"""

    def build(self,
              bounds: Tuple[Sequence[float], Sequence[float]],
              thickness: float) -> Optional[Tuple[Mesh, Transform]]:
        """
        Build a plate covering the X/Y extent of ``bounds``.

        Args:
            bounds: (min_xyz, max_xyz) of the terrain in world space, i.e.
                after its scale has been applied
            thickness: Plate depth along Z

        Returns:
            (mesh, transform) with the top face at ``min_z``, or None when the
            thickness is not a positive finite number
        """
        if thickness is None or not math.isfinite(thickness) or thickness <= 0:
            return None

        min_xyz = np.asarray(bounds[0], dtype=np.float64)
        max_xyz = np.asarray(bounds[1], dtype=np.float64)
        size = max_xyz - min_xyz
        center = (min_xyz + max_xyz) / 2

        # Local top face at z = 0 so the world top is exactly min_z
        mesh = box_mesh(max(size[0], EPSILON), max(size[1], EPSILON), thickness)
        mesh = mesh.translated((0.0, 0.0, -thickness / 2))
        transform = Transform.from_scale_translation(
            translation=(center[0], center[1], min_xyz[2])
        )
        return mesh, transform

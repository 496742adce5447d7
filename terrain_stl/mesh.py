"""Immutable triangle mesh value and normal computation"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
import pyvista as pv


def compute_face_normals(points: np.ndarray, faces: np.ndarray, normalize: bool = True) -> np.ndarray:
    """
    Normals of each triangle from ``(v3 - v2) x (v1 - v2)``.

    With ``normalize=False`` the length is twice the triangle area. Degenerate
    triangles get a zero vector.
    """
    v1 = points[faces[:, 0]]
    v2 = points[faces[:, 1]]
    v3 = points[faces[:, 2]]
    normals = np.cross(v3 - v2, v1 - v2)

    if normalize:
        lengths = np.linalg.norm(normals, axis=1)
        valid = lengths > 0
        normals[valid] /= lengths[valid, None]
    return normals


def compute_vertex_normals(points: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    Smooth vertex normals: area-weighted sum of incident face normals, normalized.

    Vertices not used by any triangle get a zero normal.
    """
    normals = np.zeros_like(points, dtype=np.float64)
    face_normals = compute_face_normals(points, faces, normalize=False)
    for k in range(3):
        np.add.at(normals, faces[:, k], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    valid = lengths > 0
    normals[valid] /= lengths[valid, None]
    return normals


@dataclass(frozen=True, eq=False)
class Mesh:
    """
    Triangle mesh with vertex normals derived from its positions.

    Arrays are made read-only on construction; geometry changes go through a
    new Mesh.
    """

    points: np.ndarray
    faces: np.ndarray
    normals: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        points = np.array(self.points, dtype=np.float64).reshape(-1, 3)
        faces = np.array(self.faces, dtype=np.int64).reshape(-1, 3)

        if faces.size and (faces.min() < 0 or faces.max() >= len(points)):
            raise IndexError(
                f"Face indices out of range for {len(points)} points "
                f"(min {faces.min()}, max {faces.max()})"
            )

        normals = compute_vertex_normals(points, faces)
        for name, arr in (("points", points), ("faces", faces), ("normals", normals)):
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return self.n_points == 0 or self.n_faces == 0

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box as (min_xyz, max_xyz)"""
        if self.n_points == 0:
            raise ValueError("Empty mesh has no bounding box")
        return self.points.min(axis=0), self.points.max(axis=0)

    def translated(self, offset) -> "Mesh":
        return Mesh(self.points + np.asarray(offset, dtype=np.float64), self.faces)

    def to_polydata(self) -> pv.PolyData:
        """Convert to pyvista PolyData with the vertex normals attached"""
        cells = np.hstack([np.full((self.n_faces, 1), 3, dtype=np.int64), self.faces])
        poly = pv.PolyData(np.array(self.points), cells.ravel())
        poly.point_data['Normals'] = np.array(self.normals)
        return poly

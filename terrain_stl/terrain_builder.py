"""Build a triangulated terrain surface from a canonical elevation grid"""

from typing import Optional

import numpy as np

from .config import MeshConfig
from .exceptions import StructuralError
from .grid import Grid
from .mesh import Mesh


class TerrainMeshBuilder:
    """Convert a Grid into a normalized, origin-anchored terrain Mesh"""

    def __init__(self, config: Optional[MeshConfig] = None):
        self.config = config or MeshConfig()

    def build(self, grid: Grid) -> Mesh:
        """
        Triangulate the grid as a plane with one vertex per sample.

        The plane spans the lon range along X and the lat range along Y.
        Heights are rescaled so the relief spans ``config.visual_height``
        whatever the source units are. The result is centred horizontally on
        the origin with its lowest vertex at Z = 0.

        Raises:
            StructuralError: fewer than two samples along either axis
        """
        n_lat, n_lon = grid.shape
        width_segments = n_lon - 1
        height_segments = n_lat - 1
        if width_segments <= 0 or height_segments <= 0:
            raise StructuralError(
                f"Grid too small to triangulate: {n_lat} lat x {n_lon} lon values, "
                f"need at least 2 x 2"
            )

        eps = self.config.epsilon
        width = self._span(grid.lon, eps)
        depth = self._span(grid.lat, eps)

        # Ascending coordinates increase X (east) and Y (north)
        x_dir = 1.0 if grid.lon[-1] >= grid.lon[0] else -1.0
        y_dir = 1.0 if grid.lat[-1] >= grid.lat[0] else -1.0
        xs = np.linspace(-width / 2, width / 2, n_lon) * x_dir
        ys = np.linspace(-depth / 2, depth / 2, n_lat) * y_dir
        X, Y = np.meshgrid(xs, ys)

        Z = self.normalize_heights(grid.elevation)

        points = np.column_stack((X.ravel(), Y.ravel(), Z.ravel()))

        min_xyz = points.min(axis=0)
        max_xyz = points.max(axis=0)
        offset = np.array([
            -(min_xyz[0] + max_xyz[0]) / 2,
            -(min_xyz[1] + max_xyz[1]) / 2,
            -min_xyz[2],
        ])
        points += offset

        faces = self.grid_faces(n_lat, n_lon, flip=x_dir * y_dir > 0)
        return Mesh(points, faces)

    def normalize_heights(self, elevation: np.ndarray) -> np.ndarray:
        """
        Map elevation onto [0, visual_height].

        Non-finite samples are ignored for the range and placed at height 0.
        """
        elevation = np.asarray(elevation, dtype=np.float64)
        finite = np.isfinite(elevation)

        if finite.any():
            min_elev = float(elevation[finite].min())
            max_elev = float(elevation[finite].max())
        else:
            print("Warning: no finite elevation values, terrain will be flat")
            min_elev = max_elev = 0.0

        elev_range = max(max_elev - min_elev, self.config.epsilon)
        height_scale = self.config.visual_height / elev_range

        heights = (elevation - min_elev) * height_scale
        heights[~finite] = 0.0
        return heights

    @staticmethod
    def grid_faces(n_rows: int, n_cols: int, flip: bool = False) -> np.ndarray:
        """
        Two triangles per cell over a row-major vertex grid.

        Cells are emitted row by row. With ``flip`` the winding is reversed.
        """
        iy, ix = np.meshgrid(np.arange(n_rows - 1), np.arange(n_cols - 1), indexing='ij')
        a = ix + n_cols * iy
        b = ix + n_cols * (iy + 1)
        c = (ix + 1) + n_cols * (iy + 1)
        d = (ix + 1) + n_cols * iy

        if flip:
            first = np.stack([a, d, b], axis=-1)
            second = np.stack([b, d, c], axis=-1)
        else:
            first = np.stack([a, b, d], axis=-1)
            second = np.stack([b, c, d], axis=-1)

        return np.stack([first, second], axis=2).reshape(-1, 3)

    @staticmethod
    def _span(values: np.ndarray, eps: float) -> float:
        finite = values[np.isfinite(values)]
        span = float(finite.max() - finite.min()) if finite.size else 0.0
        return max(span, eps)

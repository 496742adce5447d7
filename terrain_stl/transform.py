"""Affine scale + translation transforms"""

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class Transform:
    """4x4 affine matrix applied to column vectors ``[x, y, z, 1]``"""

    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self):
        matrix = np.array(self.matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Transform matrix must be 4x4, got {matrix.shape}")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    @classmethod
    def identity(cls) -> "Transform":
        return cls(np.eye(4))

    @classmethod
    def from_scale_translation(cls,
                               scale: Sequence[float] = (1.0, 1.0, 1.0),
                               translation: Sequence[float] = (0.0, 0.0, 0.0)) -> "Transform":
        matrix = np.diag([*scale, 1.0]).astype(np.float64)
        matrix[:3, 3] = translation
        return cls(matrix)

    @property
    def translation(self) -> np.ndarray:
        return self.matrix[:3, 3].copy()

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Return transformed copies of (N, 3) points"""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return points @ self.matrix[:3, :3].T + self.matrix[:3, 3]

    def __eq__(self, other):
        if not isinstance(other, Transform):
            return NotImplemented
        return np.array_equal(self.matrix, other.matrix)

    def __hash__(self):
        return hash(self.matrix.tobytes())

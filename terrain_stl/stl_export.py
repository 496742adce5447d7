"""Merge transformed meshes and write them as ASCII STL"""

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from .exceptions import ExportError
from .mesh import Mesh, compute_face_normals
from .transform import Transform

Part = Tuple[Mesh, Transform]


def merge_parts(parts: Iterable[Part]) -> Mesh:
    """
    Transform each part into world space and concatenate them.

    Source meshes are not modified. Coincident vertices are kept separate and
    the normals are recomputed over the merged mesh.

    Raises:
        ExportError: no parts, or a part without vertices/triangles
    """
    parts = list(parts)
    if not parts:
        raise ExportError("Nothing to export: part list is empty")

    all_points = []
    all_faces = []
    offset = 0
    for i, part in enumerate(parts):
        try:
            mesh, transform = part
        except (TypeError, ValueError) as exc:
            raise ExportError(f"Part {i} is not a (mesh, transform) pair") from exc

        if mesh is None or mesh.n_points == 0:
            raise ExportError(f"Part {i} has no vertices")
        if mesh.n_faces == 0:
            raise ExportError(f"Part {i} has no triangles ({mesh.n_points} vertices)")

        world = (transform or Transform.identity()).apply(mesh.points)
        if not np.all(np.isfinite(world)):
            raise ExportError(f"Part {i} has non-finite vertex coordinates")

        all_points.append(world)
        all_faces.append(mesh.faces + offset)
        offset += mesh.n_points

    return Mesh(np.vstack(all_points), np.vstack(all_faces))


def _fmt(value: float) -> str:
    return repr(float(value))


def format_ascii_stl(mesh: Mesh, solid_name: str = "exported") -> str:
    """
    Serialize one facet per triangle, vertices in index-buffer order.

    Numbers use the shortest repr that round-trips to the same float.
    """
    facet_normals = compute_face_normals(mesh.points, mesh.faces)

    lines = [f"solid {solid_name}"]
    for face, normal in zip(mesh.faces, facet_normals):
        lines.append(f"  facet normal {_fmt(normal[0])} {_fmt(normal[1])} {_fmt(normal[2])}")
        lines.append("    outer loop")
        for index in face:
            x, y, z = mesh.points[index]
            lines.append(f"      vertex {_fmt(x)} {_fmt(y)} {_fmt(z)}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {solid_name}")

    return "\n".join(lines) + "\n"


def export_stl(parts: Sequence[Part], solid_name: str = "exported") -> bytes:
    """Merge the parts and return the ASCII STL document as bytes"""
    merged = merge_parts(parts)
    return format_ascii_stl(merged, solid_name).encode('ascii')


def write_stl(parts: Sequence[Part],
              output_path: Union[str, Path],
              solid_name: str = "exported") -> Path:
    """Write the merged parts to ``output_path``; nothing is written on error"""
    data = export_stl(parts, solid_name)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return output_path


def parse_ascii_stl(text: Union[str, bytes]) -> Tuple[str, np.ndarray, np.ndarray]:
    """
    Read back an ASCII STL document.

    Returns:
        (solid_name, facet_normals (M, 3), triangles (M, 3, 3))
    """
    if isinstance(text, bytes):
        text = text.decode('ascii')

    tokens = text.split()
    if len(tokens) < 2 or tokens[0] != 'solid':
        raise ValueError("Not an ASCII STL document: missing 'solid' header")
    name = tokens[1] if tokens[1] != 'facet' else ''

    normals: List[List[float]] = []
    triangles: List[List[List[float]]] = []
    i = 0
    while i < len(tokens):
        if tokens[i] == 'facet':
            normals.append([float(v) for v in tokens[i + 2:i + 5]])
            i += 5
        elif tokens[i] == 'loop':
            triangles.append([])
            i += 1
        elif tokens[i] == 'vertex':
            triangles[-1].append([float(v) for v in tokens[i + 1:i + 4]])
            i += 4
        else:
            i += 1

    if len(normals) != len(triangles) or any(len(t) != 3 for t in triangles):
        raise ValueError("Malformed ASCII STL: facets and vertex loops do not match")

    return (
        name,
        np.array(normals, dtype=np.float64).reshape(-1, 3),
        np.array(triangles, dtype=np.float64).reshape(-1, 3, 3),
    )

"""Tests for the support plate built under the (scaled) terrain."""

import numpy as np
import pytest

from terrain_stl.base_plate import BasePlateBuilder, box_mesh
from terrain_stl.grid import Grid
from terrain_stl.mesh import compute_face_normals
from terrain_stl.terrain_builder import TerrainMeshBuilder
from terrain_stl.transform import Transform

SCALES = [(1.0, 1.0, 1.0), (2.0, 0.5, 3.0), (0.1, 7.0, 0.25)]
THICKNESSES = [0.001, 0.05, 1.0, 25.0]


def _terrain():
    rng = np.random.default_rng(3)
    grid = Grid(lat=np.linspace(0, 1, 6), lon=np.linspace(0, 2, 8),
                elevation=rng.normal(500, 120, size=(6, 8)))
    return TerrainMeshBuilder().build(grid)


def _world_bounds(mesh, transform):
    world = transform.apply(mesh.points)
    return world.min(axis=0), world.max(axis=0)


class TestBoxMesh:

    def test_topology(self):
        box = box_mesh(2.0, 3.0, 4.0)
        assert box.n_points == 24
        assert box.n_faces == 12
        min_xyz, max_xyz = box.bounds()
        np.testing.assert_allclose(min_xyz, [-1.0, -1.5, -2.0])
        np.testing.assert_allclose(max_xyz, [1.0, 1.5, 2.0])

    def test_faces_point_outward(self):
        box = box_mesh(2.0, 3.0, 4.0)
        normals = compute_face_normals(box.points, box.faces)
        centroids = box.points[box.faces].mean(axis=1)
        assert np.all(np.einsum('ij,ij->i', normals, centroids) > 0)


class TestBasePlateBuilder:

    @pytest.mark.parametrize("thickness", [0.0, -1.0, float('nan'), float('inf'), None])
    def test_invalid_thickness_suppresses_plate(self, thickness):
        bounds = ([-1, -1, 0], [1, 1, 0.3])
        assert BasePlateBuilder().build(bounds, thickness) is None

    @pytest.mark.parametrize("scale", SCALES)
    @pytest.mark.parametrize("thickness", THICKNESSES)
    def test_top_face_flush_with_terrain_minimum(self, scale, thickness):
        terrain = _terrain()
        terrain_transform = Transform.from_scale_translation(scale)
        bounds = _world_bounds(terrain, terrain_transform)

        plate, plate_transform = BasePlateBuilder().build(bounds, thickness)
        plate_min, plate_max = _world_bounds(plate, plate_transform)

        assert plate_max[2] == pytest.approx(bounds[0][2], abs=1e-12)
        assert plate_min[2] == pytest.approx(bounds[0][2] - thickness, rel=1e-12, abs=1e-12)

    @pytest.mark.parametrize("scale", SCALES)
    def test_footprint_matches_scaled_terrain(self, scale):
        terrain = _terrain()
        bounds = _world_bounds(terrain, Transform.from_scale_translation(scale))

        plate, plate_transform = BasePlateBuilder().build(bounds, 0.1)
        plate_min, plate_max = _world_bounds(plate, plate_transform)

        np.testing.assert_allclose(plate_min[:2], bounds[0][:2], atol=1e-12)
        np.testing.assert_allclose(plate_max[:2], bounds[1][:2], atol=1e-12)

    def test_no_overlap_with_terrain(self):
        terrain = _terrain()
        bounds = _world_bounds(terrain, Transform.identity())
        plate, plate_transform = BasePlateBuilder().build(bounds, 0.2)
        plate_top = _world_bounds(plate, plate_transform)[1][2]
        assert plate_top <= terrain.points[:, 2].min()

    def test_rebuild_is_idempotent(self):
        bounds = _world_bounds(_terrain(), Transform.from_scale_translation((2, 2, 2)))
        builder = BasePlateBuilder()
        a_mesh, a_transform = builder.build(bounds, 0.3)
        b_mesh, b_transform = builder.build(bounds, 0.3)
        np.testing.assert_array_equal(a_mesh.points, b_mesh.points)
        np.testing.assert_array_equal(a_mesh.faces, b_mesh.faces)
        assert a_transform == b_transform

    def test_offset_bounds_are_centred(self):
        bounds = ([10.0, 20.0, -5.0], [14.0, 22.0, 1.0])
        plate, transform = BasePlateBuilder().build(bounds, 1.0)
        np.testing.assert_allclose(transform.translation, [12.0, 21.0, -5.0])
        plate_min, plate_max = _world_bounds(plate, transform)
        np.testing.assert_allclose(plate_min, [10.0, 20.0, -6.0])
        np.testing.assert_allclose(plate_max, [14.0, 22.0, -5.0])

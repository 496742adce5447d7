"""Tests for grid-to-mesh construction and height normalization."""

import numpy as np
import pytest

from terrain_stl.config import FIXED_VISUAL_SCALE, MeshConfig
from terrain_stl.exceptions import StructuralError
from terrain_stl.grid import Grid
from terrain_stl.mesh import compute_face_normals
from terrain_stl.terrain_builder import TerrainMeshBuilder

SHAPES = [(2, 2), (3, 5), (7, 4), (10, 10)]


def _random_grid(n_lat, n_lon, seed=0):
    rng = np.random.default_rng(seed)
    return Grid(
        lat=np.linspace(40.0, 41.5, n_lat),
        lon=np.linspace(-3.0, -1.0, n_lon),
        elevation=rng.uniform(-200.0, 3000.0, size=(n_lat, n_lon)),
    )


class TestMeshTopology:

    @pytest.mark.parametrize("n_lat,n_lon", SHAPES)
    def test_vertex_and_triangle_counts(self, n_lat, n_lon):
        mesh = TerrainMeshBuilder().build(_random_grid(n_lat, n_lon))
        assert mesh.n_points == n_lat * n_lon
        assert mesh.n_faces == 2 * (n_lat - 1) * (n_lon - 1)
        assert mesh.normals.shape == (n_lat * n_lon, 3)

    @pytest.mark.parametrize("n_lat,n_lon", [(1, 5), (5, 1), (1, 1)])
    def test_grid_too_small(self, n_lat, n_lon):
        grid = Grid(lat=np.arange(n_lat), lon=np.arange(n_lon),
                    elevation=np.zeros((n_lat, n_lon)))
        with pytest.raises(StructuralError, match="too small"):
            TerrainMeshBuilder().build(grid)

    def test_row_major_vertex_order(self):
        elevation = np.arange(12, dtype=float).reshape(3, 4)
        grid = Grid(lat=[0, 1, 2], lon=[0, 1, 2, 3], elevation=elevation)
        mesh = TerrainMeshBuilder().build(grid)
        expected = elevation.ravel() * (FIXED_VISUAL_SCALE / 11.0)
        np.testing.assert_allclose(mesh.points[:, 2], expected, atol=1e-12)

    @pytest.mark.parametrize("lat_order", [1, -1])
    @pytest.mark.parametrize("lon_order", [1, -1])
    def test_normals_point_up_for_any_axis_order(self, lat_order, lon_order):
        grid = Grid(
            lat=np.linspace(0, 2, 5)[::lat_order],
            lon=np.linspace(0, 3, 6)[::lon_order],
            elevation=np.zeros((5, 6)),
        )
        mesh = TerrainMeshBuilder().build(grid)
        face_normals = compute_face_normals(mesh.points, mesh.faces)
        np.testing.assert_allclose(face_normals, np.tile([0.0, 0.0, 1.0], (mesh.n_faces, 1)))
        np.testing.assert_allclose(mesh.normals[:, 2], 1.0)

    def test_ascending_axes_point_north_and_east(self):
        elevation = np.zeros((3, 3))
        grid = Grid(lat=[10, 11, 12], lon=[20, 21, 22], elevation=elevation)
        points = TerrainMeshBuilder().build(grid).points.reshape(3, 3, 3)
        assert points[0, 0, 0] < points[0, -1, 0]  # east increases X
        assert points[0, 0, 1] < points[-1, 0, 1]  # north increases Y

    def test_mesh_is_immutable(self):
        mesh = TerrainMeshBuilder().build(_random_grid(3, 3))
        with pytest.raises(ValueError):
            mesh.points[0, 2] = 1.0


class TestHeightNormalization:

    def test_two_by_two_scenario(self):
        grid = Grid(lat=[0, 1], lon=[0, 1], elevation=[[0, 10], [10, 0]])
        mesh = TerrainMeshBuilder().build(grid)
        assert mesh.n_points == 4
        np.testing.assert_allclose(mesh.points[:, 2], [0.0, 0.3, 0.3, 0.0], atol=1e-15)
        assert mesh.bounds()[0][2] == 0.0

    @pytest.mark.parametrize("n_lat,n_lon", SHAPES)
    @pytest.mark.parametrize("offset,factor", [(0.0, 1.0), (5000.0, 3.28084), (-11000.0, 0.001)])
    def test_height_span_is_fixed(self, n_lat, n_lon, offset, factor):
        grid = _random_grid(n_lat, n_lon)
        scaled = Grid(lat=grid.lat, lon=grid.lon, elevation=grid.elevation * factor + offset)
        z = TerrainMeshBuilder().build(scaled).points[:, 2]
        assert z.min() == 0.0
        assert z.max() == pytest.approx(FIXED_VISUAL_SCALE, rel=1e-12)

    def test_custom_visual_height(self):
        mesh = TerrainMeshBuilder(MeshConfig(visual_height=1.5)).build(_random_grid(4, 4))
        assert mesh.points[:, 2].max() == pytest.approx(1.5)

    def test_flat_grid(self):
        grid = Grid(lat=[0, 1], lon=[0, 1], elevation=np.full((2, 2), 1234.0))
        z = TerrainMeshBuilder().build(grid).points[:, 2]
        np.testing.assert_array_equal(z, 0.0)

    def test_nonfinite_values_ignored(self):
        elevation = np.array([[0.0, np.nan], [100.0, np.inf]])
        grid = Grid(lat=[0, 1], lon=[0, 1], elevation=elevation)
        z = TerrainMeshBuilder().build(grid).points[:, 2]
        np.testing.assert_allclose(z, [0.0, 0.0, 0.3, 0.0], atol=1e-15)
        assert np.all(np.isfinite(z))

    def test_all_nodata(self, capsys):
        grid = Grid(lat=[0, 1], lon=[0, 1], elevation=np.full((2, 2), np.nan))
        z = TerrainMeshBuilder().build(grid).points[:, 2]
        np.testing.assert_array_equal(z, 0.0)
        assert "no finite elevation" in capsys.readouterr().out


class TestPlacement:

    @pytest.mark.parametrize("n_lat,n_lon", SHAPES)
    def test_recentered_on_origin(self, n_lat, n_lon):
        mesh = TerrainMeshBuilder().build(_random_grid(n_lat, n_lon))
        min_xyz, max_xyz = mesh.bounds()
        np.testing.assert_allclose((min_xyz[:2] + max_xyz[:2]) / 2, [0.0, 0.0], atol=1e-12)
        assert min_xyz[2] == 0.0

    def test_footprint_follows_coordinate_span(self):
        grid = Grid(lat=[40.0, 40.5, 41.0], lon=[-3.0, -1.0],
                    elevation=np.zeros((3, 2)))
        min_xyz, max_xyz = TerrainMeshBuilder().build(grid).bounds()
        np.testing.assert_allclose(max_xyz[:2] - min_xyz[:2], [2.0, 1.0])

    def test_degenerate_span_floored(self):
        grid = Grid(lat=[5.0, 5.0], lon=[1.0, 2.0], elevation=np.zeros((2, 2)))
        min_xyz, max_xyz = TerrainMeshBuilder().build(grid).bounds()
        assert max_xyz[1] - min_xyz[1] == pytest.approx(MeshConfig().epsilon)

    def test_build_is_deterministic(self):
        grid = _random_grid(6, 5)
        a = TerrainMeshBuilder().build(grid)
        b = TerrainMeshBuilder().build(grid)
        np.testing.assert_array_equal(a.points, b.points)
        np.testing.assert_array_equal(a.normals, b.normals)

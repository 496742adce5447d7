"""Tests for configuration dataclasses and YAML loading."""

import pytest

from terrain_stl.config import (
    BaseConfig,
    ExportConfig,
    MeshConfig,
    ScaleConfig,
    SourceConfig,
    load_config,
)


class TestConfigValidation:

    @pytest.mark.parametrize("axis", ["x", "y", "z"])
    @pytest.mark.parametrize("value", [0.0, -1.0, float('nan'), float('inf')])
    def test_scale_must_be_positive(self, axis, value):
        with pytest.raises(ValueError, match=axis):
            ScaleConfig(**{axis: value})

    def test_scale_accepts_ints(self):
        assert ScaleConfig(x=2, y=1, z=3).as_tuple() == (2.0, 1.0, 3.0)

    @pytest.mark.parametrize("value", [0.0, -0.1, float('nan')])
    def test_base_thickness_must_be_positive(self, value):
        with pytest.raises(ValueError):
            BaseConfig(thickness=value)

    def test_mesh_config_positive(self):
        with pytest.raises(ValueError):
            MeshConfig(visual_height=0)
        with pytest.raises(ValueError):
            MeshConfig(epsilon=-1e-9)

    def test_export_config(self):
        with pytest.raises(ValueError):
            ExportConfig(solid_name="two words")
        with pytest.raises(ValueError):
            ExportConfig(stl_filename="terrain.obj")

    def test_source_names_become_tuples(self):
        config = SourceConfig(lat_names=["lat"], lon_names=["lon"])
        assert config.lat_names == ("lat",)

    def test_source_names_not_empty(self):
        with pytest.raises(ValueError):
            SourceConfig(lat_names=[])


class TestLoadConfig:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("scale:\n  z: 2.5\nbase:\n  thickness: 0.1\n")
        configs = load_config(path)

        assert configs['scale_config'].as_tuple() == (1.0, 1.0, 2.5)
        assert configs['base_config'].thickness == 0.1
        assert configs['mesh_config'].visual_height == 0.3
        assert configs['export_config'].solid_name == "exported"
        assert set(configs) == {
            'source_config', 'mesh_config', 'scale_config',
            'base_config', 'export_config', 'visualization_config',
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path)['scale_config'].as_tuple() == (1.0, 1.0, 1.0)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("scale:\n  x: -1\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("base:\n  thikness: 0.1\n")
        with pytest.raises(TypeError):
            load_config(path)

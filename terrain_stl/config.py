"""Configuration classes for elevation-to-STL conversion"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple
import yaml
from pathlib import Path


LAT_NAMES = ("lat", "latitude", "y", "nav_lat", "grid_latitude")
LON_NAMES = ("lon", "longitude", "x", "nav_lon", "grid_longitude")
FIXED_VISUAL_SCALE = 0.3
EPSILON = 1e-9

ELEVATION_NAMES = (
    "elevation",
    "elev",
    "z",
    "height",
    "topo",
    "topography",
    "bathymetry",
    "altitude",
    "band1",
)


@dataclass
class SourceConfig:
    """Configuration for locating variables in array datasets"""

    lat_names: Tuple[str, ...] = LAT_NAMES
    lon_names: Tuple[str, ...] = LON_NAMES
    elevation_names: Tuple[str, ...] = ELEVATION_NAMES
    elevation_variable: Optional[str] = None  # explicit override of the name search

    def __post_init__(self):
        # YAML hands us lists
        self.lat_names = tuple(self.lat_names)
        self.lon_names = tuple(self.lon_names)
        self.elevation_names = tuple(self.elevation_names)

        if not self.lat_names or not self.lon_names:
            raise ValueError("Latitude and longitude candidate lists must not be empty")


@dataclass
class MeshConfig:
    """Configuration for terrain surface construction"""

    visual_height: float = FIXED_VISUAL_SCALE  # height span of the normalized relief
    epsilon: float = EPSILON

    def __post_init__(self):
        if not math.isfinite(self.visual_height) or self.visual_height <= 0:
            raise ValueError(f"visual_height must be positive, got {self.visual_height}")
        if not math.isfinite(self.epsilon) or self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")


@dataclass
class ScaleConfig:
    """Per-axis scale applied to the terrain model"""

    x: float = 1.0
    y: float = 1.0
    z: float = 1.0

    def __post_init__(self):
        for axis in ("x", "y", "z"):
            value = float(getattr(self, axis))
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Scale factor '{axis}' must be positive, got {value}")
            setattr(self, axis, value)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass
class BaseConfig:
    """Configuration for the support plate under the terrain"""

    thickness: float = 0.05
    enabled: bool = True

    def __post_init__(self):
        if not math.isfinite(self.thickness) or self.thickness <= 0:
            raise ValueError(f"Base thickness must be positive, got {self.thickness}")


@dataclass
class ExportConfig:
    """Configuration for written output files"""

    solid_name: str = "exported"
    stl_filename: str = "terrain.stl"
    save_vtk: bool = False
    save_metadata: bool = True

    def __post_init__(self):
        if not self.solid_name or any(c.isspace() for c in self.solid_name):
            raise ValueError(f"solid_name must be a single non-empty token, got {self.solid_name!r}")
        if not self.stl_filename.lower().endswith(".stl"):
            raise ValueError(f"stl_filename must end with .stl, got {self.stl_filename}")


@dataclass
class VisualizationConfig:
    """Configuration for visualization options"""

    create_plots: bool = False
    plot_format: str = "png"
    dpi: int = 150
    cmap: str = "terrain"


def load_config(config_path: str) -> dict:
    """
    Load configuration from YAML file.
    Sections that are missing fall back to their defaults.

    Returns:
        dict with config objects (source_config, mesh_config, scale_config,
        base_config, export_config, visualization_config)
    """

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config_dict = yaml.safe_load(f) or {}

    configs = {
        'source_config': SourceConfig(**config_dict.get('source', {})),
        'mesh_config': MeshConfig(**config_dict.get('mesh', {})),
        'scale_config': ScaleConfig(**config_dict.get('scale', {})),
        'base_config': BaseConfig(**config_dict.get('base', {})),
        'export_config': ExportConfig(**config_dict.get('export', {})),
        'visualization_config': VisualizationConfig(**config_dict.get('visualization', {})),
    }

    scale = configs['scale_config']
    print(f"Loaded configuration (scale {scale.x} x {scale.y} x {scale.z}, "
          f"base thickness {configs['base_config'].thickness})")

    return configs

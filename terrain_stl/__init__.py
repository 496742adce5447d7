"""
Gridded Elevation to Printable STL Package
"""
from .config import (
    SourceConfig,
    MeshConfig,
    ScaleConfig,
    BaseConfig,
    ExportConfig,
    VisualizationConfig,
    FIXED_VISUAL_SCALE,
    load_config
)
from .exceptions import TerrainStlError, ResolutionError, StructuralError, ExportError
from .grid import Grid, grid_from_json, read_json_grid
from .grid_resolver import GridSourceResolver, load_grid
from .mesh import Mesh
from .transform import Transform
from .terrain_builder import TerrainMeshBuilder
from .base_plate import BasePlateBuilder
from .stl_export import merge_parts, export_stl, write_stl, parse_ascii_stl
from .pipeline import SceneComposite, TerrainStlPipeline

__version__ = "1.0.0"


def grid_to_stl(source, thickness: float = BaseConfig.thickness, **scale) -> bytes:
    """
    One-shot conversion of a grid source to ASCII STL bytes.

    Args:
        source: JSON/netCDF path, JSON-like mapping or xarray Dataset
        thickness: Base plate thickness; 0 for no plate
        **scale: Optional x, y, z scale factors
    """
    pipeline = TerrainStlPipeline(scale_config=ScaleConfig(**scale))
    pipeline.set_base_thickness(thickness)
    pipeline.load(source)
    return pipeline.export_bytes()

"""Main pipeline orchestrating the grid-to-STL workflow"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import xarray as xr

from .base_plate import BasePlateBuilder
from .config import (
    BaseConfig,
    ExportConfig,
    MeshConfig,
    ScaleConfig,
    SourceConfig,
    VisualizationConfig,
)
from .exceptions import ExportError
from .grid import Grid
from .grid_resolver import load_grid
from .mesh import Mesh
from .stl_export import Part, export_stl, merge_parts, write_stl
from .terrain_builder import TerrainMeshBuilder
from .transform import Transform
from .utils import write_metadata

GridSource = Union[str, Path, Mapping, xr.Dataset]


@dataclass(frozen=True)
class SceneComposite:
    """Terrain and base plate treated as one model"""

    grid: Grid
    terrain: Mesh
    terrain_transform: Transform
    plate: Optional[Mesh] = None
    plate_transform: Optional[Transform] = None

    def terrain_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """World-space bounds of the terrain alone"""
        world = self.terrain_transform.apply(self.terrain.points)
        return world.min(axis=0), world.max(axis=0)

    def parts(self) -> List[Part]:
        parts = [(self.terrain, self.terrain_transform)]
        if self.plate is not None:
            parts.append((self.plate, self.plate_transform))
        return parts

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """World-space bounds of every part"""
        world = np.vstack([t.apply(m.points) for m, t in self.parts()])
        return world.min(axis=0), world.max(axis=0)


class TerrainStlPipeline:
    """
    Owns the live model: the loaded terrain, its scale and the base plate.

    Every change of scale or thickness rebuilds the plate from the terrain's
    current bounds. A new load replaces the whole model.
    """

    def __init__(self,
                 source_config: Optional[SourceConfig] = None,
                 mesh_config: Optional[MeshConfig] = None,
                 scale_config: Optional[ScaleConfig] = None,
                 base_config: Optional[BaseConfig] = None,
                 export_config: Optional[ExportConfig] = None,
                 visualization_config: Optional[VisualizationConfig] = None):
        self.source_config = source_config or SourceConfig()
        self.mesh_config = mesh_config or MeshConfig()
        self.scale_config = scale_config or ScaleConfig()
        self.base_config = base_config or BaseConfig()
        self.export_config = export_config or ExportConfig()
        self.visualization_config = visualization_config or VisualizationConfig()

        self.terrain_builder = TerrainMeshBuilder(self.mesh_config)
        self.plate_builder = BasePlateBuilder()
        self.base_thickness = self.base_config.thickness if self.base_config.enabled else 0.0
        self.model: Optional[SceneComposite] = None

    def load(self, source: GridSource) -> SceneComposite:
        """
        Read a grid and rebuild the whole model from it.

        Errors leave the previous model untouched.
        """
        grid = load_grid(source, self.source_config)
        terrain = self.terrain_builder.build(grid)

        model = SceneComposite(
            grid=grid,
            terrain=terrain,
            terrain_transform=Transform.from_scale_translation(self.scale_config.as_tuple()),
        )
        self.model = self._with_plate(model)
        return self.model

    def set_scale(self,
                  x: Optional[float] = None,
                  y: Optional[float] = None,
                  z: Optional[float] = None) -> None:
        """Change one or more axis scale factors and refit the base plate"""
        scale = ScaleConfig(
            x=self.scale_config.x if x is None else x,
            y=self.scale_config.y if y is None else y,
            z=self.scale_config.z if z is None else z,
        )
        self.scale_config = scale

        if self.model is not None:
            model = replace(
                self.model,
                terrain_transform=Transform.from_scale_translation(scale.as_tuple()),
            )
            self.model = self._with_plate(model)

    def set_base_thickness(self, thickness: Optional[float]) -> None:
        """
        Change the plate thickness.

        ``None`` restores the configured default (0 when the base is disabled);
        zero, a negative value or a non-finite value removes the plate.
        """
        if thickness is None:
            thickness = self.base_config.thickness if self.base_config.enabled else 0.0
        self.base_thickness = float(thickness)

        if self.model is not None:
            self.model = self._with_plate(self.model)

    def _with_plate(self, model: SceneComposite) -> SceneComposite:
        plate = self.plate_builder.build(model.terrain_bounds(), self.base_thickness)
        if plate is None:
            return replace(model, plate=None, plate_transform=None)
        return replace(model, plate=plate[0], plate_transform=plate[1])

    def parts(self) -> List[Part]:
        if self.model is None:
            raise ExportError("No terrain loaded")
        return self.model.parts()

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        if self.model is None:
            raise ValueError("No terrain loaded")
        return self.model.bounds()

    def export_bytes(self) -> bytes:
        """ASCII STL of the terrain merged with its base plate"""
        return export_stl(self.parts(), self.export_config.solid_name)

    def export(self, output_path: Union[str, Path]) -> Path:
        return write_stl(self.parts(), output_path, self.export_config.solid_name)

    def run(self,
            source: GridSource,
            output_dir: Optional[Union[str, Path]] = None) -> Dict:
        """Run the complete grid-to-STL pipeline and write its outputs"""

        visualization_config = self.visualization_config

        if output_dir is None:
            output_dir = Path.cwd() / 'terrain_stl_output'
        else:
            output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        print("=" * 60)
        print("Running Elevation Grid to STL Pipeline")
        print("=" * 60)
        print(f"Output directory: {output_dir}")

        # Step 1: Load and resolve the grid
        print("\n[1/4] Loading elevation grid...")
        model = self.load(source)
        n_lat, n_lon = model.grid.shape
        print(f"  ✓ Grid: {n_lat} lat x {n_lon} lon")
        print(f"  ✓ Terrain mesh: {model.terrain.n_points} vertices, "
              f"{model.terrain.n_faces} triangles")
        if model.plate is not None:
            print(f"  ✓ Base plate: thickness {self.base_thickness}")
        else:
            print("  Base plate disabled")

        # Step 2: Export STL
        print("\n[2/4] Writing STL...")
        stl_path = self.export(output_dir / self.export_config.stl_filename)
        print(f"  ✓ STL saved to: {stl_path}")

        vtk_path = None
        if self.export_config.save_vtk:
            vtk_path = output_dir / (Path(self.export_config.stl_filename).stem + '.vtk')
            merge_parts(self.parts()).to_polydata().save(str(vtk_path))
            print(f"  ✓ VTK mesh saved to: {vtk_path}")

        # Step 3: Visualizations
        plot_path = None
        if visualization_config.create_plots:
            print("\n[3/4] Creating visualization plots...")
            from .visualizer import TerrainVisualizer
            plot_path = TerrainVisualizer(visualization_config).create_overview_plots(
                model, output_dir
            )
            print("  ✓ Visualization plots created")
        else:
            print("\n[3/4] Skipping visualization plots")

        # Step 4: Metadata
        metadata_path = None
        if self.export_config.save_metadata:
            print("\n[4/4] Saving pipeline metadata...")
            metadata_path = output_dir / 'pipeline_metadata.json'
            write_metadata(
                metadata_path,
                source=source,
                pipeline=self,
                model=model,
                stl_path=stl_path,
                vtk_path=vtk_path,
                plot_path=plot_path,
                output_dir=output_dir,
            )
            print(f"  ✓ Metadata saved to: {metadata_path}")
        else:
            print("\n[4/4] Skipping metadata")

        print("\n" + "=" * 60)
        print("Pipeline completed successfully!")
        print("=" * 60)

        return {
            'output_dir': str(output_dir),
            'stl_path': str(stl_path),
            'vtk_path': str(vtk_path) if vtk_path else None,
            'plot_path': str(plot_path) if plot_path else None,
            'metadata_path': str(metadata_path) if metadata_path else None,
            'has_base_plate': model.plate is not None,
        }

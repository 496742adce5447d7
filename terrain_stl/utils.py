import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import numpy as np


def get_array_stats(data: np.ndarray) -> dict:
    """Helper to extract statistics from numpy array"""
    data = np.asarray(data, dtype=np.float64)
    finite = data[np.isfinite(data)]
    if finite.size == 0:
        return {"shape": list(data.shape), "min": None, "max": None,
                "mean": None, "std": None, "nodata": int(data.size)}
    return {
        "shape": list(data.shape),
        "min": float(finite.min()),
        "max": float(finite.max()),
        "mean": float(finite.mean()),
        "std": float(finite.std()),
        "nodata": int(data.size - finite.size)
    }


def describe_source(source) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return f"<in-memory {type(source).__name__}>"


def write_metadata(metadata_path, **kwargs):
    """Save pipeline metadata to JSON file"""

    pipeline = kwargs['pipeline']
    model = kwargs['model']
    grid = model.grid
    world_min, world_max = model.bounds()

    metadata = {
        "pipeline_info": {
            "timestamp": datetime.now().isoformat(),
            "pipeline_class": pipeline.__class__.__name__
        },

        "input": {
            "source": describe_source(kwargs['source'])
        },

        "output_files": {
            "output_directory": str(kwargs['output_dir']),
            "stl": str(kwargs['stl_path']),
            "vtk_mesh": str(kwargs['vtk_path']) if kwargs.get('vtk_path') else None,
            "overview_plot": str(kwargs['plot_path']) if kwargs.get('plot_path') else None,
            "metadata_file": str(metadata_path)
        },

        "configurations": {
            "source": asdict(pipeline.source_config),
            "mesh": asdict(pipeline.mesh_config),
            "scale": asdict(pipeline.scale_config),
            "base": asdict(pipeline.base_config),
            "export": asdict(pipeline.export_config),
            "visualization": asdict(pipeline.visualization_config)
        },

        "processing_results": {
            "grid": {
                "n_lat": int(grid.lat.size),
                "n_lon": int(grid.lon.size),
                "lat_range": [float(grid.lat.min()), float(grid.lat.max())],
                "lon_range": [float(grid.lon.min()), float(grid.lon.max())]
            },

            "elevation_statistics": get_array_stats(grid.elevation),

            "mesh_statistics": {
                "terrain_vertices": model.terrain.n_points,
                "terrain_triangles": model.terrain.n_faces,
                "base_thickness": pipeline.base_thickness if model.plate is not None else None,
                "bounds": [world_min.tolist(), world_max.tolist()]
            }
        }
    }

    # Save to file
    with open(metadata_path, 'w') as f:
        json.dump(metadata, f, indent=2, default=str)

"""Static overview plots of the elevation grid and the terrain model"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional

from .config import VisualizationConfig


class TerrainVisualizer:
    """Handle visualization of input and output data"""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def create_overview_plots(self, model, output_dir: Path) -> Optional[Path]:
        """Plot the source grid next to the normalized terrain heights"""

        if not self.config.create_plots:
            return None

        print("Creating terrain overview...")

        grid = model.grid
        n_lat, n_lon = grid.shape

        fig, axes = plt.subplots(1, 2, figsize=(14, 6))
        fig.suptitle('Elevation Grid Overview', fontsize=16)

        # 1. Source elevation on lat/lon axes
        ax = axes[0]
        extent = [grid.lon[0], grid.lon[-1], grid.lat[0], grid.lat[-1]]
        im1 = ax.imshow(
            np.ma.masked_invalid(grid.elevation),
            cmap=self.config.cmap,
            origin='lower',
            extent=extent,
            aspect='auto'
        )
        ax.set_title(f'Source Elevation ({n_lat} x {n_lon})')
        ax.set_xlabel('Longitude')
        ax.set_ylabel('Latitude')
        plt.colorbar(im1, ax=ax, label='Elevation')

        # 2. Terrain heights in world space, including scale
        ax = axes[1]
        points = model.terrain_transform.apply(model.terrain.points)

        step = max(1, len(points) // 20000)
        sample = points[::step]
        scatter = ax.scatter(sample[:, 0], sample[:, 1], c=sample[:, 2],
                             cmap=self.config.cmap, s=2)
        ax.set_title('Terrain Mesh Heights (Downsampled)')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_aspect('equal')
        plt.colorbar(scatter, ax=ax, label='Z')

        plt.tight_layout()

        output_path = Path(output_dir) / f'terrain_overview.{self.config.plot_format}'
        plt.savefig(output_path, dpi=self.config.dpi, bbox_inches='tight')
        plt.close(fig)

        print(f"Overview saved to: {output_path}")
        return output_path

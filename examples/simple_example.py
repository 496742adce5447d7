"""Simple example converting a GEBCO-style JSON tile to STL.

This example shows the minimal code needed to turn an elevation grid into a
printable model with a base plate.
"""
import terrain_stl as ts


def main():
    """Generate a printable STL from an elevation tile."""

    # Define paths (update these for your system)
    grid_path = "data/gebco_tile.json"
    output_dir = "./stl_output"

    # Exaggerate the relief and put a thin plate underneath
    pipeline = ts.TerrainStlPipeline(
        scale_config=ts.ScaleConfig(x=1.0, y=1.0, z=3.0),
        base_config=ts.BaseConfig(thickness=0.02),
        visualization_config=ts.VisualizationConfig(create_plots=True)
    )

    # Run the pipeline
    results = pipeline.run(grid_path, output_dir=output_dir)

    print(f"\n✓ STL generated successfully!")
    print(f"  STL file: {results['stl_path']}")

    # Live edits rebuild the plate under the rescaled terrain
    pipeline.set_scale(z=5.0)
    pipeline.set_base_thickness(0.05)
    pipeline.export(f"{output_dir}/terrain_tall.stl")


if __name__ == "__main__":
    main()

import argparse

import terrain_stl as ts


def main():
    parser = argparse.ArgumentParser(description="Convert a gridded elevation file to STL")
    parser.add_argument("source", help="Elevation grid (.json or .nc)")
    parser.add_argument("-c", "--config", default="terrain_config.yaml", help="YAML configuration")
    parser.add_argument("-o", "--output-dir", default=None, help="Output directory")
    args = parser.parse_args()

    # Load all configurations from YAML file
    configs = ts.load_config(args.config)

    # Run pipeline with loaded configs
    pipeline = ts.TerrainStlPipeline(**configs)  # Unpacks all config objects
    results = pipeline.run(args.source, output_dir=args.output_dir)

    print(f"STL written to {results['stl_path']}")


if __name__ == "__main__":
    main()

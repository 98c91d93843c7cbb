"""
Command line terrain mesh generator.

Usage:
    python -m heightmesh.generate --output terrain.obj --seed 7
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import NOISE_CHOICES, TERRAIN_PARAMETERS, load_parameters
from .errors import MeshGenerationError
from .logging_config import setup_logging
from .pipeline import TerrainPipeline


def build_parser() -> argparse.ArgumentParser:
    defaults = TERRAIN_PARAMETERS.get_defaults()

    parser = argparse.ArgumentParser(description="Generate a noise-displaced terrain mesh as OBJ")
    parser.add_argument("--output", type=str, default="poly_mesh.obj", help="Output OBJ file")
    parser.add_argument("--config", type=str, help="JSON file with parameter overrides")
    parser.add_argument("--heightmap-png", type=str, help="Also save the noise map as a grayscale PNG")

    # Mesh shape
    parser.add_argument("--subdivision-width", type=int,
                        help=f"Quad cells along X (default {defaults['subdivision_width']})")
    parser.add_argument("--subdivision-height", type=int,
                        help=f"Quad cells along Z (default {defaults['subdivision_height']})")
    parser.add_argument("--width", type=float, help=f"Extent along X (default {defaults['width']})")
    parser.add_argument("--height", type=float, help=f"Extent along Z (default {defaults['height']})")

    # Noise shape
    parser.add_argument("--image-width", type=int,
                        help=f"Noise map columns (default {defaults['image_width']})")
    parser.add_argument("--image-height", type=int,
                        help=f"Noise map rows (default {defaults['image_height']})")
    parser.add_argument("--divider", type=float,
                        help=f"Noise spatial scale (default {defaults['divider']})")
    parser.add_argument("--num-layers", type=int,
                        help=f"Number of octaves (default {defaults['num_layers']})")
    parser.add_argument("--seed", type=int, help=f"Noise seed (default {defaults['seed']})")
    parser.add_argument("--noise", type=str, choices=NOISE_CHOICES, help="Noise source")

    parser.add_argument("--normals", type=str, default="face", choices=["face", "smooth"],
                        help="'face' writes per-face normals, 'smooth' averages adjacent faces")
    parser.add_argument("--progress", action="store_true", help="Show octave progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for terrain mesh generation."""

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        # Flags override the config file, which overrides defaults
        parameters = load_parameters(args.config) if args.config else {}
        for name in TERRAIN_PARAMETERS.get_param_names() + ["noise"]:
            value = getattr(args, name)
            if value is not None:
                parameters[name] = value

        pipeline = TerrainPipeline(parameters, normals_mode=args.normals, show_progress=args.progress)
        mesh = pipeline.run(args.output, heightmap_png=args.heightmap_png)
    except MeshGenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stats = mesh.elevation_stats()
    print("\nMesh generated successfully!")
    print(f"Vertices: {mesh.num_vertices} Faces: {mesh.num_faces}")
    print(f"Elevation range: {stats['min']:.3f} to {stats['max']:.3f}")
    print(f"Saved to: {args.output}")
    if args.heightmap_png:
        print(f"Noise map preview: {args.heightmap_png}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

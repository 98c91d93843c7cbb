"""
Heightfield terrain mesh generation.

This package provides:
- A quad grid mesh centered at the origin in the X-Z plane
- Fractal noise maps built from seedable coherent noise
- Noise displacement and geometric normal computation
- Wavefront OBJ export
"""

from .engine import GridMesh
from .procgen import NoiseSource, OpenSimplexNoise, ValueNoise, generate_noise_map
from .export import export_obj, write_obj
from .pipeline import TerrainPipeline
from .errors import (
    MeshGenerationError,
    InvalidArgumentError,
    DegenerateGeometryError,
    DegenerateNoiseError,
    ExportError,
)

__version__ = "0.1.0"

__all__ = [
    "GridMesh",
    "NoiseSource",
    "OpenSimplexNoise",
    "ValueNoise",
    "generate_noise_map",
    "export_obj",
    "write_obj",
    "TerrainPipeline",
    "MeshGenerationError",
    "InvalidArgumentError",
    "DegenerateGeometryError",
    "DegenerateNoiseError",
    "ExportError",
]

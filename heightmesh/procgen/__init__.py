"""
Procedural noise for terrain displacement.

This module provides:
- Seedable coherent noise sources (OpenSimplex, value noise)
- Fractal noise map synthesis with max-normalization
"""

from .sources import NoiseSource, OpenSimplexNoise, ValueNoise, NOISE_SOURCES, create_noise_source
from .fractal import generate_noise_map, accumulate_octaves

__all__ = [
    "NoiseSource",
    "OpenSimplexNoise",
    "ValueNoise",
    "NOISE_SOURCES",
    "create_noise_source",
    "generate_noise_map",
    "accumulate_octaves",
]

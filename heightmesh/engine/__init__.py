"""
Mesh engine for heightfield terrain.

Builds the quad grid, displaces it from a noise map and
recomputes vertex normals.
"""

from .grid_mesh import GridMesh, UP

__all__ = ["GridMesh", "UP"]

"""
Terrain generation pipeline.

Wires the stages together in order:
NoiseSource -> noise map -> displacement -> normals -> OBJ export
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from .config import resolve_parameters
from .engine import GridMesh
from .export import export_obj, save_noise_map_image
from .procgen import NoiseSource, create_noise_source, generate_noise_map

logger = logging.getLogger(__name__)


class TerrainPipeline:
    """
    Generates a displaced terrain mesh from a parameter set.

    Parameters are validated once at construction, so every later
    stage works on a complete, in-range configuration.
    """

    def __init__(
        self,
        parameters: Optional[Dict[str, Any]] = None,
        normals_mode: str = "face",
        show_progress: bool = False
    ):
        self.parameters = resolve_parameters(parameters)
        self.normals_mode = normals_mode
        self.show_progress = show_progress

    def build_source(self) -> NoiseSource:
        return create_noise_source(self.parameters["noise"], self.parameters["seed"])

    def build_noise_map(self, source: Optional[NoiseSource] = None) -> np.ndarray:
        p = self.parameters
        if source is None:
            source = self.build_source()
        return generate_noise_map(
            source,
            p["image_width"], p["image_height"],
            p["divider"], p["num_layers"],
            show_progress=self.show_progress
        )

    def build_mesh(self, noise_map: Optional[np.ndarray] = None) -> GridMesh:
        """Construct, displace and shade the mesh."""

        p = self.parameters
        if noise_map is None:
            noise_map = self.build_noise_map()

        mesh = GridMesh(p["subdivision_width"], p["subdivision_height"], p["height"], p["width"])
        mesh.displace_with_noise_map(noise_map, p["image_width"], p["image_height"])
        mesh.calculate_normals(mode=self.normals_mode)
        return mesh

    def run(self, output_path, heightmap_png=None) -> GridMesh:
        """
        Run the whole pipeline and write the results.

        Args:
            output_path: Destination OBJ file
            heightmap_png: Optional destination for a noise map preview

        Returns:
            The exported mesh
        """

        p = self.parameters
        logger.info(
            "Generating %dx%d mesh with %s noise (seed=%d)",
            p["subdivision_width"], p["subdivision_height"], p["noise"], p["seed"]
        )

        noise_map = self.build_noise_map()
        if heightmap_png is not None:
            save_noise_map_image(noise_map, p["image_width"], p["image_height"], Path(heightmap_png))

        mesh = self.build_mesh(noise_map)
        export_obj(mesh, Path(output_path))
        return mesh

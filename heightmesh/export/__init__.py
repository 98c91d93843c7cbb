"""
Export targets for generated terrain.

- obj: Wavefront OBJ mesh files
- image: Grayscale PNG previews of noise maps
"""

from .obj import write_obj, export_obj
from .image import noise_map_to_image, save_noise_map_image

__all__ = ["write_obj", "export_obj", "noise_map_to_image", "save_noise_map_image"]

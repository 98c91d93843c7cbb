"""
Grayscale preview of a noise map.
"""

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from ..errors import ExportError, InvalidArgumentError

logger = logging.getLogger(__name__)


def noise_map_to_image(noise_map: np.ndarray, image_width: int, image_height: int) -> Image.Image:
    """Convert a flat [0, 1] noise map to an 8-bit grayscale image."""

    noise_map = np.asarray(noise_map, dtype=np.float64).ravel()
    if noise_map.size != image_width * image_height:
        raise InvalidArgumentError(
            "noise_map_to_image", "noise_map", f"<{noise_map.size} values>",
            f"expected {image_width * image_height} values for {image_width}x{image_height}"
        )

    hm = noise_map.reshape(image_height, image_width)
    hm_8 = (np.clip(hm, 0.0, 1.0) * 255).round().astype(np.uint8)
    # 2-D uint8 arrays map to mode "L"
    return Image.fromarray(hm_8)


def save_noise_map_image(noise_map: np.ndarray, image_width: int, image_height: int, path) -> Path:
    """Save a noise map as a grayscale PNG."""

    path = Path(path)
    image = noise_map_to_image(noise_map, image_width, image_height)
    try:
        image.save(path, format="PNG")
    except OSError as e:
        raise ExportError(path, f"save_noise_map_image failed ({e.strerror or e})") from e

    logger.info("Saved noise map preview %dx%d to %s", image_width, image_height, path)
    return path

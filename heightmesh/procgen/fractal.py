"""
Fractal noise map synthesis.

Sums octaves of a NoiseSource at doubling frequency and halving
amplitude, then normalizes the whole map by its global maximum.
"""

import logging
import math

import numpy as np
from tqdm import tqdm

from ..errors import DegenerateNoiseError, InvalidArgumentError
from .sources import NoiseSource

logger = logging.getLogger(__name__)

LACUNARITY = 2.0
PERSISTENCE = 0.5


def _check_positive_int(operation: str, name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidArgumentError(operation, name, value, "must be a positive integer")
    return int(value)


def accumulate_octaves(
    source: NoiseSource,
    image_width: int,
    image_height: int,
    divider: float,
    num_layers: int,
    show_progress: bool = False
) -> np.ndarray:
    """
    Accumulate the raw (unnormalized) fractal sum for every pixel.

    Args:
        source: Noise source sampled on the z = 0 plane
        image_width: Number of pixel columns
        image_height: Number of pixel rows
        divider: Spatial scale; pixel centers are divided by it
        num_layers: Number of octaves
        show_progress: Display a tqdm bar over octaves

    Returns:
        Array of shape (image_height, image_width) with non-negative values
    """

    image_width = _check_positive_int("generate_noise_map", "image_width", image_width)
    image_height = _check_positive_int("generate_noise_map", "image_height", image_height)
    num_layers = _check_positive_int("generate_noise_map", "num_layers", num_layers)
    if isinstance(divider, bool) or not isinstance(divider, (int, float, np.number)) \
            or not math.isfinite(divider) or divider <= 0:
        raise InvalidArgumentError("generate_noise_map", "divider", divider, "must be a positive finite number")

    # Pixel-center sampling
    xs = (np.arange(image_width, dtype=np.float64) + 0.5) / divider
    ys = (np.arange(image_height, dtype=np.float64) + 0.5) / divider

    fractal = np.zeros((image_height, image_width), dtype=np.float64)
    amplitude = 1.0
    frequency = 1.0 / divider

    for layer in tqdm(range(num_layers), desc="Octaves", disable=not show_progress):
        noise = source.sample_grid(xs, ys, 0.0)
        # (1 + noise) shifts [-1, 1] to [0, 2] so every term is non-negative
        fractal += 0.5 * amplitude * (1.0 + noise)
        logger.debug("Octave %d: amplitude=%.6f frequency=%.6f", layer, amplitude, frequency)

        xs = xs * LACUNARITY
        ys = ys * LACUNARITY
        amplitude *= PERSISTENCE
        frequency *= LACUNARITY

    return fractal


def generate_noise_map(
    source: NoiseSource,
    image_width: int,
    image_height: int,
    divider: float,
    num_layers: int,
    show_progress: bool = False
) -> np.ndarray:
    """
    Generate a normalized fractal noise map.

    Args:
        source: Noise source returning values in [-1, 1]
        image_width: Number of pixel columns
        image_height: Number of pixel rows
        divider: Spatial scale (larger means smoother terrain)
        num_layers: Number of octaves
        show_progress: Display a tqdm bar over octaves

    Returns:
        Flat array of image_width * image_height values in [0, 1],
        row-major (index = y * image_width + x), whose maximum is exactly 1.0
    """

    fractal = accumulate_octaves(source, image_width, image_height, divider, num_layers, show_progress)

    # Second pass: the maximum is only known once every pixel is summed
    max_value = float(fractal.max())
    if max_value <= 0.0:
        raise DegenerateNoiseError(
            "generate_noise_map: fractal sum is zero everywhere, cannot normalize"
        )

    noise_map = (fractal / max_value).ravel()
    logger.info(
        "Noise map %dx%d, %d octaves: min=%.4f max=%.4f",
        image_width, image_height, num_layers, float(noise_map.min()), float(noise_map.max())
    )
    return noise_map

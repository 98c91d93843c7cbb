"""
Coherent noise sources.

Every source is a deterministic, seedable function mapping a 3-D
coordinate to a value in [-1, 1]:
- OpenSimplexNoise: gradient noise from the opensimplex package
- ValueNoise: hash-lattice value noise computed with numpy
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np
import opensimplex

from ..errors import InvalidArgumentError


def _lerp(a, b, t):
    return a + t * (b - a)


class NoiseSource(ABC):
    """Base class for all noise sources."""

    @abstractmethod
    def seed(self, value: int) -> None:
        """Reseed the source; identical seeds give identical samples."""
        pass

    @abstractmethod
    def sample(self, x: float, y: float, z: float) -> float:
        """Sample the noise at a single coordinate."""
        pass

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, z: float = 0.0) -> np.ndarray:
        """
        Sample a rectilinear grid of coordinates on the plane at height z.

        Args:
            xs: 1-D array of X coordinates (columns)
            ys: 1-D array of Y coordinates (rows)
            z: Z coordinate shared by every sample

        Returns:
            Array of shape (len(ys), len(xs))
        """

        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        values = np.empty((ys.size, xs.size), dtype=np.float64)
        for row, y in enumerate(ys):
            for col, x in enumerate(xs):
                values[row, col] = self.sample(float(x), float(y), z)
        return values

    def __call__(self, x: float, y: float, z: float = 0.0) -> float:
        return self.sample(x, y, z)


class OpenSimplexNoise(NoiseSource):
    """
    OpenSimplex gradient noise.

    The seed is reduced to 32 bits before it reaches the generator,
    and samples are clipped so the [-1, 1] contract holds exactly.
    """

    def __init__(self, seed: int = 0):
        self.seed(seed)

    def seed(self, value: int) -> None:
        self._seed = int(value) & 0xFFFFFFFF
        self._generator = opensimplex.OpenSimplex(self._seed)

    def sample(self, x: float, y: float, z: float) -> float:
        value = self._generator.noise3(x, y, z)
        return float(min(1.0, max(-1.0, value)))

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, z: float = 0.0) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        # noise3array returns shape (len(z), len(y), len(x))
        values = self._generator.noise3array(xs, ys, np.array([z], dtype=np.float64))
        return np.clip(values[0], -1.0, 1.0)


class ValueNoise(NoiseSource):
    """
    Lattice value noise.

    Random values in [-1, 1] are hashed at integer lattice points and
    blended with smoothstep-weighted trilinear interpolation, so every
    sample stays within the range of its eight corners.
    """

    def __init__(self, seed: int = 0):
        self.seed(seed)

    def seed(self, value: int) -> None:
        self._seed = int(value) & 0xFFFFFFFF
        self._seed_term = (self._seed * 2246822519) & 0xFFFFFFFF

    def sample(self, x: float, y: float, z: float) -> float:
        value = self._evaluate(
            np.array([x], dtype=np.float64),
            np.array([y], dtype=np.float64),
            np.array([z], dtype=np.float64)
        )
        return float(value[0])

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, z: float = 0.0) -> np.ndarray:
        X, Y = np.meshgrid(
            np.asarray(xs, dtype=np.float64),
            np.asarray(ys, dtype=np.float64)
        )
        Z = np.full_like(X, z)
        return self._evaluate(X, Y, Z)

    def _lattice(self, ix: np.ndarray, iy: np.ndarray, iz: np.ndarray) -> np.ndarray:
        """Hash integer lattice coordinates to values in [-1, 1]."""

        # uint32 arithmetic wraps, which is the intended mixing
        h = (
            ix.astype(np.uint32) * np.uint32(374761393)
            + iy.astype(np.uint32) * np.uint32(668265263)
            + iz.astype(np.uint32) * np.uint32(3266489917)
            + np.uint32(self._seed_term)
        )
        h ^= h >> np.uint32(13)
        h *= np.uint32(1274126177)
        h ^= h >> np.uint32(16)
        return (h.astype(np.float64) / 4294967295.0) * 2.0 - 1.0

    def _evaluate(self, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        # Grid coordinates
        x0f = np.floor(x)
        y0f = np.floor(y)
        z0f = np.floor(z)
        x0 = x0f.astype(np.int64)
        y0 = y0f.astype(np.int64)
        z0 = z0f.astype(np.int64)
        x1 = x0 + 1
        y1 = y0 + 1
        z1 = z0 + 1

        # Smooth interpolation weights (3t^2 - 2t^3)
        fx = x - x0f
        fy = y - y0f
        fz = z - z0f
        u = fx * fx * (3 - 2 * fx)
        v = fy * fy * (3 - 2 * fy)
        w = fz * fz * (3 - 2 * fz)

        c000 = self._lattice(x0, y0, z0)
        c100 = self._lattice(x1, y0, z0)
        c010 = self._lattice(x0, y1, z0)
        c110 = self._lattice(x1, y1, z0)
        c001 = self._lattice(x0, y0, z1)
        c101 = self._lattice(x1, y0, z1)
        c011 = self._lattice(x0, y1, z1)
        c111 = self._lattice(x1, y1, z1)

        near = _lerp(_lerp(c000, c100, u), _lerp(c010, c110, u), v)
        far = _lerp(_lerp(c001, c101, u), _lerp(c011, c111, u), v)
        return np.clip(_lerp(near, far, w), -1.0, 1.0)


NOISE_SOURCES: Dict[str, Type[NoiseSource]] = {
    "opensimplex": OpenSimplexNoise,
    "value": ValueNoise,
}


def create_noise_source(name: str, seed: int) -> NoiseSource:
    """Instantiate a registered noise source by name."""

    try:
        source_cls = NOISE_SOURCES[name]
    except KeyError:
        raise InvalidArgumentError(
            "create_noise_source", "noise", name, f"expected one of {sorted(NOISE_SOURCES)}"
        ) from None
    return source_cls(seed)

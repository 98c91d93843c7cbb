"""
Quad grid mesh with noise displacement and normal computation.
"""

import logging
import math
from typing import Any, Dict

import numpy as np

from ..errors import DegenerateGeometryError, InvalidArgumentError
from ..export.obj import export_obj

logger = logging.getLogger(__name__)

UP = np.array([0.0, 1.0, 0.0])
UP.setflags(write=False)

# Relative to the product of the edge lengths, i.e. a bound on sin(angle),
# so the test does not depend on cell size
_DEGENERATE_EPSILON = 1e-12


class GridMesh:
    """
    Flat rectangular grid of quads centered at the origin in the X-Z plane.

    Vertices are stored row-major (index = row * vertices_wide + col) and
    every face references its corners as top-left, top-right,
    bottom-right, bottom-left, which winds counter-clockwise seen from +Y.
    """

    def __init__(
        self,
        subdivision_width: int,
        subdivision_height: int,
        height: float,
        width: float
    ):
        """
        Build the flat base mesh.

        Args:
            subdivision_width: Quad cells along X
            subdivision_height: Quad cells along Z
            height: World-space extent along Z
            width: World-space extent along X
        """

        self.subdivision_width = _check_subdivisions("subdivision_width", subdivision_width)
        self.subdivision_height = _check_subdivisions("subdivision_height", subdivision_height)
        self.height = _check_extent("height", height)
        self.width = _check_extent("width", width)

        self.vertices_wide = self.subdivision_width + 1
        self.vertices_high = self.subdivision_height + 1

        num_vertices = self.vertices_wide * self.vertices_high
        num_faces = self.subdivision_width * self.subdivision_height
        logger.info("Vertices: %d Faces: %d", num_vertices, num_faces)

        # Base flat mesh
        s = np.arange(self.vertices_wide, dtype=np.float64) / self.subdivision_width
        t = np.arange(self.vertices_high, dtype=np.float64) / self.subdivision_height
        S, T = np.meshgrid(s, t)

        self.vertices = np.zeros((num_vertices, 3), dtype=np.float64)
        self.vertices[:, 0] = (self.width * (S - 0.5)).ravel()
        self.vertices[:, 2] = (self.height * (T - 0.5)).ravel()

        self.uv = np.column_stack([S.ravel(), T.ravel()])
        self.normals = np.tile(UP, (num_vertices, 1))

        # Rows bound the outer loop, columns the inner one
        rows, cols = np.meshgrid(
            np.arange(self.subdivision_height, dtype=np.int64),
            np.arange(self.subdivision_width, dtype=np.int64),
            indexing='ij'
        )
        top_left = (rows * self.vertices_wide + cols).ravel()
        self.face_vertex_counts = np.full(num_faces, 4, dtype=np.int64)
        self.face_vertex_indices = np.column_stack([
            top_left,
            top_left + 1,
            top_left + self.vertices_wide + 1,
            top_left + self.vertices_wide,
        ]).ravel()

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_faces(self) -> int:
        return len(self.face_vertex_counts)

    def faces(self) -> np.ndarray:
        """Face connectivity as an (num_faces, 4) view."""
        return self.face_vertex_indices.reshape(-1, 4)

    def displace_with_noise_map(
        self,
        noise_map: np.ndarray,
        image_width: int,
        image_height: int
    ) -> None:
        """
        Set each vertex elevation from the noise map pixel under its UV.

        Nearest-neighbour lookup: u and v are scaled to pixel space,
        clamped to the last column/row and truncated. Noise values in
        [0, 1] become elevations in [-1, 1]. Only Y is modified.

        Args:
            noise_map: Flat row-major array of image_width * image_height values
            image_width: Noise map columns
            image_height: Noise map rows
        """

        for name, value in (("image_width", image_width), ("image_height", image_height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise InvalidArgumentError("displace_with_noise_map", name, value, "must be a positive integer")

        noise_map = np.asarray(noise_map, dtype=np.float64).ravel()
        if noise_map.size != image_width * image_height:
            raise InvalidArgumentError(
                "displace_with_noise_map", "noise_map", f"<{noise_map.size} values>",
                f"expected {image_width * image_height} values for {image_width}x{image_height}"
            )

        # Axes are truncated separately, not as one combined float index
        x = np.minimum(self.uv[:, 0] * image_width, image_width - 1).astype(np.int64)
        y = np.minimum(self.uv[:, 1] * image_height, image_height - 1).astype(np.int64)
        self.vertices[:, 1] = 2.0 * noise_map[y * image_width + x] - 1.0

    def calculate_normals(self, mode: str = "face", fallback_to_up: bool = False) -> None:
        """
        Recompute vertex normals from the current geometry.

        Args:
            mode: "face" writes each face's geometric normal to the face's
                first vertex only, later faces overwriting earlier ones.
                "smooth" averages the normals of every face touching a vertex.
            fallback_to_up: Write the up vector for zero-length normals
                instead of raising DegenerateGeometryError
        """

        faces = self.faces()
        a = self.vertices[faces[:, 0]]
        b = self.vertices[faces[:, 1]]
        c = self.vertices[faces[:, 2]]

        tangent = b - a
        bitangent = c - a
        face_normals = np.cross(bitangent, tangent)
        edge_products = np.linalg.norm(tangent, axis=1) * np.linalg.norm(bitangent, axis=1)

        if mode == "face":
            self._assign_face_normals(faces[:, 0], face_normals, edge_products, fallback_to_up)
        elif mode == "smooth":
            self._assign_smooth_normals(faces, face_normals, edge_products, fallback_to_up)
        else:
            raise InvalidArgumentError("calculate_normals", "mode", mode, "expected 'face' or 'smooth'")

    def _assign_face_normals(
        self,
        first_vertices: np.ndarray,
        face_normals: np.ndarray,
        edge_products: np.ndarray,
        fallback_to_up: bool
    ) -> None:
        lengths = np.linalg.norm(face_normals, axis=1)
        # Negated so zero-length edges and NaN count as degenerate
        degenerate = ~(lengths > _DEGENERATE_EPSILON * edge_products)

        if np.any(degenerate):
            face_index = int(np.argmax(degenerate))
            if not fallback_to_up:
                raise DegenerateGeometryError(
                    f"calculate_normals: face {face_index} has zero area",
                    face_index=face_index
                )
            logger.warning("%d degenerate faces, using up vector", int(degenerate.sum()))

        unit = np.empty_like(face_normals)
        unit[~degenerate] = face_normals[~degenerate] / lengths[~degenerate, None]
        unit[degenerate] = UP

        # Last writer wins when faces share a first vertex
        reversed_first = first_vertices[::-1]
        _, first_seen = np.unique(reversed_first, return_index=True)
        winners = len(first_vertices) - 1 - first_seen
        self.normals[first_vertices[winners]] = unit[winners]

    def _assign_smooth_normals(
        self,
        faces: np.ndarray,
        face_normals: np.ndarray,
        edge_products: np.ndarray,
        fallback_to_up: bool
    ) -> None:
        # Unnormalized cross products weight each face by its area
        accumulated = np.zeros_like(self.normals)
        scale = np.zeros(len(self.normals))
        for corner in range(faces.shape[1]):
            np.add.at(accumulated, faces[:, corner], face_normals)
            np.add.at(scale, faces[:, corner], edge_products)

        lengths = np.linalg.norm(accumulated, axis=1)
        degenerate = ~(lengths > _DEGENERATE_EPSILON * scale)

        if np.any(degenerate):
            vertex_index = int(np.argmax(degenerate))
            if not fallback_to_up:
                raise DegenerateGeometryError(
                    f"calculate_normals: vertex {vertex_index} has no non-degenerate adjacent face",
                    vertex_index=vertex_index
                )
            logger.warning("%d degenerate vertices, using up vector", int(degenerate.sum()))

        self.normals[~degenerate] = accumulated[~degenerate] / lengths[~degenerate, None]
        self.normals[degenerate] = UP

    def elevation_stats(self) -> Dict[str, float]:
        """Elevation (Y) statistics of the current vertices."""

        elevations = self.vertices[:, 1]
        return {
            "min": float(np.min(elevations)),
            "max": float(np.max(elevations)),
            "mean": float(np.mean(elevations)),
            "std": float(np.std(elevations)),
            "range": float(np.max(elevations) - np.min(elevations)),
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "subdivisions": (self.subdivision_width, self.subdivision_height),
            "extent": (self.width, self.height),
            "num_vertices": self.num_vertices,
            "num_faces": self.num_faces,
            "elevation": self.elevation_stats(),
        }

    def export_to_obj(self, filename) -> None:
        """Write the mesh as a Wavefront OBJ file."""
        export_obj(self, filename)


def _check_subdivisions(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError("GridMesh", name, value, "must be an integer")
    if value <= 0:
        raise InvalidArgumentError("GridMesh", name, value, "must be at least 1")
    return int(value)


def _check_extent(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise InvalidArgumentError("GridMesh", name, value, "must be a number")
    if not math.isfinite(value) or value <= 0:
        raise InvalidArgumentError("GridMesh", name, value, "must be positive and finite")
    return float(value)

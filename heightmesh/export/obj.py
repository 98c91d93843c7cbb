"""
Wavefront OBJ writer.

Positions, texture coordinates and normals share one index per vertex,
so every face corner is written as i/i/i with 1-based indices.
"""

import logging
from pathlib import Path
from typing import TextIO

from ..errors import ExportError

logger = logging.getLogger(__name__)


def write_obj(mesh, fp: TextIO) -> None:
    """
    Serialize a GridMesh to an open text stream.

    Args:
        mesh: GridMesh to serialize
        fp: Writable text stream
    """

    for x, y, z in mesh.vertices.tolist():
        fp.write(f"v {x} {y} {z}\n")
    for u, v in mesh.uv.tolist():
        fp.write(f"vt {u} {v}\n")
    for x, y, z in mesh.normals.tolist():
        fp.write(f"vn {x} {y} {z}\n")

    indices = mesh.face_vertex_indices.tolist()
    offset = 0
    for count in mesh.face_vertex_counts.tolist():
        corners = " ".join(f"{i + 1}/{i + 1}/{i + 1}" for i in indices[offset:offset + count])
        fp.write(f"f {corners}\n")
        offset += count


def export_obj(mesh, path) -> Path:
    """
    Write a GridMesh to an OBJ file.

    A failure part-way through leaves a partial file behind.

    Returns:
        Path of the written file
    """

    path = Path(path)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            write_obj(mesh, f)
    except OSError as e:
        raise ExportError(path, f"export_obj failed ({e.strerror or e})") from e

    logger.info("Exported %d vertices, %d faces to %s", mesh.num_vertices, mesh.num_faces, path)
    return path

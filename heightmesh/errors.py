"""
Exception types raised by the mesh generation pipeline.
"""

from typing import Optional


class MeshGenerationError(Exception):
    """Base class for every error raised by heightmesh."""


class InvalidArgumentError(MeshGenerationError, ValueError):
    """A dimension, scale or parameter value was rejected before any work began."""

    def __init__(self, operation: str, parameter: str, value, reason: str):
        self.operation = operation
        self.parameter = parameter
        self.value = value
        super().__init__(f"{operation}: invalid {parameter}={value!r} ({reason})")


class DegenerateGeometryError(MeshGenerationError, ArithmeticError):
    """A zero-length normal was produced by a zero-area face."""

    def __init__(
        self,
        message: str,
        face_index: Optional[int] = None,
        vertex_index: Optional[int] = None
    ):
        self.face_index = face_index
        self.vertex_index = vertex_index
        super().__init__(message)


class DegenerateNoiseError(MeshGenerationError, ArithmeticError):
    """The fractal sum was zero everywhere so it cannot be normalized."""


class ExportError(MeshGenerationError, OSError):
    """Writing an export target failed."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")

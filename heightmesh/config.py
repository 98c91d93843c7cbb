"""
Parameter specification for terrain mesh generation.

This module defines:
- ParameterSpec: Validation and default-filling of numeric parameters
- TERRAIN_PARAMETERS: The mesh shape and noise shape parameters
- load_parameters: Reading parameter overrides from a JSON file
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import InvalidArgumentError


NOISE_CHOICES = ("opensimplex", "value")
DEFAULT_NOISE = "opensimplex"


class ParameterSpec:
    """
    Specification for generation parameters with validation.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Default value if not specified
    """

    def __init__(
        self,
        params: Dict[str, Tuple[float, float, float]],
        integer_params: Iterable[str] = ()
    ):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
            integer_params: Names of parameters that only accept whole numbers
        """
        self.params = params
        self.integer_params = frozenset(integer_params)

    def validate(self, values: Dict[str, Any], operation: str = "parameters") -> None:
        """Raise InvalidArgumentError for the first missing or out-of-range parameter."""

        for param_name in values:
            if param_name not in self.params:
                raise InvalidArgumentError(operation, param_name, values[param_name], "unknown parameter")

        for param_name in self.params:
            if param_name not in values:
                raise InvalidArgumentError(operation, param_name, None, "missing")
            self._coerce(param_name, values[param_name], operation)

    def is_valid(self, values: Dict[str, Any]) -> bool:
        """Check if all required parameters are present and in valid ranges."""

        try:
            self.validate(values)
        except InvalidArgumentError:
            return False
        return True

    def extract_params(self, values: Dict[str, Any], operation: str = "parameters") -> Dict[str, Any]:
        """Fill defaults for absent parameters and validate the rest."""

        for param_name in values:
            if param_name not in self.params:
                raise InvalidArgumentError(operation, param_name, values[param_name], "unknown parameter")

        result = {}
        for param_name, (_, _, default) in self.params.items():
            value = values.get(param_name)
            if value is None:
                value = default
            result[param_name] = self._coerce(param_name, value, operation)

        return result

    def _coerce(self, param_name: str, value: Any, operation: str):
        min_val, max_val, _ = self.params[param_name]

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidArgumentError(operation, param_name, value, "must be a number")
        if not math.isfinite(value):
            raise InvalidArgumentError(operation, param_name, value, "must be finite")

        if param_name in self.integer_params:
            if float(value) != int(value):
                raise InvalidArgumentError(operation, param_name, value, "must be a whole number")
            value = int(value)
        else:
            value = float(value)

        if not (min_val <= value <= max_val):
            raise InvalidArgumentError(
                operation, param_name, value, f"must be within [{min_val}, {max_val}]"
            )
        return value

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())

    def get_param_ranges(self) -> Dict[str, Tuple[float, float]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}

    def get_defaults(self) -> Dict[str, Any]:
        return {name: default for name, (_, _, default) in self.params.items()}


# Defaults reproduce the reference terrain: 128x128 quads over a 10x10 patch
TERRAIN_PARAMETERS = ParameterSpec(
    {
        # Mesh shape
        "subdivision_width": (1, 8192, 128),
        "subdivision_height": (1, 8192, 128),
        "width": (1e-6, 1e6, 10.0),
        "height": (1e-6, 1e6, 10.0),
        # Noise shape
        "image_width": (1, 8192, 128),
        "image_height": (1, 8192, 128),
        "divider": (1e-6, 1e9, 128.0),
        "num_layers": (1, 32, 5),
        "seed": (0, 2**64 - 1, 1564863213),
    },
    integer_params=(
        "subdivision_width", "subdivision_height",
        "image_width", "image_height",
        "num_layers", "seed",
    )
)


def resolve_parameters(
    values: Optional[Dict[str, Any]] = None,
    spec: ParameterSpec = TERRAIN_PARAMETERS
) -> Dict[str, Any]:
    """
    Build a complete, validated parameter set.

    Args:
        values: Partial parameters; missing or None entries take defaults.
            The optional "noise" key selects the noise source.
        spec: Numeric parameter specification

    Returns:
        Dictionary with every numeric parameter plus "noise"
    """

    values = dict(values or {})
    noise = values.pop("noise", None) or DEFAULT_NOISE
    if noise not in NOISE_CHOICES:
        raise InvalidArgumentError("parameters", "noise", noise, f"expected one of {NOISE_CHOICES}")

    result = spec.extract_params(values)
    result["noise"] = noise
    return result


def load_parameters(path) -> Dict[str, Any]:
    """Load a JSON object of parameter overrides."""

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InvalidArgumentError("load_parameters", "path", str(path), f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidArgumentError("load_parameters", "path", str(path), f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidArgumentError("load_parameters", "path", str(path), "expected a JSON object")

    return data

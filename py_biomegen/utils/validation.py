"""
Input validation for the public query and construction surface.

The numeric core (noise, classification, boundary extraction) assumes
finite inputs and never checks; these helpers are applied once at the
boundary instead.
"""

import math
from typing import Tuple

from ..errors import ConfigurationError, InvalidCoordinateError


def require_finite(name: str, value: float) -> float:
    """Return ``value`` as a float, raising ConfigurationError if it is not finite."""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return number


def require_positive(name: str, value: float) -> float:
    """Return ``value`` as a finite float > 0."""
    number = require_finite(name, value)
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return number


def require_non_negative(name: str, value: float) -> float:
    """Return ``value`` as a finite float >= 0."""
    number = require_finite(name, value)
    if number < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value!r}")
    return number


def check_coordinates(x: float, y: float) -> Tuple[float, float]:
    """Validate a world-space query point."""
    try:
        fx, fy = float(x), float(y)
    except (TypeError, ValueError) as e:
        raise InvalidCoordinateError(f"Coordinates must be numbers, got ({x!r}, {y!r})") from e
    if not (math.isfinite(fx) and math.isfinite(fy)):
        raise InvalidCoordinateError(f"Coordinates must be finite, got ({x!r}, {y!r})")
    return fx, fy

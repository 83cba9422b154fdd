"""Great-circle helpers: spherical/cartesian conversion, distance and centroid."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence, Tuple

from .errors import EmptyInputError, InvalidAngularDistanceInput
from .models import SphericalPoint

logger = logging.getLogger(__name__)

Vector = Tuple[float, float, float]

ZERO_MAGNITUDE = 1e-15  # Below this a vector has no usable direction


def to_cartesian(lat: float, lng: float) -> Vector:
    """Unit vector for a latitude/longitude pair in radians."""

    cos_lat = math.cos(lat)
    return (cos_lat * math.cos(lng), cos_lat * math.sin(lng), math.sin(lat))


def to_spherical(vector: Sequence[float]) -> Tuple[float, float, float]:
    """Return ``(lat, lng, magnitude)`` for a cartesian vector.

    The zero vector has no direction; it maps to ``(0.0, 0.0, 0.0)``.
    """

    x, y, z = float(vector[0]), float(vector[1]), float(vector[2])
    magnitude = math.sqrt(x * x + y * y + z * z)
    if magnitude < ZERO_MAGNITUDE:
        return 0.0, 0.0, 0.0
    elevation = max(-1.0, min(1.0, z / magnitude))
    return math.asin(elevation), math.atan2(y, x), magnitude


def _checked_cosine(value: float) -> float:
    if not -1.0 <= value <= 1.0:
        raise InvalidAngularDistanceInput(value)
    return value


def angular_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in radians (spherical law of cosines)."""

    raw = math.sin(lat1) * math.sin(lat2) + math.cos(lat1) * math.cos(lat2) * math.cos(lng2 - lng1)
    try:
        cosine = _checked_cosine(raw)
    except InvalidAngularDistanceInput as exc:
        # Rounding overshoot for coincident or antipodal points.
        logger.debug("Clamping cosine argument %r to %r", exc.value, exc.clamped)
        cosine = exc.clamped
    return math.acos(cosine)


def spherical_centroid(points: Iterable[SphericalPoint]) -> Tuple[float, float, float]:
    """Mean direction of ``points`` as ``(lat, lng, radius_fraction)``.

    The averaged vector is renormalised; ``radius_fraction`` is its length
    before renormalising (1.0 when all points coincide).
    """

    count = 0
    sum_x = sum_y = sum_z = 0.0
    for point in points:
        x, y, z = to_cartesian(point.latitude, point.longitude)
        sum_x += x
        sum_y += y
        sum_z += z
        count += 1

    if count == 0:
        raise EmptyInputError("Cannot compute a centroid without located points.")

    return to_spherical((sum_x / count, sum_y / count, sum_z / count))

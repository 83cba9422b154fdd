"""Rotated cartesian frame anchored on an origin point of the sphere."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .geo import to_cartesian, to_spherical


def _yaw(angle: float) -> np.ndarray:
    """Rotation about the polar axis; adds ``angle`` to longitude."""

    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _pitch(angle: float) -> np.ndarray:
    """Rotation about the y axis; adds ``angle`` to elevation on the x/z plane."""

    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]])


def _roll(angle: float) -> np.ndarray:
    """Rotation about the x axis."""

    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


class BasisConverter:
    """Maps spherical points into a frame where the origin sits on +x.

    In the local frame y points east and z points north of the origin.
    A positive ``rotation`` (radians) turns the local axes clockwise as seen
    on a north-up map.
    """

    def __init__(self, origin_lat: float, origin_lng: float, rotation: float = 0.0) -> None:
        self.origin_lat = origin_lat
        self.origin_lng = origin_lng
        self.rotation = rotation

        matrix = _roll(rotation) @ _pitch(-origin_lat) @ _yaw(-origin_lng)
        matrix.setflags(write=False)
        # Orthonormal, so the transpose is the inverse.
        inverse = np.ascontiguousarray(matrix.T)
        inverse.setflags(write=False)
        self.matrix = matrix
        self.inverse = inverse

    def __repr__(self) -> str:
        return (
            f"BasisConverter(origin_lat={self.origin_lat!r}, origin_lng={self.origin_lng!r}, "
            f"rotation={self.rotation!r})"
        )

    def convert(self, lat: float, lng: float) -> Tuple[float, float, float]:
        """Local cartesian coordinates of a spherical point."""

        local = self.matrix @ np.asarray(to_cartesian(lat, lng))
        return float(local[0]), float(local[1]), float(local[2])

    def revert(self, x: float, y: float, z: float) -> Tuple[float, float, float]:
        """Spherical ``(lat, lng, radius_fraction)`` of a local cartesian point."""

        return to_spherical(self.inverse @ np.array([x, y, z], dtype=float))

    def revert_offset(self, dy: float, dz: float) -> Tuple[float, float]:
        """Spherical position of a tangent-plane offset from the origin.

        The primary component is restored so the point lies on the unit
        sphere; offsets beyond the hemisphere are pinned to its rim.
        """

        x = math.sqrt(max(0.0, 1.0 - dy * dy - dz * dz))
        lat, lng, _ = self.revert(x, dy, dz)
        return lat, lng

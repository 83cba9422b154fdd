"""Exceptions raised while building or querying a spatial grid."""

from __future__ import annotations


class GridError(ValueError):
    """Base class for grid construction failures."""


class EmptyInputError(GridError):
    """No located points were available where a centroid is required."""


class DegenerateExtentError(GridError):
    """All located points coincide, so no lattice spacing can be derived."""


class InvalidAngularDistanceInput(GridError):
    """Cosine argument fell outside [-1, 1].

    Only raised by the internal guard in ``angular_distance``, which recovers
    by using ``clamped`` instead.
    """

    def __init__(self, value: float) -> None:
        super().__init__(f"Cosine argument {value!r} is outside [-1, 1].")
        self.value = value
        self.clamped = max(-1.0, min(1.0, value))

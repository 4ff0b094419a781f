"""Oblique 2D coordinate frame fitted to a tracked table quadrilateral."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Squared edge length below which a corner set is rejected
MIN_EDGE_SQUARED = 1e-6


class DegenerateQuadError(ValueError):
    """Raised when table corners are too close together to span a surface."""


@dataclass(frozen=True)
class TableBasis:
    """Table frame: ``origin + edge_long * u + edge_short * v``.

    ``edge_short`` is stored pre-divided by ``aspect_ratio`` so that both
    stored edges share the long edge's scale. Points on the table map to
    ``u in [0, 1]`` and ``v in [0, aspect_ratio]``.
    """

    origin: np.ndarray
    edge_long: np.ndarray
    edge_short: np.ndarray
    length_long: float
    aspect_ratio: float

    @property
    def table_size(self) -> tuple[float, float]:
        """Size of the table in normalized coordinates."""
        return (1.0, self.aspect_ratio)

    @property
    def normal(self) -> np.ndarray:
        """Unit normal of the table plane."""
        n = np.cross(self.edge_long, self.edge_short)
        return n / np.linalg.norm(n)

    def corners(self) -> list[np.ndarray]:
        """Parallelogram corners: origin, long-edge end, far corner, short-edge end."""
        ratio = self.aspect_ratio
        return [
            self.origin,
            self.origin + self.edge_long,
            self.origin + self.edge_long + self.edge_short * ratio,
            self.origin + self.edge_short * ratio,
        ]


def as_vector(value: Sequence[float], dim: int = 3) -> np.ndarray:
    """Copy a point-like sequence into a float array of the given dimension."""
    vec = np.array(value, dtype=float).reshape(-1)
    if vec.shape != (dim,):
        raise ValueError(f"Expected a {dim}D vector, got shape {vec.shape}")
    return vec


def build_basis(corners: Sequence[Sequence[float]]) -> TableBasis:
    """Build the table frame from four ordered 3D corners.

    ``corners[0]`` is the origin; the edges towards ``corners[1]`` and
    ``corners[3]`` become the two axes, the longer one being the long axis.
    ``corners[2]`` is not consulted.

    Args:
        corners: Four 3D points, in order around the table.

    Returns:
        TableBasis for the quadrilateral.

    Raises:
        ValueError: If not exactly 4 corners are given.
        DegenerateQuadError: If either edge is (nearly) zero length.
    """
    if len(corners) != 4:
        raise ValueError("Exactly 4 corners required")

    origin = as_vector(corners[0])
    edge_a = as_vector(corners[1]) - origin
    edge_b = as_vector(corners[3]) - origin

    sq_a = float(edge_a @ edge_a)
    sq_b = float(edge_b @ edge_b)
    if sq_a >= sq_b:
        edge_long, edge_short, sq_long, sq_short = edge_a, edge_b, sq_a, sq_b
    else:
        edge_long, edge_short, sq_long, sq_short = edge_b, edge_a, sq_b, sq_a

    if sq_long < MIN_EDGE_SQUARED or sq_short < MIN_EDGE_SQUARED:
        raise DegenerateQuadError(
            f"Table edges too short (squared lengths {sq_long:.3g}, {sq_short:.3g})"
        )

    length_long = float(np.sqrt(sq_long))
    ratio = float(np.sqrt(sq_short)) / length_long

    return TableBasis(
        origin=origin,
        edge_long=edge_long,
        edge_short=edge_short / ratio,
        length_long=length_long,
        aspect_ratio=ratio,
    )

"""Ray and plane helpers for placing detections on the table surface."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .basis import as_vector

PARALLEL_EPSILON = 1e-6
MIN_HIT_DISTANCE = 1e-6
MIN_NORMAL_SQUARED = 1e-6


def ray_intersects_triangle(
    origin: Sequence[float],
    direction: Sequence[float],
    v0: Sequence[float],
    v1: Sequence[float],
    v2: Sequence[float],
) -> np.ndarray | None:
    """Moller-Trumbore ray/triangle test.

    Returns:
        The hit point, or None if the ray misses or runs parallel to the triangle.
    """
    o = as_vector(origin)
    d = as_vector(direction)
    p0 = as_vector(v0)
    e1 = as_vector(v1) - p0
    e2 = as_vector(v2) - p0

    h = np.cross(d, e2)
    a = float(e1 @ h)
    if abs(a) < PARALLEL_EPSILON:
        return None

    f = 1.0 / a
    s = o - p0
    u = f * float(s @ h)
    if u < 0.0 or u > 1.0:
        return None

    q = np.cross(s, e1)
    v = f * float(d @ q)
    if v < 0.0 or u + v > 1.0:
        return None

    t = f * float(e2 @ q)
    if t > MIN_HIT_DISTANCE:
        return o + d * t
    return None


def ray_hits_table(
    origin: Sequence[float],
    direction: Sequence[float],
    corners: Sequence[Sequence[float]],
) -> np.ndarray | None:
    """Intersect a ray with the table quad, split along the c0-c2 diagonal."""
    if len(corners) != 4:
        raise ValueError("Exactly 4 corners required")
    c0, c1, c2, c3 = corners
    hit = ray_intersects_triangle(origin, direction, c0, c1, c2)
    if hit is not None:
        return hit
    return ray_intersects_triangle(origin, direction, c0, c2, c3)


def plane_from_corners(
    corners: Sequence[Sequence[float]],
) -> tuple[np.ndarray, np.ndarray] | None:
    """Unit normal and centroid of the plane through the corners.

    Returns None for fewer than 3 corners or when the first three are collinear.
    """
    if len(corners) < 3:
        return None
    pts = [as_vector(c) for c in corners]
    n = np.cross(pts[1] - pts[0], pts[2] - pts[0])
    sq = float(n @ n)
    if sq < MIN_NORMAL_SQUARED:
        return None
    center = np.mean(pts, axis=0)
    return n / np.sqrt(sq), center


def project_point_on_plane(
    point: Sequence[float],
    plane_point: Sequence[float],
    normal: Sequence[float],
) -> np.ndarray:
    p = as_vector(point)
    n = as_vector(normal)
    return p - float((p - as_vector(plane_point)) @ n) * n


def project_vector_on_plane(vector: Sequence[float], normal: Sequence[float]) -> np.ndarray:
    v = as_vector(vector)
    n = as_vector(normal)
    return v - float(v @ n) * n

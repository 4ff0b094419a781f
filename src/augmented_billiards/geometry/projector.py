"""Projection between world space and normalized table coordinates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .basis import DegenerateQuadError, TableBasis, as_vector, build_basis

logger = logging.getLogger(__name__)

# Determinant magnitude below which the projection system is singular
MIN_DETERMINANT = 1e-6
# Squared in-plane length below which a direction is treated as vertical
MIN_DIRECTION_SQUARED = 1e-8
# Fallback for directions along the table normal
FALLBACK_DIRECTION = (1.0, 0.0)


class DegenerateBasisError(ValueError):
    """Raised when the table axes do not span a plane."""


class TableProjector:
    """Solves the 2x2 normal equations of a table basis.

    The Gram matrix and plane normal are computed once, so projecting many
    points against the same basis costs two dot products each.
    """

    def __init__(self, basis: TableBasis) -> None:
        """Initialize projector.

        Args:
            basis: Table frame to project into.

        Raises:
            DegenerateBasisError: If the basis axes are (nearly) parallel.
        """
        el, es = basis.edge_long, basis.edge_short
        self._basis = basis
        self._a11 = float(el @ el)
        self._a12 = float(el @ es)
        self._a22 = float(es @ es)
        self._det = self._a11 * self._a22 - self._a12 * self._a12
        if abs(self._det) < MIN_DETERMINANT:
            raise DegenerateBasisError(f"Singular table basis (det={self._det:.3g})")
        self._normal = basis.normal

    @property
    def basis(self) -> TableBasis:
        return self._basis

    def _flatten(self, vec: np.ndarray) -> np.ndarray:
        return vec - (vec @ self._normal) * self._normal

    def _solve(self, vec: np.ndarray) -> np.ndarray:
        b1 = float(vec @ self._basis.edge_long)
        b2 = float(vec @ self._basis.edge_short)
        u = (b1 * self._a22 - b2 * self._a12) / self._det
        v = (self._a11 * b2 - self._a12 * b1) / self._det
        return np.array([u, v])

    def world_to_uv(self, point: Sequence[float]) -> np.ndarray:
        """Map a 3D point to (u, v); the out-of-plane component is dropped."""
        offset = as_vector(point) - self._basis.origin
        return self._solve(self._flatten(offset))

    def world_to_uv_direction(self, vector: Sequence[float]) -> np.ndarray:
        """Map a 3D direction to a unit (du, dv).

        Directions along the table normal have no in-plane component and map
        to the long axis instead of failing.
        """
        flat = self._flatten(as_vector(vector))
        if float(flat @ flat) < MIN_DIRECTION_SQUARED:
            logger.debug("Direction lies along table normal, using fallback")
            return np.array(FALLBACK_DIRECTION)
        uv = self._solve(flat)
        return uv / np.linalg.norm(uv)

    def uv_to_world(self, uv: Sequence[float]) -> np.ndarray:
        return uv_to_world(self._basis, uv)

    def uv_direction_to_world(self, direction_uv: Sequence[float]) -> np.ndarray:
        return uv_direction_to_world(self._basis, direction_uv)


def world_to_uv(basis: TableBasis, point: Sequence[float]) -> np.ndarray:
    """Project a 3D point into normalized table coordinates.

    Raises:
        DegenerateBasisError: If the basis is singular.
    """
    return TableProjector(basis).world_to_uv(point)


def world_to_uv_direction(basis: TableBasis, vector: Sequence[float]) -> np.ndarray:
    """Project a 3D direction into a unit table-space direction.

    Raises:
        DegenerateBasisError: If the basis is singular.
    """
    return TableProjector(basis).world_to_uv_direction(vector)


def uv_to_world(basis: TableBasis, uv: Sequence[float]) -> np.ndarray:
    """Map normalized table coordinates back to a 3D point."""
    u, v = as_vector(uv, dim=2)
    return basis.origin + basis.edge_long * u + basis.edge_short * v


def uv_direction_to_world(basis: TableBasis, direction_uv: Sequence[float]) -> np.ndarray:
    """Map a table-space direction back to a 3D vector (not normalized)."""
    du, dv = as_vector(direction_uv, dim=2)
    return basis.edge_long * du + basis.edge_short * dv


@dataclass
class TableMapping:
    """Everything from one frame projected into table coordinates."""

    basis: TableBasis
    table_size: tuple[float, float]
    ball_uvs: list[np.ndarray]
    aim_position: np.ndarray
    aim_direction: np.ndarray


def map_to_table(
    corners: Sequence[Sequence[float]],
    ball_positions: Sequence[Sequence[float]],
    aim_position: Sequence[float],
    aim_direction: Sequence[float],
) -> TableMapping | None:
    """Project ball centers and the aim pose into a single table frame.

    Args:
        corners: Four ordered 3D table corners.
        ball_positions: 3D ball centers.
        aim_position: 3D aim point.
        aim_direction: 3D aim direction.

    Returns:
        TableMapping, or None if the corners cannot form a frame.
    """
    try:
        basis = build_basis(corners)
        projector = TableProjector(basis)
    except (DegenerateQuadError, DegenerateBasisError, ValueError) as exc:
        logger.debug("Skipping frame: %s", exc)
        return None

    return TableMapping(
        basis=basis,
        table_size=basis.table_size,
        ball_uvs=[projector.world_to_uv(p) for p in ball_positions],
        aim_position=projector.world_to_uv(aim_position),
        aim_direction=projector.world_to_uv_direction(aim_direction),
    )

"""Virtual cue stick derived from the viewer's head pose."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..config import StickConfig
from ..geometry.intersect import (
    plane_from_corners,
    project_point_on_plane,
    project_vector_on_plane,
)

logger = logging.getLogger(__name__)

FRONT_LENGTH = 0.5     # Foot point to stick tip (m)
BACK_LENGTH = 1.5      # Foot point to stick butt (m)
START_ROTATE_DEG = 15.0  # Butt rotation about the tip, CCW around the table normal
MIN_SQUARED = 1e-6


@dataclass
class AimPose:
    """Stick tip and unit forward direction in world space."""

    position: np.ndarray
    direction: np.ndarray
    start: np.ndarray


def rotate_about_axis(vector: np.ndarray, axis: np.ndarray, degrees: float) -> np.ndarray:
    """Rodrigues rotation of ``vector`` about unit ``axis``."""
    theta = math.radians(degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    return (
        vector * cos_t
        + np.cross(axis, vector) * sin_t
        + axis * float(axis @ vector) * (1.0 - cos_t)
    )


class VirtualStick:
    """A cue line lying on the table under the viewer's gaze."""

    def __init__(
        self,
        front_length: float = FRONT_LENGTH,
        back_length: float = BACK_LENGTH,
        start_rotate_deg: float = START_ROTATE_DEG,
    ) -> None:
        self._front_length = front_length
        self._back_length = back_length
        self._start_rotate_deg = start_rotate_deg
        self._last_end = np.zeros(3)
        self._last_dir = np.array([0.0, 0.0, 1.0])

    @classmethod
    def from_config(cls, config: StickConfig) -> VirtualStick:
        return cls(
            front_length=config.front_length,
            back_length=config.back_length,
            start_rotate_deg=config.start_rotate_deg,
        )

    def update(
        self,
        corners: Sequence[Sequence[float]] | None,
        head_position: Sequence[float],
        head_forward: Sequence[float],
    ) -> AimPose | None:
        """Recompute the stick for a new head pose.

        Args:
            corners: Table corners, or None while the table is not placed.
            head_position: Viewer position.
            head_forward: Viewer forward direction.

        Returns:
            The new aim pose, or None if the table plane or the gaze
            projection is degenerate; ``status`` then keeps its last value.
        """
        if corners is None:
            return None
        plane = plane_from_corners(corners)
        if plane is None:
            return None
        normal, center = plane

        foot = project_point_on_plane(head_position, center, normal)
        on_plane = project_vector_on_plane(head_forward, normal)
        if float(on_plane @ on_plane) < MIN_SQUARED:
            logger.debug("Gaze is perpendicular to the table, stick not updated")
            return None
        on_plane = on_plane / np.linalg.norm(on_plane)

        start = foot - on_plane * self._back_length
        end = foot + on_plane * self._front_length
        if abs(self._start_rotate_deg) > 0.01:
            start = end + rotate_about_axis(start - end, normal, self._start_rotate_deg)

        segment = end - start
        if float(segment @ segment) > MIN_SQUARED:
            direction = segment / np.linalg.norm(segment)
        else:
            direction = on_plane

        self._last_end = end
        self._last_dir = direction
        return AimPose(position=end, direction=direction, start=start)

    def status(self) -> tuple[np.ndarray, np.ndarray]:
        """Last (tip position, forward direction)."""
        return self._last_end.copy(), self._last_dir.copy()


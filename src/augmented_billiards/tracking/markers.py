"""Ball markers placed on the table surface from 3D detections."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..config import MarkerConfig
from ..geometry.basis import as_vector
from ..geometry.intersect import ray_hits_table

logger = logging.getLogger(__name__)

# Marker parameters
SPAWN_DISTANCE = 0.05  # Detections closer than this (m) replace an existing marker
MARKER_LIFE = 2.0      # Seconds an in-view marker survives without a detection
FOV_DEGREES = 45.0     # Half-angle of the view cone used for expiry


@dataclass
class Detection:
    """A detected ball, already lifted to a 3D world position."""

    class_name: str
    position: np.ndarray

    def __post_init__(self) -> None:
        self.position = as_vector(self.position)


@dataclass
class BallMarker:
    """A ball believed to rest on the table."""

    identity: str
    position: np.ndarray
    last_seen: float


def is_inside_fov(
    point: Sequence[float],
    head_position: Sequence[float],
    head_forward: Sequence[float],
    fov_degrees: float = FOV_DEGREES,
) -> bool:
    """Whether ``point`` is within ``fov_degrees`` of the view direction."""
    to_point = as_vector(point) - as_vector(head_position)
    forward = as_vector(head_forward)
    denom = float(np.linalg.norm(to_point) * np.linalg.norm(forward))
    if denom == 0.0:
        return False
    cos_angle = float(np.clip((to_point @ forward) / denom, -1.0, 1.0))
    return math.degrees(math.acos(cos_angle)) <= fov_degrees


class MarkerSet:
    """Keeps one marker per physical ball across noisy detections."""

    def __init__(
        self,
        spawn_distance: float = SPAWN_DISTANCE,
        marker_life: float = MARKER_LIFE,
        fov_degrees: float = FOV_DEGREES,
    ) -> None:
        """Initialize marker set.

        Args:
            spawn_distance: Radius within which a new detection replaces markers.
            marker_life: Seconds before an unseen, in-view marker is dropped.
            fov_degrees: View cone half-angle; markers outside it never expire.
        """
        self._spawn_distance = spawn_distance
        self._marker_life = marker_life
        self._fov_degrees = fov_degrees
        self._markers: list[BallMarker] = []

    @classmethod
    def from_config(cls, config: MarkerConfig) -> MarkerSet:
        return cls(
            spawn_distance=config.spawn_distance,
            marker_life=config.marker_life_s,
            fov_degrees=config.fov_degrees,
        )

    def __len__(self) -> int:
        return len(self._markers)

    @property
    def markers(self) -> list[BallMarker]:
        return list(self._markers)

    def clear(self) -> None:
        self._markers = []

    def spawn_or_refresh(self, position: Sequence[float], identity: str, now: float) -> bool:
        """Place a marker, replacing any marker close to it.

        Returns:
            True if no existing marker was replaced.
        """
        pos = as_vector(position)
        kept = [
            m for m in self._markers
            if float(np.linalg.norm(m.position - pos)) > self._spawn_distance
        ]
        is_new = len(kept) == len(self._markers)
        self._markers = kept
        self._markers.append(BallMarker(identity=identity, position=pos, last_seen=now))
        if is_new:
            logger.debug("New %s marker at %s", identity, pos)
        return is_new

    def cull_expired(
        self,
        now: float,
        head_position: Sequence[float],
        head_forward: Sequence[float],
    ) -> int:
        """Drop in-view markers that have not been detected recently.

        Markers outside the view cannot be re-detected, so they are kept
        alive instead.

        Returns:
            Number of markers removed.
        """
        survivors = []
        for marker in self._markers:
            if not is_inside_fov(marker.position, head_position, head_forward, self._fov_degrees):
                marker.last_seen = now
                survivors.append(marker)
            elif now - marker.last_seen <= self._marker_life:
                survivors.append(marker)
        removed = len(self._markers) - len(survivors)
        self._markers = survivors
        if removed:
            logger.debug("Expired %d markers", removed)
        return removed

    def ingest(
        self,
        detections: Sequence[Detection],
        corners: Sequence[Sequence[float]] | None,
        head_position: Sequence[float],
        head_forward: Sequence[float],
        now: float,
    ) -> int:
        """Place markers where rays from the head through detections meet the table.

        Args:
            detections: Detected balls with approximate world positions.
            corners: Four table corners, or None while the table is not placed.
            head_position: Viewer position when the frame was captured.
            head_forward: Viewer forward direction when the frame was captured.
            now: Current time in seconds.

        Returns:
            Number of markers placed this call.
        """
        if corners is None or len(corners) < 4:
            return 0

        head = as_vector(head_position)
        placed = 0
        for detection in detections:
            direction = detection.position - head
            norm = float(np.linalg.norm(direction))
            if norm == 0.0:
                continue
            hit = ray_hits_table(head, direction / norm, corners)
            if hit is None:
                continue
            if not is_inside_fov(hit, head, head_forward, self._fov_degrees):
                continue
            self.spawn_or_refresh(hit, detection.class_name, now)
            placed += 1

        self.cull_expired(now, head, head_forward)
        return placed

    def snapshot(self) -> list[tuple[str, np.ndarray]]:
        """Ordered (identity, position) pairs for the current frame."""
        return [(m.identity, m.position.copy()) for m in self._markers]

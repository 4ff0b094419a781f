"""Collision search and collision response in normalized table space."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

import numpy as np

# Ray parameters at or below this are not "ahead" of the ball
MIN_TRAVEL = 1e-9
# Balls closer than this to the moving ball are treated as the ball itself
SELF_EXCLUSION_DISTANCE = 1e-3
# Slack on the contact equation for balls that already touch
CONTACT_TOLERANCE = 1e-9


class CollisionKind(Enum):
    """What a ball runs into along its current ray."""

    NONE = auto()
    WALL = auto()
    BALL = auto()


@dataclass(frozen=True)
class CollisionEvent:
    """First contact along a ray, ordered by travel distance."""

    kind: CollisionKind
    distance: float = math.inf
    point: np.ndarray | None = None
    normal: np.ndarray | None = None
    target_index: int | None = None  # Only for BALL

    @property
    def found(self) -> bool:
        return self.kind is not CollisionKind.NONE

    @classmethod
    def none(cls) -> CollisionEvent:
        return cls(CollisionKind.NONE)


def find_wall_collision(
    position: np.ndarray,
    direction: np.ndarray,
    table_size: Sequence[float],
    radius: float,
) -> CollisionEvent:
    """Earliest contact with the cushions, offset inwards by the ball radius.

    Each of the four walls is solved as a 1D ray parameter; a hit counts only
    if the other coordinate lies on the table at that moment.
    """
    width, height = float(table_size[0]), float(table_size[1])
    # (axis, boundary value, inward normal)
    walls = (
        (0, radius, (1.0, 0.0)),
        (0, width - radius, (-1.0, 0.0)),
        (1, radius, (0.0, 1.0)),
        (1, height - radius, (0.0, -1.0)),
    )
    extents = (width, height)

    best = CollisionEvent.none()
    for axis, boundary, normal in walls:
        component = float(direction[axis])
        if component == 0.0:
            continue
        t = (boundary - float(position[axis])) / component
        if t <= MIN_TRAVEL or t >= best.distance:
            continue
        other = 1 - axis
        crossing = float(position[other]) + t * float(direction[other])
        if not 0.0 <= crossing <= extents[other]:
            continue
        best = CollisionEvent(
            CollisionKind.WALL,
            distance=t,
            point=position + direction * t,
            normal=np.array(normal),
        )
    return best


def find_ball_collision(
    position: np.ndarray,
    direction: np.ndarray,
    balls: Sequence[np.ndarray],
    radius: float,
    exclusion_distance: float = SELF_EXCLUSION_DISTANCE,
) -> CollisionEvent:
    """Earliest contact with another (stationary) ball.

    Solves ``|rel + t * direction|^2 = (2 * radius)^2`` for every candidate.
    Any ball within ``exclusion_distance`` of ``position`` counts as the
    moving ball itself and is skipped. Balls are static, so a ball that has
    left its starting spot can still run into it.
    """
    a = float(direction @ direction)
    if a == 0.0:
        return CollisionEvent.none()
    contact_sq = (2.0 * radius) ** 2

    best = CollisionEvent.none()
    for index, center in enumerate(balls):
        rel = position - center
        if float(np.linalg.norm(rel)) <= exclusion_distance:
            continue
        b = 2.0 * float(rel @ direction)
        c = float(rel @ rel) - contact_sq
        # Touching balls that are not closing in stay apart
        if abs(c) <= CONTACT_TOLERANCE and b >= -CONTACT_TOLERANCE:
            continue
        disc = b * b - 4.0 * a * c
        if disc < 0.0:
            continue
        root = math.sqrt(disc)
        t = None
        for candidate in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
            if candidate > MIN_TRAVEL:
                t = candidate
                break
        if t is None or t >= best.distance:
            continue

        point = position + direction * t
        to_center = center - point
        norm = float(np.linalg.norm(to_center))
        if norm == 0.0:
            continue
        best = CollisionEvent(
            CollisionKind.BALL,
            distance=t,
            point=point,
            normal=to_center / norm,
            target_index=index,
        )
    return best


def earliest(wall: CollisionEvent, ball: CollisionEvent) -> CollisionEvent:
    """Pick the first of two events; a wall wins an exact tie."""
    if wall.found and wall.distance <= ball.distance:
        return wall
    if ball.found:
        return ball
    return CollisionEvent.none()


def reflect(direction: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror ``direction`` about a unit ``normal``."""
    return direction - 2.0 * float(direction @ normal) * normal


def decompose(direction: np.ndarray, normal: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Split a velocity along the line of centers.

    For equal-mass elastic balls the struck ball leaves along the normal part
    and the striking ball keeps the tangential part.

    Returns:
        (v_normal, v_tangent), summing to ``direction``.
    """
    v_normal = float(direction @ normal) * normal
    return v_normal, direction - v_normal

"""Shot prediction: target selection and recursive path tracing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .collisions import (
    SELF_EXCLUSION_DISTANCE,
    CollisionKind,
    decompose,
    earliest,
    find_ball_collision,
    find_wall_collision,
    reflect,
)

MAX_BOUNCES = 2  # Wall or ball contacts traced before extrapolating
LOOK_AHEAD = 2.0  # Extrapolation distance in normalized table units
MIN_SPEED = 1e-9  # Direction magnitude treated as "not moving"

Point = tuple[float, float]
Trajectory = list[Point]


def _point(vec: np.ndarray) -> Point:
    return (float(vec[0]), float(vec[1]))


@dataclass
class TableLayout:
    """Static table geometry a shot is traced against."""

    table_size: tuple[float, float]
    balls: list[np.ndarray] = field(default_factory=list)
    radius: float = 0.0

    @classmethod
    def from_points(
        cls,
        table_size: Sequence[float],
        balls: Sequence[Sequence[float]],
        radius: float,
    ) -> TableLayout:
        return cls(
            table_size=(float(table_size[0]), float(table_size[1])),
            balls=[np.asarray(b, dtype=float) for b in balls],
            radius=float(radius),
        )


def select_target(
    aim_position: Sequence[float],
    aim_direction: Sequence[float],
    balls: Sequence[Sequence[float]],
    radius: float,
) -> int | None:
    """Index of the first ball the aim ray strikes, or None.

    A ball is a candidate when it lies ahead of the aim point and the ray
    passes within ``radius`` of its center; the candidate with the nearest
    entry point wins.
    """
    origin = np.asarray(aim_position, dtype=float)
    direction = np.asarray(aim_direction, dtype=float)
    length = float(np.linalg.norm(direction))
    if length < MIN_SPEED:
        return None
    direction = direction / length

    best_index = None
    best_distance = math.inf
    for index, ball in enumerate(balls):
        rel = np.asarray(ball, dtype=float) - origin
        dot = float(rel @ direction)
        if dot <= 0.0:
            continue
        perp_sq = max(float(rel @ rel) - dot * dot, 0.0)
        if math.sqrt(perp_sq) >= radius:
            continue
        entry = dot - math.sqrt(radius * radius - perp_sq)
        if 0.0 <= entry < best_distance:
            best_index = index
            best_distance = entry
    return best_index


class TrajectorySimulator:
    """Traces idealized ball paths: elastic, frictionless, point-mass contacts."""

    def __init__(
        self,
        max_bounces: int = MAX_BOUNCES,
        look_ahead: float = LOOK_AHEAD,
        exclusion_distance: float = SELF_EXCLUSION_DISTANCE,
    ) -> None:
        """Initialize simulator.

        Args:
            max_bounces: Contacts traced per path before extrapolating.
            look_ahead: Length of the final extrapolated segment.
            exclusion_distance: Distance under which a ball counts as the mover itself.
        """
        self._max_bounces = max_bounces
        self._look_ahead = look_ahead
        self._exclusion_distance = exclusion_distance

    def simulate(
        self,
        layout: TableLayout,
        position: Sequence[float],
        direction: Sequence[float],
        trajectory: Trajectory,
        bounce_count: int,
    ) -> list[Trajectory]:
        """Continue ``trajectory`` from ``position`` and return every finished path.

        The returned list holds this path first, followed by paths of balls
        struck along the way. ``trajectory`` itself is not modified.
        """
        return self._trace(
            layout,
            np.asarray(position, dtype=float),
            np.asarray(direction, dtype=float),
            list(trajectory),
            bounce_count,
            0,
        )

    def _trace(
        self,
        layout: TableLayout,
        position: np.ndarray,
        direction: np.ndarray,
        path: Trajectory,
        bounce_count: int,
        branch_depth: int,
    ) -> list[Trajectory]:
        speed = float(np.linalg.norm(direction))
        if speed < MIN_SPEED:
            return [path]
        direction = direction / speed

        if bounce_count >= self._max_bounces:
            path.append(_point(position + direction * self._look_ahead))
            return [path]

        wall = find_wall_collision(position, direction, layout.table_size, layout.radius)
        ball = find_ball_collision(
            position,
            direction,
            layout.balls,
            layout.radius,
            self._exclusion_distance,
        )
        event = earliest(wall, ball)

        if event.kind is CollisionKind.WALL:
            path.append(_point(event.point))
            return self._trace(
                layout,
                event.point,
                reflect(direction, event.normal),
                path,
                bounce_count + 1,
                branch_depth,
            )

        if event.kind is CollisionKind.BALL:
            path.append(_point(event.point))
            v_normal, v_tangent = decompose(direction, event.normal)
            paths = self._trace(
                layout,
                event.point,
                v_tangent,
                path,
                bounce_count + 1,
                branch_depth,
            )
            # Struck ball keeps the bounce count of the impact
            if bounce_count < self._max_bounces and branch_depth < len(layout.balls):
                center = layout.balls[event.target_index]
                paths.extend(
                    self._trace(
                        layout,
                        center,
                        v_normal,
                        [_point(center)],
                        bounce_count,
                        branch_depth + 1,
                    )
                )
            return paths

        path.append(_point(position + direction * self._look_ahead))
        return [path]


def predict_trajectories(
    layout: TableLayout,
    aim_position: Sequence[float],
    aim_direction: Sequence[float],
    simulator: TrajectorySimulator | None = None,
) -> tuple[int | None, list[Trajectory]]:
    """Select the ball on the aim line and trace its shot.

    The struck ball leaves along the aim direction; off-center contact is
    not modeled.

    Returns:
        (target index, paths); (None, []) when the aim misses every ball.
    """
    target = select_target(aim_position, aim_direction, layout.balls, layout.radius)
    if target is None:
        return None, []
    simulator = simulator or TrajectorySimulator()
    start = _point(layout.balls[target])
    return target, simulator.simulate(layout, start, aim_direction, [start], 0)

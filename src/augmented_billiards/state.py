"""Per-frame pipeline: world snapshot -> table state -> predicted paths."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from .config import AppConfig, PhysicsConfig
from .geometry.basis import TableBasis, as_vector
from .geometry.projector import TableMapping, map_to_table, uv_to_world
from .simulation.trajectory import (
    TableLayout,
    Trajectory,
    TrajectorySimulator,
    predict_trajectories,
)
from .tracking.anchors import AnchorSet
from .tracking.markers import Detection, MarkerSet
from .tracking.stick import VirtualStick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    """Immutable world-space input for one prediction."""

    corners: tuple[np.ndarray, ...]
    balls: tuple[tuple[str, np.ndarray], ...]
    aim_position: np.ndarray
    aim_direction: np.ndarray

    @classmethod
    def create(
        cls,
        corners: Sequence[Sequence[float]],
        balls: Sequence[tuple[str, Sequence[float]]],
        aim_position: Sequence[float],
        aim_direction: Sequence[float],
    ) -> FrameSnapshot:
        """Build a snapshot, copying every point so callers keep ownership."""
        if len(corners) != 4:
            raise ValueError("Exactly 4 corners required")
        return cls(
            corners=tuple(as_vector(c) for c in corners),
            balls=tuple((str(name), as_vector(pos)) for name, pos in balls),
            aim_position=as_vector(aim_position),
            aim_direction=as_vector(aim_direction),
        )

    @classmethod
    def from_trackers(
        cls,
        anchors: AnchorSet,
        markers: MarkerSet,
        stick: VirtualStick,
    ) -> FrameSnapshot | None:
        """Gather the current collaborator state, or None before the table is placed."""
        bounds = anchors.bounds()
        if bounds is None:
            return None
        aim_position, aim_direction = stick.status()
        return cls.create(bounds, markers.snapshot(), aim_position, aim_direction)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "corners": [c.tolist() for c in self.corners],
            "balls": [{"identity": name, "position": pos.tolist()} for name, pos in self.balls],
            "aim": {
                "position": self.aim_position.tolist(),
                "direction": self.aim_direction.tolist(),
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> FrameSnapshot:
        """Create from dictionary."""
        return cls.create(
            corners=data["corners"],
            balls=[(b["identity"], b["position"]) for b in data.get("balls", [])],
            aim_position=data["aim"]["position"],
            aim_direction=data["aim"]["direction"],
        )

    @classmethod
    def load(cls, path: Path) -> FrameSnapshot:
        """Load a snapshot from a JSON file."""
        data = json.loads(path.read_text(encoding="utf-8"))
        logger.info("Loaded snapshot from %s", path)
        return cls.from_dict(data)


@dataclass
class BallUV:
    """A ball in normalized table coordinates."""

    identity: str
    position: tuple[float, float]


@dataclass
class TableState:
    """Scale-free 2D view of one frame."""

    table_size: tuple[float, float]
    balls: list[BallUV]
    aim_position: tuple[float, float]
    aim_direction: tuple[float, float]
    ball_radius_ratio: float

    def layout(self) -> TableLayout:
        return TableLayout.from_points(
            self.table_size, [b.position for b in self.balls], self.ball_radius_ratio
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "table_size": list(self.table_size),
            "balls": [{"identity": b.identity, "uv": list(b.position)} for b in self.balls],
            "aim_position": list(self.aim_position),
            "aim_direction": list(self.aim_direction),
            "ball_radius_ratio": self.ball_radius_ratio,
        }


@dataclass
class FramePrediction:
    """Table state and predicted paths, with the basis they were computed in."""

    basis: TableBasis
    state: TableState
    trajectories: list[Trajectory] = field(default_factory=list)
    target: str | None = None

    @property
    def has_target(self) -> bool:
        return self.target is not None

    def world_trajectories(self) -> list[list[np.ndarray]]:
        """Predicted paths mapped back to world space with the same basis."""
        return [[uv_to_world(self.basis, p) for p in path] for path in self.trajectories]


def _pair(vec: np.ndarray) -> tuple[float, float]:
    return (float(vec[0]), float(vec[1]))


def _state_from_mapping(
    snapshot: FrameSnapshot,
    mapping: TableMapping,
    ball_radius: float,
) -> TableState:
    balls = [
        BallUV(identity=name, position=_pair(uv))
        for (name, _), uv in zip(snapshot.balls, mapping.ball_uvs)
    ]
    return TableState(
        table_size=mapping.table_size,
        balls=balls,
        aim_position=_pair(mapping.aim_position),
        aim_direction=_pair(mapping.aim_direction),
        ball_radius_ratio=ball_radius / mapping.basis.length_long,
    )


def _map_snapshot(snapshot: FrameSnapshot) -> TableMapping | None:
    return map_to_table(
        snapshot.corners,
        [pos for _, pos in snapshot.balls],
        snapshot.aim_position,
        snapshot.aim_direction,
    )


def build_table_state(
    snapshot: FrameSnapshot,
    ball_radius: float = PhysicsConfig.ball_radius,
) -> TableState | None:
    """Project a snapshot into normalized table space.

    Args:
        snapshot: World-space frame input.
        ball_radius: Physical ball radius in world units.

    Returns:
        TableState, or None if the frame must be skipped.
    """
    mapping = _map_snapshot(snapshot)
    if mapping is None:
        return None
    return _state_from_mapping(snapshot, mapping, ball_radius)


def predict_frame(
    snapshot: FrameSnapshot,
    config: AppConfig | None = None,
) -> FramePrediction | None:
    """Run the full pipeline for one frame.

    Args:
        snapshot: World-space frame input.
        config: Application configuration; defaults are used if omitted.

    Returns:
        FramePrediction (with no trajectories when the aim misses every
        ball), or None if the table corners are degenerate.
    """
    physics = (config or AppConfig()).physics
    mapping = _map_snapshot(snapshot)
    if mapping is None:
        return None
    state = _state_from_mapping(snapshot, mapping, physics.ball_radius)
    prediction = FramePrediction(basis=mapping.basis, state=state)

    simulator = TrajectorySimulator(
        max_bounces=physics.max_bounces,
        look_ahead=physics.look_ahead,
        exclusion_distance=physics.self_exclusion_distance,
    )
    target, trajectories = predict_trajectories(
        state.layout(), state.aim_position, state.aim_direction, simulator
    )
    if target is None:
        logger.debug("No target ball on the aim line")
        return prediction

    prediction.target = state.balls[target].identity
    prediction.trajectories = trajectories
    logger.debug(
        "Predicted %d paths for %s", len(prediction.trajectories), prediction.target
    )
    return prediction


class TrackingSession:
    """Live collaborator state for one table, configured from ``AppConfig``.

    A host feeds head poses and detections each frame through ``update`` and
    asks for a prediction whenever it redraws.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.anchors = AnchorSet()
        self.markers = MarkerSet.from_config(self.config.markers)
        self.stick = VirtualStick.from_config(self.config.stick)

    def update(
        self,
        detections: Sequence[Detection],
        head_position: Sequence[float],
        head_forward: Sequence[float],
        now: float,
    ) -> int:
        """Refresh markers and the stick for a new head pose.

        Returns:
            Number of markers placed from ``detections``.
        """
        corners = self.anchors.bounds()
        placed = self.markers.ingest(detections, corners, head_position, head_forward, now)
        self.stick.update(corners, head_position, head_forward)
        return placed

    def snapshot(self) -> FrameSnapshot | None:
        return FrameSnapshot.from_trackers(self.anchors, self.markers, self.stick)

    def predict(self) -> FramePrediction | None:
        """Prediction for the current state, or None before the table is placed."""
        snapshot = self.snapshot()
        if snapshot is None:
            return None
        return predict_frame(snapshot, self.config)

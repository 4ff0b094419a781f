"""Trajectory prediction in normalized table space."""

from .collisions import CollisionEvent, CollisionKind, decompose, reflect
from .trajectory import (
    TableLayout,
    Trajectory,
    TrajectorySimulator,
    predict_trajectories,
    select_target,
)

__all__ = [
    "CollisionEvent",
    "CollisionKind",
    "decompose",
    "reflect",
    "TableLayout",
    "Trajectory",
    "TrajectorySimulator",
    "predict_trajectories",
    "select_target",
]

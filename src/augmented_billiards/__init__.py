"""Billiard shot prediction on a table tracked in 3D space."""

from .state import (
    BallUV,
    FramePrediction,
    FrameSnapshot,
    TableState,
    TrackingSession,
    build_table_state,
    predict_frame,
)

__all__ = [
    "BallUV",
    "FramePrediction",
    "FrameSnapshot",
    "TableState",
    "TrackingSession",
    "build_table_state",
    "predict_frame",
]

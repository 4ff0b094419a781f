"""Top-down preview image of a predicted shot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from .simulation.trajectory import Trajectory
from .state import TableState

logger = logging.getLogger(__name__)

# BGR colors
FELT_COLOR = (60, 110, 30)
RAIL_COLOR = (0, 255, 0)
BALL_COLOR = (255, 255, 255)
AIM_COLOR = (0, 0, 255)
TRAJECTORY_COLORS = [
    (0, 255, 255),
    (255, 0, 255),
    (255, 255, 0),
    (0, 165, 255),
]
AIM_LENGTH = 0.25  # Normalized units


class PreviewCanvas:
    """Maps normalized table coordinates to image pixels."""

    def __init__(self, table_size: Sequence[float], width_px: int = 1000, margin_px: int = 40) -> None:
        self._scale = (width_px - 2 * margin_px) / float(table_size[0])
        self._margin = margin_px
        self._table_size = (float(table_size[0]), float(table_size[1]))
        self.width = width_px
        self.height = int(round(self._table_size[1] * self._scale)) + 2 * margin_px

    def to_pixel(self, uv: Sequence[float]) -> tuple[int, int]:
        """Transform table coordinates to pixel coordinates."""
        return (
            int(round(self._margin + float(uv[0]) * self._scale)),
            int(round(self._margin + float(uv[1]) * self._scale)),
        )

    def length(self, value: float) -> int:
        return max(1, int(round(value * self._scale)))

    def blank(self) -> np.ndarray:
        image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        top_left = self.to_pixel((0.0, 0.0))
        bottom_right = self.to_pixel(self._table_size)
        cv2.rectangle(image, top_left, bottom_right, FELT_COLOR, -1)
        cv2.rectangle(image, top_left, bottom_right, RAIL_COLOR, 2)
        return image


def draw_prediction(
    state: TableState,
    trajectories: Sequence[Trajectory],
    width_px: int = 1000,
    margin_px: int = 40,
    line_thickness: int = 2,
) -> np.ndarray:
    """Render balls, aim line and predicted paths.

    Args:
        state: Table state in normalized coordinates.
        trajectories: Predicted paths in the same coordinates.
        width_px: Output image width.
        margin_px: Border around the table.
        line_thickness: Thickness of path and aim lines.

    Returns:
        BGR image.
    """
    canvas = PreviewCanvas(state.table_size, width_px, margin_px)
    image = canvas.blank()

    # Draw predicted paths first so balls stay visible
    for index, path in enumerate(trajectories):
        if len(path) < 2:
            continue
        color = TRAJECTORY_COLORS[index % len(TRAJECTORY_COLORS)]
        points = np.array([canvas.to_pixel(p) for p in path], dtype=np.int32)
        cv2.polylines(image, [points], False, color, line_thickness)

    radius_px = canvas.length(state.ball_radius_ratio)
    for ball in state.balls:
        center = canvas.to_pixel(ball.position)
        cv2.circle(image, center, radius_px, BALL_COLOR, -1)
        cv2.putText(
            image,
            ball.identity,
            (center[0] + radius_px + 4, center[1] - radius_px - 4),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            BALL_COLOR,
            1,
        )

    ax, ay = state.aim_position
    dx, dy = state.aim_direction
    tip = canvas.to_pixel((ax, ay))
    ahead = canvas.to_pixel((ax + dx * AIM_LENGTH, ay + dy * AIM_LENGTH))
    cv2.circle(image, tip, 4, AIM_COLOR, -1)
    cv2.arrowedLine(image, tip, ahead, AIM_COLOR, line_thickness)

    return image


def save_preview(image: np.ndarray, path: Path) -> None:
    """Write a preview image to disk.

    Raises:
        OSError: If OpenCV cannot write the file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"Could not write preview image to {path}")
    logger.info("Saved preview to %s", path)

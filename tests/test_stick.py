"""Tests for the virtual cue stick."""

from __future__ import annotations

import math

import numpy as np

from augmented_billiards.config import StickConfig
from augmented_billiards.tracking.stick import VirtualStick, rotate_about_axis

HEAD = (1.0, 0.5, 1.6)
FORWARD = (1.0, 0.0, -1.0)


class TestRotateAboutAxis:
    def test_quarter_turn(self) -> None:
        rotated = rotate_about_axis(np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]), 90.0)
        np.testing.assert_allclose(rotated, (0, 1, 0), atol=1e-12)

    def test_axis_component_kept(self) -> None:
        rotated = rotate_about_axis(np.array([1.0, 0.0, 2.0]), np.array([0.0, 0.0, 1.0]), 180.0)
        np.testing.assert_allclose(rotated, (-1, 0, 2), atol=1e-12)


class TestVirtualStick:
    """Tests for VirtualStick.update and status."""

    def test_unrotated_stick(self, rectangle) -> None:
        stick = VirtualStick(start_rotate_deg=0.0)
        pose = stick.update(rectangle, HEAD, FORWARD)
        assert pose is not None
        np.testing.assert_allclose(pose.position, (1.5, 0.5, 0.0), atol=1e-12)
        np.testing.assert_allclose(pose.direction, (1.0, 0.0, 0.0), atol=1e-12)
        np.testing.assert_allclose(pose.start, (-0.5, 0.5, 0.0), atol=1e-12)

    def test_default_rotation_swings_aim(self, rectangle) -> None:
        pose = VirtualStick().update(rectangle, HEAD, FORWARD)
        angle = math.radians(15.0)
        np.testing.assert_allclose(pose.position, (1.5, 0.5, 0.0), atol=1e-12)
        np.testing.assert_allclose(
            pose.direction, (math.cos(angle), math.sin(angle), 0.0), atol=1e-12
        )

    def test_status_tracks_last_update(self, rectangle) -> None:
        stick = VirtualStick(start_rotate_deg=0.0)
        stick.update(rectangle, HEAD, FORWARD)
        position, direction = stick.status()
        np.testing.assert_allclose(position, (1.5, 0.5, 0.0), atol=1e-12)
        np.testing.assert_allclose(direction, (1.0, 0.0, 0.0), atol=1e-12)

    def test_initial_status(self) -> None:
        position, direction = VirtualStick().status()
        np.testing.assert_allclose(position, (0, 0, 0))
        np.testing.assert_allclose(direction, (0, 0, 1))

    def test_looking_straight_down_keeps_last_pose(self, rectangle) -> None:
        stick = VirtualStick(start_rotate_deg=0.0)
        stick.update(rectangle, HEAD, FORWARD)
        assert stick.update(rectangle, HEAD, (0.0, 0.0, -1.0)) is None
        position, _ = stick.status()
        np.testing.assert_allclose(position, (1.5, 0.5, 0.0), atol=1e-12)

    def test_no_table(self) -> None:
        stick = VirtualStick()
        assert stick.update(None, HEAD, FORWARD) is None

    def test_degenerate_table(self) -> None:
        corners = [(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)]
        assert VirtualStick().update(corners, HEAD, FORWARD) is None

    def test_from_config(self, rectangle) -> None:
        stick = VirtualStick.from_config(
            StickConfig(front_length=0.25, back_length=1.0, start_rotate_deg=0.0)
        )
        pose = stick.update(rectangle, HEAD, FORWARD)
        np.testing.assert_allclose(pose.position, (1.25, 0.5, 0.0), atol=1e-12)
        np.testing.assert_allclose(pose.start, (0.0, 0.5, 0.0), atol=1e-12)

    def test_status_is_copy(self, rectangle) -> None:
        stick = VirtualStick()
        stick.update(rectangle, HEAD, FORWARD)
        position, _ = stick.status()
        position[0] = 42.0
        assert stick.status()[0][0] != 42.0

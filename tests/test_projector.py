"""Tests for world <-> table projection."""

from __future__ import annotations

import numpy as np
import pytest

from augmented_billiards.geometry.basis import TableBasis, build_basis
from augmented_billiards.geometry.projector import (
    DegenerateBasisError,
    TableMapping,
    TableProjector,
    map_to_table,
    uv_direction_to_world,
    uv_to_world,
    world_to_uv,
    world_to_uv_direction,
)


class TestWorldToUv:
    """Tests for point projection."""

    def test_corners_map_to_table_bounds(self, rectangle) -> None:
        basis = build_basis(rectangle)
        expected = [(0, 0), (1, 0), (1, 0.5), (0, 0.5)]
        for corner, uv in zip(rectangle, expected):
            np.testing.assert_allclose(world_to_uv(basis, corner), uv, atol=1e-12)

    def test_oblique_corners(self, oblique) -> None:
        basis = build_basis(oblique)
        ratio = basis.aspect_ratio
        expected = [(0, 0), (1, 0), (1, ratio), (0, ratio)]
        for corner, uv in zip(oblique, expected):
            np.testing.assert_allclose(world_to_uv(basis, corner), uv, atol=1e-9)

    def test_out_of_plane_component_dropped(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(world_to_uv(basis, (1.0, 0.5, 0.3)), (0.5, 0.25))
        np.testing.assert_allclose(world_to_uv(basis, (1.0, 0.5, -0.3)), (0.5, 0.25))

    def test_point_outside_table(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(world_to_uv(basis, (3.0, -1.0, 0.0)), (1.5, -0.5))

    def test_round_trip_recovers_in_plane_projection(self, oblique) -> None:
        basis = build_basis(oblique)
        rng = np.random.default_rng(7)
        normal = basis.normal
        for _ in range(20):
            point = rng.uniform(-2, 3, size=3)
            restored = uv_to_world(basis, world_to_uv(basis, point))
            offset = point - basis.origin
            in_plane = point - float(offset @ normal) * normal
            np.testing.assert_allclose(restored, in_plane, atol=1e-9)

    def test_uv_round_trip(self, oblique) -> None:
        basis = build_basis(oblique)
        uv = (0.3, 0.2)
        np.testing.assert_allclose(world_to_uv(basis, uv_to_world(basis, uv)), uv, atol=1e-12)


class TestDirections:
    """Tests for direction projection."""

    def test_axis_directions(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(world_to_uv_direction(basis, (1, 0, 0)), (1, 0))
        np.testing.assert_allclose(world_to_uv_direction(basis, (0, 3, 0)), (0, 1))

    def test_result_is_unit(self, oblique) -> None:
        basis = build_basis(oblique)
        direction = world_to_uv_direction(basis, (0.4, 0.7, -0.1))
        assert np.linalg.norm(direction) == pytest.approx(1.0)

    def test_diagonal_is_isotropic(self, rectangle) -> None:
        basis = build_basis(rectangle)
        s = np.sqrt(0.5)
        np.testing.assert_allclose(world_to_uv_direction(basis, (1, 1, 0)), (s, s))

    def test_normal_direction_falls_back_to_long_axis(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(world_to_uv_direction(basis, (0, 0, 1)), (1, 0))
        np.testing.assert_allclose(world_to_uv_direction(basis, (0, 0, 0)), (1, 0))

    def test_out_of_plane_tilt_ignored(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(world_to_uv_direction(basis, (1, 0, -5)), (1, 0))

    def test_inverse_direction(self, rectangle) -> None:
        basis = build_basis(rectangle)
        np.testing.assert_allclose(uv_direction_to_world(basis, (1, 0)), (2, 0, 0))
        np.testing.assert_allclose(uv_direction_to_world(basis, (0, 1)), (0, 2, 0))

    def test_direction_round_trip_is_parallel(self, oblique) -> None:
        basis = build_basis(oblique)
        world = uv_direction_to_world(basis, (0.6, 0.8))
        np.testing.assert_allclose(world_to_uv_direction(basis, world), (0.6, 0.8), atol=1e-9)


class TestDegenerateBasis:
    """Tests for singular bases."""

    def test_collinear_corners(self) -> None:
        basis = build_basis([(0, 0, 0), (2, 0, 0), (3, 0, 0), (1, 0, 0)])
        with pytest.raises(DegenerateBasisError):
            world_to_uv(basis, (1, 1, 0))
        with pytest.raises(DegenerateBasisError):
            world_to_uv_direction(basis, (1, 0, 0))

    def test_parallel_edges(self) -> None:
        basis = TableBasis(
            origin=np.zeros(3),
            edge_long=np.array([1.0, 0.0, 0.0]),
            edge_short=np.array([-1.0, 0.0, 0.0]),
            length_long=1.0,
            aspect_ratio=1.0,
        )
        with pytest.raises(DegenerateBasisError):
            TableProjector(basis)


class TestMapToTable:
    """Tests for map_to_table."""

    def test_maps_all_inputs(self, rectangle) -> None:
        mapping = map_to_table(
            rectangle,
            [(0.5, 0.5, 0.0), (1.5, 0.25, 0.01)],
            (0.2, 0.5, 0.0),
            (1.0, 0.0, 0.0),
        )
        assert isinstance(mapping, TableMapping)
        assert mapping.table_size == pytest.approx((1.0, 0.5))
        np.testing.assert_allclose(mapping.ball_uvs[0], (0.25, 0.25))
        np.testing.assert_allclose(mapping.ball_uvs[1], (0.75, 0.125))
        np.testing.assert_allclose(mapping.aim_position, (0.1, 0.25))
        np.testing.assert_allclose(mapping.aim_direction, (1.0, 0.0))

    def test_no_balls(self, unit_square) -> None:
        mapping = map_to_table(unit_square, [], (0.5, 0.5, 0), (0, 1, 0))
        assert mapping is not None
        assert mapping.ball_uvs == []

    def test_degenerate_quad_returns_none(self) -> None:
        corners = [(0, 0, 0), (0, 0, 0), (1, 1, 0), (0, 1, 0)]
        assert map_to_table(corners, [], (0, 0, 0), (1, 0, 0)) is None

    def test_degenerate_basis_returns_none(self) -> None:
        corners = [(0, 0, 0), (2, 0, 0), (3, 0, 0), (1, 0, 0)]
        assert map_to_table(corners, [], (0, 0, 0), (1, 0, 0)) is None

    def test_missing_corners_returns_none(self) -> None:
        assert map_to_table([(0, 0, 0)], [], (0, 0, 0), (1, 0, 0)) is None

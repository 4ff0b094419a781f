"""Tests for table basis construction."""

from __future__ import annotations

import numpy as np
import pytest

from augmented_billiards.geometry.basis import (
    DegenerateQuadError,
    TableBasis,
    as_vector,
    build_basis,
)


class TestBuildBasis:
    """Tests for build_basis."""

    def test_unit_square(self, unit_square) -> None:
        basis = build_basis(unit_square)
        assert isinstance(basis, TableBasis)
        np.testing.assert_allclose(basis.origin, [0, 0, 0])
        np.testing.assert_allclose(basis.edge_long, [1, 0, 0])
        np.testing.assert_allclose(basis.edge_short, [0, 1, 0])
        assert basis.length_long == pytest.approx(1.0)
        assert basis.aspect_ratio == pytest.approx(1.0)

    def test_short_edge_is_rescaled(self, rectangle) -> None:
        basis = build_basis(rectangle)
        assert basis.aspect_ratio == pytest.approx(0.5)
        assert basis.length_long == pytest.approx(2.0)
        np.testing.assert_allclose(basis.edge_long, [2, 0, 0])
        np.testing.assert_allclose(basis.edge_short, [0, 2, 0])
        assert basis.table_size == pytest.approx((1.0, 0.5))

    def test_long_edge_from_last_corner(self) -> None:
        corners = [(0, 0, 0), (1, 0, 0), (1, 3, 0), (0, 3, 0)]
        basis = build_basis(corners)
        np.testing.assert_allclose(basis.edge_long, [0, 3, 0])
        np.testing.assert_allclose(basis.edge_short, [3, 0, 0])
        assert basis.aspect_ratio == pytest.approx(1 / 3)

    def test_equal_edges_prefer_first(self) -> None:
        basis = build_basis([(0, 0, 0), (0, 0, 2), (2, 0, 2), (2, 0, 0)])
        np.testing.assert_allclose(basis.edge_long, [0, 0, 2])

    def test_aspect_ratio_in_unit_interval(self, oblique) -> None:
        basis = build_basis(oblique)
        assert 0.0 < basis.aspect_ratio <= 1.0

    def test_corners_reproduce_parallelogram(self, oblique) -> None:
        basis = build_basis(oblique)
        for expected, actual in zip(oblique, basis.corners()):
            np.testing.assert_allclose(actual, expected, atol=1e-12)

    def test_normal_is_unit(self, oblique) -> None:
        basis = build_basis(oblique)
        assert np.linalg.norm(basis.normal) == pytest.approx(1.0)
        assert float(basis.normal @ basis.edge_long) == pytest.approx(0.0, abs=1e-12)

    def test_coincident_corners_rejected(self) -> None:
        with pytest.raises(DegenerateQuadError):
            build_basis([(0, 0, 0), (0, 0, 0), (1, 1, 0), (0, 1, 0)])

    def test_tiny_short_edge_rejected(self) -> None:
        with pytest.raises(DegenerateQuadError):
            build_basis([(0, 0, 0), (1, 0, 0), (1, 0.0001, 0), (0, 0.0001, 0)])

    def test_degenerate_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            build_basis([(0, 0, 0)] * 4)

    def test_wrong_corner_count(self) -> None:
        with pytest.raises(ValueError, match="4 corners"):
            build_basis([(0, 0, 0), (1, 0, 0), (1, 1, 0)])

    def test_inputs_not_aliased(self, unit_square) -> None:
        basis = build_basis(unit_square)
        unit_square[0][0] = 5.0
        assert basis.origin[0] == 0.0


class TestAsVector:
    """Tests for as_vector."""

    def test_converts_sequence(self) -> None:
        vec = as_vector((1, 2, 3))
        assert vec.dtype == float
        np.testing.assert_allclose(vec, [1, 2, 3])

    def test_wrong_dimension(self) -> None:
        with pytest.raises(ValueError):
            as_vector((1, 2))

    def test_two_dimensional(self) -> None:
        np.testing.assert_allclose(as_vector([0.5, 0.25], dim=2), [0.5, 0.25])

"""Shared fixtures for geometry and prediction tests."""

from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def unit_square() -> list[np.ndarray]:
    """Unit square table in the z=0 plane."""
    return [
        np.array([0.0, 0.0, 0.0]),
        np.array([1.0, 0.0, 0.0]),
        np.array([1.0, 1.0, 0.0]),
        np.array([0.0, 1.0, 0.0]),
    ]


@pytest.fixture
def rectangle() -> list[np.ndarray]:
    """2 x 1 table in the z=0 plane."""
    return [
        np.array([0.0, 0.0, 0.0]),
        np.array([2.0, 0.0, 0.0]),
        np.array([2.0, 1.0, 0.0]),
        np.array([0.0, 1.0, 0.0]),
    ]


@pytest.fixture
def oblique() -> list[np.ndarray]:
    """Tilted, non-rectangular parallelogram."""
    p0 = np.array([0.3, -0.2, 0.1])
    e1 = np.array([2.0, 0.1, 0.0])
    e2 = np.array([0.5, 1.0, 0.2])
    return [p0, p0 + e1, p0 + e1 + e2, p0 + e2]

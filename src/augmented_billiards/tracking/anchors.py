"""Hand-placed table corner anchors."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ..geometry.basis import as_vector

logger = logging.getLogger(__name__)

MANUAL_ANCHORS = 3  # The fourth corner is derived


def complete_parallelogram(
    p0: Sequence[float],
    p1: Sequence[float],
    p2: Sequence[float],
) -> np.ndarray:
    """Fourth corner of the parallelogram p0, p1, p2, p3."""
    return as_vector(p2) + (as_vector(p0) - as_vector(p1))


class AnchorSet:
    """Collects three table corners and derives the fourth."""

    def __init__(self) -> None:
        self._anchors: list[np.ndarray] = []
        self._derived: np.ndarray | None = None

    @property
    def anchors(self) -> list[np.ndarray]:
        """Manually placed anchors, in placement order."""
        return list(self._anchors)

    @property
    def is_stable(self) -> bool:
        """True once all three manual anchors are placed."""
        return self._derived is not None

    def add(self, point: Sequence[float]) -> bool:
        """Place the next anchor.

        Returns:
            False if all anchors are already placed.
        """
        if len(self._anchors) >= MANUAL_ANCHORS:
            return False
        self._anchors.append(as_vector(point))
        if len(self._anchors) == MANUAL_ANCHORS:
            self._derived = complete_parallelogram(*self._anchors)
            logger.info("Table corners complete: %s", self.bounds())
        return True

    def undo(self) -> None:
        """Remove the most recent anchor."""
        if self._anchors:
            self._anchors.pop()
        self._derived = None

    def clear(self) -> None:
        self._anchors = []
        self._derived = None

    def bounds(self) -> list[np.ndarray] | None:
        """The four ordered table corners, or None until stable."""
        if self._derived is None:
            return None
        return [*self._anchors, self._derived]

    def preview_outline(
        self,
        cursor: Sequence[float],
    ) -> list[tuple[np.ndarray, np.ndarray]]:
        """Outline segments to show while placing anchors.

        Args:
            cursor: Where the next anchor would land.

        Returns:
            Line segments as (start, end) pairs.
        """
        cur = as_vector(cursor)
        if len(self._anchors) == 1:
            return [(self._anchors[0], cur)]
        if len(self._anchors) == 2:
            p0, p1 = self._anchors
            corners = [p0, p1, cur, complete_parallelogram(p0, p1, cur)]
        elif self._derived is not None:
            corners = [*self._anchors, self._derived]
        else:
            return []
        return [(corners[i], corners[(i + 1) % 4]) for i in range(4)]

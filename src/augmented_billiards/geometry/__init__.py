"""Table frame construction and world/table projection."""

from .basis import DegenerateQuadError, TableBasis, build_basis
from .intersect import plane_from_corners, ray_hits_table, ray_intersects_triangle
from .projector import (
    DegenerateBasisError,
    TableMapping,
    TableProjector,
    map_to_table,
    uv_direction_to_world,
    uv_to_world,
    world_to_uv,
    world_to_uv_direction,
)

__all__ = [
    "DegenerateQuadError",
    "TableBasis",
    "build_basis",
    "plane_from_corners",
    "ray_hits_table",
    "ray_intersects_triangle",
    "DegenerateBasisError",
    "TableMapping",
    "TableProjector",
    "map_to_table",
    "uv_direction_to_world",
    "uv_to_world",
    "world_to_uv",
    "world_to_uv_direction",
]

"""Collaborator-side state: table anchors, ball markers and the aim stick."""

from .anchors import AnchorSet, complete_parallelogram
from .markers import BallMarker, Detection, MarkerSet
from .stick import AimPose, VirtualStick

__all__ = [
    "AnchorSet",
    "complete_parallelogram",
    "BallMarker",
    "Detection",
    "MarkerSet",
    "AimPose",
    "VirtualStick",
]

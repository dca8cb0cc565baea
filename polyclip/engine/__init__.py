"""Scan-line polygon clipping and offsetting engine."""

from .clipper import Clipper, SweepState
from .errors import ClipperError, InvariantError, PathError
from .offset import ClipperOffset, EndType, JoinType
from .types import ClipResult, ClipType, PolyFillType, PolyType

__all__ = [
    # Boolean operations
    "Clipper",
    "ClipResult",
    "ClipType",
    "PolyFillType",
    "PolyType",
    "SweepState",
    # Offsetting
    "ClipperOffset",
    "JoinType",
    "EndType",
    # Errors
    "ClipperError",
    "InvariantError",
    "PathError",
]

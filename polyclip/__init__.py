"""polyclip - Boolean clipping and offsetting of integer polygons.

This package provides:
- A scan-line engine for intersection, union, difference and xor of
  polygons and polylines under even-odd, non-zero, positive and negative
  fill rules
- Polygon offsetting with square, round and mitered joins
- Path cleaning, simplification and Minkowski sums
- Conversion to and from Shapely geometries

Typical use:
    from polyclip import ClipType, combine
    result = combine(subject, clip, ClipType.UNION)
    if result.succeeded:
        paths = result.paths
"""

from .engine import (
    Clipper,
    ClipperError,
    ClipperOffset,
    ClipResult,
    ClipType,
    EndType,
    InvariantError,
    JoinType,
    PathError,
    PolyFillType,
    PolyType,
    SweepState,
)
from .geometry.polygon_ops import (
    clean_polygon,
    clean_polygons,
    combine,
    minkowski_diff,
    minkowski_sum,
    offset_paths,
    simplify_polygon,
    simplify_polygons,
)
from .geometry.primitives import (
    IntPoint,
    IntRect,
    Path,
    Paths,
    PointLocation,
    PolyNode,
    PolyTree,
    area,
    orientation,
    point_in_polygon,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Clipper",
    "ClipperOffset",
    "ClipResult",
    "ClipType",
    "PolyFillType",
    "PolyType",
    "JoinType",
    "EndType",
    "SweepState",
    # Errors
    "ClipperError",
    "InvariantError",
    "PathError",
    # Operations
    "combine",
    "offset_paths",
    "clean_polygon",
    "clean_polygons",
    "simplify_polygon",
    "simplify_polygons",
    "minkowski_sum",
    "minkowski_diff",
    # Primitives
    "IntPoint",
    "IntRect",
    "Path",
    "Paths",
    "PointLocation",
    "PolyNode",
    "PolyTree",
    "area",
    "orientation",
    "point_in_polygon",
]

"""Integer path primitives and Shapely conversion.

Engine-backed operations live in ``polyclip.geometry.polygon_ops``; they
are not imported here because the engine itself depends on this package.
"""

from .primitives import (
    IntPoint,
    IntRect,
    Path,
    Paths,
    PointLocation,
    PolyNode,
    PolyTree,
    area,
    closed_paths_from_polytree,
    get_bounds,
    open_paths_from_polytree,
    orientation,
    point_in_polygon,
    polytree_to_paths,
    reverse_path,
    reverse_paths,
)
from .shapely_bridge import (
    DEFAULT_SCALE,
    paths_to_geometry,
    polygon_to_paths,
    polytree_to_geometry,
    scale_path,
    unscale_path,
)

__all__ = [
    # Path primitives
    "IntPoint",
    "IntRect",
    "Path",
    "Paths",
    "PointLocation",
    "area",
    "orientation",
    "reverse_path",
    "reverse_paths",
    "point_in_polygon",
    "get_bounds",
    # Polygon trees
    "PolyNode",
    "PolyTree",
    "polytree_to_paths",
    "closed_paths_from_polytree",
    "open_paths_from_polytree",
    # Shapely conversion
    "DEFAULT_SCALE",
    "scale_path",
    "unscale_path",
    "polygon_to_paths",
    "polytree_to_geometry",
    "paths_to_geometry",
]

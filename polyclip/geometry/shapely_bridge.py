"""Conversion between Shapely geometries and integer engine paths.

Float coordinates are multiplied by a scale factor and rounded to integers
before clipping, then divided back afterwards. A scale of 1000 keeps
millimetre precision for metre-based inputs.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.polygon import orient
from shapely.validation import make_valid

from .primitives import IntPoint, Path, Paths, PolyNode, PolyTree, area, point_in_polygon

logger = logging.getLogger(__name__)

# Type aliases
Coords = list[tuple[float, float]]
PolygonLike = Polygon | MultiPolygon

DEFAULT_SCALE = 1000.0


def _round(value: float) -> int:
    return int(value - 0.5) if value < 0 else int(value + 0.5)


def scale_path(coords: Iterable[Sequence[float]], scale: float = DEFAULT_SCALE) -> Path:
    """Scale float coordinates into an integer path.

    Args:
        coords: Sequence of (x, y) floats
        scale: Multiplier applied before rounding

    Returns:
        Path of IntPoints
    """
    return [IntPoint(_round(c[0] * scale), _round(c[1] * scale)) for c in coords]


def unscale_path(path: Iterable[Sequence[int]], scale: float = DEFAULT_SCALE) -> Coords:
    """Convert an integer path back to float coordinates."""
    return [(p[0] / scale, p[1] / scale) for p in path]


def polygon_to_paths(polygon: PolygonLike, scale: float = DEFAULT_SCALE) -> Paths:
    """Convert a (Multi)Polygon into engine paths.

    Rings are oriented so exteriors have positive area and holes negative,
    which makes the result correct under both even-odd and non-zero fill.
    The closing vertex Shapely repeats is dropped.

    Args:
        polygon: Polygon or MultiPolygon
        scale: Multiplier applied before rounding

    Returns:
        One path per ring, exteriors before their holes
    """
    if polygon is None or polygon.is_empty:
        return []

    if isinstance(polygon, MultiPolygon):
        paths: Paths = []
        for geom in polygon.geoms:
            paths.extend(polygon_to_paths(geom, scale))
        return paths

    oriented = orient(polygon, sign=1.0)
    paths = [scale_path(oriented.exterior.coords[:-1], scale)]
    for interior in oriented.interiors:
        paths.append(scale_path(interior.coords[:-1], scale))
    return paths


def _node_to_polygon(node: PolyNode, scale: float) -> Polygon:
    holes = [unscale_path(child.contour, scale) for child in node.children]
    return Polygon(unscale_path(node.contour, scale), holes)


def _collect_outers(node: PolyNode, scale: float, polygons: list[Polygon]) -> None:
    for child in node.children:
        if child.is_open:
            continue
        if not child.is_hole:
            polygons.append(_node_to_polygon(child, scale))
        _collect_outers(child, scale, polygons)


def _to_geometry(polygons: list[Polygon]) -> PolygonLike:
    valid = []
    for p in polygons:
        if p.is_empty:
            continue
        if not p.is_valid:
            p = make_valid(p)
        valid.append(p)

    if not valid:
        return Polygon()
    if len(valid) == 1:
        return valid[0]
    flat: list[Polygon] = []
    for geom in valid:
        if isinstance(geom, MultiPolygon):
            flat.extend(geom.geoms)
        elif isinstance(geom, Polygon):
            flat.append(geom)
    return MultiPolygon(flat)


def polytree_to_geometry(tree: PolyTree, scale: float = DEFAULT_SCALE) -> PolygonLike:
    """Convert a PolyTree into a Polygon or MultiPolygon.

    Every outer node becomes a polygon whose interiors are the node's hole
    children; outers nested inside holes become separate polygons. Open
    paths are ignored.
    """
    polygons: list[Polygon] = []
    _collect_outers(tree, scale, polygons)
    return _to_geometry(polygons)


def paths_to_geometry(paths: Paths, scale: float = DEFAULT_SCALE) -> PolygonLike:
    """Convert flat engine output into a Polygon or MultiPolygon.

    Positive-area paths are exteriors. Each negative-area path is attached
    to the smallest exterior that contains its first vertex.
    """
    outers: list[tuple[Path, float]] = []
    holes: list[Path] = []
    for path in paths:
        if len(path) < 3:
            continue
        a = area(path)
        if a > 0:
            outers.append((path, a))
        elif a < 0:
            holes.append(path)

    outers.sort(key=lambda item: item[1])
    assigned: dict[int, list[Path]] = {i: [] for i in range(len(outers))}
    for hole in holes:
        for i, (outer, _) in enumerate(outers):
            if point_in_polygon(hole[0], outer) != 0:
                assigned[i].append(hole)
                break
        else:
            logger.debug(f"Hole with {len(hole)} vertices has no enclosing outer; dropped")

    polygons = [
        Polygon(unscale_path(outer, scale), [unscale_path(h, scale) for h in assigned[i]])
        for i, (outer, _) in enumerate(outers)
    ]
    return _to_geometry(polygons)

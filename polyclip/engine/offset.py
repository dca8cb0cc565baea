"""Polygon and polyline offsetting (inflate / deflate).

Each path is offset edge by edge along unit normals; corners are closed
with miter, square or round joins and open path ends with butt, square or
round caps. The raw offset paths may overlap themselves, so they are
resolved by a self-union through the Boolean engine.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence

from ..geometry.primitives import (
    IntPoint,
    Path,
    Paths,
    PolyTree,
    get_bounds,
    orientation,
    to_path,
)
from .base import cround
from .clipper import Clipper
from .types import ClipType, PolyFillType, PolyType, near_zero

if TYPE_CHECKING:
    from ..models.options import OffsetOptions

logger = logging.getLogger(__name__)

TWO_PI = math.pi * 2
DEFAULT_ARC_TOLERANCE = 0.25


class JoinType(Enum):
    """How convex corners are closed when offsetting."""
    SQUARE = "square"
    ROUND = "round"
    MITER = "miter"


class EndType(Enum):
    """How path ends are treated when offsetting."""
    CLOSED_POLYGON = "closed_polygon"
    CLOSED_LINE = "closed_line"
    OPEN_BUTT = "open_butt"
    OPEN_SQUARE = "open_square"
    OPEN_ROUND = "open_round"


@dataclass
class _OffsetPath:
    contour: Path
    join_type: JoinType
    end_type: EndType


@dataclass
class _Normal:
    x: float = 0.0
    y: float = 0.0

    def negated(self) -> _Normal:
        return _Normal(-self.x, -self.y)


def get_unit_normal(pt1: IntPoint, pt2: IntPoint) -> _Normal:
    """Unit normal of the segment pt1 -> pt2 (zero for coincident points)."""
    dx = pt2.x - pt1.x
    dy = pt2.y - pt1.y
    if dx == 0 and dy == 0:
        return _Normal()
    f = 1.0 / math.sqrt(dx * dx + dy * dy)
    return _Normal(dy * f, -dx * f)


@dataclass
class _OffsetState:
    """Per-call working values for one offset run."""

    delta: float
    sin: float = 0.0
    cos: float = 0.0
    sin_a: float = 0.0
    miter_lim: float = 0.5
    steps_per_rad: float = 0.0
    src: Path = field(default_factory=list)
    dest: Path = field(default_factory=list)
    normals: list[_Normal] = field(default_factory=list)


class ClipperOffset:
    """Offsets closed polygons and open polylines by a signed distance.

    Example:
        co = ClipperOffset(miter_limit=3.0)
        co.add_path(square, JoinType.MITER, EndType.CLOSED_POLYGON)
        grown = co.execute(10.0)
    """

    def __init__(self, miter_limit: float = 2.0, arc_tolerance: float = DEFAULT_ARC_TOLERANCE) -> None:
        self.miter_limit = miter_limit
        self.arc_tolerance = arc_tolerance
        self._paths: list[_OffsetPath] = []
        self._lowest: tuple[int, int] | None = None

    @classmethod
    def from_options(cls, options: OffsetOptions) -> ClipperOffset:
        return cls(miter_limit=options.miter_limit, arc_tolerance=options.arc_tolerance)

    def clear(self) -> None:
        self._paths = []
        self._lowest = None

    def add_path(self, path: Sequence[Sequence[int]], join_type: JoinType, end_type: EndType) -> None:
        """Queue a path for offsetting.

        Consecutive duplicate vertices are dropped. Closed polygons with
        fewer than three distinct vertices are ignored.
        """
        src = to_path(path)
        high_i = len(src) - 1
        if high_i < 0:
            return
        if end_type in (EndType.CLOSED_LINE, EndType.CLOSED_POLYGON):
            while high_i > 0 and src[0] == src[high_i]:
                high_i -= 1

        contour = [src[0]]
        k = 0
        for i in range(1, high_i + 1):
            if contour[-1] != src[i]:
                contour.append(src[i])
                if src[i].y > contour[k].y or (src[i].y == contour[k].y and src[i].x < contour[k].x):
                    k = len(contour) - 1
        if end_type == EndType.CLOSED_POLYGON and len(contour) < 3:
            return

        self._paths.append(_OffsetPath(contour, join_type, end_type))

        # track the closed polygon holding the bottom-most vertex
        if end_type != EndType.CLOSED_POLYGON:
            return
        if self._lowest is None:
            self._lowest = (len(self._paths) - 1, k)
        else:
            node_idx, pt_idx = self._lowest
            ip = self._paths[node_idx].contour[pt_idx]
            if contour[k].y > ip.y or (contour[k].y == ip.y and contour[k].x < ip.x):
                self._lowest = (len(self._paths) - 1, k)

    def add_paths(self, paths: Iterable[Sequence[Sequence[int]]], join_type: JoinType, end_type: EndType) -> None:
        for path in paths:
            self.add_path(path, join_type, end_type)

    def execute(self, delta: float) -> Paths:
        """Offset every queued path by delta.

        Args:
            delta: Positive to inflate, negative to deflate

        Returns:
            Offset paths, empty when deflating consumes everything
        """
        raw = self._prepare(delta)
        clipper = Clipper()
        clipper.add_paths(raw, PolyType.SUBJECT, True)
        if delta > 0:
            result = clipper.execute(ClipType.UNION, PolyFillType.POSITIVE, PolyFillType.POSITIVE)
            return result.paths

        clipper.add_path(self._outer_rect(raw), PolyType.SUBJECT, True)
        clipper.reverse_solution = True
        result = clipper.execute(ClipType.UNION, PolyFillType.NEGATIVE, PolyFillType.NEGATIVE)
        # first path is the bounding rectangle
        return result.paths[1:]

    def execute_tree(self, delta: float) -> PolyTree:
        """Offset every queued path by delta, returning the nesting of the result."""
        raw = self._prepare(delta)
        clipper = Clipper()
        clipper.add_paths(raw, PolyType.SUBJECT, True)
        if delta > 0:
            return clipper.execute_tree(ClipType.UNION, PolyFillType.POSITIVE, PolyFillType.POSITIVE).tree

        clipper.add_path(self._outer_rect(raw), PolyType.SUBJECT, True)
        clipper.reverse_solution = True
        tree = clipper.execute_tree(ClipType.UNION, PolyFillType.NEGATIVE, PolyFillType.NEGATIVE).tree
        # lift the bounding rectangle's holes to the root
        if len(tree.children) == 1 and tree.children[0].children:
            outer_node = tree.children[0]
            tree.children = []
            for child in outer_node.children:
                tree.add_child(child)
        else:
            tree.clear()
        return tree

    @staticmethod
    def _outer_rect(paths: Paths) -> Path:
        r = get_bounds(paths)
        return [
            IntPoint(r.left - 10, r.bottom + 10),
            IntPoint(r.right + 10, r.bottom + 10),
            IntPoint(r.right + 10, r.top - 10),
            IntPoint(r.left - 10, r.top - 10),
        ]

    def _prepare(self, delta: float) -> Paths:
        self._fix_orientations()
        raw = self._do_offset(delta)
        logger.debug(f"Offset by {delta}: {len(self._paths)} input paths, {len(raw)} raw paths")
        return raw

    def _fix_orientations(self) -> None:
        # if the polygon holding the lowest vertex is clockwise, every
        # closed polygon is reversed
        if self._lowest is not None and not orientation(self._paths[self._lowest[0]].contour):
            for node in self._paths:
                if node.end_type == EndType.CLOSED_POLYGON or (
                    node.end_type == EndType.CLOSED_LINE and orientation(node.contour)
                ):
                    node.contour.reverse()
        else:
            for node in self._paths:
                if node.end_type == EndType.CLOSED_LINE and not orientation(node.contour):
                    node.contour.reverse()

    def _do_offset(self, delta: float) -> Paths:
        dest_polys: Paths = []

        if near_zero(delta):
            return [list(node.contour) for node in self._paths if node.end_type == EndType.CLOSED_POLYGON]

        st = _OffsetState(delta=delta)
        if self.miter_limit > 2:
            st.miter_lim = 2 / (self.miter_limit * self.miter_limit)

        if self.arc_tolerance <= 0.0:
            y = DEFAULT_ARC_TOLERANCE
        elif self.arc_tolerance > abs(delta) * DEFAULT_ARC_TOLERANCE:
            y = abs(delta) * DEFAULT_ARC_TOLERANCE
        else:
            y = self.arc_tolerance
        steps = math.pi / math.acos(1 - y / abs(delta))
        st.sin = math.sin(TWO_PI / steps)
        st.cos = math.cos(TWO_PI / steps)
        st.steps_per_rad = steps / TWO_PI
        if delta < 0.0:
            st.sin = -st.sin

        for node in self._paths:
            st.src = node.contour
            length = len(st.src)
            if length == 0 or (delta <= 0 and (length < 3 or node.end_type != EndType.CLOSED_POLYGON)):
                continue

            st.dest = []
            if length == 1:
                self._offset_single_point(st, node.join_type, steps)
                dest_polys.append(st.dest)
                continue

            st.normals = [get_unit_normal(st.src[j], st.src[j + 1]) for j in range(length - 1)]
            if node.end_type in (EndType.CLOSED_LINE, EndType.CLOSED_POLYGON):
                st.normals.append(get_unit_normal(st.src[length - 1], st.src[0]))
            else:
                st.normals.append(_Normal(st.normals[length - 2].x, st.normals[length - 2].y))

            if node.end_type == EndType.CLOSED_POLYGON:
                k = length - 1
                for j in range(length):
                    k = self._offset_point(st, j, k, node.join_type)
                dest_polys.append(st.dest)
            elif node.end_type == EndType.CLOSED_LINE:
                k = length - 1
                for j in range(length):
                    k = self._offset_point(st, j, k, node.join_type)
                dest_polys.append(st.dest)
                st.dest = []
                # walk back along the other side
                n = st.normals[length - 1]
                for j in range(length - 1, 0, -1):
                    st.normals[j] = st.normals[j - 1].negated()
                st.normals[0] = n.negated()
                k = 0
                for j in range(length - 1, -1, -1):
                    k = self._offset_point(st, j, k, node.join_type)
                dest_polys.append(st.dest)
            else:
                self._offset_open_path(st, node)
                dest_polys.append(st.dest)
        return dest_polys

    def _offset_single_point(self, st: _OffsetState, join_type: JoinType, steps: float) -> None:
        pt = st.src[0]
        if join_type == JoinType.ROUND:
            x, y = 1.0, 0.0
            j = 1
            while j <= steps:
                st.dest.append(IntPoint(cround(pt.x + x * st.delta), cround(pt.y + y * st.delta)))
                x2 = x
                x = x * st.cos - st.sin * y
                y = x2 * st.sin + y * st.cos
                j += 1
        else:
            x, y = -1.0, -1.0
            for _ in range(4):
                st.dest.append(IntPoint(cround(pt.x + x * st.delta), cround(pt.y + y * st.delta)))
                if x < 0:
                    x = 1.0
                elif y < 0:
                    y = 1.0
                else:
                    x = -1.0

    def _offset_open_path(self, st: _OffsetState, node: _OffsetPath) -> None:
        src, normals, delta = st.src, st.normals, st.delta
        length = len(src)
        k = 0
        for j in range(1, length - 1):
            k = self._offset_point(st, j, k, node.join_type)

        if node.end_type == EndType.OPEN_BUTT:
            j = length - 1
            st.dest.append(IntPoint(cround(src[j].x + normals[j].x * delta), cround(src[j].y + normals[j].y * delta)))
            st.dest.append(IntPoint(cround(src[j].x - normals[j].x * delta), cround(src[j].y - normals[j].y * delta)))
        else:
            j = length - 1
            k = length - 2
            st.sin_a = 0.0
            normals[j] = normals[j].negated()
            if node.end_type == EndType.OPEN_SQUARE:
                self._do_square(st, j, k)
            else:
                self._do_round(st, j, k)

        # walk back along the other side
        for j in range(length - 1, 0, -1):
            normals[j] = normals[j - 1].negated()
        normals[0] = normals[1].negated()

        k = length - 1
        for j in range(k - 1, 0, -1):
            k = self._offset_point(st, j, k, node.join_type)

        if node.end_type == EndType.OPEN_BUTT:
            st.dest.append(IntPoint(cround(src[0].x - normals[0].x * delta), cround(src[0].y - normals[0].y * delta)))
            st.dest.append(IntPoint(cround(src[0].x + normals[0].x * delta), cround(src[0].y + normals[0].y * delta)))
        else:
            st.sin_a = 0.0
            if node.end_type == EndType.OPEN_SQUARE:
                self._do_square(st, 0, 1)
            else:
                self._do_round(st, 0, 1)

    def _offset_point(self, st: _OffsetState, j: int, k: int, join_type: JoinType) -> int:
        """Emit the offset vertices for src[j]; returns the new k."""
        nj, nk = st.normals[j], st.normals[k]
        src_pt = st.src[j]
        # cross product
        st.sin_a = nk.x * nj.y - nj.x * nk.y
        if abs(st.sin_a * st.delta) < 1.0:
            # dot product
            cos_a = nk.x * nj.x + nj.y * nk.y
            if cos_a > 0:
                # angle close to 0 degrees
                st.dest.append(IntPoint(cround(src_pt.x + nk.x * st.delta), cround(src_pt.y + nk.y * st.delta)))
                return k
            # otherwise close to 180 degrees
        elif st.sin_a > 1.0:
            st.sin_a = 1.0
        elif st.sin_a < -1.0:
            st.sin_a = -1.0

        if st.sin_a * st.delta < 0:
            st.dest.append(IntPoint(cround(src_pt.x + nk.x * st.delta), cround(src_pt.y + nk.y * st.delta)))
            st.dest.append(src_pt)
            st.dest.append(IntPoint(cround(src_pt.x + nj.x * st.delta), cround(src_pt.y + nj.y * st.delta)))
        elif join_type == JoinType.MITER:
            r = 1 + (nj.x * nk.x + nj.y * nk.y)
            if r >= st.miter_lim:
                self._do_miter(st, j, k, r)
            else:
                self._do_square(st, j, k)
        elif join_type == JoinType.SQUARE:
            self._do_square(st, j, k)
        else:
            self._do_round(st, j, k)
        return j

    @staticmethod
    def _do_square(st: _OffsetState, j: int, k: int) -> None:
        nj, nk = st.normals[j], st.normals[k]
        src_pt = st.src[j]
        dx = math.tan(math.atan2(st.sin_a, nk.x * nj.x + nk.y * nj.y) / 4)
        st.dest.append(IntPoint(
            cround(src_pt.x + st.delta * (nk.x - nk.y * dx)),
            cround(src_pt.y + st.delta * (nk.y + nk.x * dx)),
        ))
        st.dest.append(IntPoint(
            cround(src_pt.x + st.delta * (nj.x + nj.y * dx)),
            cround(src_pt.y + st.delta * (nj.y - nj.x * dx)),
        ))

    @staticmethod
    def _do_miter(st: _OffsetState, j: int, k: int, r: float) -> None:
        nj, nk = st.normals[j], st.normals[k]
        src_pt = st.src[j]
        q = st.delta / r
        st.dest.append(IntPoint(cround(src_pt.x + (nk.x + nj.x) * q), cround(src_pt.y + (nk.y + nj.y) * q)))

    @staticmethod
    def _do_round(st: _OffsetState, j: int, k: int) -> None:
        nj, nk = st.normals[j], st.normals[k]
        src_pt = st.src[j]
        a = math.atan2(st.sin_a, nk.x * nj.x + nk.y * nj.y)
        steps = max(cround(st.steps_per_rad * abs(a)), 1)

        x, y = nk.x, nk.y
        for _ in range(steps):
            st.dest.append(IntPoint(cround(src_pt.x + x * st.delta), cround(src_pt.y + y * st.delta)))
            x2 = x
            x = x * st.cos - st.sin * y
            y = x2 * st.sin + y * st.cos
        st.dest.append(IntPoint(cround(src_pt.x + nj.x * st.delta), cround(src_pt.y + nj.y * st.delta)))

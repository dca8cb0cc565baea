"""Integer geometry primitives shared by the clipping and offsetting engine.

Coordinates are plain Python ints, so products used by slope and
orientation tests are exact regardless of magnitude.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, NamedTuple, Sequence


class IntPoint(NamedTuple):
    """A vertex in fixed-precision integer space."""

    x: int
    y: int


class IntRect(NamedTuple):
    """Axis-aligned integer bounding box."""

    left: int
    top: int
    right: int
    bottom: int


# Type aliases
Path = list[IntPoint]
Paths = list[Path]
PathLike = Sequence[tuple[int, int]]


class PointLocation(IntEnum):
    """Classification returned by point_in_polygon."""

    ON_BOUNDARY = -1
    OUTSIDE = 0
    INSIDE = 1


def to_path(points: Iterable[Sequence[int]]) -> Path:
    """Normalise a sequence of (x, y) pairs into a Path of IntPoints."""
    return [IntPoint(int(p[0]), int(p[1])) for p in points]


def to_paths(paths: Iterable[Iterable[Sequence[int]]]) -> Paths:
    """Normalise a sequence of paths."""
    return [to_path(p) for p in paths]


def area(path: PathLike) -> float:
    """Signed area of a closed path.

    Positive for counter-clockwise paths when Y points up. Paths with fewer
    than three vertices have zero area.

    Args:
        path: Polygon vertices (closing vertex not repeated)

    Returns:
        Signed area in square coordinate units
    """
    cnt = len(path)
    if cnt < 3:
        return 0.0
    a = 0
    j = cnt - 1
    for i in range(cnt):
        a += (path[j][0] + path[i][0]) * (path[j][1] - path[i][1])
        j = i
    return -a * 0.5


def orientation(path: PathLike) -> bool:
    """True when the path winds counter-clockwise (non-negative area)."""
    return area(path) >= 0


def reverse_path(path: list) -> None:
    path.reverse()


def reverse_paths(paths: list[list]) -> None:
    for path in paths:
        path.reverse()


def point_in_polygon(pt: Sequence[int], path: PathLike) -> PointLocation:
    """Classify a point against a polygon.

    See "The Point in Polygon Problem for Arbitrary Polygons" by Hormann &
    Agathos. Uses exact integer cross products.

    Args:
        pt: Point to classify
        path: Polygon vertices

    Returns:
        PointLocation.INSIDE, OUTSIDE or ON_BOUNDARY
    """
    cnt = len(path)
    if cnt < 3:
        return PointLocation.OUTSIDE
    ptx, pty = pt[0], pt[1]
    result = 0
    ipx, ipy = path[0][0], path[0][1]
    for i in range(1, cnt + 1):
        nxt = path[0] if i == cnt else path[i]
        nx, ny = nxt[0], nxt[1]
        if ny == pty:
            if nx == ptx or (ipy == pty and ((nx > ptx) == (ipx < ptx))):
                return PointLocation.ON_BOUNDARY
        if (ipy < pty) != (ny < pty):
            if ipx >= ptx:
                if nx > ptx:
                    result = 1 - result
                else:
                    d = (ipx - ptx) * (ny - pty) - (nx - ptx) * (ipy - pty)
                    if d == 0:
                        return PointLocation.ON_BOUNDARY
                    if (d > 0) == (ny > ipy):
                        result = 1 - result
            elif nx > ptx:
                d = (ipx - ptx) * (ny - pty) - (nx - ptx) * (ipy - pty)
                if d == 0:
                    return PointLocation.ON_BOUNDARY
                if (d > 0) == (ny > ipy):
                    result = 1 - result
        ipx, ipy = nx, ny
    return PointLocation(result)


def get_bounds(paths: Iterable[PathLike]) -> IntRect:
    """Bounding box of every vertex in paths (all zero when empty)."""
    xs: list[int] = []
    ys: list[int] = []
    for path in paths:
        for p in path:
            xs.append(p[0])
            ys.append(p[1])
    if not xs:
        return IntRect(0, 0, 0, 0)
    return IntRect(min(xs), min(ys), max(xs), max(ys))


class PolyNode:
    """One contour in a polygon hierarchy.

    Children of an outer contour are its holes; children of a hole are the
    outers nested inside it. Open paths are always children of the root.
    """

    def __init__(self) -> None:
        self.parent: PolyNode | None = None
        self.contour: Path = []
        self.children: list[PolyNode] = []
        self.index = 0
        self.is_open = False

    @property
    def child_count(self) -> int:
        return len(self.children)

    @property
    def is_hole(self) -> bool:
        result = True
        node = self.parent
        while node is not None:
            result = not result
            node = node.parent
        return result

    def add_child(self, child: PolyNode) -> None:
        child.parent = self
        child.index = len(self.children)
        self.children.append(child)

    def get_next(self) -> PolyNode | None:
        """Next node in depth-first order, or None after the last one."""
        if self.children:
            return self.children[0]
        return self._get_next_sibling_up()

    def _get_next_sibling_up(self) -> PolyNode | None:
        if self.parent is None:
            return None
        if self.index == len(self.parent.children) - 1:
            return self.parent._get_next_sibling_up()
        return self.parent.children[self.index + 1]

    def __repr__(self) -> str:
        kind = "open" if self.is_open else ("hole" if self.is_hole else "outer")
        return f"PolyNode({kind}, points={len(self.contour)}, children={len(self.children)})"


class PolyTree(PolyNode):
    """Root of a polygon hierarchy; has no contour of its own."""

    def __init__(self) -> None:
        super().__init__()
        self.all_nodes: list[PolyNode] = []

    @property
    def is_hole(self) -> bool:
        return False

    @property
    def total(self) -> int:
        """Number of contours in the tree, excluding the root."""
        result = len(self.all_nodes)
        # with negative offsets the outer rectangle node is discarded
        if result > 0 and self.children and self.children[0] is not self.all_nodes[0]:
            result -= 1
        return result

    def get_first(self) -> PolyNode | None:
        return self.children[0] if self.children else None

    def clear(self) -> None:
        self.all_nodes = []
        self.children = []


def _add_node_to_paths(node: PolyNode, closed_only: bool, paths: Paths) -> None:
    match = not (closed_only and node.is_open)
    if node.contour and match:
        paths.append(node.contour)
    for child in node.children:
        _add_node_to_paths(child, closed_only, paths)


def polytree_to_paths(tree: PolyTree) -> Paths:
    """Flatten every contour in the tree, parents before children."""
    paths: Paths = []
    _add_node_to_paths(tree, False, paths)
    return paths


def closed_paths_from_polytree(tree: PolyTree) -> Paths:
    paths: Paths = []
    _add_node_to_paths(tree, True, paths)
    return paths


def open_paths_from_polytree(tree: PolyTree) -> Paths:
    return [child.contour for child in tree.children if child.is_open]

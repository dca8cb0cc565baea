"""Enums, constants and transient records used during a sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..geometry.primitives import IntPoint, Paths, PolyNode, PolyTree

HORIZONTAL = -3.4e38
SKIP = -2
UNASSIGNED = -1
TOLERANCE = 1.0e-20
HI_RANGE = 0x3FFFFFFFFFFFFFFF


def near_zero(val: float) -> bool:
    return -TOLERANCE < val < TOLERANCE


class ClipType(Enum):
    """Boolean operation applied between subject and clip polygons."""
    INTERSECTION = "intersection"
    UNION = "union"
    DIFFERENCE = "difference"
    XOR = "xor"


class PolyType(Enum):
    """Operand role of a path."""
    SUBJECT = "subject"
    CLIP = "clip"


class PolyFillType(Enum):
    """Fill rule deciding which winding counts are inside."""
    EVEN_ODD = "even_odd"
    NON_ZERO = "non_zero"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class EdgeSide(Enum):
    LEFT = 0
    RIGHT = 1


class Direction(Enum):
    RIGHT_TO_LEFT = 0
    LEFT_TO_RIGHT = 1


class TEdge:
    """Directed segment of an input path, with sweep bookkeeping."""

    __slots__ = (
        "bot", "curr", "top", "delta_x", "delta_y", "dx",
        "poly_type", "side", "wind_delta", "wind_cnt", "wind_cnt2",
        "out_idx", "next", "prev", "next_in_lml",
        "next_in_ael", "prev_in_ael", "next_in_sel", "prev_in_sel",
    )

    def __init__(self, pt: IntPoint) -> None:
        self.bot = pt
        self.curr = pt
        self.top = pt
        self.delta_x = 0
        self.delta_y = 0
        self.dx = 0.0
        self.poly_type = PolyType.SUBJECT
        self.side = EdgeSide.LEFT
        self.wind_delta = 0
        self.wind_cnt = 0
        self.wind_cnt2 = 0
        self.out_idx = UNASSIGNED
        self.next: TEdge | None = None
        self.prev: TEdge | None = None
        self.next_in_lml: TEdge | None = None
        self.next_in_ael: TEdge | None = None
        self.prev_in_ael: TEdge | None = None
        self.next_in_sel: TEdge | None = None
        self.prev_in_sel: TEdge | None = None

    def set_dx(self) -> None:
        self.delta_x = self.top.x - self.bot.x
        self.delta_y = self.top.y - self.bot.y
        if self.delta_y == 0:
            self.dx = HORIZONTAL
        else:
            self.dx = self.delta_x / self.delta_y

    def __repr__(self) -> str:
        return f"TEdge(bot={tuple(self.bot)}, top={tuple(self.top)}, out={self.out_idx})"


def is_horizontal(e: TEdge) -> bool:
    return e.delta_y == 0


class LocalMinima:
    __slots__ = ("y", "left_bound", "right_bound")

    def __init__(self, y: int, left_bound: TEdge | None, right_bound: TEdge | None) -> None:
        self.y = y
        self.left_bound = left_bound
        self.right_bound = right_bound


class OutPt:
    """Vertex in a circular doubly-linked output ring."""

    __slots__ = ("idx", "pt", "next", "prev")

    def __init__(self, idx: int, pt: IntPoint) -> None:
        self.idx = idx
        self.pt = pt
        self.next: OutPt = self
        self.prev: OutPt = self


class OutRec:
    """An output contour under construction.

    first_left references the ring that contains this one; it may go stale
    when that ring is merged away and is re-resolved with parse_first_left.
    """

    __slots__ = ("idx", "is_hole", "is_open", "first_left", "pts", "bottom_pt", "poly_node")

    def __init__(self, idx: int) -> None:
        self.idx = idx
        self.is_hole = False
        self.is_open = False
        self.first_left: OutRec | None = None
        self.pts: OutPt | None = None
        self.bottom_pt: OutPt | None = None
        self.poly_node: PolyNode | None = None


class Join:
    __slots__ = ("out_pt1", "out_pt2", "off_pt")

    def __init__(self, out_pt1: OutPt, out_pt2: OutPt | None, off_pt: IntPoint) -> None:
        self.out_pt1 = out_pt1
        self.out_pt2 = out_pt2
        self.off_pt = off_pt


class IntersectNode:
    __slots__ = ("edge1", "edge2", "pt")

    def __init__(self, edge1: TEdge, edge2: TEdge, pt: IntPoint) -> None:
        self.edge1 = edge1
        self.edge2 = edge2
        self.pt = pt


@dataclass
class ClipResult:
    """Outcome of a Boolean combination.

    On failure paths is empty and tree is None; no partial result is kept.
    """

    succeeded: bool
    paths: Paths = field(default_factory=list)
    tree: PolyTree | None = None
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.paths

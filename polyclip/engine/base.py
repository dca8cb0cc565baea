"""Edge construction, local minima and active edge list bookkeeping.

Each input path is turned into a ring of TEdges. The ring is then cut into
bounds: chains of edges that rise monotonically from a local minimum to a
local maximum. Pairs of bounds meeting at a minimum become LocalMinima,
which the sweep activates as it reaches their Y coordinate.

Y grows downward in the sweep's frame: the "bottom" of an edge is its
larger Y and the sweep proceeds from the largest Y to the smallest.
"""

from __future__ import annotations

import bisect
import heapq
import logging
from typing import Iterable, Sequence

from ..geometry.primitives import IntPoint, to_path
from .errors import InvariantError, PathError
from .types import (
    HI_RANGE,
    HORIZONTAL,
    SKIP,
    UNASSIGNED,
    EdgeSide,
    LocalMinima,
    OutRec,
    PolyType,
    TEdge,
    is_horizontal,
)

logger = logging.getLogger(__name__)


def cround(value: float) -> int:
    """Round half away from zero."""
    return int(value - 0.5) if value < 0 else int(value + 0.5)


def top_x(edge: TEdge, current_y: int) -> int:
    """X coordinate of edge at current_y."""
    if current_y == edge.top.y:
        return edge.top.x
    return edge.bot.x + cround(edge.dx * (current_y - edge.bot.y))


def edge_slopes_equal(e1: TEdge, e2: TEdge) -> bool:
    return e1.delta_y * e2.delta_x == e1.delta_x * e2.delta_y


def slopes_equal3(pt1: IntPoint, pt2: IntPoint, pt3: IntPoint) -> bool:
    return (pt1.y - pt2.y) * (pt2.x - pt3.x) - (pt1.x - pt2.x) * (pt2.y - pt3.y) == 0


def slopes_equal4(pt1: IntPoint, pt2: IntPoint, pt3: IntPoint, pt4: IntPoint) -> bool:
    return (pt1.y - pt2.y) * (pt3.x - pt4.x) - (pt1.x - pt2.x) * (pt3.y - pt4.y) == 0


def pt2_is_between_pt1_and_pt3(pt1: IntPoint, pt2: IntPoint, pt3: IntPoint) -> bool:
    if pt1 == pt3 or pt1 == pt2 or pt3 == pt2:
        return False
    if pt1.x != pt3.x:
        return (pt2.x > pt1.x) == (pt2.x < pt3.x)
    return (pt2.y > pt1.y) == (pt2.y < pt3.y)


def _range_test(pt: IntPoint) -> None:
    if pt.x > HI_RANGE or pt.y > HI_RANGE or -pt.x > HI_RANGE or -pt.y > HI_RANGE:
        raise PathError(f"Coordinate outside allowed range: {tuple(pt)}")


def _reverse_horizontal(e: TEdge) -> None:
    # swap x's so the bottom aligns with the adjoining lower edge;
    # delta and dx are left untouched
    e.top, e.bot = IntPoint(e.bot.x, e.top.y), IntPoint(e.top.x, e.bot.y)


def _remove_edge(e: TEdge) -> TEdge:
    e.prev.next = e.next
    e.next.prev = e.prev
    result = e.next
    e.prev = None
    return result


def _init_edge2(e: TEdge, poly_type: PolyType) -> None:
    if e.curr.y >= e.next.curr.y:
        e.bot = e.curr
        e.top = e.next.curr
    else:
        e.top = e.curr
        e.bot = e.next.curr
    e.set_dx()
    e.poly_type = poly_type


class ClipperBase:
    """Holds input edges and the data structures shared by every sweep."""

    def __init__(self) -> None:
        self.preserve_collinear = False
        self._minima_list: list[LocalMinima] = []
        self._current_lm = 0
        self._edges: list[list[TEdge]] = []
        self._scanbeam: list[int] = []
        self._scanbeam_set: set[int] = set()
        self._poly_outs: list[OutRec] = []
        self._active_edges: TEdge | None = None
        self._has_open_paths = False

    # ------------------------------------------------------------------
    # Path input
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every path added so far."""
        self._minima_list = []
        self._current_lm = 0
        self._edges = []
        self._has_open_paths = False

    def add_paths(self, paths: Iterable[Sequence[Sequence[int]]], poly_type: PolyType, closed: bool = True) -> bool:
        """Add several paths; True if any of them contributed edges."""
        result = False
        for path in paths:
            if self.add_path(path, poly_type, closed):
                result = True
        return result

    def add_path(self, path: Sequence[Sequence[int]], poly_type: PolyType, closed: bool = True) -> bool:
        """Add one path as subject or clip.

        Args:
            path: Vertices as (x, y) integer pairs
            poly_type: PolyType.SUBJECT or PolyType.CLIP
            closed: False for open paths (lines); only subjects may be open

        Returns:
            False when the path is degenerate and contributes nothing

        Raises:
            PathError: If an open path is added as clip, or a coordinate is
                outside the supported range
        """
        if not closed and poly_type == PolyType.CLIP:
            raise PathError("add_path: open paths must be subject")

        pg = to_path(path)
        high_i = len(pg) - 1
        if closed:
            while high_i > 0 and pg[high_i] == pg[0]:
                high_i -= 1
        while high_i > 0 and pg[high_i] == pg[high_i - 1]:
            high_i -= 1
        if (closed and high_i < 2) or (not closed and high_i < 1):
            return False

        # 1. basic edge initialisation
        edges = [TEdge(pg[i]) for i in range(high_i + 1)]
        for i, e in enumerate(edges):
            _range_test(pg[i])
            e.next = edges[(i + 1) % (high_i + 1)]
            e.prev = edges[i - 1]
        e_start = edges[0]

        # 2. remove duplicate vertices and, when closed, collinear edges
        e = e_start
        e_loop_stop = e_start
        while True:
            # open paths may start and end on the same point
            if e.curr == e.next.curr and (closed or e.next is not e_start):
                if e is e.next:
                    break
                if e is e_start:
                    e_start = e.next
                e = _remove_edge(e)
                e_loop_stop = e
                continue
            if e.prev is e.next:
                break
            if (closed
                    and slopes_equal3(e.prev.curr, e.curr, e.next.curr)
                    and (not self.preserve_collinear
                         or not pt2_is_between_pt1_and_pt3(e.prev.curr, e.curr, e.next.curr))):
                if e is e_start:
                    e_start = e.next
                e = _remove_edge(e)
                e = e.prev
                e_loop_stop = e
                continue
            e = e.next
            if e is e_loop_stop or (not closed and e.next is e_start):
                break

        if (not closed and e is e.next) or (closed and e.prev is e.next):
            return False

        if not closed:
            self._has_open_paths = True
            e_start.prev.out_idx = SKIP

        # 3. second stage of edge initialisation
        is_flat = True
        e = e_start
        while True:
            _init_edge2(e, poly_type)
            e = e.next
            if is_flat and e.curr.y != e_start.curr.y:
                is_flat = False
            if e is e_start:
                break

        # 4. add edge bounds to the local minima list
        if is_flat:
            if closed:
                return False
            e.prev.out_idx = SKIP
            loc_min = LocalMinima(e.bot.y, None, e)
            e.side = EdgeSide.RIGHT
            e.wind_delta = 0
            while True:
                if e.bot.x != e.prev.top.x:
                    _reverse_horizontal(e)
                if e.next.out_idx == SKIP:
                    break
                e.next_in_lml = e.next
                e = e.next
            self._insert_local_minima(loc_min)
            self._edges.append(edges)
            return True

        self._edges.append(edges)
        e_min = None

        # avoids an endless loop when open paths start and end on the same point
        if e.prev.bot == e.prev.top:
            e = e.next

        while True:
            e = self._find_next_loc_min(e)
            if e is e_min:
                break
            if e_min is None:
                e_min = e

            # e and e.prev share a local minimum (left aligned if horizontal)
            if e.dx < e.prev.dx:
                loc_min = LocalMinima(e.bot.y, e.prev, e)
                left_bound_is_forward = False
            else:
                loc_min = LocalMinima(e.bot.y, e, e.prev)
                left_bound_is_forward = True
            loc_min.left_bound.side = EdgeSide.LEFT
            loc_min.right_bound.side = EdgeSide.RIGHT

            if not closed:
                loc_min.left_bound.wind_delta = 0
            elif loc_min.left_bound.next is loc_min.right_bound:
                loc_min.left_bound.wind_delta = -1
            else:
                loc_min.left_bound.wind_delta = 1
            loc_min.right_bound.wind_delta = -loc_min.left_bound.wind_delta

            e = self._process_bound(loc_min.left_bound, left_bound_is_forward)
            if e.out_idx == SKIP:
                e = self._process_bound(e, left_bound_is_forward)

            e2 = self._process_bound(loc_min.right_bound, not left_bound_is_forward)
            if e2.out_idx == SKIP:
                e2 = self._process_bound(e2, not left_bound_is_forward)

            if loc_min.left_bound.out_idx == SKIP:
                loc_min.left_bound = None
            elif loc_min.right_bound.out_idx == SKIP:
                loc_min.right_bound = None
            self._insert_local_minima(loc_min)
            if not left_bound_is_forward:
                e = e2
        return True

    @staticmethod
    def _find_next_loc_min(e: TEdge) -> TEdge:
        while True:
            while e.bot != e.prev.bot or e.curr == e.top:
                e = e.next
            if e.dx != HORIZONTAL and e.prev.dx != HORIZONTAL:
                break
            while e.prev.dx == HORIZONTAL:
                e = e.prev
            e2 = e
            while e.dx == HORIZONTAL:
                e = e.next
            if e.top.y == e.prev.bot.y:
                continue  # just an intermediate horizontal
            if e2.prev.bot.x < e.bot.x:
                e = e2
            break
        return e

    def _process_bound(self, e: TEdge, left_bound_is_forward: bool) -> TEdge:
        result = e

        if result.out_idx == SKIP:
            # if there are edges beyond the skip edge, start another local
            # minimum with them
            e = result
            if left_bound_is_forward:
                while e.top.y == e.next.bot.y:
                    e = e.next
                while e is not result and e.dx == HORIZONTAL:
                    e = e.prev
            else:
                while e.top.y == e.prev.bot.y:
                    e = e.prev
                while e is not result and e.dx == HORIZONTAL:
                    e = e.next
            if e is result:
                result = e.next if left_bound_is_forward else e.prev
            else:
                e = result.next if left_bound_is_forward else result.prev
                loc_min = LocalMinima(e.bot.y, None, e)
                e.wind_delta = 0
                result = self._process_bound(e, left_bound_is_forward)
                self._insert_local_minima(loc_min)
            return result

        if e.dx == HORIZONTAL:
            # open paths may not be true local minima here, and consecutive
            # horizontals may head left before going right
            e_start = e.prev if left_bound_is_forward else e.next
            if e_start.dx == HORIZONTAL:
                if e_start.bot.x != e.bot.x and e_start.top.x != e.bot.x:
                    _reverse_horizontal(e)
            elif e_start.bot.x != e.bot.x:
                _reverse_horizontal(e)

        e_start = e
        if left_bound_is_forward:
            while result.top.y == result.next.bot.y and result.next.out_idx != SKIP:
                result = result.next
            if result.dx == HORIZONTAL and result.next.out_idx != SKIP:
                # at the top of a bound, horizontals join the bound only when
                # the preceding edge attaches to their left vertex
                horz = result
                while horz.prev.dx == HORIZONTAL:
                    horz = horz.prev
                if horz.prev.top.x > result.next.top.x:
                    result = horz.prev
            while e is not result:
                e.next_in_lml = e.next
                if e.dx == HORIZONTAL and e is not e_start and e.bot.x != e.prev.top.x:
                    _reverse_horizontal(e)
                e = e.next
            if e.dx == HORIZONTAL and e is not e_start and e.bot.x != e.prev.top.x:
                _reverse_horizontal(e)
            result = result.next
        else:
            while result.top.y == result.prev.bot.y and result.prev.out_idx != SKIP:
                result = result.prev
            if result.dx == HORIZONTAL and result.prev.out_idx != SKIP:
                horz = result
                while horz.next.dx == HORIZONTAL:
                    horz = horz.next
                if horz.next.top.x >= result.prev.top.x:
                    result = horz.next
            while e is not result:
                e.next_in_lml = e.prev
                if e.dx == HORIZONTAL and e is not e_start and e.bot.x != e.next.top.x:
                    _reverse_horizontal(e)
                e = e.prev
            if e.dx == HORIZONTAL and e is not e_start and e.bot.x != e.next.top.x:
                _reverse_horizontal(e)
            result = result.prev
        return result

    def _insert_local_minima(self, lm: LocalMinima) -> None:
        # descending Y; a new entry goes ahead of existing ones with equal Y
        i = bisect.bisect_left(self._minima_list, -lm.y, key=lambda m: -m.y)
        self._minima_list.insert(i, lm)

    # ------------------------------------------------------------------
    # Sweep state
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self._current_lm = 0
        self._scanbeam = []
        self._scanbeam_set = set()
        for lm in self._minima_list:
            self._insert_scanbeam(lm.y)
            for e in (lm.left_bound, lm.right_bound):
                if e is not None:
                    e.curr = e.bot
                    e.out_idx = UNASSIGNED
        self._active_edges = None

    def _pop_local_minima(self, y: int) -> LocalMinima | None:
        if self._current_lm < len(self._minima_list):
            lm = self._minima_list[self._current_lm]
            if lm.y == y:
                self._current_lm += 1
                return lm
        return None

    def _local_minima_pending(self) -> bool:
        return self._current_lm < len(self._minima_list)

    def _insert_scanbeam(self, y: int) -> None:
        if y in self._scanbeam_set:
            return
        self._scanbeam_set.add(y)
        heapq.heappush(self._scanbeam, -y)

    def _pop_scanbeam(self) -> int | None:
        if not self._scanbeam:
            return None
        y = -heapq.heappop(self._scanbeam)
        self._scanbeam_set.discard(y)
        return y

    def _create_out_rec(self) -> OutRec:
        result = OutRec(len(self._poly_outs))
        self._poly_outs.append(result)
        return result

    # ------------------------------------------------------------------
    # Active edge list
    # ------------------------------------------------------------------

    def _update_edge_into_ael(self, e: TEdge) -> TEdge:
        """Replace e in the AEL by the next edge of its bound."""
        nxt = e.next_in_lml
        if nxt is None:
            raise InvariantError("update_edge_into_ael: invalid call")
        ael_prev = e.prev_in_ael
        ael_next = e.next_in_ael
        nxt.out_idx = e.out_idx
        if ael_prev is not None:
            ael_prev.next_in_ael = nxt
        else:
            self._active_edges = nxt
        if ael_next is not None:
            ael_next.prev_in_ael = nxt
        nxt.side = e.side
        nxt.wind_delta = e.wind_delta
        nxt.wind_cnt = e.wind_cnt
        nxt.wind_cnt2 = e.wind_cnt2
        nxt.curr = nxt.bot
        nxt.prev_in_ael = ael_prev
        nxt.next_in_ael = ael_next
        if not is_horizontal(nxt):
            self._insert_scanbeam(nxt.top.y)
        return nxt

    def _swap_positions_in_ael(self, edge1: TEdge, edge2: TEdge) -> None:
        # one or other edge may already have left the AEL
        if edge1.next_in_ael is edge1.prev_in_ael or edge2.next_in_ael is edge2.prev_in_ael:
            return

        if edge1.next_in_ael is edge2:
            nxt = edge2.next_in_ael
            if nxt is not None:
                nxt.prev_in_ael = edge1
            prev = edge1.prev_in_ael
            if prev is not None:
                prev.next_in_ael = edge2
            edge2.prev_in_ael = prev
            edge2.next_in_ael = edge1
            edge1.prev_in_ael = edge2
            edge1.next_in_ael = nxt
        elif edge2.next_in_ael is edge1:
            nxt = edge1.next_in_ael
            if nxt is not None:
                nxt.prev_in_ael = edge2
            prev = edge2.prev_in_ael
            if prev is not None:
                prev.next_in_ael = edge1
            edge1.prev_in_ael = prev
            edge1.next_in_ael = edge2
            edge2.prev_in_ael = edge1
            edge2.next_in_ael = nxt
        else:
            nxt = edge1.next_in_ael
            prev = edge1.prev_in_ael
            edge1.next_in_ael = edge2.next_in_ael
            if edge1.next_in_ael is not None:
                edge1.next_in_ael.prev_in_ael = edge1
            edge1.prev_in_ael = edge2.prev_in_ael
            if edge1.prev_in_ael is not None:
                edge1.prev_in_ael.next_in_ael = edge1
            edge2.next_in_ael = nxt
            if edge2.next_in_ael is not None:
                edge2.next_in_ael.prev_in_ael = edge2
            edge2.prev_in_ael = prev
            if edge2.prev_in_ael is not None:
                edge2.prev_in_ael.next_in_ael = edge2

        if edge1.prev_in_ael is None:
            self._active_edges = edge1
        elif edge2.prev_in_ael is None:
            self._active_edges = edge2

    def _delete_from_ael(self, e: TEdge) -> None:
        ael_prev = e.prev_in_ael
        ael_next = e.next_in_ael
        if ael_prev is None and ael_next is None and e is not self._active_edges:
            return  # already deleted
        if ael_prev is not None:
            ael_prev.next_in_ael = ael_next
        else:
            self._active_edges = ael_next
        if ael_next is not None:
            ael_next.prev_in_ael = ael_prev
        e.next_in_ael = None
        e.prev_in_ael = None

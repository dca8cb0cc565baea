"""Scan-line Boolean clipping of integer polygons and polylines.

A Clipper collects subject and clip paths and combines them with one of
four Boolean operations under a fill rule. The sweep visits every distinct
vertex Y (a scanbeam boundary), from the largest to the smallest, and
maintains the active edge list (AEL) of edges crossing the current beam.
Within each beam it resolves horizontal edges, edge crossings and edge
tops, emitting output vertices into rings as edges start and stop
contributing to the result.

Example:
    clipper = Clipper()
    clipper.add_path([(0, 0), (10, 0), (10, 10), (0, 10)], PolyType.SUBJECT)
    clipper.add_path([(5, 5), (15, 5), (15, 15), (5, 15)], PolyType.CLIP)
    result = clipper.execute(ClipType.UNION)
    if result.succeeded:
        print(result.paths)
"""

from __future__ import annotations

import bisect
import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING

from ..geometry.primitives import IntPoint, polytree_to_paths
from .base import ClipperBase, cround, edge_slopes_equal, slopes_equal4, top_x
from .errors import InvariantError
from .output import OutputMixin, out_pt_area, reverse_poly_pt_links
from .types import (
    SKIP,
    UNASSIGNED,
    ClipResult,
    ClipType,
    Direction,
    IntersectNode,
    Join,
    PolyFillType,
    TEdge,
    is_horizontal,
)
from .winding import WindingMixin

if TYPE_CHECKING:
    from ..models.options import EngineOptions

logger = logging.getLogger(__name__)


class SweepState(Enum):
    """Whether a Clipper instance is currently running a sweep."""
    IDLE = "idle"
    SWEEPING = "sweeping"


def _horz_segments_overlap(seg1a: int, seg1b: int, seg2a: int, seg2b: int) -> bool:
    if seg1a > seg1b:
        seg1a, seg1b = seg1b, seg1a
    if seg2a > seg2b:
        seg2a, seg2b = seg2b, seg2a
    return seg1a < seg2b and seg2a < seg1b


def _e2_inserts_before_e1(e1: TEdge, e2: TEdge) -> bool:
    if e2.curr.x == e1.curr.x:
        if e2.top.y > e1.top.y:
            return e2.top.x < top_x(e1, e2.top.y)
        return e1.top.x > top_x(e2, e1.top.y)
    return e2.curr.x < e1.curr.x


def _is_maxima(e: TEdge | None, y: int) -> bool:
    return e is not None and e.top.y == y and e.next_in_lml is None


def _is_intermediate(e: TEdge, y: int) -> bool:
    return e.top.y == y and e.next_in_lml is not None


def _get_maxima_pair(e: TEdge) -> TEdge | None:
    if e.next.top == e.top and e.next.next_in_lml is None:
        return e.next
    if e.prev.top == e.top and e.prev.next_in_lml is None:
        return e.prev
    return None


def _get_maxima_pair_ex(e: TEdge) -> TEdge | None:
    # like _get_maxima_pair but None when the pair is not in the AEL
    result = _get_maxima_pair(e)
    if (result is None or result.out_idx == SKIP
            or (result.next_in_ael is result.prev_in_ael and not is_horizontal(result))):
        return None
    return result


def _get_horz_direction(horz_edge: TEdge) -> tuple[Direction, int, int]:
    if horz_edge.bot.x < horz_edge.top.x:
        return Direction.LEFT_TO_RIGHT, horz_edge.bot.x, horz_edge.top.x
    return Direction.RIGHT_TO_LEFT, horz_edge.top.x, horz_edge.bot.x


def _get_next_in_ael(e: TEdge, direction: Direction) -> TEdge | None:
    return e.next_in_ael if direction == Direction.LEFT_TO_RIGHT else e.prev_in_ael


def _intersect_point(edge1: TEdge, edge2: TEdge) -> IntPoint:
    if edge1.dx == edge2.dx:
        y = edge1.curr.y
        return IntPoint(top_x(edge1, y), y)

    if edge1.delta_x == 0:
        x = edge1.bot.x
        if is_horizontal(edge2):
            y = edge2.bot.y
        else:
            b2 = edge2.bot.y - (edge2.bot.x / edge2.dx)
            y = cround(x / edge2.dx + b2)
    elif edge2.delta_x == 0:
        x = edge2.bot.x
        if is_horizontal(edge1):
            y = edge1.bot.y
        else:
            b1 = edge1.bot.y - (edge1.bot.x / edge1.dx)
            y = cround(x / edge1.dx + b1)
    else:
        b1 = edge1.bot.x - edge1.bot.y * edge1.dx
        b2 = edge2.bot.x - edge2.bot.y * edge2.dx
        q = (b2 - b1) / (edge1.dx - edge2.dx)
        y = cround(q)
        if abs(edge1.dx) < abs(edge2.dx):
            x = cround(edge1.dx * q + b1)
        else:
            x = cround(edge2.dx * q + b2)

    if y < edge1.top.y or y < edge2.top.y:
        y = edge1.top.y if edge1.top.y > edge2.top.y else edge2.top.y
        x = top_x(edge1, y) if abs(edge1.dx) < abs(edge2.dx) else top_x(edge2, y)

    # never below the bottom of the scanbeam
    if y > edge1.curr.y:
        y = edge1.curr.y
        # the more vertical edge gives the better X
        x = top_x(edge2, y) if abs(edge1.dx) > abs(edge2.dx) else top_x(edge1, y)
    return IntPoint(x, y)


class Clipper(WindingMixin, OutputMixin, ClipperBase):
    """Boolean operations on integer polygons and open polylines.

    Attributes:
        reverse_solution: Emit outers clockwise and holes counter-clockwise
        strictly_simple: Split output rings wherever vertices touch
        preserve_collinear: Keep collinear vertices instead of merging edges
    """

    def __init__(
        self,
        reverse_solution: bool = False,
        strictly_simple: bool = False,
        preserve_collinear: bool = False,
    ) -> None:
        super().__init__()
        self.reverse_solution = reverse_solution
        self.strictly_simple = strictly_simple
        self.preserve_collinear = preserve_collinear

        self._clip_type = ClipType.INTERSECTION
        self._subj_fill_type = PolyFillType.EVEN_ODD
        self._clip_fill_type = PolyFillType.EVEN_ODD
        self._using_poly_tree = False
        self._sorted_edges: TEdge | None = None
        self._intersect_list: list[IntersectNode] = []
        self._maxima: list[int] = []
        self._joins: list[Join] = []
        self._ghost_joins: list[Join] = []

        self._state = SweepState.IDLE
        self._state_lock = threading.Lock()

    @classmethod
    def from_options(cls, options: EngineOptions) -> Clipper:
        """Create a Clipper configured from EngineOptions."""
        return cls(
            reverse_solution=options.reverse_solution,
            strictly_simple=options.strictly_simple,
            preserve_collinear=options.preserve_collinear,
        )

    @property
    def state(self) -> SweepState:
        return self._state

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def execute(
        self,
        clip_type: ClipType,
        subj_fill: PolyFillType = PolyFillType.EVEN_ODD,
        clip_fill: PolyFillType | None = None,
    ) -> ClipResult:
        """Combine subject and clip paths into a flat list of paths.

        Args:
            clip_type: Boolean operation to apply
            subj_fill: Fill rule for subject paths
            clip_fill: Fill rule for clip paths (defaults to subj_fill)

        Returns:
            ClipResult; unsuccessful when the instance is already sweeping,
            when open paths were added (a tree result is required for
            them), or when crossings in a scanbeam cannot be ordered
        """
        if self._has_open_paths:
            message = "Open path clipping requires a tree result; use execute_tree"
            logger.warning(message)
            return ClipResult(succeeded=False, message=message)
        return self._run(clip_type, subj_fill, clip_fill, use_tree=False)

    def execute_tree(
        self,
        clip_type: ClipType,
        subj_fill: PolyFillType = PolyFillType.EVEN_ODD,
        clip_fill: PolyFillType | None = None,
    ) -> ClipResult:
        """Combine subject and clip paths into a PolyTree.

        The tree records outer/hole nesting and holds open paths as
        children of the root. ``paths`` lists every contour in the tree.
        """
        return self._run(clip_type, subj_fill, clip_fill, use_tree=True)

    def _try_begin_sweep(self) -> bool:
        with self._state_lock:
            if self._state is not SweepState.IDLE:
                return False
            self._state = SweepState.SWEEPING
            return True

    def _end_sweep(self) -> None:
        with self._state_lock:
            self._state = SweepState.IDLE

    def _run(
        self,
        clip_type: ClipType,
        subj_fill: PolyFillType,
        clip_fill: PolyFillType | None,
        use_tree: bool,
    ) -> ClipResult:
        if not self._try_begin_sweep():
            logger.warning("Clipper instance is busy; execute call rejected")
            return ClipResult(succeeded=False, message="Clipper instance is busy")

        self._clip_type = clip_type
        self._subj_fill_type = subj_fill
        self._clip_fill_type = subj_fill if clip_fill is None else clip_fill
        self._using_poly_tree = use_tree
        logger.debug(
            f"Sweep start: {clip_type.value}, {len(self._edges)} paths, "
            f"{len(self._minima_list)} local minima"
        )
        try:
            if not self._execute_internal():
                message = "Edge crossings within a scanbeam could not be ordered"
                logger.warning(message)
                return ClipResult(succeeded=False, message=message)
            if use_tree:
                tree = self._build_result_tree()
                result = ClipResult(succeeded=True, paths=polytree_to_paths(tree), tree=tree)
            else:
                result = ClipResult(succeeded=True, paths=self._build_result())
            logger.debug(f"Sweep finished: {len(result.paths)} output paths")
            return result
        finally:
            self._poly_outs = []
            self._end_sweep()

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def _execute_internal(self) -> bool:
        try:
            self._reset()
            self._sorted_edges = None
            self._maxima = []
            self._poly_outs = []

            bot_y = self._pop_scanbeam()
            if bot_y is None:
                return True  # nothing to clip
            self._insert_local_minima_into_ael(bot_y)
            while True:
                top_y = self._pop_scanbeam()
                if top_y is None:
                    break
                self._process_horizontals()
                self._ghost_joins = []
                if not self._process_intersections(top_y):
                    return False
                self._process_edges_at_top_of_scanbeam(top_y)
                bot_y = top_y
                self._insert_local_minima_into_ael(bot_y)

            for out_rec in self._poly_outs:
                if out_rec.pts is None or out_rec.is_open:
                    continue
                if (out_rec.is_hole ^ self.reverse_solution) == (out_pt_area(out_rec.pts) > 0):
                    reverse_poly_pt_links(out_rec.pts)

            self._join_common_edges()

            for out_rec in self._poly_outs:
                if out_rec.pts is None:
                    continue
                if out_rec.is_open:
                    self._fixup_out_polyline(out_rec)
                else:
                    self._fixup_out_polygon(out_rec)

            if self.strictly_simple:
                self._do_simple_polygons()
            return True
        finally:
            self._joins = []
            self._ghost_joins = []

    def _insert_local_minima_into_ael(self, bot_y: int) -> None:
        while True:
            lm = self._pop_local_minima(bot_y)
            if lm is None:
                return
            lb = lm.left_bound
            rb = lm.right_bound

            op1 = None
            if lb is None:
                self._insert_edge_into_ael(rb, None)
                self._set_winding_count(rb)
                if self._is_contributing(rb):
                    op1 = self._add_out_pt(rb, rb.bot)
            elif rb is None:
                self._insert_edge_into_ael(lb, None)
                self._set_winding_count(lb)
                if self._is_contributing(lb):
                    op1 = self._add_out_pt(lb, lb.bot)
                self._insert_scanbeam(lb.top.y)
            else:
                self._insert_edge_into_ael(lb, None)
                self._insert_edge_into_ael(rb, lb)
                self._set_winding_count(lb)
                rb.wind_cnt = lb.wind_cnt
                rb.wind_cnt2 = lb.wind_cnt2
                if self._is_contributing(lb):
                    op1 = self._add_local_min_poly(lb, rb, lb.bot)
                self._insert_scanbeam(lb.top.y)

            if rb is not None:
                if is_horizontal(rb):
                    if rb.next_in_lml is not None:
                        self._insert_scanbeam(rb.next_in_lml.top.y)
                    self._add_edge_to_sel(rb)
                else:
                    self._insert_scanbeam(rb.top.y)

            if lb is None or rb is None:
                continue

            # output sharing an edge with a horizontal rb will need joining later
            if op1 is not None and is_horizontal(rb) and self._ghost_joins and rb.wind_delta != 0:
                for j in self._ghost_joins:
                    if _horz_segments_overlap(j.out_pt1.pt.x, j.off_pt.x, rb.bot.x, rb.top.x):
                        self._add_join(j.out_pt1, op1, j.off_pt)

            prev = lb.prev_in_ael
            if (lb.out_idx >= 0 and prev is not None
                    and prev.curr.x == lb.bot.x and prev.out_idx >= 0
                    and slopes_equal4(prev.curr, prev.top, lb.curr, lb.top)
                    and lb.wind_delta != 0 and prev.wind_delta != 0):
                op2 = self._add_out_pt(prev, lb.bot)
                self._add_join(op1, op2, lb.top)

            if lb.next_in_ael is not rb:
                prev = rb.prev_in_ael
                if (rb.out_idx >= 0 and prev.out_idx >= 0
                        and slopes_equal4(prev.curr, prev.top, rb.curr, rb.top)
                        and rb.wind_delta != 0 and prev.wind_delta != 0):
                    op2 = self._add_out_pt(prev, rb.bot)
                    self._add_join(op1, op2, rb.top)

                e = lb.next_in_ael
                if e is not None:
                    while e is not rb:
                        # rb lies right of e above the crossing
                        self._intersect_edges(rb, e, lb.curr)
                        e = e.next_in_ael

    def _insert_edge_into_ael(self, edge: TEdge, start_edge: TEdge | None) -> None:
        if self._active_edges is None:
            edge.prev_in_ael = None
            edge.next_in_ael = None
            self._active_edges = edge
        elif start_edge is None and _e2_inserts_before_e1(self._active_edges, edge):
            edge.prev_in_ael = None
            edge.next_in_ael = self._active_edges
            self._active_edges.prev_in_ael = edge
            self._active_edges = edge
        else:
            if start_edge is None:
                start_edge = self._active_edges
            while start_edge.next_in_ael is not None and not _e2_inserts_before_e1(start_edge.next_in_ael, edge):
                start_edge = start_edge.next_in_ael
            edge.next_in_ael = start_edge.next_in_ael
            if start_edge.next_in_ael is not None:
                start_edge.next_in_ael.prev_in_ael = edge
            edge.prev_in_ael = start_edge
            start_edge.next_in_ael = edge

    # ------------------------------------------------------------------
    # Sorted edge list: pending horizontals, or the bubble sort scratch list
    # ------------------------------------------------------------------

    def _add_edge_to_sel(self, edge: TEdge) -> None:
        # the SEL holds horizontals here, order doesn't matter
        edge.prev_in_sel = None
        edge.next_in_sel = self._sorted_edges
        if self._sorted_edges is not None:
            self._sorted_edges.prev_in_sel = edge
        self._sorted_edges = edge

    def _pop_edge_from_sel(self) -> TEdge | None:
        e = self._sorted_edges
        if e is None:
            return None
        self._sorted_edges = e.next_in_sel
        if self._sorted_edges is not None:
            self._sorted_edges.prev_in_sel = None
        e.next_in_sel = None
        e.prev_in_sel = None
        return e

    def _copy_ael_to_sel(self) -> None:
        e = self._active_edges
        self._sorted_edges = e
        while e is not None:
            e.prev_in_sel = e.prev_in_ael
            e.next_in_sel = e.next_in_ael
            e = e.next_in_ael

    def _swap_positions_in_sel(self, edge1: TEdge, edge2: TEdge) -> None:
        if edge1.next_in_sel is None and edge1.prev_in_sel is None:
            return
        if edge2.next_in_sel is None and edge2.prev_in_sel is None:
            return

        if edge1.next_in_sel is edge2:
            nxt = edge2.next_in_sel
            if nxt is not None:
                nxt.prev_in_sel = edge1
            prev = edge1.prev_in_sel
            if prev is not None:
                prev.next_in_sel = edge2
            edge2.prev_in_sel = prev
            edge2.next_in_sel = edge1
            edge1.prev_in_sel = edge2
            edge1.next_in_sel = nxt
        elif edge2.next_in_sel is edge1:
            nxt = edge1.next_in_sel
            if nxt is not None:
                nxt.prev_in_sel = edge2
            prev = edge2.prev_in_sel
            if prev is not None:
                prev.next_in_sel = edge1
            edge1.prev_in_sel = prev
            edge1.next_in_sel = edge2
            edge2.prev_in_sel = edge1
            edge2.next_in_sel = nxt
        else:
            nxt = edge1.next_in_sel
            prev = edge1.prev_in_sel
            edge1.next_in_sel = edge2.next_in_sel
            if edge1.next_in_sel is not None:
                edge1.next_in_sel.prev_in_sel = edge1
            edge1.prev_in_sel = edge2.prev_in_sel
            if edge1.prev_in_sel is not None:
                edge1.prev_in_sel.next_in_sel = edge1
            edge2.next_in_sel = nxt
            if edge2.next_in_sel is not None:
                edge2.next_in_sel.prev_in_sel = edge2
            edge2.prev_in_sel = prev
            if edge2.prev_in_sel is not None:
                edge2.prev_in_sel.next_in_sel = edge2

        if edge1.prev_in_sel is None:
            self._sorted_edges = edge1
        elif edge2.prev_in_sel is None:
            self._sorted_edges = edge2

    def _insert_maxima(self, x: int) -> None:
        i = bisect.bisect_left(self._maxima, x)
        if i == len(self._maxima) or self._maxima[i] != x:
            self._maxima.insert(i, x)

    # ------------------------------------------------------------------
    # Horizontals
    # ------------------------------------------------------------------

    def _process_horizontals(self) -> None:
        while True:
            horz_edge = self._pop_edge_from_sel()
            if horz_edge is None:
                return
            self._process_horizontal(horz_edge)

    def _join_overlapping_horizontals(self, horz_edge: TEdge, op1) -> None:
        e_next_horz = self._sorted_edges
        while e_next_horz is not None:
            if e_next_horz.out_idx >= 0 and _horz_segments_overlap(
                horz_edge.bot.x, horz_edge.top.x, e_next_horz.bot.x, e_next_horz.top.x
            ):
                op2 = self._get_last_out_pt(e_next_horz)
                self._add_join(op2, op1, e_next_horz.top)
            e_next_horz = e_next_horz.next_in_sel

    def _process_horizontal(self, horz_edge: TEdge) -> None:
        """Sweep one horizontal (or run of consecutive horizontals) across the AEL."""
        is_open = horz_edge.wind_delta == 0
        direction, horz_left, horz_right = _get_horz_direction(horz_edge)

        e_last_horz = horz_edge
        e_max_pair = None
        while e_last_horz.next_in_lml is not None and is_horizontal(e_last_horz.next_in_lml):
            e_last_horz = e_last_horz.next_in_lml
        if e_last_horz.next_in_lml is None:
            e_max_pair = _get_maxima_pair(e_last_horz)

        # index of the first maxima within the horizontal's range
        maxima = self._maxima
        curr_max: int | None = None
        if maxima:
            if direction == Direction.LEFT_TO_RIGHT:
                curr_max = bisect.bisect_right(maxima, horz_edge.bot.x)
                if curr_max == len(maxima) or maxima[curr_max] >= e_last_horz.top.x:
                    curr_max = None
            else:
                curr_max = 0
                while curr_max + 1 < len(maxima) and maxima[curr_max + 1] < horz_edge.bot.x:
                    curr_max += 1
                if maxima[curr_max] <= e_last_horz.top.x:
                    curr_max = None

        op1 = None
        while True:
            is_last_horz = horz_edge is e_last_horz
            e = _get_next_in_ael(horz_edge, direction)
            while e is not None:
                # add vertices where maxima touch the horizontal
                if curr_max is not None:
                    if direction == Direction.LEFT_TO_RIGHT:
                        while curr_max is not None and maxima[curr_max] < e.curr.x:
                            if horz_edge.out_idx >= 0 and not is_open:
                                self._add_out_pt(horz_edge, IntPoint(maxima[curr_max], horz_edge.bot.y))
                            curr_max += 1
                            if curr_max == len(maxima):
                                curr_max = None
                    else:
                        while curr_max is not None and maxima[curr_max] > e.curr.x:
                            if horz_edge.out_idx >= 0 and not is_open:
                                self._add_out_pt(horz_edge, IntPoint(maxima[curr_max], horz_edge.bot.y))
                            curr_max -= 1
                            if curr_max < 0:
                                curr_max = None

                if ((direction == Direction.LEFT_TO_RIGHT and e.curr.x > horz_right)
                        or (direction == Direction.RIGHT_TO_LEFT and e.curr.x < horz_left)):
                    break

                # end of an intermediate horizontal; smaller dx lies to the
                # right of larger dx above the horizontal
                if (e.curr.x == horz_edge.top.x and horz_edge.next_in_lml is not None
                        and e.dx < horz_edge.next_in_lml.dx):
                    break

                if horz_edge.out_idx >= 0 and not is_open:
                    op1 = self._add_out_pt(horz_edge, e.curr)
                    self._join_overlapping_horizontals(horz_edge, op1)
                    self._add_ghost_join(op1, horz_edge.bot)

                # only close against the maxima pair from the last horizontal
                if e is e_max_pair and is_last_horz:
                    if horz_edge.out_idx >= 0:
                        self._add_local_max_poly(horz_edge, e_max_pair, horz_edge.top)
                    self._delete_from_ael(horz_edge)
                    self._delete_from_ael(e_max_pair)
                    return

                pt = IntPoint(e.curr.x, horz_edge.curr.y)
                if direction == Direction.LEFT_TO_RIGHT:
                    self._intersect_edges(horz_edge, e, pt)
                else:
                    self._intersect_edges(e, horz_edge, pt)
                e_next = _get_next_in_ael(e, direction)
                self._swap_positions_in_ael(horz_edge, e)
                e = e_next

            if horz_edge.next_in_lml is None or not is_horizontal(horz_edge.next_in_lml):
                break

            horz_edge = self._update_edge_into_ael(horz_edge)
            if horz_edge.out_idx >= 0:
                self._add_out_pt(horz_edge, horz_edge.bot)
            direction, horz_left, horz_right = _get_horz_direction(horz_edge)

        if horz_edge.out_idx >= 0 and op1 is None:
            op1 = self._get_last_out_pt(horz_edge)
            self._join_overlapping_horizontals(horz_edge, op1)
            self._add_ghost_join(op1, horz_edge.top)

        if horz_edge.next_in_lml is not None:
            if horz_edge.out_idx >= 0:
                op1 = self._add_out_pt(horz_edge, horz_edge.top)
                horz_edge = self._update_edge_into_ael(horz_edge)
                if horz_edge.wind_delta == 0:
                    return
                # horz_edge is no longer horizontal here
                e_prev = horz_edge.prev_in_ael
                e_next = horz_edge.next_in_ael
                if (e_prev is not None and e_prev.curr == horz_edge.bot
                        and e_prev.wind_delta != 0 and e_prev.out_idx >= 0
                        and e_prev.curr.y > e_prev.top.y
                        and edge_slopes_equal(horz_edge, e_prev)):
                    op2 = self._add_out_pt(e_prev, horz_edge.bot)
                    self._add_join(op1, op2, horz_edge.top)
                elif (e_next is not None and e_next.curr == horz_edge.bot
                        and e_next.wind_delta != 0 and e_next.out_idx >= 0
                        and e_next.curr.y > e_next.top.y
                        and edge_slopes_equal(horz_edge, e_next)):
                    op2 = self._add_out_pt(e_next, horz_edge.bot)
                    self._add_join(op1, op2, horz_edge.top)
            else:
                self._update_edge_into_ael(horz_edge)
        else:
            if horz_edge.out_idx >= 0:
                self._add_out_pt(horz_edge, horz_edge.top)
            self._delete_from_ael(horz_edge)

    # ------------------------------------------------------------------
    # Intersections
    # ------------------------------------------------------------------

    def _process_intersections(self, top_y: int) -> bool:
        if self._active_edges is None:
            return True
        try:
            self._build_intersect_list(top_y)
            if not self._intersect_list:
                return True
            if len(self._intersect_list) == 1 or self._fixup_intersection_order():
                self._process_intersect_list()
            else:
                return False
        except (AttributeError, TypeError) as exc:
            raise InvariantError(f"Processing intersections at y={top_y} failed") from exc
        finally:
            self._sorted_edges = None
            self._intersect_list = []
        return True

    def _build_intersect_list(self, top_y: int) -> None:
        e = self._active_edges
        self._sorted_edges = e
        while e is not None:
            e.prev_in_sel = e.prev_in_ael
            e.next_in_sel = e.next_in_ael
            e.curr = IntPoint(top_x(e, top_y), e.curr.y)
            e = e.next_in_ael

        # bubble sort by X at top_y, recording each swap as a crossing
        is_modified = True
        while is_modified and self._sorted_edges is not None:
            is_modified = False
            e = self._sorted_edges
            while e.next_in_sel is not None:
                e_next = e.next_in_sel
                if e.curr.x > e_next.curr.x:
                    pt = _intersect_point(e, e_next)
                    if pt.y < top_y:
                        pt = IntPoint(top_x(e, top_y), top_y)
                    self._intersect_list.append(IntersectNode(e, e_next, pt))
                    self._swap_positions_in_sel(e, e_next)
                    is_modified = True
                else:
                    e = e_next
            if e.prev_in_sel is not None:
                e.prev_in_sel.next_in_sel = None
            else:
                break
        self._sorted_edges = None

    def _fixup_intersection_order(self) -> bool:
        """Order crossings so that each pair is adjacent when it is processed."""
        # bottom-most first
        self._intersect_list.sort(key=lambda node: node.pt.y, reverse=True)

        self._copy_ael_to_sel()
        nodes = self._intersect_list
        cnt = len(nodes)
        for i in range(cnt):
            if not self._edges_adjacent(nodes[i]):
                j = i + 1
                while j < cnt and not self._edges_adjacent(nodes[j]):
                    j += 1
                if j == cnt:
                    return False
                nodes[i], nodes[j] = nodes[j], nodes[i]
            self._swap_positions_in_sel(nodes[i].edge1, nodes[i].edge2)
        return True

    @staticmethod
    def _edges_adjacent(node: IntersectNode) -> bool:
        return node.edge1.next_in_sel is node.edge2 or node.edge1.prev_in_sel is node.edge2

    def _process_intersect_list(self) -> None:
        for node in self._intersect_list:
            self._intersect_edges(node.edge1, node.edge2, node.pt)
            self._swap_positions_in_ael(node.edge1, node.edge2)
        self._intersect_list = []

    # ------------------------------------------------------------------
    # Edge tops
    # ------------------------------------------------------------------

    def _process_edges_at_top_of_scanbeam(self, top_y: int) -> None:
        e = self._active_edges
        while e is not None:
            # maxima are treated as bent horizontals, except maxima with
            # horizontal edges
            is_maxima_edge = _is_maxima(e, top_y)
            if is_maxima_edge:
                e_max_pair = _get_maxima_pair_ex(e)
                is_maxima_edge = e_max_pair is None or not is_horizontal(e_max_pair)

            if is_maxima_edge:
                if self.strictly_simple:
                    self._insert_maxima(e.top.x)
                e_prev = e.prev_in_ael
                self._do_maxima(e)
                e = self._active_edges if e_prev is None else e_prev.next_in_ael
                continue

            # promote horizontals, otherwise advance curr to top_y
            if _is_intermediate(e, top_y) and is_horizontal(e.next_in_lml):
                e = self._update_edge_into_ael(e)
                if e.out_idx >= 0:
                    self._add_out_pt(e, e.bot)
                self._add_edge_to_sel(e)
            else:
                e.curr = IntPoint(top_x(e, top_y), top_y)

            # touching edges both get a vertex here
            if self.strictly_simple:
                e_prev = e.prev_in_ael
                if (e.out_idx >= 0 and e.wind_delta != 0 and e_prev is not None
                        and e_prev.out_idx >= 0 and e_prev.curr.x == e.curr.x
                        and e_prev.wind_delta != 0):
                    ip = e.curr
                    op = self._add_out_pt(e_prev, ip)
                    op2 = self._add_out_pt(e, ip)
                    self._add_join(op, op2, ip)

            e = e.next_in_ael

        self._process_horizontals()
        self._maxima = []

        # promote intermediate vertices
        e = self._active_edges
        while e is not None:
            if _is_intermediate(e, top_y):
                op = None
                if e.out_idx >= 0:
                    op = self._add_out_pt(e, e.top)
                e = self._update_edge_into_ael(e)

                # output sharing a collinear edge will need joining later
                e_prev = e.prev_in_ael
                e_next = e.next_in_ael
                if (e_prev is not None and e_prev.curr == e.bot and op is not None
                        and e_prev.out_idx >= 0 and e_prev.curr.y > e_prev.top.y
                        and slopes_equal4(e.curr, e.top, e_prev.curr, e_prev.top)
                        and e.wind_delta != 0 and e_prev.wind_delta != 0):
                    op2 = self._add_out_pt(e_prev, e.bot)
                    self._add_join(op, op2, e.top)
                elif (e_next is not None and e_next.curr == e.bot and op is not None
                        and e_next.out_idx >= 0 and e_next.curr.y > e_next.top.y
                        and slopes_equal4(e.curr, e.top, e_next.curr, e_next.top)
                        and e.wind_delta != 0 and e_next.wind_delta != 0):
                    op2 = self._add_out_pt(e_next, e.bot)
                    self._add_join(op, op2, e.top)
            e = e.next_in_ael

    def _do_maxima(self, e: TEdge) -> None:
        e_max_pair = _get_maxima_pair_ex(e)
        if e_max_pair is None:
            if e.out_idx >= 0:
                self._add_out_pt(e, e.top)
            self._delete_from_ael(e)
            return

        e_next = e.next_in_ael
        while e_next is not None and e_next is not e_max_pair:
            self._intersect_edges(e, e_next, e.top)
            self._swap_positions_in_ael(e, e_next)
            e_next = e.next_in_ael

        if e.out_idx == UNASSIGNED and e_max_pair.out_idx == UNASSIGNED:
            self._delete_from_ael(e)
            self._delete_from_ael(e_max_pair)
        elif e.out_idx >= 0 and e_max_pair.out_idx >= 0:
            self._add_local_max_poly(e, e_max_pair, e.top)
            self._delete_from_ael(e)
            self._delete_from_ael(e_max_pair)
        elif e.wind_delta == 0:
            if e.out_idx >= 0:
                self._add_out_pt(e, e.top)
                e.out_idx = UNASSIGNED
            self._delete_from_ael(e)
            if e_max_pair.out_idx >= 0:
                self._add_out_pt(e_max_pair, e.top)
                e_max_pair.out_idx = UNASSIGNED
            self._delete_from_ael(e_max_pair)
        else:
            raise InvariantError(
                f"Maxima at {tuple(e.top)} has mismatched output state "
                f"({e.out_idx}, {e_max_pair.out_idx})"
            )

"""Winding counts and fill-rule evaluation for active edges.

wind_cnt is the winding number of the region immediately to the right of
an edge, counted over edges of the same role (subject or clip). wind_cnt2
is the winding number of the other role at the same place. Open path edges
have a wind_delta of zero and never change either count.
"""

from __future__ import annotations

from ..geometry.primitives import IntPoint
from .types import UNASSIGNED, ClipType, PolyFillType, PolyType, TEdge


def _swap_sides(e1: TEdge, e2: TEdge) -> None:
    e1.side, e2.side = e2.side, e1.side


def _swap_poly_indexes(e1: TEdge, e2: TEdge) -> None:
    e1.out_idx, e2.out_idx = e2.out_idx, e1.out_idx


def _fill_count(fill_type: PolyFillType, count: int) -> int:
    if fill_type == PolyFillType.POSITIVE:
        return count
    if fill_type == PolyFillType.NEGATIVE:
        return -count
    return abs(count)


class WindingMixin:
    """Fill-rule logic for Clipper; needs the sweep's AEL and operation state."""

    _clip_type: ClipType
    _subj_fill_type: PolyFillType
    _clip_fill_type: PolyFillType
    _active_edges: TEdge | None

    def _fill_types(self, edge: TEdge) -> tuple[PolyFillType, PolyFillType]:
        """Fill rule for the edge's own role, then for the other role."""
        if edge.poly_type == PolyType.SUBJECT:
            return self._subj_fill_type, self._clip_fill_type
        return self._clip_fill_type, self._subj_fill_type

    def _is_even_odd_fill_type(self, edge: TEdge) -> bool:
        return self._fill_types(edge)[0] == PolyFillType.EVEN_ODD

    def _is_even_odd_alt_fill_type(self, edge: TEdge) -> bool:
        return self._fill_types(edge)[1] == PolyFillType.EVEN_ODD

    def _is_contributing(self, edge: TEdge) -> bool:
        pft, pft2 = self._fill_types(edge)

        if pft == PolyFillType.EVEN_ODD:
            # open paths on even-odd are only contributing at winding 1
            if edge.wind_delta == 0 and edge.wind_cnt != 1:
                return False
        elif pft == PolyFillType.NON_ZERO:
            if abs(edge.wind_cnt) != 1:
                return False
        elif pft == PolyFillType.POSITIVE:
            if edge.wind_cnt != 1:
                return False
        elif edge.wind_cnt != -1:
            return False

        wc2 = edge.wind_cnt2
        if pft2 in (PolyFillType.EVEN_ODD, PolyFillType.NON_ZERO):
            inside, outside = wc2 != 0, wc2 == 0
        elif pft2 == PolyFillType.POSITIVE:
            inside, outside = wc2 > 0, wc2 <= 0
        else:
            inside, outside = wc2 < 0, wc2 >= 0

        if self._clip_type == ClipType.INTERSECTION:
            return inside
        if self._clip_type == ClipType.UNION:
            return outside
        if self._clip_type == ClipType.DIFFERENCE:
            return outside if edge.poly_type == PolyType.SUBJECT else inside
        # xor
        if edge.wind_delta == 0:
            return outside
        return True

    def _set_winding_count(self, edge: TEdge) -> None:
        e = edge.prev_in_ael
        # nearest preceding closed edge of the same role
        while e is not None and (e.poly_type != edge.poly_type or e.wind_delta == 0):
            e = e.prev_in_ael

        if e is None:
            pft = self._fill_types(edge)[0]
            if edge.wind_delta == 0:
                edge.wind_cnt = -1 if pft == PolyFillType.NEGATIVE else 1
            else:
                edge.wind_cnt = edge.wind_delta
            edge.wind_cnt2 = 0
            e = self._active_edges
        elif edge.wind_delta == 0 and self._clip_type != ClipType.UNION:
            edge.wind_cnt = 1
            edge.wind_cnt2 = e.wind_cnt2
            e = e.next_in_ael
        elif self._is_even_odd_fill_type(edge):
            if edge.wind_delta == 0:
                # an open edge is inside when an odd number of closed edges
                # of the same role precede e
                inside = True
                e2 = e.prev_in_ael
                while e2 is not None:
                    if e2.poly_type == e.poly_type and e2.wind_delta != 0:
                        inside = not inside
                    e2 = e2.prev_in_ael
                edge.wind_cnt = 0 if inside else 1
            else:
                edge.wind_cnt = edge.wind_delta
            edge.wind_cnt2 = e.wind_cnt2
            e = e.next_in_ael
        else:
            if e.wind_cnt * e.wind_delta < 0:
                # e decreases the count toward zero, so edge is outside e's polygon
                if abs(e.wind_cnt) > 1:
                    if e.wind_delta * edge.wind_delta < 0:
                        edge.wind_cnt = e.wind_cnt
                    else:
                        edge.wind_cnt = e.wind_cnt + edge.wind_delta
                else:
                    edge.wind_cnt = 1 if edge.wind_delta == 0 else edge.wind_delta
            else:
                # e increases the count away from zero, so edge is inside it
                if edge.wind_delta == 0:
                    edge.wind_cnt = e.wind_cnt - 1 if e.wind_cnt < 0 else e.wind_cnt + 1
                elif e.wind_delta * edge.wind_delta < 0:
                    edge.wind_cnt = e.wind_cnt
                else:
                    edge.wind_cnt = e.wind_cnt + edge.wind_delta
            edge.wind_cnt2 = e.wind_cnt2
            e = e.next_in_ael

        # wind_cnt2 from every edge between e and edge
        if self._is_even_odd_alt_fill_type(edge):
            while e is not edge:
                if e.wind_delta != 0:
                    edge.wind_cnt2 = 1 if edge.wind_cnt2 == 0 else 0
                e = e.next_in_ael
        else:
            while e is not edge:
                edge.wind_cnt2 += e.wind_delta
                e = e.next_in_ael

    def _intersect_edges(self, e1: TEdge, e2: TEdge, pt: IntPoint) -> None:
        """Update counts where e1 and e2 cross and emit any output.

        e1 is assumed to lie to the right of e2 above the intersection.
        """
        e1_contributing = e1.out_idx >= 0
        e2_contributing = e2.out_idx >= 0

        if e1.wind_delta == 0 or e2.wind_delta == 0:
            self._intersect_open_edges(e1, e2, pt, e1_contributing, e2_contributing)
            return

        if e1.poly_type == e2.poly_type:
            if self._is_even_odd_fill_type(e1):
                e1.wind_cnt, e2.wind_cnt = e2.wind_cnt, e1.wind_cnt
            else:
                if e1.wind_cnt + e2.wind_delta == 0:
                    e1.wind_cnt = -e1.wind_cnt
                else:
                    e1.wind_cnt += e2.wind_delta
                if e2.wind_cnt - e1.wind_delta == 0:
                    e2.wind_cnt = -e2.wind_cnt
                else:
                    e2.wind_cnt -= e1.wind_delta
        else:
            if not self._is_even_odd_fill_type(e2):
                e1.wind_cnt2 += e2.wind_delta
            else:
                e1.wind_cnt2 = 1 if e1.wind_cnt2 == 0 else 0
            if not self._is_even_odd_fill_type(e1):
                e2.wind_cnt2 -= e1.wind_delta
            else:
                e2.wind_cnt2 = 1 if e2.wind_cnt2 == 0 else 0

        e1_fill, e1_fill2 = self._fill_types(e1)
        e2_fill, e2_fill2 = self._fill_types(e2)
        e1_wc = _fill_count(e1_fill, e1.wind_cnt)
        e2_wc = _fill_count(e2_fill, e2.wind_cnt)

        if e1_contributing and e2_contributing:
            if (e1_wc not in (0, 1) or e2_wc not in (0, 1)
                    or (e1.poly_type != e2.poly_type and self._clip_type != ClipType.XOR)):
                self._add_local_max_poly(e1, e2, pt)
            else:
                self._add_out_pt(e1, pt)
                self._add_out_pt(e2, pt)
                _swap_sides(e1, e2)
                _swap_poly_indexes(e1, e2)
        elif e1_contributing:
            if e2_wc in (0, 1):
                self._add_out_pt(e1, pt)
                _swap_sides(e1, e2)
                _swap_poly_indexes(e1, e2)
        elif e2_contributing:
            if e1_wc in (0, 1):
                self._add_out_pt(e2, pt)
                _swap_sides(e1, e2)
                _swap_poly_indexes(e1, e2)
        elif e1_wc in (0, 1) and e2_wc in (0, 1):
            # neither edge is contributing yet
            e1_wc2 = _fill_count(e1_fill2, e1.wind_cnt2)
            e2_wc2 = _fill_count(e2_fill2, e2.wind_cnt2)

            if e1.poly_type != e2.poly_type:
                self._add_local_min_poly(e1, e2, pt)
            elif e1_wc == 1 and e2_wc == 1:
                if self._clip_type == ClipType.INTERSECTION:
                    if e1_wc2 > 0 and e2_wc2 > 0:
                        self._add_local_min_poly(e1, e2, pt)
                elif self._clip_type == ClipType.UNION:
                    if e1_wc2 <= 0 and e2_wc2 <= 0:
                        self._add_local_min_poly(e1, e2, pt)
                elif self._clip_type == ClipType.DIFFERENCE:
                    if ((e1.poly_type == PolyType.CLIP and e1_wc2 > 0 and e2_wc2 > 0)
                            or (e1.poly_type == PolyType.SUBJECT and e1_wc2 <= 0 and e2_wc2 <= 0)):
                        self._add_local_min_poly(e1, e2, pt)
                else:
                    self._add_local_min_poly(e1, e2, pt)
            else:
                _swap_sides(e1, e2)

    def _intersect_open_edges(
        self,
        e1: TEdge,
        e2: TEdge,
        pt: IntPoint,
        e1_contributing: bool,
        e2_contributing: bool,
    ) -> None:
        # two open paths never interact
        if e1.wind_delta == 0 and e2.wind_delta == 0:
            return

        if (e1.poly_type == e2.poly_type and e1.wind_delta != e2.wind_delta
                and self._clip_type == ClipType.UNION):
            # a subject line crossing a subject polygon
            if e1.wind_delta == 0:
                if e2_contributing:
                    self._add_out_pt(e1, pt)
                    if e1_contributing:
                        e1.out_idx = UNASSIGNED
            elif e1_contributing:
                self._add_out_pt(e2, pt)
                if e2_contributing:
                    e2.out_idx = UNASSIGNED
        elif e1.poly_type != e2.poly_type:
            if (e1.wind_delta == 0 and abs(e2.wind_cnt) == 1
                    and (self._clip_type != ClipType.UNION or e2.wind_cnt2 == 0)):
                self._add_out_pt(e1, pt)
                if e1_contributing:
                    e1.out_idx = UNASSIGNED
            elif (e2.wind_delta == 0 and abs(e1.wind_cnt) == 1
                    and (self._clip_type != ClipType.UNION or e1.wind_cnt2 == 0)):
                self._add_out_pt(e2, pt)
                if e2_contributing:
                    e2.out_idx = UNASSIGNED

"""Output ring construction, join resolution and result building.

Rings are circular doubly-linked lists of OutPt held by OutRec records in
the index-addressed ``_poly_outs`` list. Edges refer to rings by index only.
When two rings merge, the absorbed record keeps its slot but its idx is
re-pointed at the survivor; get_out_rec follows that chain.
"""

from __future__ import annotations

from ..geometry.primitives import IntPoint, Path, Paths, PolyNode, PolyTree
from .base import pt2_is_between_pt1_and_pt3, slopes_equal3, slopes_equal4, top_x
from .types import (
    HORIZONTAL,
    UNASSIGNED,
    Direction,
    EdgeSide,
    Join,
    OutPt,
    OutRec,
    TEdge,
    is_horizontal,
)


def _get_dx(pt1: IntPoint, pt2: IntPoint) -> float:
    if pt1.y == pt2.y:
        return HORIZONTAL
    return (pt2.x - pt1.x) / (pt2.y - pt1.y)


def _point_count(pts: OutPt | None) -> int:
    if pts is None:
        return 0
    result = 0
    p = pts
    while True:
        result += 1
        p = p.next
        if p is pts:
            return result


def out_pt_area(op: OutPt | None) -> float:
    """Signed area of a ring, same sign convention as primitives.area."""
    if op is None:
        return 0.0
    first = op
    a = 0
    while True:
        a += (op.prev.pt.x + op.pt.x) * (op.prev.pt.y - op.pt.y)
        op = op.next
        if op is first:
            break
    return a * 0.5


def reverse_poly_pt_links(pp: OutPt | None) -> None:
    if pp is None:
        return
    pp1 = pp
    while True:
        pp2 = pp1.next
        pp1.next = pp1.prev
        pp1.prev = pp2
        pp1 = pp2
        if pp1 is pp:
            break


def point_in_out_pts(pt: IntPoint, op: OutPt) -> int:
    """1 inside, 0 outside, -1 on the boundary of the ring starting at op."""
    result = 0
    start_op = op
    ptx, pty = pt.x, pt.y
    poly0x, poly0y = op.pt.x, op.pt.y
    while True:
        op = op.next
        poly1x, poly1y = op.pt.x, op.pt.y
        if poly1y == pty:
            if poly1x == ptx or (poly0y == pty and ((poly1x > ptx) == (poly0x < ptx))):
                return -1
        if (poly0y < pty) != (poly1y < pty):
            if poly0x >= ptx:
                if poly1x > ptx:
                    result = 1 - result
                else:
                    d = (poly0x - ptx) * (poly1y - pty) - (poly1x - ptx) * (poly0y - pty)
                    if d == 0:
                        return -1
                    if (d > 0) == (poly1y > poly0y):
                        result = 1 - result
            elif poly1x > ptx:
                d = (poly0x - ptx) * (poly1y - pty) - (poly1x - ptx) * (poly0y - pty)
                if d == 0:
                    return -1
                if (d > 0) == (poly1y > poly0y):
                    result = 1 - result
        poly0x, poly0y = poly1x, poly1y
        if op is start_op:
            break
    return result


def poly2_contains_poly1(out_pt1: OutPt, out_pt2: OutPt) -> bool:
    op = out_pt1
    while True:
        res = point_in_out_pts(op.pt, out_pt2)
        if res >= 0:
            return res > 0
        op = op.next
        if op is out_pt1:
            break
    return True


def parse_first_left(first_left: OutRec | None) -> OutRec | None:
    """Walk up the containment chain to the first ring that still has points."""
    while first_left is not None and first_left.pts is None:
        first_left = first_left.first_left
    return first_left


def _first_is_bottom_pt(btm_pt1: OutPt, btm_pt2: OutPt) -> bool:
    p = btm_pt1.prev
    while p.pt == btm_pt1.pt and p is not btm_pt1:
        p = p.prev
    dx1p = abs(_get_dx(btm_pt1.pt, p.pt))
    p = btm_pt1.next
    while p.pt == btm_pt1.pt and p is not btm_pt1:
        p = p.next
    dx1n = abs(_get_dx(btm_pt1.pt, p.pt))

    p = btm_pt2.prev
    while p.pt == btm_pt2.pt and p is not btm_pt2:
        p = p.prev
    dx2p = abs(_get_dx(btm_pt2.pt, p.pt))
    p = btm_pt2.next
    while p.pt == btm_pt2.pt and p is not btm_pt2:
        p = p.next
    dx2n = abs(_get_dx(btm_pt2.pt, p.pt))

    if max(dx1p, dx1n) == max(dx2p, dx2n) and min(dx1p, dx1n) == min(dx2p, dx2n):
        # otherwise identical, so use orientation
        return out_pt_area(btm_pt1) > 0
    return (dx1p >= dx2p and dx1p >= dx2n) or (dx1n >= dx2p and dx1n >= dx2n)


def _get_bottom_pt(pp: OutPt) -> OutPt:
    dups = None
    p = pp.next
    while p is not pp:
        if p.pt.y > pp.pt.y:
            pp = p
            dups = None
        elif p.pt.y == pp.pt.y and p.pt.x <= pp.pt.x:
            if p.pt.x < pp.pt.x:
                dups = None
                pp = p
            elif p.next is not pp and p.prev is not pp:
                dups = p
        p = p.next
    if dups is not None:
        # at least two vertices share the bottom point
        while dups is not p:
            if not _first_is_bottom_pt(p, dups):
                pp = dups
            dups = dups.next
            while dups.pt != pp.pt:
                dups = dups.next
    return pp


def _get_lowermost_rec(out_rec1: OutRec, out_rec2: OutRec) -> OutRec:
    """Whichever of two fragments carries the correct hole state."""
    if out_rec1.bottom_pt is None:
        out_rec1.bottom_pt = _get_bottom_pt(out_rec1.pts)
    if out_rec2.bottom_pt is None:
        out_rec2.bottom_pt = _get_bottom_pt(out_rec2.pts)
    b_pt1 = out_rec1.bottom_pt
    b_pt2 = out_rec2.bottom_pt
    if b_pt1.pt.y > b_pt2.pt.y:
        return out_rec1
    if b_pt1.pt.y < b_pt2.pt.y:
        return out_rec2
    if b_pt1.pt.x < b_pt2.pt.x:
        return out_rec1
    if b_pt1.pt.x > b_pt2.pt.x:
        return out_rec2
    if b_pt1.next is b_pt1:
        return out_rec2
    if b_pt2.next is b_pt2:
        return out_rec1
    if _first_is_bottom_pt(b_pt1, b_pt2):
        return out_rec1
    return out_rec2


def _out_rec1_right_of_out_rec2(out_rec1: OutRec | None, out_rec2: OutRec) -> bool:
    while True:
        out_rec1 = out_rec1.first_left
        if out_rec1 is out_rec2:
            return True
        if out_rec1 is None:
            return False


def _dup_out_pt(out_pt: OutPt, insert_after: bool) -> OutPt:
    result = OutPt(out_pt.idx, out_pt.pt)
    if insert_after:
        result.next = out_pt.next
        result.prev = out_pt
        out_pt.next.prev = result
        out_pt.next = result
    else:
        result.prev = out_pt.prev
        result.next = out_pt
        out_pt.prev.next = result
        out_pt.prev = result
    return result


def _get_overlap(a1: int, a2: int, b1: int, b2: int) -> tuple[bool, int, int]:
    if a1 < a2:
        if b1 < b2:
            left, right = max(a1, b1), min(a2, b2)
        else:
            left, right = max(a1, b2), min(a2, b1)
    elif b1 < b2:
        left, right = max(a2, b1), min(a1, b2)
    else:
        left, right = max(a2, b2), min(a1, b1)
    return left < right, left, right


def _advance_along_horz(op: OutPt, pt: IntPoint, direction: Direction, discard_left: bool) -> tuple[OutPt, OutPt]:
    """Split a horizontal run at pt, returning the vertex and its duplicate."""
    if direction == Direction.LEFT_TO_RIGHT:
        while op.next.pt.x <= pt.x and op.next.pt.x >= op.pt.x and op.next.pt.y == pt.y:
            op = op.next
        if discard_left and op.pt.x != pt.x:
            op = op.next
        insert_after = not discard_left
    else:
        while op.next.pt.x >= pt.x and op.next.pt.x <= op.pt.x and op.next.pt.y == pt.y:
            op = op.next
        if not discard_left and op.pt.x != pt.x:
            op = op.next
        insert_after = discard_left
    opb = _dup_out_pt(op, insert_after)
    if opb.pt != pt:
        op = opb
        op.pt = pt
        opb = _dup_out_pt(op, insert_after)
    return op, opb


def _join_horz(op1: OutPt, op1b: OutPt, op2: OutPt, op2b: OutPt, pt: IntPoint, discard_left: bool) -> bool:
    dir1 = Direction.RIGHT_TO_LEFT if op1.pt.x > op1b.pt.x else Direction.LEFT_TO_RIGHT
    dir2 = Direction.RIGHT_TO_LEFT if op2.pt.x > op2b.pt.x else Direction.LEFT_TO_RIGHT
    if dir1 == dir2:
        return False

    # when discard_left, op1b ends up left of op1, otherwise right of it
    op1, op1b = _advance_along_horz(op1, pt, dir1, discard_left)
    op2, op2b = _advance_along_horz(op2, pt, dir2, discard_left)

    if (dir1 == Direction.LEFT_TO_RIGHT) == discard_left:
        op1.prev = op2
        op2.next = op1
        op1b.next = op2b
        op2b.prev = op1b
    else:
        op1.next = op2
        op2.prev = op1
        op1b.prev = op2b
        op2b.next = op1b
    return True


def _splice_join(j: Join, op1: OutPt, op2: OutPt, reverse1: bool) -> None:
    if reverse1:
        op1b = _dup_out_pt(op1, False)
        op2b = _dup_out_pt(op2, True)
        op1.prev = op2
        op2.next = op1
        op1b.next = op2b
        op2b.prev = op1b
    else:
        op1b = _dup_out_pt(op1, True)
        op2b = _dup_out_pt(op2, False)
        op1.next = op2
        op2.prev = op1
        op1b.prev = op2b
        op2b.next = op1b
    j.out_pt1 = op1
    j.out_pt2 = op1b


class OutputMixin:
    """Ring building for Clipper."""

    _poly_outs: list[OutRec]
    _active_edges: TEdge | None
    _joins: list[Join]
    _ghost_joins: list[Join]
    _using_poly_tree: bool
    reverse_solution: bool
    strictly_simple: bool
    preserve_collinear: bool

    # ------------------------------------------------------------------
    # Emission during the sweep
    # ------------------------------------------------------------------

    def _add_join(self, op1: OutPt, op2: OutPt, off_pt: IntPoint) -> None:
        self._joins.append(Join(op1, op2, off_pt))

    def _add_ghost_join(self, op: OutPt, off_pt: IntPoint) -> None:
        self._ghost_joins.append(Join(op, None, off_pt))

    def _add_out_pt(self, e: TEdge, pt: IntPoint) -> OutPt:
        if e.out_idx < 0:
            out_rec = self._create_out_rec()
            out_rec.is_open = e.wind_delta == 0
            new_op = OutPt(out_rec.idx, pt)
            out_rec.pts = new_op
            if not out_rec.is_open:
                self._set_hole_state(e, out_rec)
            e.out_idx = out_rec.idx
            return new_op

        out_rec = self._poly_outs[e.out_idx]
        # pts is the left-most point, pts.prev the right-most
        op = out_rec.pts
        to_front = e.side == EdgeSide.LEFT
        if to_front and pt == op.pt:
            return op
        if not to_front and pt == op.prev.pt:
            return op.prev

        new_op = OutPt(out_rec.idx, pt)
        new_op.next = op
        new_op.prev = op.prev
        new_op.prev.next = new_op
        op.prev = new_op
        if to_front:
            out_rec.pts = new_op
        return new_op

    def _get_last_out_pt(self, e: TEdge) -> OutPt:
        out_rec = self._poly_outs[e.out_idx]
        if e.side == EdgeSide.LEFT:
            return out_rec.pts
        return out_rec.pts.prev

    def _add_local_min_poly(self, e1: TEdge, e2: TEdge, pt: IntPoint) -> OutPt:
        if is_horizontal(e2) or e1.dx > e2.dx:
            result = self._add_out_pt(e1, pt)
            e2.out_idx = e1.out_idx
            e1.side = EdgeSide.LEFT
            e2.side = EdgeSide.RIGHT
            e = e1
            prev_e = e2.prev_in_ael if e.prev_in_ael is e2 else e.prev_in_ael
        else:
            result = self._add_out_pt(e2, pt)
            e1.out_idx = e2.out_idx
            e1.side = EdgeSide.RIGHT
            e2.side = EdgeSide.LEFT
            e = e2
            prev_e = e1.prev_in_ael if e.prev_in_ael is e1 else e.prev_in_ael

        if (prev_e is not None and prev_e.out_idx >= 0
                and prev_e.top.y < pt.y and e.top.y < pt.y):
            x_prev = top_x(prev_e, pt.y)
            x_e = top_x(e, pt.y)
            if (x_prev == x_e and e.wind_delta != 0 and prev_e.wind_delta != 0
                    and slopes_equal4(IntPoint(x_prev, pt.y), prev_e.top, IntPoint(x_e, pt.y), e.top)):
                out_pt = self._add_out_pt(prev_e, pt)
                self._add_join(result, out_pt, e.top)
        return result

    def _add_local_max_poly(self, e1: TEdge, e2: TEdge, pt: IntPoint) -> None:
        self._add_out_pt(e1, pt)
        if e2.wind_delta == 0:
            self._add_out_pt(e2, pt)
        if e1.out_idx == e2.out_idx:
            e1.out_idx = UNASSIGNED
            e2.out_idx = UNASSIGNED
        elif e1.out_idx < e2.out_idx:
            self._append_polygon(e1, e2)
        else:
            self._append_polygon(e2, e1)

    def _set_hole_state(self, e: TEdge, out_rec: OutRec) -> None:
        e2 = e.prev_in_ael
        e_tmp = None
        while e2 is not None:
            if e2.out_idx >= 0 and e2.wind_delta != 0:
                if e_tmp is None:
                    e_tmp = e2
                elif e_tmp.out_idx == e2.out_idx:
                    e_tmp = None  # paired
            e2 = e2.prev_in_ael
        if e_tmp is None:
            out_rec.first_left = None
            out_rec.is_hole = False
        else:
            out_rec.first_left = self._poly_outs[e_tmp.out_idx]
            out_rec.is_hole = not out_rec.first_left.is_hole

    def _get_out_rec(self, idx: int) -> OutRec:
        out_rec = self._poly_outs[idx]
        while out_rec is not self._poly_outs[out_rec.idx]:
            out_rec = self._poly_outs[out_rec.idx]
        return out_rec

    def _append_polygon(self, e1: TEdge, e2: TEdge) -> None:
        out_rec1 = self._poly_outs[e1.out_idx]
        out_rec2 = self._poly_outs[e2.out_idx]

        if _out_rec1_right_of_out_rec2(out_rec1, out_rec2):
            hole_state_rec = out_rec2
        elif _out_rec1_right_of_out_rec2(out_rec2, out_rec1):
            hole_state_rec = out_rec1
        else:
            hole_state_rec = _get_lowermost_rec(out_rec1, out_rec2)

        p1_lft = out_rec1.pts
        p1_rt = p1_lft.prev
        p2_lft = out_rec2.pts
        p2_rt = p2_lft.prev

        # join e2's ring onto e1's ring
        if e1.side == EdgeSide.LEFT:
            if e2.side == EdgeSide.LEFT:
                # z y x a b c
                reverse_poly_pt_links(p2_lft)
                p2_lft.next = p1_lft
                p1_lft.prev = p2_lft
                p1_rt.next = p2_rt
                p2_rt.prev = p1_rt
                out_rec1.pts = p2_rt
            else:
                # x y z a b c
                p2_rt.next = p1_lft
                p1_lft.prev = p2_rt
                p2_lft.prev = p1_rt
                p1_rt.next = p2_lft
                out_rec1.pts = p2_lft
        elif e2.side == EdgeSide.RIGHT:
            # a b c z y x
            reverse_poly_pt_links(p2_lft)
            p1_rt.next = p2_rt
            p2_rt.prev = p1_rt
            p2_lft.next = p1_lft
            p1_lft.prev = p2_lft
        else:
            # a b c x y z
            p1_rt.next = p2_lft
            p2_lft.prev = p1_rt
            p1_lft.prev = p2_rt
            p2_rt.next = p1_lft

        out_rec1.bottom_pt = None
        if hole_state_rec is out_rec2:
            if out_rec2.first_left is not out_rec1:
                out_rec1.first_left = out_rec2.first_left
            out_rec1.is_hole = out_rec2.is_hole
        out_rec2.pts = None
        out_rec2.bottom_pt = None
        out_rec2.first_left = out_rec1

        ok_idx = e1.out_idx
        obsolete_idx = e2.out_idx

        # only reached through add_local_max_poly, so both edges are done
        e1.out_idx = UNASSIGNED
        e2.out_idx = UNASSIGNED

        e = self._active_edges
        while e is not None:
            if e.out_idx == obsolete_idx:
                e.out_idx = ok_idx
                e.side = e1.side
                break
            e = e.next_in_ael
        out_rec2.idx = out_rec1.idx

    # ------------------------------------------------------------------
    # Post-sweep fixups
    # ------------------------------------------------------------------

    def _fixup_out_polyline(self, out_rec: OutRec) -> None:
        pp = out_rec.pts
        last_pp = pp.prev
        while pp is not last_pp:
            pp = pp.next
            if pp.pt == pp.prev.pt:
                if pp is last_pp:
                    last_pp = pp.prev
                tmp_pp = pp.prev
                tmp_pp.next = pp.next
                pp.next.prev = tmp_pp
                pp = tmp_pp
        if pp is pp.prev:
            out_rec.pts = None

    def _fixup_out_polygon(self, out_rec: OutRec) -> None:
        """Remove duplicate vertices and merge collinear edges."""
        last_ok = None
        out_rec.bottom_pt = None
        pp = out_rec.pts
        preserve_col = self.preserve_collinear or self.strictly_simple
        while True:
            if pp.prev is pp or pp.prev is pp.next:
                out_rec.pts = None
                return
            if (pp.pt == pp.next.pt or pp.pt == pp.prev.pt
                    or (slopes_equal3(pp.prev.pt, pp.pt, pp.next.pt)
                        and (not preserve_col
                             or not pt2_is_between_pt1_and_pt3(pp.prev.pt, pp.pt, pp.next.pt)))):
                last_ok = None
                pp.prev.next = pp.next
                pp.next.prev = pp.prev
                pp = pp.prev
            elif pp is last_ok:
                break
            else:
                if last_ok is None:
                    last_ok = pp
                pp = pp.next
        out_rec.pts = pp

    def _fix_hole_linkage(self, out_rec: OutRec) -> None:
        # outermost, or already pointing at the right container
        if out_rec.first_left is None or (
            out_rec.is_hole != out_rec.first_left.is_hole and out_rec.first_left.pts is not None
        ):
            return
        orfl = out_rec.first_left
        while orfl is not None and (orfl.is_hole == out_rec.is_hole or orfl.pts is None):
            orfl = orfl.first_left
        out_rec.first_left = orfl

    def _update_out_pt_idxs(self, out_rec: OutRec) -> None:
        op = out_rec.pts
        while True:
            op.idx = out_rec.idx
            op = op.prev
            if op is out_rec.pts:
                break

    def _fixup_first_lefts1(self, old_out_rec: OutRec, new_out_rec: OutRec) -> None:
        for out_rec in self._poly_outs:
            first_left = parse_first_left(out_rec.first_left)
            if out_rec.pts is not None and first_left is old_out_rec:
                if poly2_contains_poly1(out_rec.pts, new_out_rec.pts):
                    out_rec.first_left = new_out_rec

    def _fixup_first_lefts2(self, inner_out_rec: OutRec, outer_out_rec: OutRec) -> None:
        # a ring split so that one part is now inside the other; rings that
        # shared the outer's container may now belong to either part
        orfl = outer_out_rec.first_left
        for out_rec in self._poly_outs:
            if out_rec.pts is None or out_rec is outer_out_rec or out_rec is inner_out_rec:
                continue
            first_left = parse_first_left(out_rec.first_left)
            if first_left is not orfl and first_left is not inner_out_rec and first_left is not outer_out_rec:
                continue
            if poly2_contains_poly1(out_rec.pts, inner_out_rec.pts):
                out_rec.first_left = inner_out_rec
            elif poly2_contains_poly1(out_rec.pts, outer_out_rec.pts):
                out_rec.first_left = outer_out_rec
            elif out_rec.first_left is inner_out_rec or out_rec.first_left is outer_out_rec:
                out_rec.first_left = orfl

    def _fixup_first_lefts3(self, old_out_rec: OutRec, new_out_rec: OutRec) -> None:
        for out_rec in self._poly_outs:
            first_left = parse_first_left(out_rec.first_left)
            if out_rec.pts is not None and first_left is old_out_rec:
                out_rec.first_left = new_out_rec

    def _join_points(self, j: Join, out_rec1: OutRec, out_rec2: OutRec) -> bool:
        """Splice the two rings of a join together.

        Joins come in three kinds: horizontal joins whose vertices lie
        anywhere along collinear horizontal edges, non-horizontal joins
        whose vertices coincide at the bottom of an overlapping segment,
        and strictly-simple joins where the edges only touch at off_pt.
        """
        op1 = j.out_pt1
        op2 = j.out_pt2
        is_horz = j.out_pt1.pt.y == j.off_pt.y

        if is_horz and j.off_pt == j.out_pt1.pt and j.off_pt == j.out_pt2.pt:
            if out_rec1 is not out_rec2:
                return False
            op1b = j.out_pt1.next
            while op1b is not op1 and op1b.pt == j.off_pt:
                op1b = op1b.next
            reverse1 = op1b.pt.y > j.off_pt.y
            op2b = j.out_pt2.next
            while op2b is not op2 and op2b.pt == j.off_pt:
                op2b = op2b.next
            reverse2 = op2b.pt.y > j.off_pt.y
            if reverse1 == reverse2:
                return False
            _splice_join(j, op1, op2, reverse1)
            return True

        if is_horz:
            # op1..op1b and op2..op2b become the extremes of the horizontals
            op1b = op1
            while op1.prev.pt.y == op1.pt.y and op1.prev is not op1b and op1.prev is not op2:
                op1 = op1.prev
            while op1b.next.pt.y == op1b.pt.y and op1b.next is not op1 and op1b.next is not op2:
                op1b = op1b.next
            if op1b.next is op1 or op1b.next is op2:
                return False  # flat ring

            op2b = op2
            while op2.prev.pt.y == op2.pt.y and op2.prev is not op2b and op2.prev is not op1b:
                op2 = op2.prev
            while op2b.next.pt.y == op2b.pt.y and op2b.next is not op2 and op2b.next is not op1:
                op2b = op2b.next
            if op2b.next is op2 or op2b.next is op1:
                return False  # flat ring

            overlaps, left, right = _get_overlap(op1.pt.x, op1b.pt.x, op2.pt.x, op2b.pt.x)
            if not overlaps:
                return False

            # keep op1 and op2 off the discarded side; they may serve later joins
            if left <= op1.pt.x <= right:
                pt = op1.pt
                discard_left_side = op1.pt.x > op1b.pt.x
            elif left <= op2.pt.x <= right:
                pt = op2.pt
                discard_left_side = op2.pt.x > op2b.pt.x
            elif left <= op1b.pt.x <= right:
                pt = op1b.pt
                discard_left_side = op1b.pt.x > op1.pt.x
            else:
                pt = op2b.pt
                discard_left_side = op2b.pt.x > op2.pt.x
            j.out_pt1 = op1
            j.out_pt2 = op2
            return _join_horz(op1, op1b, op2, op2b, pt, discard_left_side)

        # non-horizontal: out_pt1 and out_pt2 share Y, off_pt lies above
        op1b = op1.next
        while op1b.pt == op1.pt and op1b is not op1:
            op1b = op1b.next
        reverse1 = op1b.pt.y > op1.pt.y or not slopes_equal3(op1.pt, op1b.pt, j.off_pt)
        if reverse1:
            op1b = op1.prev
            while op1b.pt == op1.pt and op1b is not op1:
                op1b = op1b.prev
            if op1b.pt.y > op1.pt.y or not slopes_equal3(op1.pt, op1b.pt, j.off_pt):
                return False

        op2b = op2.next
        while op2b.pt == op2.pt and op2b is not op2:
            op2b = op2b.next
        reverse2 = op2b.pt.y > op2.pt.y or not slopes_equal3(op2.pt, op2b.pt, j.off_pt)
        if reverse2:
            op2b = op2.prev
            while op2b.pt == op2.pt and op2b is not op2:
                op2b = op2b.prev
            if op2b.pt.y > op2.pt.y or not slopes_equal3(op2.pt, op2b.pt, j.off_pt):
                return False

        if (op1b is op1 or op2b is op2 or op1b is op2b
                or (out_rec1 is out_rec2 and reverse1 == reverse2)):
            return False

        _splice_join(j, op1, op2, reverse1)
        return True

    def _split_rings(self, out_rec1: OutRec, out_rec2: OutRec, fix_orientation: bool) -> None:
        """Set hole state and containment of a ring that was just split in two."""
        if poly2_contains_poly1(out_rec2.pts, out_rec1.pts):
            # out_rec1 contains out_rec2
            out_rec2.is_hole = not out_rec1.is_hole
            out_rec2.first_left = out_rec1
            if self._using_poly_tree:
                self._fixup_first_lefts2(out_rec2, out_rec1)
            if fix_orientation and (out_rec2.is_hole ^ self.reverse_solution) == (out_pt_area(out_rec2.pts) > 0):
                reverse_poly_pt_links(out_rec2.pts)
        elif poly2_contains_poly1(out_rec1.pts, out_rec2.pts):
            # out_rec2 contains out_rec1
            out_rec2.is_hole = out_rec1.is_hole
            out_rec1.is_hole = not out_rec2.is_hole
            out_rec2.first_left = out_rec1.first_left
            out_rec1.first_left = out_rec2
            if self._using_poly_tree:
                self._fixup_first_lefts2(out_rec1, out_rec2)
            if fix_orientation and (out_rec1.is_hole ^ self.reverse_solution) == (out_pt_area(out_rec1.pts) > 0):
                reverse_poly_pt_links(out_rec1.pts)
        else:
            # separate rings
            out_rec2.is_hole = out_rec1.is_hole
            out_rec2.first_left = out_rec1.first_left
            if self._using_poly_tree:
                self._fixup_first_lefts1(out_rec1, out_rec2)

    def _join_common_edges(self) -> None:
        for join in self._joins:
            out_rec1 = self._get_out_rec(join.out_pt1.idx)
            out_rec2 = self._get_out_rec(join.out_pt2.idx)

            if out_rec1.pts is None or out_rec2.pts is None:
                continue
            if out_rec1.is_open or out_rec2.is_open:
                continue

            # settle which fragment carries the hole state before splicing
            if out_rec1 is out_rec2:
                hole_state_rec = out_rec1
            elif _out_rec1_right_of_out_rec2(out_rec1, out_rec2):
                hole_state_rec = out_rec2
            elif _out_rec1_right_of_out_rec2(out_rec2, out_rec1):
                hole_state_rec = out_rec1
            else:
                hole_state_rec = _get_lowermost_rec(out_rec1, out_rec2)

            if not self._join_points(join, out_rec1, out_rec2):
                continue

            if out_rec1 is out_rec2:
                # one ring was split into two
                out_rec1.pts = join.out_pt1
                out_rec1.bottom_pt = None
                out_rec2 = self._create_out_rec()
                out_rec2.pts = join.out_pt2
                self._update_out_pt_idxs(out_rec2)
                self._split_rings(out_rec1, out_rec2, fix_orientation=True)
            else:
                # two rings were merged into one
                out_rec2.pts = None
                out_rec2.bottom_pt = None
                out_rec2.idx = out_rec1.idx

                out_rec1.is_hole = hole_state_rec.is_hole
                if hole_state_rec is out_rec2:
                    out_rec1.first_left = out_rec2.first_left
                out_rec2.first_left = out_rec1

                if self._using_poly_tree:
                    self._fixup_first_lefts3(out_rec2, out_rec1)

    def _do_simple_polygons(self) -> None:
        """Split rings at repeated vertices so every output is strictly simple."""
        i = 0
        while i < len(self._poly_outs):
            out_rec = self._poly_outs[i]
            i += 1
            op = out_rec.pts
            if op is None or out_rec.is_open:
                continue
            while True:
                op2 = op.next
                while op2 is not out_rec.pts:
                    if op.pt == op2.pt and op2.next is not op and op2.prev is not op:
                        op3 = op.prev
                        op4 = op2.prev
                        op.prev = op4
                        op4.next = op
                        op2.prev = op3
                        op3.next = op2

                        out_rec.pts = op
                        out_rec2 = self._create_out_rec()
                        out_rec2.pts = op2
                        self._update_out_pt_idxs(out_rec2)
                        self._split_rings(out_rec, out_rec2, fix_orientation=False)
                        op2 = op
                    op2 = op2.next
                op = op.next
                if op is out_rec.pts:
                    break

    # ------------------------------------------------------------------
    # Result building
    # ------------------------------------------------------------------

    def _build_result(self) -> Paths:
        polys: Paths = []
        for out_rec in self._poly_outs:
            if out_rec.pts is None:
                continue
            p = out_rec.pts.prev
            cnt = _point_count(p)
            if cnt < 2:
                continue
            pg: Path = []
            for _ in range(cnt):
                pg.append(p.pt)
                p = p.prev
            polys.append(pg)
        return polys

    def _build_result_tree(self) -> PolyTree:
        polytree = PolyTree()
        for out_rec in self._poly_outs:
            cnt = _point_count(out_rec.pts)
            if (out_rec.is_open and cnt < 2) or (not out_rec.is_open and cnt < 3):
                continue
            self._fix_hole_linkage(out_rec)
            pn = PolyNode()
            polytree.all_nodes.append(pn)
            out_rec.poly_node = pn
            op = out_rec.pts.prev
            for _ in range(cnt):
                pn.contour.append(op.pt)
                op = op.prev

        for out_rec in self._poly_outs:
            if out_rec.poly_node is None:
                continue
            if out_rec.is_open:
                out_rec.poly_node.is_open = True
                polytree.add_child(out_rec.poly_node)
            elif out_rec.first_left is not None and out_rec.first_left.poly_node is not None:
                out_rec.first_left.poly_node.add_child(out_rec.poly_node)
            else:
                polytree.add_child(out_rec.poly_node)
        return polytree

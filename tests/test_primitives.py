"""Tests for integer path primitives and polygon trees."""

import pytest

from polyclip.engine.base import cround
from polyclip.geometry.primitives import (
    IntPoint,
    IntRect,
    PointLocation,
    PolyNode,
    PolyTree,
    area,
    get_bounds,
    open_paths_from_polytree,
    orientation,
    point_in_polygon,
    polytree_to_paths,
    reverse_path,
)

SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]


class TestArea:
    """Test signed area and orientation."""

    def test_counter_clockwise_square_positive(self):
        """Counter-clockwise rings have positive area."""
        assert area(SQUARE) == pytest.approx(100.0)
        assert orientation(SQUARE)

    def test_clockwise_square_negative(self):
        """Clockwise rings have negative area."""
        cw = list(reversed(SQUARE))
        assert area(cw) == pytest.approx(-100.0)
        assert not orientation(cw)

    def test_degenerate_path_has_zero_area(self):
        """Fewer than three points enclose nothing."""
        assert area([(0, 0), (5, 5)]) == 0.0
        assert area([]) == 0.0

    def test_reverse_path_flips_sign(self):
        """Reversing in place negates the area."""
        path = [IntPoint(*p) for p in SQUARE]
        reverse_path(path)
        assert area(path) == pytest.approx(-100.0)


class TestPointInPolygon:
    """Test point classification."""

    def test_inside(self):
        """Centre of the square is inside."""
        assert point_in_polygon((5, 5), SQUARE) == PointLocation.INSIDE

    def test_outside(self):
        """A point right of the square is outside."""
        assert point_in_polygon((15, 5), SQUARE) == PointLocation.OUTSIDE

    def test_on_edge(self):
        """Points on an edge are on the boundary."""
        assert point_in_polygon((10, 5), SQUARE) == PointLocation.ON_BOUNDARY

    def test_on_vertex(self):
        """Vertices themselves are on the boundary."""
        assert point_in_polygon((0, 0), SQUARE) == PointLocation.ON_BOUNDARY

    def test_orientation_does_not_matter(self):
        """Classification ignores ring direction."""
        assert point_in_polygon((5, 5), list(reversed(SQUARE))) == PointLocation.INSIDE

    def test_too_few_vertices_is_outside(self):
        """A two-point path contains nothing."""
        assert point_in_polygon((0, 0), [(0, 0), (1, 1)]) == PointLocation.OUTSIDE


class TestBounds:
    """Test bounding rectangles."""

    def test_bounds_of_several_paths(self):
        """Bounds cover every path."""
        r = get_bounds([SQUARE, [(-5, 3), (2, 20), (1, 1)]])
        assert r == IntRect(-5, 0, 10, 20)

    def test_empty_bounds_are_zero(self):
        """No points gives a zero rectangle."""
        assert get_bounds([]) == IntRect(0, 0, 0, 0)
        assert get_bounds([[]]) == IntRect(0, 0, 0, 0)


class TestRounding:
    """Test half-away-from-zero rounding."""

    def test_halves_round_away_from_zero(self):
        """Exact halves move away from zero."""
        assert cround(2.5) == 3
        assert cround(-2.5) == -3

    def test_near_integers(self):
        """Values below a half round towards zero."""
        assert cround(1.49) == 1
        assert cround(-1.49) == -1
        assert cround(0.0) == 0


class TestPolyTree:
    """Test hierarchy bookkeeping."""

    def _build(self):
        tree = PolyTree()
        outer = PolyNode()
        outer.contour = [IntPoint(*p) for p in SQUARE]
        hole = PolyNode()
        hole.contour = [IntPoint(2, 2), IntPoint(2, 8), IntPoint(8, 8), IntPoint(8, 2)]
        line = PolyNode()
        line.contour = [IntPoint(0, 20), IntPoint(10, 20)]
        line.is_open = True
        tree.add_child(outer)
        outer.add_child(hole)
        tree.add_child(line)
        tree.all_nodes = [outer, hole, line]
        return tree, outer, hole, line

    def test_hole_state_follows_depth(self):
        """Odd depths are holes."""
        tree, outer, hole, _ = self._build()
        assert not tree.is_hole
        assert not outer.is_hole
        assert hole.is_hole

    def test_child_indexes(self):
        """Children know their position under the parent."""
        tree, outer, _, line = self._build()
        assert outer.index == 0
        assert line.index == 1
        assert tree.child_count == 2

    def test_depth_first_iteration(self):
        """get_next walks the tree depth first."""
        tree, outer, hole, line = self._build()
        visited = []
        node = tree.get_first()
        while node is not None:
            visited.append(node)
            node = node.get_next()
        assert visited == [outer, hole, line]

    def test_flatten(self):
        """Flattening keeps closed and open contours."""
        tree, _, _, line = self._build()
        assert len(polytree_to_paths(tree)) == 3
        assert open_paths_from_polytree(tree) == [line.contour]
        assert tree.total == 3

    def test_clear(self):
        """clear() empties the tree."""
        tree, *_ = self._build()
        tree.clear()
        assert tree.get_first() is None
        assert tree.total == 0

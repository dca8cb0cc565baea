"""Tests for Boolean combination of closed polygons."""

import pytest

from polyclip import (
    Clipper,
    ClipType,
    PolyFillType,
    PolyType,
    area,
    combine,
    simplify_polygon,
)
from polyclip.contract import validate_solution
from polyclip.models import EngineOptions

SQUARE_A = [(0, 0), (10, 0), (10, 10), (0, 10)]
SQUARE_B = [(5, 5), (15, 5), (15, 15), (5, 15)]

# Pentagram drawn with a single self-intersecting path
STAR = [(0, 100), (59, -81), (-95, 31), (95, 31), (-59, -81)]

# Left lobe winds counter-clockwise, right lobe clockwise
BOWTIE = [(0, 0), (10, 10), (10, 0), (0, 10)]


def total_area(paths):
    return sum(area(p) for p in paths)


class TestOverlappingSquares:
    """Two 10x10 squares overlapping in a 5x5 region."""

    def test_union(self):
        """Union is one hexagon covering both squares."""
        result = combine([SQUARE_A], [SQUARE_B], ClipType.UNION)
        assert result.succeeded
        assert len(result.paths) == 1
        assert total_area(result.paths) == pytest.approx(175.0)

    def test_intersection(self):
        """Intersection is exactly the shared 5x5 square."""
        result = combine([SQUARE_A], [SQUARE_B], ClipType.INTERSECTION)
        assert result.succeeded
        assert len(result.paths) == 1
        assert total_area(result.paths) == pytest.approx(25.0)
        assert sorted(result.paths[0]) == [(5, 5), (5, 10), (10, 5), (10, 10)]

    def test_difference(self):
        """Difference leaves an L shape."""
        result = combine([SQUARE_A], [SQUARE_B], ClipType.DIFFERENCE)
        assert result.succeeded
        assert total_area(result.paths) == pytest.approx(75.0)

    def test_xor(self):
        """Xor keeps both squares minus the overlap."""
        result = combine([SQUARE_A], [SQUARE_B], ClipType.XOR)
        assert result.succeeded
        assert total_area(result.paths) == pytest.approx(150.0)

    def test_outputs_are_counter_clockwise(self):
        """Outer rings come back with positive area."""
        result = combine([SQUARE_A], [SQUARE_B], ClipType.UNION)
        assert all(area(p) > 0 for p in result.paths)

    def test_reverse_solution_flips_orientation(self):
        """reverse_solution emits outer rings clockwise."""
        options = EngineOptions(reverse_solution=True)
        result = combine([SQUARE_A], [SQUARE_B], ClipType.UNION, options=options)
        assert total_area(result.paths) == pytest.approx(-175.0)

    def test_disjoint_intersection_is_empty(self):
        """Squares that never meet intersect to nothing."""
        far = [(100, 100), (110, 100), (110, 110), (100, 110)]
        result = combine([SQUARE_A], [far], ClipType.INTERSECTION)
        assert result.succeeded
        assert result.is_empty


class TestEmptyInputs:
    """Test operations with missing subject or clip."""

    def test_no_paths_succeeds_empty(self):
        """Executing with nothing added is a successful no-op."""
        result = Clipper().execute(ClipType.UNION)
        assert result.succeeded
        assert result.paths == []

    def test_union_without_clip_returns_subject(self):
        """Union of a lone subject is the subject."""
        result = combine([SQUARE_A], [], ClipType.UNION)
        assert result.succeeded
        assert total_area(result.paths) == pytest.approx(100.0)

    def test_intersection_without_clip_is_empty(self):
        """Nothing to intersect with gives nothing."""
        result = combine([SQUARE_A], [], ClipType.INTERSECTION)
        assert result.succeeded
        assert result.is_empty

    def test_degenerate_path_is_ignored(self):
        """Paths without area are refused by add_path."""
        clipper = Clipper()
        assert not clipper.add_path([(0, 0), (5, 5), (0, 0)], PolyType.SUBJECT)
        assert not clipper.add_path([(0, 0), (5, 0), (10, 0)], PolyType.SUBJECT)


class TestFillRules:
    """Test even-odd, non-zero, positive and negative filling."""

    def test_star_even_odd_leaves_centre_empty(self):
        """Even-odd drops the doubly-wound centre of a pentagram."""
        even_odd = combine([STAR], [], ClipType.UNION, PolyFillType.EVEN_ODD)
        non_zero = combine([STAR], [], ClipType.UNION, PolyFillType.NON_ZERO)
        # centre pentagon has circumradius ~38, area ~3470
        difference = total_area(non_zero.paths) - total_area(even_odd.paths)
        assert 3000 < difference < 4000

    def test_star_non_zero_is_single_outline(self):
        """Non-zero fills the pentagram solid."""
        result = combine([STAR], [], ClipType.UNION, PolyFillType.NON_ZERO)
        assert len(result.paths) == 1
        assert area(result.paths[0]) > 0

    def test_positive_fills_counter_clockwise(self):
        """A counter-clockwise square has winding +1."""
        result = combine([SQUARE_A], [], ClipType.UNION, PolyFillType.POSITIVE)
        assert total_area(result.paths) == pytest.approx(100.0)

    def test_negative_ignores_counter_clockwise(self):
        """Negative fill needs clockwise winding."""
        result = combine([SQUARE_A], [], ClipType.UNION, PolyFillType.NEGATIVE)
        assert result.succeeded
        assert result.is_empty

    def test_options_fill_type_used_by_default(self):
        """Without an explicit fill rule the options' fill_type applies."""
        inner = [(2, 2), (8, 2), (8, 8), (2, 8)]
        options = EngineOptions(fill_type=PolyFillType.NON_ZERO)
        result = combine([SQUARE_A, inner], [], ClipType.UNION, options=options)
        # same winding direction so non-zero fills the inner square too
        assert total_area(result.paths) == pytest.approx(100.0)

    def test_even_odd_nested_squares_make_hole(self):
        """Even-odd turns a nested square into a hole."""
        inner = [(2, 2), (8, 2), (8, 8), (2, 8)]
        result = combine([SQUARE_A, inner], [], ClipType.UNION)
        assert len(result.paths) == 2
        assert total_area(result.paths) == pytest.approx(64.0)


class TestStrictlySimple:
    """Test splitting of rings that touch themselves."""

    FIGURE_EIGHT = [(0, 0), (10, 0), (10, 10), (20, 10), (20, 20), (10, 20), (10, 10), (0, 10)]

    def test_touching_ring_is_split(self):
        """A figure eight becomes two squares meeting at a point."""
        result = combine([self.FIGURE_EIGHT], [], ClipType.UNION, options=EngineOptions(strictly_simple=True))
        assert result.succeeded
        assert len(result.paths) == 2
        assert total_area(result.paths) == pytest.approx(200.0)
        assert validate_solution(result.paths, strictly_simple=True) == []


class TestBowtie:
    """Simplify a self-crossing quadrilateral."""

    def test_even_odd_gives_two_triangles(self):
        """Even-odd fills both lobes."""
        paths = simplify_polygon(BOWTIE)
        assert len(paths) == 2
        assert total_area(paths) == pytest.approx(50.0)
        for p in paths:
            assert len(set(p)) == len(p)

    def test_non_zero_gives_two_simple_triangles(self):
        """Non-zero fills both lobes since they wind +1 and -1."""
        paths = simplify_polygon(BOWTIE, PolyFillType.NON_ZERO)
        assert len(paths) == 2
        assert total_area(paths) == pytest.approx(50.0)
        for p in paths:
            assert len(p) == 3
            assert area(p) == pytest.approx(25.0)
        assert validate_solution(paths, strictly_simple=True) == []

    def test_positive_keeps_one_lobe(self):
        """Only the counter-clockwise lobe has positive winding."""
        paths = simplify_polygon(BOWTIE, PolyFillType.POSITIVE)
        assert len(paths) == 1
        assert total_area(paths) == pytest.approx(25.0)

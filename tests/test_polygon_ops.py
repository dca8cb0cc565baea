"""Tests for cleaning, simplification, Minkowski sums and Shapely helpers."""

import math

import pytest
from shapely.geometry import MultiPolygon, Polygon, box

from polyclip import PolyFillType, area
from polyclip.engine import JoinType
from polyclip.geometry import paths_to_geometry, polygon_to_paths, scale_path, unscale_path
from polyclip.geometry.polygon_ops import (
    buffer_polygon,
    clean_polygon,
    clean_polygons,
    inset_polygon,
    intersect_polygons,
    minkowski_diff,
    minkowski_sum,
    simplify_polygons,
    subtract_polygons,
    union_polygons,
)
from polyclip.models import EngineProfile, ScaleOptions

SQUARE = [(0, 0), (100, 0), (100, 100), (0, 100)]
# overlaps SQUARE in a 50x50 corner
SHIFTED = [(50, 50), (150, 50), (150, 150), (50, 150)]


class TestCleanPolygon:
    """Test removal of near-duplicate and near-collinear vertices."""

    def test_close_vertex_removed(self):
        """A vertex one unit from its neighbour is dropped."""
        path = [(0, 0), (1, 0), (100, 0), (100, 100), (0, 100)]
        cleaned = clean_polygon(path)
        assert len(cleaned) == 4
        assert area(cleaned) == pytest.approx(10000.0, abs=100)

    def test_near_collinear_vertex_removed(self):
        """A vertex barely off a straight edge is dropped."""
        path = [(0, 0), (50, 1), (100, 0), (100, 100), (0, 100)]
        cleaned = clean_polygon(path)
        assert set(cleaned) == set(SQUARE)

    def test_distinct_vertices_kept(self):
        """A clearly offset vertex survives."""
        path = [(0, 0), (50, 10), (100, 0), (100, 100), (0, 100)]
        assert len(clean_polygon(path)) == 5

    def test_idempotent(self):
        """Cleaning a cleaned path changes nothing."""
        path = [(0, 0), (1, 1), (50, 1), (100, 0), (101, 1), (100, 100), (0, 100)]
        once = clean_polygon(path)
        assert clean_polygon(once) == once

    def test_collapse_to_empty(self):
        """Paths that lose all area come back empty."""
        assert clean_polygon([(0, 0), (1, 0), (1, 1)]) == []
        assert clean_polygon([]) == []

    def test_larger_distance_removes_more(self):
        """Raising the tolerance strips a shallow notch."""
        path = [(0, 0), (50, 5), (100, 0), (100, 100), (0, 100)]
        assert len(clean_polygon(path)) == 5
        assert len(clean_polygon(path, distance=10)) == 4

    def test_clean_polygons(self):
        """Each path is cleaned independently and keeps its slot."""
        result = clean_polygons([SQUARE, [(0, 0), (1, 0), (0, 1)]])
        assert len(result) == 2
        assert result[1] == []


class TestSimplify:
    """Test resolution of overlapping and self-intersecting paths."""

    def test_overlapping_paths_merge_under_non_zero(self):
        """Non-zero counts the overlap once and merges the squares."""
        paths = simplify_polygons([SQUARE, SHIFTED], PolyFillType.NON_ZERO)
        assert len(paths) == 1
        assert area(paths[0]) == pytest.approx(17500.0)

    def test_overlap_cancels_under_even_odd(self):
        """Even-odd drops the doubly covered corner, leaving two L shapes."""
        paths = simplify_polygons([SQUARE, SHIFTED])
        assert len(paths) == 2
        assert all(area(p) == pytest.approx(7500.0) for p in paths)


class TestMinkowski:
    """Test Minkowski sum and difference."""

    PATTERN = [(-1, -1), (1, -1), (1, 1), (-1, 1)]

    def test_sum_along_open_line(self):
        """Sweeping a 2x2 square along a line makes a 12x2 strip."""
        paths = minkowski_sum(self.PATTERN, [(0, 0), (10, 0)], False)
        assert len(paths) == 1
        assert area(paths[0]) == pytest.approx(24.0)

    def test_sum_around_closed_square(self):
        """Sweeping around a closed outline leaves its interior open."""
        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        paths = minkowski_sum(self.PATTERN, square, True)
        # a 12x12 outline with an 8x8 hole
        assert sum(area(p) for p in paths) == pytest.approx(144.0 - 64.0)

    def test_sum_over_several_closed_paths_fills_interior(self):
        """The multi-path form also covers each path's interior."""
        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        paths = minkowski_sum(self.PATTERN, [square], True)
        assert sum(area(p) for p in paths) == pytest.approx(144.0)

    def test_diff_of_identical_squares_contains_origin(self):
        """Differencing a shape with itself is non-empty."""
        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        paths = minkowski_diff(square, square)
        assert paths
        assert sum(area(p) for p in paths) > 0


class TestScaling:
    """Test float/integer conversion."""

    def test_scale_rounds_half_away_from_zero(self):
        """Halves round away from zero on both sides."""
        assert scale_path([(0.25, -0.25)], 10) == [(3, -3)]

    def test_unscale(self):
        """Integer coordinates divide back to floats."""
        assert unscale_path([(1500, -250)], 1000) == [(1.5, -0.25)]

    def test_polygon_to_paths_orients_rings(self):
        """Exteriors come out counter-clockwise, holes clockwise."""
        poly = Polygon([(0, 0), (0, 10), (10, 10), (10, 0)], [[(2, 2), (8, 2), (8, 8), (2, 8)]])
        paths = polygon_to_paths(poly, scale=1)
        assert len(paths) == 2
        assert area(paths[0]) > 0
        assert area(paths[1]) < 0

    def test_paths_to_geometry_assigns_holes(self):
        """Negative rings become interiors of the enclosing exterior."""
        outer = [(0, 0), (10000, 0), (10000, 10000), (0, 10000)]
        hole = [(2000, 2000), (2000, 8000), (8000, 8000), (8000, 2000)]
        geom = paths_to_geometry([outer, hole])
        assert isinstance(geom, Polygon)
        assert len(geom.interiors) == 1
        assert geom.area == pytest.approx(100.0 - 36.0)


class TestShapelyOperations:
    """Test engine-backed operations on Shapely geometries."""

    def test_union_overlapping_boxes(self):
        """Overlapping boxes merge into one polygon."""
        result = union_polygons([box(0, 0, 1, 1), box(0.5, 0, 1.5, 1)])
        assert isinstance(result, Polygon)
        assert result.area == pytest.approx(1.5)

    def test_union_disjoint_boxes(self):
        """Disjoint boxes stay separate parts of a MultiPolygon."""
        result = union_polygons([box(0, 0, 1, 1), box(5, 5, 6, 6)])
        assert isinstance(result, MultiPolygon)
        assert result.area == pytest.approx(2.0)

    def test_union_empty(self):
        """Union of nothing is empty."""
        assert union_polygons([]).is_empty

    def test_subtract_makes_hole(self):
        """Subtracting an interior box punches a hole."""
        result = subtract_polygons(box(0, 0, 10, 10), [box(2, 2, 4, 4)])
        assert result.area == pytest.approx(96.0)
        assert len(result.interiors) == 1

    def test_subtract_nothing_returns_base(self):
        """With nothing to subtract the base is returned as is."""
        base = box(0, 0, 10, 10)
        assert subtract_polygons(base, []) is base

    def test_subtract_everything(self):
        """A covering box removes the whole base."""
        assert subtract_polygons(box(0, 0, 1, 1), [box(-1, -1, 2, 2)]).is_empty

    def test_intersect(self):
        """Overlap of two offset boxes."""
        result = intersect_polygons(box(0, 0, 10, 10), box(5, 5, 15, 15))
        assert result.area == pytest.approx(25.0)

    def test_inset(self):
        """Mitered inset keeps a square square."""
        result = inset_polygon(box(0, 0, 10, 10), 1.0)
        assert result.area == pytest.approx(64.0)

    def test_inset_non_positive_returns_input(self):
        """Zero inset is a no-op."""
        poly = box(0, 0, 10, 10)
        assert inset_polygon(poly, 0) is poly

    def test_inset_consumes_polygon(self):
        """Insetting past half the width leaves nothing."""
        assert inset_polygon(box(0, 0, 10, 10), 6.0).is_empty

    def test_inset_splits_dumbbell(self):
        """A narrow neck disappears and splits the shape."""
        dumbbell = union_polygons([box(0, 0, 10, 10), box(10, 4, 20, 6), box(20, 0, 30, 10)])
        result = inset_polygon(dumbbell, 2.0)
        assert isinstance(result, MultiPolygon)
        assert len(result.geoms) == 2

    def test_buffer_round(self):
        """Buffer defaults to round corners."""
        result = buffer_polygon(box(0, 0, 1, 1), 0.1)
        assert result.area == pytest.approx(1.0 + 0.4 + 3.14159 * 0.01, rel=0.01)

    def test_buffer_matches_shapely_mitre(self):
        """Mitered buffer agrees with Shapely's mitre join."""
        poly = box(0, 0, 10, 10)
        result = buffer_polygon(poly, 1.0, join_type=JoinType.MITER)
        expected = poly.buffer(1.0, join_style=2)
        assert result.area == pytest.approx(expected.area)


class TestProfileSettings:
    """Test Shapely helpers driven by an EngineProfile."""

    def test_profile_join_type_used_by_buffer(self):
        """The default profile's mitered join replaces buffer's round default."""
        poly = box(0, 0, 10, 10)
        result = buffer_polygon(poly, 1.0, profile=EngineProfile())
        assert result.area == pytest.approx(144.0)

    def test_profile_round_join_used_by_inset(self):
        """A round-join profile rounds the inset at an L's inner corner."""
        ell = Polygon([(0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)])
        profile = EngineProfile().merge_override({"offset": {"join_type": "round"}})
        mitered = inset_polygon(ell, 1.0)
        rounded = inset_polygon(ell, 1.0, profile=profile)
        assert mitered.area == pytest.approx(28.0)
        # round keeps the part of the unit square at the reflex corner outside a quarter disc
        assert rounded.area == pytest.approx(28.0 + (1.0 - math.pi / 4), abs=0.01)

    def test_profile_scale_sets_precision(self):
        """A coarse profile scale rounds small insets away."""
        coarse = EngineProfile(scale=ScaleOptions(scale=1.0))
        fine = inset_polygon(box(0, 0, 10, 10), 0.4)
        assert fine.area == pytest.approx(9.2 * 9.2)
        assert inset_polygon(box(0, 0, 10, 10), 0.4, profile=coarse).area == pytest.approx(100.0)

    def test_explicit_scale_overrides_profile(self):
        """A scale argument wins over the profile's."""
        coarse = EngineProfile(scale=ScaleOptions(scale=1.0))
        result = inset_polygon(box(0, 0, 10, 10), 0.4, scale=1000.0, profile=coarse)
        assert result.area == pytest.approx(9.2 * 9.2)

    def test_profile_scale_used_by_union(self):
        """Union snaps to the profile's grid."""
        coarse = EngineProfile(scale=ScaleOptions(scale=1.0))
        result = union_polygons([box(0, 0, 1.2, 1.2)], profile=coarse)
        assert result.area == pytest.approx(1.0)

"""Tests for solution validation."""

import pytest

from polyclip import ClipType, IntPoint, PolyNode, PolyTree, combine
from polyclip.contract import SolutionIssue, validate_solution
from polyclip.models import EngineOptions

OUTER = [(0, 0), (100, 0), (100, 100), (0, 100)]
HOLE = [(25, 25), (75, 25), (75, 75), (25, 75)]  # counter-clockwise


def _tree(outer, hole=None):
    tree = PolyTree()
    node = PolyNode()
    node.contour = [IntPoint(*p) for p in outer]
    tree.add_child(node)
    tree.all_nodes.append(node)
    if hole is not None:
        child = PolyNode()
        child.contour = [IntPoint(*p) for p in hole]
        node.add_child(child)
        tree.all_nodes.append(child)
    return tree


class TestEngineOutput:
    """Engine results should always validate cleanly."""

    def test_tree_with_hole(self):
        """A holed union validates."""
        result = combine([OUTER, HOLE], [], ClipType.UNION, tree=True)
        assert validate_solution(result.tree) == []

    def test_flat_paths(self):
        """Flat xor output validates."""
        result = combine([OUTER], [HOLE], ClipType.XOR)
        assert validate_solution(result.paths) == []

    def test_reversed_tree(self):
        """Reversed output validates only when flagged as reversed."""
        options = EngineOptions(reverse_solution=True)
        result = combine([OUTER, HOLE], [], ClipType.UNION, tree=True, options=options)
        assert validate_solution(result.tree, reverse_solution=True) == []
        assert validate_solution(result.tree) != []


class TestDetectedIssues:
    """Hand-built solutions with known defects."""

    def test_clockwise_outer(self):
        """A clockwise outer ring is mis-oriented."""
        issues = validate_solution(_tree(list(reversed(OUTER))))
        assert [i.kind for i in issues] == ["orientation"]

    def test_hole_with_outer_orientation(self):
        """A counter-clockwise hole is mis-oriented."""
        issues = validate_solution(_tree(OUTER, HOLE))
        assert len(issues) == 1
        assert issues[0].kind == "orientation"
        assert issues[0].index == 1

    def test_hole_outside_parent(self):
        """A hole lying outside its outer ring is flagged."""
        escaped = [(150, 25), (150, 75), (200, 75), (200, 25)]
        issues = validate_solution(_tree(OUTER, escaped))
        assert "containment" in [i.kind for i in issues]

    def test_degenerate_ring(self):
        """Rings need three vertices."""
        issues = validate_solution([[(0, 0), (1, 1)]])
        assert issues == [SolutionIssue("degenerate", 0, "ring has 2 vertices")]

    def test_consecutive_duplicate(self):
        """Repeated neighbouring vertices are flagged."""
        issues = validate_solution([[(0, 0), (10, 0), (10, 0), (10, 10)]])
        assert [i.kind for i in issues] == ["duplicate_vertex"]

    def test_closing_duplicate(self):
        """A last vertex equal to the first counts as a repeat."""
        issues = validate_solution([[(0, 0), (10, 0), (10, 10), (0, 0)]])
        assert [i.kind for i in issues] == ["duplicate_vertex"]

    def test_touching_vertex_only_when_strictly_simple(self):
        """Self-touching rings are only defects in strictly simple output."""
        figure_eight = [(0, 0), (10, 0), (10, 10), (20, 10), (20, 20), (10, 20), (10, 10), (0, 10)]
        assert validate_solution([figure_eight]) == []
        issues = validate_solution([figure_eight], strictly_simple=True)
        assert [i.kind for i in issues] == ["touching_vertex"]

    def test_strict_raises(self):
        """Strict mode raises with every issue in the message."""
        with pytest.raises(ValueError, match="ring has 2 vertices"):
            validate_solution([[(0, 0), (1, 1)]], strict=True)

    def test_strict_passes_clean_solution(self):
        """Strict mode returns normally for clean input."""
        assert validate_solution([OUTER], strict=True) == []

    def test_duplicate_message_names_vertex(self):
        """Plain tuple paths are reported with the repeated coordinates."""
        issues = validate_solution([[(0, 0), (10, 0), (10, 0), (10, 10)]])
        assert issues[0].message == "vertex 2 repeats (10, 0)"

    def test_accepts_int_points(self):
        """Paths of IntPoints are checked the same way as tuples."""
        path = [IntPoint(0, 0), IntPoint(10, 0), IntPoint(10, 0), IntPoint(10, 10)]
        assert [i.kind for i in validate_solution([path])] == ["duplicate_vertex"]

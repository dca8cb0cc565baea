"""Structural checks on clipping and offsetting output.

Verifies the guarantees the engine makes about its solutions so callers
(and tests) can assert on them:
- every closed ring has at least three vertices
- no two consecutive vertices coincide
- outer and hole rings carry opposite orientations
- every child ring lies inside its parent
- strictly simple output never repeats a vertex within a ring
"""

from dataclasses import dataclass
from typing import Iterable

import structlog

from ..geometry.primitives import (
    Path,
    PathLike,
    PointLocation,
    PolyNode,
    PolyTree,
    area,
    point_in_polygon,
    to_path,
)

logger = structlog.get_logger(__name__)


@dataclass
class SolutionIssue:
    """A single problem found in a solution."""

    kind: str
    index: int
    message: str


def _check_ring(path: Path, index: int, strictly_simple: bool, issues: list[SolutionIssue]) -> None:
    if len(path) < 3:
        issues.append(SolutionIssue("degenerate", index, f"ring has {len(path)} vertices"))
        return

    for i, pt in enumerate(path):
        if pt == path[i - 1]:
            issues.append(
                SolutionIssue("duplicate_vertex", index, f"vertex {i} repeats ({pt.x}, {pt.y})")
            )
            break

    if strictly_simple and len(set(path)) != len(path):
        issues.append(SolutionIssue("touching_vertex", index, "ring revisits a vertex"))


def _check_node(
    node: PolyNode,
    index: int,
    reverse_solution: bool,
    strictly_simple: bool,
    issues: list[SolutionIssue],
) -> None:
    if node.is_open:
        if len(node.contour) < 2:
            issues.append(SolutionIssue("degenerate", index, "open path has fewer than 2 vertices"))
        return

    _check_ring(node.contour, index, strictly_simple, issues)
    if len(node.contour) < 3:
        return

    positive = area(node.contour) > 0
    if (node.is_hole ^ reverse_solution) == positive:
        kind = "hole" if node.is_hole else "outer"
        issues.append(SolutionIssue("orientation", index, f"{kind} ring has the wrong orientation"))

    parent = node.parent
    if parent is not None and not isinstance(parent, PolyTree) and parent.contour:
        inside = [point_in_polygon(pt, parent.contour) for pt in node.contour]
        if all(loc == PointLocation.ON_BOUNDARY for loc in inside):
            return
        if PointLocation.OUTSIDE in inside:
            issues.append(SolutionIssue("containment", index, "ring escapes its parent"))


def validate_solution(
    solution: PolyTree | Iterable[PathLike],
    strict: bool = False,
    reverse_solution: bool = False,
    strictly_simple: bool = False,
) -> list[SolutionIssue]:
    """Check a flat or tree solution for structural problems.

    Orientation and containment need hole information, so they are only
    checked when a PolyTree is given. Issue indexes refer to the flat path
    position or, for trees, the node's position in depth-first order.

    Args:
        solution: Paths or PolyTree returned by the engine
        strict: Raise instead of returning issues
        reverse_solution: The solution was built with reversed orientation
        strictly_simple: Also reject rings that revisit a vertex

    Returns:
        List of issues, empty when the solution is well formed

    Raises:
        ValueError: If strict and any issue is found
    """
    issues: list[SolutionIssue] = []

    if isinstance(solution, PolyTree):
        node = solution.get_first()
        index = 0
        while node is not None:
            _check_node(node, index, reverse_solution, strictly_simple, issues)
            node = node.get_next()
            index += 1
        total = index
    else:
        paths = [to_path(p) for p in solution]
        for index, path in enumerate(paths):
            _check_ring(path, index, strictly_simple, issues)
        total = len(paths)

    if issues:
        logger.warning(
            "solution_issues_found",
            count=len(issues),
            kinds=sorted({i.kind for i in issues}),
        )
        if strict:
            raise ValueError(
                "Solution failed validation: "
                + "; ".join(f"[{i.index}] {i.message}" for i in issues)
            )
    else:
        logger.debug("solution_validated", rings=total)

    return issues

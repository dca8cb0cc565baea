"""Exceptions raised by the clipping engine.

Recoverable outcomes (busy instance, open paths without a tree result,
unorderable intersections) are reported through ClipResult instead.
"""


class ClipperError(Exception):
    """Base class for engine errors."""


class InvariantError(ClipperError):
    """An internal invariant of the sweep was broken.

    Signals a defect in the engine rather than a problem with the input.
    """


class PathError(ClipperError, ValueError):
    """Input path rejected (open clip path, coordinate out of range)."""

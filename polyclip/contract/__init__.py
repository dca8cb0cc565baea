"""Solution validation utilities.

Checks engine output for the structural guarantees it is expected to meet.
"""

from .validator import SolutionIssue, validate_solution

__all__ = [
    "SolutionIssue",
    "validate_solution",
]

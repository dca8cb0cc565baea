"""Run many independent Boolean operations concurrently.

Each job gets its own Clipper, so jobs never contend for a sweep. Results
are returned keyed by the job's key rather than in completion order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Hashable, Mapping, Sequence, TypeVar

from .engine.types import ClipResult, ClipType, PolyFillType
from .geometry.polygon_ops import combine
from .geometry.primitives import PathLike
from .models.options import EngineOptions

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


@dataclass
class CombineJob:
    """Inputs for one Boolean operation."""

    subject: Sequence[PathLike]
    clip: Sequence[PathLike] = field(default_factory=list)
    clip_type: ClipType = ClipType.UNION
    subject_fill: PolyFillType | None = None
    clip_fill: PolyFillType | None = None
    options: EngineOptions | None = None
    tree: bool = False

    def run(self) -> ClipResult:
        return combine(
            self.subject,
            self.clip,
            self.clip_type,
            self.subject_fill,
            self.clip_fill,
            tree=self.tree,
            options=self.options,
        )


def combine_batch(
    jobs: Mapping[K, CombineJob],
    max_workers: int | None = None,
) -> dict[K, ClipResult]:
    """Execute jobs on a thread pool.

    Args:
        jobs: Jobs keyed by caller-chosen identifiers
        max_workers: Pool size (None lets the executor decide)

    Returns:
        Dict mapping each job key to its ClipResult

    Raises:
        ClipperError: Propagated from the first job that raised
    """
    if not jobs:
        return {}

    keys = list(jobs)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {key: executor.submit(jobs[key].run) for key in keys}
        results = {key: futures[key].result() for key in keys}

    failed = sum(1 for r in results.values() if not r.succeeded)
    logger.info(f"Batch of {len(results)} jobs finished ({failed} failed)")
    return results

"""
Result merger and deduplicator.

Folds a batch of comparison results into a job's cumulative result set.
One entry per item id; a duplicate replaces the kept entry only when its
similarity is strictly higher, and it takes over the kept entry's position.

Dependencies: facescan.core.batch.models
System role: Idempotent merge step between comparison and persistence
"""

from typing import Iterable

from facescan.core.batch.models import ComparisonResult


def merge_results(
    existing: Iterable[ComparisonResult],
    incoming: Iterable[ComparisonResult],
) -> list[ComparisonResult]:
    """
    Merge incoming results into existing ones.

    Output keeps the insertion order of ``existing`` followed by ids first
    seen in ``incoming``. Merging the same batch twice yields the same set
    as merging it once.

    Args:
        existing: Cumulative results already persisted
        incoming: Results produced by the current batch

    Returns:
        list[ComparisonResult]: Deduplicated cumulative results
    """
    merged: dict[str, ComparisonResult] = {}
    for result in existing:
        _fold(merged, result)
    for result in incoming:
        _fold(merged, result)
    return list(merged.values())


def _fold(merged: dict[str, ComparisonResult], result: ComparisonResult) -> None:
    current = merged.get(result.item_id)
    if current is None or result.similarity > current.similarity:
        # dict assignment to an existing key keeps its position
        merged[result.item_id] = result


def count_matches(results: Iterable[ComparisonResult]) -> int:
    """Number of results flagged as a face match."""
    return sum(1 for r in results if r.matched)

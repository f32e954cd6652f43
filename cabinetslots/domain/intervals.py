"""
Interval arithmetic over time-of-day ranges.
"""

from typing import Iterable, List

from .models import TimeInterval


def subtract_intervals(
    opens: Iterable[TimeInterval],
    blocks: Iterable[TimeInterval]
) -> List[TimeInterval]:
    """
    Remove every block from the open intervals.

    Each block splits the open intervals it intersects into at most two
    remainders (before and after the block); disjoint intervals pass through
    unchanged. The order of blocks does not affect the result.

    Example:
    Open: [09:00-12:00]
    Blocks: [10:00-10:30]
    Result: [09:00-10:00, 10:30-12:00]
    """
    remaining = list(opens)

    for block in blocks:
        split: List[TimeInterval] = []

        for interval in remaining:
            if not interval.overlaps(block):
                split.append(interval)
                continue

            if block.start > interval.start:
                split.append(TimeInterval(start=interval.start, end=block.start))
            if block.end < interval.end:
                split.append(TimeInterval(start=block.end, end=interval.end))

        remaining = split

    return sorted(remaining, key=lambda i: (i.start, i.end))


def merge_intervals(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    """
    Merge overlapping or adjacent intervals into their union.

    Example: [09:00-10:45, 10:15-12:00] -> [09:00-12:00]
    """
    ordered = sorted(intervals, key=lambda i: (i.start, i.end))
    if not ordered:
        return []

    merged: List[TimeInterval] = [ordered[0]]

    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            merged[-1] = TimeInterval(start=last.start, end=max(last.end, current.end))
        else:
            merged.append(current)

    return merged

"""
Age bucketing: per-line timestamps -> N groups of line indices.

Bucket 0 holds the oldest lines, bucket N-1 the newest.  Lines with no
known timestamp are left out of every bucket.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence


def bucket_timestamps(
    timestamps: Sequence[Optional[int]],
    levels: int,
) -> list[list[int]] | None:
    """Group 0-based line indices into *levels* buckets by age.

    Returns None when there is nothing worth drawing: no known
    timestamps, or every known line has the same timestamp.
    """
    if levels < 1:
        raise ValueError(f"levels must be at least 1, got {levels}")

    known = [t for t in timestamps if t is not None]
    if not known:
        return None
    min_time = min(known)
    max_time = max(known)
    span = max_time - min_time
    if span == 0:
        return None

    per_level = math.ceil(span / levels)
    top = levels - 1

    buckets: list[list[int]] = [[] for _ in range(levels)]
    for index, timestamp in enumerate(timestamps):
        if timestamp is None:
            continue
        # (max - min) // per_level reaches `levels` when span divides evenly
        level = min((timestamp - min_time) // per_level, top)
        buckets[level].append(index)
    return buckets


def lines_to_ranges(lines: Sequence[int]) -> list[tuple[int, int]]:
    """Collapse ascending line indices into inclusive (start, end) runs."""
    ranges: list[tuple[int, int]] = []
    start: int | None = None
    end = 0
    for line in lines:
        if start is not None and line == end + 1:
            end = line
            continue
        if start is not None:
            ranges.append((start, end))
        start = end = line
    if start is not None:
        ranges.append((start, end))
    return ranges

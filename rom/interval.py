"""Accounting of claimed byte ranges.

Every table read out of an area is recorded here so that tooling can check
which parts of the level data region are used and where the holes are. The
store merges overlapping and adjacent ranges on insert; it is a linear scan,
which is plenty for the few hundred ranges an area produces.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open range [start, end)."""
    start: int
    end: int

    def can_merge(self, other: 'Interval') -> bool:
        """True if the ranges overlap or touch."""
        return (self.start <= other.start <= self.end
                or other.start <= self.start <= other.end)

    def merge(self, other: 'Interval') -> 'Interval':
        if not self.can_merge(other):
            raise ValueError(f"can't merge disjoint intervals {self} and {other}")
        return Interval(min(self.start, other.start), max(self.end, other.end))

    def __len__(self) -> int:
        return self.end - self.start


class IntervalStore:
    """A set of disjoint, non-adjacent intervals."""

    def __init__(self) -> None:
        self._intervals: List[Interval] = []

    def add(self, start: int, end: int) -> None:
        """Add [start, end), merging with everything it overlaps or touches."""
        if end < start:
            raise ValueError(f"interval end 0x{end:x} precedes start 0x{start:x}")
        merged = Interval(start, end)
        kept = []
        for interval in self._intervals:
            if interval.can_merge(merged):
                merged = merged.merge(interval)
            else:
                kept.append(interval)
        kept.append(merged)
        self._intervals = kept

    def get_intervals(self) -> List[Interval]:
        """Return the intervals sorted by start."""
        return sorted(self._intervals)

    def gaps(self) -> List[Interval]:
        """Return the holes between the first and last claimed byte."""
        intervals = self.get_intervals()
        return [Interval(a.end, b.start) for a, b in zip(intervals, intervals[1:])]

    def total_size(self) -> int:
        return sum(len(interval) for interval in self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

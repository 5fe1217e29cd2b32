# sitemeta/core/span.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .exceptions import InvalidSpan


@dataclass(frozen=True, slots=True)
class Span:
    """
    Closed time interval [start, end] of validity for a metadata record.

    Both bounds are inclusive, so two spans touching at a single instant
    overlap.
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start is None or self.end is None:
            raise InvalidSpan("Span.start and Span.end must both be set.")
        try:
            reversed_bounds = self.start > self.end
        except TypeError as e:
            raise InvalidSpan(
                f"Span bounds are not comparable: {self.start!r} vs {self.end!r}"
            ) from e
        if reversed_bounds:
            raise InvalidSpan(f"Span.start {self.start} is after Span.end {self.end}.")

    def overlaps(self, other: "Span") -> bool:
        return self.start <= other.end and other.start <= self.end

    def extent(self, *others: "Span") -> "Span | None":
        """
        Intersection of this span with every span in `others`.

        Returns None when the spans do not share a common instant; callers
        use that as a filter, not as a failure.
        """
        start = self.start
        end = self.end
        for other in others:
            if not self.overlaps(other):
                return None
            start = max(start, other.start)
            end = min(end, other.end)

        if start > end:
            return None
        return Span(start=start, end=end)

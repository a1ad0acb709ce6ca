"""
Equal-width segmentation of a track timeline.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import SEGMENT_CONFIG
from .errors import InvalidArgument


@dataclass(frozen=True, slots=True)
class Segment:
    """One of N equal divisions of the track duration, in seconds."""
    index: int
    start: float
    end: float

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, seconds: float) -> bool:
        """Half-open membership test: start <= t < end."""
        return self.start <= seconds < self.end


def segment(duration_seconds: float, count: int = SEGMENT_CONFIG.default_count) -> list[Segment]:
    """
    Divide ``[0, duration_seconds]`` into ``count`` contiguous segments.

    The last segment ends exactly at ``duration_seconds`` so accumulated
    floating point error never leaves the final instant uncovered.

    Raises:
        InvalidArgument: if count <= 0 or duration_seconds < 0
    """
    if count <= 0:
        raise InvalidArgument(f"segment count must be >= 1, got {count}")
    if duration_seconds < 0:
        raise InvalidArgument(f"duration must be >= 0, got {duration_seconds}")

    length = duration_seconds / count
    segments = []
    for i in range(count):
        end = duration_seconds if i == count - 1 else (i + 1) * length
        segments.append(Segment(index=i, start=i * length, end=end))
    return segments


def find_active_segment(segments: Sequence[Segment], seconds: float) -> Optional[Segment]:
    """Return the first segment containing ``seconds``, or None."""
    for seg in segments:
        if seg.contains(seconds):
            return seg
    return None

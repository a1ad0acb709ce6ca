"""
Frame-driven synchronization of a slave timeline to the audio master.
"""
from __future__ import annotations
import functools
import logging
from typing import Optional, Sequence

from .segmenter import Segment, find_active_segment
from .types import FrameScheduler, PlaybackClock, SegmentCallback, SlaveTimeline

logger = logging.getLogger("BarCam")


class SyncLoop:
    """
    Cooperative polling loop: on every frame, snap the slave to the master
    position and report the active segment.

    Each ``start()`` opens a new generation. Scheduled callbacks carry the
    generation they were queued for and do nothing once it is stale, so a
    frame already queued before ``cancel()`` cannot mutate anything.
    """
    __slots__ = (
        '_scheduler', '_on_segment_changed', '_master', '_slave',
        '_segments', '_playing', '_generation', '_active_index'
    )

    def __init__(
        self,
        scheduler: FrameScheduler,
        on_segment_changed: Optional[SegmentCallback] = None
    ) -> None:
        self._scheduler = scheduler
        self._on_segment_changed = on_segment_changed
        self._master: Optional[PlaybackClock] = None
        self._slave: Optional[SlaveTimeline] = None
        self._segments: tuple[Segment, ...] = ()
        self._playing: bool = False
        self._generation: int = 0
        self._active_index: Optional[int] = None

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active_index(self) -> Optional[int]:
        """Index of the last reported segment, or None before the first match."""
        return self._active_index

    def start(
        self,
        master: PlaybackClock,
        slave: SlaveTimeline,
        segments: Sequence[Segment]
    ) -> None:
        """Begin a new generation and schedule its first tick."""
        self._generation += 1
        self._master = master
        self._slave = slave
        self._segments = tuple(segments)
        self._active_index = None
        self._playing = True
        logger.debug("Sync loop started (generation %d)", self._generation)
        self._schedule(self._generation)

    def cancel(self) -> None:
        """Stop rescheduling. Safe to call repeatedly."""
        if not self._playing:
            return
        self._playing = False
        self._generation += 1
        logger.debug("Sync loop cancelled")

    def reset(self) -> None:
        """Cancel and forget the last reported segment."""
        self.cancel()
        self._active_index = None

    def tick(self) -> bool:
        """
        Run one synchronization step.

        Returns:
            True if the step ran, False if the loop is not playing
        """
        if not self._playing or self._master is None or self._slave is None:
            return False

        position = self._master.current_position()
        self._slave.set_position(position)

        seg = find_active_segment(self._segments, position)
        if seg is not None and seg.index != self._active_index:
            self._active_index = seg.index
            if self._on_segment_changed:
                self._on_segment_changed(seg.index)
        return True

    def _schedule(self, generation: int) -> None:
        self._scheduler.schedule_next(functools.partial(self._run_scheduled, generation))

    def _run_scheduled(self, generation: int) -> None:
        if generation != self._generation:
            return
        if not self.tick():
            return
        # The highlight callback may have cancelled us.
        if self._playing and generation == self._generation:
            self._schedule(generation)

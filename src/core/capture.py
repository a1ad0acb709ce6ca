"""
Slave timeline for a live camera capture.
"""
from __future__ import annotations
from typing import Any, Optional


class CaptureTimeline:
    """
    Tracks the song position a live capture is aligned to.

    A live stream cannot be seeked, so snapping only records the master
    position; the UI reads it to show how far into the song the take is.
    """
    __slots__ = ('stream', 'position')

    def __init__(self) -> None:
        self.stream: Optional[Any] = None
        self.position: float = 0.0

    def attach(self, stream: Any) -> None:
        self.stream = stream
        self.position = 0.0

    def detach(self) -> None:
        self.stream = None
        self.position = 0.0

    @property
    def is_attached(self) -> bool:
        return self.stream is not None

    def set_position(self, seconds: float) -> None:
        self.position = seconds

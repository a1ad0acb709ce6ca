from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .types import AudioArray, MonoArray


@dataclass(frozen=True)
class Track:
    """
    Decoded audio for one uploaded song.
    Immutable: the arrays are made read-only on creation.
    """
    data: AudioArray  # (samples,) or (samples, channels)
    samplerate: int
    name: str = "Track"

    def __post_init__(self) -> None:
        data = np.asarray(self.data, dtype=np.float32)
        if data.flags.writeable:
            data = data.copy()
            data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    @property
    def channels(self) -> int:
        return 1 if self.data.ndim == 1 else self.data.shape[1]

    @property
    def sample_data(self) -> MonoArray:
        """First channel, used for waveform analysis."""
        return self.data if self.data.ndim == 1 else self.data[:, 0]

    @property
    def duration_samples(self) -> int:
        return len(self.data)

    @property
    def duration_seconds(self) -> float:
        return self.duration_samples / self.samplerate if self.samplerate > 0 else 0.0

    def __repr__(self) -> str:
        return f"Track(name={self.name!r}, channels={self.channels}, duration={self.duration_seconds:.2f}s)"

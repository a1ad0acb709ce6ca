"""
Waveform summarization for BarCam.
All functions are pure and operate on numpy arrays.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import numpy as np

from .errors import InvalidArgument
from .types import MonoArray

# Scan starting values. A window with no samples keeps them, which
# yields an inverted (min > max) column.
EMPTY_MIN = 1.0
EMPTY_MAX = -1.0


@dataclass(frozen=True, slots=True)
class WaveformColumn:
    """Amplitude summary for one horizontal pixel of the waveform."""
    min: float
    max: float

    @property
    def is_degenerate(self) -> bool:
        """True for the column emitted by an empty window."""
        return self.min > self.max


def summarize_arrays(samples: MonoArray | Sequence[float], width: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Compute per-column minimum and maximum amplitudes.

    The samples are split into ``width`` windows of ``len(samples) // width``
    samples each; the trailing remainder is dropped. When there are fewer
    samples than columns every window is empty and each column is
    ``(1.0, -1.0)``.

    Args:
        samples: Mono audio samples in [-1, 1]
        width: Number of columns (render width in pixels)

    Returns:
        Tuple of (mins, maxs) arrays of length ``width``, in the float
        dtype of ``samples`` (float64 for lists and integer input)
    """
    if width < 0:
        raise InvalidArgument(f"width must be >= 0, got {width}")

    data = np.asarray(samples).ravel()
    if not np.issubdtype(data.dtype, np.floating):
        data = data.astype(float)
    step = len(data) // width if width > 0 else 0

    if step == 0:
        return (np.full(width, EMPTY_MIN, dtype=data.dtype),
                np.full(width, EMPTY_MAX, dtype=data.dtype))

    windows = data[:step * width].reshape(width, step)
    # Clamp against the scan starting values so out-of-range samples
    # behave exactly like a linear min/max scan seeded with them.
    mins = np.minimum(windows.min(axis=1), EMPTY_MIN).astype(data.dtype)
    maxs = np.maximum(windows.max(axis=1), EMPTY_MAX).astype(data.dtype)
    return mins, maxs


def summarize(samples: MonoArray | Sequence[float], width: int) -> list[WaveformColumn]:
    """
    Summarize samples into exactly ``width`` waveform columns.

    Args:
        samples: Mono audio samples in [-1, 1], any length (including empty)
        width: Number of columns

    Returns:
        List of WaveformColumn, one per column
    """
    mins, maxs = summarize_arrays(samples, width)
    return [WaveformColumn(float(lo), float(hi)) for lo, hi in zip(mins, maxs)]


def waveform_polyline(columns: Sequence[WaveformColumn], height: float) -> list[tuple[float, float]]:
    """
    Map columns onto a drawing path.

    The path starts at the vertical centre of the first column and, for each
    column ``i``, visits ``(i, (1 + min) * 0.5 * height)`` then
    ``(i, (1 + max) * 0.5 * height)``. Points are meant to be joined in order.
    """
    points = [(0.0, height / 2)]
    for i, column in enumerate(columns):
        points.append((float(i), (1 + column.min) * 0.5 * height))
        points.append((float(i), (1 + column.max) * 0.5 * height))
    return points

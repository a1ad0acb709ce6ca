"""
Audio file decoding for BarCam.
Paths go through librosa (wide format support via soundfile/audioread),
in-memory uploads through soundfile.
"""
from __future__ import annotations
import io
import logging
import os
from typing import Optional
import numpy as np
import soundfile as sf

from .errors import DecodeError
from .track import Track
from .types import AudioSource

logger = logging.getLogger("BarCam")


class AudioDecoder:
    """Decodes uploaded songs into immutable Tracks at their native samplerate."""

    def decode(self, source: AudioSource, name: Optional[str] = None) -> Track:
        """
        Decode a file path or raw file bytes.

        Args:
            source: Path to an audio file, or its bytes
            name: Display name (defaults to the file name)

        Returns:
            Decoded Track with data shaped (samples,) or (samples, channels)

        Raises:
            DecodeError: if the data is unreadable, unsupported or empty
        """
        if isinstance(source, (bytes, bytearray)):
            data, samplerate = self._decode_bytes(bytes(source))
            track_name = name or "Uploaded Song"
        else:
            data, samplerate = self._decode_path(os.fspath(source))
            track_name = name or os.path.basename(os.fspath(source))

        if data.size == 0:
            raise DecodeError(f"{track_name}: file contains no audio")

        track = Track(data, samplerate, track_name)
        logger.info("Decoded %s", track)
        return track

    def _decode_path(self, file_path: str) -> tuple[np.ndarray, int]:
        logger.info("Loading file: %s", file_path)
        try:
            import librosa
            data, samplerate = librosa.load(file_path, sr=None, mono=False)
        except Exception as e:
            logger.error("Failed to load %s: %s", file_path, e, exc_info=True)
            raise DecodeError(f"Could not decode {file_path}: {e}") from e

        # librosa returns (channels, samples); convert to (samples, channels)
        if data.ndim > 1:
            data = data.T
        return np.ascontiguousarray(data, dtype=np.float32), int(samplerate)

    def _decode_bytes(self, payload: bytes) -> tuple[np.ndarray, int]:
        if not payload:
            raise DecodeError("Uploaded file is empty")
        try:
            data, samplerate = sf.read(io.BytesIO(payload), dtype='float32')
        except (sf.LibsndfileError, RuntimeError, TypeError) as e:
            logger.error("Failed to decode uploaded bytes: %s", e)
            raise DecodeError(f"Unsupported or corrupt audio data: {e}") from e
        return np.ascontiguousarray(data, dtype=np.float32), int(samplerate)

"""
Audio player for BarCam: the master timeline.
Handles audio output via sounddevice with low-latency streaming.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Optional, Callable
import numpy as np

from .config import AUDIO_CONFIG, PlaybackState
from .types import EndedCallback

if TYPE_CHECKING:
    import sounddevice as sd
    from .track import Track

logger = logging.getLogger("BarCam")


class AudioPlayer:
    """
    Plays a single Track through sounddevice and exposes its position.

    The stream callback runs on the PortAudio thread and only advances the
    frame counter. ``on_ended`` is invoked from that thread when the track
    runs out; hosts with a GUI must marshal it to their own thread.
    """
    __slots__ = (
        '_track', '_stream', '_current_frame', '_state',
        '_on_ended', '_on_state_changed', '_disposed'
    )

    def __init__(
        self,
        on_ended: Optional[EndedCallback] = None,
        on_state_changed: Optional[Callable[[PlaybackState], None]] = None
    ) -> None:
        """
        Initialize the player.

        Args:
            on_ended: Callback for natural end of track
            on_state_changed: Callback for state changes
        """
        self._track: Optional["Track"] = None
        self._stream: Optional["sd.OutputStream"] = None
        self._current_frame: int = 0
        self._state = PlaybackState.STOPPED
        self._on_ended = on_ended
        self._on_state_changed = on_state_changed
        self._disposed: bool = False

    @property
    def track(self) -> Optional["Track"]:
        return self._track

    @property
    def current_frame(self) -> int:
        """Current playback position in samples."""
        return self._current_frame

    @property
    def state(self) -> PlaybackState:
        """Current playback state."""
        return self._state

    @property
    def is_playing(self) -> bool:
        """Check if currently playing."""
        return self._state == PlaybackState.PLAYING

    @property
    def duration_samples(self) -> int:
        return self._track.duration_samples if self._track is not None else 0

    def current_position(self) -> float:
        """Current playback position in seconds, never past the end of the track."""
        if self._track is None or self._track.samplerate <= 0:
            return 0.0
        frame = min(self._current_frame, self.duration_samples)
        return frame / self._track.samplerate

    def set_on_ended(self, callback: Optional[EndedCallback]) -> None:
        self._on_ended = callback

    def load(self, track: "Track") -> None:
        """Replace the current track. Stops any running stream first."""
        self.stop()
        self._track = track
        logger.info("Player loaded %s", track)

    def _set_state(self, state: PlaybackState) -> None:
        """Update state and notify callback."""
        if self._disposed:
            self._state = state
            return
        if self._state != state:
            self._state = state
            if self._on_state_changed:
                self._on_state_changed(state)

    def play(self) -> bool:
        """
        Start audio playback from the current position.

        Returns:
            True if playback started successfully
        """
        if self._disposed or self._track is None or self.is_playing:
            return False
        if self._current_frame >= self.duration_samples:
            return False

        import sounddevice as sd

        data = self._track.data
        total = self.duration_samples
        self._set_state(PlaybackState.PLAYING)

        def playback_callback(
            outdata: np.ndarray,
            frames: int,
            time: object,
            status: "sd.CallbackFlags"
        ) -> None:
            """Real-time audio callback."""
            try:
                current_f = self._current_frame
                outdata.fill(0)

                chunk_end = min(current_f + frames, total)
                n = chunk_end - current_f
                if n > 0:
                    segment = data[current_f:chunk_end]
                    if segment.ndim == 1:
                        # Mono to stereo
                        outdata[:n, 0] = segment
                        outdata[:n, 1] = segment
                    else:
                        ch = min(segment.shape[1], outdata.shape[1])
                        outdata[:n, :ch] = segment[:, :ch]

                self._current_frame = current_f + frames
                if self._current_frame >= total:
                    raise sd.CallbackStop()
            except sd.CallbackStop:
                raise
            except Exception as e:
                logger.error("Playback callback error: %s", e, exc_info=True)
                raise sd.CallbackStop()

        try:
            self._stream = sd.OutputStream(
                samplerate=self._track.samplerate,
                channels=AUDIO_CONFIG.playback_channels,
                blocksize=AUDIO_CONFIG.playback_blocksize,
                dtype='float32',
                callback=playback_callback,
                finished_callback=self._on_stream_finished
            )
            self._stream.start()
            logger.info("Playback started at frame %d", self._current_frame)
            return True

        except Exception as e:
            logger.error("Failed to start playback: %s", e, exc_info=True)
            self._stream = None
            self._set_state(PlaybackState.STOPPED)
            return False

    def _on_stream_finished(self) -> None:
        """Called when the stream finishes, on the PortAudio thread."""
        # pause() flips the state before stopping the stream, so only a
        # stream that ran out of samples is still PLAYING here.
        if self._disposed or self._state != PlaybackState.PLAYING:
            return
        if self._current_frame < self.duration_samples:
            return
        self._set_state(PlaybackState.STOPPED)
        logger.info("Playback reached end of track")
        if self._on_ended:
            self._on_ended()

    def _close_stream(self) -> None:
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.warning("Error stopping stream: %s", e)
            self._stream = None

    def pause(self) -> None:
        """Pause playback (keep position)."""
        was_playing = self.is_playing
        if was_playing:
            self._set_state(PlaybackState.PAUSED)
        self._close_stream()
        if was_playing:
            logger.info("Playback paused at frame %d", self._current_frame)

    def stop(self) -> None:
        """Stop playback and reset position."""
        self.pause()
        self._current_frame = 0
        self._set_state(PlaybackState.STOPPED)

    def seek(self, seconds: float) -> None:
        """
        Move playhead to a time position.

        Args:
            seconds: Target position in seconds
        """
        if self._track is None:
            self._current_frame = 0
            return
        sample_index = int(seconds * self._track.samplerate)
        self._current_frame = max(0, min(sample_index, self.duration_samples))

    def cleanup(self) -> None:
        """Clean up resources."""
        # Mark disposed first so finished_callback can't reach the UI.
        self._disposed = True
        self._on_ended = None
        self._on_state_changed = None
        self._close_stream()
        self._state = PlaybackState.STOPPED

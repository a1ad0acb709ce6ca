"""
Recording/playback session for BarCam.
Owns the SessionState and mediates every transition between capture,
recording and playback.
"""
from __future__ import annotations
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .capture import CaptureTimeline
from .config import CAPTURE_CONFIG, SEGMENT_CONFIG, WAVEFORM_CONFIG, SessionState
from .errors import CaptureError, DecodeError, PlaybackError, RecordingError
from .segmenter import Segment, segment
from .sync_loop import SyncLoop
from .track import Track
from .types import (
    AudioSource, CaptureProvider, Decoder, FrameScheduler, HighlightSink,
    MasterTimeline, RecordedArtifact, RecordedTimeline, Recorder, TransitionResult
)
from .waveform import WaveformColumn, summarize

logger = logging.getLogger("BarCam")


@dataclass(frozen=True, slots=True)
class Controls:
    """Which transport buttons are usable in a given state."""
    record: bool = False
    play: bool = False
    stop: bool = False


_CONTROLS = {
    SessionState.IDLE: Controls(),
    SessionState.READY: Controls(record=True),
    SessionState.RECORDING: Controls(stop=True),
    SessionState.RECORDED_READY: Controls(record=True, play=True),
    SessionState.PLAYBACK: Controls(stop=True),
}


def controls_for(state: SessionState) -> Controls:
    """Transport button enablement for ``state``."""
    return _CONTROLS[state]


def _exclusive(method):
    """Ignore a transition requested while another one is still running."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._in_transition:
            return self._ignored(method.__name__)
        self._in_transition = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._in_transition = False
    return wrapper


class SessionController:
    """
    State machine over one loaded song and at most one recorded take.

    Transitions return a TransitionResult instead of raising for the
    failures a user can cause (bad file, camera refused, recorder failure).
    Calls that are not allowed from the current state are ignored.
    So is any transition requested while another is in progress, which can
    happen when a collaborator spins the host event loop (the recorder
    waiting for its file to be finalized).

    The host wires end-of-media notifications of the audio player and of the
    recorded timeline to ``on_master_ended`` / ``on_slave_ended`` on its own
    thread.
    """

    def __init__(
        self,
        decoder: Decoder,
        player: MasterTimeline,
        capture: CaptureProvider,
        recorder: Recorder,
        recorded: RecordedTimeline,
        scheduler: FrameScheduler,
        highlight: Optional[HighlightSink] = None,
        segment_count: int = SEGMENT_CONFIG.default_count,
        on_state_changed: Optional[Callable[[SessionState], None]] = None
    ) -> None:
        self._decoder = decoder
        self._player = player
        self._capture = capture
        self._recorder = recorder
        self._recorded = recorded
        self._highlight = highlight
        self._segment_count = segment_count
        self._on_state_changed = on_state_changed

        self._state = SessionState.IDLE
        self._track: Optional[Track] = None
        self._segments: list[Segment] = []
        self._columns: list[WaveformColumn] = []
        self._capture_timeline = CaptureTimeline()
        self._recording_handle: Optional[Any] = None
        self._artifact: Optional[RecordedArtifact] = None
        self._loop = SyncLoop(scheduler, self._on_segment_changed)
        self._in_transition = False

    # --- State ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def controls(self) -> Controls:
        return controls_for(self._state)

    @property
    def track(self) -> Optional[Track]:
        return self._track

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)

    @property
    def columns(self) -> list[WaveformColumn]:
        return list(self._columns)

    @property
    def artifact(self) -> Optional[RecordedArtifact]:
        return self._artifact

    @property
    def loop(self) -> SyncLoop:
        return self._loop

    @property
    def capture_timeline(self) -> CaptureTimeline:
        return self._capture_timeline

    @property
    def active_segment(self) -> Optional[int]:
        return self._loop.active_index

    def _set_state(self, state: SessionState) -> TransitionResult:
        if self._state != state:
            logger.info("Session state: %s -> %s", self._state.name, state.name)
            self._state = state
            if self._on_state_changed:
                self._on_state_changed(state)
        return TransitionResult(True, state)

    def _ignored(self, action: str) -> TransitionResult:
        logger.debug("Ignoring %s in state %s", action, self._state.name)
        return TransitionResult(False, self._state)

    def _failed(self, action: str, error: Exception) -> TransitionResult:
        logger.error("%s failed: %s", action, error)
        return TransitionResult(False, self._state, error)

    def _on_segment_changed(self, index: Optional[int]) -> None:
        if self._highlight is not None:
            self._highlight.on_segment_changed(index)

    # --- Track ---

    @_exclusive
    def load_track(
        self,
        source: AudioSource,
        waveform_width: int = WAVEFORM_CONFIG.default_width,
        name: Optional[str] = None
    ) -> TransitionResult:
        """
        Decode a song and make it the session track. Allowed from any state.

        A decode failure leaves the session untouched. On success every
        running resource of the previous track is released before the new
        one is installed.
        """
        try:
            track = self._decoder.decode(source, name)
        except DecodeError as e:
            return self._failed("Load track", e)

        self._release_all()

        self._track = track
        self._segments = segment(track.duration_seconds, self._segment_count)
        self._columns = summarize(track.sample_data, waveform_width)
        self._player.load(track)
        self._on_segment_changed(None)
        logger.info("Track ready: %s, %d segments", track, len(self._segments))
        return self._set_state(SessionState.READY)

    def resize_waveform(self, width: int) -> list[WaveformColumn]:
        """Recompute the waveform summary for a new render width."""
        if self._track is None:
            return []
        self._columns = summarize(self._track.sample_data, width)
        return self.columns

    # --- Recording ---

    @_exclusive
    def start_recording(self) -> TransitionResult:
        """Open the camera, start recording and play the song from the top."""
        if self._state != SessionState.READY:
            return self._ignored("start_recording")
        return self._begin_recording(replacing_take=False)

    @_exclusive
    def record_new_take(self) -> TransitionResult:
        """
        Record again over the current take.

        The previous take is dropped only once the camera, the recorder and
        the song are all running; if any of them fails it is kept and the
        session stays RECORDED_READY.
        """
        if self._state != SessionState.RECORDED_READY:
            return self._ignored("record_new_take")
        return self._begin_recording(replacing_take=True)

    def _begin_recording(self, replacing_take: bool) -> TransitionResult:
        try:
            stream = self._capture.acquire(CAPTURE_CONFIG.constraints)
        except CaptureError as e:
            return self._failed("Camera access", e)

        try:
            handle = self._recorder.start(stream)
        except RecordingError as e:
            self._capture.release(stream)
            return self._failed("Start recording", e)

        self._player.seek(0.0)
        if not self._player.play():
            self._recorder.discard(handle)
            self._capture.release(stream)
            return self._failed("Start recording", PlaybackError("Audio output could not be started."))

        if replacing_take:
            self._drop_artifact()
            self._on_segment_changed(None)

        self._capture_timeline.attach(stream)
        self._recording_handle = handle
        self._loop.start(self._player, self._capture_timeline, self._segments)
        return self._set_state(SessionState.RECORDING)

    @_exclusive
    def stop_recording(self) -> TransitionResult:
        """Finalize the take. On failure the session stays RECORDING so stop can be retried."""
        if self._state != SessionState.RECORDING:
            return self._ignored("stop_recording")

        try:
            artifact = self._recorder.stop(self._recording_handle)
        except RecordingError as e:
            return self._failed("Stop recording", e)

        self._recording_handle = None
        self._release_capture()
        self._player.pause()
        self._player.seek(0.0)
        self._loop.cancel()

        self._artifact = artifact
        self._recorded.load(artifact)
        logger.info("Recorded take: %s", artifact.location)
        return self._set_state(SessionState.RECORDED_READY)

    @_exclusive
    def new_take(self) -> TransitionResult:
        """Drop the recorded take and return to READY."""
        if self._state != SessionState.RECORDED_READY:
            return self._ignored("new_take")
        self._drop_artifact()
        self._loop.reset()
        self._on_segment_changed(None)
        return self._set_state(SessionState.READY)

    # --- Playback ---

    @_exclusive
    def start_playback(self) -> TransitionResult:
        """Replay the take and the song together from the start."""
        if self._state != SessionState.RECORDED_READY:
            return self._ignored("start_playback")

        self._player.seek(0.0)
        self._recorded.seek(0.0)
        if not self._player.play():
            return self._failed("Start playback", PlaybackError("Audio output could not be started."))
        self._recorded.play()
        self._loop.start(self._player, self._recorded, self._segments)
        return self._set_state(SessionState.PLAYBACK)

    @_exclusive
    def stop_playback(self) -> TransitionResult:
        """Stop both timelines and rewind them."""
        if self._state != SessionState.PLAYBACK:
            return self._ignored("stop_playback")
        self._halt_playback()
        self._player.seek(0.0)
        self._recorded.seek(0.0)
        return self._set_state(SessionState.RECORDED_READY)

    def stop(self) -> TransitionResult:
        """Stop whatever is running."""
        if self._state == SessionState.RECORDING:
            return self.stop_recording()
        if self._state == SessionState.PLAYBACK:
            return self.stop_playback()
        return self._ignored("stop")

    # --- End of media ---

    @_exclusive
    def on_master_ended(self) -> None:
        """The song reached its end."""
        if self._state == SessionState.PLAYBACK:
            self._end_playback("song")
        elif self._state == SessionState.RECORDING:
            # Keep capturing until the user stops; only the song is over.
            self._loop.cancel()
            self._player.pause()
            logger.info("Song ended while recording")

    @_exclusive
    def on_slave_ended(self) -> None:
        """The recorded take reached its end."""
        if self._state == SessionState.PLAYBACK:
            self._end_playback("recording")

    def _end_playback(self, which: str) -> None:
        logger.info("Playback finished (%s ended first)", which)
        self._halt_playback()
        self._set_state(SessionState.RECORDED_READY)

    def _halt_playback(self) -> None:
        self._loop.cancel()
        self._player.pause()
        self._recorded.pause()

    # --- Resources ---

    def _release_capture(self) -> None:
        if self._capture_timeline.is_attached:
            self._capture.release(self._capture_timeline.stream)
            self._capture_timeline.detach()

    def _drop_artifact(self) -> None:
        if self._artifact is not None:
            self._recorded.pause()
            self._recorded.unload()
            self._artifact = None

    def _release_all(self) -> None:
        """Cancel the loop and free every device and take, in that order."""
        self._loop.reset()
        self._player.pause()
        if self._recording_handle is not None:
            self._recorder.discard(self._recording_handle)
            self._recording_handle = None
        self._release_capture()
        self._drop_artifact()

    def shutdown(self) -> None:
        """Release everything; the session returns to IDLE."""
        self._release_all()
        self._track = None
        self._segments = []
        self._columns = []
        self._set_state(SessionState.IDLE)

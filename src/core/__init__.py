"""
BarCam Core Module

This module contains the synchronization engine:
- SessionController: Recording/playback state machine
- SyncLoop: Frame-driven master/slave synchronization
- AudioPlayer: Audio output and master clock
- AudioDecoder: Song decoding
- Track: Decoded song representation
- waveform / segmenter: Pure analysis helpers

Device and GUI bindings live in src.ui; importing this package never
opens an audio or camera device.
"""
from .session import SessionController, Controls, controls_for
from .sync_loop import SyncLoop
from .playback import AudioPlayer
from .decoder import AudioDecoder
from .track import Track
from .capture import CaptureTimeline
from .segmenter import Segment, segment, find_active_segment
from .waveform import WaveformColumn, summarize, summarize_arrays, waveform_polyline
from .types import RecordedArtifact, TransitionResult
from .errors import (
    BarCamError,
    DecodeError,
    CaptureError,
    PermissionDenied,
    DeviceUnavailable,
    RecordingError,
    PlaybackError,
    InvalidArgument,
)
from .config import (
    AUDIO_CONFIG,
    SEGMENT_CONFIG,
    WAVEFORM_CONFIG,
    CAPTURE_CONFIG,
    SYNC_CONFIG,
    UI_CONFIG,
    PlaybackState,
    SessionState,
)

__all__ = [
    # Main classes
    'SessionController',
    'Controls',
    'controls_for',
    'SyncLoop',
    'AudioPlayer',
    'AudioDecoder',
    'Track',
    'CaptureTimeline',
    'RecordedArtifact',
    'TransitionResult',
    # Analysis
    'Segment',
    'segment',
    'find_active_segment',
    'WaveformColumn',
    'summarize',
    'summarize_arrays',
    'waveform_polyline',
    # Errors
    'BarCamError',
    'DecodeError',
    'CaptureError',
    'PermissionDenied',
    'DeviceUnavailable',
    'RecordingError',
    'PlaybackError',
    'InvalidArgument',
    # Config
    'AUDIO_CONFIG',
    'SEGMENT_CONFIG',
    'WAVEFORM_CONFIG',
    'CAPTURE_CONFIG',
    'SYNC_CONFIG',
    'UI_CONFIG',
    'PlaybackState',
    'SessionState',
]

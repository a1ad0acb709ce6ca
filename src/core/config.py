"""
Centralized configuration for BarCam.
All magic numbers and default settings in one place.
"""
from dataclasses import dataclass
from enum import Enum, auto


class PlaybackState(Enum):
    """Audio player state enumeration."""
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


class SessionState(Enum):
    """Capture/record/playback exclusivity for a session."""
    IDLE = auto()            # No track loaded
    READY = auto()           # Track loaded, nothing running
    RECORDING = auto()       # Camera recording, audio master running
    RECORDED_READY = auto()  # A finished take exists, nothing running
    PLAYBACK = auto()        # Take and audio replaying together


@dataclass(frozen=True, slots=True)
class AudioConfig:
    """Audio engine configuration."""
    default_samplerate: int = 44100
    playback_blocksize: int = 4096
    playback_channels: int = 2


@dataclass(frozen=True, slots=True)
class SegmentConfig:
    """Timeline segmentation settings."""
    default_count: int = 8


@dataclass(frozen=True, slots=True)
class WaveformConfig:
    """Waveform visualization settings."""
    height: int = 80
    default_width: int = 800
    stroke_color: tuple[int, int, int] = (51, 102, 238)  # #36e
    highlight_color: tuple[int, int, int, int] = (54, 110, 255, 51)  # ~20% alpha
    segment_border_color: tuple[int, int, int] = (90, 90, 90)
    line_width: int = 1


@dataclass(frozen=True, slots=True)
class CaptureConfig:
    """Camera capture and recording settings."""
    video: bool = True
    audio: bool = False
    container: str = "webm"
    mime_type: str = "video/webm"

    @property
    def constraints(self) -> dict[str, bool]:
        return {"video": self.video, "audio": self.audio}


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Synchronization loop settings."""
    frame_interval_ms: int = 16  # ~60 Hz display refresh
    ui_refresh_ms: int = 30


@dataclass(frozen=True, slots=True)
class UIConfig:
    """Main window settings."""
    window_title: str = "BarCam - Sing Along Recorder"
    window_size: tuple[int, int] = (960, 720)
    audio_file_filter: str = "Audio Files (*.wav *.mp3 *.flac *.ogg *.m4a)"
    status_timeout_ms: int = 3000


# Global config instances (immutable singletons)
AUDIO_CONFIG = AudioConfig()
SEGMENT_CONFIG = SegmentConfig()
WAVEFORM_CONFIG = WaveformConfig()
CAPTURE_CONFIG = CaptureConfig()
SYNC_CONFIG = SyncConfig()
UI_CONFIG = UIConfig()

"""
BarCam UI Module

Qt-based user interface components:
- MainWindow: Main application window
- WaveformWidget: Waveform and bar strip, segment highlighting
- media: Qt Multimedia camera, recorder and video playback bindings
"""
from .main_window import MainWindow
from .waveform_view import WaveformWidget
from .media import (QtCaptureProvider, QtRecorder, QtFrameScheduler,
                    VideoPlayerTimeline, MasterEndBridge)

__all__ = [
    'MainWindow',
    'WaveformWidget',
    'QtCaptureProvider',
    'QtRecorder',
    'QtFrameScheduler',
    'VideoPlayerTimeline',
    'MasterEndBridge',
]

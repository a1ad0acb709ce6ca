"""
Qt Multimedia bindings for the session collaborators:
camera capture, recording, recorded-take playback and frame scheduling.
"""
from __future__ import annotations
import contextlib
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtCore import (QCameraPermission, QCoreApplication, QEventLoop, QObject,
                          Qt, QTimer, QUrl, pyqtSignal)
from PyQt6.QtMultimedia import (QCamera, QMediaCaptureSession, QMediaDevices,
                                QMediaFormat, QMediaPlayer, QMediaRecorder)

from src.core.config import CAPTURE_CONFIG, SYNC_CONFIG
from src.core.errors import BarCamError, DeviceUnavailable, PermissionDenied, RecordingError
from src.core.types import RecordedArtifact, TickCallback
from src.utils.logger import logger

# Upper bound for the recorder to finish writing its container
RECORDER_FINALIZE_TIMEOUT_MS = 3000


@dataclass
class CaptureStream:
    camera: QCamera
    session: QMediaCaptureSession


@dataclass
class RecordingHandle:
    recorder: QMediaRecorder
    stream: CaptureStream
    path: Path


class QtFrameScheduler:
    """Runs a callback on the next GUI frame."""

    def __init__(self, interval_ms: int = SYNC_CONFIG.frame_interval_ms):
        self.interval_ms = interval_ms

    def schedule_next(self, callback: TickCallback) -> None:
        QTimer.singleShot(self.interval_ms, callback)


class MasterEndBridge(QObject):
    """Carries the audio player's end-of-track notice onto the GUI thread."""
    ended = pyqtSignal()

    def notify(self):
        self.ended.emit()


def camera_permission_error(status) -> Optional[PermissionDenied]:
    """Map a camera permission status onto the error acquire() should raise."""
    if status == Qt.PermissionStatus.Denied:
        return PermissionDenied(
            "Could not access camera. Make sure camera access is allowed in the system settings."
        )
    # Granted, or Undetermined on platforms that prompt when the camera starts
    return None


class QtCaptureProvider:
    """
    Opens the default camera and previews it on a video widget.

    Failures Qt reports after the camera has started arrive through
    ``errorOccurred``; they are forwarded to ``on_error``.
    """

    def __init__(self, video_output=None, on_error: Optional[Callable[[BarCamError], None]] = None):
        self.video_output = video_output
        self.on_error = on_error

    def acquire(self, constraints):
        if not constraints.get("video", True):
            raise DeviceUnavailable("Video capture was not requested")
        if not QMediaDevices.videoInputs():
            raise DeviceUnavailable("No camera found on this system.")

        app = QCoreApplication.instance()
        if app is not None:
            error = camera_permission_error(app.checkPermission(QCameraPermission()))
            if error is not None:
                raise error

        camera = QCamera(QMediaDevices.defaultVideoInput())
        if not camera.isAvailable():
            raise DeviceUnavailable(f"Camera unavailable: {camera.cameraDevice().description()}")

        session = QMediaCaptureSession()
        session.setCamera(camera)
        if self.video_output is not None:
            session.setVideoOutput(self.video_output)

        camera.errorOccurred.connect(self._on_camera_error)
        camera.start()
        if camera.error() != QCamera.Error.NoError:
            message = camera.errorString()
            camera.stop()
            raise PermissionDenied(
                f"Could not access camera. Make sure camera access is allowed. ({message})"
            )

        logger.info(f"Camera acquired: {camera.cameraDevice().description()}")
        return CaptureStream(camera, session)

    def _on_camera_error(self, error, message):
        logger.error(f"Camera error: {message}")
        if self.on_error is not None:
            self.on_error(PermissionDenied(
                f"Could not access camera. Make sure camera access is allowed. ({message})"
            ))

    def release(self, stream):
        with contextlib.suppress(TypeError):
            stream.camera.errorOccurred.disconnect(self._on_camera_error)
        stream.camera.stop()
        stream.session.setCamera(None)
        stream.session.setVideoOutput(None)
        logger.info("Camera released")


class QtRecorder:
    """
    Records a capture stream into a temporary WebM file.

    Errors raised by the backend once recording runs are forwarded to
    ``on_error``.
    """

    def __init__(self, on_error: Optional[Callable[[BarCamError], None]] = None):
        self.on_error = on_error
        self._stopping = False

    def start(self, stream):
        recorder = QMediaRecorder()
        stream.session.setRecorder(recorder)
        if not recorder.isAvailable():
            stream.session.setRecorder(None)
            raise RecordingError("Video recording is not supported by the multimedia backend.")

        fd, path = tempfile.mkstemp(prefix="barcam_", suffix=f".{CAPTURE_CONFIG.container}")
        os.close(fd)

        recorder.setMediaFormat(QMediaFormat(QMediaFormat.FileFormat.WebM))
        recorder.setOutputLocation(QUrl.fromLocalFile(path))
        recorder.errorOccurred.connect(self._on_recorder_error)
        recorder.record()
        if recorder.error() != QMediaRecorder.Error.NoError:
            stream.session.setRecorder(None)
            raise RecordingError(recorder.errorString())

        logger.info(f"Recording to {path}")
        return RecordingHandle(recorder, stream, Path(path))

    def _on_recorder_error(self, error, message):
        logger.error(f"Recorder error: {message}")
        # stop() raises the error itself while it waits
        if self.on_error is not None and not self._stopping:
            self.on_error(RecordingError(message))

    def _wait_stopped(self, recorder):
        if recorder.recorderState() == QMediaRecorder.RecorderState.StoppedState:
            return
        loop = QEventLoop()
        recorder.recorderStateChanged.connect(
            lambda state: loop.quit() if state == QMediaRecorder.RecorderState.StoppedState else None
        )
        QTimer.singleShot(RECORDER_FINALIZE_TIMEOUT_MS, loop.quit)
        loop.exec()

    def stop(self, handle):
        recorder = handle.recorder
        self._stopping = True
        try:
            recorder.stop()
            self._wait_stopped(recorder)
        finally:
            self._stopping = False

        if recorder.error() != QMediaRecorder.Error.NoError:
            raise RecordingError(recorder.errorString())

        location = recorder.actualLocation().toLocalFile() or str(handle.path)
        duration = recorder.duration() / 1000.0
        handle.stream.session.setRecorder(None)
        return RecordedArtifact(Path(location), CAPTURE_CONFIG.mime_type, duration)

    def discard(self, handle):
        with contextlib.suppress(TypeError):
            handle.recorder.errorOccurred.disconnect(self._on_recorder_error)
        handle.recorder.stop()
        handle.stream.session.setRecorder(None)
        with contextlib.suppress(FileNotFoundError):
            os.remove(handle.path)
        logger.info(f"Discarded recording {handle.path}")


class VideoPlayerTimeline(QObject):
    """Plays a recorded take; the slave timeline during playback."""
    ended = pyqtSignal()

    def __init__(self, video_output=None, parent=None):
        super().__init__(parent)
        self.video_output = video_output
        self.artifact: Optional[RecordedArtifact] = None
        self.player = QMediaPlayer(self)
        self.player.mediaStatusChanged.connect(self._on_media_status)
        self.player.errorOccurred.connect(self._on_error)

    def load(self, artifact):
        self.artifact = artifact
        # The capture session may have taken over the widget while recording
        if self.video_output is not None:
            self.player.setVideoOutput(self.video_output)
        self.player.setSource(QUrl.fromLocalFile(str(artifact.location)))

    def unload(self):
        self.player.stop()
        self.player.setSource(QUrl())
        # Hand the widget back to the camera preview
        self.player.setVideoOutput(None)
        if self.artifact is not None:
            with contextlib.suppress(FileNotFoundError):
                os.remove(self.artifact.location)
        self.artifact = None

    def play(self):
        self.player.play()

    def pause(self):
        self.player.pause()

    def seek(self, seconds):
        self.set_position(seconds)

    def set_position(self, seconds):
        self.player.setPosition(int(seconds * 1000))

    def _on_media_status(self, status):
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.ended.emit()

    def _on_error(self, error, message):
        logger.error(f"Recorded take playback error: {message}")

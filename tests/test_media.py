"""
Tests for the Qt multimedia adapters that need no device or event loop.
"""
import pytest

from src.core.errors import PermissionDenied, RecordingError

media = pytest.importorskip("src.ui.media", reason="PyQt6 Multimedia is not available")
from PyQt6.QtCore import Qt  # noqa: E402


class TestCameraPermission:
    """Tests for camera_permission_error()."""

    def test_denied_raises_permission_denied(self):
        error = media.camera_permission_error(Qt.PermissionStatus.Denied)
        assert isinstance(error, PermissionDenied)
        assert "camera access" in str(error)

    @pytest.mark.parametrize("status", [
        Qt.PermissionStatus.Granted,
        Qt.PermissionStatus.Undetermined,
    ])
    def test_other_statuses_allow_start(self, status):
        assert media.camera_permission_error(status) is None


class TestLateErrors:
    """Errors Qt reports after a device has started."""

    def test_camera_error_is_forwarded(self):
        errors = []
        provider = media.QtCaptureProvider(on_error=errors.append)
        provider._on_camera_error(None, "access revoked")
        assert len(errors) == 1
        assert isinstance(errors[0], PermissionDenied)
        assert "access revoked" in str(errors[0])

    def test_camera_error_without_listener(self):
        media.QtCaptureProvider()._on_camera_error(None, "access revoked")

    def test_recorder_error_is_forwarded(self):
        errors = []
        recorder = media.QtRecorder(on_error=errors.append)
        recorder._on_recorder_error(None, "disk full")
        assert len(errors) == 1
        assert isinstance(errors[0], RecordingError)

    def test_recorder_error_while_stopping_is_left_to_stop(self):
        errors = []
        recorder = media.QtRecorder(on_error=errors.append)
        recorder._stopping = True
        recorder._on_recorder_error(None, "disk full")
        assert errors == []

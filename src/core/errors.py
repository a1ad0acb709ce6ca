"""
Exception hierarchy for BarCam.
Collaborators raise these; SessionController catches the surfaced ones
and reports them through TransitionResult.
"""


class BarCamError(Exception):
    """Base class for all BarCam errors."""


class DecodeError(BarCamError):
    """The uploaded file could not be read or is not a supported audio format."""


class CaptureError(BarCamError):
    """Capture device acquisition failed."""


class PermissionDenied(CaptureError):
    """The host refused access to the capture device."""


class DeviceUnavailable(CaptureError):
    """No capture device, or no recording capability, on this host."""


class RecordingError(BarCamError):
    """The recorder failed to start or to finalize a recording."""


class InvalidArgument(BarCamError, ValueError):
    """A pure helper was called with arguments outside its domain."""


class PlaybackError(BarCamError):
    """The audio output or the recorded take could not start playing."""

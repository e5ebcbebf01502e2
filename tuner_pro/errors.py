from __future__ import annotations


class TunerError(RuntimeError):
    pass


class AcquisitionError(TunerError):
    """The audio frame source could not be opened."""


class PermissionDenied(AcquisitionError):
    pass


class DeviceUnavailable(AcquisitionError):
    pass


class FrameSourceError(TunerError):
    """The frame source stopped delivering audio while a session was listening."""

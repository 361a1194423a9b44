# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Exception hierarchy for camera open, cascade loading, detection, snapshot and download failures
# Acknowledgements: Python exceptions documentation

"""Exceptions raised by facecam.

None of these are fatal to the application; callers convert them to status text.
"""


class FaceCamError(Exception):
    """Base class for all facecam errors."""


class DeviceOpenError(FaceCamError):
    """Camera could not be opened with either the primary or the fallback backend."""

    def __init__(self, device_index: int):
        super().__init__(f"Unable to open camera {device_index} with any backend")
        self.device_index = device_index


class CascadeLoadError(FaceCamError):
    """Cascade file was rejected or could not be constructed."""


class CascadeFileNotFoundError(CascadeLoadError):
    def __init__(self, path):
        super().__init__("file not found")
        self.path = path


class CascadeTooSmallError(CascadeLoadError):
    def __init__(self, size: int, minimum: int):
        super().__init__(f"file is too small to be a cascade ({size} bytes, need at least {minimum})")
        self.size = size
        self.minimum = minimum


class CascadeLooksLikeHtmlError(CascadeLoadError):
    def __init__(self):
        super().__init__(
            "file looks like an HTML page. If downloaded from the web, "
            "ensure you saved the RAW XML, not the HTML page."
        )


class MissingCascadeMarkersError(CascadeLoadError):
    def __init__(self):
        super().__init__("file does not look like a valid OpenCV cascade XML")


class CascadeConstructionError(CascadeLoadError):
    """OpenCV raised while building the classifier."""


class EmptyClassifierError(CascadeLoadError):
    def __init__(self):
        super().__init__("empty classifier")


class DetectionError(FaceCamError):
    """Per-frame detection failure. Reported, never stops the capture loop."""


class SnapshotError(FaceCamError):
    """Snapshot could not be written."""


class NetworkFetchError(FaceCamError):
    """Default cascade download failed."""

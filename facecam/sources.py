# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Webcam video source with default/platform-native backend fallback, stream property
# query, FOURCC decoding, and device enumeration for the camera selector
# Acknowledgements: OpenCV VideoCapture documentation for backend identifiers and capture properties

"""Video source abstraction for the capture session.

Opening strategy:
1. Default backend (cv2.CAP_ANY) at the requested index
2. Platform-native backend if the default one fails:
   - Windows: DirectShow (most reliable for USB webcams)
   - macOS: AVFoundation
   - Linux: V4L2

The capture factory is injectable so the fallback can be exercised without hardware.
"""

import enum
import logging
import math
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

import cv2
import numpy as np

from .config import FOURCC_PLACEHOLDER, MAX_PROBE_DEVICES
from .errors import DeviceOpenError

logger = logging.getLogger(__name__)

CaptureFactory = Callable[..., Any]


class Backend(enum.Enum):
    DEFAULT = "Default"
    FALLBACK = "Fallback"


def fallback_api(platform: Optional[str] = None) -> int:
    """Platform-native OpenCV capture API used when the default backend fails."""
    platform = platform or sys.platform
    if platform == 'win32':
        return cv2.CAP_DSHOW
    elif platform == 'darwin':
        return cv2.CAP_AVFOUNDATION
    return cv2.CAP_V4L2


def decode_fourcc(value) -> str:
    """Decode a packed FOURCC (least-significant byte first) into 4 characters.

    Returns FOURCC_PLACEHOLDER if the value is not an integer or any byte is
    not printable ASCII (e.g. 0 from backends that don't report a codec).
    """
    try:
        if isinstance(value, float) and not math.isfinite(value):
            return FOURCC_PLACEHOLDER
        code = int(value)
    except (TypeError, ValueError, OverflowError):
        return FOURCC_PLACEHOLDER
    chars = [chr((code >> shift) & 0xFF) for shift in (0, 8, 16, 24)]
    if not all(c.isascii() and c.isprintable() for c in chars):
        return FOURCC_PLACEHOLDER
    return "".join(chars)


@dataclass(frozen=True)
class StreamInfo:
    """Properties reported by the capture backend after opening."""
    backend: Backend
    width: int
    height: int
    fps: float
    fourcc: str

    def summary(self, cascade_name: Optional[str] = None) -> str:
        return (
            f"Backend: {self.backend.value} Resolution: {self.width}x{self.height} "
            f"FPS: {self.fps:g} FOURCC: {self.fourcc} Cascade: {cascade_name or 'not loaded'}"
        )


class VideoSource(ABC):
    """Camera the capture session polls; usable as a context manager."""

    @abstractmethod
    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Grab one BGR frame.

        A dropped frame or a released camera gives (False, None); the poll loop
        treats that as a miss and keeps going. The returned array may be reused
        by the next read.
        """

    @abstractmethod
    def release(self):
        """Close the camera. Calling it twice is harmless."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class WebcamSource(VideoSource):
    """Local webcam opened through cv2.VideoCapture."""

    def __init__(self, cap, device: int, backend: Backend):
        """Wrap an already opened capture.

        Args:
            cap: Opened cv2.VideoCapture (or compatible)
            device: Camera device index
            backend: Which backend succeeded
        """
        self.cap = cap
        self.device = device
        self.backend = backend

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        cap = self.cap
        if cap is None:
            return (False, None)
        return cap.read()

    def stream_info(self) -> StreamInfo:
        """Query resolution, frame rate and codec from the backend."""
        width = self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)
        height = self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        fourcc = self.cap.get(cv2.CAP_PROP_FOURCC)
        return StreamInfo(
            backend=self.backend,
            width=int(width or 0),
            height=int(height or 0),
            fps=float(fps or 0.0),
            fourcc=decode_fourcc(fourcc),
        )

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Released webcam device {self.device}")


def open_webcam(device: int, capture_factory: CaptureFactory = cv2.VideoCapture,
                platform: Optional[str] = None) -> WebcamSource:
    """Open a webcam, retrying with the platform-native backend on failure.

    Raises:
        DeviceOpenError: neither backend could open the device
    """
    cap = capture_factory(device)
    if cap.isOpened():
        logger.info(f"Opened webcam device {device} with default backend")
        return WebcamSource(cap, device, Backend.DEFAULT)

    cap.release()
    api = fallback_api(platform)
    logger.warning(f"Default backend failed for device {device}, retrying with API {api}")
    cap = capture_factory(device, api)
    if cap.isOpened():
        logger.info(f"Opened webcam device {device} with fallback backend")
        return WebcamSource(cap, device, Backend.FALLBACK)

    cap.release()
    logger.error(f"Failed to open webcam device {device} on {platform or sys.platform}")
    raise DeviceOpenError(device)


def enumerate_devices(max_devices: int = MAX_PROBE_DEVICES,
                      capture_factory: CaptureFactory = cv2.VideoCapture) -> List[Tuple[int, str]]:
    """Probe device indices and return (index, label) for each camera that opens.

    Falls back to a single (0, "Camera0") entry if nothing opens.
    """
    devices = []
    for index in range(max_devices):
        try:
            cap = capture_factory(index)
        except cv2.error as e:
            logger.debug(f"Probe of device {index} raised: {e}")
            continue
        try:
            if cap.isOpened():
                devices.append((index, f"Camera {index}"))
        finally:
            cap.release()

    if not devices:
        logger.warning("No cameras found during probe, offering Camera0")
        devices.append((0, "Camera0"))
    else:
        logger.info(f"Found {len(devices)} camera(s): {[label for _, label in devices]}")
    return devices

# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Capture session state machine owning the camera, the background poll loop, the loaded
# Haar cascade, and status/frame publication to the presentation layer
# Acknowledgements: OpenCV VideoCapture documentation, Python threading documentation

"""Capture session: camera lifecycle and the background poll loop.

States:
    IDLE -> STARTING -> RUNNING -> STOPPING -> IDLE

Architecture:
- start() opens the device on the caller's thread (default backend, then fallback)
- A daemon worker thread reads frames, runs detection if a cascade is loaded and
  puts a deep copy of each frame into ``frames`` (single-slot, newest wins)
- Status text goes through the on_status callback; it is called from both the
  caller's thread and the worker, so the callback must be thread-safe
  (LatestSlot.put is)
- stop() is cooperative: it clears the worker's own running flag and joins it with
  a bounded timeout; a device read that blocks longer finishes on its own and the
  worker then exits, even if start() has already launched its replacement

Usage:
    session = CaptureSession(config, on_status=print)
    session.start()
    frame = session.frames.take()
    session.stop()
"""
import enum
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

import cv2
import requests

from .cascade import CascadeHandle, fetch_default_cascade, is_xml_path, validate_and_load
from .channels import LatestSlot
from .config import AppConfig
from .detection import process_frame
from .errors import CascadeLoadError, DeviceOpenError
from .sources import StreamInfo, VideoSource, open_webcam

logger = logging.getLogger(__name__)

OPEN_FAILURE_MESSAGE = (
    "Unable to open camera. Make sure no other app is using it and permissions are granted."
)


class SessionState(enum.Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class CaptureSession:
    """Owns the open camera, the poll worker and the cascade handle."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        on_status: Optional[Callable[[str], None]] = None,
        on_alert: Optional[Callable[[str], None]] = None,
        opener: Optional[Callable[[int], VideoSource]] = None,
        classifier_factory: Callable[[str], Any] = cv2.CascadeClassifier,
        http_get: Callable[..., Any] = requests.get,
    ):
        """Initialize the session in IDLE state.

        Args:
            config: Application configuration, defaults if None
            on_status: Receives every status string (thread-safe callable)
            on_alert: Blocking user notification for camera open failures
            opener: Opens a device index and returns a source with stream_info();
                    raises DeviceOpenError on failure
            classifier_factory: Builds a cascade classifier from a path
            http_get: HTTP GET used for the default cascade download
        """
        self.config = config or AppConfig()
        self.frames = LatestSlot()
        self.device_index = self.config.capture.device_index
        self.state = SessionState.IDLE
        self.stream_info: Optional[StreamInfo] = None
        self.frames_processed = 0

        self._on_status = on_status
        self._on_alert = on_alert
        self._opener = opener or open_webcam
        self._classifier_factory = classifier_factory
        self._http_get = http_get

        self._source: Optional[VideoSource] = None
        self._worker: Optional[threading.Thread] = None
        self._running = threading.Event()
        self._cascade: Optional[CascadeHandle] = None

        if self.config.cascade_path:
            self.load_cascade(self.config.cascade_path)
        elif self.config.default_cascade_path.is_file():
            self.load_cascade(self.config.default_cascade_path)

    # Status

    def _publish(self, text: str):
        logger.info(text)
        if self._on_status is not None:
            self._on_status(text)

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def worker(self) -> Optional[threading.Thread]:
        return self._worker

    # Cascade

    @property
    def cascade(self) -> Optional[CascadeHandle]:
        return self._cascade

    @property
    def has_cascade(self) -> bool:
        return self._cascade is not None and self._cascade.loaded

    @property
    def cascade_name(self) -> Optional[str]:
        return self._cascade.name if self._cascade is not None else None

    def load_cascade(self, path) -> bool:
        """Validate and load a cascade, replacing the current one on success.

        On failure the previous cascade stays in place.
        """
        try:
            handle = validate_and_load(path, self.config.cascade, self._classifier_factory)
        except CascadeLoadError as e:
            logger.warning(f"Cascade {path} rejected: {type(e).__name__}")
            self._publish(f"Failed to load cascade: {e}")
            return False

        old, self._cascade = self._cascade, handle
        if old is not None:
            old.release()
        self._publish(f"Loaded cascade: {handle.name}")
        return True

    def load_user_cascade(self, path) -> bool:
        """Load a file picked by the user; only .xml files are accepted."""
        if not is_xml_path(path):
            self._publish("Please select a .xml cascade file, not an image.")
            return False
        return self.load_cascade(path)

    def resolve_default_cascade(self) -> bool:
        """Load the default cascade from the base directory, downloading it if needed.

        Returns:
            True if a cascade is loaded or a default file was found and tried,
            False if the caller should ask the user for a file
        """
        if self.has_cascade:
            return True
        target: Path = self.config.default_cascade_path
        fetch_default_cascade(target, self.config.cascade, self._http_get)
        if target.exists():
            self.load_cascade(target)
            return True
        return False

    # Lifecycle

    def start(self) -> bool:
        """Open the selected camera and start the poll worker.

        Returns:
            True if the session is now running
        """
        if self.state is not SessionState.IDLE:
            self._publish("Camera already running")
            return False

        self.state = SessionState.STARTING
        logger.info(f"Starting capture on device {self.device_index}")
        try:
            source = self._opener(self.device_index)
        except DeviceOpenError as e:
            logger.error(f"{e}")
            self.state = SessionState.IDLE
            if self._on_alert is not None:
                self._on_alert(OPEN_FAILURE_MESSAGE)
            self._publish("Camera: not opened")
            return False

        self._source = source
        self.stream_info = source.stream_info()
        self._publish(self.stream_info.summary(self.cascade_name))

        self.frames.clear()
        self.frames_processed = 0
        # Fresh flag per worker: a worker outliving stop() must not see the next start()
        self._running = threading.Event()
        self._running.set()
        self._worker = threading.Thread(
            target=self._poll_loop,
            args=(source, self._running),
            name=f"CaptureWorker-{self.device_index}",
            daemon=True,
        )
        self.state = SessionState.RUNNING
        self._worker.start()
        return True

    def stop(self):
        """Stop the worker, release the camera and clear the pending frame.

        Safe to call when idle.
        """
        if self.state is SessionState.IDLE:
            self._publish("Camera stopped")
            return

        self.state = SessionState.STOPPING
        self._running.clear()

        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=self.config.capture.stop_join_timeout_sec)
            if worker.is_alive():
                logger.warning(
                    f"Capture worker still busy after {self.config.capture.stop_join_timeout_sec}s, "
                    "releasing device anyway"
                )
        self._worker = None

        if self._source is not None:
            self._source.release()
            self._source = None

        self.frames.clear()
        self.stream_info = None
        self.state = SessionState.IDLE
        self._publish("Camera stopped")

    def change_device(self, index: int) -> bool:
        """Select another camera; restarts the capture if it is running.

        Returns:
            True if a restart happened and succeeded
        """
        self.device_index = index
        if not self.is_running:
            logger.info(f"Selected device {index}")
            return False

        logger.info(f"Switching capture to device {index}")
        self.stop()
        time.sleep(self.config.capture.restart_settle_sec)
        return self.start()

    def close(self):
        """Window-close teardown: stop capture and drop the cascade."""
        if self.state is not SessionState.IDLE:
            self.stop()
        if self._cascade is not None:
            self._cascade.release()
            self._cascade = None

    # Worker

    def _poll_loop(self, source: VideoSource, running: threading.Event):
        """Read, detect, publish until this worker's running flag is cleared."""
        backoff = self.config.capture.empty_read_backoff_sec
        logger.info("Capture worker started")
        try:
            while running.is_set():
                ok, frame = source.read()
                if not running.is_set():
                    break
                if not ok or frame is None or frame.size == 0:
                    time.sleep(backoff)
                    continue

                cascade = self._cascade
                result = process_frame(frame, cascade, self.config.detection)
                if result.error is not None:
                    self._publish(f"Face detection error: {result.error}")
                elif result.detected:
                    self._publish(f"Faces: {len(result.faces)} Cascade: {cascade.name}")

                # The backend reuses its buffer on the next read
                self.frames.put(result.image.copy())
                self.frames_processed += 1
        except Exception as e:
            logger.error(f"Capture worker error: {type(e).__name__}: {e}", exc_info=True)
            self._publish(f"Capture error: {e}")
        finally:
            logger.info(f"Capture worker exited after {self.frames_processed} frames")

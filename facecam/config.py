# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Centralized configuration management with constants and dataclasses for cascade validation,
# Haar detection parameters, camera capture settings, and application paths
# Acknowledgements: OpenCV documentation for CascadeClassifier.detectMultiScale defaults and
# VideoCapture backend identifiers

"""Configuration for the face camera viewer.

Module-level constants hold the defaults; the dataclasses group them per subsystem
and validate on construction. ``AppConfig.from_env()`` is the usual entry point.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

# Cascade validation
# Real Haar cascades are hundreds of KB; anything below this is a truncated download.
MIN_CASCADE_BYTES = 1024
CASCADE_SNIFF_BYTES = 8192
HTML_MARKERS = ("<!doctype html", "<html")
XML_DECLARATION_MARKER = "<?xml"
CASCADE_MARKERS = ("opencv_storage", "stages", "cascade")

# Default cascade retrieval
DEFAULT_CASCADE_FILENAME = "haarcascade_frontalface_default.xml"
DEFAULT_CASCADE_URL = (
    "https://raw.githubusercontent.com/opencv/opencv/master/data/haarcascades/"
    "haarcascade_frontalface_default.xml"
)
DOWNLOAD_TIMEOUT_SEC = 10.0

# Haar detection
SCALE_FACTOR = 1.1
MIN_NEIGHBORS = 3
MIN_FACE_SIZE = (30, 30)
BOX_COLOR = (0, 0, 255)  # Red (BGR)
BOX_THICKNESS = 2

# Capture
DEFAULT_DEVICE_INDEX = 0
MAX_PROBE_DEVICES = 6  # Enumerate indices 0..5
RESTART_SETTLE_SEC = 0.2  # Give the backend time to free the device before reopening
STOP_JOIN_TIMEOUT_SEC = 2.0
EMPTY_READ_BACKOFF_SEC = 0.005
FOURCC_PLACEHOLDER = "----"

# UI
WINDOW_TITLE = "OpenCV Face Detector"
UI_REFRESH_MS = 30
SNAPSHOT_DIRNAME = "snapshots"

# Logging
LOG_LEVEL = os.getenv("FACECAM_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class CascadeConfig:
    """Cascade sniffing and default-download settings."""
    min_size_bytes: int = MIN_CASCADE_BYTES
    sniff_bytes: int = CASCADE_SNIFF_BYTES
    default_filename: str = DEFAULT_CASCADE_FILENAME
    default_url: str = DEFAULT_CASCADE_URL
    download_timeout_sec: float = DOWNLOAD_TIMEOUT_SEC
    download_enabled: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.min_size_bytes < 0:
            raise ValueError(f"min_size_bytes must be non-negative, got {self.min_size_bytes}")
        if self.sniff_bytes <= 0:
            raise ValueError(f"sniff_bytes must be positive, got {self.sniff_bytes}")
        if self.download_timeout_sec <= 0:
            raise ValueError(f"download_timeout_sec must be positive, got {self.download_timeout_sec}")


@dataclass
class DetectionConfig:
    """Haar cascade detectMultiScale parameters and overlay style."""
    scale_factor: float = SCALE_FACTOR
    min_neighbors: int = MIN_NEIGHBORS
    min_size: Tuple[int, int] = MIN_FACE_SIZE
    box_color: Tuple[int, int, int] = BOX_COLOR
    box_thickness: int = BOX_THICKNESS

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.scale_factor <= 1.0:
            raise ValueError(f"scale_factor must be > 1.0, got {self.scale_factor}")
        if self.min_neighbors < 0:
            raise ValueError(f"min_neighbors must be non-negative, got {self.min_neighbors}")
        if len(self.min_size) != 2 or min(self.min_size) <= 0:
            raise ValueError(f"min_size must be two positive ints, got {self.min_size}")


@dataclass
class CaptureConfig:
    """Camera selection and worker loop timing."""
    device_index: int = DEFAULT_DEVICE_INDEX
    max_probe_devices: int = MAX_PROBE_DEVICES
    restart_settle_sec: float = RESTART_SETTLE_SEC
    stop_join_timeout_sec: float = STOP_JOIN_TIMEOUT_SEC
    empty_read_backoff_sec: float = EMPTY_READ_BACKOFF_SEC

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.device_index < 0:
            raise ValueError(f"device_index must be non-negative, got {self.device_index}")
        if self.max_probe_devices <= 0:
            raise ValueError(f"max_probe_devices must be positive, got {self.max_probe_devices}")
        if self.restart_settle_sec < 0 or self.empty_read_backoff_sec < 0:
            raise ValueError("Delays must be non-negative")
        if self.stop_join_timeout_sec <= 0:
            raise ValueError(f"stop_join_timeout_sec must be positive, got {self.stop_join_timeout_sec}")


def is_valid_log_level(level) -> bool:
    """True for a level name logging knows (any case), e.g. "debug" or "WARNING"."""
    return isinstance(level, str) and isinstance(logging.getLevelName(level.upper()), int)


@dataclass
class AppConfig:
    """Main application configuration aggregating all subsystems."""
    base_dir: Path = field(default_factory=Path.cwd)
    cascade: CascadeConfig = field(default_factory=CascadeConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    cascade_path: Optional[str] = None  # Explicit cascade to load at startup
    window_title: str = WINDOW_TITLE
    ui_refresh_ms: int = UI_REFRESH_MS
    snapshot_dirname: str = SNAPSHOT_DIRNAME
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        self.validate()

    def validate(self):
        """Check this config and its sub-configs; call again after mutating fields.

        Raises:
            ValueError: on the first invalid field
        """
        self.cascade.validate()
        self.detection.validate()
        self.capture.validate()
        if self.ui_refresh_ms <= 0:
            raise ValueError(f"ui_refresh_ms must be positive, got {self.ui_refresh_ms}")
        if not self.snapshot_dirname:
            raise ValueError("snapshot_dirname must not be empty")
        if not is_valid_log_level(self.log_level):
            raise ValueError(f"log_level must be a logging level name, got {self.log_level!r}")

    @property
    def snapshot_dir(self) -> Path:
        return self.base_dir / self.snapshot_dirname

    @property
    def default_cascade_path(self) -> Path:
        return self.base_dir / self.cascade.default_filename

    @classmethod
    def from_env(cls, **overrides) -> "AppConfig":
        """Create config with environment variable overrides.

        Raises:
            ValueError: if the environment or an override leaves a field invalid
        """
        config = cls()
        if "FACECAM_BASE_DIR" in os.environ:
            config.base_dir = Path(os.environ["FACECAM_BASE_DIR"])
        if "FACECAM_DEVICE" in os.environ:
            config.capture.device_index = int(os.environ["FACECAM_DEVICE"])
        if "FACECAM_CASCADE_URL" in os.environ:
            config.cascade.default_url = os.environ["FACECAM_CASCADE_URL"]
        if "FACECAM_LOG_LEVEL" in os.environ:
            config.log_level = os.environ["FACECAM_LOG_LEVEL"]
        # Apply any passed overrides
        for key, value in overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        config.base_dir = Path(config.base_dir)
        config.validate()
        return config

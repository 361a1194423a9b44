# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Package initialization for facecam - live webcam viewer with Haar cascade face detection
# and snapshot saving
# Acknowledgements: OpenCV for capture and cascade detection, Qt for Python for the desktop window

"""facecam package: show a webcam feed, outline faces, save snapshots.

Modules:
- app: CLI entrypoint
- ui: PySide6 main window
- session: capture state machine and background poll loop
- cascade: cascade file sniffing, loading, default download
- sources: webcam opening with backend fallback, device probe, FOURCC decoding
- detection: per-frame Haar detection and rectangle overlay
- channels: single-slot hand-off between worker and UI
- snapshot: PNG snapshot writer
- config: constants and defaults
- errors: exception hierarchy

The UI module is not imported here so the core works without Qt installed.
"""

__version__ = '1.0.0'

from .cascade import CascadeHandle, validate_and_load
from .config import AppConfig
from .session import CaptureSession, SessionState
from .sources import decode_fourcc, enumerate_devices

__all__ = [
    'AppConfig',
    'CascadeHandle',
    'CaptureSession',
    'SessionState',
    'decode_fourcc',
    'enumerate_devices',
    'validate_and_load',
]

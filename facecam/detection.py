# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Per-frame Haar face detection step with histogram equalization and rectangle overlay,
# returning a result value so a failed frame never stops the capture loop
# Acknowledgements: OpenCV CascadeClassifier.detectMultiScale and equalizeHist documentation

"""Per-frame face detection.

Functions:
- detect_faces(frame, classifier, config) -> list of (x, y, w, h)
- draw_faces(frame, faces, config) -> frame
- process_frame(frame, cascade, config) -> FrameResult
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .cascade import CascadeHandle
from .config import DetectionConfig
from .errors import DetectionError

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]


@dataclass
class FrameResult:
    """Outcome of one poll iteration.

    Attributes:
        image: BGR frame, with rectangles drawn if detection ran and succeeded
        faces: Detected rectangles as (x, y, w, h)
        error: Detection error message, None on success or when no cascade is loaded
        detected: True if a cascade was applied to this frame
    """
    image: np.ndarray
    faces: List[Rect] = field(default_factory=list)
    error: Optional[str] = None
    detected: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def detect_faces(frame: np.ndarray, classifier, config: Optional[DetectionConfig] = None) -> List[Rect]:
    """Run the cascade on an equalized grayscale copy of frame.

    Raises:
        DetectionError: OpenCV (or the classifier) raised
    """
    config = config or DetectionConfig()
    try:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        gray = cv2.equalizeHist(gray)  # Normalize lighting before detection
        faces = classifier.detectMultiScale(
            gray,
            scaleFactor=config.scale_factor,
            minNeighbors=config.min_neighbors,
            flags=cv2.CASCADE_SCALE_IMAGE,
            minSize=tuple(config.min_size),
        )
    except Exception as e:
        raise DetectionError(str(e)) from e
    return [tuple(int(v) for v in rect) for rect in faces]


def draw_faces(frame: np.ndarray, faces: List[Rect], config: Optional[DetectionConfig] = None) -> np.ndarray:
    """Draw rectangle outlines on frame in place."""
    config = config or DetectionConfig()
    for (x, y, w, h) in faces:
        cv2.rectangle(frame, (x, y), (x + w, y + h), config.box_color, config.box_thickness)
    return frame


def process_frame(frame: np.ndarray, cascade: Optional[CascadeHandle],
                  config: Optional[DetectionConfig] = None) -> FrameResult:
    """Detect and annotate one frame.

    A detection failure is captured in the result; the frame is returned
    without rectangles.
    """
    # Local reference: the session may release the handle from the UI thread
    classifier = cascade.classifier if cascade is not None else None
    if classifier is None or classifier.empty():
        return FrameResult(image=frame)

    try:
        faces = detect_faces(frame, classifier, config)
    except DetectionError as e:
        logger.warning(f"Face detection error: {e}")
        return FrameResult(image=frame, error=str(e), detected=True)

    draw_faces(frame, faces, config)
    return FrameResult(image=frame, faces=faces, detected=True)

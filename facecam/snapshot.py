# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Save the currently displayed frame as a timestamped PNG under the snapshots directory
# Acknowledgements: OpenCV imwrite documentation

"""Snapshot saving."""
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import cv2
import numpy as np

from .errors import SnapshotError

logger = logging.getLogger(__name__)


def snapshot_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"snapshot_{now:%Y%m%d_%H%M%S}.png"


def save_snapshot(image: np.ndarray, directory: Path, now: Optional[datetime] = None) -> Path:
    """Write image as PNG into directory (created if missing).

    Raises:
        SnapshotError: directory could not be created or the PNG could not be written
    """
    directory = Path(directory)
    path = directory / snapshot_filename(now)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        ok = cv2.imwrite(str(path), image)
    except (OSError, cv2.error) as e:
        raise SnapshotError(str(e)) from e
    if not ok:
        raise SnapshotError(f"could not write {path}")
    logger.info(f"Snapshot saved to {path}")
    return path


def take_snapshot(image: Optional[np.ndarray], directory: Path,
                  publish: Callable[[str], None]) -> Optional[Path]:
    """Save image and report the outcome through publish. Never raises."""
    if image is None:
        publish("No image to save")
        return None
    try:
        path = save_snapshot(image, directory)
    except SnapshotError as e:
        logger.error(f"Snapshot failed: {e}")
        publish(f"Snapshot error: {e}")
        return None
    publish(f"Snapshot saved: {path}")
    return path

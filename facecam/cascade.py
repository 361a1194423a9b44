# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Haar cascade file validation, classifier construction, and default cascade download
# with a content sniff that rejects HTML pages saved in place of the raw XML
# Acknowledgements: OpenCV CascadeClassifier documentation, OpenCV haarcascades data directory,
# requests documentation for timeouts and HTTP error handling

"""Haar cascade validation and loading.

Users often save the GitHub HTML view of a cascade instead of the raw file. OpenCV
then fails deep inside construction with an unhelpful message, so the file is
sniffed first:

1. size must reach ``min_size_bytes``
2. the first ``sniff_bytes`` must not contain HTML markers
3. they must contain an XML declaration and a cascade marker

Functions:
- check_cascade_header(head, file_size, config) -> None (raises CascadeLoadError)
- sniff_cascade_file(path, config) -> None (raises CascadeLoadError)
- is_likely_valid_cascade(path, config) -> bool
- validate_and_load(path, config, classifier_factory) -> CascadeHandle
- fetch_default_cascade(target, config, http_get) -> bool
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

import cv2
import requests

from .config import CASCADE_MARKERS, HTML_MARKERS, XML_DECLARATION_MARKER, CascadeConfig
from .errors import (
    CascadeConstructionError,
    CascadeFileNotFoundError,
    CascadeLoadError,
    CascadeLooksLikeHtmlError,
    CascadeTooSmallError,
    EmptyClassifierError,
    MissingCascadeMarkersError,
    NetworkFetchError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass
class CascadeHandle:
    """Loaded Haar classifier and the file it came from.

    Attributes:
        path: Source XML file
        classifier: cv2.CascadeClassifier (or compatible), None once released
    """
    path: Path
    classifier: Any = None

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def loaded(self) -> bool:
        return self.classifier is not None and not self.classifier.empty()

    def release(self):
        """Drop the native classifier so OpenCV can free it."""
        if self.classifier is not None:
            logger.debug(f"Released cascade {self.name}")
        self.classifier = None


def check_cascade_header(head: bytes, file_size: int, config: Optional[CascadeConfig] = None):
    """Apply the cascade heuristic to a file prefix.

    Args:
        head: First bytes of the file (at most config.sniff_bytes are inspected)
        file_size: Total size of the file in bytes
        config: Thresholds, defaults if None

    Raises:
        CascadeTooSmallError, CascadeLooksLikeHtmlError, MissingCascadeMarkersError
    """
    config = config or CascadeConfig()
    if file_size < config.min_size_bytes:
        raise CascadeTooSmallError(file_size, config.min_size_bytes)

    text = head[:config.sniff_bytes].decode("utf-8", errors="replace").lower()
    if any(marker in text for marker in HTML_MARKERS):
        raise CascadeLooksLikeHtmlError()

    has_xml_decl = XML_DECLARATION_MARKER in text
    has_cascade_tags = any(marker in text for marker in CASCADE_MARKERS)
    if not (has_xml_decl and has_cascade_tags):
        raise MissingCascadeMarkersError()


def sniff_cascade_file(path: PathLike, config: Optional[CascadeConfig] = None):
    """Run check_cascade_header on a file on disk."""
    config = config or CascadeConfig()
    path = Path(path)
    if not path.is_file():
        raise CascadeFileNotFoundError(path)
    try:
        file_size = path.stat().st_size
        with open(path, "rb") as f:
            head = f.read(config.sniff_bytes)
    except OSError as e:
        raise CascadeLoadError(f"unable to read file: {e}") from e
    check_cascade_header(head, file_size, config)


def is_likely_valid_cascade(path: PathLike, config: Optional[CascadeConfig] = None) -> bool:
    """Boolean form of sniff_cascade_file."""
    try:
        sniff_cascade_file(path, config)
    except CascadeLoadError as e:
        logger.debug(f"{path} rejected: {e}")
        return False
    return True


def is_xml_path(path: PathLike) -> bool:
    """True if the file has a .xml extension (case-insensitive)."""
    return Path(path).suffix.lower() == ".xml"


def validate_and_load(
    path: PathLike,
    config: Optional[CascadeConfig] = None,
    classifier_factory: Callable[[str], Any] = cv2.CascadeClassifier,
) -> CascadeHandle:
    """Sniff a cascade file and construct the classifier.

    Args:
        path: Cascade XML file
        config: Sniff thresholds
        classifier_factory: Builds a classifier from a path string

    Returns:
        CascadeHandle with a non-empty classifier

    Raises:
        CascadeLoadError subclass describing why the file was rejected
    """
    path = Path(path)
    sniff_cascade_file(path, config)

    try:
        classifier = classifier_factory(str(path))
    except Exception as e:
        raise CascadeConstructionError(str(e)) from e

    if classifier.empty():
        raise EmptyClassifierError()

    logger.info(f"Constructed cascade classifier from {path}")
    return CascadeHandle(path=path, classifier=classifier)


def _download(url: str, target: Path, timeout: float, http_get: Callable[..., Any]):
    """Download url into target through a temporary .part file."""
    tmp = target.with_name(target.name + ".part")
    try:
        response = http_get(url, timeout=timeout)
        response.raise_for_status()
        with open(tmp, "wb") as f:
            f.write(response.content)
        os.replace(tmp, target)
    except (requests.RequestException, OSError) as e:
        if tmp.exists():
            tmp.unlink()
        raise NetworkFetchError(f"Failed to download {url}: {e}") from e


def fetch_default_cascade(
    target: PathLike,
    config: Optional[CascadeConfig] = None,
    http_get: Callable[..., Any] = requests.get,
) -> bool:
    """Make sure a usable default cascade exists at target.

    Downloads config.default_url when the file is missing or fails the sniff.
    A download that does not pass the sniff is deleted. Failures are logged only;
    the caller falls back to asking the user for a file.

    Returns:
        True if target holds a file that passes the sniff
    """
    config = config or CascadeConfig()
    target = Path(target)
    if target.exists() and is_likely_valid_cascade(target, config):
        return True
    if not config.download_enabled:
        logger.info("Default cascade download disabled")
        return False

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading default cascade from {config.default_url}")
        _download(config.default_url, target, config.download_timeout_sec, http_get)
    except (NetworkFetchError, OSError) as e:
        logger.warning(f"Default cascade unavailable: {e}")
        return False

    if not is_likely_valid_cascade(target, config):
        logger.warning(f"Downloaded file {target} is not a cascade, removing it")
        try:
            target.unlink()
        except OSError as e:
            logger.warning(f"Could not remove {target}: {e}")
        return False

    logger.info(f"Default cascade saved to {target}")
    return True

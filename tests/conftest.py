# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Shared pytest fixtures and hardware-free fakes for captures, classifiers and HTTP responses
# Acknowledgements: pytest fixtures documentation

"""Fakes standing in for cv2.VideoCapture, cv2.CascadeClassifier and requests."""
import threading
import time

import numpy as np
import pytest
import requests

from facecam.config import AppConfig, CaptureConfig
from facecam.errors import DeviceOpenError
from facecam.sources import Backend, StreamInfo

CASCADE_XML = (
    b'<?xml version="1.0"?>\n<opencv_storage>\n<cascade type_id="opencv-cascade-classifier">\n'
    b'  <stageType>BOOST</stageType>\n  <stages>\n'
)


def make_cascade_bytes(size: int = 2048, head: bytes = CASCADE_XML) -> bytes:
    return head + b" " * max(0, size - len(head))


@pytest.fixture
def cascade_file(tmp_path):
    path = tmp_path / "faces.xml"
    path.write_bytes(make_cascade_bytes())
    return path


class FakeClassifier:
    def __init__(self, path="", faces=((2, 2, 8, 8),), empty=False, error=None):
        self.path = path
        self.faces = faces
        self._empty = empty
        self.error = error
        self.calls = []

    def empty(self):
        return self._empty

    def detectMultiScale(self, gray, **kwargs):
        self.calls.append((gray, kwargs))
        if self.error is not None:
            raise self.error
        return np.array(self.faces, dtype=np.int32).reshape(-1, 4)


class FakeCapture:
    """cv2.VideoCapture look-alike."""

    def __init__(self, opened=True, props=None):
        self.opened = opened
        self.props = props or {}
        self.released = False

    def isOpened(self):
        return self.opened

    def get(self, prop):
        return self.props.get(prop, 0.0)

    def read(self):
        return (False, None)

    def release(self):
        self.released = True


class FakeSource:
    """Opened webcam source returning the same buffer on every read."""

    def __init__(self, device=0, ok=True):
        self.device = device
        self.ok = ok
        self.buffer = np.zeros((32, 32, 3), dtype=np.uint8)
        self.released = False
        self.reads = 0

    def read(self):
        time.sleep(0.002)
        self.reads += 1
        if not self.ok:
            return (False, None)
        return (True, self.buffer)

    def stream_info(self):
        return StreamInfo(backend=Backend.DEFAULT, width=32, height=32, fps=30.0, fourcc="MJPG")

    def release(self):
        self.released = True


class BlockingSource(FakeSource):
    """First read blocks until release_read() is called, like a stuck driver."""

    def __init__(self, device=0):
        super().__init__(device)
        self.in_read = threading.Event()
        self.gate = threading.Event()

    def read(self):
        self.in_read.set()
        self.gate.wait(timeout=5.0)
        return super().read()

    def release_read(self):
        self.gate.set()


class FakeOpener:
    """Session opener handing out FakeSource (or a per-index override)."""

    def __init__(self, fail=False, sources=None):
        self.fail = fail
        self.overrides = dict(sources or {})
        self.sources = []

    def __call__(self, index):
        if self.fail:
            raise DeviceOpenError(index)
        source = self.overrides.pop(index, None) or FakeSource(index)
        self.sources.append(source)
        return source


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        base_dir=tmp_path,
        capture=CaptureConfig(restart_settle_sec=0.0, stop_join_timeout_sec=2.0),
    )


def wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def capture_workers():
    return [t for t in threading.enumerate() if t.name.startswith("CaptureWorker") and t.is_alive()]

# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Tests for FOURCC decoding, backend fallback, stream properties and device probing
# Acknowledgements: pytest documentation

import cv2
import pytest

from facecam.errors import DeviceOpenError
from facecam.sources import (
    Backend,
    StreamInfo,
    WebcamSource,
    decode_fourcc,
    enumerate_devices,
    fallback_api,
    open_webcam,
)

from conftest import FakeCapture


def test_decode_fourcc_little_endian():
    assert decode_fourcc(0x30325056) == "VP20"
    assert decode_fourcc(float(0x47504A4D)) == "MJPG"


@pytest.mark.parametrize("value", [0, None, "abc", float("nan"), float("inf"), 0x0A0A0A0A])
def test_decode_fourcc_placeholder(value):
    assert decode_fourcc(value) == "----"


def test_fallback_api_per_platform():
    assert fallback_api("win32") == cv2.CAP_DSHOW
    assert fallback_api("darwin") == cv2.CAP_AVFOUNDATION
    assert fallback_api("linux") == cv2.CAP_V4L2


class CaptureFactory:
    """Opens only when called with the given argument shapes."""

    def __init__(self, open_default=True, open_fallback=True):
        self.open_default = open_default
        self.open_fallback = open_fallback
        self.created = []

    def __call__(self, device, *api):
        cap = FakeCapture(opened=self.open_fallback if api else self.open_default)
        self.created.append((device, api, cap))
        return cap


def test_open_webcam_default_backend():
    factory = CaptureFactory()
    source = open_webcam(2, capture_factory=factory, platform="linux")
    assert source.backend is Backend.DEFAULT
    assert source.device == 2
    assert len(factory.created) == 1


def test_open_webcam_falls_back_and_releases_first_attempt():
    factory = CaptureFactory(open_default=False)
    source = open_webcam(1, capture_factory=factory, platform="win32")
    assert source.backend is Backend.FALLBACK
    (_, api0, first), (_, api1, second) = factory.created
    assert api0 == ()
    assert api1 == (cv2.CAP_DSHOW,)
    assert first.released
    assert source.cap is second


def test_open_webcam_both_backends_fail():
    factory = CaptureFactory(open_default=False, open_fallback=False)
    with pytest.raises(DeviceOpenError) as exc:
        open_webcam(4, capture_factory=factory)
    assert exc.value.device_index == 4
    assert all(cap.released for _, _, cap in factory.created)


def test_stream_info_and_summary():
    cap = FakeCapture(props={
        cv2.CAP_PROP_FRAME_WIDTH: 640.0,
        cv2.CAP_PROP_FRAME_HEIGHT: 480.0,
        cv2.CAP_PROP_FPS: 30.0,
        cv2.CAP_PROP_FOURCC: float(0x47504A4D),
    })
    info = WebcamSource(cap, 0, Backend.FALLBACK).stream_info()
    assert info == StreamInfo(Backend.FALLBACK, 640, 480, 30.0, "MJPG")
    assert info.summary() == "Backend: Fallback Resolution: 640x480 FPS: 30 FOURCC: MJPG Cascade: not loaded"
    assert info.summary("faces.xml").endswith("Cascade: faces.xml")


def test_release_is_idempotent_and_read_after_release_is_empty():
    cap = FakeCapture()
    source = WebcamSource(cap, 0, Backend.DEFAULT)
    source.release()
    source.release()
    assert cap.released
    assert source.read() == (False, None)


def test_enumerate_devices_lists_opened_indices():
    caps = []

    def factory(index):
        cap = FakeCapture(opened=index in (1, 3))
        caps.append(cap)
        return cap

    assert enumerate_devices(6, capture_factory=factory) == [(1, "Camera 1"), (3, "Camera 3")]
    assert len(caps) == 6
    assert all(cap.released for cap in caps)


def test_enumerate_devices_falls_back_to_camera0():
    assert enumerate_devices(6, capture_factory=lambda i: FakeCapture(opened=False)) == [(0, "Camera0")]


def test_enumerate_devices_skips_probe_errors():
    def factory(index):
        if index == 0:
            raise cv2.error("backend exploded")
        return FakeCapture(opened=True)

    assert enumerate_devices(2, capture_factory=factory) == [(1, "Camera 1")]

# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Tests for the per-frame detection step and its failure handling
# Acknowledgements: pytest documentation

from pathlib import Path

import numpy as np
import pytest

from facecam.cascade import CascadeHandle
from facecam.config import DetectionConfig
from facecam.detection import detect_faces, draw_faces, process_frame
from facecam.errors import DetectionError

from conftest import FakeClassifier

RED = [0, 0, 255]


def blank_frame():
    return np.zeros((40, 40, 3), dtype=np.uint8)


def test_detect_uses_equalized_gray_and_fixed_parameters():
    classifier = FakeClassifier()
    faces = detect_faces(blank_frame(), classifier)
    assert faces == [(2, 2, 8, 8)]
    gray, kwargs = classifier.calls[0]
    assert gray.ndim == 2
    assert kwargs["scaleFactor"] == 1.1
    assert kwargs["minNeighbors"] == 3
    assert kwargs["minSize"] == (30, 30)


def test_detect_wraps_classifier_errors():
    with pytest.raises(DetectionError, match="boom"):
        detect_faces(blank_frame(), FakeClassifier(error=RuntimeError("boom")))


def test_draw_faces_outlines_in_red():
    frame = draw_faces(blank_frame(), [(5, 5, 10, 10)])
    assert list(frame[5, 10]) == RED
    assert list(frame[10, 10]) == [0, 0, 0]  # Inside stays untouched


def test_draw_faces_custom_color():
    frame = draw_faces(blank_frame(), [(5, 5, 10, 10)], DetectionConfig(box_color=(0, 255, 0)))
    assert list(frame[5, 10]) == [0, 255, 0]


def test_process_frame_without_cascade_passes_through():
    frame = blank_frame()
    result = process_frame(frame, None)
    assert result.image is frame
    assert result.faces == []
    assert result.ok
    assert not result.detected


def test_process_frame_with_released_cascade_passes_through():
    handle = CascadeHandle(Path("faces.xml"), FakeClassifier())
    handle.release()
    assert not process_frame(blank_frame(), handle).detected


def test_process_frame_draws_detections():
    handle = CascadeHandle(Path("faces.xml"), FakeClassifier(faces=[(2, 2, 8, 8), (20, 20, 10, 10)]))
    result = process_frame(blank_frame(), handle)
    assert result.detected and result.ok
    assert len(result.faces) == 2
    assert list(result.image[2, 5]) == RED


def test_process_frame_error_skips_drawing_but_keeps_frame():
    frame = blank_frame()
    handle = CascadeHandle(Path("faces.xml"), FakeClassifier(error=RuntimeError("bad stage")))
    result = process_frame(frame, handle)
    assert not result.ok
    assert result.error == "bad stage"
    assert result.image is frame
    assert not frame.any()

# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: PySide6 main window wiring camera selection, start/stop, cascade loading and snapshots
# to the capture session, draining its frame and status channels on a UI timer
# Acknowledgements: Qt for Python documentation for QImage/QPixmap conversion and QTimer polling

"""Desktop window for the face camera viewer.

The window never touches the camera directly. The capture session's worker puts
frames and status text into single-slot channels; a QTimer on the UI thread
takes whatever is newest and paints it.
"""
import logging
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np
from PySide6 import QtCore, QtGui, QtWidgets

from .channels import LatestSlot
from .config import AppConfig
from .session import CaptureSession
from .snapshot import take_snapshot
from .sources import enumerate_devices

logger = logging.getLogger(__name__)

CASCADE_FILTER = "Cascade XML (*.xml)"


def bgr_to_qimage(frame_bgr: np.ndarray) -> QtGui.QImage:
    """Convert a BGR frame to a QImage that owns its pixels."""
    h, w = frame_bgr.shape[:2]
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    return QtGui.QImage(rgb.data, w, h, rgb.strides[0], QtGui.QImage.Format.Format_RGB888).copy()


class VideoView(QtWidgets.QLabel):
    """Black label that scales the current frame to fit, keeping aspect ratio."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(640, 480)
        self.setStyleSheet('background:#000;')
        self.setAlignment(QtCore.Qt.AlignCenter)
        self._pixmap: Optional[QtGui.QPixmap] = None

    def set_frame(self, qimage: QtGui.QImage):
        self._pixmap = QtGui.QPixmap.fromImage(qimage)
        self._rescale()

    def clear_frame(self):
        self._pixmap = None
        self.clear()

    def resizeEvent(self, ev: QtGui.QResizeEvent):
        super().resizeEvent(ev)
        self._rescale()

    def _rescale(self):
        if self._pixmap is None:
            return
        self.setPixmap(self._pixmap.scaled(
            self.size(), QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation))


class MainWindow(QtWidgets.QWidget):
    """Camera viewer with Start, Stop, Load Cascade and Snapshot controls."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        parent=None,
        session_factory: Callable[..., CaptureSession] = CaptureSession,
        device_probe: Callable[[int], List[Tuple[int, str]]] = enumerate_devices,
    ):
        """Build the widgets and the capture session.

        Args:
            config: Application configuration, defaults if None
            parent: Parent widget
            session_factory: Called as session_factory(config, on_status=..., on_alert=...)
            device_probe: Returns (device index, label) pairs for the camera combo
        """
        super().__init__(parent)
        self.config = config or AppConfig()
        self._device_probe = device_probe
        self.setWindowTitle(self.config.window_title)

        self.status = LatestSlot()
        self._displayed: Optional[np.ndarray] = None  # Frame currently on screen

        self.view = VideoView(self)
        self.cmb_cameras = QtWidgets.QComboBox(self)
        self.btn_start = QtWidgets.QPushButton('Start', self)
        self.btn_stop = QtWidgets.QPushButton('Stop', self)
        self.btn_load = QtWidgets.QPushButton('Load Cascade', self)
        self.btn_snapshot = QtWidgets.QPushButton('Snapshot', self)
        self.lbl_info = QtWidgets.QLabel('Camera info: -', self)
        self.lbl_info.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)

        controls = QtWidgets.QHBoxLayout()
        for w in (self.cmb_cameras, self.btn_start, self.btn_stop, self.btn_load, self.btn_snapshot):
            controls.addWidget(w)
        controls.addStretch(1)
        layout = QtWidgets.QVBoxLayout(self)
        layout.addWidget(self.view, 1)
        layout.addLayout(controls)
        layout.addWidget(self.lbl_info)

        self.session = session_factory(self.config, on_status=self._publish, on_alert=self._alert)

        self._populate_cameras()
        self.cmb_cameras.currentIndexChanged.connect(self._on_camera_changed)
        self.btn_start.clicked.connect(self._on_start)
        self.btn_stop.clicked.connect(self._on_stop)
        self.btn_load.clicked.connect(self._on_load_cascade)
        self.btn_snapshot.clicked.connect(self._on_snapshot)
        self._sync_buttons()

        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self._drain)
        self._timer.start(self.config.ui_refresh_ms)

    def _populate_cameras(self):
        self.cmb_cameras.blockSignals(True)
        self.cmb_cameras.clear()
        for index, label in self._device_probe(self.config.capture.max_probe_devices):
            self.cmb_cameras.addItem(label, index)
        preferred = self.cmb_cameras.findData(self.session.device_index)
        self.cmb_cameras.setCurrentIndex(preferred if preferred >= 0 else 0)
        self.session.device_index = self.cmb_cameras.currentData()
        self.cmb_cameras.blockSignals(False)

    def _drain(self):
        """Paint the newest frame and status published since the last tick."""
        frame = self.session.frames.take()
        if frame is not None and self.session.is_running:
            self._displayed = frame
            self.view.set_frame(bgr_to_qimage(frame))
        text = self.status.take()
        if text is not None:
            self.lbl_info.setText(text)

    def _publish(self, text: str):
        self.status.put(text)

    def _sync_buttons(self):
        running = self.session.is_running
        self.btn_start.setEnabled(not running)
        self.btn_stop.setEnabled(running)

    def _alert(self, message: str):
        QtWidgets.QMessageBox.warning(self, self.config.window_title, message)

    def _pick_cascade(self, title: str) -> Optional[str]:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, title, str(self.config.base_dir), CASCADE_FILTER)
        return path or None

    def _on_start(self):
        if not self.session.is_running and not self.session.resolve_default_cascade():
            path = self._pick_cascade('Select Haar Cascade (optional)')
            if path:
                self.session.load_user_cascade(path)
            else:
                self._publish('Proceeding without cascade (video only).')
        self.session.start()
        self._sync_buttons()

    def _clear_view(self):
        self._displayed = None
        self.view.clear_frame()

    def _on_stop(self):
        self.session.stop()
        self._clear_view()
        self._sync_buttons()

    def _on_camera_changed(self, combo_index: int):
        index = self.cmb_cameras.itemData(combo_index)
        if index is None:
            return
        if self.session.is_running:
            self._clear_view()
        self.session.change_device(int(index))
        self._sync_buttons()

    def _on_load_cascade(self):
        path = self._pick_cascade('Select Haar Cascade XML file (e.g. haarcascade_frontalface_default.xml)')
        if path:
            self.session.load_user_cascade(path)

    def _on_snapshot(self):
        take_snapshot(self._displayed, self.config.snapshot_dir, self._publish)

    def closeEvent(self, e: QtGui.QCloseEvent) -> None:
        self._timer.stop()
        self.session.close()
        super().closeEvent(e)

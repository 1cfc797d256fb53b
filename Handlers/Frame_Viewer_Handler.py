"""Frame Viewer Handler — a Qt window that shows the input and the magnified
output side by side.

The display stage writes into a QueueDisplaySink from its own thread; the
window polls that sink's bounded queue on the Qt thread every
``poll_interval_ms`` and closes itself once the sink is closed.

Enable with ``--display qt``.
"""
import numpy as np
from queue import Queue, Empty, Full
from typing import Dict, Optional, Tuple

from PyQt6.QtWidgets import QMainWindow, QLabel, QHBoxLayout, QWidget
from PyQt6.QtCore import QTimer, Qt
from PyQt6.QtGui import QImage, QPixmap

from utils.constants import DEFAULT_POLL_INTERVAL_MS, INPUT_WINDOW_LABEL, OUTPUT_WINDOW_LABEL
from utils.logger import Logger

_CLOSED = None


class QueueDisplaySink:
    """DisplaySink that forwards (label, frame) pairs to the Qt thread."""

    def __init__(self, maxsize: int = 4):
        self.queue: Queue = Queue(maxsize=maxsize)

    def show(self, label: str, frame: np.ndarray) -> None:
        try:
            self.queue.put_nowait((label, frame))
        except Full:
            pass  # Viewer is behind — drop

    def poll_events(self, timeout_ms: int) -> None:
        """The Qt event loop runs on the main thread; nothing to pump here."""

    def close(self) -> None:
        while True:
            try:
                self.queue.put_nowait(_CLOSED)
                return
            except Full:
                try:
                    self.queue.get_nowait()  # Make room for the close marker
                except Empty:
                    pass


class FrameViewerHandler(QMainWindow):
    """Side-by-side viewer window.

    Must be created after the QApplication exists.
    """

    def __init__(
        self,
        sink: QueueDisplaySink,
        title: str = "Eulerian Video Magnification",
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ):
        super().__init__()
        self.sink = sink
        self.logger = Logger("FrameViewer")

        # ── Window chrome ────────────────────────────────────────────
        self.setWindowTitle(title)
        self.setMinimumSize(640, 240)
        self.resize(1280, 480)

        # ── One image label per stream ───────────────────────────────
        self.labels: Dict[str, QLabel] = {}
        central = QWidget()
        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        for name in (INPUT_WINDOW_LABEL, OUTPUT_WINDOW_LABEL):
            label = QLabel(f"{name}: waiting for frames …")
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            label.setStyleSheet("background: #111; color: #888; font-size: 16px;")
            layout.addWidget(label)
            self.labels[name] = label
        self.setCentralWidget(central)

        # ── Poll timer ───────────────────────────────────────────────
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._poll_queue)
        self._timer.start(poll_interval_ms)

        self.logger.info("Frame viewer window created")

    # ── Internal ─────────────────────────────────────────────────────

    def _poll_queue(self) -> None:
        """Drain the queue and display only the latest frame per label."""
        latest: Dict[str, np.ndarray] = {}
        while True:
            try:
                item: Optional[Tuple[str, np.ndarray]] = self.sink.queue.get_nowait()
            except Empty:
                break
            if item is _CLOSED:
                self.logger.info("Stream finished — closing viewer")
                self.stop()
                return
            label, frame = item
            latest[label] = frame

        for label, frame in latest.items():
            if label in self.labels:
                self._display_frame(self.labels[label], frame)

    def _display_frame(self, target: QLabel, frame: np.ndarray) -> None:
        """Convert a BGR numpy frame to QPixmap and set it on the label."""
        h, w, ch = frame.shape
        # OpenCV uses BGR — Qt needs RGB
        rgb = np.ascontiguousarray(frame[..., ::-1])
        q_img = QImage(rgb.data, w, h, ch * w, QImage.Format.Format_RGB888)
        pixmap = QPixmap.fromImage(q_img)

        # Scale to label size, preserving aspect ratio
        scaled = pixmap.scaled(
            target.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        target.setPixmap(scaled)

    # ── Lifecycle ────────────────────────────────────────────────────

    def stop(self) -> None:
        """Stop the polling timer and close the window."""
        self._timer.stop()
        self.close()

"""
Display Handler - Display sinks rendered from the display stage thread.

OpenCVDisplaySink opens one HighGUI window per label; NullDisplaySink keeps
the latest frame per label without opening anything (headless runs, tests).
"""
import cv2
import numpy as np
from typing import Dict

from utils.failures import DisplayError
from utils.logger import Logger


class OpenCVDisplaySink:
    """Renders frames with cv2.imshow and pumps the HighGUI event loop."""

    def __init__(self):
        self.logger = Logger("OpenCVDisplay")
        self._windows = set()

    def show(self, label: str, frame: np.ndarray) -> None:
        try:
            cv2.imshow(label, frame)
        except cv2.error as e:
            raise DisplayError(f"Cannot show window '{label}': {e}", critical=True) from e
        if label not in self._windows:
            self._windows.add(label)
            self.logger.info(f"Opened window '{label}'")

    def poll_events(self, timeout_ms: int) -> None:
        cv2.waitKey(max(int(timeout_ms), 1))

    def close(self) -> None:
        if self._windows:
            cv2.destroyAllWindows()
            self._windows.clear()


class NullDisplaySink:
    """Headless sink: counts frames and keeps the latest one per label."""

    def __init__(self):
        self.latest: Dict[str, np.ndarray] = {}
        self.shown: Dict[str, int] = {}
        self.polls = 0
        self.closed = False

    def show(self, label: str, frame: np.ndarray) -> None:
        self.latest[label] = frame
        self.shown[label] = self.shown.get(label, 0) + 1

    def poll_events(self, timeout_ms: int) -> None:
        self.polls += 1

    def close(self) -> None:
        self.closed = True

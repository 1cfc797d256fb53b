"""Video Input Handler - Reads frames from a video file, stream URL or camera.

Implements the FrameSource protocol. A purely numeric identifier is taken as
a camera index, anything else is handed to OpenCV as a path or URL.
"""
import cv2
import numpy as np
from typing import Optional, Tuple, Union
from utils.logger import Logger


class VideoInputHandler:
    """Handles video input through cv2.VideoCapture.

    Implements the FrameSource protocol:
        start() -> bool
        read_frame() -> Optional[np.ndarray]
        frame_size -> (width, height)
        stop() -> None
    """

    def __init__(self, identifier: str):
        """
        Initialize the video input handler.

        Args:
            identifier: Video file path, stream URL, or camera index ("0").
        """
        self.identifier = identifier
        self.logger = Logger("VideoInputHandler")
        self.cap: Optional[cv2.VideoCapture] = None
        self.width = 0
        self.height = 0
        self.fps = 0.0

    def __repr__(self) -> str:
        return f"VideoInputHandler({self.identifier!r})"

    @property
    def target(self) -> Union[int, str]:
        """What cv2.VideoCapture is opened with."""
        return int(self.identifier) if self.identifier.isdigit() else self.identifier

    @property
    def frame_size(self) -> Tuple[int, int]:
        return self.width, self.height

    # ── FrameSource protocol ──────────────────────────────────────────

    def start(self) -> bool:
        """Open the video source for reading."""
        if not self.identifier:
            self.logger.error("No video source given")
            return False

        self.cap = cv2.VideoCapture(self.target)
        if not self.cap.isOpened():
            self.logger.error(f"Failed to open video source: {self.identifier}")
            self.cap = None
            return False

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = float(self.cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self.logger.info(
            f"Video source opened: {self.identifier} "
            f"({self.width}x{self.height} @ {self.fps:.1f} fps)"
        )
        return True

    def read_frame(self) -> Optional[np.ndarray]:
        """Read the next BGR frame, or None at end of stream."""
        if self.cap is None:
            return None

        ret, frame = self.cap.read()
        if not ret:
            return None

        return frame

    def stop(self) -> None:
        """Release the video capture resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            self.logger.info("Video capture released")

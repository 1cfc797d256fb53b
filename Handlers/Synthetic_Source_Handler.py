"""Synthetic Source Handler - Generates a constant-color video with a small
periodic brightness oscillation on a square patch.

Implements the FrameSource protocol. Used by the test-suite and by the
``--synthetic`` demo flag when no camera or video file is at hand.
"""
import math
import numpy as np
from typing import Optional, Tuple
from utils.logger import Logger


class SyntheticSourceHandler:
    """Deterministic oscillating test pattern."""

    def __init__(
        self,
        width: int = 64,
        height: int = 64,
        frames: int = 5,
        base_color: Tuple[int, int, int] = (96, 128, 160),
        amplitude: float = 1.0,
        period: float = 4.0,
        patch: int = 8,
    ):
        """
        Args:
            width: Frame width in pixels.
            height: Frame height in pixels.
            frames: Number of frames before end of stream.
            base_color: BGR background color.
            amplitude: Peak brightness offset of the patch, in 8-bit steps.
            period: Oscillation period in frames.
            patch: Side of the centered oscillating square, in pixels.
        """
        self.width = width
        self.height = height
        self.frames = frames
        self.base_color = base_color
        self.amplitude = amplitude
        self.period = period
        self.patch = patch
        self.current_frame = 0
        self.started = False
        self.logger = Logger("SyntheticSource")

    def __repr__(self) -> str:
        return f"SyntheticSourceHandler({self.width}x{self.height}, {self.frames} frames)"

    @property
    def frame_size(self) -> Tuple[int, int]:
        return self.width, self.height

    def offset(self, index: int) -> float:
        """Brightness offset of the patch in frame ``index``."""
        return self.amplitude * math.sin(2.0 * math.pi * index / self.period)

    def start(self) -> bool:
        self.current_frame = 0
        self.started = True
        self.logger.info(f"Synthetic source: {self.width}x{self.height}, {self.frames} frames")
        return True

    def read_frame(self) -> Optional[np.ndarray]:
        """Generate the next frame as float32 BGR in [0, 1]."""
        if not self.started or self.current_frame >= self.frames:
            return None

        frame = np.empty((self.height, self.width, 3), dtype=np.float32)
        frame[:] = np.array(self.base_color, dtype=np.float32) / 255.0

        top = (self.height - self.patch) // 2
        left = (self.width - self.patch) // 2
        frame[top:top + self.patch, left:left + self.patch] += self.offset(self.current_frame) / 255.0

        self.current_frame += 1
        return frame

    def stop(self) -> None:
        self.started = False

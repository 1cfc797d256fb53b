"""
Protocol definitions (interfaces) for the magnifier.

These define the contracts that source and display adapters must implement,
so stages can be driven by a camera, a file, a synthetic generator, an
OpenCV window, a Qt window or a headless recorder.
"""
from typing import Protocol, Optional, Tuple, runtime_checkable
import numpy as np


@runtime_checkable
class FrameSource(Protocol):
    """Interface for any frame-producing component (camera, video file, etc.)."""

    def start(self) -> bool:
        """Open the source. Returns True on success."""
        ...

    def read_frame(self) -> Optional[np.ndarray]:
        """
        Read the next frame.

        Returns:
            A BGR frame, either uint8 (cameras, video files) or float32
            scaled to [0, 1] (generated sources); None at end of stream.
        """
        ...

    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) of the frames this source produces."""
        ...

    def stop(self) -> None:
        """Release resources."""
        ...


@runtime_checkable
class DisplaySink(Protocol):
    """Interface for anything that can render labelled BGR frames."""

    def show(self, label: str, frame: np.ndarray) -> None:
        """Render a BGR uint8 frame under ``label``."""
        ...

    def poll_events(self, timeout_ms: int) -> None:
        """Give the UI a chance to process events (called once per result pair)."""
        ...

    def close(self) -> None:
        """Tear down any windows."""
        ...

"""
Capture Stage — reads frames from a FrameSource, converts them to the Lab
working representation, decomposes them into pyramids and pushes those into
the pyramid queue.

Runs in its own thread. Exhausting the source signals done on the output
queue, which is how shutdown starts in the normal case.
"""
import time
import cv2
from threading import Event

from core.bus import EventBus
from core.colorspace import to_working
from core.events import Pyramid
from core.pipeline_queue import PipelineQueue
from core.protocols import FrameSource
from core.pyramid import decompose
from core.stages.base import PipelineStage
from utils.failures import FrameProcessingError, SourceOpenError


class CaptureStage(PipelineStage):
    """
    Pipeline Stage 0: frame acquisition and spatial decomposition.
    """

    def __init__(
        self,
        source: FrameSource,
        out_queue: PipelineQueue,
        bus: EventBus,
        stop_event: Event,
        levels: int,
        fps: float = 0.0,
    ):
        """
        Args:
            source: Any object implementing the FrameSource protocol.
            out_queue: Queue of Pyramid messages for the magnify stage.
            bus: Control-plane event bus (failures, completion).
            stop_event: Shared threading.Event — set to request shutdown.
            levels: Number of pyramid detail bands.
            fps: Pace the loop to this rate; 0 reads as fast as the source allows.
        """
        super().__init__("CaptureStage", bus, stop_event)
        self.source = source
        self.out_queue = out_queue
        self.levels = levels
        self.fps = fps

    def _loop(self) -> None:
        try:
            if not self.source.start():
                raise SourceOpenError(f"Could not open video source: {self.source}")

            width, height = self.source.frame_size
            self.logger.info(f"Source opened ({width}x{height}), {self.levels} pyramid level(s)")
            frame_interval = 1.0 / self.fps if self.fps > 0 else 0.0

            while not self.stop_event.is_set():
                loop_start = time.monotonic()

                raw_frame = self.source.read_frame()
                if raw_frame is None:
                    self.logger.info("Video source exhausted")
                    break

                if raw_frame.size == 0:
                    raise FrameProcessingError("Source returned an empty frame", self.processed)

                try:
                    bands = decompose(to_working(raw_frame), self.levels)
                except cv2.error as e:
                    raise FrameProcessingError(
                        f"Cannot decompose frame {self.processed}: {e}", self.processed
                    ) from e

                pyramid = Pyramid(index=self.processed, bands=bands)
                if not self.out_queue.push(pyramid):
                    break  # Pipeline aborted downstream
                self.processed += 1

                if frame_interval:
                    sleep_time = frame_interval - (time.monotonic() - loop_start)
                    if sleep_time > 0:
                        time.sleep(sleep_time)
        finally:
            self.out_queue.signal_done()
            self.source.stop()

"""
Magnify Stage — pulls pyramids, runs the per-level temporal filter and
amplification in parallel, reconstructs the motion image, composites it on
the original frame and pushes the result pair to the display queue.

Runs in its own thread; the per-level work runs on the Magnifier's pool.
"""
from threading import Event

from core.bus import EventBus
from core.events import FrameProcessed, Pyramid
from core.magnifier import Magnifier
from core.pipeline_queue import END_OF_STREAM, PipelineQueue
from core.stages.base import PipelineStage
from utils.constants import DEFAULT_POP_TIMEOUT


class MagnifyStage(PipelineStage):
    """
    Pipeline Stage 1: Eulerian magnification.
    """

    def __init__(
        self,
        in_queue: PipelineQueue,
        out_queue: PipelineQueue,
        bus: EventBus,
        stop_event: Event,
        magnifier: Magnifier,
        pop_timeout: float = DEFAULT_POP_TIMEOUT,
    ):
        """
        Args:
            in_queue: Queue of Pyramid messages from CaptureStage.
            out_queue: Queue of ResultPair messages for DisplayStage.
            bus: Event bus; receives FrameProcessed timing events.
            stop_event: Shared threading.Event for shutdown.
            magnifier: Owns the filter bank and level worker pool.
            pop_timeout: Seconds per wait on the input queue.
        """
        super().__init__("MagnifyStage", bus, stop_event)
        self.in_queue = in_queue
        self.out_queue = out_queue
        self.magnifier = magnifier
        self.pop_timeout = pop_timeout

    def _loop(self) -> None:
        drained = False
        try:
            while True:
                pyramid: Pyramid = self.in_queue.pop(timeout=self.pop_timeout)
                if pyramid is None:
                    continue  # Stop requests arrive as END_OF_STREAM from upstream
                if pyramid is END_OF_STREAM:
                    drained = True
                    break

                result = self.magnifier.process(pyramid)
                self.bus.publish(FrameProcessed(
                    index=pyramid.index,
                    elapsed_ms=self.magnifier.last_elapsed_ms,
                ))

                if not self.out_queue.push(result):
                    break  # Pipeline aborted
                self.processed += 1
        finally:
            if not drained:
                self.in_queue.abort()  # Release a producer blocked on a full queue
            self.out_queue.signal_done()
            self.magnifier.close()

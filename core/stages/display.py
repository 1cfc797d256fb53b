"""
Display Stage — pulls result pairs, converts both frames back to BGR and
hands them to the display sink.

Runs in its own thread and ends when the result queue reports end of stream.
"""
from threading import Event

from core.bus import EventBus
from core.colorspace import to_display
from core.events import ResultPair
from core.pipeline_queue import END_OF_STREAM, PipelineQueue
from core.protocols import DisplaySink
from core.stages.base import PipelineStage
from utils.constants import (DEFAULT_POLL_INTERVAL_MS, DEFAULT_POP_TIMEOUT,
                             INPUT_WINDOW_LABEL, OUTPUT_WINDOW_LABEL)


class DisplayStage(PipelineStage):
    """
    Pipeline Stage 2: rendering.
    """

    def __init__(
        self,
        in_queue: PipelineQueue,
        sink: DisplaySink,
        bus: EventBus,
        stop_event: Event,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        pop_timeout: float = DEFAULT_POP_TIMEOUT,
    ):
        super().__init__("DisplayStage", bus, stop_event)
        self.in_queue = in_queue
        self.sink = sink
        self.poll_interval_ms = poll_interval_ms
        self.pop_timeout = pop_timeout

    def _loop(self) -> None:
        drained = False
        try:
            while True:
                result: ResultPair = self.in_queue.pop(timeout=self.pop_timeout)
                if result is None:
                    continue  # Stop requests arrive as END_OF_STREAM from upstream
                if result is END_OF_STREAM:
                    drained = True
                    break

                self.sink.show(INPUT_WINDOW_LABEL, to_display(result.original))
                self.sink.show(OUTPUT_WINDOW_LABEL, to_display(result.amplified))
                self.sink.poll_events(self.poll_interval_ms)
                self.processed += 1
        finally:
            if not drained:
                self.in_queue.abort()
            self.sink.close()

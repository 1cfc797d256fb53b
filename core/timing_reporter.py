"""
Timing Reporter — subscribes to FrameProcessed events and reports the
per-frame critical-path time of the magnify stage.

Every frame is logged at DEBUG; a rolling summary is logged at INFO every
``report_every`` frames and once more when the run ends.
"""
import threading

from core.bus import EventBus
from core.events import FrameProcessed
from utils.constants import DEFAULT_REPORT_EVERY
from utils.logger import Logger


class TimingReporter:
    """Accumulates frame timings published on the bus."""

    def __init__(self, bus: EventBus, report_every: int = DEFAULT_REPORT_EVERY):
        self.bus = bus
        self.report_every = max(report_every, 1)
        self.logger = Logger("Timing")

        self.frames = 0
        self.total_ms = 0.0
        self.max_ms = 0.0
        self._lock = threading.Lock()

        self.bus.subscribe(FrameProcessed, self._on_frame_processed)

    def _on_frame_processed(self, event: FrameProcessed) -> None:
        with self._lock:
            self.frames += 1
            self.total_ms += event.elapsed_ms
            self.max_ms = max(self.max_ms, event.elapsed_ms)
            due = self.frames % self.report_every == 0

        self.logger.debug(f"frame: {event.index}, took {event.elapsed_ms:.1f}ms")
        if due:
            self.report()

    @property
    def mean_ms(self) -> float:
        with self._lock:
            return self.total_ms / self.frames if self.frames else 0.0

    def report(self) -> None:
        """Log the summary so far."""
        self.logger.info(
            f"{self.frames} frame(s) magnified, "
            f"mean {self.mean_ms:.1f}ms, max {self.max_ms:.1f}ms"
        )

    def close(self) -> None:
        self.bus.unsubscribe(FrameProcessed, self._on_frame_processed)

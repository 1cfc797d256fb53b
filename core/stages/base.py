"""
Common thread lifecycle for pipeline stages.
"""
from threading import Thread, Event

from core.bus import EventBus
from core.events import StageFailed, StageFinished
from utils.logger import Logger


class PipelineStage(Thread):
    """
    A stage thread whose work lives in ``_loop()``.

    Any exception escaping ``_loop()`` is published as StageFailed instead of
    dying silently with the thread; StageFinished is always published last.
    """

    def __init__(self, name: str, bus: EventBus, stop_event: Event):
        super().__init__(name=name, daemon=True)
        self.bus = bus
        self.stop_event = stop_event
        self.processed = 0
        self.logger = Logger(name)

    def run(self) -> None:
        self.logger.info(f"{self.name} running")
        try:
            self._loop()
        except Exception as e:
            self.logger.debug(f"{self.name} raised {type(e).__name__}: {e}")
            self.bus.publish(StageFailed(stage=self.name, error=e))
        finally:
            self.bus.publish(StageFinished(stage=self.name, items=self.processed))
            self.logger.info(f"{self.name} stopped after {self.processed} item(s)")

    def _loop(self) -> None:
        raise NotImplementedError

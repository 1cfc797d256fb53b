"""
Structured error handling and failure tracking for the live magnifier.

Stages never share exceptions directly: a stage that fails publishes a
StageFailed event, and the FailureManager (subscribed by the orchestrator)
records it and trips the shared shutdown hooks so every other stage unwinds.
"""
import threading
import time
from typing import Callable, List, Optional

from utils.logger import Logger


class MagnifierError(Exception):
    """Base class for all magnifier exceptions."""
    def __init__(self, message: str, critical: bool = False):
        super().__init__(message)
        self.message = message
        self.critical = critical
        self.timestamp = time.time()


class SourceOpenError(MagnifierError):
    """Raised when the video source identifier cannot be opened."""
    def __init__(self, message: str):
        super().__init__(message, critical=True)


class ConfigError(MagnifierError):
    """Exception raised for configuration-related failures."""
    pass


class DisplayError(MagnifierError):
    """Exception raised for GUI-related failures."""
    pass


class FrameProcessingError(MagnifierError):
    """Raised when a frame cannot be decomposed, filtered or reconstructed."""
    def __init__(self, message: str, frame_index: int = -1):
        super().__init__(message, critical=True)
        self.frame_index = frame_index


class FailureManager:
    """
    Records stage failures and drives pipeline-wide shutdown.

    The first recorded failure is kept as ``first_failure`` and re-raised by
    ``raise_if_failed`` once all stages have been joined.
    """

    def __init__(self, stop_event: threading.Event, max_history: int = 100):
        """
        Args:
            stop_event: Shared shutdown flag checked by every stage loop.
            max_history: Cap on the number of retained failures.
        """
        self.logger = Logger("FailureManager")
        self.stop_event = stop_event
        self.history: List[Exception] = []
        self.first_failure: Optional[Exception] = None
        self._max_history = max_history
        self._shutdown_hooks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def add_shutdown_hook(self, hook: Callable[[], None]) -> None:
        """Register a callable run once on the first failure (e.g. queue.abort)."""
        with self._lock:
            self._shutdown_hooks.append(hook)

    def record_failure(self, error: Exception, source: str = "") -> None:
        """
        Record a failure incident (thread-safe) and trigger shutdown on the first one.

        Args:
            error: The exception that occurred.
            source: Name of the stage that raised it.
        """
        with self._lock:
            error_type = type(error).__name__
            where = f" in {source}" if source else ""

            if isinstance(error, MagnifierError):
                msg = f"Failure{where}: {error_type} - {error.message}"
                if error.critical:
                    self.logger.error(f"CRITICAL: {msg}")
                else:
                    self.logger.warning(msg)
            else:
                self.logger.error(f"Unexpected failure{where}: {error_type} - {error}")

            self.history.append(error)
            if len(self.history) > self._max_history:
                self.history = self.history[-self._max_history:]

            if self.first_failure is not None:
                return
            self.first_failure = error
            hooks = list(self._shutdown_hooks)

        self.stop_event.set()
        for hook in hooks:
            hook()

    @property
    def failed(self) -> bool:
        return self.first_failure is not None

    def raise_if_failed(self) -> None:
        """Re-raise the first recorded failure on the calling thread."""
        if self.first_failure is not None:
            raise self.first_failure

    def get_recent_history(self, count: int = 10) -> List[Exception]:
        """Return the most recent failures."""
        with self._lock:
            return self.history[-count:]

"""
Pipeline Queue — a FIFO between two stages with end-of-stream signaling.

Unlike ``queue.Queue`` the consumer learns that the producer has finished:
once ``signal_done()`` has been called and the queue is drained, ``pop()``
returns ``END_OF_STREAM``. A bounded queue applies one of two backpressure
policies when full:

    block        push() waits for the consumer to make room
    drop_oldest  push() discards the head item and counts it in ``dropped``

``abort()`` is the failure path: it wakes every waiter and makes both
``push()`` and ``pop()`` return immediately, so no stage stays blocked on a
peer that has died.
"""
import threading
from collections import deque
from typing import Deque, Generic, Optional, TypeVar, Union

from utils.constants import BACKPRESSURE_BLOCK, BACKPRESSURE_DROP_OLDEST, BACKPRESSURE_POLICIES

T = TypeVar("T")


class _EndOfStream:
    """Sentinel type returned by ``PipelineQueue.pop`` after the last item."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END_OF_STREAM"

    def __bool__(self) -> bool:
        return False


END_OF_STREAM = _EndOfStream()


class PipelineQueue(Generic[T]):
    """Thread-safe FIFO with a producer-finished flag."""

    def __init__(self, maxsize: int = 0, policy: str = BACKPRESSURE_BLOCK, name: str = "queue"):
        """
        Args:
            maxsize: Capacity; 0 means unbounded.
            policy: Backpressure policy used when full ("block" or "drop_oldest").
            name: Label used in logs and errors.
        """
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")
        if policy not in BACKPRESSURE_POLICIES:
            raise ValueError(f"Unknown backpressure policy: {policy}")

        self.maxsize = maxsize
        self.policy = policy
        self.name = name
        self.dropped = 0

        self._items: Deque[T] = deque()
        self._done = False
        self._aborted = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    @property
    def aborted(self) -> bool:
        with self._lock:
            return self._aborted

    def push(self, item: T) -> bool:
        """
        Append ``item`` and wake one waiting consumer.

        Returns:
            False if the queue was aborted and the item was discarded.
        """
        with self._lock:
            if self._done:
                raise RuntimeError(f"push() on '{self.name}' after signal_done()")

            if self.maxsize > 0 and len(self._items) >= self.maxsize:
                if self.policy == BACKPRESSURE_DROP_OLDEST:
                    self._items.popleft()
                    self.dropped += 1
                else:
                    self._not_full.wait_for(
                        lambda: self._aborted or len(self._items) < self.maxsize
                    )

            if self._aborted:
                return False

            self._items.append(item)
            self._not_empty.notify()
            return True

    def pop(self, timeout: Optional[float] = None) -> Union[T, _EndOfStream, None]:
        """
        Remove and return the head item, blocking until one is available.

        Returns:
            The item; ``END_OF_STREAM`` once the producer is done and the queue
            is drained (or the queue was aborted); ``None`` if ``timeout``
            elapsed first.
        """
        with self._lock:
            ready = self._not_empty.wait_for(
                lambda: self._items or self._done or self._aborted, timeout
            )
            if not ready:
                return None
            if self._aborted or not self._items:
                return END_OF_STREAM

            item = self._items.popleft()
            self._not_full.notify()
            return item

    def signal_done(self) -> None:
        """Mark the producer as finished and wake every waiter."""
        with self._lock:
            self._done = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def abort(self) -> None:
        """Discard pending items and release every blocked producer and consumer."""
        with self._lock:
            self._aborted = True
            self._items.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()

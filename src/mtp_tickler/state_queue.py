from typing import Generic, Iterator, Optional, TypeVar
import threading


T = TypeVar("T")


class LatestStateQueue(Generic[T]):
    """Thread-safe, latest-wins slot. The producer never blocks; the consumer sees the newest state."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._value: Optional[T] = None
        self._has_value = False
        self._closed = False

    def publish(self, item: T) -> None:
        """Replace any unread state. Ignored once the queue is closed."""
        with self._condition:
            if self._closed:
                return
            self._value = item
            self._has_value = True
            self._condition.notify()

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Block until a state is available or the queue is closed. Returns None when drained and closed."""
        with self._condition:
            ok = self._condition.wait_for(lambda: self._has_value or self._closed, timeout)
            if not ok:
                raise TimeoutError("queue get() timed out")
            if not self._has_value:
                return None
            value = self._value
            self._value = None
            self._has_value = False
            return value

    def __iter__(self) -> Iterator[T]:
        while (value := self.get()) is not None:
            yield value

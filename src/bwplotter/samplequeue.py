import threading

from collections import deque
from typing import Any, Optional


class SampleQueue:
    """
    FIFO shared between the producer thread and the render loop.

    Every operation takes the same lock for its own duration only. `pop` never
    blocks: an empty queue returns None and callers poll again later.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._items = deque()

    def push(self, item: Any) -> None:
        with self._lock:
            self._items.append(item)

    def pop(self) -> Optional[Any]:
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def remove(self, item: Any) -> bool:
        """
        Drop the element that is `item` (identity match).
        Returns False without raising when it is not queued.
        """
        with self._lock:
            for index, queued in enumerate(self._items):
                if queued is item:
                    del self._items[index]
                    return True
        return False

    def snapshot(self) -> list:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["SampleQueue"]

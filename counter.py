import threading


class SequenceCounter:
    """请求序号计数器，从 1 开始，线程安全"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def last(self) -> int:
        with self._lock:
            return self._value

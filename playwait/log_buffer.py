import logging
import threading
from collections import deque
from typing import Deque, List, Optional


class LogBuffer:
    def __init__(self, max_lines: int = 1000) -> None:
        self._lines: Deque[str] = deque(maxlen=max_lines)
        self._lock = threading.Lock()

    @property
    def max_lines(self) -> Optional[int]:
        return self._lines.maxlen

    def get_lines(self, tail: Optional[int] = None) -> List[str]:
        with self._lock:
            lines = list(self._lines)
        if tail is None:
            return lines
        if tail <= 0:
            return []
        return lines[-tail:]

    def append(self, line: str) -> None:
        # Can be called from any thread (discord's audio player logs from its own).
        with self._lock:
            self._lines.append(line)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def __contains__(self, text: str) -> bool:
        return any(text in line for line in self.get_lines())


class LogHandler(logging.Handler):
    def __init__(self, buffer: LogBuffer) -> None:
        super().__init__()
        self._buffer = buffer

    @property
    def buffer(self) -> LogBuffer:
        return self._buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:
            # Best-effort, never break logging.
            msg = record.getMessage()
        self._buffer.append(msg)

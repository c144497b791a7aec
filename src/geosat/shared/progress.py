"""Progress reporting and cooperative cancellation."""

from __future__ import annotations

import sys
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from geosat.shared.errors import CancelledError

# Колбэк прогресса: (выполнено, всего)
ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class CancelToken(Protocol):
    def is_cancelled(self) -> bool: ...


class EventCancelToken:
    """Токен отмены на основе threading.Event (можно отменять из другого потока)."""

    def __init__(self, event: threading.Event | None = None) -> None:
        self._event = event or threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError


def raise_if_cancelled(cancel: CancelToken | None) -> None:
    """Бросает CancelledError, если передан токен и он отменён."""
    if cancel is not None and cancel.is_cancelled():
        raise CancelledError


class SingleLineRenderer:
    """Потокобезопасный рендерер для вывода в одну строку."""

    def __init__(self, *, single_line: bool = True, stream=None) -> None:
        self.single_line = single_line
        self._stream = stream
        self._last_len = 0
        self._lock = threading.Lock()

    @property
    def stream(self):
        return self._stream or sys.stdout

    def clear_line(self) -> None:
        """Полностью очистить текущую строку прогресса."""
        with self._lock:
            if self.single_line and self._last_len > 0:
                self.stream.write('\r' + ' ' * self._last_len + '\r')
                self.stream.flush()
                self._last_len = 0

    def write_line(self, msg: str) -> None:
        """Перерисовать текущую строку прогресса."""
        with self._lock:
            if self.single_line:
                pad = max(0, self._last_len - len(msg))
                self.stream.write('\r' + msg + (' ' * pad))
            else:
                self.stream.write(msg + '\n')
            self.stream.flush()
            self._last_len = len(msg)


class ConsoleProgress:
    """Прогресс-бар для пошаговых операций; экземпляр сам является ProgressCallback."""

    def __init__(
        self,
        label: str = 'Progress',
        writer: SingleLineRenderer | None = None,
    ) -> None:
        self.total = 0
        self.done = 0
        self.start = time.monotonic()
        self.label = label
        self._writer = writer or SingleLineRenderer()

    def _format_eta(self, remaining: float) -> str:
        if remaining == float('inf'):
            return '--:--'
        m, s = divmod(int(remaining), 60)
        h, m = divmod(m, 60)
        if h > 0:
            return f'{h:02d}:{m:02d}:{s:02d}'
        return f'{m:02d}:{s:02d}'

    def render(self) -> str:
        elapsed = max(1e-6, time.monotonic() - self.start)
        rps = self.done / elapsed
        remaining = (self.total - self.done) / rps if rps > 0 else float('inf')
        bar_len = 30
        total = max(1, self.total)
        filled = int(bar_len * self.done / total)
        bar = '█' * filled + '░' * (bar_len - filled)
        return (
            f'{self.label}: [{bar}] {self.done}/{self.total} | {rps:4.1f}/s | ETA'
            f' {self._format_eta(remaining)}'
        )

    def __call__(self, done: int, total: int) -> None:
        self.total = max(0, int(total))
        self.done = min(self.total, max(self.done, int(done)))
        self._writer.write_line(self.render())

    def close(self) -> None:
        self._writer.stream.write('\n')
        self._writer.stream.flush()

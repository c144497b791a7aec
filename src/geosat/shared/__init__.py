"""Shared utilities and helpers."""
from geosat.shared.diagnostics import log_memory_usage, log_thread_status
from geosat.shared.progress import (
    CancelToken,
    ConsoleProgress,
    EventCancelToken,
    ProgressCallback,
)

__all__ = [
    'CancelToken',
    'ConsoleProgress',
    'EventCancelToken',
    'ProgressCallback',
    'log_memory_usage',
    'log_thread_status',
]

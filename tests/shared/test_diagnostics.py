"""Tests for diagnostics module."""

import logging
from unittest.mock import patch

import psutil

from geosat.shared.diagnostics import (
    get_memory_info,
    get_thread_info,
    log_memory_usage,
    log_thread_status,
)


class TestGetMemoryInfo:
    """Tests for get_memory_info()."""

    def test_returns_process_memory(self):
        """Should report process RSS and system memory."""
        info = get_memory_info()
        assert info['process_rss_mb'] > 0
        assert 'system_available_mb' in info

    def test_psutil_error(self):
        """Should return an error entry when psutil fails."""
        with patch(
            'geosat.shared.diagnostics.psutil.Process',
            side_effect=psutil.Error('nope'),
        ):
            info = get_memory_info()
        assert 'error' in info


class TestGetThreadInfo:
    """Tests for get_thread_info()."""

    def test_contains_main_thread(self):
        """Should list the main thread."""
        info = get_thread_info()
        assert info['active_count'] >= 1
        assert 'MainThread' in info['thread_names']


class TestLogging:
    """Tests for the logging helpers."""

    def test_log_memory_usage(self, caplog):
        """Should log memory usage with the context label."""
        with caplog.at_level(logging.INFO, logger='geosat.shared.diagnostics'):
            log_memory_usage('before tile download')
        assert 'Memory usage (before tile download)' in caplog.text

    def test_log_thread_status(self, caplog):
        """Should log thread status."""
        with caplog.at_level(logging.INFO, logger='geosat.shared.diagnostics'):
            log_thread_status()
        assert 'Thread status' in caplog.text

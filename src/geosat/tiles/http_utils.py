from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def release_response(resp: object) -> None:
    """Close and release an aiohttp response, tolerating test doubles."""
    try:
        close = getattr(resp, 'close', None)
        if callable(close):
            close()
        release = getattr(resp, 'release', None)
        if callable(release):
            release()
    except Exception as e:  # noqa: BLE001
        logger.debug('Failed to cleanup HTTP response: %s', e, exc_info=True)

"""Pytest configuration and fixtures for GeoSat tests."""

import sys
from pathlib import Path

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from io import BytesIO  # noqa: E402

import pytest  # noqa: E402
from PIL import Image  # noqa: E402


def tile_bytes(color=(255, 0, 0), size=256, fmt='PNG') -> bytes:
    """Encode a solid-color tile image."""
    buf = BytesIO()
    Image.new('RGB', (size, size), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_tile_bytes():
    """Factory fixture producing encoded solid-color tiles."""
    return tile_bytes

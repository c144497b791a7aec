"""Error types for the imagery pipeline.

Every failure raised by a pipeline component derives from GeoSatError.
The orchestrator stamps the failing stage onto the error before
re-raising it, so a host can report which step of the run broke.
"""

from __future__ import annotations


class GeoSatError(Exception):
    """Base exception for imagery pipeline failures."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f'[{self.stage}] {self.message}'
        return self.message


class ProjectionError(GeoSatError):
    """Unsupported CRS parameters or a transform that is singular at the input."""


class AuthError(GeoSatError):
    """Provider token request failed."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class FetchError(GeoSatError):
    """Tile request returned a non-success response or did not complete."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        zoom: int | None = None,
        x: int | None = None,
        y: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.zoom = zoom
        self.x = x
        self.y = y


class CacheIOError(GeoSatError):
    """Tile cache read or write failed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class CompositeError(GeoSatError):
    """A fetched tile could not be decoded or the mosaic could not be written."""

    def __init__(
        self, message: str, *, x: int | None = None, y: int | None = None
    ) -> None:
        super().__init__(message)
        self.x = x
        self.y = y


class CancelledError(GeoSatError):
    """Raised when the host cancels a run."""

    def __init__(self, message: str = 'Operation cancelled') -> None:
        super().__init__(message)


class SettingsError(GeoSatError):
    """Provider credentials are missing or the settings file is invalid."""

"""Error taxonomy for filmstamp.

Every failure in the stamping pipeline is one of a closed set of kinds, so
callers branch on ``error.kind`` instead of matching message text. The
orchestrator attaches the image path and the failing stage before the error
reaches the CLI.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    IO = "io"
    UNRECOGNIZED_FORMAT = "unrecognized_format"
    MALFORMED_CONTAINER = "malformed_container"
    MISSING_TIMESTAMP_TAG = "missing_timestamp_tag"
    FIELD_FORMAT = "field_format"
    INVALID_CALENDAR_DATE = "invalid_calendar_date"
    RENDER = "render"
    OUTPUT_WRITE = "output_write"


class FilmstampError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: Optional[Path] = None
        self.context: Optional[str] = None
        self.stage: Optional[str] = None

    def with_context(self, path: Path | str, stage: str, context: str) -> FilmstampError:
        """Attach the image path, the failing stage and a human-readable context."""
        self.path = Path(path)
        self.stage = stage
        self.context = context
        return self

    def __str__(self) -> str:
        if self.context is None:
            return self.message
        return f"{self.context}: {self.path}: {self.message}"


class ImageIOError(FilmstampError):
    """File cannot be opened or read."""

    kind = ErrorKind.IO


class UnrecognizedFormatError(FilmstampError):
    """The codec cannot identify or decode the image."""

    kind = ErrorKind.UNRECOGNIZED_FORMAT


class MalformedContainerError(FilmstampError):
    """Metadata blob is not a valid tag directory."""

    kind = ErrorKind.MALFORMED_CONTAINER


class MissingTimestampTagError(FilmstampError):
    """Tag directory is valid but lacks the requested tag."""

    kind = ErrorKind.MISSING_TIMESTAMP_TAG


class FieldFormatError(FilmstampError):
    """Tag present but of the wrong kind or with a malformed layout."""

    kind = ErrorKind.FIELD_FORMAT


class InvalidCalendarDateError(FilmstampError):
    """Well-formed digits that do not make a real date/time."""

    kind = ErrorKind.INVALID_CALENDAR_DATE


class RenderError(FilmstampError):
    """Overlay drawing precondition violated."""

    kind = ErrorKind.RENDER


class OutputWriteError(FilmstampError):
    """Encoding or saving the stamped image failed."""

    kind = ErrorKind.OUTPUT_WRITE

"""filmstamp Pydantic models.

Values passed between the pipeline stages. Each one lives for a single run
and is discarded afterwards; nothing here is persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# A validated capture time. datetime refuses impossible dates instead of clamping.
CalendarTimestamp = datetime

# Fixed overlay colour, the orange of film camera date backs.
STAMP_COLOR = (255, 165, 0)

# EXIF tag holding the original capture date/time.
DATE_TIME_ORIGINAL = 0x9003


class IfdSection(str, Enum):
    """Which image directory of the tag container to read."""

    PRIMARY = "primary"
    THUMBNAIL = "thumbnail"


class ValueKind(str, Enum):
    """Native encoding of a tag value."""

    ASCII = "ascii"
    INTEGER = "integer"
    RATIONAL = "rational"
    FLOAT = "float"
    BINARY = "binary"


class PipelineStage(str, Enum):
    """Pipeline states, in the order they are reached."""

    LOADED = "loaded"
    METADATA_EXTRACTED = "metadata_extracted"
    TIMESTAMP_PARSED = "timestamp_parsed"
    TIMESTAMP_VALIDATED = "timestamp_validated"
    FORMATTED = "formatted"
    ANNOTATED = "annotated"
    SAVED = "saved"


class TagFieldValue(BaseModel):
    """A located tag entry in its native, unconverted form."""

    model_config = ConfigDict(frozen=True)

    tag: int
    ifd: IfdSection = IfdSection.PRIMARY
    kind: ValueKind
    value: Any


class RawTimestampComponents(BaseModel):
    """Six unvalidated integers read from a ``YYYY:MM:DD HH:MM:SS`` field."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=0, le=65535)
    month: int = Field(..., ge=0, le=99)
    day: int = Field(..., ge=0, le=99)
    hour: int = Field(..., ge=0, le=99)
    minute: int = Field(..., ge=0, le=99)
    second: int = Field(..., ge=0, le=99)


class OverlaySpec(BaseModel):
    """Where and how large the timestamp is drawn."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    font_size: int = Field(..., ge=0)
    color: tuple[int, int, int] = STAMP_COLOR


class StampResult(BaseModel):
    """Outcome of a successful pipeline run."""

    input_path: Path
    output_path: Optional[Path] = None
    stage: PipelineStage
    timestamp: CalendarTimestamp
    text: str

"""Capture timestamp parsing, validation and display formatting.

The EXIF date layout is fixed-width ASCII, ``YYYY:MM:DD HH:MM:SS``. Parsing
only checks the character layout; calendar rules (month lengths, leap years,
time-of-day ranges) are enforced in one place, ``validate``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from filmstamp.errors import FieldFormatError, InvalidCalendarDateError
from filmstamp.models import CalendarTimestamp, RawTimestampComponents, TagFieldValue, ValueKind

logger = logging.getLogger(__name__)

EXIF_DATETIME_PATTERN = re.compile(
    r"(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})",
    re.ASCII,
)

# Writers use these when the capture time is unknown
BLANK_VALUES = {"    :  :     :  :  ", " " * 19}

DISPLAY_FORMAT = "{day}  {month}  {year}   {hour}:{minute}"


def parse_field(value: TagFieldValue) -> RawTimestampComponents:
    """Split an ASCII EXIF date/time value into six integers.

    No range checks happen here beyond "two decimal digits"; see ``validate``.

    Raises:
        FieldFormatError: Non-ASCII value kind, empty or blank value, or any
            deviation from the ``YYYY:MM:DD HH:MM:SS`` layout.
    """
    if value.kind is not ValueKind.ASCII or not isinstance(value.value, str):
        raise FieldFormatError(
            f"Invalid EXIF format for timestamp: expected ASCII text, got {value.kind.value}."
        )

    text = value.value.rstrip("\x00")
    if not text:
        raise FieldFormatError("Invalid EXIF format for timestamp: value is empty.")
    if text in BLANK_VALUES:
        raise FieldFormatError("Failed to parse EXIF timestamp: value is blank.")

    match = EXIF_DATETIME_PATTERN.fullmatch(text)
    if match is None:
        raise FieldFormatError(
            f"Failed to parse EXIF timestamp: {text!r} does not match YYYY:MM:DD HH:MM:SS."
        )

    year, month, day, hour, minute, second = (int(group) for group in match.groups())
    logger.debug("Parsed EXIF timestamp %r", text)
    return RawTimestampComponents(
        year=year, month=month, day=day, hour=hour, minute=minute, second=second,
    )


def validate(components: RawTimestampComponents) -> CalendarTimestamp:
    """Turn raw components into a real Gregorian date and time.

    All-or-nothing: a single out-of-range component fails the whole value.

    Raises:
        InvalidCalendarDateError: If the components are not a valid date/time.
    """
    try:
        return datetime(
            components.year,
            components.month,
            components.day,
            components.hour,
            components.minute,
            components.second,
        )
    except ValueError as e:
        raise InvalidCalendarDateError(
            f"Failed to convert EXIF date/time {components.year:04d}:{components.month:02d}:"
            f"{components.day:02d} {components.hour:02d}:{components.minute:02d}:"
            f"{components.second:02d} to a calendar date: {e}"
        ) from e


def format_timestamp(timestamp: CalendarTimestamp) -> str:
    """Render the film-camera display string, e.g. ``2  1  2025   3:4``.

    Numbers are not zero-padded and seconds are dropped.
    """
    return DISPLAY_FORMAT.format(
        day=timestamp.day,
        month=timestamp.month,
        year=timestamp.year,
        hour=timestamp.hour,
        minute=timestamp.minute,
    )

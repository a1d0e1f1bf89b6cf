"""EXIF tag scanner.

Locates a single tag inside a raw EXIF blob (a TIFF-structured tag container,
optionally prefixed with the ``Exif\\0\\0`` APP1 marker) and returns its value
in the native encoding, without any conversion.

A blob that cannot be walked as a tag directory and a valid directory that
simply lacks the tag fail with different errors.
"""

from __future__ import annotations

import logging
import struct
import warnings

from PIL import ExifTags, Image, TiffImagePlugin

from filmstamp.errors import MalformedContainerError, MissingTimestampTagError
from filmstamp.models import DATE_TIME_ORIGINAL, IfdSection, TagFieldValue, ValueKind

logger = logging.getLogger(__name__)

EXIF_HEADER = b"Exif\x00\x00"

# Byte-order mark + magic + IFD0 offset
TIFF_HEADER_SIZE = 8
IFD_ENTRY_SIZE = 12

EXIF_IFD_POINTER = 0x8769

# TIFF field type codes by the kind of value they hold
ASCII_TYPE = 2
FIELD_TYPE_KINDS = {
    1: ValueKind.INTEGER,
    2: ValueKind.ASCII,
    3: ValueKind.INTEGER,
    4: ValueKind.INTEGER,
    5: ValueKind.RATIONAL,
    6: ValueKind.INTEGER,
    7: ValueKind.BINARY,
    8: ValueKind.INTEGER,
    9: ValueKind.INTEGER,
    10: ValueKind.RATIONAL,
    11: ValueKind.FLOAT,
    12: ValueKind.FLOAT,
}


def _tag_name(tag: int) -> str:
    name = ExifTags.TAGS.get(tag)
    return f"0x{tag:04X} ({name})" if name else f"0x{tag:04X}"


def _value_kind(value: object) -> ValueKind:
    """Classify a decoded entry by the Python type Pillow produced for it."""
    if isinstance(value, tuple):
        if not value:
            return ValueKind.BINARY
        return _value_kind(value[0])
    if isinstance(value, str):
        return ValueKind.ASCII
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BINARY
    if isinstance(value, TiffImagePlugin.IFDRational):
        return ValueKind.RATIONAL
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, int):
        return ValueKind.INTEGER
    return ValueKind.BINARY


def _tiff_payload(blob: bytes) -> bytes:
    return blob[len(EXIF_HEADER):] if blob.startswith(EXIF_HEADER) else blob


def _raw_entries(payload: bytes, ifd: IfdSection) -> dict[int, tuple[int, int, bytes]]:
    """Walk the entry tables of ``ifd`` without decoding any values.

    Pillow drops entries it cannot decode (zero-length values, unknown field
    types). This walk still sees them, so a tag that is present but unusable
    is not mistaken for an absent one.

    Returns:
        Mapping of tag ID to ``(field type, count, raw 4-byte value field)``.
    """
    order = "<" if payload[:2] == b"II" else ">"

    def read_table(offset: int) -> tuple[dict[int, tuple[int, int, bytes]], int]:
        (count,) = struct.unpack_from(order + "H", payload, offset)
        entries = {}
        for index in range(count):
            start = offset + 2 + index * IFD_ENTRY_SIZE
            tag, field_type, value_count = struct.unpack_from(order + "HHI", payload, start)
            entries.setdefault(tag, (field_type, value_count, payload[start + 8:start + 12]))
        (next_offset,) = struct.unpack_from(order + "I", payload, offset + 2 + count * IFD_ENTRY_SIZE)
        return entries, next_offset

    try:
        (ifd0_offset,) = struct.unpack_from(order + "I", payload, 4)
        ifd0, ifd1_offset = read_table(ifd0_offset)
        if ifd is IfdSection.THUMBNAIL:
            return read_table(ifd1_offset)[0] if ifd1_offset else {}

        entries = dict(ifd0)
        pointer = ifd0.get(EXIF_IFD_POINTER)
        if pointer is not None:
            (exif_offset,) = struct.unpack(order + "I", pointer[2])
            for tag, entry in read_table(exif_offset)[0].items():
                entries.setdefault(tag, entry)
        return entries
    except struct.error as e:
        raise MalformedContainerError(f"Failed to read EXIF data from raw bytes: {e}") from e


def _undecoded_value(tag: int, ifd: IfdSection, entry: tuple[int, int, bytes]) -> TagFieldValue:
    field_type, count, raw = entry
    kind = FIELD_TYPE_KINDS.get(field_type, ValueKind.BINARY)
    if field_type == ASCII_TYPE:
        value = ""
    elif field_type in FIELD_TYPE_KINDS:
        value = ()
    else:
        value = raw
    logger.debug(
        "Tag %s in %s directory has type %d and %d values, which were not decoded",
        _tag_name(tag), ifd.value, field_type, count,
    )
    return TagFieldValue(tag=tag, ifd=ifd, kind=kind, value=value)


def _load_directories(blob: bytes, ifd: IfdSection) -> list[dict]:
    """Parse the blob and return the directories that make up ``ifd``.

    The primary image is IFD0 plus the Exif sub-IFD it points to; the
    thumbnail is IFD1.
    """
    payload = _tiff_payload(blob)
    if len(payload) < TIFF_HEADER_SIZE:
        raise MalformedContainerError(
            f"EXIF data too short to hold a TIFF header ({len(payload)} bytes)."
        )

    exif = Image.Exif()
    try:
        # Pillow reports corrupt directories as warnings and carries on
        with warnings.catch_warnings():
            warnings.simplefilter("error", UserWarning)
            exif.load(payload)
            if ifd is IfdSection.THUMBNAIL:
                return [dict(exif.get_ifd(ExifTags.IFD.IFD1) or {})]
            return [dict(exif), dict(exif.get_ifd(ExifTags.IFD.Exif) or {})]
    except (SyntaxError, UserWarning, ValueError, struct.error, OSError) as e:
        raise MalformedContainerError(f"Failed to read EXIF data from raw bytes: {e}") from e


def scan(
    blob: bytes,
    tag: int = DATE_TIME_ORIGINAL,
    ifd: IfdSection = IfdSection.PRIMARY,
) -> TagFieldValue:
    """Find ``tag`` in the requested directory of an EXIF blob.

    Args:
        blob: Raw EXIF bytes as handed over by the image decoder.
        tag: Numeric EXIF tag ID. Defaults to DateTimeOriginal.
        ifd: Primary image or thumbnail directory.

    Returns:
        The tag value in its native kind. Entries Pillow cannot decode (no
        values, unknown field type) come back empty or as raw binary.

    Raises:
        MalformedContainerError: If the blob is not a readable tag directory.
        MissingTimestampTagError: If the directory is valid but lacks the tag.
    """
    for directory in _load_directories(blob, ifd):
        if tag in directory:
            value = directory[tag]
            kind = _value_kind(value)
            logger.debug("Found tag %s in %s directory as %s", _tag_name(tag), ifd.value, kind.value)
            return TagFieldValue(tag=tag, ifd=ifd, kind=kind, value=value)

    entry = _raw_entries(_tiff_payload(blob), ifd).get(tag)
    if entry is not None:
        return _undecoded_value(tag, ifd, entry)

    raise MissingTimestampTagError(
        f"No EXIF tag {_tag_name(tag)} found in the {ifd.value} directory."
    )

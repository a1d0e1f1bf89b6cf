"""Image decode/encode on top of Pillow.

Decoding hands back the pixels as an RGB image together with the raw EXIF
blob, if the file carries one. Encoding picks the output format from the
destination extension and never leaves a partially written file behind.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from filmstamp.errors import ImageIOError, OutputWriteError, UnrecognizedFormatError

logger = logging.getLogger(__name__)

# Allow large originals, high-res photography is not a decompression bomb
Image.MAX_IMAGE_PIXELS = 300_000_000

LOSSY_FORMATS = {"JPEG", "WEBP"}


def _raw_exif(img: Image.Image) -> Optional[bytes]:
    """Return the EXIF blob as stored by the container, if any.

    JPEG, PNG and WebP expose the block in ``info["exif"]``. TIFF keeps its
    tags in the file's own IFD0, so that directory is serialised instead.
    """
    blob = img.info.get("exif")
    if blob:
        return bytes(blob)
    if img.format == "TIFF":
        exif = img.getexif()
        if len(exif):
            return exif.tobytes()
    return None


def decode_image(path: Path | str) -> tuple[Image.Image, Optional[bytes]]:
    """Load an image and its raw EXIF metadata.

    Args:
        path: Image file to read.

    Returns:
        Tuple of (RGB image, raw EXIF bytes or None).

    Raises:
        ImageIOError: If the file cannot be opened.
        UnrecognizedFormatError: If Pillow cannot identify or decode it.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            exif = _raw_exif(img)
            rgb = img.convert("RGB")
    except UnidentifiedImageError as e:
        raise UnrecognizedFormatError(f"Failed to guess image format: {e}") from e
    except (FileNotFoundError, IsADirectoryError, PermissionError) as e:
        raise ImageIOError(f"Failed to open image: {e}") from e
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise UnrecognizedFormatError(f"Failed to read image from decoder: {e}") from e

    logger.debug("Decoded %s: %dx%d, exif=%s", path.name, rgb.width, rgb.height,
                 f"{len(exif)} bytes" if exif else "none")
    return rgb, exif


def format_for_path(path: Path | str) -> str:
    """Map a destination extension to a Pillow format name.

    Raises:
        OutputWriteError: If the extension is unknown or Pillow cannot write it.
    """
    suffix = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None or fmt not in Image.SAVE:
        raise OutputWriteError(f"Unsupported output format for extension '{suffix or Path(path).name}'")
    return fmt


def encode_image(image: Image.Image, path: Path | str, quality: int = 95) -> Path:
    """Encode ``image`` in the format implied by ``path`` and write it atomically.

    Args:
        image: Image to write.
        path: Destination path; its extension selects the format.
        quality: Encoder quality for lossy formats.

    Returns:
        The destination path.

    Raises:
        OutputWriteError: If the format is unsupported or encoding/writing fails.
    """
    path = Path(path)
    fmt = format_for_path(path)

    params = {"quality": quality} if fmt in LOSSY_FORMATS else {}
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, **params)
    except (OSError, ValueError, KeyError) as e:
        raise OutputWriteError(f"Failed to encode image as {fmt}: {e}") from e

    data = buffer.getvalue()
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise OutputWriteError(f"Failed to save image: {e}") from e

    logger.info("Wrote %s (%s, %d bytes)", path, fmt, len(data))
    return path

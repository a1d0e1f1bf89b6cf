"""Timestamp overlay for filmstamp.

Sizes and places the date stamp from the image dimensions alone, then draws
it with the bundled font. The anchor is the top-left of the text, biased to
the bottom-right of the frame; long text or tiny frames can run past the
edge and are clipped by the renderer.

Stamping is not idempotent: running it on an already stamped image draws a
second overlay.
"""

from __future__ import annotations

import io
import logging
from functools import lru_cache
from importlib import resources

from PIL import Image, ImageDraw, ImageFont

from filmstamp.errors import RenderError
from filmstamp.models import STAMP_COLOR, OverlaySpec

logger = logging.getLogger(__name__)

FONT_SIZE_FACTOR = 40
WIDTH_POSITION_FACTOR = 6
HEIGHT_POSITION_FACTOR = 16

# Shipped inside the package, never looked up on the host system
FONT_RESOURCE = ("assets", "SourceCodePro-Regular.ttf")


def compute_font_size(width: int, height: int) -> int:
    """Font size in pixels: 1/40 of the width, capped by the height."""
    return min(width // FONT_SIZE_FACTOR, height)


def compute_position(width: int, height: int) -> tuple[int, int]:
    """Text anchor, inset by 1/6 of the width and 1/16 of the height from the bottom-right."""
    x = width - (width // WIDTH_POSITION_FACTOR)
    y = height - (height // HEIGHT_POSITION_FACTOR)
    return x, y


def compute_overlay(width: int, height: int) -> OverlaySpec:
    """Derive the full overlay spec from the image dimensions.

    Raises:
        RenderError: If either dimension is below 1.
    """
    if width < 1 or height < 1:
        raise RenderError(f"Cannot place an overlay on a {width}x{height} image")
    x, y = compute_position(width, height)
    return OverlaySpec(x=x, y=y, font_size=compute_font_size(width, height), color=STAMP_COLOR)


@lru_cache(maxsize=1)
def _font_bytes() -> bytes:
    directory, name = FONT_RESOURCE
    return resources.files("filmstamp").joinpath(directory).joinpath(name).read_bytes()


def load_default_font(size: int) -> ImageFont.FreeTypeFont:
    """Load the bundled font at ``size`` pixels.

    Raises:
        RenderError: If the embedded font cannot be read or parsed.
    """
    try:
        return ImageFont.truetype(io.BytesIO(_font_bytes()), size)
    except (OSError, ValueError) as e:
        raise RenderError(f"Failed to load default font: {e}") from e


def draw_timestamp(image: Image.Image, spec: OverlaySpec, text: str) -> None:
    """Draw ``text`` onto ``image`` in place according to ``spec``."""
    font = load_default_font(spec.font_size)
    draw = ImageDraw.Draw(image)
    draw.text((spec.x, spec.y), text, fill=spec.color, font=font)


def add_timestamp_to_image(image: Image.Image, text: str) -> Image.Image:
    """Return an RGB copy of ``image`` with ``text`` stamped on it.

    Args:
        image: Source image, left untouched.
        text: Display string to draw.

    Returns:
        New RGB image of the same size.

    Raises:
        RenderError: If the text is empty or the image has no area.
    """
    if not text:
        raise RenderError("Timestamp cannot be empty")

    width, height = image.size
    spec = compute_overlay(width, height)
    stamped = image.convert("RGB") if image.mode != "RGB" else image.copy()

    if spec.font_size < 1:
        logger.warning(
            "Image %dx%d is too narrow for a visible stamp, leaving it unchanged",
            width, height,
        )
        return stamped

    draw_timestamp(stamped, spec, text)
    logger.debug("Drew %r at (%d, %d) size %d", text, spec.x, spec.y, spec.font_size)
    return stamped

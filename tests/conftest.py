"""Shared fixtures: hand-built EXIF blobs and sample photos."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from exif_fixtures import build_exif, exif_with_original


@pytest.fixture
def make_exif():
    return build_exif


@pytest.fixture
def make_photo(tmp_path):
    """Factory writing a black JPEG carrying the given DateTimeOriginal."""

    def _make(
        value: Optional[str] = "2025:01:02 03:04:05",
        size: tuple[int, int] = (400, 300),
        name: str = "photo.jpg",
        exif: Optional[bytes] = None,
    ) -> Path:
        path = tmp_path / name
        img = Image.new("RGB", size, color=(0, 0, 0))
        if exif is None and value is not None:
            exif = exif_with_original(value)
        if exif is not None:
            img.save(path, exif=exif)
        else:
            img.save(path)
        return path

    return _make

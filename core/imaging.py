# Path: core/imaging.py
# Purpose: Decode image payloads delivered by the backend and build previews of staged files.
# Layer: core.
# Details: Uses Pillow so previews work for every format it reads, independent of Qt image plugins.

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

DATA_URL_PREFIX = "data:"


def is_data_url(value: str) -> bool:
    return value.startswith(DATA_URL_PREFIX)


def decode_data_url(value: str) -> bytes:
    """Return the raw bytes carried by a ``data:<mime>;base64,<payload>`` URL."""

    if not is_data_url(value):
        raise ValueError("Not a data URL")
    header, _, payload = value.partition(",")
    if not payload:
        raise ValueError("Data URL has no payload")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return payload.encode("utf-8")


def open_image(data: bytes) -> Image.Image:
    """Open encoded image bytes, applying EXIF orientation."""

    image = Image.open(io.BytesIO(data))
    image.load()
    return ImageOps.exif_transpose(image)


def make_preview(path: Path, size: int) -> Optional[bytes]:
    """Return PNG bytes of ``path`` scaled to fit ``size`` x ``size``, or None if unreadable."""

    try:
        with Image.open(path) as source:
            image = ImageOps.exif_transpose(source)
            image.thumbnail((size, size))
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA")
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            return buffer.getvalue()
    except (OSError, ValueError):
        return None

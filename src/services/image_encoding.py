from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from src.services.errors import InputError

JPEG_MIME_TYPE = "image/jpeg"


def encode_jpeg(image_bytes: bytes, quality: int = 80) -> bytes:
    """Decode any Pillow-readable image and re-encode it as an RGB JPEG."""
    if not image_bytes:
        raise InputError("Could not process image: no data")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            rgb = image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as err:
        raise InputError(f"Could not process image: {err}") from err

    buffer = io.BytesIO()
    try:
        rgb.save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError) as err:
        raise InputError(f"Could not encode image as JPEG: {err}") from err
    return buffer.getvalue()

"""Helpers to turn uploaded images into data URLs the chat endpoint accepts."""

import base64
import mimetypes
from pathlib import Path

ALLOWED_IMAGE_TYPES = {
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "image/bmp",
}


def image_to_data_url(path) -> str:
    """Read an image file and return it as a base64 data URL."""
    path = Path(path)
    mime, _ = mimetypes.guess_type(path.name)
    if mime not in ALLOWED_IMAGE_TYPES:
        raise ValueError(f"Unsupported image type for {path.name}: {mime or 'unknown'}")
    raw = path.read_bytes()
    if not raw:
        raise ValueError(f"Image file {path.name} is empty.")
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"

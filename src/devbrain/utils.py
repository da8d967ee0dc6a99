"""Shared utility functions for DevBrain."""

import base64
from pathlib import Path

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_MIME_TYPES


def image_to_data_url(path: Path) -> str:
    """Read an image file into a base64 data URL.

    Args:
        path: Image file; the mime type is taken from its extension

    Returns:
        A ``data:<mime>;base64,...`` string
    """
    mime_type = IMAGE_MIME_TYPES.get(path.suffix.lower(), "image/png")
    data = base64.b64encode(path.read_bytes()).decode("utf-8")
    return f"data:{mime_type};base64,{data}"


def as_data_url(image: str, default_mime: str = "image/png") -> str:
    """Return ``image`` as a data URL, wrapping bare base64 payloads."""
    if image.startswith("data:"):
        return image
    return f"data:{default_mime};base64,{image}"

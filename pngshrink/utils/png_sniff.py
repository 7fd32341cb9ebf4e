"""Content-based image type detection.

Files are identified by what Pillow finds in their header, never by their
extension, so a ``.png`` text file is rejected and an extensionless PNG is
accepted.
"""
from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"


def sniff_mime_type(path: str | Path) -> str | None:
    """Return the MIME type of the image at *path*, or ``None`` if unknown.

    Only the header is read; pixel data is not decoded.
    """

    try:
        with Image.open(path) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError) as exc:
        logger.debug("Could not identify %s: %s", path, exc)
        return None
    return mime


def is_png(path: str | Path) -> bool:
    path = Path(path)
    if not path.is_file():
        return False
    return sniff_mime_type(path) == PNG_MIME_TYPE

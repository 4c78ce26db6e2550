"""Image storage for product uploads."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from app.validation.validators import ImageUpload

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


class ImageStorage(Protocol):
    """Destination for validated image uploads."""

    def save(self, image: ImageUpload) -> str:
        """Persist ``image`` and return the URL it is served from."""
        ...


class LocalImageStorage:
    """Write uploads to a local directory served under ``/uploads``."""

    def __init__(self, directory: str | Path, *, url_prefix: str = UPLOADS_URL_PREFIX) -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, image: ImageUpload) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        extension = image.mimetype.split("/", 1)[1]
        filename = f"{image.fieldname}-{uuid4().hex}.{extension}"
        (self.directory / filename).write_bytes(image.buffer)
        logger.info("Stored upload %s (%d bytes)", filename, len(image.buffer))
        return f"{self.url_prefix}/{filename}"

"""
Local storage for uploaded product images
"""

import logging
import re
import uuid
from pathlib import Path

from fastapi import UploadFile

from storefront.config.settings import Settings, get_settings
from storefront.core.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

DEFAULT_IMAGES_DIR = Path(__file__).parent.parent / "static" / "productImages"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ProductImageStorage:
    """Validates and writes product images under PRODUCT_IMAGES_DIR"""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.directory = Path(self.settings.PRODUCT_IMAGES_DIR or DEFAULT_IMAGES_DIR)

    def _safe_name(self, filename: str) -> str:
        base = Path(filename).name
        extension = base.rsplit(".", 1)[-1].lower() if "." in base else ""
        if extension not in self.settings.allowed_extensions:
            raise InvalidImageError(
                f"Image type '{extension or 'unknown'}' not allowed; use {', '.join(self.settings.allowed_extensions)}"
            )
        return f"{uuid.uuid4().hex[:8]}_{_UNSAFE_CHARS.sub('_', base)}"

    async def save(self, upload: UploadFile) -> str:
        """
        Store an uploaded image

        Returns:
            The stored file name, as referenced by Product.image_name
        """
        name = self._safe_name(upload.filename or "")
        content = await upload.read()
        if len(content) > self.settings.MAX_FILE_SIZE:
            raise InvalidImageError(f"Image exceeds {self.settings.MAX_FILE_SIZE} bytes")

        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / name).write_bytes(content)
        logger.info(f"Stored product image {name} ({len(content)} bytes)")
        return name

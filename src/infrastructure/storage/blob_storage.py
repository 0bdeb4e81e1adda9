# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Azure Blob Storage uploads for images and documents.

Images (school logos, profile photos, student pictures) are resized to a
fixed width and re-encoded as JPEG before upload. Documents (mentor
credentials, national IDs) are stored as-is with a content type derived
from the file extension.

Example:
    from src.infrastructure.storage import BlobStorageClient

    storage = BlobStorageClient(settings.azure_storage)
    url = await storage.upload_image(await file.read(), file.filename)
"""

import asyncio
import io
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Optional

from azure.core.exceptions import AzureError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient
from PIL import Image, UnidentifiedImageError

from src.core.config.settings import AzureStorageSettings

logger = logging.getLogger(__name__)

JPEG_QUALITY = 60

DOCUMENT_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageError(Exception):
    """Exception raised for blob storage failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Azure or Pillow error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class InvalidImageError(StorageError):
    """Raised when an uploaded image cannot be decoded."""

    pass


@dataclass
class UploadedFile:
    """A file part read from a multipart request.

    Attributes:
        filename: Client-supplied file name.
        content: File bytes.
        content_type: Client-supplied MIME type.
    """

    filename: str
    content: bytes
    content_type: str | None = None


def content_type_for(filename: str) -> str:
    """Pick a document content type from the file extension."""
    _, ext = os.path.splitext(filename or "")
    return DOCUMENT_CONTENT_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)


def resize_image(data: bytes, width: int) -> bytes:
    """Resize an image to the given width and encode it as JPEG.

    The aspect ratio is kept. Images with transparency are flattened to RGB.

    Raises:
        InvalidImageError: If the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGB")
            height = max(1, round(img.height * width / img.width))
            resized = img.resize((width, height), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Invalid image file", e) from e

    out = io.BytesIO()
    resized.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()


class BlobStorageClient:
    """Uploads files to a single Azure Blob Storage container.

    Raises:
        StorageError: On construction, if the account name, key or container
            name is not configured.
    """

    def __init__(self, settings: AzureStorageSettings) -> None:
        if not (settings.account_name and settings.account_key and settings.container_name):
            raise StorageError("Azure storage environment variables are not properly set.")
        self._settings = settings

    def _service_client(self) -> BlobServiceClient:
        return BlobServiceClient(
            self._settings.account_url,
            credential={
                "account_name": self._settings.account_name,
                "account_key": self._settings.account_key.get_secret_value(),
            },
        )

    async def _upload(self, blob_name: str, data: bytes, content_type: str) -> str:
        try:
            async with self._service_client() as service:
                blob = service.get_blob_client(self._settings.container_name, blob_name)
                await blob.upload_blob(
                    data,
                    overwrite=True,
                    content_settings=ContentSettings(content_type=content_type),
                )
                url = blob.url
        except AzureError as e:
            raise StorageError(f"Failed to upload blob: {blob_name}", e) from e

        logger.info("Uploaded blob %s (%s, %d bytes)", blob_name, content_type, len(data))
        return url

    async def upload_image(self, data: bytes, filename: str | None = None) -> str:
        """Resize an image and upload it as ``{uuid}.jpeg``.

        Args:
            data: Raw image bytes.
            filename: Original file name, only used for logging.

        Returns:
            The blob URL.

        Raises:
            InvalidImageError: If the bytes are not an image.
            StorageError: If the upload fails.
        """
        logger.debug("Resizing image %s", filename)
        jpeg = await asyncio.to_thread(resize_image, data, self._settings.image_width)
        return await self._upload(f"{uuid.uuid4()}.jpeg", jpeg, "image/jpeg")

    async def upload_document(
        self,
        data: bytes,
        filename: str,
        blob_path: str | None = None,
    ) -> str:
        """Upload a document unchanged.

        Args:
            data: File bytes.
            filename: Original file name; its extension picks the content type.
            blob_path: Target blob name. Defaults to ``{uuid}{ext}``.

        Returns:
            The blob URL.

        Raises:
            StorageError: If the upload fails.
        """
        if blob_path is None:
            _, ext = os.path.splitext(filename or "")
            blob_path = f"{uuid.uuid4()}{ext.lower()}"
        return await self._upload(blob_path, data, content_type_for(filename))


_storage_client: BlobStorageClient | None = None


def require_storage(storage: "BlobStorageClient | None") -> "BlobStorageClient":
    """Return the storage client, or raise if uploads are not configured."""
    if storage is None:
        raise StorageError("Azure storage environment variables are not properly set.")
    return storage


def get_storage_client(settings: AzureStorageSettings) -> BlobStorageClient:
    """Get or create the shared storage client.

    Raises:
        StorageError: If Azure storage is not configured.
    """
    global _storage_client

    if _storage_client is None:
        _storage_client = BlobStorageClient(settings)
    return _storage_client

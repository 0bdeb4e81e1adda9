# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Blob storage for uploaded images and documents."""

from src.infrastructure.storage.blob_storage import (
    BlobStorageClient,
    InvalidImageError,
    StorageError,
    UploadedFile,
    content_type_for,
    get_storage_client,
    require_storage,
    resize_image,
)

__all__ = [
    "BlobStorageClient",
    "InvalidImageError",
    "StorageError",
    "UploadedFile",
    "content_type_for",
    "get_storage_client",
    "require_storage",
    "resize_image",
]

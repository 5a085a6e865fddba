# src/storage/storage_factory.py - v1
"""Factory: instantiate the object storage backend from configuration."""

from __future__ import annotations

import logging

from robodoc.config.settings import MISSING_STORAGE_MESSAGE, ConfigurationError, Settings
from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.local_storage import LocalObjectStorage

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> BaseObjectStorage:
    """Create the storage backend selected by STORAGE_BACKEND.

    Args:
        settings: Application settings.

    Returns:
        BaseObjectStorage instance bound to settings.storage_bucket.

    Raises:
        ConfigurationError: If the S3 backend lacks endpoint or access key.
        ValueError: If the backend type is not supported.
    """
    if settings.storage_backend == "local":
        return LocalObjectStorage(
            root=settings.local_storage_root,
            bucket=settings.storage_bucket,
            public_base_url=settings.storage_public_base_url,
            create_bucket=settings.local_storage_create_bucket,
        )

    if settings.storage_backend == "s3":
        if not settings.storage_configured:
            raise ConfigurationError(MISSING_STORAGE_MESSAGE)
        from robodoc.storage.s3_storage import S3ObjectStorage

        return S3ObjectStorage(
            bucket=settings.storage_bucket,
            endpoint_url=settings.storage_endpoint_url,
            access_key=settings.storage_access_key,
            secret_key=settings.storage_secret_key or None,
            region=settings.storage_region or None,
            public_base_url=settings.storage_public_base_url,
        )

    raise ValueError(f"Unsupported storage backend: {settings.storage_backend!r}")


def create_storage_or_none(settings: Settings) -> BaseObjectStorage | None:
    """Like create_storage, but return None when storage is not configured.

    Controllers treat None as "storage-dependent actions disabled" and
    report MISSING_STORAGE_MESSAGE on each attempt.
    """
    try:
        return create_storage(settings)
    except ConfigurationError as e:
        logger.warning("Storage disabled: %s", e)
        return None

"""Durable storage of picked media."""

from .s3_storage import S3Storage
from .transfer import media_url, read_manifest, storage_key, upload_all, write_manifest

__all__ = ["S3Storage", "media_url", "read_manifest", "storage_key", "upload_all", "write_manifest"]

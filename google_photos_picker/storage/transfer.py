"""Copy picked media and its metadata into S3."""

import json
import logging
import os
from typing import List, Optional, Sequence

import requests
from urllib3.exceptions import HTTPError as UrllibHTTPError

from google_photos_picker.models import (
    PickedItem,
    StorageError,
    TransferOptions,
    TransportError,
)
from google_photos_picker.storage.s3_storage import S3Storage
from google_photos_picker.utils import http as picker_http
from google_photos_picker.utils.auth import TokenProvider

logger = logging.getLogger(__name__)


def media_url(base_url: str, width: int = 0, height: int = 0) -> str:
    """Build the download URL for a media file.

    Args:
        base_url: The item's baseUrl
        width: Requested width, 0 for unset
        height: Requested height, 0 for unset

    Returns:
        base_url with a ``=w``/``=h`` size directive, or unchanged for the
        native resolution
    """
    # Google takes both dimensions as one directive joined by "-"
    if width and height:
        return f"{base_url}=w{width}-h{height}"
    if width:
        return f"{base_url}=w{width}"
    if height:
        return f"{base_url}=h{height}"
    return base_url


def storage_key(item: PickedItem, options: TransferOptions) -> str:
    """S3 key an item is stored under."""
    key = f"{options.prefix.rstrip('/')}/{item.id}"
    if options.add_extension:
        extension = os.path.splitext(item.media_file.filename)[1]
        if extension:
            key = f"{key}{extension}"
    return key


def _storage_for(options: TransferOptions, storage: Optional[S3Storage]) -> S3Storage:
    return storage if storage is not None else S3Storage(options.bucket)


def download_and_store(
    access_token: str,
    item: PickedItem,
    options: TransferOptions,
    storage: S3Storage,
    http: Optional[requests.Session] = None,
) -> str:
    """Fetch an item and overwrite whatever is already stored at its key.

    Overwriting means a re-run picks up media that changed on the Google side,
    such as a new size.

    Returns:
        The key the item was stored under
    """
    url = media_url(item.media_file.base_url, options.width, options.height)
    key = storage_key(item, options)

    response = picker_http.request(http, access_token, "GET", url, stream=True)
    try:
        picker_http.raise_for_provider_error(response)
        response.raw.decode_content = True
        try:
            storage.upload_stream(key, response.raw, item.media_file.mime_type)
        except (UrllibHTTPError, requests.RequestException) as e:
            # The body is read lazily by the upload, so a dropped connection surfaces here
            raise TransportError(f"Download of {item.id} failed: {e}") from e
    finally:
        response.close()

    logger.info("Stored %s (%s) at %s", item.id, item.media_file.filename, key)
    return key


def write_manifest(
    items: Sequence[PickedItem], options: TransferOptions, storage: Optional[S3Storage] = None
) -> None:
    """Write the JSON manifest of all items, replacing any previous one."""
    data = json.dumps([item.to_dict() for item in items]).encode("utf-8")
    _storage_for(options, storage).put_object(options.manifest_key, data, "application/json")
    logger.info("Wrote manifest of %d items to %s", len(items), options.manifest_key)


def read_manifest(
    options: TransferOptions, storage: Optional[S3Storage] = None
) -> List[PickedItem]:
    """Read back the manifest written by upload_all.

    Raises:
        StorageError: If the manifest cannot be read or is not valid JSON
    """
    buf = _storage_for(options, storage).get_object(options.manifest_key)
    try:
        data = json.loads(buf)
    except ValueError as e:
        logger.error("Error parsing manifest %s: %s", options.manifest_key, e)
        raise StorageError(f"Invalid manifest at {options.manifest_key}: {e}") from e
    return [PickedItem.from_dict(item) for item in data]


def upload_all(
    token_provider: TokenProvider,
    items: Sequence[PickedItem],
    options: TransferOptions,
    storage: Optional[S3Storage] = None,
    http: Optional[requests.Session] = None,
) -> None:
    """Store every item and then the manifest in S3.

    Items are transferred one at a time in order. The first failure aborts the
    batch; items already stored are left in place.

    Args:
        token_provider: Supplies the bearer token for the downloads
        items: Items returned by poll or list_picked_items
        options: Bucket, keys and size settings
        storage: S3 storage for options.bucket (created if not provided)
        http: Session used for the downloads
    """
    storage = _storage_for(options, storage)
    token = token_provider.get_token()

    for i, item in enumerate(items, 1):
        logger.debug("Transferring %d/%d: %s", i, len(items), item.media_file.filename)
        if not token.is_valid(token_provider.clock()):
            token = token_provider.get_token()
        download_and_store(token.access_token, item, options, storage, http=http)

    write_manifest(items, options, storage)

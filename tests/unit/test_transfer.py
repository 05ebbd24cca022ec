"""Unit tests for copying picked media to S3."""

import json
from unittest.mock import MagicMock

import pytest
from urllib3.exceptions import ProtocolError

from google_photos_picker.models import (
    PickedItem,
    ProviderError,
    StorageError,
    Token,
    TransferOptions,
    TransportError,
)
from google_photos_picker.storage.transfer import (
    download_and_store,
    media_url,
    read_manifest,
    storage_key,
    upload_all,
)
from google_photos_picker.utils.auth import TokenProvider


@pytest.fixture
def options():
    """Default options for the test bucket."""
    return TransferOptions.for_bucket("test-bucket")


@pytest.fixture
def items(picked_item_data):
    """Two picked items."""
    return [
        PickedItem.from_dict(picked_item_data("item-1", filename="IMG_0001.jpg")),
        PickedItem.from_dict(picked_item_data("item-2", filename="VID_0002.mp4", mime_type="video/mp4")),
    ]


@pytest.mark.parametrize(
    "width,height,expected",
    [
        (0, 0, "https://lh3.googleusercontent.com/x"),
        (2048, 0, "https://lh3.googleusercontent.com/x=w2048"),
        (0, 1024, "https://lh3.googleusercontent.com/x=h1024"),
        (2048, 1024, "https://lh3.googleusercontent.com/x=w2048-h1024"),
    ],
)
def test_media_url(width, height, expected):
    """Test size directives on the download URL."""
    assert media_url("https://lh3.googleusercontent.com/x", width, height) == expected


def test_storage_key(items, options):
    """Test keys with and without the file extension."""
    assert storage_key(items[0], options) == "photos/item-1"

    options.add_extension = True
    options.prefix = "picked"
    assert storage_key(items[1], options) == "picked/item-2.mp4"


def test_storage_key_without_extension(picked_item_data, options):
    """Test that add_extension does nothing for names without one."""
    item = PickedItem.from_dict(picked_item_data("item-3", filename="README"))
    options.add_extension = True

    assert storage_key(item, options) == "photos/item-3"


def test_download_requests_size(items, options, storage, fake_s3, http, response_factory):
    """Test the download URL and stored content type."""
    options.width = 2048
    http.request.return_value = response_factory(content=b"jpeg-bytes")

    key = download_and_store("test_token", items[0], options, storage, http=http)

    assert key == "photos/item-1"
    args, kwargs = http.request.call_args
    assert args == ("GET", "https://lh3.googleusercontent.com/item-1=w2048")
    assert kwargs["stream"] is True
    assert kwargs["headers"]["Authorization"] == "Bearer test_token"
    assert fake_s3.objects["test-bucket/photos/item-1"] == {
        "Body": b"jpeg-bytes",
        "ContentType": "image/jpeg",
    }


def test_upload_overwrites(items, options, storage, fake_s3, http, response_factory):
    """Test that re-uploading an item replaces the stored content."""
    http.request.side_effect = [
        response_factory(content=b"first"),
        response_factory(content=b"second"),
    ]

    download_and_store("test_token", items[0], options, storage, http=http)
    download_and_store("test_token", items[0], options, storage, http=http)

    assert fake_s3.objects["test-bucket/photos/item-1"]["Body"] == b"second"
    assert len(fake_s3.objects) == 1


def test_upload_all_stores_items_and_manifest(
    items, options, storage, fake_s3, token_provider, http, response_factory
):
    """Test a full batch transfer."""
    http.request.side_effect = [
        response_factory(content=b"photo"),
        response_factory(content=b"video"),
    ]

    upload_all(token_provider, items, options, storage=storage, http=http)

    assert fake_s3.objects["test-bucket/photos/item-1"]["Body"] == b"photo"
    assert fake_s3.objects["test-bucket/photos/item-2"]["Body"] == b"video"
    assert fake_s3.objects["test-bucket/photos/item-2"]["ContentType"] == "video/mp4"
    manifest = fake_s3.objects["test-bucket/photos.json"]
    assert manifest["ContentType"] == "application/json"
    data = json.loads(manifest["Body"])
    assert [entry["id"] for entry in data] == ["item-1", "item-2"]
    assert data[0]["mediaFile"]["mediaFileMetadata"] == {
        "width": 4032,
        "height": 3024,
        "cameraMake": "Google",
        "cameraModel": "Pixel 8",
    }


def test_upload_all_aborts_on_first_failure(
    items, options, storage, fake_s3, token_provider, http, response_factory
):
    """Test that a failed download stops the batch without rolling back."""
    http.request.side_effect = [
        response_factory(content=b"photo"),
        response_factory(
            {"error": {"code": 404, "status": "NOT_FOUND", "message": "Media item not found"}},
            status=404,
        ),
    ]

    with pytest.raises(ProviderError):
        upload_all(token_provider, items, options, storage=storage, http=http)

    assert set(fake_s3.objects) == {"test-bucket/photos/item-1"}


def test_download_http_error_without_body(items, options, storage, http, response_factory):
    """Test a non-JSON error response."""
    http.request.return_value = response_factory(content=b"<html>Forbidden</html>", status=403)

    with pytest.raises(TransportError) as exc_info:
        download_and_store("test_token", items[0], options, storage, http=http)

    assert exc_info.value.status_code == 403


def test_manifest_round_trip(items, options, storage, token_provider, http, response_factory):
    """Test that the manifest reads back into the same items."""
    http.request.side_effect = [
        response_factory(content=b"photo"),
        response_factory(content=b"video"),
    ]
    upload_all(token_provider, items, options, storage=storage, http=http)

    assert read_manifest(options, storage=storage) == items


def test_read_missing_manifest(options, storage):
    """Test reading a manifest that was never written."""
    with pytest.raises(StorageError):
        read_manifest(options, storage=storage)


def test_read_invalid_manifest(options, storage):
    """Test reading a manifest that is not JSON."""
    storage.put_object(options.manifest_key, b"not json", "application/json")

    with pytest.raises(StorageError):
        read_manifest(options, storage=storage)


def test_connection_dropped_mid_download(items, options, storage, fake_s3, http, response_factory):
    """Test that a body cut off while streaming raises TransportError."""
    response = response_factory(content=b"")
    response.raw = MagicMock()
    response.raw.read.side_effect = ProtocolError(
        "Connection broken: IncompleteRead(10 bytes read, 99990 more expected)"
    )
    http.request.return_value = response

    with pytest.raises(TransportError) as exc_info:
        download_and_store("test_token", items[0], options, storage, http=http)

    assert isinstance(exc_info.value.__cause__, ProtocolError)
    assert fake_s3.objects == {}


def test_upload_all_refreshes_expired_token(
    items, options, storage, credentials, http, response_factory
):
    """Test that one token serves the batch until it expires."""
    now = [1000.0]
    provider = TokenProvider(
        credentials,
        http=http,
        clock=lambda: now[0],
        token=Token(access_token="first", expires_in=60, expires_at=1060.0),
    )
    http.post.return_value = response_factory({"access_token": "second", "expires_in": 3600})

    def download(method, url, **kwargs):
        now[0] += 65
        return response_factory(content=b"bytes")

    http.request.side_effect = download

    upload_all(provider, items, options, storage=storage, http=http)

    tokens = [c.kwargs["headers"]["Authorization"] for c in http.request.call_args_list]
    assert tokens == ["Bearer first", "Bearer second"]
    assert http.post.call_count == 1

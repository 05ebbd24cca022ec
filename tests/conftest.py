"""Test configuration for pytest."""

import io
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests
from botocore.exceptions import ClientError

from google_photos_picker.models import Credentials, Token
from google_photos_picker.storage.s3_storage import S3Storage
from google_photos_picker.utils.auth import TokenProvider

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

NOW = 1_700_000_000.0


@pytest.fixture(autouse=True)
def setup_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)
    yield


def make_response(
    data: Any = None, status: int = 200, content: Optional[bytes] = None
) -> requests.Response:
    """Build a real requests.Response with a JSON or raw body."""
    response = requests.Response()
    response.status_code = status
    if content is None:
        content = json.dumps(data).encode("utf-8")
    response._content = content
    response.raw = io.BytesIO(content)
    return response


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client."""

    def __init__(self):
        self.objects: Dict[str, Dict[str, Any]] = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[f"{Bucket}/{Key}"] = {"Body": Body, "ContentType": ContentType}

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        self.objects[f"{Bucket}/{Key}"] = {
            "Body": Fileobj.read(),
            "ContentType": (ExtraArgs or {}).get("ContentType"),
        }

    def get_object(self, Bucket, Key):
        try:
            obj = self.objects[f"{Bucket}/{Key}"]
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": io.BytesIO(obj["Body"]), "ContentType": obj["ContentType"]}


@pytest.fixture
def response_factory() -> Callable[..., requests.Response]:
    """Factory for fake HTTP responses."""
    return make_response


@pytest.fixture
def http() -> MagicMock:
    """A mock requests session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def credentials() -> Credentials:
    """Test credentials."""
    return Credentials(
        client_id="test_client_id",
        client_secret="test_client_secret",
        refresh_token="test_refresh_token",
    )


@pytest.fixture
def token_provider(credentials, http) -> TokenProvider:
    """A token provider holding a token valid for another hour."""
    return TokenProvider(
        credentials,
        http=http,
        clock=lambda: NOW,
        token=Token(access_token="test_token", expires_in=3600, expires_at=NOW + 3600),
    )


@pytest.fixture
def fake_s3() -> FakeS3Client:
    """An empty in-memory S3."""
    return FakeS3Client()


@pytest.fixture
def storage(fake_s3) -> S3Storage:
    """S3 storage backed by the in-memory client."""
    return S3Storage("test-bucket", client=fake_s3)


@pytest.fixture
def picked_item_data() -> Callable[..., Dict[str, Any]]:
    """Factory for mediaItems entries as returned by the API."""

    def _make(item_id: str, filename: str = "IMG_0001.jpg", mime_type: str = "image/jpeg"):
        return {
            "id": item_id,
            "createTime": "2024-01-01T00:00:00Z",
            "type": "PHOTO",
            "mediaFile": {
                "baseUrl": f"https://lh3.googleusercontent.com/{item_id}",
                "mimeType": mime_type,
                "filename": filename,
                "mediaFileMetadata": {
                    "width": 4032,
                    "height": 3024,
                    "cameraMake": "Google",
                    "cameraModel": "Pixel 8",
                },
            },
        }

    return _make

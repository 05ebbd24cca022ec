"""AWS S3 storage for picked media and manifests."""

import logging
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from google_photos_picker.models import StorageError

logger = logging.getLogger(__name__)


class S3Storage:
    """Handles S3 operations for one bucket."""

    def __init__(
        self,
        bucket_name: str,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        """
        Initialize S3 storage.

        Args:
            bucket_name: S3 bucket name
            region: AWS region (optional, uses the default configuration if not provided)
            access_key_id: AWS access key ID (optional, uses default credentials if not provided)
            secret_access_key: AWS secret access key (optional)
            client: Preconfigured boto3 S3 client (optional)
        """
        self.bucket_name = bucket_name
        self.region = region

        if client is not None:
            self.s3_client = client
        elif access_key_id and secret_access_key:
            self.s3_client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )
        else:
            # Use default credentials (from environment or IAM role)
            self.s3_client = boto3.client("s3", region_name=region)

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """Write bytes to a key, replacing any existing object."""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to write s3://%s/%s: %s", self.bucket_name, key, e)
            raise StorageError(f"Failed to write {key} to {self.bucket_name}: {e}") from e
        logger.debug("Wrote s3://%s/%s", self.bucket_name, key)

    def upload_stream(self, key: str, fileobj: BinaryIO, content_type: str) -> None:
        """Stream a file-like object to a key, replacing any existing object."""
        try:
            self.s3_client.upload_fileobj(
                fileobj,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to upload s3://%s/%s: %s", self.bucket_name, key, e)
            raise StorageError(f"Failed to upload {key} to {self.bucket_name}: {e}") from e
        logger.debug("Uploaded s3://%s/%s", self.bucket_name, key)

    def get_object(self, key: str) -> bytes:
        """Read the full contents of a key."""
        try:
            obj = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            body = obj["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to read s3://%s/%s: %s", self.bucket_name, key, e)
            raise StorageError(f"error fetching {key} from {self.bucket_name}: {e}") from e

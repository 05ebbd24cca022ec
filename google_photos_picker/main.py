"""Main module for Google Photos Picker."""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from tabulate import tabulate

from google_photos_picker.config import Settings, get_env, load_settings
from google_photos_picker.models import (
    Credentials,
    GooglePhotosError,
    PickedItem,
    TransferOptions,
)
from google_photos_picker.picker.session import Deadline, LoggingObserver, create_session, poll
from google_photos_picker.storage.s3_storage import S3Storage
from google_photos_picker.storage.transfer import read_manifest, upload_all
from google_photos_picker.utils.auth import TokenProvider, load_credentials

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Google Photos Picker")

    # Global arguments
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--bucket", "-b", type=str, help="Destination S3 bucket (env: AWS_S3_BUCKET)")
    parser.add_argument("--region", type=str, help="AWS region (env: AWS_REGION)")
    parser.add_argument(
        "--manifest-key", type=str, default="photos.json", help="S3 key of the JSON manifest"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands", required=True)

    # Pick command
    pick_parser = subparsers.add_parser("pick", help="Pick photos and copy them to S3")
    pick_parser.add_argument("--client-id", type=str, help="Google OAuth client ID (env: GOOGLE_CLIENT_ID)")
    pick_parser.add_argument(
        "--client-secret", type=str, help="Google OAuth client secret (env: GOOGLE_CLIENT_SECRET)"
    )
    pick_parser.add_argument(
        "--token", "-t", type=str, help="Google OAuth refresh token (env: GOOGLE_REFRESH_TOKEN)"
    )
    pick_parser.add_argument(
        "--token-file", type=str, help="Authorized user token.json (env: GOOGLE_TOKEN_FILE)"
    )
    pick_parser.add_argument("--prefix", type=str, default="photos/", help="S3 key prefix for media")
    pick_parser.add_argument("--width", type=int, default=0, help="Requested width, 0 for native")
    pick_parser.add_argument("--height", type=int, default=0, help="Requested height, 0 for native")
    pick_parser.add_argument(
        "--add-extension", action="store_true", help="Append the original file extension to keys"
    )
    pick_parser.add_argument(
        "--timeout", type=float, help="Give up waiting for the user after this many seconds"
    )

    # Manifest command
    subparsers.add_parser("manifest", help="Show the manifest stored in S3")

    return parser.parse_args(argv)


def resolve_credentials(args: argparse.Namespace, settings: Settings) -> Credentials:
    """Build credentials from flags, falling back to the environment.

    Raises:
        ValueError: If no complete set of credentials was given
    """
    token_file = args.token_file or settings.token_file
    if token_file:
        return load_credentials(token_file)

    client_id = args.client_id or settings.client_id
    client_secret = args.client_secret or settings.client_secret
    refresh_token = args.token or settings.refresh_token
    if not (client_id and client_secret and refresh_token):
        raise ValueError(
            "Google client ID, client secret and refresh token are required "
            "(or a token file)"
        )
    return Credentials(client_id=client_id, client_secret=client_secret, refresh_token=refresh_token)


def print_items(items: List[PickedItem]) -> None:
    """Print picked items as a table."""
    rows = []
    for item in items:
        metadata = item.media_file.metadata
        rows.append(
            [
                item.id[:8],
                item.media_file.filename,
                item.type.value,
                f"{metadata.width}x{metadata.height}",
                metadata.camera_make,
                metadata.camera_model,
            ]
        )
    print(
        tabulate(
            rows,
            headers=["ID", "Filename", "Type", "Dimensions", "Camera Make", "Camera Model"],
            tablefmt="psql",
        )
    )
    print(f"\nTotal items: {len(items)}")


def pick(args: argparse.Namespace, settings: Settings, storage: S3Storage) -> None:
    """Run the whole picking workflow."""
    token_provider = TokenProvider(resolve_credentials(args, settings))

    session = create_session(token_provider)
    print(f"Visit this URL to pick photos for the app:\n{session.picker_uri}\n")

    cancel = Deadline(args.timeout) if args.timeout else None
    items = poll(session, cancel=cancel, observers=[LoggingObserver()])
    print_items(items)

    print(f"Uploading {len(items)} items to S3")
    options = TransferOptions(
        bucket=storage.bucket_name,
        manifest_key=args.manifest_key,
        prefix=args.prefix,
        width=args.width,
        height=args.height,
        add_extension=args.add_extension,
    )
    upload_all(token_provider, items, options, storage=storage)
    print("Uploaded photos to S3")


def show_manifest(args: argparse.Namespace, storage: S3Storage) -> None:
    """Print the manifest stored in S3."""
    options = TransferOptions(bucket=storage.bucket_name, manifest_key=args.manifest_key)
    print_items(read_manifest(options, storage=storage))


def main() -> None:
    """Main entry point for the Google Photos Picker CLI."""
    args = parse_arguments()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()

    try:
        bucket = args.bucket or get_env("AWS_S3_BUCKET", required=True)
    except ValueError as e:
        print(f"Please specify --bucket ({e})")
        sys.exit(2)

    storage = S3Storage(
        bucket,
        region=args.region or settings.region,
        access_key_id=settings.access_key_id,
        secret_access_key=settings.secret_access_key,
    )

    try:
        if args.command == "pick":
            pick(args, settings, storage)
        elif args.command == "manifest":
            show_manifest(args, storage)
    except (GooglePhotosError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(1)


if __name__ == "__main__":
    main()

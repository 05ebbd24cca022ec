"""Google Photos Picker: copy user-picked media into S3."""

from google_photos_picker.models import (
    AuthError,
    CallbackAbort,
    Cancelled,
    Credentials,
    GooglePhotosError,
    PickedItem,
    PickerSession,
    ProviderError,
    StorageError,
    TransferOptions,
    TransportError,
)
from google_photos_picker.picker import (
    CallbackObserver,
    Deadline,
    PollObserver,
    create_session,
    list_picked_items,
    poll,
)
from google_photos_picker.storage import S3Storage, read_manifest, upload_all
from google_photos_picker.utils import TokenProvider, load_credentials

__all__ = [
    "AuthError",
    "CallbackAbort",
    "CallbackObserver",
    "Cancelled",
    "Credentials",
    "Deadline",
    "GooglePhotosError",
    "PickedItem",
    "PickerSession",
    "PollObserver",
    "ProviderError",
    "S3Storage",
    "StorageError",
    "TokenProvider",
    "TransferOptions",
    "TransportError",
    "create_session",
    "list_picked_items",
    "load_credentials",
    "poll",
    "read_manifest",
    "upload_all",
]

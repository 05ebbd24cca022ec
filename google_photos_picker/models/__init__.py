"""Models for Google Photos Picker."""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")

PICKER_API_BASE = "https://photospicker.googleapis.com/v1"


class GooglePhotosError(Exception):
    """Base exception for Google Photos operations."""


class AuthError(GooglePhotosError):
    """Raised when the OAuth token exchange fails."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ProviderError(GooglePhotosError):
    """Structured error body returned by the picker API."""

    def __init__(self, code: int, status: str, message: str, details: Any = None):
        super().__init__(message)
        self.code = code
        self.status = status
        self.message = message
        self.details = details

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderError":
        return cls(
            code=int(data.get("code") or 0),
            status=data.get("status", ""),
            message=data.get("message", ""),
            details=data.get("details"),
        )


class TransportError(GooglePhotosError):
    """Raised on network failures or responses that are not structured errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CallbackAbort(GooglePhotosError):
    """Raised when a poll observer asks to stop polling."""

    def __init__(self, message: str = "callback returned false, so polling was halted"):
        super().__init__(message)


class Cancelled(GooglePhotosError):
    """Raised when the caller's cancellation signal fires during polling."""


class StorageError(GooglePhotosError):
    """Raised when reading or writing durable storage fails."""


@dataclass(frozen=True)
class Success(Generic[T]):
    """A parsed response carrying a value."""
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A parsed response carrying a structured error."""
    error: GooglePhotosError

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure]


@dataclass(frozen=True)
class Credentials:
    """Identifies the application and the user whose library is being read.

    The refresh token is the long-lived grant obtained from the user's first
    authorization. Access tokens are cached by a TokenProvider, not here.
    """
    client_id: str
    client_secret: str
    refresh_token: str


@dataclass
class Token:
    """A Google OAuth2 access token."""
    access_token: str
    expires_in: int
    expires_at: float
    scope: str = ""
    token_type: str = "Bearer"

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now


def parse_duration(value: Optional[str]) -> Optional[float]:
    """Parse a protobuf JSON duration such as "5s" or "1.500s" into seconds."""
    if not value:
        return None
    if not value.endswith("s"):
        raise ValueError(f"Invalid duration: {value!r}")
    return float(value[:-1])


@dataclass
class PollingConfig:
    """Google's recommended polling configuration for a session."""
    poll_interval: float = 0.0
    timeout_in: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PollingConfig":
        return cls(
            poll_interval=parse_duration(data.get("pollInterval")) or 0.0,
            timeout_in=parse_duration(data.get("timeoutIn")),
        )


class PollState(str, enum.Enum):
    """Lifecycle of a poll loop."""
    POLLING = "polling"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class PickerSession:
    """A session where a user picks photos in the Google Photos Picker UI."""
    id: str
    picker_uri: str
    polling_config: PollingConfig = field(default_factory=PollingConfig)
    expire_time: str = ""
    media_items_set: bool = False
    state: PollState = PollState.POLLING
    token_provider: Any = field(default=None, repr=False, compare=False)

    @property
    def polling_uri(self) -> str:
        return f"{PICKER_API_BASE}/sessions/{self.id}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PickerSession":
        return cls(
            id=data.get("id", ""),
            picker_uri=data.get("pickerUri", ""),
            polling_config=PollingConfig.from_dict(data.get("pollingConfig") or {}),
            expire_time=data.get("expireTime", ""),
            media_items_set=bool(data.get("mediaItemsSet", False)),
        )


class MediaType(str, enum.Enum):
    """Type of a picked media item."""
    TYPE_UNSPECIFIED = "TYPE_UNSPECIFIED"
    PHOTO = "PHOTO"
    VIDEO = "VIDEO"

    @classmethod
    def parse(cls, value: Optional[str]) -> "MediaType":
        try:
            return cls(value)
        except ValueError:
            return cls.TYPE_UNSPECIFIED


@dataclass(frozen=True)
class MediaFileMetadata:
    """Capture metadata of a media file."""
    width: int = 0
    height: int = 0
    camera_make: str = ""
    camera_model: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaFileMetadata":
        return cls(
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            camera_make=data.get("cameraMake", ""),
            camera_model=data.get("cameraModel", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cameraMake": self.camera_make,
            "cameraModel": self.camera_model,
        }


@dataclass(frozen=True)
class MediaFile:
    """Where and what a picked item's bytes are."""
    base_url: str
    mime_type: str
    filename: str
    metadata: MediaFileMetadata = field(default_factory=MediaFileMetadata)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaFile":
        return cls(
            base_url=data.get("baseUrl", ""),
            mime_type=data.get("mimeType", ""),
            filename=data.get("filename", ""),
            metadata=MediaFileMetadata.from_dict(data.get("mediaFileMetadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "mimeType": self.mime_type,
            "filename": self.filename,
            "mediaFileMetadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class PickedItem:
    """One media item the user selected."""
    id: str
    create_time: str
    type: MediaType
    media_file: MediaFile

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PickedItem":
        return cls(
            id=data.get("id", ""),
            create_time=data.get("createTime", ""),
            type=MediaType.parse(data.get("type")),
            media_file=MediaFile.from_dict(data.get("mediaFile") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createTime": self.create_time,
            "type": self.type.value,
            "mediaFile": self.media_file.to_dict(),
        }


@dataclass
class PickedItemsPage:
    """One page of the mediaItems listing."""
    items: List[PickedItem]
    next_page_token: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PickedItemsPage":
        return cls(
            items=[PickedItem.from_dict(item) for item in data.get("mediaItems") or []],
            next_page_token=data.get("nextPageToken") or "",
        )


@dataclass
class TransferOptions:
    """Where and how picked items are stored.

    A width or height of 0 means unset; with both unset the source's native
    resolution is requested.
    """
    bucket: str
    manifest_key: str = "photos.json"
    prefix: str = "photos/"
    width: int = 0
    height: int = 0
    add_extension: bool = False

    @classmethod
    def for_bucket(cls, bucket: str) -> "TransferOptions":
        return cls(bucket=bucket)

"""Configuration from environment variables."""

import os
from dataclasses import dataclass
from typing import Optional


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional default and required validation."""
    value = os.getenv(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set")
    return value


@dataclass
class Settings:
    """Settings for picking and storing photos."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    token_file: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None


def load_settings() -> Settings:
    """Load settings from the environment."""
    return Settings(
        client_id=get_env("GOOGLE_CLIENT_ID"),
        client_secret=get_env("GOOGLE_CLIENT_SECRET"),
        refresh_token=get_env("GOOGLE_REFRESH_TOKEN"),
        token_file=get_env("GOOGLE_TOKEN_FILE"),
        region=get_env("AWS_REGION"),
        access_key_id=get_env("AWS_ACCESS_KEY_ID"),
        secret_access_key=get_env("AWS_SECRET_ACCESS_KEY"),
    )

"""HTTP helpers for authenticated Google Photos Picker requests."""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from google_photos_picker.models import (
    Failure,
    ProviderError,
    Result,
    Success,
    TransportError,
)

logger = logging.getLogger(__name__)


def auth_headers(access_token: str) -> Dict[str, str]:
    """Headers sent with every authenticated picker request."""
    return {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json; charset=UTF-8",
    }


def request(
    http: Optional[requests.Session],
    access_token: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> requests.Response:
    """Make a standard Google Photos request.

    Args:
        http: Session to send the request with, or None for the requests module
        access_token: Bearer token
        method: HTTP method
        url: Request URL
        **kwargs: Passed through to requests (params, data, stream, ...)

    Returns:
        The raw response, whatever its status code

    Raises:
        TransportError: If the request could not be sent
    """
    client = http if http is not None else requests
    logger.debug("%s %s", method, url)
    try:
        return client.request(method, url, headers=auth_headers(access_token), **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"{method} {url} failed: {e}") from e


def read_response(
    response: requests.Response, parse: Callable[[Dict[str, Any]], Any]
) -> Result:
    """Read a JSON response into a Success or a Failure.

    A body carrying an ``error`` object becomes a Failure with a
    ProviderError regardless of status code. A body that is not JSON becomes
    a Failure with a TransportError.
    """
    try:
        data = response.json()
    except ValueError:
        return Failure(
            TransportError(
                f"Unexpected non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        )

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return Failure(ProviderError.from_dict(data["error"]))

    if not response.ok:
        return Failure(
            TransportError(
                f"Request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        )

    return Success(parse(data))


def raise_for_provider_error(response: requests.Response) -> None:
    """Raise if a non-JSON (media) response did not succeed."""
    if response.ok:
        return
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        raise ProviderError.from_dict(data["error"])
    raise TransportError(
        f"Request failed with HTTP {response.status_code}",
        status_code=response.status_code,
    )

"""Listing of the media items picked in a session."""

import logging
from typing import List, Optional

import requests

from google_photos_picker.models import (
    PICKER_API_BASE,
    PickedItem,
    PickedItemsPage,
    PickerSession,
)
from google_photos_picker.utils import http as picker_http

logger = logging.getLogger(__name__)

MEDIA_ITEMS_URL = f"{PICKER_API_BASE}/mediaItems"


def list_picked_items(
    session: PickerSession, http: Optional[requests.Session] = None
) -> List[PickedItem]:
    """Get every media item the user picked in a session.

    Args:
        session: A session whose picking is complete
        http: Session used for the listing requests

    Returns:
        Picked items in the order the API returned them

    Raises:
        ProviderError: If any page carries an error; nothing is returned
    """
    items: List[PickedItem] = []
    page_token = ""

    while True:
        params = {"sessionId": session.id}
        if page_token:
            params["pageToken"] = page_token

        token = session.token_provider.get_token()
        response = picker_http.request(
            http, token.access_token, "GET", MEDIA_ITEMS_URL, params=params
        )
        page = picker_http.read_response(response, PickedItemsPage.from_dict).unwrap()

        items.extend(page.items)
        logger.debug("Retrieved %d media items (total: %d)", len(page.items), len(items))

        page_token = page.next_page_token
        if not page_token:
            break

    logger.info("Session %s has %d picked items", session.id, len(items))
    return items

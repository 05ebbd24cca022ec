"""Picker session creation and polling."""

import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence, Union

import requests

from google_photos_picker.models import (
    PICKER_API_BASE,
    CallbackAbort,
    Cancelled,
    GooglePhotosError,
    PickedItem,
    PickerSession,
    PollState,
)
from google_photos_picker.picker.media_items import list_picked_items
from google_photos_picker.utils import http as picker_http
from google_photos_picker.utils.auth import TokenProvider

logger = logging.getLogger(__name__)

SESSIONS_URL = f"{PICKER_API_BASE}/sessions"


class PollObserver:
    """Receives the session on every poll tick.

    Called synchronously on the polling thread, once before each status
    check and once more after picking completes. Returning False stops the
    poll with a CallbackAbort.
    """

    def on_poll(self, session: PickerSession) -> bool:
        return True


class CallbackObserver(PollObserver):
    """Adapts a plain ``callback(session) -> bool`` to a PollObserver."""

    def __init__(self, callback: Callable[[PickerSession], bool]):
        self.callback = callback

    def on_poll(self, session: PickerSession) -> bool:
        return bool(self.callback(session))


class LoggingObserver(PollObserver):
    """Logs polling progress."""

    def on_poll(self, session: PickerSession) -> bool:
        if session.media_items_set:
            logger.info("Photos have been picked for session: %s", session.id)
        else:
            logger.info("Checking if session is complete: %s", session.id)
        return True


class Deadline:
    """Cancellation signal that fires once a number of seconds has passed."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.expires_at = clock() + seconds

    def is_set(self) -> bool:
        return self.clock() >= self.expires_at


def create_session(
    token_provider: TokenProvider, http: Optional[requests.Session] = None
) -> PickerSession:
    """Create a new picking session for photo selection.

    Args:
        token_provider: Supplies the bearer token; kept on the session for polling
        http: Session used for the request

    Returns:
        The new session, with its picker URI to send the user to

    Raises:
        ProviderError: If the API returned an error instead of a session
    """
    token = token_provider.get_token()
    response = picker_http.request(http, token.access_token, "POST", SESSIONS_URL, data="{}")
    session = picker_http.read_response(response, PickerSession.from_dict).unwrap()
    session.token_provider = token_provider

    logger.info("Created picking session %s (expires %s)", session.id, session.expire_time)
    return session


def _as_observers(
    observers: Iterable[Union[PollObserver, Callable[[PickerSession], bool]]]
) -> List[PollObserver]:
    return [o if isinstance(o, PollObserver) else CallbackObserver(o) for o in observers]


def _notify(observers: Sequence[PollObserver], session: PickerSession) -> None:
    for observer in observers:
        if not observer.on_poll(session):
            raise CallbackAbort()


def _check_cancelled(cancel) -> None:
    if cancel is not None and cancel.is_set():
        raise Cancelled("polling was cancelled")


def _fetch_status(session: PickerSession, http: Optional[requests.Session]) -> PickerSession:
    token = session.token_provider.get_token()
    response = picker_http.request(http, token.access_token, "GET", session.polling_uri)
    return picker_http.read_response(response, PickerSession.from_dict).unwrap()


def poll(
    session: PickerSession,
    cancel=None,
    observers: Iterable[Union[PollObserver, Callable[[PickerSession], bool]]] = (),
    http: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[PickedItem]:
    """Poll the session until the user has finished picking.

    The loop only ends when picking completes, an observer returns False, or
    ``cancel.is_set()`` becomes true. Pass a Deadline (or any object with
    ``is_set()``, such as threading.Event) to bound the wait.

    Args:
        session: Session returned by create_session
        cancel: Optional cancellation signal, checked around each sleep
        observers: PollObservers or plain callables taking the session
        http: Session used for the requests
        sleep: Sleep function, called with the recommended poll interval

    Returns:
        Every item picked in the session

    Raises:
        CallbackAbort: If an observer returned False
        Cancelled: If the cancellation signal fired
        ProviderError: If a status check or listing returned an error
    """
    observers = _as_observers(observers)
    session.state = PollState.POLLING
    polls = 0

    try:
        while True:
            _notify(observers, session)
            _check_cancelled(cancel)
            sleep(session.polling_config.poll_interval)
            _check_cancelled(cancel)

            status = _fetch_status(session, http)
            polls += 1
            if status.media_items_set:
                break
            logger.debug("Session %s not complete after %d polls", session.id, polls)

        session.media_items_set = True
        _notify(observers, session)

        # TODO: delete the session once its items are listed (DELETE /sessions/{id}).
        items = list_picked_items(session, http=http)
    except (CallbackAbort, Cancelled):
        session.state = PollState.ABORTED
        raise
    except GooglePhotosError:
        session.state = PollState.FAILED
        raise

    session.state = PollState.COMPLETED
    return items

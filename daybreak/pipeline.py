# daybreak/pipeline.py
"""
The authenticated calendar-fetch pipeline behind GET /api/events.

Steps (strictly sequential, no retries):
1) Require a caller identity (Clerk user id)            -> Unauthorized
2) Find the user's linked Google account in Clerk       -> NotConnected
3) Exchange it for a Google access token via Clerk      -> NoToken
4) Build a Google Calendar client with that token
5) List primary-calendar events from the past month
6) Normalize every item
7) Anything else that blows up in 2-6                   -> CalendarFetchFailed

Collaborators are injected so the pipeline can be exercised without Clerk or
Google: an identity client, a calendar-service factory and a clock.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from googleapiclient.errors import HttpError

from daybreak.clerk_client import GOOGLE_PROVIDER
from daybreak.errors import CalendarFetchFailed, EventsError, NoToken, NotConnected, Unauthorized
from daybreak.gcal_tools import MAX_RESULTS, list_events_primary, normalize_event, past_month_window
from daybreak.google_auth import build_calendar_service

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def get_user(self, user_id: str) -> Dict[str, Any]: ...

    def get_oauth_access_token(self, user_id: str, provider: str) -> Dict[str, Any]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _decode_body(raw: Any) -> Any:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return raw or None
    return raw


def upstream_error(exc: BaseException) -> Tuple[Optional[int], Any]:
    """
    Extract (status, body) from an upstream HTTP error, if it is one.

    Handles googleapiclient's HttpError and requests.HTTPError (Clerk calls).
    """
    if isinstance(exc, HttpError):
        return exc.resp.status, _decode_body(exc.content)

    response = getattr(exc, "response", None)
    if response is not None and hasattr(response, "status_code"):
        return response.status_code, _decode_body(response.text)

    return None, None


class EventsPipeline:
    """
    Fetch the caller's Google Calendar events for the past month.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        calendar_factory: Callable[[str], Any] = build_calendar_service,
        expose_error_details: bool = False,
        clock: Callable[[], datetime] = _utcnow,
        provider: str = GOOGLE_PROVIDER,
    ) -> None:
        self._identity = identity
        self._calendar_factory = calendar_factory
        self._expose_error_details = expose_error_details
        self._clock = clock
        self._provider = provider

    def fetch_events(self, user_id: Optional[str]) -> List[Dict[str, str]]:
        """
        Run the pipeline for one request.

        Raises:
            EventsError subclass describing which step failed.
        """
        if not user_id:
            raise Unauthorized()

        try:
            return self._fetch(user_id)
        except EventsError:
            raise
        except Exception as e:
            raise self._fetch_failed(e) from e

    def _fetch(self, user_id: str) -> List[Dict[str, str]]:
        user = self._identity.get_user(user_id)

        # First match wins; Clerk allows one account per provider in practice
        accounts = user.get("external_accounts") or []
        account = next((a for a in accounts if a.get("provider") == self._provider), None)
        if account is None:
            raise NotConnected()

        token_response = self._identity.get_oauth_access_token(user_id, self._provider)
        tokens = token_response.get("data") or []
        if not tokens:
            raise NoToken()
        access_token = tokens[0]["token"]

        service = self._calendar_factory(access_token)

        time_min, time_max = past_month_window(self._clock())
        items = list_events_primary(service, time_min=time_min, time_max=time_max, max_results=MAX_RESULTS)

        return [normalize_event(item) for item in items]

    def _fetch_failed(self, exc: Exception) -> CalendarFetchFailed:
        logger.exception("Error fetching calendar events: %s", exc)

        status, body = upstream_error(exc)
        if status is not None:
            logger.error("API error details: status=%s body=%s", status, body)

        details = body if self._expose_error_details else None
        return CalendarFetchFailed(str(exc) or None, details=details)

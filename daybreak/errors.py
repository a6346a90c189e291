"""Failure categories for the events endpoint.

Each exception maps to one fixed HTTP status and one `error` string; the web
layer turns them into JSON bodies without further inspection.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EventsError(Exception):
    """Base exception for everything /api/events can fail with."""

    category = "Error"
    status_code = 500
    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.category, "message": self.message}


class Unauthorized(EventsError):
    """Raised when the request carries no valid session."""

    category = "Unauthorized"
    status_code = 401
    default_message = "You must be logged in to view events."


class NotConnected(EventsError):
    """Raised when the user has no linked Google account."""

    category = "Not Connected"
    status_code = 403
    default_message = "Please connect your Google account to view calendar events."


class NoToken(EventsError):
    """Raised when Clerk returns no OAuth access token for the linked account."""

    category = "No Token"
    status_code = 403
    default_message = "Unable to get Google access token. Please reconnect your Google account."


class CalendarFetchFailed(EventsError):
    """Raised for any other failure while talking to Clerk or Google."""

    category = "Failed to fetch calendar events"
    status_code = 500

    def __init__(self, message: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.details is not None:
            body["details"] = self.details
        return body

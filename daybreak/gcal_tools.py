# daybreak/gcal_tools.py
"""
Deterministic Google Calendar helpers.

- past_month_window: the [now - 1 month, now] window we list events in
- list_events_primary: one events.list call on the PRIMARY calendar
- normalize_event: reshape a raw Google event into the API's event shape
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from dateutil.relativedelta import relativedelta

MAX_RESULTS = 50
UNTITLED = "Untitled Event"


def past_month_window(now: datetime) -> Tuple[str, str]:
    """
    Return (time_min, time_max) as RFC3339 strings covering one calendar month.

    Month arithmetic, not 30 days. If the day does not exist in the previous
    month it is clamped to that month's last day (Mar 31 -> Feb 28/29).
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    one_month_ago = now - relativedelta(months=1)
    return one_month_ago.isoformat(), now.isoformat()


def list_events_primary(
    service,
    time_min: str,
    time_max: str,
    max_results: int = MAX_RESULTS,
) -> List[Dict[str, Any]]:
    """
    List events on the PRIMARY calendar within a time window.

    Single page only: maxResults caps the response and we do not follow
    nextPageToken.

    Returns:
        A list of raw Google Calendar event objects (possibly empty).
    """
    resp = (
        service.events()
        .list(
            calendarId="primary",
            timeMin=time_min,
            timeMax=time_max,
            maxResults=max_results,
            singleEvents=True,       # Expand recurring events into individual instances
            orderBy="startTime",
        )
        .execute()
    )
    return resp.get("items") or []


def normalize_event(event: Dict[str, Any]) -> Dict[str, str]:
    """
    Convert a raw Google event into {id, name, date, description, location}.

    Missing (or empty) fields fall back to fixed values so every upstream item
    produces exactly one output item.
    """
    start = event.get("start") or {}
    return {
        "id": event.get("id") or "",
        "name": event.get("summary") or UNTITLED,
        # Timed events carry dateTime; all-day events only carry date
        "date": start.get("dateTime") or start.get("date") or "",
        "description": event.get("description") or "",
        "location": event.get("location") or "",
    }

"""
HTTP-level tests for the FastAPI app.

The pipeline runs for real; Clerk, Google and session verification are fakes
injected through create_app().
"""

from __future__ import annotations

from datetime import datetime

import httplib2
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from daybreak.config import Settings
from daybreak.pipeline import EventsPipeline
from daybreak.web.api import create_app

GOOD_TOKEN = "good-session-token"


class FakeVerifier:
    def user_id(self, token):
        return "user_1" if token == GOOD_TOKEN else None


class FakeClerk:
    def __init__(self, accounts=None, tokens=None):
        self.accounts = [{"provider": "oauth_google"}] if accounts is None else accounts
        self.tokens = [{"token": "ya29.t"}] if tokens is None else tokens
        self.calls = 0

    def get_user(self, user_id):
        self.calls += 1
        return {"external_accounts": self.accounts}

    def get_oauth_access_token(self, user_id, provider):
        self.calls += 1
        return {"data": self.tokens}


class FakeCalendar:
    def __init__(self, items=None, error=None):
        self.items = items or []
        self.error = error
        self.listed = 0

    def events(self):
        return self

    def list(self, **kwargs):
        self.listed += 1
        return self

    def execute(self):
        if self.error:
            raise self.error
        return {"items": self.items}


def make_client(clerk=None, calendar=None, app_env="production"):
    clerk = clerk or FakeClerk()
    calendar = calendar or FakeCalendar()
    settings = Settings(app_env=app_env)
    pipeline = EventsPipeline(
        identity=clerk,
        calendar_factory=lambda token: calendar,
        expose_error_details=settings.expose_error_details,
    )
    app = create_app(settings=settings, pipeline=pipeline, verifier=FakeVerifier())
    return TestClient(app), clerk, calendar


def auth_headers(token=GOOD_TOKEN):
    return {"Authorization": f"Bearer {token}"}


def test_health_needs_no_auth():
    client, _, _ = make_client()

    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    # Must be a parseable ISO-8601 timestamp
    datetime.fromisoformat(body["timestamp"])


def test_events_without_credentials_is_401():
    client, clerk, calendar = make_client()

    resp = client.get("/api/events")

    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized", "message": "You must be logged in to view events."}
    assert clerk.calls == 0
    assert calendar.listed == 0


def test_events_with_invalid_credentials_is_401():
    client, clerk, calendar = make_client()

    resp = client.get("/api/events", headers=auth_headers("expired-or-forged"))

    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"
    assert calendar.listed == 0


def test_events_not_connected_is_403():
    client, _, _ = make_client(clerk=FakeClerk(accounts=[]))

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 403
    assert resp.json() == {
        "error": "Not Connected",
        "message": "Please connect your Google account to view calendar events.",
    }


def test_events_no_token_is_403():
    client, _, calendar = make_client(clerk=FakeClerk(tokens=[]))

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 403
    assert resp.json()["error"] == "No Token"
    assert calendar.listed == 0


def test_events_success_returns_normalized_array():
    items = [
        {
            "id": "e1",
            "summary": "Meet",
            "start": {"dateTime": "2025-06-01T10:00:00Z"},
            "description": "d",
            "location": "l",
        },
        {"id": "e2", "start": {"dateTime": "2025-06-02T10:00:00Z"}},
    ]
    client, _, _ = make_client(calendar=FakeCalendar(items=items))

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 200
    assert resp.json() == [
        {"id": "e1", "name": "Meet", "date": "2025-06-01T10:00:00Z", "description": "d", "location": "l"},
        {"id": "e2", "name": "Untitled Event", "date": "2025-06-02T10:00:00Z", "description": "", "location": ""},
    ]


def test_events_empty_calendar_is_empty_array():
    client, _, _ = make_client()

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 200
    assert resp.json() == []


def _forbidden():
    return HttpError(httplib2.Response({"status": 403}), b'{"error": {"code": 403, "message": "Forbidden"}}')


def test_upstream_failure_in_production_omits_details():
    client, _, _ = make_client(calendar=FakeCalendar(error=_forbidden()), app_env="production")

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to fetch calendar events"
    assert body["message"]
    assert "details" not in body


def test_upstream_failure_in_development_includes_details():
    client, _, _ = make_client(calendar=FakeCalendar(error=_forbidden()), app_env="development")

    resp = client.get("/api/events", headers=auth_headers())

    assert resp.status_code == 500
    assert resp.json()["details"] == {"error": {"code": 403, "message": "Forbidden"}}


def test_cors_allows_any_origin_by_default():
    client, _, _ = make_client()

    resp = client.get("/health", headers={"Origin": "http://localhost:5173"})

    assert resp.headers.get("access-control-allow-origin") == "*"

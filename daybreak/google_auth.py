# daybreak/google_auth.py
"""
Build a Google Calendar client from a short-lived OAuth access token.

The access token comes from Clerk (which owns the Google OAuth grant), so we
never see a refresh token or client secret here. The token is wrapped in
bare Credentials and used for exactly one request.
"""

from __future__ import annotations

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build


def build_calendar_service(access_token: str):
    """
    Return a Google Calendar v3 API client authorized with `access_token`.
    """
    creds = Credentials(token=access_token)

    # Discovery file cache is unsupported with google-auth credentials
    return build("calendar", "v3", credentials=creds, cache_discovery=False)

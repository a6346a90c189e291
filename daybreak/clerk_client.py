# daybreak/clerk_client.py
"""
Minimal Clerk Backend API client (REST via requests).

We only need two reads:
- GET /users/{user_id}                                 -> user record (external_accounts)
- GET /users/{user_id}/oauth_access_tokens/{provider}  -> OAuth access tokens

Both calls authenticate with the instance secret key as a bearer token.
Non-2xx responses raise requests.HTTPError; the caller decides what that means.
"""

from __future__ import annotations

from typing import Any, Dict

import requests

GOOGLE_PROVIDER = "oauth_google"


class ClerkClient:
    """
    Thin wrapper around the two Clerk endpoints the events pipeline uses.
    """

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.clerk.com/v1",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def _get(self, path: str) -> Any:
        resp = self._session.get(
            f"{self._api_url}{path}",
            headers={"Authorization": f"Bearer {self._secret_key}"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        Fetch the full user record, including `external_accounts`.
        """
        return self._get(f"/users/{user_id}")

    def get_oauth_access_token(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> Dict[str, Any]:
        """
        Fetch OAuth access tokens for a linked provider.

        Clerk answers with a bare JSON array; older API versions wrap it as
        {"data": [...], "total_count": n}. Either way we return {"data": [...]}.
        """
        body = self._get(f"/users/{user_id}/oauth_access_tokens/{provider}")
        if isinstance(body, list):
            return {"data": body}
        return {"data": body.get("data") or []}

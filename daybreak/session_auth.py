# daybreak/session_auth.py
"""
Resolve the caller's identity from a Clerk session token.

The frontend sends `Authorization: Bearer <session jwt>`. Clerk session tokens
are RS256 JWTs whose `sub` claim is the Clerk user id.

Key source (first one configured wins):
1) CLERK_JWT_KEY: the instance's PEM public key (no network call)
2) Clerk JWKS endpoint, authorized with CLERK_SECRET_KEY

A token that fails verification for any reason is treated the same as a
missing token: the caller simply has no identity.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import jwt
from jwt import PyJWKClient
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Clerk's middleware falls back to this cookie for same-origin requests
SESSION_COOKIE = "__session"


def session_token_from_request(request: Request) -> Optional[str]:
    """
    Pull the raw session token out of the Authorization header (or cookie).
    """
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        token = header.split(" ", 1)[1].strip()
        return token or None
    return request.cookies.get(SESSION_COOKIE) or None


class SessionVerifier:
    """
    Verifies Clerk session tokens and returns the user id they belong to.
    """

    def __init__(
        self,
        jwt_key: str = "",
        jwks_url: str = "",
        secret_key: str = "",
        authorized_parties: Optional[List[str]] = None,
        leeway_seconds: int = 5,
    ) -> None:
        self._jwt_key = jwt_key.strip()
        self._authorized_parties = authorized_parties or []
        self._leeway = leeway_seconds
        self._jwks_client: Optional[PyJWKClient] = None

        if not self._jwt_key and jwks_url and secret_key:
            self._jwks_client = PyJWKClient(
                jwks_url,
                headers={"Authorization": f"Bearer {secret_key}"},
            )

        if not self._jwt_key and self._jwks_client is None:
            logger.warning("No CLERK_JWT_KEY or CLERK_SECRET_KEY configured; every request will be unauthenticated")

    def _signing_key(self, token: str) -> Any:
        if self._jwt_key:
            return self._jwt_key
        if self._jwks_client is None:
            raise jwt.InvalidTokenError("no verification key configured")
        return self._jwks_client.get_signing_key_from_jwt(token).key

    def claims(self, token: str) -> Dict[str, Any]:
        """
        Decode and verify a session token. Raises jwt.PyJWTError on failure.
        """
        claims = jwt.decode(
            token,
            self._signing_key(token),
            algorithms=["RS256"],
            leeway=self._leeway,
            options={"require": ["exp", "sub"], "verify_aud": False},
        )

        if self._authorized_parties:
            azp = claims.get("azp")
            if azp and azp not in self._authorized_parties:
                raise jwt.InvalidTokenError(f"unauthorized party: {azp}")

        return claims

    def user_id(self, token: Optional[str]) -> Optional[str]:
        """
        Return the Clerk user id for a token, or None if it is missing/invalid.
        """
        if not token:
            return None
        try:
            return str(self.claims(token)["sub"]) or None
        except jwt.PyJWTError as e:
            logger.info("Rejected session token: %s", e)
            return None

"""
FastAPI app for the calendar events backend.

Endpoints:
- GET /health      liveness check, no auth
- GET /api/events  the signed-in user's Google Calendar events from the past month

Auth is Clerk: the frontend sends its session token as a bearer credential,
and Clerk also holds the user's Google OAuth grant, so we never store tokens.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from daybreak.clerk_client import ClerkClient
from daybreak.config import Settings
from daybreak.errors import EventsError
from daybreak.pipeline import EventsPipeline
from daybreak.session_auth import SessionVerifier, session_token_from_request

logger = logging.getLogger(__name__)


# ----------------------------
# Response models (API contracts)
# ----------------------------

class CalendarEvent(BaseModel):
    id: str
    name: str
    date: str
    description: str
    location: str


class HealthStatus(BaseModel):
    status: str
    timestamp: str


# ----------------------------
# Dependencies
# ----------------------------

def caller_identity(request: Request) -> Optional[str]:
    """
    Resolve the Clerk user id for this request, or None if unauthenticated.
    """
    verifier: SessionVerifier = request.app.state.verifier
    return verifier.user_id(session_token_from_request(request))


def events_pipeline(request: Request) -> EventsPipeline:
    return request.app.state.pipeline


# ----------------------------
# App factory
# ----------------------------

def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[EventsPipeline] = None,
    verifier: Optional[SessionVerifier] = None,
) -> FastAPI:
    """
    Wire settings into the verifier and pipeline and return the app.

    `pipeline` and `verifier` can be passed in directly (tests do this).
    """
    settings = settings or Settings()

    if verifier is None:
        verifier = SessionVerifier(
            jwt_key=settings.clerk_jwt_key,
            jwks_url=f"{settings.clerk_api_url.rstrip('/')}/jwks",
            secret_key=settings.clerk_secret_key,
            authorized_parties=settings.authorized_parties,
            leeway_seconds=settings.clerk_clock_skew_seconds,
        )

    if pipeline is None:
        clerk = ClerkClient(
            secret_key=settings.clerk_secret_key,
            api_url=settings.clerk_api_url,
            timeout=settings.http_timeout_seconds,
        )
        pipeline = EventsPipeline(identity=clerk, expose_error_details=settings.expose_error_details)

    app = FastAPI(title="Daybreak Events API", version="0.1.0")
    app.state.settings = settings
    app.state.verifier = verifier
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,      # Must be False when allow_origins is "*"
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EventsError)
    async def events_error_handler(request: Request, exc: EventsError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.get("/health", response_model=HealthStatus)
    def health():
        """
        Health check endpoint.
        Used to confirm the service is running.
        """
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/events", response_model=list[CalendarEvent])
    def list_events(
        user_id: Optional[str] = Depends(caller_identity),
        pipeline: EventsPipeline = Depends(events_pipeline),
    ):
        """
        Read-only: the caller's primary-calendar events from the past month,
        ordered by start time, at most 50.
        """
        return pipeline.fetch_events(user_id)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings: Settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Server is running on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

"""FastAPI dependency injection providers."""

import hmac
from collections.abc import AsyncGenerator

from fastapi import Depends, Request

from eventops.config import settings
from eventops.errors.exceptions import AuthenticationError


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_audit(request: Request):
    """Return the app-wide audit sink."""
    return request.app.state.audit


def get_job_engine(request: Request):
    return request.app.state.job_engine


def verify_cron_secret(request: Request) -> None:
    """Require ``Authorization: Bearer <cron_secret>`` when a secret is configured."""
    secret = settings.cron_secret
    if not secret:
        return
    supplied = request.headers.get("authorization", "")
    if not hmac.compare_digest(supplied.encode("utf-8"), f"Bearer {secret}".encode("utf-8")):
        raise AuthenticationError()


# Route-level dependency for the cron trigger surface
RequireCronSecret = Depends(verify_cron_secret)

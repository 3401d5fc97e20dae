"""Master API router mounted at /api/v1."""

from fastapi import APIRouter

from eventops.api.routes import contacts, cron, health, jobs, waitlist

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(cron.router)
api_router.include_router(jobs.router)
api_router.include_router(contacts.router)
api_router.include_router(waitlist.router)

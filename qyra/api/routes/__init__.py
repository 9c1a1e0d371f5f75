"""API routes."""

from fastapi import APIRouter

from qyra.api.routes import auth, queue, settings

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(queue.router, prefix="/queue", tags=["queue"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])

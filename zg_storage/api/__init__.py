"""FastAPI routers for the 0G storage gateway."""

from fastapi import APIRouter

from .files import router as files_router

api_router = APIRouter()
api_router.include_router(files_router, tags=["files"])

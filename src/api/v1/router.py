"""Version 1 API router."""
from fastapi import APIRouter

from src.api.v1.endpoints import engagement, projects, public, users


api_router = APIRouter()
api_router.include_router(users.router)
api_router.include_router(projects.router)
api_router.include_router(engagement.router)
api_router.include_router(public.router)

"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    exercises,
    health,
    progression,
    sessions,
    variables,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(variables.router, prefix="/variables", tags=["variables"])
api_router.include_router(progression.router, prefix="/progression", tags=["progression"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

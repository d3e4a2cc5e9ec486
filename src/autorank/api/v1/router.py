"""Main API v1 router that combines all endpoint routers."""

from fastapi import APIRouter

from autorank.api.v1.endpoints import data, health, jobs

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router)
api_router.include_router(jobs.router)
api_router.include_router(data.router)

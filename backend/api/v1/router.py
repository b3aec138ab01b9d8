"""
API v1 router aggregator.
"""
from fastapi import APIRouter

from backend.api.v1 import health, dice_config

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include sub-routers
api_router.include_router(health.router)
api_router.include_router(dice_config.router)

"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from gatherly.api.routes import guests, events, settlements

api_router = APIRouter()

# Include all route modules
api_router.include_router(guests.router)
api_router.include_router(events.router)
api_router.include_router(settlements.router)

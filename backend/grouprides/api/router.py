"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from grouprides.api.routes import auth, users, rides, geocode

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(rides.router)
api_router.include_router(geocode.router)

"""
Footballer API Routers
======================

All API routers for the Footballer API.
"""

from footballer_api.routers.health import router as health_router
from footballer_api.routers.footballers import router as footballers_router

__all__ = [
    "health_router",
    "footballers_router",
]

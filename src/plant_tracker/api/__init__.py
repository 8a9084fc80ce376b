"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's
dependencies parameter. This gates every route in a router before any
handler code runs. Health and auth routers are open (no token needed).
"""

from fastapi import APIRouter, Depends

from plant_tracker.api.auth import router as auth_router
from plant_tracker.api.health import router as health_router
from plant_tracker.api.plants import router as plants_router
from plant_tracker.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid JWT
api_router.include_router(plants_router, tags=["plants"], dependencies=_auth)

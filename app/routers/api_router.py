from fastapi import APIRouter
from app.routers import auth, dashboard, holidays, leave, notifications, teams, users

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(teams.router, tags=["Teams"])
api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(holidays.router, tags=["Holidays"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(dashboard.router, tags=["Dashboard"])

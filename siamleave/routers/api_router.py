from fastapi import APIRouter
from siamleave.routers import (
    auth, leave_requests, leave_used, leave_quota, leave_quota_reset,
    leave_types, positions, notifications
)

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(leave_requests.router, tags=["Leave Requests"])
api_router.include_router(leave_used.router, tags=["Leave Usage"])
api_router.include_router(leave_quota.router, tags=["Leave Quota"])
api_router.include_router(leave_quota_reset.router, tags=["Leave Quota Reset"])
api_router.include_router(leave_types.router, tags=["Leave Types"])
api_router.include_router(positions.router, tags=["Positions"])
api_router.include_router(notifications.router, tags=["Notifications"])

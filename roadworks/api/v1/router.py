from fastapi import APIRouter

from roadworks.api.v1.health import router as health_router
from roadworks.api.v1.activity import router as activity_router
from roadworks.api.v1.segments import router as segments_router
from roadworks.api.v1.assignments import router as assignments_router
from roadworks.api.v1.projects import router as projects_router
from roadworks.api.v1.notifications import router as notifications_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])

# ------------------------------------------------------------------
# ACTIVITY FEED
# ------------------------------------------------------------------
v1_router.include_router(activity_router, tags=["activity"])

# ------------------------------------------------------------------
# ROADS / SCHEDULING
# ------------------------------------------------------------------
v1_router.include_router(segments_router, tags=["segments"])
v1_router.include_router(assignments_router, tags=["assignments"])

# ------------------------------------------------------------------
# PROJECTS / MEMBERS / MILESTONES
# ------------------------------------------------------------------
v1_router.include_router(projects_router, tags=["projects"])

# ------------------------------------------------------------------
# NOTIFICATIONS
# ------------------------------------------------------------------
v1_router.include_router(notifications_router, tags=["notifications"])

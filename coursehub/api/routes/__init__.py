"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from coursehub.api.routes.application_routes import router as application_router
from coursehub.api.routes.course_routes import router as course_router
from coursehub.api.routes.institution_routes import router as institution_router
from coursehub.api.routes.stats_routes import router as stats_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(institution_router)
api_router.include_router(course_router)
api_router.include_router(application_router)
api_router.include_router(stats_router)

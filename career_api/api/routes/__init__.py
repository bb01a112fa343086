"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from career_api.api.routes.auth_routes import router as auth_router
from career_api.api.routes.student_routes import router as student_router
from career_api.api.routes.institution_routes import router as institution_router
from career_api.api.routes.company_routes import router as company_router
from career_api.api.routes.course_routes import router as course_router
from career_api.api.routes.job_routes import router as job_router
from career_api.api.routes.application_routes import router as application_router
from career_api.api.routes.eligibility_routes import router as eligibility_router
from career_api.api.routes.notification_routes import router as notification_router
from career_api.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(institution_router)
api_router.include_router(company_router)
api_router.include_router(course_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(eligibility_router)
api_router.include_router(notification_router)
api_router.include_router(admin_router)

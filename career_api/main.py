"""
Career Guidance Platform - Main Application

FastAPI backend with:
- MongoDB for every record (users, profiles, courses, jobs, applications)
- JWT authentication with four roles (student, institution, company, admin)
- Course eligibility checks, job match scoring and admission workflow

Run: uvicorn career_api.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from career_api.api.routes import api_router
from career_api.core.config import get_settings
from career_api.core.exceptions import CareerAPIError
from career_api.core.logging import setup_logging
from career_api.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    Backend for a career guidance platform connecting students,
    institutions and companies.

    ## Features
    - **Authentication**: JWT auth for students, institutions, companies and admins
    - **Students**: Profile, transcripts/certificates, course and job applications
    - **Institutions**: Courses, admission decisions, waitlists, prospectuses
    - **Companies**: Job postings and applicants ranked by match score
    - **Eligibility**: Which courses a set of subject grades qualifies for
    - **Admin**: Approvals, transcript verification, reports
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# ============================================================
# ERROR HANDLERS
# All errors leave as {"success": false, "error": "<message>"}
# ============================================================

def error_response(status_code: int, message, headers: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(CareerAPIError)
async def domain_exception_handler(request: Request, exc: CareerAPIError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")
    first = errors[0]
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    if location and first.get("type") != "value_error":
        message = f"{'.'.join(location)}: {message}"
    return error_response(400, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Something went wrong!")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception:
        logger.exception("MongoDB index initialization failed")


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app": settings.app_name,
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }

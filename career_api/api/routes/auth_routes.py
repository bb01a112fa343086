"""
Authentication Routes

POST /auth/register - Register a student, institution, company or admin
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info with role profile
"""

import hmac
import logging

from fastapi import APIRouter, HTTPException, Depends

from career_api.core.auth import (
    hash_password, verify_password, create_access_token, get_current_user, PROFILE_COLLECTIONS
)
from career_api.core.config import get_settings
from career_api.db.mongodb import COLLECTIONS
from career_api.schemas.schemas import RegisterRequest, LoginRequest, TokenResponse, UserRole
from career_api.services.document_store import DocumentStore, get_document_store, new_id
from career_api.utils.helpers import to_document, without_file_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _profile_document(request: RegisterRequest) -> dict:
    """Role-specific profile record created alongside the user."""
    if request.role == UserRole.student:
        return to_document({
            "email": request.email,
            "first_name": request.first_name,
            "last_name": request.last_name,
            "date_of_birth": request.date_of_birth,
            "phone": request.phone,
            "high_school": request.high_school,
            "graduation_year": request.graduation_year,
            "subjects": [],
            "skills": [],
            "certificates": [],
            "academic_score": None,
            "work_experience": 0,
            "has_transcript": False,
            "study_completed": False,
            "applications_count": {},
            "accepted_application_id": None,
        })

    profile = {
        "email": request.email,
        "name": request.organization_name,
        "contact_phone": request.contact_phone,
        "contact_email": request.contact_email,
        "location": request.location,
        "slogan": request.slogan,
        "description": request.description,
        "website": request.website,
        "logo_url": None,
        "approved": False,
    }
    if request.role == UserRole.company:
        profile["industry"] = request.industry
    return profile


@router.post("/register", status_code=201)
async def register(request: RegisterRequest, store: DocumentStore = Depends(get_document_store)):
    """
    Register a new account.

    Students, institutions and companies get a profile record sharing the
    user's id. Admin registration requires the configured admin secret.
    """
    if request.role == UserRole.admin:
        expected = get_settings().admin_registration_secret
        if not hmac.compare_digest(request.admin_secret or "", expected):
            raise HTTPException(status_code=403, detail="Invalid admin registration secret")

    email = request.email.lower()
    if store.find_one(COLLECTIONS["users"], {"email": email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    user_id = new_id()
    user = {
        "email": email,
        "password_hash": hash_password(request.password),
        "role": request.role.value,
        "active": True,
    }
    if request.role == UserRole.admin:
        user["first_name"] = request.first_name
        user["last_name"] = request.last_name
    store.insert(COLLECTIONS["users"], user, doc_id=user_id)

    if request.role != UserRole.admin:
        profile = _profile_document(request)
        profile["email"] = email
        store.insert(PROFILE_COLLECTIONS[request.role.value], profile, doc_id=user_id)

    logger.info("Registered %s account %s", request.role.value, user_id)
    return {
        "success": True,
        "message": f"Registered successfully as {request.role.value}. Please login.",
        "user_id": user_id,
        "role": request.role.value,
    }


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, store: DocumentStore = Depends(get_document_store)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = store.find_one(COLLECTIONS["users"], {"email": request.email.lower()})

    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("active", True):
        raise HTTPException(status_code=403, detail="Account deactivated")

    token = create_access_token(data={"sub": user["id"], "role": user["role"]})

    return TokenResponse(access_token=token, user_id=user["id"], role=user["role"])


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user), store: DocumentStore = Depends(get_document_store)):
    """Get current authenticated user's identity merged with the role profile."""
    record = store.get(COLLECTIONS["users"], user["user_id"])
    me = without_file_data(record)

    collection = PROFILE_COLLECTIONS.get(user["role"])
    if collection:
        profile = store.get(collection, user["user_id"]) or {}
        me = {**without_file_data(profile), **me}

    return {"success": True, "user": me}

"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes, one per role
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from career_api.core.config import get_settings
from career_api.db.mongodb import COLLECTIONS
from career_api.services.document_store import DocumentStore, get_document_store

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (missing header handled below as 401)
bearer_scheme = HTTPBearer(auto_error=False)

# Role -> collection holding that role's profile (same id as the user record)
PROFILE_COLLECTIONS = {
    "student": COLLECTIONS["students"],
    "institution": COLLECTIONS["institutions"],
    "company": COLLECTIONS["companies"],
}


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: DocumentStore = Depends(get_document_store)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    # Verify user exists
    user = store.get(COLLECTIONS["users"], user_id)
    if not user:
        raise credentials_exception

    if not user.get("active", True):
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {"user_id": user["id"], "email": user["email"], "role": user["role"]}


def _load_profile(user: dict, role: str, label: str, store: DocumentStore) -> dict:
    if user["role"] != role:
        raise HTTPException(status_code=403, detail=f"Access denied. {label} only.")

    profile = store.get(PROFILE_COLLECTIONS[role], user["user_id"])
    if not profile:
        raise HTTPException(status_code=404, detail=f"{role.capitalize()} profile not found")

    user["profile"] = profile
    return user


async def get_current_student(
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_document_store)
) -> dict:
    """Dependency - Require student role; attaches the student profile."""
    return _load_profile(user, "student", "Students", store)


async def get_current_institution(
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_document_store)
) -> dict:
    """Dependency - Require institution role; attaches the institution profile."""
    return _load_profile(user, "institution", "Institutions", store)


async def get_current_company(
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_document_store)
) -> dict:
    """Dependency - Require company role; attaches the company profile."""
    return _load_profile(user, "company", "Companies", store)


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Access denied. Admins only.")
    return user

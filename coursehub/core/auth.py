"""
Authentication Utility - JWT handling.

Tokens are issued by the platform's auth service; this module only
verifies them and turns the claims into an actor:
- sub:  user id (a student's id is their student_id)
- role: student | institute | admin

Provides:
- JWT token creation (tooling and tests) / verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from coursehub.core.config import get_settings
from coursehub.schemas.schemas import ActorRole

settings = get_settings()

# Bearer token extractor
bearer_scheme = HTTPBearer()


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


async def get_current_actor(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get the authenticated actor.

    Usage:
        @router.get("/protected")
        async def route(actor: dict = Depends(get_current_actor)):
            return actor  # {"user_id": "...", "role": ActorRole.student}
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    try:
        role = ActorRole(payload.get("role"))
    except ValueError:
        raise HTTPException(status_code=403, detail="Role not allowed in admissions")

    return {"user_id": str(user_id), "role": role}


async def get_current_student(actor: dict = Depends(get_current_actor)) -> dict:
    """Dependency - Require student role."""
    if actor["role"] != ActorRole.student:
        raise HTTPException(status_code=403, detail="Students only")
    return actor


async def get_current_reviewer(actor: dict = Depends(get_current_actor)) -> dict:
    """Dependency - Require institute staff or admin."""
    if actor["role"] not in (ActorRole.institute, ActorRole.admin):
        raise HTTPException(status_code=403, detail="Institute staff or admins only")
    return actor


async def get_current_admin(actor: dict = Depends(get_current_actor)) -> dict:
    """Dependency - Require admin role."""
    if actor["role"] != ActorRole.admin:
        raise HTTPException(status_code=403, detail="Admins only")
    return actor

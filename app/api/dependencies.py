# ============================================================================
# FILE: app/api/dependencies.py
# JWT authentication for business-side (dashboard) routes
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from uuid import UUID

from app.config.database import get_db
from app.config.settings import settings
from app.models.business import Business

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token"
)


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(business_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a business.

    Args:
        business_id: Business the bearer acts for (the `business_id` claim)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "business_id": str(business_id),
        "exp": expire,
        "iat": now,
        "type": "access"
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise _unauthorized(f"Could not validate credentials: {str(e)}")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")
    return payload


# ============================================================================
# JWT Authentication Dependencies
# ============================================================================

def get_current_business_id(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        db: Session = Depends(get_db)
) -> UUID:
    """
    Dependency yielding the authenticated business id.

    Usage in routes:
        @router.get("/appointments")
        def list_appointments(business_id: UUID = Depends(get_current_business_id)):
            ...

    Raises:
        HTTPException 401: If token is invalid or the business is gone
    """
    payload = verify_access_token(credentials.credentials)

    business_id_str: Optional[str] = payload.get("business_id")
    if business_id_str is None:
        raise _unauthorized("Could not validate credentials")

    try:
        business_id = UUID(business_id_str)
    except ValueError:
        raise _unauthorized("Invalid business ID in token")

    business = db.query(Business).filter(
        Business.id == business_id,
        Business.deleted_at.is_(None)
    ).first()
    if business is None:
        raise _unauthorized("Business not found")

    return business_id

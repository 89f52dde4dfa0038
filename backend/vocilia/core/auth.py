"""Authentication and session-status gating for protected routes."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request

from vocilia.core.config import settings


class Role(str, Enum):
    ADMIN = "admin"
    BUSINESS = "business"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PENDING_VERIFICATION = "pending_verification"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


@dataclass
class Principal:
    """The authenticated caller."""

    subject: str
    role: Role
    session_status: SessionStatus
    business_id: UUID | None = None


def create_access_token(
    subject: str,
    role: Role,
    business_id: UUID | None = None,
    session_status: SessionStatus = SessionStatus.ACTIVE,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Issue a signed token (used by the sign-in service and by tests)."""
    payload: dict[str, object] = {
        "sub": subject,
        "role": role.value,
        "session_status": session_status.value,
        "exp": datetime.now(UTC) + expires_in,
    }
    if business_id is not None:
        payload["business_id"] = str(business_id)
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_access_token(token: str) -> Principal:
    """Validate a token and return its principal.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or malformed claims.
    """
    claims = jwt.decode(token, settings.AUTH_JWT_SECRET, algorithms=[settings.AUTH_JWT_ALGORITHM])
    try:
        role = Role(claims["role"])
        status = SessionStatus(claims.get("session_status", SessionStatus.ACTIVE.value))
        business_id = UUID(claims["business_id"]) if claims.get("business_id") else None
    except (KeyError, ValueError) as e:
        raise jwt.InvalidTokenError(f"Invalid token claims: {e}") from e
    if role == Role.BUSINESS and business_id is None:
        raise jwt.InvalidTokenError("Business token is missing business_id")
    return Principal(
        subject=str(claims.get("sub", "")),
        role=role,
        session_status=status,
        business_id=business_id,
    )


def get_current_principal(request: Request) -> Principal:
    """Authenticate the bearer token and require an active session."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Authorization header is required")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Access token is required")

    try:
        principal = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Access token has expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid access token") from None

    if principal.session_status != SessionStatus.ACTIVE:
        raise HTTPException(
            status_code=403,
            detail=f"Session is not active: {principal.session_status.value}",
        )
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != Role.ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return principal


def require_business(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != Role.BUSINESS:
        raise HTTPException(status_code=403, detail="Business access required")
    return principal

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from settings.config import get_settings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_token(
    subject: str,
    token_type: str,
    expires_delta: timedelta,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a signed JWT with secure defaults and explicit claims.
    Validates issuer and audience on verification.
    """
    settings = get_settings()
    now = _utcnow()
    payload: Dict[str, Any] = {
        "sub": subject,
        "jti": str(uuid.uuid4()),
        "type": token_type,
        "iat": int(now.timestamp()),
        "nbf": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, org_id: int, expires_minutes: Optional[int] = None) -> str:
    """
    Access token carrying the user id as `sub` and the tenant as `org_id`.
    Issued by the authentication service after login; role is always read from the
    user row at verification time so role changes apply immediately.
    """
    settings = get_settings()
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return create_token(
        subject=str(user_id),
        token_type="access",
        expires_delta=timedelta(minutes=minutes),
        extra_claims={"org_id": org_id},
    )


def verify_token(token: str, expected_token_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify a JWT's signature, expiration, issuer, and audience.
    Optionally enforce token type (e.g., 'access').
    Returns decoded claims on success; raises JWTError on failure.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options={"require_exp": True, "require_sub": True, "require_iat": True, "require_nbf": True},
    )
    if expected_token_type and payload.get("type") != expected_token_type:
        raise JWTError("Invalid token type.")
    return payload

"""JWT utilities for resolving the caller identity."""

from datetime import datetime, timezone

from jose import JWTError, jwt

from ..config import get_settings
from .exceptions import InvalidTokenError, ExpiredTokenError
from .models import UserClaims


def decode_jwt(token: str) -> dict:
    """Decode and validate a JWT token.
    
    Issuer and audience are only checked when they are configured.
    
    Args:
        token: JWT token string (without 'Bearer ' prefix).
        
    Returns:
        Decoded JWT payload as a dictionary.
        
    Raises:
        InvalidTokenError: If token is malformed or signature is invalid.
        ExpiredTokenError: If token has expired.
    """
    settings = get_settings()

    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            issuer=settings.JWT_ISSUER or None,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": bool(settings.JWT_AUDIENCE),
                "verify_iss": bool(settings.JWT_ISSUER),
                "require_exp": True,
            }
        )
    except jwt.ExpiredSignatureError as e:
        raise ExpiredTokenError("JWT token has expired") from e
    except JWTError as e:
        raise InvalidTokenError(f"Invalid JWT token: {str(e)}") from e


def extract_user_claims(token: str) -> UserClaims:
    """Extract the caller identity from a JWT token.
    
    Args:
        token: JWT token string.
        
    Returns:
        UserClaims object with extracted information.
        
    Raises:
        InvalidTokenError: If token is invalid or missing required claims.
        ExpiredTokenError: If token has expired.
    """
    payload = decode_jwt(token)
    settings = get_settings()

    user_id = payload.get(settings.JWT_USER_ID_CLAIM)
    if not user_id and settings.JWT_USER_ID_CLAIM == "sub":
        user_id = payload.get("user_id")
    if not user_id:
        raise InvalidTokenError("JWT token missing required 'sub' or 'user_id' claim")

    return UserClaims(
        user_id=str(user_id),
        email=payload.get("email"),
        organization_id=payload.get(settings.JWT_ORGANIZATION_CLAIM),
    )


def create_test_jwt(
    user_id: str,
    email: str | None = None,
    organization_id: str | None = None,
    expire_minutes: int = 30
) -> str:
    """Create a test JWT token (for development/testing only).
    
    Args:
        user_id: User identifier.
        email: User email (defaults to '<user_id>@example.com').
        organization_id: Organization identifier.
        expire_minutes: Token expiration time in minutes.
        
    Returns:
        Encoded JWT token string.
    """
    settings = get_settings()
    
    now = datetime.now(timezone.utc)
    payload = {
        settings.JWT_USER_ID_CLAIM: user_id,
        "email": email or f"{user_id}@example.com",
        "iat": int(now.timestamp()),
        "exp": int(now.timestamp()) + (expire_minutes * 60),
    }
    if organization_id is not None:
        payload[settings.JWT_ORGANIZATION_CLAIM] = organization_id
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE
    
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

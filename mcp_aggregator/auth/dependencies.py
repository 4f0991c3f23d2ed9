"""FastAPI dependencies for caller identity."""

from fastapi import Depends, Header
from typing import Annotated

from .exceptions import InvalidTokenError
from .models import UserClaims
from .utils import extract_user_claims


async def get_token_from_header(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract JWT token from Authorization header.
    
    Args:
        authorization: Authorization header value (format: 'Bearer <token>').
        
    Returns:
        JWT token string.
        
    Raises:
        InvalidTokenError: If header is missing or malformed.
    """
    if not authorization:
        raise InvalidTokenError("Missing Authorization header")
    
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("Invalid Authorization header format. Expected: 'Bearer <token>'")
    
    return parts[1]


async def get_current_user(token: Annotated[str, Depends(get_token_from_header)]) -> UserClaims:
    """Resolve the calling user from the bearer token.
    
    Args:
        token: JWT token extracted from Authorization header.
        
    Returns:
        UserClaims for the caller.
    """
    return extract_user_claims(token)

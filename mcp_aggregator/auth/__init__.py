"""Caller identity - bearer token to user claims."""

from .exceptions import (
    MCPGatewayError,
    AuthenticationError,
    InvalidTokenError,
    ExpiredTokenError,
)
from .models import UserClaims
from .dependencies import get_current_user


__all__ = [
    "MCPGatewayError",
    "AuthenticationError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "UserClaims",
    "get_current_user",
]

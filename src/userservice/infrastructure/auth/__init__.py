"""Authentication infrastructure components.

This module provides password hashing and JWT token services.
"""

from userservice.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    TokenExpiredError,
    TokenService,
)
from userservice.infrastructure.auth.password_hasher import PasswordHasher

__all__ = [
    "InvalidTokenError",
    "JWTError",
    "PasswordHasher",
    "TokenExpiredError",
    "TokenService",
]

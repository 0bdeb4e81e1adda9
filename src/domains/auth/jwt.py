# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides access token creation and validation using python-jose.
Tokens carry the principal id in ``sub`` and its role in ``role``. For
school admins the principal is the school document, so ``sub`` is the
school id.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token("665f...", role="parent")
    >>> claims = jwt_manager.decode_token(token.access_token)
"""

import logging
import secrets

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from src.core.config.settings import JWTSettings
from src.utils.datetime import minutes_from_now, utc_now

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user or school ID).
        role: Principal role.
        email: Principal email, when it has one.
        type: Token type.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    role: str
    email: str | None = None
    type: str = "access"
    exp: int
    iat: int
    jti: str


class AccessToken(BaseModel):
    """Signed access token and its lifetime.

    Attributes:
        access_token: JWT string.
        token_type: Always "Bearer".
        expires_in: Lifetime in seconds.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        subject: str,
        role: str,
        email: str | None = None,
        expires_minutes: int | None = None,
    ) -> AccessToken:
        """Create a signed access token.

        Args:
            subject: Principal identifier.
            role: Principal role.
            email: Principal email.
            expires_minutes: Lifetime override. Defaults to
                access_token_expire_minutes.

        Returns:
            AccessToken with the encoded JWT.
        """
        minutes = expires_minutes or self._settings.access_token_expire_minutes
        now = utc_now()
        exp = minutes_from_now(minutes)

        payload = {
            "sub": str(subject),
            "role": role,
            "email": email,
            "type": "access",
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        token = jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )
        return AccessToken(access_token=token, expires_in=minutes * 60)

    def create_child_token(self, subject: str, email: str | None = None) -> AccessToken:
        """Create a student token with the shorter child lifetime."""
        return self.create_access_token(
            subject,
            role="student",
            email=email,
            expires_minutes=self._settings.child_token_expire_minutes,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature is bad or sub/role is missing.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        if not payload.get("sub") or not payload.get("role"):
            raise InvalidTokenError("Invalid token payload")

        return TokenPayload(
            sub=payload["sub"],
            role=payload["role"],
            email=payload.get("email"),
            type=payload.get("type", "access"),
            exp=payload["exp"],
            iat=payload.get("iat", 0),
            jti=payload.get("jti", ""),
        )

    def verify_token(self, token: str) -> bool:
        """Check whether a token decodes cleanly."""
        try:
            self.decode_token(token)
            return True
        except JWTError:
            return False

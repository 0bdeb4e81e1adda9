# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Exports:
    PasswordHasher: Secure password hashing using bcrypt.
    JWTManager: JWT token creation and validation.
    AuthService: Sign-in and self-registration.
"""

from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import PasswordHasher, generate_temporary_password
from src.domains.auth.service import AuthService

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "AuthService",
    "generate_temporary_password",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing and temporary password generation.

Stored passwords are bcrypt hashes. Accounts created by an administrator
(schools, mentors) start with a random temporary password that is sent to
the account holder by email.

Example:
    >>> hasher = PasswordHasher()
    >>> hashed = hasher.hash("my_password")
    >>> hasher.verify("my_password", hashed)
    True
    >>> len(generate_temporary_password())
    12
"""

import logging
import secrets
import string

import bcrypt

logger = logging.getLogger(__name__)

TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"


class PasswordHasher:
    """Secure password hashing using bcrypt.

    Attributes:
        _rounds: Number of bcrypt rounds for hashing.
    """

    def __init__(self, rounds: int = 12) -> None:
        """Initialize the password hasher.

        Args:
            rounds: Number of bcrypt rounds. Default is 12 which takes
                   ~250ms on modern hardware.
        """
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Returns False for empty input or a malformed hash.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False


def generate_temporary_password(length: int = 12) -> str:
    """Generate a random password from letters, digits and !@#$%^&*.

    Args:
        length: Number of characters.

    Returns:
        The plain text password.
    """
    if length < 1:
        raise ValueError("Password length must be positive")
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))


# Default instance for convenience
_default_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password using the default hasher."""
    return _default_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password using the default hasher."""
    return _default_hasher.verify(password, password_hash)

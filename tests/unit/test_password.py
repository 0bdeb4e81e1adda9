# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for password hashing utilities."""

import pytest

from src.domains.auth.password import (
    TEMP_PASSWORD_ALPHABET,
    PasswordHasher,
    generate_temporary_password,
    hash_password,
    verify_password,
)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Create a fast hasher for tests."""
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    """Tests for PasswordHasher class."""

    def test_hash_is_bcrypt(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("secret1")

        assert hashed.startswith("$2b$")
        assert hashed != "secret1"

    def test_same_password_hashes_differently(self, hasher: PasswordHasher) -> None:
        assert hasher.hash("secret1") != hasher.hash("secret1")

    def test_verify_correct_password(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("secret1")

        assert hasher.verify("secret1", hashed) is True

    def test_verify_wrong_password(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("secret1")

        assert hasher.verify("secret2", hashed) is False

    def test_empty_password_rejected(self, hasher: PasswordHasher) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            hasher.hash("")

    @pytest.mark.parametrize("password,password_hash", [("", "x"), ("x", ""), ("x", "bogus")])
    def test_verify_bad_input_is_false(
        self, hasher: PasswordHasher, password: str, password_hash: str
    ) -> None:
        assert hasher.verify(password, password_hash) is False


class TestTemporaryPassword:
    """Tests for generate_temporary_password."""

    def test_default_length(self) -> None:
        assert len(generate_temporary_password()) == 12

    def test_custom_length(self) -> None:
        assert len(generate_temporary_password(20)) == 20

    def test_uses_allowed_alphabet(self) -> None:
        password = generate_temporary_password(200)

        assert set(password) <= set(TEMP_PASSWORD_ALPHABET)

    def test_invalid_length(self) -> None:
        with pytest.raises(ValueError):
            generate_temporary_password(0)


def test_module_helpers_round_trip() -> None:
    hashed = hash_password("secret1")

    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)

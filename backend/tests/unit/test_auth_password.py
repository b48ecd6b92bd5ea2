"""Unit tests for password hashing and strength rules"""

import pytest

from auth.password import (
    hash_password,
    needs_rehash,
    validate_password_strength,
    verify_password,
)


class TestHashPassword:

    def test_hash_is_argon2id(self):
        assert hash_password("Secure123").startswith("$argon2id$")

    def test_hashes_are_salted(self):
        assert hash_password("Secure123") != hash_password("Secure123")

    def test_empty_password_is_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")

    def test_fresh_hash_does_not_need_rehash(self):
        assert needs_rehash(hash_password("Secure123")) is False


class TestVerifyPassword:

    def test_correct_password(self):
        assert verify_password("Secure123", hash_password("Secure123")) is True

    def test_wrong_password(self):
        assert verify_password("Secure124", hash_password("Secure123")) is False

    def test_malformed_hash(self):
        assert verify_password("Secure123", "not-a-hash") is False

    def test_empty_inputs(self):
        assert verify_password("", "whatever") is False
        assert verify_password("Secure123", "") is False


class TestPasswordStrength:

    @pytest.mark.parametrize("password,message", [
        ("Ab1", "Password must be at least 8 characters long"),
        ("alllower123", "Password must contain upper- and lowercase letters"),
        ("ALLUPPER123", "Password must contain upper- and lowercase letters"),
        ("NoDigitsHere", "Password must contain at least one digit"),
    ])
    def test_weak_passwords(self, password, message):
        assert validate_password_strength(password) == (False, message)

    def test_strong_password(self):
        assert validate_password_strength("Secure123") == (True, "")

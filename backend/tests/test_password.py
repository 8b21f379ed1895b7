"""Tests for the bcrypt password service."""

import pytest

from agencycrm.auth.password import PasswordService


@pytest.fixture
def passwords():
    return PasswordService(rounds=4)


class TestHashAndVerify:
    def test_verify_accepts_original_plaintext(self, passwords):
        hashed = passwords.hash("Secret123!")
        assert passwords.verify("Secret123!", hashed) is True

    def test_verify_rejects_different_plaintext(self, passwords):
        hashed = passwords.hash("different")
        assert passwords.verify("Secret123!", hashed) is False

    def test_hash_is_salted(self, passwords):
        assert passwords.hash("same") != passwords.hash("same")

    def test_hash_encodes_bcrypt_parameters(self, passwords):
        hashed = passwords.hash("Secret123!")
        assert hashed.startswith("$2b$04$")
        assert "Secret123!" not in hashed

    def test_default_work_factor_is_ten(self):
        hashed = PasswordService().hash("Secret123!")
        assert hashed.startswith("$2b$10$")


class TestVerifyFailureModes:
    def test_empty_hash_is_not_verified(self, passwords):
        assert passwords.verify("anything", "") is False

    def test_missing_hash_is_not_verified(self, passwords):
        assert passwords.verify("anything", None) is False

    def test_garbage_hash_is_not_verified(self, passwords):
        """Library errors count as a failed check, never as success."""
        assert passwords.verify("anything", "not-a-bcrypt-hash") is False


class TestNeedsRehash:
    def test_lower_cost_hash_needs_rehash(self):
        weak = PasswordService(rounds=4).hash("Secret123!")
        assert PasswordService(rounds=10).needs_rehash(weak) is True

    def test_matching_cost_hash_is_current(self, passwords):
        assert passwords.needs_rehash(passwords.hash("Secret123!")) is False

"""Unit tests for the Argon2 password hasher."""

import pytest

from userservice.infrastructure.auth.password_hasher import PasswordHasher


class TestHash:
    """Tests for PasswordHasher.hash."""

    def test_hash_returns_argon2id_digest(self, hasher):
        hashed = hasher.hash("SecurePass123")

        assert hashed.startswith("$argon2id$")
        assert "SecurePass123" not in hashed

    def test_hash_is_salted(self, hasher):
        """Hashing the same password twice produces different digests."""
        assert hasher.hash("SecurePass123") != hasher.hash("SecurePass123")

    def test_hash_rejects_non_string(self, hasher):
        with pytest.raises(TypeError):
            hasher.hash(None)


class TestVerify:
    """Tests for PasswordHasher.verify."""

    def test_verify_correct_password(self, hasher):
        hashed = hasher.hash("SecurePass123")

        assert hasher.verify("SecurePass123", hashed) is True

    def test_verify_wrong_password(self, hasher):
        hashed = hasher.hash("SecurePass123")

        assert hasher.verify("securepass123", hashed) is False

    @pytest.mark.parametrize("digest", ["not-a-hash", "", None, "$argon2id$v=19$broken"])
    def test_verify_malformed_digest_returns_false(self, hasher, digest):
        """Malformed digests fail the same way a mismatch does."""
        assert hasher.verify("SecurePass123", digest) is False

    def test_verify_dummy_always_false(self, hasher):
        assert hasher.verify_dummy("anything") is False
        assert hasher.verify_dummy(None) is False

    def test_dummy_hash_is_reused(self, hasher):
        assert hasher.dummy_hash == hasher.dummy_hash


class TestWorkFactor:
    """Tests for cost clamping and rehash detection."""

    def test_costs_clamped_to_minimum(self):
        hasher = PasswordHasher(time_cost=1, memory_cost=1024, workers=1)
        try:
            assert hasher.time_cost == PasswordHasher.MIN_TIME_COST
            assert hasher.memory_cost == PasswordHasher.MIN_MEMORY_COST
        finally:
            hasher.shutdown()

    def test_costs_clamped_to_maximum(self):
        hasher = PasswordHasher(time_cost=50, memory_cost=10**9, workers=1)
        try:
            assert hasher.time_cost == PasswordHasher.MAX_TIME_COST
            assert hasher.memory_cost == PasswordHasher.MAX_MEMORY_COST
        finally:
            hasher.shutdown()

    def test_needs_rehash_for_weaker_parameters(self, hasher):
        stronger = PasswordHasher(time_cost=3, memory_cost=19456, parallelism=1, workers=1)
        try:
            assert stronger.needs_rehash(hasher.hash("SecurePass123")) is True
            assert hasher.needs_rehash(hasher.hash("SecurePass123")) is False
        finally:
            stronger.shutdown()

    def test_needs_rehash_for_garbage(self, hasher):
        assert hasher.needs_rehash("garbage") is True

    def test_from_settings(self, settings):
        hasher = PasswordHasher.from_settings(settings)
        try:
            assert hasher.time_cost == 2
            assert hasher.memory_cost == 19456
        finally:
            hasher.shutdown()


class TestAsyncVariants:
    """Tests for the thread-pool backed async methods."""

    @pytest.mark.asyncio
    async def test_hash_and_verify_async(self, hasher):
        hashed = await hasher.hash_async("SecurePass123")

        assert await hasher.verify_async("SecurePass123", hashed) is True
        assert await hasher.verify_async("WrongPass123", hashed) is False

    @pytest.mark.asyncio
    async def test_verify_dummy_async(self, hasher):
        assert await hasher.verify_dummy_async("SecurePass123") is False

"""Password hashing using Argon2.

Provides password hashing and verification with the Argon2id algorithm,
which won the Password Hashing Competition and is recommended by OWASP.
Work factors come from settings but are clamped to a vetted range, and the
async variants run on a bounded thread pool so a burst of hashing cannot
starve the event loop.
"""

import asyncio
import secrets
from concurrent.futures import ThreadPoolExecutor

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import VerificationError, VerifyMismatchError

from userservice.core.config import Settings


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


class PasswordHasher:
    """One-way password hashing with uniform verification failures.

    Example:
        >>> hasher = PasswordHasher(time_cost=2, memory_cost=19456)
        >>> digest = hasher.hash("SecureP@ss123")
        >>> digest.startswith("$argon2id$")
        True
        >>> hasher.verify("SecureP@ss123", digest)
        True
        >>> hasher.verify("wrong", digest)
        False
    """

    MIN_TIME_COST = 2
    MAX_TIME_COST = 10
    MIN_MEMORY_COST = 19456  # KiB
    MAX_MEMORY_COST = 1048576  # KiB

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
        workers: int = 4,
    ) -> None:
        """Initialize the hasher.

        Args:
            time_cost: Argon2 iterations, clamped to [MIN_TIME_COST, MAX_TIME_COST].
            memory_cost: Argon2 memory in KiB, clamped to [MIN_MEMORY_COST, MAX_MEMORY_COST].
            parallelism: Argon2 lanes.
            workers: Size of the thread pool used by the async variants.
        """
        self.time_cost = _clamp(time_cost, self.MIN_TIME_COST, self.MAX_TIME_COST)
        self.memory_cost = _clamp(memory_cost, self.MIN_MEMORY_COST, self.MAX_MEMORY_COST)
        self._hasher = Argon2Hasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=parallelism,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, workers),
            thread_name_prefix="password-hasher",
        )
        self._dummy_hash: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.password_hash_time_cost,
            memory_cost=settings.password_hash_memory_cost,
            workers=settings.hash_workers,
        )

    @property
    def dummy_hash(self) -> str:
        """Digest of a random secret, used to spend verification time on dead ends."""
        if self._dummy_hash is None:
            self._dummy_hash = self._hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    def hash(self, password: str) -> str:
        """Hash a password; every call uses a fresh random salt.

        Raises:
            TypeError: If ``password`` is not a string.
        """
        if not isinstance(password, str):
            raise TypeError("password must be a string")
        return self._hasher.hash(password)

    def verify(self, password: str, hashed: str | None) -> bool:
        """Verify a password against a digest.

        A mismatch, a malformed digest or a missing digest all return
        ``False``, and the malformed cases still pay for one full Argon2
        verification so they cannot be told apart by timing.
        """
        if not isinstance(password, str):
            password = ""
        if not isinstance(hashed, str) or not hashed:
            return self.verify_dummy(password)
        try:
            return self._hasher.verify(hashed, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, ValueError):
            # InvalidHashError subclasses ValueError
            return self.verify_dummy(password)

    def verify_dummy(self, password: str) -> bool:
        """Burn one verification against the dummy digest; always ``False``."""
        try:
            self._hasher.verify(self.dummy_hash, password if isinstance(password, str) else "")
        except VerificationError:
            pass
        return False

    def needs_rehash(self, hashed: str) -> bool:
        """Check whether a digest was produced with outdated parameters."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except ValueError:
            return True

    async def hash_async(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.hash, password)

    async def verify_async(self, password: str, hashed: str | None) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.verify, password, hashed)

    async def verify_dummy_async(self, password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.verify_dummy, password)

    def shutdown(self) -> None:
        """Stop the worker pool once in-flight hashing has finished."""
        self._executor.shutdown(wait=True)


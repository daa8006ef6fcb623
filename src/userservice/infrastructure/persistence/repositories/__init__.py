"""Persistence repositories for database operations."""

from userservice.infrastructure.persistence.repositories.account_repository import (
    AccountRepository,
)

__all__ = ["AccountRepository"]

"""Application services."""

from userservice.application.services.account_service import AccountService

__all__ = ["AccountService"]

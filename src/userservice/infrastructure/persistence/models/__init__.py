"""SQLAlchemy models for the user service tables.

All models inherit from the Base class defined in database.py.
"""

from userservice.infrastructure.persistence.models.account import AccountModel

__all__ = ["AccountModel"]

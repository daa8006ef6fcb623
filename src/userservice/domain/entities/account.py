"""Account entity, its enums and the partial-update struct.

The account is the only entity of the service. It is identified by a UUID,
addressed by a case-insensitive unique email, and carries its credentials,
profile, role and lifecycle flags.
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

JSONDocument = dict[str, Any]


class AccountRole(str, Enum):
    """Closed set of roles, ordered by privilege."""

    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def privilege(self) -> int:
        """Rank of the role; higher ranks hold more privilege."""
        return _ROLE_PRIVILEGE[self]

    def at_least(self, other: "AccountRole") -> bool:
        """Check whether this role holds at least the privilege of ``other``."""
        return self.privilege >= other.privilege

    def outranks(self, other: "AccountRole") -> bool:
        """Check whether this role holds strictly more privilege than ``other``."""
        return self.privilege > other.privilege


_ROLE_PRIVILEGE = {
    AccountRole.USER: 0,
    AccountRole.MANAGER: 1,
    AccountRole.ADMIN: 2,
    AccountRole.SUPER_ADMIN: 3,
}

ADMIN_ROLES = frozenset({AccountRole.ADMIN, AccountRole.SUPER_ADMIN})


class AccountStatus(str, Enum):
    """Free-form lifecycle label stored next to ``is_active``."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING_VERIFICATION = "pending_verification"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Account:
    """A persisted user identity with its credentials and lifecycle state.

    Attributes:
        id: Unique identifier (UUID string), generated at creation.
        email: Normalised (lower-cased) email address, unique.
        password_hash: Argon2id digest of the password (never plaintext).
        first_name: Given name.
        last_name: Family name.
        role: Authorization role.
        is_active: Gate on every authenticated operation.
        status: Lifecycle label.
        email_verified: Whether the email address was confirmed.
        phone: Optional phone number.
        date_of_birth: Optional date of birth (never in the future).
        profile_image_url: Optional avatar URL.
        login_attempts: Consecutive failed logins since the last success.
        locked_until: End of the current lockout window, if any.
        last_login: Timestamp of the last successful login.
        password_reset_token: Pending password reset secret.
        password_reset_expires: Expiry of the password reset secret.
        email_verification_token: Pending email confirmation secret.
        preferences: Opaque client preferences document.
        metadata: Opaque metadata document.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
        created_by: Account that created this one.
        updated_by: Account that last modified this one.
    """

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: AccountRole = AccountRole.USER
    is_active: bool = True
    status: AccountStatus = AccountStatus.ACTIVE
    email_verified: bool = False
    phone: str | None = None
    date_of_birth: date | None = None
    profile_image_url: str | None = None
    login_attempts: int = 0
    locked_until: datetime | None = None
    last_login: datetime | None = None
    password_reset_token: str | None = None
    password_reset_expires: datetime | None = None
    email_verification_token: str | None = None
    preferences: JSONDocument = field(default_factory=dict)
    metadata: JSONDocument = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    created_by: str | None = None
    updated_by: str | None = None

    def __post_init__(self) -> None:
        """Validate account data after initialization."""
        if not self.id:
            raise ValueError("Account ID is required")
        if not self.email:
            raise ValueError("Email is required")
        if not self.password_hash:
            raise ValueError("Password hash is required")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_admin(self) -> bool:
        """Check whether the account holds an administrative role."""
        return self.role in ADMIN_ROLES

    def is_locked(self, now: datetime | None = None) -> bool:
        """Check whether a lockout window is still running."""
        if self.locked_until is None:
            return False
        return self.locked_until > (now or utcnow())

    def sanitized(self) -> "SanitizedAccount":
        """Return the caller-safe view of this account."""
        return SanitizedAccount(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            role=self.role,
            is_active=self.is_active,
            status=self.status,
            email_verified=self.email_verified,
            phone=self.phone,
            date_of_birth=self.date_of_birth,
            profile_image_url=self.profile_image_url,
            login_attempts=self.login_attempts,
            locked_until=self.locked_until,
            last_login=self.last_login,
            preferences=dict(self.preferences),
            metadata=dict(self.metadata),
            created_at=self.created_at,
            updated_at=self.updated_at,
            created_by=self.created_by,
            updated_by=self.updated_by,
        )


@dataclass(frozen=True)
class SanitizedAccount:
    """Account representation safe to hand back to a caller.

    The password hash and the one-time reset/verification secrets are not
    part of this type, so they cannot leak through it.
    """

    id: str
    email: str
    first_name: str
    last_name: str
    role: AccountRole
    is_active: bool
    status: AccountStatus
    email_verified: bool
    phone: str | None
    date_of_birth: date | None
    profile_image_url: str | None
    login_attempts: int
    locked_until: datetime | None
    last_login: datetime | None
    preferences: JSONDocument
    metadata: JSONDocument
    created_at: datetime
    updated_at: datetime
    created_by: str | None
    updated_by: str | None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dictionary (enums as values, dates as ISO strings)."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (datetime, date)):
                value = value.isoformat()
            result[f.name] = value
        return result


class _Unset:
    """Marker for update slots the caller did not populate."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass
class AccountUpdate:
    """Partial update with one optional slot per mutable account attribute.

    Slots left as ``UNSET`` are not written. Setting a nullable slot to
    ``None`` clears the stored value.
    """

    email: str = UNSET
    password_hash: str = UNSET
    first_name: str = UNSET
    last_name: str = UNSET
    phone: str | None = UNSET
    date_of_birth: date | None = UNSET
    profile_image_url: str | None = UNSET
    role: AccountRole = UNSET
    is_active: bool = UNSET
    status: AccountStatus = UNSET
    email_verified: bool = UNSET
    login_attempts: int = UNSET
    locked_until: datetime | None = UNSET
    last_login: datetime | None = UNSET
    password_reset_token: str | None = UNSET
    password_reset_expires: datetime | None = UNSET
    email_verification_token: str | None = UNSET
    preferences: JSONDocument = UNSET
    metadata: JSONDocument = UNSET
    updated_by: str | None = UNSET

    def populated(self) -> dict[str, Any]:
        """Return the slots that carry a value, keyed by attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.populated()

"""Password strength policy.

The default policy accepts 8 to 128 characters containing at least one
uppercase letter, one lowercase letter and one digit. Symbols can be made
mandatory per validator instance.
"""

import re
from dataclasses import dataclass
from typing import Callable, NamedTuple


@dataclass(frozen=True)
class PasswordValidationError:
    """One violated rule.

    Attributes:
        field: Label of the input that was checked.
        message: Human-readable reason.
        code: Stable identifier of the rule, e.g. ``password_no_digit``.
    """

    field: str
    message: str
    code: str


class _Rule(NamedTuple):
    code: str
    message: str
    violated: Callable[[str], bool]


_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[^A-Za-z0-9\s]")


class PasswordValidator:
    """Checks a candidate password against an ordered list of rules."""

    def __init__(
        self,
        min_length: int = 8,
        max_length: int = 128,
        require_uppercase: bool = True,
        require_lowercase: bool = True,
        require_digit: bool = True,
        require_special: bool = False,
    ) -> None:
        self.min_length = min_length
        self.max_length = max_length

        rules = [
            _Rule(
                "password_too_short",
                f"Password must be at least {min_length} characters long",
                lambda p: len(p) < min_length,
            ),
            _Rule(
                "password_too_long",
                f"Password must be less than {max_length} characters",
                lambda p: len(p) > max_length,
            ),
        ]
        if require_uppercase:
            rules.append(
                _Rule(
                    "password_no_uppercase",
                    "Password must contain at least one uppercase letter",
                    lambda p: _UPPER.search(p) is None,
                )
            )
        if require_lowercase:
            rules.append(
                _Rule(
                    "password_no_lowercase",
                    "Password must contain at least one lowercase letter",
                    lambda p: _LOWER.search(p) is None,
                )
            )
        if require_digit:
            rules.append(
                _Rule(
                    "password_no_digit",
                    "Password must contain at least one digit",
                    lambda p: _DIGIT.search(p) is None,
                )
            )
        if require_special:
            rules.append(
                _Rule(
                    "password_no_special",
                    "Password must contain at least one special character",
                    lambda p: _SYMBOL.search(p) is None,
                )
            )
        self._rules: tuple[_Rule, ...] = tuple(rules)

    def validate(self, password: str, field: str = "password") -> list[PasswordValidationError]:
        """Return every rule the password breaks; empty when it is acceptable."""
        if not isinstance(password, str):
            return [PasswordValidationError(field, "Password must be a string", "password_not_string")]
        return [
            PasswordValidationError(field, rule.message, rule.code)
            for rule in self._rules
            if rule.violated(password)
        ]

    def is_valid(self, password: str) -> bool:
        return not self.validate(password)


default_password_validator = PasswordValidator()

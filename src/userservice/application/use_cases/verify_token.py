"""Verify token use case."""

from userservice.application.dto import VerifiedToken
from userservice.application.errors import store_operation
from userservice.core.logging import get_logger
from userservice.domain.entities import TokenClaims
from userservice.domain.exceptions import UnauthorizedError, ValidationError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountValidator
from userservice.infrastructure.auth import InvalidTokenError, TokenExpiredError, TokenService

logger = get_logger(__name__)


class VerifyTokenUseCase:
    """Checks a bearer token and that its account may still act."""

    def __init__(self, store: AccountStore, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    async def execute(self, token: str) -> TokenClaims:
        """Validate a token and re-check the account behind it.

        Raises:
            UnauthorizedError: If the token is missing, invalid or expired, or
                the account no longer exists or is deactivated.
        """
        try:
            claims = self.tokens.validate(token)
        except TokenExpiredError as e:
            raise UnauthorizedError("Token has expired") from e
        except InvalidTokenError as e:
            raise UnauthorizedError("Invalid token") from e

        try:
            AccountValidator.validate_account_id(claims.account_id)
        except ValidationError as e:
            logger.warning("Token rejected for malformed account id")
            raise UnauthorizedError("Invalid token") from e

        async with store_operation("load token account"):
            account = await self.store.find_by_id(claims.account_id)
        if account is None or not account.is_active:
            logger.info("Token rejected for missing or inactive account", account_id=claims.account_id)
            raise UnauthorizedError("Account not found or inactive")
        return claims

    async def execute_with_renewal(self, token: str) -> VerifiedToken:
        """Like ``execute``, attaching a fresh token when this one is close to expiry."""
        claims = await self.execute(token)
        renewed = self.tokens.renew_if_expiring(claims)
        if renewed is not None:
            logger.debug("Token renewed", account_id=claims.account_id)
        return VerifiedToken(claims=claims, renewed_token=renewed)

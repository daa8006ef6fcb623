"""Account use cases.

Each use case orchestrates validation, lifecycle rules, hashing/tokens and
the account store for one family of operations.
"""

from userservice.application.use_cases.delete_account import DeleteAccountUseCase
from userservice.application.use_cases.get_account import GetAccountUseCase
from userservice.application.use_cases.list_accounts import ListAccountsUseCase
from userservice.application.use_cases.login_account import LoginAccountUseCase
from userservice.application.use_cases.register_account import RegisterAccountUseCase
from userservice.application.use_cases.update_account import UpdateAccountUseCase
from userservice.application.use_cases.verify_token import VerifyTokenUseCase

__all__ = [
    "DeleteAccountUseCase",
    "GetAccountUseCase",
    "ListAccountsUseCase",
    "LoginAccountUseCase",
    "RegisterAccountUseCase",
    "UpdateAccountUseCase",
    "VerifyTokenUseCase",
]

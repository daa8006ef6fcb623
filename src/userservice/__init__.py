"""userservice - user account microservice core.

Registration, credential verification, bearer token issuance and
validation, and the account lifecycle rules that guard them.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

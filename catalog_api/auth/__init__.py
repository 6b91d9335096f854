"""Authentication.

Password hashing, bearer tokens, user storage and the credential service.
"""

from catalog_api.auth.passwords import PasswordHasher
from catalog_api.auth.repository import InMemoryUserStore, UserRepository, UserStore
from catalog_api.auth.service import AuthResult, CredentialService, Identity
from catalog_api.auth.tokens import TokenService

__all__ = [
    "AuthResult",
    "CredentialService",
    "Identity",
    "InMemoryUserStore",
    "PasswordHasher",
    "TokenService",
    "UserRepository",
    "UserStore",
]

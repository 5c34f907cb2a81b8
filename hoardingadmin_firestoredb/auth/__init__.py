"""
Admin authentication.

- Firebase Authentication REST client (accounts, passwords, ID tokens)
- Sign-in gate that checks the role stored in the user's profile
"""

from .identity import AUTH_ERROR_MESSAGES, IdentityToolkitClient, IdentityToolkitError
from .session import AdminAuth, AuthSession, PasswordChange

__all__ = [
    "AUTH_ERROR_MESSAGES",
    "AdminAuth",
    "AuthSession",
    "IdentityToolkitClient",
    "IdentityToolkitError",
    "PasswordChange",
]

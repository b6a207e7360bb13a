"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidSecretCodeError,
    InvalidIssuerNameError,
)
from .issuer_authentication import (
    login_issuer,
    is_issuer_token,
    get_issuer_name,
    ISSUER_ROLE,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidSecretCodeError',
    'InvalidIssuerNameError',
    # Services
    'login_issuer',
    'is_issuer_token',
    'get_issuer_name',
    'ISSUER_ROLE',
]

"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class InvalidSecretCodeError(AccountsServiceError):
    """Raised when the shared issuer secret code is wrong."""
    pass


class InvalidIssuerNameError(AccountsServiceError):
    """Raised when the issuer name is blank."""
    pass

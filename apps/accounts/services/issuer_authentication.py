"""Issuer login service.

Issuers share one secret code and identify themselves by a free-text name.
No user rows exist: the name travels inside a stateless access token.
"""

import logging
import secrets
import uuid

from django.conf import settings
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import InvalidIssuerNameError, InvalidSecretCodeError

logger = logging.getLogger(__name__)

ISSUER_ROLE = 'issuer'
ROLE_CLAIM = 'role'
NAME_CLAIM = 'username'


def login_issuer(*, code: str, issuer_name: str) -> str:
    """
    Check the shared secret and issue an access token for the issuer.

    Args:
        code: Shared secret code
        issuer_name: Free-text name of the person issuing receipts

    Returns:
        Encoded access token carrying the issuer name and role

    Raises:
        InvalidSecretCodeError: If the code is wrong
        InvalidIssuerNameError: If the issuer name is blank
    """
    issuer_name = (issuer_name or '').strip()
    if not issuer_name:
        raise InvalidIssuerNameError("Issuer name cannot be empty")

    expected = settings.ISSUER_SECRET_CODE
    if not secrets.compare_digest((code or '').encode(), expected.encode()):
        logger.warning("Rejected issuer login for %r: invalid secret code", issuer_name)
        raise InvalidSecretCodeError("Invalid secret code")

    token = AccessToken()
    token[api_settings.USER_ID_CLAIM] = uuid.uuid4().hex
    token[NAME_CLAIM] = issuer_name
    token[ROLE_CLAIM] = ISSUER_ROLE

    logger.info("Issuer %r logged in", issuer_name)
    return str(token)


def is_issuer_token(token) -> bool:
    """Return True if a validated token carries the issuer role."""
    return token is not None and token.get(ROLE_CLAIM) == ISSUER_ROLE


def get_issuer_name(request) -> str:
    """Return the issuer name of an authenticated request."""
    return request.auth.get(NAME_CLAIM, '') if request.auth is not None else ''

"""
Custom permission classes for the issuer gate.
"""
from rest_framework.permissions import BasePermission

from .services import is_issuer_token


class IsIssuer(BasePermission):
    """
    Permission for student council issuers.

    Allows access if the request carries a valid issuer token obtained
    from the shared-secret login.

    Usage:
        @permission_classes([IsIssuer])
        def grow(request):
            ...
    """

    message = 'Issuer login required.'

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and is_issuer_token(request.auth)
        )

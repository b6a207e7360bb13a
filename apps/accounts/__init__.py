"""
Accounts app.

Shared-secret login for student council issuers. There is no user table:
the issuer name travels inside a stateless access token.
"""

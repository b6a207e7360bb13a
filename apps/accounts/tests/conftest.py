import pytest
from rest_framework.test import APIClient


TEST_SECRET_CODE = 'test-secret-code'


@pytest.fixture(autouse=True)
def issuer_secret(settings):
    """Pin the shared secret code."""
    settings.ISSUER_SECRET_CODE = TEST_SECRET_CODE
    return TEST_SECRET_CODE


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()

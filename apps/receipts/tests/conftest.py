import pytest
from pypdf import PdfWriter
from rest_framework.test import APIClient
from apps.accounts.services import login_issuer
from apps.receipts.models import Receipt
from apps.receipts.services import initialize_pool, commit_issue


TEST_SECRET_CODE = 'test-secret-code'


@pytest.fixture(autouse=True)
def receipt_settings(settings, tmp_path):
    """Pin receipt settings and point rendering at a blank letter-size template."""
    template_path = tmp_path / 'receipt_template.pdf'
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    with open(template_path, 'wb') as f:
        writer.write(f)

    settings.ISSUER_SECRET_CODE = TEST_SECRET_CODE
    settings.RECEIPT_PREFIX = 'YB25'
    settings.RECEIPTS_DEFAULT_POOL_SIZE = 101
    settings.RECEIPT_TEMPLATE_PATH = str(template_path)
    settings.RECEIPTS_EMAIL_FROM = 'yearbook@example.com'
    settings.RECEIPTS_EMAIL_CC = []
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    return settings


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def issuer_token():
    """Return an access token for issuer Priya."""
    return login_issuer(code=TEST_SECRET_CODE, issuer_name='Priya')


@pytest.fixture
def issuer_client(api_client, issuer_token):
    """Return API client authenticated as an issuer."""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {issuer_token}')
    return api_client


@pytest.fixture
def pool(db):
    """Create the default pool of 101 unissued receipts."""
    return initialize_pool(size=101)


@pytest.fixture
def receipt_number(pool):
    """Return a lookup of receipts by number."""
    def lookup(number):
        return Receipt.objects.get(receipt_number=number)
    return lookup


@pytest.fixture
def issued_receipt(receipt_number):
    """Receipt #67 issued to Asha Rao."""
    return commit_issue(
        receipt_id=receipt_number(67).id,
        student_name='Asha Rao',
        section='XII-B',
        issuing_party='Priya',
    )

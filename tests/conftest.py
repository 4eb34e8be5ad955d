import pytest

from app import create_app
from detection.config import AppConfig


@pytest.fixture()
def signing_key():
    return b"s" * 32


@pytest.fixture()
def app_config(signing_key):
    """No processing delay so analysis requests return immediately."""
    return AppConfig(
        processing_delay_seconds=0,
        report_signing_key=signing_key,
        rate_limit_requests=100,
    )


@pytest.fixture()
def client(app_config):
    return create_app(app_config).test_client()

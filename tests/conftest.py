"""
Shared fixtures for the Cognito gateway tests.
"""

import pytest
from unittest.mock import MagicMock

from cognito_gateway.auth.provider import CognitoService
from cognito_gateway.auth.settings import CognitoSettings


@pytest.fixture
def settings():
    """Settings for an app client without a client secret."""
    return CognitoSettings(
        region="us-east-1",
        user_pool_id="us-east-1_AbCdEf123",
        client_id="1example23456789",
    )


@pytest.fixture
def secret_settings():
    """Settings for an app client with a client secret."""
    return CognitoSettings(
        region="us-east-1",
        user_pool_id="us-east-1_AbCdEf123",
        client_id="1example23456789",
        client_secret="secret123",
        mfa_label="MyApp",
        mfa_issuer="MyIssuer",
    )


@pytest.fixture
def boto_client():
    """Mock boto3 cognito-idp client."""
    return MagicMock()


@pytest.fixture
def service(settings, boto_client):
    """Service without a client secret, backed by the mock client."""
    return CognitoService(settings, client=boto_client)


@pytest.fixture
def secret_service(secret_settings, boto_client):
    """Service with a client secret, backed by the mock client."""
    return CognitoService(secret_settings, client=boto_client)

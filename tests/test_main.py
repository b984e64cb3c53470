"""
Tests for the application factory and Cognito integration.
"""

import json
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cognito_gateway.auth.integration import integrate_cognito
from cognito_gateway.auth.routes import CognitoRouter
from cognito_gateway.main import create_app

ENV = {
    "COGNITO_REGION": "us-east-1",
    "COGNITO_USER_POOL_ID": "us-east-1_AbCdEf123",
    "COGNITO_CLIENT_ID": "1example23456789",
}


@pytest.fixture(autouse=True)
def mock_cognito():
    """Keep pycognito from building a real boto3 client."""
    with patch("cognito_gateway.auth.provider.Cognito") as mock:
        yield mock


def route_paths(app):
    return {route.path for route in app.routes}


class TestCreateApp:
    """Test cases for create_app."""

    def test_health(self, settings):
        """Test the health endpoint reports the integration."""
        client = TestClient(create_app(settings=settings))

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["cognito"] is True

    def test_routes_mounted_under_api(self, settings):
        """Test the routes are mounted under /api by default."""
        app = create_app(settings=settings, env={})

        assert "/api/signup" in route_paths(app)
        assert "/api/confirm-forgot-password" in route_paths(app)
        assert isinstance(app.state.cognito_router, CognitoRouter)

    def test_disabled_integration(self):
        """Test COGNITO_ENABLED=false leaves the routes out."""
        app = create_app(env={**ENV, "COGNITO_ENABLED": "false"})
        client = TestClient(app)

        assert app.state.cognito_router is None
        assert client.get("/health").json()["cognito"] is False
        assert client.post("/api/signup", json={}).status_code == 404


class TestIntegrateCognito:
    """Test cases for integrate_cognito."""

    def test_from_env(self, mock_cognito):
        """Test settings come from the environment when not given."""
        app = FastAPI()

        cognito_router = integrate_cognito(app, env={**ENV, "COGNITO_DISABLED_ROUTES": "signup"})

        assert cognito_router is not None
        assert cognito_router.settings.client_id == "1example23456789"
        assert "/api/signup" not in route_paths(app)
        assert "/api/signin" in route_paths(app)
        mock_cognito.assert_called_once()

    def test_custom_prefix(self):
        """Test COGNITO_ROUTE_PREFIX changes where the routes are mounted."""
        app = FastAPI()

        integrate_cognito(app, env={**ENV, "COGNITO_ROUTE_PREFIX": "/auth"})

        assert "/auth/signin" in route_paths(app)
        assert "/api/signin" not in route_paths(app)

    def test_missing_configuration(self):
        """Test nothing is mounted without a client id and user pool id."""
        app = FastAPI()

        assert integrate_cognito(app, env={}) is None
        assert "/api/signin" not in route_paths(app)

    def test_from_config_file(self, tmp_path):
        """Test settings come from the file named by COGNITO_CONFIG."""
        config_file = tmp_path / "cognito.json"
        config_file.write_text(json.dumps({
            "region": "eu-west-1",
            "user_pool_id": "eu-west-1_pool",
            "client_id": "client",
            "mfa_label": "MyApp",
            "disabled_routes": ["verify-mfa"],
        }))
        app = FastAPI()

        cognito_router = integrate_cognito(app, env={"COGNITO_CONFIG": str(config_file)})

        assert cognito_router.settings.region == "eu-west-1"
        assert cognito_router.settings.mfa_label == "MyApp"
        assert "/api/verify-mfa" not in route_paths(app)
        assert "/api/verify-totp" in route_paths(app)

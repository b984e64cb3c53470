"""
Authentication module for the Cognito gateway.

This module wraps the AWS Cognito user pool API and exposes it as FastAPI routes.
"""

from .errors import CognitoGatewayError, InvalidArgumentError, RenderingError, UpstreamError
from .integration import integrate_cognito, load_cognito_settings
from .provider import CognitoService
from .routes import CognitoRouter
from .settings import CognitoSettings
from .utils import build_totp_uri, calculate_secret_hash, render_qr_data_uri

__all__ = [
    "CognitoService",
    "CognitoRouter",
    "CognitoSettings",
    "integrate_cognito",
    "load_cognito_settings",
    "calculate_secret_hash",
    "build_totp_uri",
    "render_qr_data_uri",
    "CognitoGatewayError",
    "InvalidArgumentError",
    "UpstreamError",
    "RenderingError",
]

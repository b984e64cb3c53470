"""
Integration module for the Cognito gateway.

This module provides the functions for adding the Cognito routes to a
FastAPI application, with settings taken from a JSON configuration file or
from environment variables.
"""
import json
import logging
import os
from typing import Mapping, Optional

from fastapi import FastAPI

from .routes import CognitoRouter
from .settings import CognitoSettings

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_PREFIX = "/api"


def integrate_cognito(
    app: FastAPI,
    settings: Optional[CognitoSettings] = None,
    prefix: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[CognitoRouter]:
    """
    Integrate the Cognito routes with a FastAPI application.

    Args:
        app: The FastAPI application
        settings: Cognito settings; loaded from COGNITO_CONFIG or the environment if not given
        prefix: Path prefix for the routes, defaults to COGNITO_ROUTE_PREFIX or "/api"
        env: Environment to read from, defaults to os.environ

    Returns:
        The CognitoRouter that was mounted, or None if the integration is disabled
        or not configured
    """
    env = os.environ if env is None else env

    if settings is None:
        enabled = env.get("COGNITO_ENABLED", "true").lower() in ("true", "1", "yes")
        if not enabled:
            logger.info("Cognito integration is disabled")
            return None

        config_path = env.get("COGNITO_CONFIG")
        if config_path:
            logger.info(f"Loading Cognito configuration from {config_path}")
            settings = load_cognito_settings(config_path)
        else:
            logger.info("Loading Cognito configuration from environment variables")
            settings = CognitoSettings.from_env(env)

    if not settings.client_id or not settings.user_pool_id:
        logger.warning("Missing required Cognito configuration (client id and user pool id)")
        return None

    if prefix is None:
        prefix = env.get("COGNITO_ROUTE_PREFIX", DEFAULT_ROUTE_PREFIX)

    cognito_router = CognitoRouter(settings)
    app.include_router(cognito_router.router, prefix=prefix)

    logger.info(
        f"Cognito routes mounted at {prefix or '/'} for user pool {settings.user_pool_id} "
        f"(client secret: {'yes' if settings.has_client_secret else 'no'}, "
        f"disabled routes: {sorted(settings.disabled_routes) or 'none'})"
    )
    return cognito_router


def load_cognito_settings(config_path: str) -> CognitoSettings:
    """
    Load Cognito settings from a JSON configuration file.

    The file holds the keys ``region``, ``user_pool_id``, ``client_id`` and
    optionally ``client_secret``, ``mfa_label``, ``mfa_issuer`` and
    ``disabled_routes`` (a list of route names or a ``{name: true}`` map).

    Args:
        config_path: Path to the configuration file

    Returns:
        Cognito settings
    """
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading Cognito config from {config_path}: {e}")
        raise ValueError(f"Failed to load Cognito configuration from {config_path}: {e}") from e

    settings = CognitoSettings(
        region=config.get("region", "us-east-1"),
        user_pool_id=config.get("user_pool_id", ""),
        client_id=config.get("client_id", ""),
        client_secret=config.get("client_secret", ""),
        mfa_label=config.get("mfa_label", ""),
        mfa_issuer=config.get("mfa_issuer", ""),
        disabled_routes=config.get("disabled_routes"),
    )
    logger.info(f"Loaded Cognito settings from {config_path}")
    return settings

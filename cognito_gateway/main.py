"""
Cognito gateway application.

Run with: python -m cognito_gateway.main
or: uvicorn cognito_gateway.main:create_app --factory --host 0.0.0.0 --port 8081
"""
import logging
import os
from typing import Mapping, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from . import __version__
from .auth.integration import integrate_cognito
from .auth.settings import CognitoSettings

logger = logging.getLogger(__name__)


def configure_logging(level: str = None) -> None:
    """Configure logging with process ID, filename, line number, and millisecond precision."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s.%(msecs)03d - PID:%(process)d - %(filename)s:%(lineno)d - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_app(settings: Optional[CognitoSettings] = None, env: Optional[Mapping[str, str]] = None) -> FastAPI:
    """
    Create the FastAPI application with the Cognito routes mounted.

    Args:
        settings: Cognito settings; read from the environment when not given
        env: Environment to read from, defaults to os.environ
    """
    app = FastAPI(
        title="Cognito Gateway",
        description="HTTP routes for AWS Cognito user pool sign up, sign in, password reset and MFA",
        version=__version__,
    )

    cognito_router = integrate_cognito(app, settings=settings, env=env)
    app.state.cognito_router = cognito_router
    logger.info(f"Cognito integration setup: {'ENABLED' if cognito_router else 'DISABLED'}")

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": __version__,
            "cognito": cognito_router is not None,
        }

    return app


def main() -> None:
    load_dotenv()
    configure_logging()
    port = int(os.environ.get("PORT", 8081))
    host = os.environ.get("HOST", "0.0.0.0")
    logger.info(f"Running on http://{host}:{port}")
    uvicorn.run("cognito_gateway.main:create_app", factory=True, host=host, port=port)


if __name__ == "__main__":
    main()

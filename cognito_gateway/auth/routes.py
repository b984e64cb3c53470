"""
Cognito routes for the gateway.

This module exposes the Cognito user pool flows (sign up, sign in,
confirmation, password reset, TOTP enrollment and MFA) as POST routes on a
FastAPI router that can be mounted into any application.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette import status

from .errors import CognitoGatewayError, InvalidArgumentError
from .provider import CognitoService
from .schemas import (
    AccessTokenRequest,
    ChangePasswordRequest,
    ConfirmForgotPasswordRequest,
    ConfirmSignUpRequest,
    CredentialsRequest,
    EmailRequest,
    RefreshTokenRequest,
    VerifyMfaRequest,
    VerifyTotpRequest,
)
from .settings import ROUTE_NAMES, CognitoSettings
from .utils import render_qr_data_uri

logger = logging.getLogger(__name__)


def _as_result(result: Any) -> Dict[str, Any]:
    return {"result": result}


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "Invalid request body - " + "; ".join(parts)


class CognitoRouter:
    """
    Builds the Cognito routes on a FastAPI router.

    Every route reads its fields from the JSON body, makes one Cognito call
    and answers with ``{"message": ..., "result": ...}`` (or the token fields
    for the token routes). Failures answer with ``{"message": ..., "error": ...}``.
    """

    def __init__(
        self,
        settings: CognitoSettings,
        router: Optional[APIRouter] = None,
        service: Optional[CognitoService] = None,
    ):
        """
        Args:
            settings: Cognito settings, including the routes to leave out
            router: Existing router to add the routes to; a new one is created if not given
            service: Cognito service to use; built from the settings if not given
        """
        self.settings = settings
        self.service = service or CognitoService(settings)
        self.router = router or APIRouter(tags=["cognito"])
        self._initialize_routes()

    def _initialize_routes(self) -> None:
        handlers = {
            "signup": self.sign_up,
            "signin": self.sign_in,
            "confirm-signup": self.confirm_sign_up,
            "refresh-token": self.refresh_token,
            "resend-otp": self.resend_confirmation_code,
            "associate-totp": self.associate_software_token,
            "verify-totp": self.verify_software_token,
            "enable-mfa": self.enable_mfa,
            "disable-mfa": self.disable_mfa,
            "verify-mfa": self.verify_mfa,
            "change-password": self.change_password,
            "forgot-password": self.forgot_password,
            "confirm-forgot-password": self.confirm_forgot_password,
        }
        for name in ROUTE_NAMES:
            if not self.settings.route_enabled(name):
                logger.info(f"Route /{name} is disabled")
                continue
            self.router.add_api_route(f"/{name}", handlers[name], methods=["POST"], name=name)

    @staticmethod
    async def _parse_body(request: Request, model: Type[BaseModel]) -> BaseModel:
        try:
            payload = await request.json()
        except ValueError as e:
            raise InvalidArgumentError("Request body must be valid JSON") from e
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise InvalidArgumentError(_validation_message(e)) from e

    async def _respond(
        self,
        request: Request,
        model: Type[BaseModel],
        call: Callable[[Any], Awaitable[Any]],
        success_message: str,
        failure_message: str,
        shape: Callable[[Any], Dict[str, Any]] = _as_result,
    ) -> JSONResponse:
        """Run one route: parse the body, call Cognito, shape the response."""
        try:
            body = await self._parse_body(request, model)
            result = await call(body)
            content = jsonable_encoder({"message": success_message, **shape(result)})
        except InvalidArgumentError as e:
            logger.warning(f"{failure_message}: {e}")
            return self._failure(status.HTTP_400_BAD_REQUEST, failure_message, e)
        except CognitoGatewayError as e:
            logger.error(f"{failure_message}: {e}")
            return self._failure(status.HTTP_500_INTERNAL_SERVER_ERROR, failure_message, e)
        except Exception as e:
            logger.error(f"{failure_message}: {e}", exc_info=True)
            return self._failure(status.HTTP_500_INTERNAL_SERVER_ERROR, failure_message, e)

        return JSONResponse(status_code=status.HTTP_200_OK, content=content)

    @staticmethod
    def _failure(status_code: int, message: str, error: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"message": message, "error": str(error)})

    async def sign_up(self, request: Request) -> JSONResponse:
        """Sign up a user with email and password."""
        return await self._respond(
            request,
            CredentialsRequest,
            lambda body: self.service.sign_up(body.email, body.password),
            "User signed up successfully. Please check your email for the OTP.",
            "Signup failed",
        )

    async def sign_in(self, request: Request) -> JSONResponse:
        """Sign in with email and password."""
        return await self._respond(
            request,
            CredentialsRequest,
            lambda body: self.service.sign_in(body.email, body.password),
            "User signed in successfully",
            "Signin failed",
        )

    async def confirm_sign_up(self, request: Request) -> JSONResponse:
        """Confirm the OTP received via email."""
        return await self._respond(
            request,
            ConfirmSignUpRequest,
            lambda body: self.service.confirm_sign_up(body.email, body.confirmationCode),
            "Email confirmed successfully",
            "Email confirmation failed",
        )

    async def resend_confirmation_code(self, request: Request) -> JSONResponse:
        return await self._respond(
            request,
            EmailRequest,
            lambda body: self.service.resend_confirmation_code(body.email),
            "OTP resent successfully",
            "Failed to resend OTP",
        )

    async def associate_software_token(self, request: Request) -> JSONResponse:
        """Associate a TOTP device and return its secret with a scannable QR code."""

        def shape(result: Dict[str, Any]) -> Dict[str, Any]:
            secret_code = (result or {}).get("SecretCode")
            otp_auth_url = self.service.totp_uri(secret_code)
            return {
                "result": {
                    "SecretCode": secret_code,
                    "qrcode": render_qr_data_uri(otp_auth_url),
                }
            }

        return await self._respond(
            request,
            AccessTokenRequest,
            lambda body: self.service.associate_software_token(body.accessToken),
            "TOTP associated successfully. Use this secret in your Authenticator app.",
            "Failed to associate TOTP",
            shape=shape,
        )

    async def verify_software_token(self, request: Request) -> JSONResponse:
        return await self._respond(
            request,
            VerifyTotpRequest,
            lambda body: self.service.verify_software_token(body.accessToken, body.otp),
            "TOTP verified successfully.",
            "Failed to verify TOTP",
        )

    async def enable_mfa(self, request: Request) -> JSONResponse:
        """Enable MFA after the TOTP device has been verified."""
        return await self._respond(
            request,
            AccessTokenRequest,
            lambda body: self.service.enable_mfa(body.accessToken),
            "MFA enabled successfully.",
            "Failed to enable MFA",
        )

    async def disable_mfa(self, request: Request) -> JSONResponse:
        return await self._respond(
            request,
            AccessTokenRequest,
            lambda body: self.service.disable_mfa(body.accessToken),
            "MFA disabled successfully.",
            "Failed to disable MFA",
        )

    async def verify_mfa(self, request: Request) -> JSONResponse:
        """Answer the MFA challenge from sign in and return the tokens."""

        def shape(result: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            result = result or {}
            return {
                "accessToken": result.get("AccessToken"),
                "idToken": result.get("IdToken"),
                "refreshToken": result.get("RefreshToken"),
            }

        return await self._respond(
            request,
            VerifyMfaRequest,
            lambda body: self.service.respond_to_mfa_challenge(body.mfaCode, body.session, body.email),
            "MFA verification successful",
            "MFA verification failed",
            shape=shape,
        )

    async def change_password(self, request: Request) -> JSONResponse:
        return await self._respond(
            request,
            ChangePasswordRequest,
            lambda body: self.service.change_password(body.accessToken, body.oldPassword, body.newPassword),
            "Password changed successfully.",
            "Failed to change password",
        )

    async def forgot_password(self, request: Request) -> JSONResponse:
        """Start the reset password process."""
        return await self._respond(
            request,
            EmailRequest,
            lambda body: self.service.forgot_password(body.email),
            "Password reset initiated. Please check your email for the OTP.",
            "Failed to initiate password reset",
        )

    async def confirm_forgot_password(self, request: Request) -> JSONResponse:
        """Set the new password using the code sent by the forgot password flow."""
        return await self._respond(
            request,
            ConfirmForgotPasswordRequest,
            lambda body: self.service.confirm_forgot_password(body.email, body.confirmationCode, body.newPassword),
            "Password reset successfully.",
            "Failed to reset password",
        )

    async def refresh_token(self, request: Request) -> JSONResponse:
        """Get a new access token (and id token) from a refresh token."""

        def shape(result: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            result = result or {}
            return {
                "accessToken": result.get("AccessToken"),
                "idToken": result.get("IdToken"),
            }

        return await self._respond(
            request,
            RefreshTokenRequest,
            lambda body: self.service.refresh_token(body.refreshToken, body.username or body.email),
            "Token refreshed successfully",
            "Failed to refresh token",
            shape=shape,
        )

"""
Cognito user pool service for the gateway.

Each method maps to exactly one Cognito Identity Provider API call. The
boto3 ``cognito-idp`` client is obtained through pycognito; its calls are
blocking, so they are run in Starlette's threadpool.
"""
import logging
from typing import Any, Dict, Optional

from pycognito import Cognito
from starlette.concurrency import run_in_threadpool

from .errors import UpstreamError
from .settings import CognitoSettings
from .utils import build_totp_uri, calculate_secret_hash

logger = logging.getLogger(__name__)


class CognitoService:
    """
    Thin async wrapper over the Cognito user pool API.

    When the app client is configured with a client secret, the SECRET_HASH
    is added to every call that identifies a user by name. Without a secret
    the field is left out entirely.
    """

    def __init__(self, settings: CognitoSettings, client: Any = None):
        """
        Initialize the service.

        Args:
            settings: Settings of the user pool app client
            client: Optional boto3 ``cognito-idp`` client. When not given, one
                is created through pycognito for the configured user pool.
        """
        self.settings = settings
        self.client_id = settings.client_id
        self.user_pool_id = settings.user_pool_id

        if client is None:
            cognito = Cognito(
                user_pool_id=settings.user_pool_id,
                client_id=settings.client_id,
                user_pool_region=settings.region,
                client_secret=settings.client_secret or None,
            )
            client = cognito.client
            logger.info(f"Initialized Cognito client for user pool {settings.user_pool_id} in {settings.region}")
        self.client = client

    @property
    def mfa_label(self) -> str:
        return self.settings.mfa_label

    @property
    def mfa_issuer(self) -> str:
        return self.settings.mfa_issuer

    def secret_hash(self, username: str) -> str:
        """Secret hash for the username, or "" when no client secret is configured."""
        return calculate_secret_hash(username, self.client_id, self.settings.client_secret)

    def totp_uri(self, secret_code: str) -> str:
        """Enrollment URI for a secret returned by AssociateSoftwareToken."""
        return build_totp_uri(secret_code, self.mfa_label, self.mfa_issuer)

    def _with_secret_hash(self, params: Dict[str, Any], username: str, key: str = "SecretHash") -> Dict[str, Any]:
        secret_hash = self.secret_hash(username)
        if secret_hash:
            params[key] = secret_hash
        return params

    async def _call(self, operation: str, method: str, **params) -> Dict[str, Any]:
        logger.debug(f"Calling Cognito {method} for {operation}")
        try:
            return await run_in_threadpool(getattr(self.client, method), **params)
        except Exception as e:
            logger.warning(f"Cognito {operation} failed: {e}")
            raise UpstreamError(operation, e) from e

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        """Sign up a user with email and password."""
        params = self._with_secret_hash({
            "ClientId": self.client_id,
            "Username": email,
            "Password": password,
            "UserAttributes": [{"Name": "email", "Value": email}],
        }, email)
        return await self._call("SignUp", "sign_up", **params)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign in with email and password.

        Returns the raw InitiateAuth result: either the tokens in
        ``AuthenticationResult`` or a ``ChallengeName`` and ``Session`` when
        the user has MFA enabled.
        """
        auth_parameters = self._with_secret_hash({
            "USERNAME": email,
            "PASSWORD": password,
        }, email, key="SECRET_HASH")
        return await self._call(
            "SignIn",
            "initiate_auth",
            AuthFlow="USER_PASSWORD_AUTH",
            ClientId=self.client_id,
            AuthParameters=auth_parameters,
        )

    async def confirm_sign_up(self, email: str, confirmation_code: str) -> Dict[str, Any]:
        """Confirm the user's sign up with the code sent by email."""
        params = self._with_secret_hash({
            "ClientId": self.client_id,
            "Username": email,
            "ConfirmationCode": confirmation_code,
        }, email)
        return await self._call("ConfirmSignUp", "confirm_sign_up", **params)

    async def resend_confirmation_code(self, email: str) -> Dict[str, Any]:
        params = self._with_secret_hash({
            "ClientId": self.client_id,
            "Username": email,
        }, email)
        return await self._call("ResendConfirmationCode", "resend_confirmation_code", **params)

    async def associate_software_token(self, access_token: str) -> Dict[str, Any]:
        """Start TOTP enrollment. The result holds the ``SecretCode`` for the authenticator app."""
        return await self._call(
            "AssociateSoftwareToken",
            "associate_software_token",
            AccessToken=access_token,
        )

    async def verify_software_token(self, access_token: str, otp: str) -> Dict[str, Any]:
        return await self._call(
            "VerifySoftwareToken",
            "verify_software_token",
            AccessToken=access_token,
            UserCode=otp,
        )

    async def enable_mfa(self, access_token: str) -> Dict[str, Any]:
        """Make TOTP the preferred MFA method once the software token is verified."""
        return await self._call(
            "EnableMFA",
            "set_user_mfa_preference",
            AccessToken=access_token,
            SoftwareTokenMfaSettings={"Enabled": True, "PreferredMfa": True},
        )

    async def disable_mfa(self, access_token: str) -> Dict[str, Any]:
        return await self._call(
            "DisableMFA",
            "set_user_mfa_preference",
            AccessToken=access_token,
            SoftwareTokenMfaSettings={"Enabled": False, "PreferredMfa": False},
        )

    async def respond_to_mfa_challenge(self, mfa_code: str, session: str, email: str) -> Optional[Dict[str, Any]]:
        """
        Answer the SOFTWARE_TOKEN_MFA challenge returned by sign in.

        Args:
            mfa_code: Code from the authenticator app
            session: Session returned with the challenge
            email: Username of the user signing in

        Returns:
            The ``AuthenticationResult`` holding the access, id and refresh tokens
        """
        challenge_responses = self._with_secret_hash({
            "USERNAME": email,
            "SOFTWARE_TOKEN_MFA_CODE": mfa_code,
        }, email, key="SECRET_HASH")
        result = await self._call(
            "MFA validation",
            "respond_to_auth_challenge",
            ChallengeName="SOFTWARE_TOKEN_MFA",
            ClientId=self.client_id,
            Session=session,
            ChallengeResponses=challenge_responses,
        )
        return result.get("AuthenticationResult")

    async def change_password(self, access_token: str, old_password: str, new_password: str) -> Dict[str, Any]:
        return await self._call(
            "ChangePassword",
            "change_password",
            AccessToken=access_token,
            PreviousPassword=old_password,
            ProposedPassword=new_password,
        )

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        """Start the password reset; Cognito sends a confirmation code."""
        params = self._with_secret_hash({
            "ClientId": self.client_id,
            "Username": email,
        }, email)
        return await self._call("ForgotPassword", "forgot_password", **params)

    async def confirm_forgot_password(self, email: str, confirmation_code: str, new_password: str) -> Dict[str, Any]:
        params = self._with_secret_hash({
            "ClientId": self.client_id,
            "Username": email,
            "ConfirmationCode": confirmation_code,
            "Password": new_password,
        }, email)
        return await self._call("ConfirmForgotPassword", "confirm_forgot_password", **params)

    async def refresh_token(self, refresh_token: str, username: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Get new access and id tokens from a refresh token.

        The SECRET_HASH can only be computed when the username is known, so it
        is attached only when ``username`` is given. For app clients with a
        secret, Cognito expects the user's ``sub`` here rather than the email.
        """
        auth_parameters = {"REFRESH_TOKEN": refresh_token}
        if username:
            self._with_secret_hash(auth_parameters, username, key="SECRET_HASH")
        result = await self._call(
            "RefreshToken",
            "initiate_auth",
            AuthFlow="REFRESH_TOKEN_AUTH",
            ClientId=self.client_id,
            AuthParameters=auth_parameters,
        )
        return result.get("AuthenticationResult")

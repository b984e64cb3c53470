"""
Request bodies accepted by the Cognito routes.

Field names follow the JSON the front end sends (camelCase).
"""
from typing import Optional

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    email: str
    password: str


class EmailRequest(BaseModel):
    email: str


class ConfirmSignUpRequest(BaseModel):
    email: str
    confirmationCode: str


class RefreshTokenRequest(BaseModel):
    refreshToken: str
    # Needed only for the SECRET_HASH when the app client has a secret
    username: Optional[str] = None
    email: Optional[str] = None


class AccessTokenRequest(BaseModel):
    accessToken: str


class VerifyTotpRequest(BaseModel):
    accessToken: str
    otp: str


class VerifyMfaRequest(BaseModel):
    mfaCode: str
    session: str
    email: str


class ChangePasswordRequest(BaseModel):
    accessToken: str
    oldPassword: str
    newPassword: str


class ConfirmForgotPasswordRequest(BaseModel):
    email: str
    confirmationCode: str
    newPassword: str

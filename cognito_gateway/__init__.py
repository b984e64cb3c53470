"""
Cognito Gateway Package

This package exposes AWS Cognito user pool flows (sign up, sign in,
confirmation, password reset, TOTP enrollment and MFA) as HTTP routes
that plug into a FastAPI application.
"""

__version__ = "0.1.0"

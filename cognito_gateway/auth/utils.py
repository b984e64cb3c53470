"""
Helpers shared by the Cognito service and routes.

Covers the SECRET_HASH that Cognito expects from app clients configured
with a client secret, and the otpauth:// URI + QR code used when a user
enrolls an authenticator app.
"""
import base64
import hashlib
import hmac
import io
import logging

import qrcode

from .errors import InvalidArgumentError, RenderingError

logger = logging.getLogger(__name__)

DEFAULT_MFA_LABEL = "NodeCognito"
DEFAULT_MFA_ISSUER = "AWS"


def calculate_secret_hash(username: str, client_id: str, client_secret: str) -> str:
    """Calculate the secret hash Cognito requires when the app client has a secret.

    The hash is computed as ``base64(HMAC-SHA256(client_secret, username + client_id))``.

    Args:
        username: The username (typically the email) the call acts on
        client_id: The Cognito app client ID
        client_secret: The Cognito app client secret, or "" when none is configured

    Returns:
        The base64 encoded hash, or "" when no client secret is configured,
        meaning the field must be left out of the request.

    Raises:
        InvalidArgumentError: If any argument is not a string
    """
    for name, value in (("username", username), ("client_id", client_id), ("client_secret", client_secret)):
        if not isinstance(value, str):
            raise InvalidArgumentError(f"{name} must be a string, got {type(value).__name__}")

    if not client_secret:
        return ""

    # Order matters: username first, then client id, no separator
    message = (username + client_id).encode("utf-8")
    digest = hmac.new(client_secret.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_totp_uri(issued_secret: str, label: str = None, issuer: str = None) -> str:
    """Build the otpauth:// URI an authenticator app scans to enroll a TOTP secret.

    Label and issuer are inserted as-is, without URL encoding, so the URI
    stays identical to the one existing authenticator entries were created from.

    Args:
        issued_secret: The SecretCode returned by AssociateSoftwareToken
        label: Account label shown in the authenticator app
        issuer: Issuer name shown in the authenticator app

    Returns:
        ``otpauth://totp/{label}?secret={issued_secret}&issuer={issuer}``

    Raises:
        InvalidArgumentError: If issued_secret is empty or not a string
    """
    if not isinstance(issued_secret, str) or not issued_secret:
        raise InvalidArgumentError("issued_secret must be a non-empty string")

    label = label or DEFAULT_MFA_LABEL
    issuer = issuer or DEFAULT_MFA_ISSUER
    return f"otpauth://totp/{label}?secret={issued_secret}&issuer={issuer}"


def render_qr_data_uri(uri: str) -> str:
    """Render a URI as a PNG QR code and return it as an embeddable data URI."""
    try:
        img = qrcode.make(uri)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except Exception as e:
        logger.error(f"Failed to render QR code: {e}", exc_info=True)
        raise RenderingError("Failed to render QR code", e) from e

    data = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{data}"

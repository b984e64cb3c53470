"""
Settings for the Cognito gateway.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Mapping, Union

from .utils import DEFAULT_MFA_ISSUER, DEFAULT_MFA_LABEL

# Route names, also used as the path of each route (e.g. "signup" -> "/signup")
ROUTE_NAMES = (
    "signup",
    "signin",
    "confirm-signup",
    "refresh-token",
    "resend-otp",
    "associate-totp",
    "verify-totp",
    "enable-mfa",
    "disable-mfa",
    "verify-mfa",
    "change-password",
    "forgot-password",
    "confirm-forgot-password",
)


def normalize_disabled_routes(routes: Union[None, str, Iterable[str], Mapping[str, bool]]) -> FrozenSet[str]:
    """Turn a comma separated string, a list or a {route: disabled} map into a frozenset."""
    if not routes:
        return frozenset()
    if isinstance(routes, str):
        routes = routes.split(",")
    elif isinstance(routes, Mapping):
        routes = [name for name, disabled in routes.items() if disabled]
    return frozenset(name.strip().lstrip("/") for name in routes if name and name.strip())


@dataclass(frozen=True)
class CognitoSettings:
    """Settings for one Cognito user pool app client. Immutable once built."""
    region: str
    user_pool_id: str
    client_id: str
    client_secret: str = ""
    mfa_label: str = DEFAULT_MFA_LABEL
    mfa_issuer: str = DEFAULT_MFA_ISSUER
    disabled_routes: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Fall back to defaults when empty values come in from env or config
        if not self.client_secret:
            object.__setattr__(self, "client_secret", "")
        if not self.mfa_label:
            object.__setattr__(self, "mfa_label", DEFAULT_MFA_LABEL)
        if not self.mfa_issuer:
            object.__setattr__(self, "mfa_issuer", DEFAULT_MFA_ISSUER)
        object.__setattr__(self, "disabled_routes", normalize_disabled_routes(self.disabled_routes))

    @property
    def has_client_secret(self) -> bool:
        return bool(self.client_secret)

    def route_enabled(self, name: str) -> bool:
        """Check whether the route with the given name should be registered."""
        return name not in self.disabled_routes

    @classmethod
    def from_env(cls, env_dict: Mapping[str, str]) -> "CognitoSettings":
        """Load settings from environment variables."""
        return cls(
            region=env_dict.get("COGNITO_REGION", "us-east-1"),
            user_pool_id=env_dict.get("COGNITO_USER_POOL_ID", ""),
            client_id=env_dict.get("COGNITO_CLIENT_ID", ""),
            client_secret=env_dict.get("COGNITO_CLIENT_SECRET", ""),
            mfa_label=env_dict.get("COGNITO_MFA_LABEL", ""),
            mfa_issuer=env_dict.get("COGNITO_MFA_ISSUER", ""),
            disabled_routes=env_dict.get("COGNITO_DISABLED_ROUTES", ""),
        )
